from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from .signature_enums import Corner, PageSelection

DEFAULT_SCALE = 0.2
DEFAULT_MARGIN = 20.0


@dataclass(frozen=True)
class PlacementSpec:
    """
    Where the signature goes, committed once per stamping run.

    Interactive mode: ``position`` holds the fractions (fx, fy) of the preview
    width/height where the asset's top-left corner was dropped (y-down).
    Fixed-corner mode: ``position`` is None and ``corner`` + ``margin`` (points)
    are applied to each target page's own size.

    ``scale`` is page points per asset pixel, identical for every target page.
    """
    page_selection: PageSelection = PageSelection.ALL
    scale: float = DEFAULT_SCALE
    position: Optional[Tuple[float, float]] = None
    corner: Corner = Corner.BOTTOM_RIGHT
    margin: float = DEFAULT_MARGIN

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError("scale must be > 0")
        if self.position is not None:
            fx, fy = self.position
            if not (0.0 <= fx <= 1.0 and 0.0 <= fy <= 1.0):
                raise ValueError(f"position fractions must lie in [0, 1], got {self.position}")

    @property
    def is_interactive(self) -> bool:
        return self.position is not None

    @classmethod
    def interactive(cls, fx: float, fy: float, *, scale: float = DEFAULT_SCALE,
                    pages: PageSelection = PageSelection.ALL) -> "PlacementSpec":
        return cls(page_selection=pages, scale=scale, position=(float(fx), float(fy)))

    @classmethod
    def fixed_corner(cls, corner: Corner, *, margin: float = DEFAULT_MARGIN,
                     scale: float = DEFAULT_SCALE,
                     pages: PageSelection = PageSelection.ALL) -> "PlacementSpec":
        return cls(page_selection=pages, scale=scale, corner=corner, margin=float(margin))


@dataclass(frozen=True)
class PlacementRect:
    """
    Draw rectangle on one page (points; 1 pt = 1/72 inch), origin bottom-left, y-up.
    """
    page_index: int
    x: float
    y: float
    width: float
    height: float
