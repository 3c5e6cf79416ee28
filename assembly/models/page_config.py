from __future__ import annotations
from dataclasses import dataclass


def normalize_rotation(angle: int) -> int:
    """
    Normalize *angle* to one of 0/90/180/270. Negative values are accepted
    (-90 -> 270); anything that is not a right angle raises ValueError.
    """
    angle = int(angle)
    if angle % 90 != 0:
        raise ValueError(f"rotation must be a multiple of 90 degrees, got {angle}")
    return angle % 360


@dataclass(frozen=True)
class PageConfig:
    """Selection and extra rotation of one page for merging."""
    selected: bool = True
    rotation: int = 0

    def to_dict(self) -> dict:
        return {"selected": self.selected, "rotation": self.rotation}


DEFAULT_PAGE_CONFIG = PageConfig()
