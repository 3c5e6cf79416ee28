from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Tuple

from core.contracts.documents import PageSource
from core.exceptions.errors import SourceUnreadable
from .source_format import SourceFormat


@dataclass(frozen=True)
class Page:
    """
    One page of a normalized document.

    Sizes are PDF points (1 pt = 1/72 inch), taken from the page's media box.
    ``rotation`` is the page's own /Rotate value, normalized to 0/90/180/270.
    ``content_index`` addresses the page inside the document's PDF container.
    """
    index: int
    width: float
    height: float
    rotation: int = 0
    content_index: int = 0

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)


@dataclass
class NormalizedDocument:
    """Page-addressable representation produced from any supported source."""
    name: str
    origin: SourceFormat
    pages: Tuple[Page, ...]
    source: PageSource
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        self.pages = tuple(self.pages)
        for expected, page in enumerate(self.pages):
            if page.index != expected:
                raise ValueError(f"page indices must be contiguous from 0; got {page.index} at {expected}")

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def load_container(self, *, stage: str | None = None) -> bytes:
        """Re-read the PDF container bytes; SourceUnreadable if they are gone."""
        try:
            return self.source.load()
        except OSError as exc:
            raise SourceUnreadable(f"'{self.name}' can no longer be read ({exc})", stage=stage) from exc

    def release(self) -> None:
        self.source.release()
