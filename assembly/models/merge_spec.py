from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Tuple

from .normalized_document import NormalizedDocument

if TYPE_CHECKING:
    from ..logic.page_config_store import PageConfigStore


@dataclass(frozen=True)
class MergeEntry:
    document: NormalizedDocument
    config: "PageConfigStore"


@dataclass(frozen=True)
class MergeSpec:
    """
    Ordered documents with their page configuration, the output file name and
    whether the encoder may use the denser (compressed) representation.
    """
    entries: Tuple[MergeEntry, ...]
    filename: str = "merged-document.pdf"
    compress: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))


@dataclass(frozen=True)
class MergeResult:
    data: bytes
    filename: str
    page_count: int
    media_type: str = field(default="application/pdf")
