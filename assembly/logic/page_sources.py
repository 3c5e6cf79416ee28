"""
In-memory PageSource used for every normalized document.
"""
from __future__ import annotations

from typing import Optional

from core.contracts.documents import PageSource


class BytesPageSource(PageSource):
    """Holds the PDF container bytes until released."""

    def __init__(self, data: bytes) -> None:
        self._data: Optional[bytes] = data

    def load(self) -> bytes:
        if self._data is None:
            raise OSError("document content has been released")
        return self._data

    def release(self) -> None:
        self._data = None

    @property
    def released(self) -> bool:
        return self._data is None
