"""
PageConfigStore – per-document page selection and rotation.

Defaults are resolved at read time and never persisted by ``get``: an index
without an entry behaves as ``PageConfig(selected=True, rotation=0)``. Writes
(``set``, ``rotate``, ``toggle``, ``select_all``, ``deselect_all``) materialize
entries one index at a time through ``set``.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterator, Mapping, Optional

from ..models.page_config import DEFAULT_PAGE_CONFIG, PageConfig, normalize_rotation


class PageConfigStore:
    def __init__(self, page_count: int, entries: Optional[Mapping[int, PageConfig]] = None) -> None:
        if page_count < 0:
            raise ValueError("page_count must be >= 0")
        self._page_count = int(page_count)
        self._entries: Dict[int, PageConfig] = {}
        for index, cfg in (entries or {}).items():
            self.set(index, selected=cfg.selected, rotation=cfg.rotation)

    @property
    def page_count(self) -> int:
        return self._page_count

    def _check(self, index: int) -> int:
        if not 0 <= index < self._page_count:
            raise IndexError(f"page index {index} outside [0, {self._page_count})")
        return index

    # ---- read ------------------------------------------------------------ #
    def get(self, index: int) -> PageConfig:
        return self._entries.get(self._check(index), DEFAULT_PAGE_CONFIG)

    def has_entry(self, index: int) -> bool:
        return index in self._entries

    def is_selected(self, index: int) -> bool:
        return self.get(index).selected

    def selected_count(self) -> int:
        return sum(1 for i in range(self._page_count) if self.get(i).selected)

    def __iter__(self) -> Iterator[PageConfig]:
        return (self.get(i) for i in range(self._page_count))

    # ---- write ----------------------------------------------------------- #
    def set(self, index: int, *, selected: Optional[bool] = None,
            rotation: Optional[int] = None) -> PageConfig:
        """Merge the given fields into the entry for *index*, creating it if absent."""
        current = self.get(index)
        changes = {}
        if selected is not None:
            changes["selected"] = bool(selected)
        if rotation is not None:
            changes["rotation"] = normalize_rotation(rotation)
        updated = replace(current, **changes)
        self._entries[index] = updated
        return updated

    def rotate(self, index: int) -> PageConfig:
        return self.set(index, rotation=self.get(index).rotation + 90)

    def toggle(self, index: int) -> PageConfig:
        return self.set(index, selected=not self.get(index).selected)

    def select_all(self) -> None:
        for i in range(self._page_count):
            self.set(i, selected=True)

    def deselect_all(self) -> None:
        for i in range(self._page_count):
            self.set(i, selected=False)

    # ---- serialization --------------------------------------------------- #
    def to_dict(self) -> dict:
        """Explicit entries only, keyed by page index as string."""
        return {str(i): cfg.to_dict() for i, cfg in sorted(self._entries.items())}

    @classmethod
    def from_dict(cls, page_count: int, data: Mapping[str, Mapping]) -> "PageConfigStore":
        store = cls(page_count)
        for key, value in data.items():
            store.set(int(key),
                      selected=value.get("selected"),
                      rotation=value.get("rotation"))
        return store
