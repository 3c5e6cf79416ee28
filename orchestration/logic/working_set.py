"""
WorkingSet – the user-ordered list of normalized documents awaiting a merge.

Each document owns one PageConfigStore for as long as it stays in the set.
A batch of new documents is appended in a single assignment (``commit``), so
readers never observe half a batch.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from assembly.logic.naming import DEFAULT_MERGE_NAME, resolve_merge_filename
from assembly.logic.page_config_store import PageConfigStore
from assembly.models.merge_spec import MergeEntry, MergeSpec
from assembly.models.normalized_document import NormalizedDocument


@dataclass(frozen=True)
class WorkingItem:
    document: NormalizedDocument
    config: PageConfigStore


class WorkingSet:
    def __init__(self) -> None:
        self._items: Tuple[WorkingItem, ...] = ()
        self._name_source_id: Optional[str] = None
        self._custom_name: str = ""

    # ---- read ------------------------------------------------------------ #
    @property
    def documents(self) -> List[NormalizedDocument]:
        return [item.document for item in self._items]

    @property
    def items(self) -> Tuple[WorkingItem, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def index_of(self, doc_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.document.id == doc_id:
                return i
        raise KeyError(f"unknown document id {doc_id!r}")

    def config_for(self, doc_id: str) -> PageConfigStore:
        return self._items[self.index_of(doc_id)].config

    # ---- mutate ---------------------------------------------------------- #
    def commit(self, batch: Iterable[NormalizedDocument]) -> None:
        """Append a whole normalization batch, keeping its order."""
        new = tuple(WorkingItem(document=d, config=PageConfigStore(d.page_count)) for d in batch)
        self._items = self._items + new

    def move(self, from_index: int, to_index: int) -> None:
        """Remove the item at *from_index* and re-insert it at *to_index*."""
        items = list(self._items)
        item = items.pop(from_index)
        items.insert(to_index, item)
        self._items = tuple(items)

    def remove(self, doc_id: str) -> NormalizedDocument:
        i = self.index_of(doc_id)
        item = self._items[i]
        self._items = self._items[:i] + self._items[i + 1:]
        if self._name_source_id == doc_id:
            self._name_source_id = None
        item.document.release()
        return item.document

    def clear(self) -> None:
        """Release every document and reset the output name."""
        for item in self._items:
            item.document.release()
        self._items = ()
        self._name_source_id = None
        self._custom_name = ""

    # ---- output name ----------------------------------------------------- #
    @property
    def name_source(self) -> Optional[NormalizedDocument]:
        if self._name_source_id is None:
            return None
        return self._items[self.index_of(self._name_source_id)].document

    @property
    def custom_name(self) -> str:
        return self._custom_name

    def set_name_source(self, doc_id: Optional[str]) -> None:
        """Flag one document as the name source; flagging it again unflags it."""
        if doc_id is None or doc_id == self._name_source_id:
            self._name_source_id = None
            return
        self.index_of(doc_id)
        self._name_source_id = doc_id
        self._custom_name = ""

    def set_custom_name(self, text: str) -> None:
        self._custom_name = text or ""
        self._name_source_id = None

    def resolve_filename(self, default: str = DEFAULT_MERGE_NAME) -> str:
        source = self.name_source
        return resolve_merge_filename(
            override=self._custom_name,
            name_source=source.name if source else None,
            default=default,
        )

    def merge_spec(self, *, compress: bool = True, default_name: str = DEFAULT_MERGE_NAME) -> MergeSpec:
        return MergeSpec(
            entries=tuple(MergeEntry(document=item.document, config=item.config) for item in self._items),
            filename=self.resolve_filename(default_name),
            compress=compress,
        )
