from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import mimetypes


@dataclass(frozen=True)
class SourceFile:
    """
    Raw ingested file: bytes, declared MIME type and original display name.
    Immutable once ingested.
    """
    data: bytes
    declared_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path, declared_type: str | None = None) -> "SourceFile":
        p = Path(path)
        guessed, _ = mimetypes.guess_type(p.name)
        return cls(data=p.read_bytes(), declared_type=declared_type or guessed or "", name=p.name)
