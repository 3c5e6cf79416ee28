from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputRecord:
    """What a finished operation wrote and where."""
    path: Path
    filename: str
    media_type: str
    size: int
