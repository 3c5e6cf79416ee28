# assembly/models/source_format.py
from __future__ import annotations
from enum import Enum


class SourceFormat(str, Enum):
    """Recognized ingestion formats."""
    PDF = "pdf"
    JPEG = "jpeg"
    PNG = "png"
    WORD = "word"
    EXCEL = "excel"

    @property
    def is_image(self) -> bool:
        return self in (SourceFormat.JPEG, SourceFormat.PNG)

    @property
    def is_office(self) -> bool:
        return self in (SourceFormat.WORD, SourceFormat.EXCEL)
