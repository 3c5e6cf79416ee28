"""
Format detection by declared MIME type and filename suffix (both checked).
"""
from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from ..models.source_format import SourceFormat

_MIME_TYPES = {
    "application/pdf": SourceFormat.PDF,
    "image/jpeg": SourceFormat.JPEG,
    "image/jpg": SourceFormat.JPEG,
    "image/png": SourceFormat.PNG,
    "application/msword": SourceFormat.WORD,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": SourceFormat.WORD,
    "application/vnd.ms-excel": SourceFormat.EXCEL,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": SourceFormat.EXCEL,
}

_SUFFIXES = {
    ".pdf": SourceFormat.PDF,
    ".jpg": SourceFormat.JPEG,
    ".jpeg": SourceFormat.JPEG,
    ".png": SourceFormat.PNG,
    ".doc": SourceFormat.WORD,
    ".docx": SourceFormat.WORD,
    ".xls": SourceFormat.EXCEL,
    ".xlsx": SourceFormat.EXCEL,
}

# OLE2 compound file header (legacy .doc / .xls)
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_MAGIC = b"PK\x03\x04"


def detect_format(declared_type: Optional[str], name: Optional[str]) -> Optional[SourceFormat]:
    """
    Return the SourceFormat for a declared MIME type and/or file name, or None
    if neither is on the allow-list. The MIME type wins when both are known.
    """
    mime = (declared_type or "").split(";", 1)[0].strip().lower()
    if mime in _MIME_TYPES:
        return _MIME_TYPES[mime]
    if "wordprocessing" in mime or "msword" in mime:
        return SourceFormat.WORD
    if "excel" in mime or "spreadsheet" in mime:
        return SourceFormat.EXCEL

    suffix = PurePath(name or "").suffix.lower()
    return _SUFFIXES.get(suffix)


def is_ooxml(data: bytes) -> bool:
    return data[:4] == ZIP_MAGIC


def is_ole(data: bytes) -> bool:
    return data[:8] == OLE_MAGIC
