"""
Output file name rules for merged and compressed documents.
"""
from __future__ import annotations

from typing import Optional

PDF_EXT = ".pdf"
DEFAULT_MERGE_NAME = "merged-document.pdf"


def ensure_pdf_extension(name: str) -> str:
    """Append ".pdf" unless *name* already ends with it (case-insensitive). Idempotent."""
    return name if name.lower().endswith(PDF_EXT) else name + PDF_EXT


def strip_extension(name: str) -> str:
    """Drop the last ".ext" of *name* (leading-dot names are kept)."""
    dot = name.rfind(".")
    return name[:dot] if dot > 0 else name


def swap_to_pdf(name: str) -> str:
    """report.docx -> report.pdf; a PDF name is kept as is."""
    if name.lower().endswith(PDF_EXT):
        return name
    return strip_extension(name) + PDF_EXT


def resolve_merge_filename(
    override: Optional[str] = None,
    name_source: Optional[str] = None,
    default: str = DEFAULT_MERGE_NAME,
) -> str:
    """
    Priority: explicit override text, then the flagged source document's name,
    then *default*. The result always carries the PDF extension.
    """
    text = (override or "").strip()
    if text:
        return ensure_pdf_extension(text)
    if name_source:
        return swap_to_pdf(name_source)
    return ensure_pdf_extension(default)


def compressed_name(name: str, suffix: str = "-comprimido") -> str:
    """scan.PDF -> scan-comprimido.pdf"""
    base = name[: -len(PDF_EXT)] if name.lower().endswith(PDF_EXT) else name
    return f"{base}{suffix}{PDF_EXT}"
