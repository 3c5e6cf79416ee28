"""
PDF container helpers:
- open a PDF from bytes (error translation to the workbench taxonomy)
- introspect page sizes and /Rotate without re-encoding
- serialize a PdfWriter (optionally compressed)
- build a single full-bleed page from a raster image

Uses pypdf (read/write/copy) and reportlab (page generation).
"""

from __future__ import annotations

from io import BytesIO
from typing import List, Optional, Type

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.exceptions.errors import CorruptSource, UnsupportedFormat, WorkbenchError
from ..models.normalized_document import Page
from ..models.page_config import normalize_rotation

PDF_MEDIA_TYPE = "application/pdf"


def open_pdf(data: bytes, *, name: str = "document",
             error: Type[WorkbenchError] = CorruptSource,
             stage: Optional[str] = None) -> PdfReader:
    """
    Parse *data* as PDF. Structural failures raise *error* (CorruptSource by
    default); encrypted documents are rejected with UnsupportedFormat.
    """
    try:
        reader = PdfReader(BytesIO(data))
        encrypted = reader.is_encrypted
        if not encrypted:
            len(reader.pages)  # forces page tree resolution
    except (PdfReadError, ValueError, KeyError, TypeError, AttributeError, IndexError) as exc:
        raise error(f"'{name}' is not a readable PDF ({exc})", stage=stage) from exc
    if encrypted:
        raise UnsupportedFormat(f"'{name}' is encrypted; protected documents are not supported", stage=stage)
    return reader


def inspect_pages(reader: PdfReader) -> List[Page]:
    """Page sizes (media box, points) and normalized /Rotate of every page."""
    pages: List[Page] = []
    for i, page in enumerate(reader.pages):
        box = page.mediabox
        # malformed /Rotate values are floored to a right angle
        rotation = (int(page.rotation or 0) // 90) * 90
        pages.append(Page(
            index=i,
            width=float(box.width),
            height=float(box.height),
            rotation=normalize_rotation(rotation),
            content_index=i,
        ))
    return pages


def write_pdf(writer: PdfWriter, *, compress: bool = False) -> bytes:
    """
    Serialize *writer*. With *compress*, content streams are deflated and
    identical objects are shared.
    """
    if compress:
        for page in writer.pages:
            page.compress_content_streams()
        writer.compress_identical_objects(remove_identicals=True, remove_unreferenced=True)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def image_page_pdf(image_bytes: bytes, width: float, height: float) -> bytes:
    """One page of *width* x *height* points with the image drawn full-bleed at (0, 0)."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=(width, height))
    c.drawImage(ImageReader(BytesIO(image_bytes)), 0, 0, width=width, height=height, mask="auto")
    c.showPage()
    c.save()
    return buf.getvalue()
