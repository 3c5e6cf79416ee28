"""
Compress mode: re-encode one PDF with compressed content streams and shared
identical objects. Page count, order and rotation are unchanged.
"""
from __future__ import annotations

from pypdf import PdfWriter

from core.exceptions.errors import STAGE_COMPRESS, SourceUnreadable
from core.logging.logic.logger import logger

from ..models.normalized_document import NormalizedDocument
from .pdf_container import open_pdf, write_pdf


def compress_document(doc: NormalizedDocument) -> bytes:
    data = doc.load_container(stage=STAGE_COMPRESS)
    reader = open_pdf(data, name=doc.name, error=SourceUnreadable, stage=STAGE_COMPRESS)
    writer = PdfWriter(clone_from=reader)
    out = write_pdf(writer, compress=True)
    logger.log("Compress", "Done", reference_id=doc.name, message=f"{len(data)} -> {len(out)} bytes")
    return out
