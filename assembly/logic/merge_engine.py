"""
===============================================================================
MergeEngine – concatenate selected, rotated pages of many documents into one PDF
-------------------------------------------------------------------------------
Order
    Documents in the caller-supplied order; inside a document pages in
    ascending index order. Deselected pages are skipped, nothing else is.
Rotation
    Output rotation = (page's own rotation + configured rotation) mod 360.
Failure
    SourceUnreadable if a document cannot be re-read; the merge stops at once
    and no partial artifact is produced.
===============================================================================
"""
from __future__ import annotations

from pypdf import PdfWriter

from core.exceptions.errors import STAGE_MERGE, SourceUnreadable
from core.logging.logic.logger import logger

from ..models.merge_spec import MergeResult, MergeSpec
from .pdf_container import open_pdf, write_pdf

_FEATURE = "Merge"


class MergeEngine:
    """Stateless; one instance can serve any number of merges."""

    def merge(self, spec: MergeSpec) -> bytes:
        return self.merge_result(spec).data

    def merge_result(self, spec: MergeSpec) -> MergeResult:
        if not spec.entries:
            raise ValueError("nothing to merge: the document list is empty")

        logger.log(_FEATURE, "Start", reference_id=spec.filename,
                   message=f"{len(spec.entries)} document(s), compress={spec.compress}")
        writer = PdfWriter()
        count = 0
        for entry in spec.entries:
            doc = entry.document
            data = doc.load_container(stage=STAGE_MERGE)
            reader = open_pdf(data, name=doc.name, error=SourceUnreadable, stage=STAGE_MERGE)
            if len(reader.pages) < doc.page_count:
                raise SourceUnreadable(
                    f"'{doc.name}' has {len(reader.pages)} page(s), expected {doc.page_count}",
                    stage=STAGE_MERGE,
                )

            for page in doc.pages:
                cfg = entry.config.get(page.index)
                if not cfg.selected:
                    continue
                added = writer.add_page(reader.pages[page.content_index])
                added.rotation = (page.rotation + cfg.rotation) % 360
                count += 1

        data = write_pdf(writer, compress=spec.compress)
        logger.log(_FEATURE, "Done", reference_id=spec.filename,
                   message=f"{count} page(s), {len(data)} bytes")
        return MergeResult(data=data, filename=spec.filename, page_count=count)
