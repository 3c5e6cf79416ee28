from __future__ import annotations

from io import BytesIO
from typing import Dict, List, Tuple

from pypdf import PdfReader, PdfWriter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from assembly.logic.pdf_container import open_pdf, write_pdf
from core.exceptions.errors import EmbedFailure, STAGE_STAMP, SourceUnreadable

from ..models.signature_asset import SignatureAsset
from ..models.signature_placement import PlacementRect, PlacementSpec
from .placement_mapper import plan_placements


class PdfSigner:
    @staticmethod
    def _image_reader(asset: SignatureAsset) -> ImageReader:
        try:
            return ImageReader(BytesIO(asset.data))
        except Exception as exc:  # reportlab raises bare Exception subclasses here
            raise EmbedFailure(f"signature image cannot be embedded ({exc})") from exc

    @staticmethod
    def _make_overlay(
        box: Tuple[float, float, float, float],
        image: ImageReader,
        rects: List[PlacementRect],
    ) -> bytes:
        """
        Build an overlay page covering the target page's media box with the
        signature drawn at every rectangle (alpha kept for PNG).
        """
        left, bottom, right, top = box
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(right, top))
        try:
            for r in rects:
                c.drawImage(image, left + r.x, bottom + r.y, width=r.width, height=r.height, mask="auto")
        except (OSError, ValueError) as exc:
            raise EmbedFailure(f"signature image cannot be drawn ({exc})") from exc
        c.showPage()
        c.save()
        return buf.getvalue()

    @staticmethod
    def stamp_pdf(
        *,
        pdf_bytes: bytes,
        asset: SignatureAsset,
        spec: PlacementSpec,
        name: str = "document",
    ) -> Tuple[bytes, List[PlacementRect]]:
        """
        Draw the signature onto the pages chosen by ``spec.page_selection`` and
        return the new PDF bytes plus the rectangles used.
        """
        reader = open_pdf(pdf_bytes, name=name, error=SourceUnreadable, stage=STAGE_STAMP)
        boxes = [
            (float(p.mediabox.left), float(p.mediabox.bottom), float(p.mediabox.right), float(p.mediabox.top))
            for p in reader.pages
        ]
        sizes = [(right - left, top - bottom) for left, bottom, right, top in boxes]
        rects = plan_placements(spec, asset, sizes)

        by_page: Dict[int, List[PlacementRect]] = {}
        for r in rects:
            by_page.setdefault(r.page_index, []).append(r)

        image = PdfSigner._image_reader(asset) if rects else None
        writer = PdfWriter(clone_from=reader)
        for i, page in enumerate(writer.pages):
            if i not in by_page:
                continue
            overlay_pdf = PdfSigner._make_overlay(boxes[i], image, by_page[i])
            overlay_reader = PdfReader(BytesIO(overlay_pdf))
            page.merge_page(overlay_reader.pages[0])

        return write_pdf(writer), rects
