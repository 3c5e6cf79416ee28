"""
SourceNormalizer – raw bytes + declared format -> NormalizedDocument
-------------------------------------------------------------------------------
- PDF:     pages introspected directly (count, media box, /Rotate), no re-encode
- JPEG/PNG: optional pre-compression, then one page of the image's pixel size
            (1 pt per pixel) with the image drawn full-bleed
- Word/Excel: OOXML rendered in-process, legacy OLE files through the external
            converter chain; both onto fixed-format pages

Failures: UnsupportedFormat (not on the allow-list), CorruptSource (decoding).
"""
from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from core.config.config_service import NormalizeConfig, get_config
from core.contracts.documents import Rasterizer
from core.exceptions.errors import CorruptSource, UnsupportedFormat
from core.logging.logic.logger import logger

from ..models.normalized_document import NormalizedDocument
from ..models.source_file import SourceFile
from ..models.source_format import SourceFormat
from .doc_convert import ExternalOfficeConverter
from .format_detection import detect_format, is_ole, is_ooxml
from .image_tools import SUPPORTED_ENCODINGS, compress_image, probe_image
from .office_rasterizer import KIND_EXCEL, KIND_WORD, ReportlabOfficeRasterizer
from .page_sources import BytesPageSource
from .pdf_container import image_page_pdf, inspect_pages, open_pdf

_FEATURE = "Normalize"

_IMAGE_ENCODING = {SourceFormat.JPEG: "JPEG", SourceFormat.PNG: "PNG"}


class SourceNormalizer:
    """Converts one source into a page-addressable document."""

    def __init__(
        self,
        *,
        settings: Optional[NormalizeConfig] = None,
        office: Optional[Rasterizer] = None,
        legacy_office: Optional[Rasterizer] = None,
    ) -> None:
        self.settings = settings or get_config().normalize
        self._office = office or ReportlabOfficeRasterizer(
            page_format=self.settings.office_page_format,
            margin=self.settings.office_margin,
        )
        self._legacy = legacy_office or ExternalOfficeConverter()

    # ------------------------------------------------------------------ #
    def normalize(self, data: bytes, declared_type: str, *, name: str = "document",
                  compress_images: Optional[bool] = None) -> NormalizedDocument:
        fmt = detect_format(declared_type, name)
        if fmt is None:
            raise UnsupportedFormat(f"'{name}' ({declared_type or 'unknown type'}) is not a supported format")

        logger.log(_FEATURE, "Start", reference_id=name, message=f"{fmt.value}, {len(data)} bytes")
        if fmt is SourceFormat.PDF:
            pdf = data
        elif fmt.is_image:
            pdf = self._image_to_pdf(data, fmt, name, compress_images)
        else:
            pdf = self._office_to_pdf(data, fmt, name)

        reader = open_pdf(pdf, name=name)
        pages = inspect_pages(reader)
        doc = NormalizedDocument(
            name=name,
            origin=fmt,
            pages=tuple(pages),
            source=BytesPageSource(pdf),
        )
        logger.log(_FEATURE, "Done", reference_id=name, message=f"{doc.page_count} page(s)")
        return doc

    def normalize_source(self, source: SourceFile, *,
                         compress_images: Optional[bool] = None) -> NormalizedDocument:
        return self.normalize(source.data, source.declared_type, name=source.name,
                              compress_images=compress_images)

    # ------------------------------------------------------------------ #
    def _image_to_pdf(self, data: bytes, fmt: SourceFormat, name: str,
                      compress: Optional[bool]) -> bytes:
        info = probe_image(data, name=name)
        if info.encoding not in SUPPORTED_ENCODINGS:
            raise UnsupportedFormat(f"'{name}' is a {info.encoding or 'unknown'} image; only JPEG and PNG are supported")
        if info.encoding != _IMAGE_ENCODING[fmt]:
            logger.log(_FEATURE, "EncodingMismatch", level="WARNING", reference_id=name,
                       message=f"declared {fmt.value}, content {info.encoding}")

        if self.settings.compress_images if compress is None else compress:
            try:
                data = compress_image(
                    data,
                    max_dimension=self.settings.max_image_dimension,
                    quality=self.settings.jpeg_quality,
                )
                info = probe_image(data, name=name)
            except (OSError, ValueError) as exc:
                # byte-size optimization only; keep the original image
                logger.log(_FEATURE, "CompressionSkipped", level="WARNING", reference_id=name, message=str(exc))

        return image_page_pdf(data, float(info.width), float(info.height))

    def _office_to_pdf(self, data: bytes, fmt: SourceFormat, name: str) -> bytes:
        kind = KIND_WORD if fmt is SourceFormat.WORD else KIND_EXCEL
        if is_ooxml(data):
            rasterizer = self._office
        elif is_ole(data):
            rasterizer = self._legacy
        else:
            raise CorruptSource(f"'{name}' is neither an OOXML nor a legacy {kind} document")
        pdf = rasterizer.render(data, kind=kind, name=PurePath(name).stem or name)
        logger.log(_FEATURE, "OfficeRendered", reference_id=name, message=type(rasterizer).__name__)
        return pdf
