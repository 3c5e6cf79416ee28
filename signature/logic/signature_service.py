# signature/logic/signature_service.py
from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from assembly.models.normalized_document import NormalizedDocument
from assembly.logic.pdf_container import PDF_MEDIA_TYPE
from core.config.config_service import StampConfig, get_config
from core.exceptions.errors import STAGE_STAMP
from core.logging.logic.logger import logger

from ..models.signature_asset import SignatureAsset
from ..models.signature_placement import PlacementSpec
from .naming_strategy import DefaultSuffixStrategy, NamingContext, NamingStrategy, unique_source_names
from .pdf_signer import PdfSigner

_FEATURE = "Signature"
ZIP_MEDIA_TYPE = "application/zip"


@dataclass(frozen=True)
class StampResult:
    """
    Output of one stamping run: a single PDF for one target document, an
    archive with one entry per document otherwise.
    """
    data: bytes
    filename: str
    media_type: str
    entries: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_archive(self) -> bool:
        return self.media_type == ZIP_MEDIA_TYPE


class StampService:
    """
    Stamps a signature onto every target document, one document at a time.
    Documents are loaded, stamped and serialized before the next one starts;
    the first failure aborts the run and nothing is returned.
    """

    def __init__(self, *, settings: Optional[StampConfig] = None,
                 naming: Optional[NamingStrategy] = None) -> None:
        self.settings = settings or get_config().stamp
        self._naming: NamingStrategy = naming or DefaultSuffixStrategy(self.settings.signed_suffix)

    def default_spec(self) -> PlacementSpec:
        """Bottom-right corner on every page with the configured scale and margin."""
        return PlacementSpec(scale=self.settings.default_scale, margin=self.settings.corner_margin)

    # -------- Stamping -------------------------------------------------------
    def stamp_one(self, doc: NormalizedDocument, asset: SignatureAsset,
                  spec: PlacementSpec) -> bytes:
        data = doc.load_container(stage=STAGE_STAMP)
        out, rects = PdfSigner.stamp_pdf(pdf_bytes=data, asset=asset, spec=spec, name=doc.name)
        logger.log(_FEATURE, "Stamped", reference_id=doc.name,
                   message=f"{len(rects)} placement(s) on {doc.page_count} page(s)")
        return out

    def stamp(self, documents: Sequence[NormalizedDocument], asset: SignatureAsset,
              spec: Optional[PlacementSpec] = None) -> StampResult:
        if not documents:
            raise ValueError("nothing to sign: no target documents")
        spec = spec or self.default_spec()

        logger.log(_FEATURE, "Start", message=f"{len(documents)} document(s), "
                                              f"{'interactive' if spec.is_interactive else spec.corner.value}, "
                                              f"pages={spec.page_selection.value}, scale={spec.scale}")
        names = [
            self._naming.propose_name(NamingContext(source_name=n))
            for n in unique_source_names([d.name for d in documents])
        ]
        try:
            stamped: List[bytes] = [self.stamp_one(d, asset, spec) for d in documents]
        except Exception as exc:
            logger.log(_FEATURE, "Failed", level="ERROR", message=str(exc))
            raise

        if len(stamped) == 1:
            result = StampResult(data=stamped[0], filename=names[0],
                                 media_type=PDF_MEDIA_TYPE, entries=(names[0],))
        else:
            result = StampResult(data=self._archive(zip(names, stamped)),
                                 filename=self.settings.archive_name,
                                 media_type=ZIP_MEDIA_TYPE, entries=tuple(names))
        logger.log(_FEATURE, "Done", reference_id=result.filename,
                   message=f"{len(result.entries)} entr(y/ies), {len(result.data)} bytes")
        return result

    @staticmethod
    def _archive(entries) -> bytes:
        buf = BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, data in entries:
                zf.writestr(name, data)
        return buf.getvalue()
