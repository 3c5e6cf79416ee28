"""
===============================================================================
BatchOrchestrator – ordering and failure policy of the whole pipeline
-------------------------------------------------------------------------------
Normalization
    A batch of sources is normalized concurrently, one task per source, and
    joined before anything becomes visible. Any failure rejects the whole
    batch (the earliest-submitted failure is raised, successful siblings are
    released); otherwise the documents are committed in submission order.
Merge / stamp / compress
    One sequential pass over the documents, then the artifact goes to an
    OutputSink. A cancelled destination choice (AbortedByUser) is not an
    error: the call returns None and the working set is left untouched.
===============================================================================
"""
from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from assembly.logic.compressor import compress_document
from assembly.logic.merge_engine import MergeEngine
from assembly.logic.naming import compressed_name, swap_to_pdf
from assembly.logic.pdf_container import PDF_MEDIA_TYPE
from assembly.logic.source_normalizer import SourceNormalizer
from assembly.models.normalized_document import NormalizedDocument
from assembly.models.source_file import SourceFile
from core.config.config_service import ConfigService, get_config
from core.contracts.output import OutputSink
from core.exceptions.errors import AbortedByUser
from core.logging.logic.logger import logger
from signature.logic.signature_service import StampService
from signature.models.signature_asset import SignatureAsset
from signature.models.signature_placement import PlacementSpec

from ..models.output_record import OutputRecord
from .working_set import WorkingSet

_FEATURE = "Batch"


class BatchOrchestrator:
    def __init__(
        self,
        *,
        working_set: Optional[WorkingSet] = None,
        normalizer: Optional[SourceNormalizer] = None,
        merge_engine: Optional[MergeEngine] = None,
        stamp_service: Optional[StampService] = None,
        config: Optional[ConfigService] = None,
    ) -> None:
        self.config = config or get_config()
        self.working_set = working_set if working_set is not None else WorkingSet()
        self.normalizer = normalizer or SourceNormalizer(settings=self.config.normalize)
        self.merge_engine = merge_engine or MergeEngine()
        self.stamp_service = stamp_service or StampService(settings=self.config.stamp)

    # ------------------------------------------------------------------ #
    #  Normalization fan-out                                              #
    # ------------------------------------------------------------------ #
    async def normalize_batch(self, sources: Sequence[SourceFile], *,
                              compress_images: Optional[bool] = None) -> List[NormalizedDocument]:
        """
        Normalize every source concurrently and return the documents in
        submission order. Nothing is committed here.
        """
        if not sources:
            return []
        logger.log(_FEATURE, "NormalizeStart", message=f"{len(sources)} source(s)")
        tasks = [
            asyncio.to_thread(self.normalizer.normalize_source, src, compress_images=compress_images)
            for src in sources
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        failures = [(i, r) for i, r in enumerate(results) if isinstance(r, BaseException)]
        if failures:
            for r in results:
                if isinstance(r, NormalizedDocument):
                    r.release()
            index, first = failures[0]
            logger.log(_FEATURE, "NormalizeRejected", level="ERROR", reference_id=sources[index].name,
                       message=f"{len(failures)} of {len(sources)} failed: {first}")
            raise first

        logger.log(_FEATURE, "NormalizeDone", message=f"{len(results)} document(s)")
        return list(results)

    async def add_sources(self, sources: Sequence[SourceFile], *,
                          compress_images: Optional[bool] = None) -> List[NormalizedDocument]:
        """Normalize a batch and append it to the working set in one commit."""
        docs = await self.normalize_batch(sources, compress_images=compress_images)
        self.working_set.commit(docs)
        return docs

    # ------------------------------------------------------------------ #
    #  Sequential operations                                              #
    # ------------------------------------------------------------------ #
    def _deliver(self, sink: OutputSink, data: bytes, filename: str,
                 media_type: str) -> Optional[OutputRecord]:
        try:
            path = sink.save(data, suggested_name=filename, media_type=media_type)
        except AbortedByUser:
            logger.log(_FEATURE, "Cancelled", reference_id=filename)
            return None
        return OutputRecord(path=path, filename=filename, media_type=media_type, size=len(data))

    def merge(self, sink: OutputSink, *, compress: Optional[bool] = None) -> Optional[OutputRecord]:
        """
        Merge the working set and hand the result to *sink*. On success the
        working set is released and cleared.
        """
        if not self.working_set:
            raise ValueError("nothing to merge: the working set is empty")
        spec = self.working_set.merge_spec(
            compress=self.config.merge.compress if compress is None else compress,
            default_name=self.config.merge.default_filename,
        )
        try:
            result = self.merge_engine.merge_result(spec)
        except Exception as exc:
            logger.log(_FEATURE, "MergeFailed", level="ERROR", reference_id=spec.filename, message=str(exc))
            raise

        record = self._deliver(sink, result.data, result.filename, result.media_type)
        if record is not None:
            self.working_set.clear()
        return record

    def stamp(self, documents: Sequence[NormalizedDocument], asset: SignatureAsset,
              sink: OutputSink, spec: Optional[PlacementSpec] = None) -> Optional[OutputRecord]:
        """Stamp *documents* one after another; released once the output is written."""
        try:
            result = self.stamp_service.stamp(documents, asset, spec)
        except Exception as exc:
            logger.log(_FEATURE, "StampFailed", level="ERROR", message=str(exc))
            raise

        record = self._deliver(sink, result.data, result.filename, result.media_type)
        if record is not None:
            for doc in documents:
                doc.release()
        return record

    def compress(self, document: NormalizedDocument, sink: OutputSink) -> Optional[OutputRecord]:
        try:
            data = compress_document(document)
        except Exception as exc:
            logger.log(_FEATURE, "CompressFailed", level="ERROR", reference_id=document.name, message=str(exc))
            raise

        filename = compressed_name(swap_to_pdf(document.name), self.config.compress.suffix)
        record = self._deliver(sink, data, filename, PDF_MEDIA_TYPE)
        if record is not None:
            document.release()
        return record
