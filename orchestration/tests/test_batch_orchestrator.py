from __future__ import annotations

import asyncio
import tempfile
import time
import unittest
import zipfile
from pathlib import Path

from assembly.logic.source_normalizer import SourceNormalizer
from assembly.models.source_file import SourceFile
from assembly.tests.builders import PDF, PNG, make_image, make_pdf, page_rotations, page_sizes
from core.config.config_service import NormalizeConfig
from core.exceptions.errors import AbortedByUser, CorruptSource, UnsupportedFormat
from core.output.sinks import DownloadSink, SaveAsSink
from orchestration.logic.batch_orchestrator import BatchOrchestrator
from signature.models.signature_asset import SignatureAsset


class _SlowFirstNormalizer(SourceNormalizer):
    """Finishes the first source last, so completion order differs from submission order."""

    def normalize_source(self, source, *, compress_images=None):
        if source.name.startswith("slow"):
            time.sleep(0.2)
        return super().normalize_source(source, compress_images=compress_images)


class _Recorder:
    def __init__(self) -> None:
        self.saved = []

    def save(self, data, *, suggested_name, media_type):
        self.saved.append((data, suggested_name, media_type))
        return Path("/dev/null") / suggested_name


def _pdf(name: str, *sizes) -> SourceFile:
    return SourceFile(data=make_pdf(list(sizes)), declared_type=PDF, name=name)


class TestBatchNormalization(unittest.TestCase):
    def setUp(self) -> None:
        self.orch = BatchOrchestrator(normalizer=_SlowFirstNormalizer(settings=NormalizeConfig()))

    def test_commit_keeps_submission_order(self) -> None:
        batch = [_pdf("slow.pdf", (100, 100)), _pdf("fast.pdf", (200, 200)), _pdf("fast2.pdf", (300, 300))]
        docs = asyncio.run(self.orch.add_sources(batch))
        self.assertEqual([d.name for d in docs], ["slow.pdf", "fast.pdf", "fast2.pdf"])
        self.assertEqual([d.name for d in self.orch.working_set.documents], ["slow.pdf", "fast.pdf", "fast2.pdf"])

    def test_one_failure_rejects_the_whole_batch(self) -> None:
        asyncio.run(self.orch.add_sources([_pdf("existing.pdf", (100, 100))]))
        batch = [
            _pdf("slow.pdf", (100, 100)),
            SourceFile(data=b"broken", declared_type=PDF, name="broken.pdf"),
            SourceFile(data=b"GIF89a", declared_type="image/gif", name="anim.gif"),
        ]
        with self.assertRaises(CorruptSource):
            asyncio.run(self.orch.add_sources(batch))
        self.assertEqual([d.name for d in self.orch.working_set.documents], ["existing.pdf"])

    def test_earliest_submitted_error_is_raised(self) -> None:
        batch = [
            SourceFile(data=b"GIF89a", declared_type="image/gif", name="anim.gif"),
            SourceFile(data=b"broken", declared_type=PDF, name="broken.pdf"),
        ]
        with self.assertRaises(UnsupportedFormat):
            asyncio.run(self.orch.normalize_batch(batch))

    def test_empty_batch(self) -> None:
        self.assertEqual(asyncio.run(self.orch.add_sources([])), [])
        self.assertEqual(len(self.orch.working_set), 0)


class TestMergeFlow(unittest.TestCase):
    def setUp(self) -> None:
        self.orch = BatchOrchestrator(normalizer=SourceNormalizer(settings=NormalizeConfig()))
        self.image = SourceFile(data=make_image(40, 30), declared_type=PNG, name="photo.png")
        self.two = _pdf("two.pdf", (300, 400), (310, 400))

    def test_image_plus_two_page_pdf(self) -> None:
        asyncio.run(self.orch.add_sources([self.image, self.two]))
        sink = _Recorder()
        record = self.orch.merge(sink)
        data, name, media_type = sink.saved[0]
        self.assertEqual(page_sizes(data), [(40.0, 30.0), (300.0, 400.0), (310.0, 400.0)])
        self.assertEqual(name, "merged-document.pdf")
        self.assertEqual(media_type, "application/pdf")
        self.assertEqual(record.filename, name)
        self.assertEqual(len(self.orch.working_set), 0)

    def test_reorder_configure_and_name(self) -> None:
        docs = asyncio.run(self.orch.add_sources([self.image, self.two]))
        ws = self.orch.working_set
        ws.move(1, 0)
        ws.config_for(docs[1].id).set(0, selected=False)
        ws.config_for(docs[1].id).rotate(1)
        ws.set_name_source(docs[1].id)
        sink = _Recorder()
        self.orch.merge(sink)
        data, name, _ = sink.saved[0]
        self.assertEqual(name, "two.pdf")
        self.assertEqual(page_sizes(data), [(310.0, 400.0), (40.0, 30.0)])
        self.assertEqual(page_rotations(data), [90, 0])

    def test_cancelled_save_is_silent_and_keeps_documents(self) -> None:
        asyncio.run(self.orch.add_sources([self.two]))
        record = self.orch.merge(SaveAsSink(lambda name, media: None))
        self.assertIsNone(record)
        self.assertEqual(len(self.orch.working_set), 1)

    def test_empty_working_set(self) -> None:
        with self.assertRaises(ValueError):
            self.orch.merge(_Recorder())


class TestStampAndCompressFlow(unittest.TestCase):
    def setUp(self) -> None:
        self.orch = BatchOrchestrator(normalizer=SourceNormalizer(settings=NormalizeConfig()))
        self.asset = SignatureAsset.from_bytes(make_image(100, 50), "image/png")
        self.tmp = tempfile.TemporaryDirectory()
        self.sink = DownloadSink(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_stamp_one_document_writes_pdf(self) -> None:
        docs = asyncio.run(self.orch.normalize_batch([_pdf("deal.pdf", (612, 792))]))
        record = self.orch.stamp(docs, self.asset, self.sink)
        self.assertEqual(record.path.name, "deal_firmado.pdf")
        self.assertEqual(len(page_sizes(record.path.read_bytes())), 1)

    def test_stamp_three_documents_writes_archive(self) -> None:
        batch = [_pdf(f"d{i}.pdf", (612, 792)) for i in range(3)]
        docs = asyncio.run(self.orch.normalize_batch(batch))
        record = self.orch.stamp(docs, self.asset, self.sink)
        self.assertEqual(record.path.name, "documentos_firmados.zip")
        with zipfile.ZipFile(record.path) as zf:
            self.assertEqual(len(zf.namelist()), 3)

    def test_compress_names_output(self) -> None:
        (doc,) = asyncio.run(self.orch.normalize_batch([_pdf("scan.pdf", (612, 792), (612, 792))]))
        record = self.orch.compress(doc, self.sink)
        self.assertEqual(record.path.name, "scan-comprimido.pdf")
        self.assertEqual(len(page_sizes(record.path.read_bytes())), 2)


class TestSinks(unittest.TestCase):
    def test_download_never_overwrites(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            sink = DownloadSink(tmp)
            first = sink.save(b"1", suggested_name="out.pdf", media_type="application/pdf")
            second = sink.save(b"2", suggested_name="out.pdf", media_type="application/pdf")
            self.assertEqual([first.name, second.name], ["out.pdf", "out (2).pdf"])
            self.assertEqual(first.read_bytes(), b"1")

    def test_save_as_cancel_raises(self) -> None:
        with self.assertRaises(AbortedByUser):
            SaveAsSink(lambda name, media: "").save(b"x", suggested_name="a.pdf", media_type="application/pdf")

    def test_save_as_writes_chosen_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "chosen.pdf"
            path = SaveAsSink(lambda name, media: target).save(b"x", suggested_name="a.pdf",
                                                                   media_type="application/pdf")
            self.assertEqual(path, target)
            self.assertEqual(target.read_bytes(), b"x")


if __name__ == "__main__":
    unittest.main()
