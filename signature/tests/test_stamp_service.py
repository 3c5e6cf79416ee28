from __future__ import annotations

import unittest
import zipfile
from io import BytesIO

from pypdf import PdfReader

from assembly.logic.source_normalizer import SourceNormalizer
from assembly.tests.builders import PDF, make_image, make_noisy_png, make_pdf, page_sizes
from core.config.config_service import NormalizeConfig, StampConfig
from core.exceptions.errors import EmbedFailure, SourceUnreadable
from signature.logic.naming_strategy import DefaultSuffixStrategy, NamingContext, unique_source_names
from signature.logic.signature_service import StampService, ZIP_MEDIA_TYPE
from signature.models.signature_asset import SignatureAsset
from signature.models.signature_enums import AssetEncoding, Corner, PageSelection
from signature.models.signature_placement import PlacementSpec


def _has_image(page) -> bool:
    if "/Resources" not in page or "/XObject" not in page["/Resources"]:
        return False
    xobjects = page["/Resources"]["/XObject"]
    return any(xobjects[key]["/Subtype"] == "/Image" for key in xobjects)


class TestNaming(unittest.TestCase):
    def test_suffix_replaces_last_extension(self) -> None:
        strategy = DefaultSuffixStrategy()
        self.assertEqual(strategy.propose_name(NamingContext("contract.pdf")), "contract_firmado.pdf")
        self.assertEqual(strategy.propose_name(NamingContext("v1.2.final.PDF")), "v1.2.final_firmado.pdf")
        self.assertEqual(strategy.propose_name(NamingContext("noext")), "noext_firmado.pdf")

    def test_duplicates_are_disambiguated(self) -> None:
        self.assertEqual(unique_source_names(["a.pdf", "b.pdf", "a.pdf", "A.pdf"]),
                         ["a.pdf", "b.pdf", "a (2).pdf", "A (3).pdf"])


class TestStampService(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = SourceNormalizer(settings=NormalizeConfig())
        self.service = StampService(settings=StampConfig())
        self.asset = SignatureAsset.from_bytes(make_image(120, 60), "image/png")

    def _doc(self, name: str, pages: int = 2):
        return self.normalizer.normalize(make_pdf([(612, 792)] * pages), PDF, name=name)

    def test_truncated_image_fails_while_stamping(self) -> None:
        data = make_noisy_png(120, 60)
        asset = SignatureAsset(data=data[: len(data) // 2], encoding=AssetEncoding.PNG, width=120, height=60)
        with self.assertRaises(EmbedFailure):
            self.service.stamp([self._doc("contract.pdf")], asset)

    def test_single_document_gives_pdf(self) -> None:
        result = self.service.stamp([self._doc("contract.pdf")], self.asset)
        self.assertEqual(result.filename, "contract_firmado.pdf")
        self.assertEqual(result.media_type, "application/pdf")
        self.assertFalse(result.is_archive)
        reader = PdfReader(BytesIO(result.data))
        self.assertEqual(len(reader.pages), 2)
        self.assertTrue(all(_has_image(p) for p in reader.pages))

    def test_three_documents_give_archive(self) -> None:
        docs = [self._doc("a.pdf"), self._doc("b.pdf", pages=1), self._doc("c.pdf", pages=3)]
        result = self.service.stamp(docs, self.asset)
        self.assertTrue(result.is_archive)
        self.assertEqual(result.media_type, ZIP_MEDIA_TYPE)
        self.assertEqual(result.filename, "documentos_firmados.zip")
        with zipfile.ZipFile(BytesIO(result.data)) as zf:
            self.assertEqual(zf.namelist(), ["a_firmado.pdf", "b_firmado.pdf", "c_firmado.pdf"])
            self.assertEqual(len(page_sizes(zf.read("c_firmado.pdf"))), 3)

    def test_same_names_stay_separate_entries(self) -> None:
        result = self.service.stamp([self._doc("scan.pdf"), self._doc("scan.pdf")], self.asset)
        self.assertEqual(result.entries, ("scan_firmado.pdf", "scan (2)_firmado.pdf"))

    def test_page_selection_first_only(self) -> None:
        spec = PlacementSpec.fixed_corner(Corner.TOP_LEFT, pages=PageSelection.FIRST)
        result = self.service.stamp([self._doc("x.pdf", pages=3)], self.asset, spec)
        reader = PdfReader(BytesIO(result.data))
        self.assertEqual([_has_image(p) for p in reader.pages], [True, False, False])

    def test_failed_document_aborts_batch(self) -> None:
        good, bad = self._doc("good.pdf"), self._doc("bad.pdf")
        bad.release()
        with self.assertRaises(SourceUnreadable) as ctx:
            self.service.stamp([good, bad], self.asset)
        self.assertEqual(ctx.exception.stage, "stamp")

    def test_empty_batch(self) -> None:
        with self.assertRaises(ValueError):
            self.service.stamp([], self.asset)


class TestSignatureAsset(unittest.TestCase):
    def test_other_encodings_rejected(self) -> None:
        with self.assertRaises(EmbedFailure):
            SignatureAsset.from_bytes(make_image(10, 10), "image/gif")

    def test_undecodable_bytes(self) -> None:
        with self.assertRaises(EmbedFailure):
            SignatureAsset.from_bytes(b"not an image", "image/png")

    def test_truncated_image_rejected(self) -> None:
        data = make_noisy_png(120, 60)
        with self.assertRaises(EmbedFailure):
            SignatureAsset.from_bytes(data[: len(data) // 2], "image/png")

    def test_jpeg_alias(self) -> None:
        asset = SignatureAsset.from_bytes(make_image(30, 20, fmt="JPEG"), "jpg")
        self.assertEqual((asset.width, asset.height), (30, 20))
        self.assertEqual(asset.footprint(0.5), (15.0, 10.0))


if __name__ == "__main__":
    unittest.main()
