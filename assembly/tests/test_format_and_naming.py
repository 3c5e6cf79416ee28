from __future__ import annotations

import unittest

from assembly.logic.format_detection import detect_format
from assembly.logic.naming import compressed_name, ensure_pdf_extension, resolve_merge_filename
from assembly.models.source_format import SourceFormat


class TestFormatDetection(unittest.TestCase):
    def test_declared_type_wins(self) -> None:
        self.assertEqual(detect_format("image/png", "scan.pdf"), SourceFormat.PNG)
        self.assertEqual(detect_format("application/pdf", None), SourceFormat.PDF)

    def test_suffix_fallback_is_case_insensitive(self) -> None:
        self.assertEqual(detect_format("", "Report.DOCX"), SourceFormat.WORD)
        self.assertEqual(detect_format("application/octet-stream", "table.xls"), SourceFormat.EXCEL)
        self.assertEqual(detect_format(None, "photo.JPG"), SourceFormat.JPEG)

    def test_office_families_by_mime_fragment(self) -> None:
        self.assertEqual(detect_format("application/vnd.ms-excel.sheet.macroEnabled.12", "x"), SourceFormat.EXCEL)
        self.assertEqual(detect_format("application/msword", "x"), SourceFormat.WORD)

    def test_unknown(self) -> None:
        self.assertIsNone(detect_format("image/gif", "anim.gif"))
        self.assertIsNone(detect_format("", ""))


class TestNaming(unittest.TestCase):
    def test_extension_rule_is_idempotent(self) -> None:
        for name in ("report", "report.pdf", "REPORT.PDF", "a.b"):
            once = ensure_pdf_extension(name)
            self.assertEqual(ensure_pdf_extension(once), once)
        self.assertEqual(ensure_pdf_extension("REPORT.PDF"), "REPORT.PDF")

    def test_filename_priority(self) -> None:
        self.assertEqual(resolve_merge_filename("  final  ", "scan.docx"), "final.pdf")
        self.assertEqual(resolve_merge_filename("", "scan.docx"), "scan.pdf")
        self.assertEqual(resolve_merge_filename(None, "scan.pdf"), "scan.pdf")
        self.assertEqual(resolve_merge_filename(), "merged-document.pdf")

    def test_compressed_name(self) -> None:
        self.assertEqual(compressed_name("scan.PDF"), "scan-comprimido.pdf")
        self.assertEqual(compressed_name("scan"), "scan-comprimido.pdf")


if __name__ == "__main__":
    unittest.main()
