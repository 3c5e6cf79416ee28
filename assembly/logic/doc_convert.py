"""
Legacy office (.doc / .xls) -> PDF through external converters.

Strategies (in order):
1) Windows + docx2pdf (drives Word; Word sources only)
2) LibreOffice headless (cross-platform, Word and Excel)

The binary OLE formats cannot be read in-process, so this chain is the only
route for them. No UI imports here.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from core.contracts.documents import Rasterizer
from core.exceptions.errors import CorruptSource, UnsupportedFormat
from core.logging.logic.logger import logger
from .office_rasterizer import KIND_EXCEL, KIND_WORD

_SUFFIX = {KIND_WORD: ".doc", KIND_EXCEL: ".xls"}


def _is_windows() -> bool:
    return os.name == "nt"


def _soffice() -> Optional[str]:
    return shutil.which("soffice") or shutil.which("libreoffice")


# ------------------------------ strategy 1 ---------------------------------

def _strategy_docx2pdf(src: Path, out_dir: Path) -> Optional[Path]:
    if not (_is_windows() and src.suffix.lower() == ".doc"):
        return None
    try:
        from docx2pdf import convert  # type: ignore
    except ImportError:
        return None  # next strategy

    try:
        convert(str(src), str(out_dir))
    except Exception as exc:  # docx2pdf surfaces COM errors untyped
        logger.log("Normalize", "Docx2PdfFailed", level="WARNING", reference_id=src.name, message=str(exc))
        return None
    produced = out_dir / (src.stem + ".pdf")
    return produced if produced.is_file() else None


# ------------------------------ strategy 2 ---------------------------------

def _strategy_libreoffice(src: Path, out_dir: Path) -> Optional[Path]:
    soffice = _soffice()
    if not soffice:
        return None
    cmd = [soffice, "--headless", "--convert-to", "pdf", "--outdir", str(out_dir), str(src)]
    try:
        subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, timeout=180)
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as exc:
        logger.log("Normalize", "SofficeFailed", level="WARNING", reference_id=src.name, message=str(exc))
        return None
    produced = out_dir / (src.stem + ".pdf")
    return produced if produced.is_file() else None


# ------------------------------ public API ---------------------------------

class ExternalOfficeConverter(Rasterizer):
    """Rasterizer backed by docx2pdf / LibreOffice."""

    def supports(self, kind: str) -> bool:
        if kind not in _SUFFIX:
            return False
        if _soffice():
            return True
        return _is_windows() and kind == KIND_WORD

    def render(self, data: bytes, *, kind: str, name: str) -> bytes:
        if not self.supports(kind):
            raise UnsupportedFormat(
                f"'{name}' is a legacy {kind} file and no converter (LibreOffice/Word) is available"
            )
        with tempfile.TemporaryDirectory(prefix="pdfwb_convert_") as tmpdir:
            work = Path(tmpdir)
            src = work / f"source{_SUFFIX[kind]}"
            src.write_bytes(data)
            out_dir = work / "out"
            out_dir.mkdir()

            for strategy in (_strategy_docx2pdf, _strategy_libreoffice):
                produced = strategy(src, out_dir)
                if produced is not None:
                    return produced.read_bytes()

        raise CorruptSource(f"'{name}' could not be converted to PDF")
