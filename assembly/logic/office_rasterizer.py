"""
Office document -> PDF rendering (approximate layout, fixed page format).

- Word (.docx): python-docx, body paragraphs and tables in document order,
  run-level bold/italic/underline kept, headings mapped to heading styles.
- Excel (.xlsx): first worksheet parsed from the OOXML parts with zipfile + xml
  (shared strings, inline strings, numbers), rendered as a gridded table.

Layout is done with reportlab platypus. Exact reflow fidelity is not a goal.
"""

from __future__ import annotations

import re
import zipfile
from io import BytesIO
from typing import Dict, List, Optional
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table as DocxTable
from reportlab.lib import colors, pagesizes
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from core.contracts.documents import Rasterizer
from core.exceptions.errors import CorruptSource
from core.logging.logic.logger import logger

KIND_WORD = "word"
KIND_EXCEL = "excel"

_SHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
_NS = {"m": _SHEET_NS}

_HEADING_RE = re.compile(r"heading\s*(\d+)", re.IGNORECASE)
_CELL_REF_RE = re.compile(r"([A-Z]+)")


def _page_size(name: str):
    size = getattr(pagesizes, (name or "A4").upper(), None)
    if size is None:
        raise ValueError(f"Unknown page format '{name}'")
    return size


# --------------------------------------------------------------------------- #
#  Word                                                                       #
# --------------------------------------------------------------------------- #

def _runs_markup(paragraph) -> str:
    parts: List[str] = []
    for run in paragraph.runs:
        text = escape(run.text or "")
        if not text:
            continue
        if run.bold:
            text = f"<b>{text}</b>"
        if run.italic:
            text = f"<i>{text}</i>"
        if run.underline:
            text = f"<u>{text}</u>"
        parts.append(text)
    return "".join(parts) or escape(paragraph.text or "")


def _style_for(paragraph, styles) -> ParagraphStyle:
    style_name = paragraph.style.name if paragraph.style is not None else ""
    if style_name == "Title":
        return styles["Title"]
    m = _HEADING_RE.match(style_name or "")
    if m:
        level = min(max(int(m.group(1)), 1), 6)
        return styles[f"Heading{level}"]
    return styles["BodyText"]


def _docx_story(data: bytes, width: float, *, flat_tables: bool = False) -> list:
    try:
        doc = Document(BytesIO(data))
    except (PackageNotFoundError, KeyError, ValueError, zipfile.BadZipFile) as exc:
        raise CorruptSource(f"Word document cannot be opened ({exc})") from exc

    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("Cell", parent=styles["BodyText"], fontSize=9, leading=11)
    story: list = []
    for block in doc.iter_inner_content():
        if isinstance(block, DocxTable):
            rows = [[cell.text for cell in row.cells] for row in block.rows]
            if rows:
                story.extend(_table_flowables(rows, width, cell_style, flat=flat_tables))
                story.append(Spacer(1, 8))
            continue
        markup = _runs_markup(block)
        if not markup.strip():
            story.append(Spacer(1, 6))
            continue
        style_name = block.style.name if block.style is not None else ""
        if style_name.lower().startswith("list"):
            markup = "&bull; " + markup
        story.append(Paragraph(markup, _style_for(block, styles)))
    return story


# --------------------------------------------------------------------------- #
#  Excel                                                                      #
# --------------------------------------------------------------------------- #

def _column_index(ref: str) -> int:
    m = _CELL_REF_RE.match(ref or "")
    if not m:
        return -1
    idx = 0
    for ch in m.group(1):
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def _text_of(elem: ET.Element) -> str:
    return "".join(t.text or "" for t in elem.iter(f"{{{_SHEET_NS}}}t"))


def read_first_sheet(data: bytes) -> List[List[str]]:
    """Cell texts of the first worksheet, row by row (ragged rows padded)."""
    try:
        with zipfile.ZipFile(BytesIO(data)) as zf:
            names = set(zf.namelist())
            workbook = ET.fromstring(zf.read("xl/workbook.xml"))
            sheet = workbook.find("m:sheets/m:sheet", _NS)
            if sheet is None:
                return []
            rid = sheet.get(f"{{{_REL_NS}}}id")
            rels = ET.fromstring(zf.read("xl/_rels/workbook.xml.rels"))
            target: Optional[str] = None
            for rel in rels.iter(f"{{{_PKG_REL_NS}}}Relationship"):
                if rel.get("Id") == rid:
                    target = rel.get("Target")
                    break
            if not target:
                return []
            sheet_path = target.lstrip("/") if target.startswith("/") else f"xl/{target}"

            shared: List[str] = []
            if "xl/sharedStrings.xml" in names:
                sst = ET.fromstring(zf.read("xl/sharedStrings.xml"))
                shared = [_text_of(si) for si in sst.findall("m:si", _NS)]

            root = ET.fromstring(zf.read(sheet_path))
    except (zipfile.BadZipFile, KeyError, ET.ParseError) as exc:
        raise CorruptSource(f"Excel workbook cannot be read ({exc})") from exc

    rows: List[List[str]] = []
    for row in root.iterfind("m:sheetData/m:row", _NS):
        cells: Dict[int, str] = {}
        next_col = 0
        for c in row.findall("m:c", _NS):
            col = _column_index(c.get("r", ""))
            if col < 0:
                col = next_col
            next_col = col + 1
            kind = c.get("t")
            if kind == "s":
                raw = c.findtext("m:v", "", _NS)
                value = shared[int(raw)] if raw.isdigit() and int(raw) < len(shared) else ""
            elif kind == "inlineStr":
                value = _text_of(c)
            elif kind == "b":
                value = "TRUE" if c.findtext("m:v", "", _NS) == "1" else "FALSE"
            else:
                value = c.findtext("m:v", "", _NS)
            cells[col] = value
        if cells:
            width = max(cells) + 1
            rows.append([cells.get(i, "") for i in range(width)])

    if rows:
        width = max(len(r) for r in rows)
        rows = [r + [""] * (width - len(r)) for r in rows]
    return rows


def _xlsx_story(data: bytes, width: float, *, flat_tables: bool = False) -> list:
    rows = read_first_sheet(data)
    if not rows:
        return []
    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("SheetCell", parent=styles["BodyText"], fontSize=8, leading=10)
    return _table_flowables(rows, width, cell_style, flat=flat_tables)


def _table_flowables(rows: List[List[str]], width: float, cell_style: ParagraphStyle,
                     *, flat: bool = False) -> list:
    """
    Grid table of cell texts. With *flat*, every row becomes one paragraph
    ("a | b | c"), which always paginates.
    """
    if flat:
        return [Paragraph(escape(" | ".join(r)), cell_style) for r in rows]
    return [_grid_table([[Paragraph(escape(v), cell_style) for v in r] for r in rows], width)]


def _grid_table(rows: list, width: float) -> Table:
    cols = max(len(r) for r in rows)
    rows = [r + [""] * (cols - len(r)) for r in rows]
    # rows taller than a page are split across pages
    table = Table(rows, colWidths=[width / cols] * cols, repeatRows=0, splitInRow=1)
    style = [
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#dddddd")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
    ]
    for i in range(1, len(rows), 2):
        style.append(("BACKGROUND", (0, i), (-1, i), colors.HexColor("#f2f2f2")))
    table.setStyle(TableStyle(style))
    return table


# --------------------------------------------------------------------------- #
#  Rasterizer                                                                 #
# --------------------------------------------------------------------------- #

class ReportlabOfficeRasterizer(Rasterizer):
    """Renders .docx / .xlsx sources onto fixed-format pages."""

    def __init__(self, *, page_format: str = "A4", margin: float = 28.0) -> None:
        self.page_format = (page_format or "A4").upper()
        self.page_size = _page_size(page_format)
        self.margin = float(margin)

    def supports(self, kind: str) -> bool:
        return kind in (KIND_WORD, KIND_EXCEL)

    def _build(self, story: list, name: str) -> bytes:
        buf = BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=self.page_size,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=name,
        )
        # an empty source still yields one blank page
        doc.build(story or [Spacer(1, 1)])
        return buf.getvalue()

    def render(self, data: bytes, *, kind: str, name: str) -> bytes:
        if kind == KIND_WORD:
            make_story = _docx_story
        elif kind == KIND_EXCEL:
            make_story = _xlsx_story
        else:
            raise ValueError(f"unsupported office kind '{kind}'")
        width = self.page_size[0] - 2 * self.margin
        try:
            return self._build(make_story(data, width), name)
        except LayoutError as exc:
            logger.log("Normalize", "TableLayoutFallback", level="WARNING", reference_id=name, message=str(exc))
        try:
            return self._build(make_story(data, width, flat_tables=True), name)
        except LayoutError as exc:
            raise CorruptSource(f"'{name}' cannot be laid out on {self.page_format} pages ({exc})") from exc
