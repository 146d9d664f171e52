"""
Module: output.docx_renderer

Purpose:
    Render a LayoutResult to DOCX using python-docx.
    Word paginates the document itself, so rows are emitted in order and
    never broken explicitly: every row of `columns` figures becomes one
    table row marked "cannot split". Single-column plain layouts are
    emitted as sequential picture and caption paragraphs without a table.

Key Functions:
    - render_to_docx(): Main rendering function

Dependencies:
    - python-docx: Document model, raw table properties via OxmlElement
    - layout.measurement: DocxMeasurement (96-dpi pixels)

Used By:
    - controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, Optional

from docx import Document
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT, WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Mm, Pt, Twips

from photo_report.core.models import ReportMetadata
from photo_report.layout.captions import CaptionBlock
from photo_report.layout.config import LayoutConfig
from photo_report.layout.measurement import (
    A4_HEIGHT_MM,
    A4_WIDTH_MM,
    DocxMeasurement,
    HeaderLine,
    MeasurementProvider,
    REPORT_TITLE,
)
from photo_report.layout.models import FigureCell, LayoutResult, RowPlan

logger = logging.getLogger(__name__)

FONT_FAMILY = "Arial"
EMU_PER_PX = 9525
MARGIN_TOP_TWIPS = 1000
MARGIN_SIDE_TWIPS = 1200
# Cell margins in twips (left/right, top/bottom)
CELL_MARGIN_SIDE_TWIPS = 100
CELL_MARGIN_VERTICAL_TWIPS = 200
BORDER_SIZE = 4  # eighths of a point
BORDER_COLOR = "999999"
TABLE_EDGES = ("top", "left", "bottom", "right", "insideH", "insideV")
CELL_EDGES = ("top", "left", "bottom", "right")


def render_to_docx(
    layout: LayoutResult,
    metadata: ReportMetadata,
    config: LayoutConfig,
    measure: Optional[MeasurementProvider] = None,
) -> bytes:
    """
    Render layout result to DOCX bytes.

    Args:
        layout: Layout result from the paginator (measured in px)
        metadata: Report header fields
        config: Column count and cell style
        measure: Measurements the layout was computed with

    Returns:
        Complete DOCX document
    """
    measure = measure or DocxMeasurement()
    if layout.format_name != measure.name:
        raise ValueError(f"Layout measured for {layout.format_name}, cannot render as {measure.name}")

    doc = Document()
    _setup_document(doc, metadata)

    if layout.header is not None:
        _add_header(doc, layout, measure)

    rows = [row for page in layout.pages for row in page.rows]
    if config.is_single_column and not config.is_bordered:
        for row in rows:
            _add_sequential_figure(doc, row, config, measure)
    elif rows:
        _add_figure_table(doc, rows, config, measure)

    buf = io.BytesIO()
    doc.save(buf)
    logger.info(f"Rendered {len(rows)} DOCX rows (~{layout.page_count} pages, {buf.tell()} bytes)")
    return buf.getvalue()


def _setup_document(doc: Document, metadata: ReportMetadata) -> None:
    """A4 page, fixed margins, Arial as the base font."""
    section = doc.sections[0]
    section.page_width = Mm(A4_WIDTH_MM)
    section.page_height = Mm(A4_HEIGHT_MM)
    section.top_margin = Twips(MARGIN_TOP_TWIPS)
    section.bottom_margin = Twips(MARGIN_TOP_TWIPS)
    section.left_margin = Twips(MARGIN_SIDE_TWIPS)
    section.right_margin = Twips(MARGIN_SIDE_TWIPS)

    style = doc.styles["Normal"]
    style.font.name = FONT_FAMILY
    # East Asian font slot is not set by font.name
    style.element.rPr.rFonts.set(qn("w:eastAsia"), FONT_FAMILY)

    doc.core_properties.title = f"{REPORT_TITLE} - {metadata.institution_name}"


def _add_header(doc: Document, layout: LayoutResult, measure: MeasurementProvider) -> None:
    paragraph = None
    for line in layout.header.lines + layout.header.comment_lines:
        paragraph = _add_header_paragraph(doc, line, measure)
    if paragraph is not None:
        spacing = measure.to_points(layout.header.trailing_space)
        paragraph.paragraph_format.space_after = Pt(spacing)


def _add_header_paragraph(doc: Document, line: HeaderLine, measure: MeasurementProvider):
    paragraph = doc.add_paragraph()
    if line.align == "center":
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    paragraph.paragraph_format.space_after = Pt(measure.to_points(line.space_after))
    run = paragraph.add_run(line.text)
    run.bold = line.bold
    run.font.size = Pt(line.font_size)
    return paragraph


def _add_sequential_figure(
    doc: Document,
    row: RowPlan,
    config: LayoutConfig,
    measure: MeasurementProvider,
) -> None:
    """One picture paragraph and one caption paragraph per figure."""
    metrics = measure.metrics(config.columns)
    for cell in row.cells:
        picture = doc.add_paragraph()
        picture.alignment = WD_ALIGN_PARAGRAPH.CENTER
        picture.paragraph_format.keep_with_next = True
        _add_picture(picture, cell)

        caption = doc.add_paragraph()
        _write_caption(caption, cell.caption)
        caption.paragraph_format.space_after = Pt(measure.to_points(metrics.row_gap))


def _add_figure_table(
    doc: Document,
    rows: Iterable[RowPlan],
    config: LayoutConfig,
    measure: MeasurementProvider,
) -> None:
    """
    One table row per layout row.

    Cells are vertically centered; trailing cells of a short last row keep
    only their empty default paragraph.
    """
    metrics = measure.metrics(config.columns)
    cell_width = _cell_width(config, measure)

    table = doc.add_table(rows=0, cols=config.columns)
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    table.autofit = False
    _set_table_borders(table, visible=config.is_bordered)

    for row in rows:
        table_row = table.add_row()
        _set_cant_split(table_row)
        for column, table_cell in enumerate(table_row.cells):
            table_cell.width = cell_width
            _set_cell_borders(table_cell, visible=config.is_bordered)
            _set_cell_margins(table_cell)
            table_cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
            if column >= len(row.cells):
                continue
            _fill_cell(table_cell, row.cells[column], measure, metrics.caption_gap)

    for column in table.columns:
        column.width = cell_width


def _fill_cell(table_cell, cell: FigureCell, measure: MeasurementProvider, caption_gap: float) -> None:
    picture = table_cell.paragraphs[0]
    picture.alignment = WD_ALIGN_PARAGRAPH.CENTER
    picture.paragraph_format.space_after = Pt(measure.to_points(caption_gap))
    _add_picture(picture, cell)

    caption = table_cell.add_paragraph()
    _write_caption(caption, cell.caption)


def _add_picture(paragraph, cell: FigureCell) -> None:
    if cell.image_width <= 0 or cell.image_height <= 0:
        logger.debug(f"Figure {cell.number} has no drawable area, skipping picture")
        return
    paragraph.add_run().add_picture(
        io.BytesIO(cell.figure.image.data),
        width=_px(cell.image_width),
        height=_px(cell.image_height),
    )


def _write_caption(paragraph, caption: CaptionBlock) -> None:
    """Bold label run followed by an italic description run."""
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    label = paragraph.add_run(caption.label)
    label.bold = True
    label.font.size = Pt(caption.font_size)
    if caption.description:
        description = paragraph.add_run(caption.description)
        description.italic = True
        description.font.size = Pt(caption.font_size)


def _cell_width(config: LayoutConfig, measure: MeasurementProvider) -> Emu:
    """Cell width: the box plus cell margins, or the full content width for one column."""
    if config.is_single_column:
        return _px(measure.content_width)
    box = measure.metrics(config.columns).box
    margins_px = 2 * CELL_MARGIN_SIDE_TWIPS / 15.0
    return _px(box.width + margins_px)


def _px(value: float) -> Emu:
    return Emu(int(round(value * EMU_PER_PX)))


def _set_cant_split(table_row) -> None:
    tr_pr = table_row._tr.get_or_add_trPr()
    cant_split = OxmlElement("w:cantSplit")
    tr_pr.append(cant_split)


def _border_element(edge: str, visible: bool):
    element = OxmlElement(f"w:{edge}")
    if visible:
        element.set(qn("w:val"), "single")
        element.set(qn("w:sz"), str(BORDER_SIZE))
        element.set(qn("w:space"), "0")
        element.set(qn("w:color"), BORDER_COLOR)
    else:
        element.set(qn("w:val"), "nil")
    return element


def _set_table_borders(table, visible: bool) -> None:
    borders = OxmlElement("w:tblBorders")
    for edge in TABLE_EDGES:
        borders.append(_border_element(edge, visible))
    # tblBorders must precede shading, layout and cell margins in tblPr
    table._tbl.tblPr.insert_element_before(
        borders, "w:shd", "w:tblLayout", "w:tblCellMar", "w:tblLook", "w:tblCaption", "w:tblDescription"
    )


def _set_cell_borders(table_cell, visible: bool) -> None:
    tc_pr = table_cell._tc.get_or_add_tcPr()
    borders = OxmlElement("w:tcBorders")
    for edge in CELL_EDGES:
        borders.append(_border_element(edge, visible))
    tc_pr.append(borders)


def _set_cell_margins(table_cell) -> None:
    tc_pr = table_cell._tc.get_or_add_tcPr()
    margins = OxmlElement("w:tcMar")
    for side, value in (
        ("top", CELL_MARGIN_VERTICAL_TWIPS),
        ("bottom", CELL_MARGIN_VERTICAL_TWIPS),
        ("left", CELL_MARGIN_SIDE_TWIPS),
        ("right", CELL_MARGIN_SIDE_TWIPS),
    ):
        element = OxmlElement(f"w:{side}")
        element.set(qn("w:w"), str(value))
        element.set(qn("w:type"), "dxa")
        margins.append(element)
    tc_pr.append(margins)
