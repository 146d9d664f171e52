"""
Module: output.pdf_renderer

Purpose:
    Render a LayoutResult to PDF using ReportLab.
    Each PagePlan becomes one A4 page; page breaks are exactly the ones the
    paginator decided. Layout coordinates are millimetres measured from the
    page top and are converted to bottom-up PDF points here.

Key Functions:
    - render_to_pdf(): Main rendering function

Dependencies:
    - reportlab: PDF generation
    - layout.models: LayoutResult, PagePlan, RowPlan
    - layout.measurement: PdfMeasurement geometry and fonts

Used By:
    - controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from typing import Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from photo_report.core.models import ReportMetadata
from photo_report.layout.captions import CaptionLine
from photo_report.layout.config import LayoutConfig
from photo_report.layout.measurement import (
    HeaderLine,
    MeasurementProvider,
    PdfMeasurement,
    REPORT_TITLE,
    font_name,
)
from photo_report.layout.models import FigureCell, LayoutResult, PagePlan, RowPlan

logger = logging.getLogger(__name__)

BORDER_RADIUS_MM = 2.0
BORDER_LINE_WIDTH_PT = 0.5
BORDER_GRAY = 0.6


def render_to_pdf(
    layout: LayoutResult,
    metadata: ReportMetadata,
    config: LayoutConfig,
    measure: Optional[MeasurementProvider] = None,
) -> bytes:
    """
    Render layout result to PDF bytes.

    Args:
        layout: Layout result from the paginator (measured in mm)
        metadata: Report header fields for the first page
        config: Column count and cell style
        measure: Measurements the layout was computed with

    Returns:
        Complete PDF document

    Example:
        >>> layout = paginate(figures, config, PdfMeasurement(), metadata)
        >>> pdf_bytes = render_to_pdf(layout, metadata, config)
    """
    measure = measure or PdfMeasurement()
    if layout.format_name != measure.name:
        raise ValueError(f"Layout measured for {layout.format_name}, cannot render as {measure.name}")
    if layout.page_count == 0:
        logger.warning("Empty layout, creating empty PDF")

    page_size = (measure.to_points(measure.page_width), measure.to_points(measure.page_height))
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=page_size)
    c.setTitle(f"{REPORT_TITLE} - {metadata.institution_name}")

    for page in layout.pages:
        _render_page(c, page, layout, config, measure)
        c.showPage()

    c.save()

    logger.info(f"Rendered {layout.page_count} PDF pages ({buf.tell()} bytes)")
    return buf.getvalue()


def _render_page(
    c: canvas.Canvas,
    page: PagePlan,
    layout: LayoutResult,
    config: LayoutConfig,
    measure: MeasurementProvider,
) -> None:
    """Render the header (first page only) and every row of a page."""
    if page.is_first and layout.header is not None:
        _draw_header(c, layout, measure)

    for row in page.rows:
        _draw_row(c, row, config, measure)


def _draw_header(c: canvas.Canvas, layout: LayoutResult, measure: MeasurementProvider) -> None:
    """
    Draw the metadata header from the top margin down.

    Each HeaderLine is drawn at the cursor (plus its baseline offset) and
    then advances the cursor; wrapped lines step down by one leading.
    """
    cursor = measure.margin_top
    for line in layout.header.lines + layout.header.comment_lines:
        _draw_header_line(c, line, cursor + line.baseline, measure)
        cursor += line.advance


def _draw_header_line(c: canvas.Canvas, line: HeaderLine, baseline: float, measure: MeasurementProvider) -> None:
    font = font_name(bold=line.bold)
    c.setFont(font, line.font_size)
    c.setFillColorRGB(0, 0, 0)

    page_height_pt = measure.to_points(measure.page_height)
    center_pt = measure.to_points(measure.margin_left + measure.content_width / 2)
    left_pt = measure.to_points(measure.margin_left)

    for i, text in enumerate(measure.wrap_text(line.text, line.font_size, measure.content_width, bold=line.bold)):
        y_pt = page_height_pt - measure.to_points(baseline + i * measure.leading(line.font_size))
        if line.align == "center":
            c.drawCentredString(center_pt, y_pt, text)
        else:
            c.drawString(left_pt, y_pt, text)


def _draw_row(
    c: canvas.Canvas,
    row: RowPlan,
    config: LayoutConfig,
    measure: MeasurementProvider,
) -> None:
    """
    Draw one row: optional cell borders, images centered in their boxes,
    and captions beneath the image block.
    """
    metrics = measure.metrics(config.columns)
    padding = measure.padding(config.columns, config.style)
    block_top = row.top + padding
    block_bottom = block_top + row.image_block_height

    for cell in row.cells:
        left, width = _cell_bounds(cell, config, measure)

        if config.is_bordered:
            if metrics.box.floating:
                border_left = left - metrics.border_outset
                border_width = width + 2 * metrics.border_outset
            else:
                border_left = left - padding
                border_width = width + 2 * padding
            _draw_border(c, border_left, row.top, border_width, row.height, config, measure)

        image_left = left + (width - cell.image_width) / 2
        image_top = block_top + (row.image_block_height - cell.image_height) / 2
        _draw_image(c, cell, image_left, image_top, measure)

        center = left + width / 2
        for i, line in enumerate(cell.caption.lines):
            baseline = block_bottom + metrics.caption_offset + i * cell.caption.line_height
            _draw_caption_line(c, line, center, baseline, cell.caption.font_size, measure)


def _cell_bounds(cell: FigureCell, config: LayoutConfig, measure: MeasurementProvider):
    """(left, width) of a cell box in mm; a single column box is centered on the page."""
    box = measure.metrics(config.columns).box
    if box.floating:
        return measure.margin_left + (measure.content_width - box.width) / 2, box.width
    gap = measure.metrics(config.columns).column_gap
    return measure.margin_left + cell.column * (box.width + gap), box.width


def _draw_image(c: canvas.Canvas, cell: FigureCell, left: float, top: float, measure: MeasurementProvider) -> None:
    if cell.image_width <= 0 or cell.image_height <= 0:
        logger.debug(f"Figure {cell.number} has no drawable area, skipping image")
        return
    reader = ImageReader(io.BytesIO(cell.figure.image.data))
    c.drawImage(
        reader,
        measure.to_points(left),
        _transform_y(measure, top, cell.image_height),
        width=measure.to_points(cell.image_width),
        height=measure.to_points(cell.image_height),
    )


def _draw_border(
    c: canvas.Canvas,
    left: float,
    top: float,
    width: float,
    height: float,
    config: LayoutConfig,
    measure: MeasurementProvider,
) -> None:
    c.saveState()
    c.setLineWidth(BORDER_LINE_WIDTH_PT)
    c.setStrokeGray(BORDER_GRAY)
    x_pt = measure.to_points(left)
    y_pt = _transform_y(measure, top, height)
    w_pt = measure.to_points(width)
    h_pt = measure.to_points(height)
    if config.rounded_borders:
        c.roundRect(x_pt, y_pt, w_pt, h_pt, measure.to_points(BORDER_RADIUS_MM), stroke=1, fill=0)
    else:
        c.rect(x_pt, y_pt, w_pt, h_pt, stroke=1, fill=0)
    c.restoreState()


def _draw_caption_line(
    c: canvas.Canvas,
    line: CaptionLine,
    center: float,
    baseline: float,
    font_size: float,
    measure: MeasurementProvider,
) -> None:
    """Draw one caption line centered on `center`: bold label, then italic description."""
    label = f"{line.label} " if line.label and line.description else line.label
    label_width = measure.text_width(label, font_size, bold=True) if label else 0.0
    description_width = measure.text_width(line.description, font_size, italic=True) if line.description else 0.0

    x = center - (label_width + description_width) / 2
    y_pt = measure.to_points(measure.page_height - baseline)
    c.setFillColorRGB(0, 0, 0)
    if label:
        c.setFont(font_name(bold=True), font_size)
        c.drawString(measure.to_points(x), y_pt, label)
    if line.description:
        c.setFont(font_name(italic=True), font_size)
        c.drawString(measure.to_points(x + label_width), y_pt, line.description)


def _transform_y(measure: MeasurementProvider, top: float, height: float) -> float:
    """
    Convert a top-down layout Y to the bottom-up PDF Y of the element's
    lower edge, in points.
    """
    return measure.to_points(measure.page_height - top - height)
