"""
Module: layout.paginator

Purpose:
    Arrange figures into rows and rows onto pages.
    One algorithm serves both output formats; everything format-specific
    comes from the MeasurementProvider.

Key Functions:
    - paginate(): Main pagination function
    - build_row(): Size the cells of one group

Algorithm:
    1. Split figures into consecutive groups of `columns`
    2. Fit each image in the column's cell box and wrap its caption
    3. Row height = image block + tallest caption + caption gap + padding
    4. Start a new page when the row does not fit below the cursor
    5. Rows are atomic: never split across pages (oversize captions are
       truncated to the lines that fit an empty page)

Dependencies:
    - layout.fit: fit_dimensions
    - layout.captions: compose_caption
    - layout.measurement: MeasurementProvider

Used By:
    - controller: One layout per output format
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from photo_report.core.models import ReportMetadata

from .captions import compose_caption
from .config import LayoutConfig
from .fit import FitSize, fit_dimensions
from .measurement import CellBox, MeasurementProvider
from .models import Figure, FigureCell, LayoutResult, PagePlan, RowPlan

logger = logging.getLogger(__name__)


def paginate(
    figures: Sequence[Figure],
    config: LayoutConfig,
    measure: MeasurementProvider,
    metadata: ReportMetadata,
) -> LayoutResult:
    """
    Arrange figures onto pages in rows of `config.columns`.

    The first page starts below the metadata header. A row that does not
    fit below the cursor moves to a new page as a whole. A row taller
    than an empty page keeps its images and loses trailing caption lines
    until it fits; the truncation is reported in warnings.

    Args:
        figures: Figures in document order
        config: Column count and cell style
        measure: Format-specific measurements
        metadata: Report header fields

    Returns:
        LayoutResult with page plans
    """
    header = measure.header_block(metadata)
    metrics = measure.metrics(config.columns)
    page_top = measure.margin_top
    page_bottom = measure.content_bottom

    pages: List[PagePlan] = []
    warnings: List[str] = []

    current_rows: List[RowPlan] = []
    cursor = page_top + header.height
    page_index = 0

    for group in _group_figures(figures, config.columns):
        row = build_row(group, config, measure, top=cursor)

        # The first page is occupied by the header even before any row
        page_has_content = bool(current_rows) or cursor > page_top
        if cursor + row.height > page_bottom and page_has_content:
            pages.append(_page(page_index, current_rows, cursor, page_top))
            page_index += 1
            current_rows = []
            cursor = page_top
            row = build_row(group, config, measure, top=cursor)

        if cursor + row.height > page_bottom:
            row = _truncate_captions(row, page_bottom - cursor, metrics.line_height)
            message = (
                f"Captions of figures {list(row.figure_numbers)} truncated to "
                f"{row.caption_height:.1f}{measure.unit} to fit page {page_index}"
            )
            logger.warning(message)
            warnings.append(message)

        current_rows.append(row)
        cursor += row.height + metrics.row_gap

    if current_rows or not pages:
        pages.append(_page(page_index, current_rows, cursor, page_top))

    logger.info(
        f"Paginated {len(figures)} figures into {sum(p.row_count for p in pages)} rows "
        f"on {len(pages)} {measure.name} pages"
    )

    return LayoutResult(
        format_name=measure.name,
        unit=measure.unit,
        pages=tuple(pages),
        header=header,
        warnings=warnings,
    )


def build_row(
    group: Sequence[Figure],
    config: LayoutConfig,
    measure: MeasurementProvider,
    top: float = 0.0,
) -> RowPlan:
    """
    Size every cell of one group and compute the row height.

    Empty trailing cells of a short group add nothing to the row.

    Args:
        group: 1 to `columns` figures
        config: Layout configuration
        measure: Format-specific measurements
        top: Y offset of the row on its page

    Returns:
        RowPlan positioned at `top`
    """
    metrics = measure.metrics(config.columns)
    padding = measure.padding(config.columns, config.style)

    cells: List[FigureCell] = []
    for column, figure in enumerate(group):
        size = _fit_cell(figure, metrics.box, measure.fit_ndigits)
        caption = compose_caption(
            figure.number,
            figure.description,
            metrics.caption_width,
            metrics.font_size,
            metrics.line_height,
            measure,
        )
        cells.append(FigureCell(
            figure=figure,
            column=column,
            image_width=size.width,
            image_height=size.height,
            caption=caption,
        ))

    if metrics.box.floating:
        image_block = max(cell.image_height for cell in cells)
    else:
        image_block = metrics.box.height
    caption_height = max(cell.caption.height for cell in cells)
    height = image_block + caption_height + metrics.caption_gap + 2 * padding

    return RowPlan(
        cells=tuple(cells),
        top=top,
        height=height,
        image_block_height=image_block,
        caption_height=caption_height,
    )


def _fit_cell(figure: Figure, box: CellBox, ndigits) -> FitSize:
    """
    Image size inside a cell box.

    Floating boxes fix the width and let the height follow the image,
    capped at the box height.
    """
    width, height = figure.image.size
    if not box.floating:
        return fit_dimensions(width, height, box.width, box.height, ndigits)
    if width <= 0 or height <= 0:
        return FitSize(0, 0)
    scaled_height = round(box.width * height / width, ndigits)
    if scaled_height > box.height:
        return fit_dimensions(width, height, box.width, box.height, ndigits)
    return FitSize(box.width, scaled_height)


def _truncate_captions(row: RowPlan, available: float, line_height: float) -> RowPlan:
    """
    Drop trailing caption lines until the row fits in `available`.

    The image block is never shrunk; every caption keeps at least one line.
    """
    fixed = row.height - row.caption_height
    max_lines = int((available - fixed) // line_height)
    cells = tuple(replace(cell, caption=cell.caption.truncated(max_lines)) for cell in row.cells)
    caption_height = max(cell.caption.height for cell in cells)
    return replace(
        row,
        cells=cells,
        height=fixed + caption_height,
        caption_height=caption_height,
    )


def _group_figures(figures: Sequence[Figure], columns: int) -> List[List[Figure]]:
    """Consecutive groups of `columns` figures; the last may be shorter."""
    return [list(figures[i:i + columns]) for i in range(0, len(figures), columns)]


def _page(index: int, rows: List[RowPlan], cursor: float, page_top: float) -> PagePlan:
    bottom = rows[-1].bottom if rows else cursor
    return PagePlan(
        index=index,
        rows=tuple(rows),
        is_first=index == 0,
        height_used=bottom - page_top,
    )
