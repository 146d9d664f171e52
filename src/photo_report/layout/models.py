"""
Module: layout.models

Purpose:
    Data models for report layout.
    Immutable dataclasses representing figures, placed cells, rows and pages.

Key Classes:
    - Figure: Normalized photo with its permanent number
    - FigureCell: Figure sized for one cell of a row
    - RowPlan: One row of cells placed on a page
    - PagePlan: Complete page layout
    - LayoutResult: Final layout output

Dependencies:
    - dataclasses (std)
    - images.normalizer: NormalizedImage
    - layout.captions: CaptionBlock
    - layout.measurement: HeaderBlock

Used By:
    - layout.composer: Creates Figures
    - layout.paginator: Creates RowPlans and PagePlans
    - output renderers: Draw the plan
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from photo_report.images.normalizer import NormalizedImage

from .captions import CaptionBlock
from .measurement import HeaderBlock


@dataclass(frozen=True)
class Figure:
    """
    Normalized photo ready for layout (immutable).

    Attributes:
        number: 1-based figure number from the photo's position in the
            input list (kept even when earlier photos were skipped)
        photo_id: Identifier of the source PhotoRecord
        description: Caption description, possibly empty
        image: Normalized JPEG and its final pixel size
    """

    number: int
    photo_id: str
    description: str
    image: NormalizedImage


@dataclass(frozen=True)
class FigureCell:
    """
    A figure sized for one cell of a row.

    Attributes:
        figure: The Figure shown in the cell
        column: 0-based column within the row
        image_width: Fitted image width in layout units
        image_height: Fitted image height in layout units
        caption: Wrapped caption
    """

    figure: Figure
    column: int
    image_width: float
    image_height: float
    caption: CaptionBlock

    @property
    def number(self) -> int:
        return self.figure.number


@dataclass(frozen=True)
class RowPlan:
    """
    One row of figure cells positioned on a page.

    Attributes:
        cells: Cells left to right (fewer than columns on a short last row)
        top: Y offset from page top in layout units
        height: Total row height including captions and padding
        image_block_height: Height reserved for images
        caption_height: Tallest caption in the row

    Example:
        >>> row = RowPlan(cells=(cell,), top=50, height=80, image_block_height=60, caption_height=8)
        >>> row.bottom
        130
    """

    cells: Tuple[FigureCell, ...]
    top: float
    height: float
    image_block_height: float
    caption_height: float

    @property
    def bottom(self) -> float:
        """Bottom Y coordinate (top + height)."""
        return self.top + self.height

    @property
    def figure_numbers(self) -> Tuple[int, ...]:
        return tuple(cell.number for cell in self.cells)


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single page.

    Attributes:
        index: Page number (0-indexed)
        rows: Rows on this page, top to bottom
        is_first: Page carries the metadata header and comments
        height_used: Vertical space used below the top margin
    """

    index: int
    rows: Tuple[RowPlan, ...]
    is_first: bool = False
    height_used: float = 0.0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def figure_numbers(self) -> Tuple[int, ...]:
        return tuple(number for row in self.rows for number in row.figure_numbers)


@dataclass(frozen=True)
class LayoutResult:
    """
    Final layout output with diagnostics.

    Attributes:
        format_name: Output format the layout was measured for
        unit: Layout unit ("mm" or "px")
        pages: Tuple of PagePlans
        header: Header block placed on the first page
        warnings: Warning messages (e.g. rows taller than a page)

    Example:
        >>> result = paginate(figures, LayoutConfig(columns=2), PdfMeasurement(), metadata)
        >>> result.page_count
        2
    """

    format_name: str
    unit: str
    pages: Tuple[PagePlan, ...]
    header: Optional[HeaderBlock] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        """Number of pages in layout."""
        return len(self.pages)

    @property
    def total_rows(self) -> int:
        return sum(page.row_count for page in self.pages)

    @property
    def figure_numbers(self) -> Tuple[int, ...]:
        """Figure numbers in rendering order."""
        return tuple(number for page in self.pages for number in page.figure_numbers)

    @property
    def figure_numbers_by_page(self) -> Dict[int, Tuple[int, ...]]:
        return {page.index: page.figure_numbers for page in self.pages}
