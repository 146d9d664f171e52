"""
Module: layout.measurement

Purpose:
    Format-specific measurement providers for the shared layout engine.
    A provider supplies everything that differs between the fixed-page
    (PDF) and flow-document (DOCX) outputs: the unit system, page
    geometry, font metrics, the cell box table per column count, caption
    font sizes and line heights, paddings, and the header block.

    The paginator only ever talks to a MeasurementProvider, so the
    grouping/row/page decisions are made by one algorithm for both
    formats.

Key Classes:
    - CellBox: Bounding box reserved for one image
    - ColumnMetrics: Geometry for one column configuration
    - HeaderLine / HeaderBlock: First-page header content and height
    - MeasurementProvider: Abstract provider
    - PdfMeasurement: Millimetres on an A4 page
    - DocxMeasurement: 96-dpi pixels on an A4 page

Dependencies:
    - reportlab.pdfbase.pdfmetrics: Standard font metrics (Helvetica is
      metric-compatible with Arial, used by the DOCX output)
    - reportlab.lib.utils: simpleSplit for comment wrapping

Used By:
    - layout.paginator: Row and page geometry
    - output.pdf_renderer / output.docx_renderer: Drawing constants
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from photo_report.core.models import ReportMetadata

from .config import LayoutStyle

REPORT_TITLE = "Relatório Fotográfico"
PROCESS_PREFIX = "Processo nº"
COMMENTS_LABEL = "Comentários:"

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"
FONT_BOLD_ITALIC = "Helvetica-BoldOblique"

POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4
A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0


def font_name(*, bold: bool = False, italic: bool = False) -> str:
    """Standard font name for a style combination."""
    if bold and italic:
        return FONT_BOLD_ITALIC
    if bold:
        return FONT_BOLD
    if italic:
        return FONT_ITALIC
    return FONT_REGULAR


@dataclass(frozen=True)
class CellBox:
    """
    Bounding box reserved for one image.

    Attributes:
        width: Box width
        height: Box height (maximum height when floating)
        floating: Image is scaled to the box width and the row height
            follows the image (single column)
    """

    width: float
    height: float
    floating: bool = False


@dataclass(frozen=True)
class ColumnMetrics:
    """
    Geometry for one column configuration, in provider units.

    Attributes:
        box: Image cell box
        column_gap: Horizontal gap between cells
        caption_width: Width available to caption text
        font_size: Caption font size in points
        line_height: Height of one caption line
        caption_gap: Space between image block and captions counted in
            the row height
        caption_offset: Distance from the image block bottom to the first
            caption baseline
        padding: Extra margin on each side of the cell in bordered style
        row_gap: Space after each row
        border_outset: Horizontal extension of the border beyond the box
    """

    box: CellBox
    column_gap: float
    caption_width: float
    font_size: float
    line_height: float
    caption_gap: float
    caption_offset: float
    padding: float
    row_gap: float
    border_outset: float = 0.0


@dataclass(frozen=True)
class HeaderLine:
    """
    One line (or paragraph) of the first-page header.

    Attributes:
        text: Text to render
        font_size: Font size in points
        bold: Bold weight
        align: "center" or "left"
        baseline: Baseline offset below the cursor (fixed-page output)
        advance: Vertical space consumed by the line
        space_after: Paragraph spacing after the line (flow output)
    """

    text: str
    font_size: float
    bold: bool = False
    align: str = "center"
    baseline: float = 0.0
    advance: float = 0.0
    space_after: float = 0.0


@dataclass(frozen=True)
class HeaderBlock:
    """
    Header content and the height it occupies on the first page.

    Attributes:
        lines: Header lines in order
        comment_lines: Comment lines (empty when there are no comments)
        trailing_space: Space after the last line
    """

    lines: Tuple[HeaderLine, ...]
    comment_lines: Tuple[HeaderLine, ...] = ()
    trailing_space: float = 0.0

    @property
    def height(self) -> float:
        used = sum(line.advance for line in self.lines)
        used += sum(line.advance for line in self.comment_lines)
        return used + self.trailing_space

    @property
    def has_comments(self) -> bool:
        return bool(self.comment_lines)


class MeasurementProvider(ABC):
    """
    Abstract measurement provider for one output format.

    Subclasses declare their page geometry and COLUMN_METRICS table and
    build the header block; text measurement is shared.
    """

    name: str = ""
    unit: str = ""
    points_per_unit: float = 1.0
    fit_ndigits: Optional[int] = None

    page_width: float = 0.0
    page_height: float = 0.0
    margin_top: float = 0.0
    margin_bottom: float = 0.0
    margin_left: float = 0.0
    margin_right: float = 0.0

    COLUMN_METRICS: Dict[int, ColumnMetrics] = {}

    @property
    def content_width(self) -> float:
        """Width available for content (excluding margins)."""
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_bottom(self) -> float:
        """Lowest y (from page top) that content may reach."""
        return self.page_height - self.margin_bottom

    @property
    def content_height(self) -> float:
        """Height available for content (excluding margins)."""
        return self.content_bottom - self.margin_top

    def metrics(self, columns: int) -> ColumnMetrics:
        try:
            return self.COLUMN_METRICS[columns]
        except KeyError:
            raise ValueError(f"{self.name} layout has no metrics for {columns} columns") from None

    def padding(self, columns: int, style: LayoutStyle) -> float:
        """Cell padding; plain cells reserve no room for a rule."""
        if style is LayoutStyle.BORDERED:
            return self.metrics(columns).padding
        return 0.0

    def to_points(self, value: float) -> float:
        return value * self.points_per_unit

    def from_points(self, value: float) -> float:
        return value / self.points_per_unit

    def text_width(self, text: str, font_size: float, *, bold: bool = False, italic: bool = False) -> float:
        """Width of a single run of text in provider units."""
        return self.from_points(stringWidth(text, font_name(bold=bold, italic=italic), font_size))

    def wrap_text(self, text: str, font_size: float, width: float, *, bold: bool = False) -> List[str]:
        """Wrap plain text at word boundaries to the given width."""
        lines = simpleSplit(text, font_name(bold=bold), font_size, self.to_points(width))
        return lines or [""]

    def leading(self, font_size: float, factor: float = 1.15) -> float:
        """Line height for a font size, in provider units."""
        return self.from_points(font_size * factor)

    @abstractmethod
    def header_block(self, metadata: ReportMetadata) -> HeaderBlock:
        """Header content and height for the first page."""

    def _centered(
        self,
        text: str,
        font_size: float,
        bold: bool,
        *,
        advance: float,
        baseline: float = 0.0,
        space_after: float = 0.0,
    ) -> HeaderLine:
        """Centered header entry; a wrapped entry grows by one leading per extra line."""
        wrapped = self.wrap_text(text, font_size, self.content_width, bold=bold)
        extra = self.leading(font_size) * (len(wrapped) - 1)
        return HeaderLine(
            text=text,
            font_size=font_size,
            bold=bold,
            align="center",
            baseline=baseline,
            advance=advance + extra,
            space_after=space_after,
        )


class PdfMeasurement(MeasurementProvider):
    """
    Fixed-page measurements: millimetres on an A4 page.

    Example:
        >>> PdfMeasurement().content_width
        170.0
    """

    name = "pdf"
    unit = "mm"
    points_per_unit = POINTS_PER_INCH / MM_PER_INCH
    fit_ndigits = 2

    page_width = A4_WIDTH_MM
    page_height = A4_HEIGHT_MM
    margin_top = 20.0
    margin_bottom = 20.0
    margin_left = 20.0
    margin_right = 20.0

    COMMENT_LINE_HEIGHT = 4.0

    COLUMN_METRICS = {
        1: ColumnMetrics(
            box=CellBox(120.0, 180.0, floating=True),
            column_gap=0.0,
            caption_width=170.0,
            font_size=10,
            line_height=5.0,
            caption_gap=7.0,
            caption_offset=6.0,
            padding=5.0,
            row_gap=4.0,
            border_outset=10.0,
        ),
        2: ColumnMetrics(
            box=CellBox(80.0, 60.0),
            column_gap=10.0,
            caption_width=80.0,
            font_size=9,
            line_height=4.0,
            caption_gap=8.0,
            caption_offset=5.0,
            padding=4.0,
            row_gap=3.0,
        ),
        3: ColumnMetrics(
            box=CellBox(53.0, 42.0),
            column_gap=5.0,
            caption_width=53.0,
            font_size=8,
            line_height=3.5,
            caption_gap=8.0,
            caption_offset=5.0,
            padding=3.0,
            row_gap=3.0,
        ),
    }

    def header_block(self, metadata: ReportMetadata) -> HeaderBlock:
        lines: List[HeaderLine] = []
        lines.append(self._centered(f"{REPORT_TITLE} - {metadata.date}", 16, True, baseline=5.0, advance=12.0))
        lines.append(self._centered(metadata.institution_name, 14, True, advance=8.0))
        if metadata.address:
            lines.append(self._centered(metadata.address, 12, False, advance=8.0))
        lines.append(self._centered(metadata.motif, 12, False, advance=8.0))
        lines.append(self._centered(f"{PROCESS_PREFIX} {metadata.process_number}", 12, True, advance=15.0))

        if not metadata.has_comments:
            return HeaderBlock(lines=tuple(lines), trailing_space=5.0)

        lines.append(HeaderLine(COMMENTS_LABEL, 10, bold=True, align="left", advance=5.0))
        comment_lines = [
            HeaderLine(text, 9, align="left", advance=self.COMMENT_LINE_HEIGHT)
            for paragraph in metadata.comments.strip().splitlines()
            for text in self.wrap_text(paragraph, 9, self.content_width)
        ]
        return HeaderBlock(lines=tuple(lines), comment_lines=tuple(comment_lines), trailing_space=8.0)


class DocxMeasurement(MeasurementProvider):
    """
    Flow-document measurements: 96-dpi pixels on an A4 page.

    Word paginates the document itself; these values estimate where its
    page breaks fall so the layout result reports comparable pages.

    Example:
        >>> round(DocxMeasurement().margin_top, 1)
        66.7
    """

    name = "docx"
    unit = "px"
    points_per_unit = POINTS_PER_INCH / 96.0
    fit_ndigits = None

    page_width = A4_WIDTH_MM / MM_PER_INCH * 96.0
    page_height = A4_HEIGHT_MM / MM_PER_INCH * 96.0
    # Section margins are 1000/1200 twips
    margin_top = 1000 / 15.0
    margin_bottom = 1000 / 15.0
    margin_left = 1200 / 15.0
    margin_right = 1200 / 15.0

    COLUMN_METRICS = {
        1: ColumnMetrics(
            box=CellBox(500.0, 800.0, floating=True),
            column_gap=0.0,
            caption_width=600.0,
            font_size=10,
            line_height=15.3,
            caption_gap=8.0,
            caption_offset=0.0,
            padding=13.3,
            row_gap=20.0,
        ),
        2: ColumnMetrics(
            box=CellBox(290.0, 220.0),
            column_gap=0.0,
            caption_width=290.0,
            font_size=10,
            line_height=15.3,
            caption_gap=16.0,
            caption_offset=0.0,
            padding=2.0,
            row_gap=20.0,
        ),
        3: ColumnMetrics(
            box=CellBox(190.0, 150.0),
            column_gap=0.0,
            caption_width=190.0,
            font_size=9,
            line_height=13.8,
            caption_gap=16.0,
            caption_offset=0.0,
            padding=2.0,
            row_gap=20.0,
        ),
    }

    def header_block(self, metadata: ReportMetadata) -> HeaderBlock:
        lines: List[HeaderLine] = []
        for text, size, bold, after in self._header_paragraphs(metadata):
            lines.append(self._centered(
                text, size, bold,
                advance=self.leading(size) + after,
                space_after=after,
            ))

        if not metadata.has_comments:
            return HeaderBlock(lines=tuple(lines), trailing_space=self.leading(10) + 8.0)

        lines.append(HeaderLine(
            COMMENTS_LABEL, 10, bold=True, align="left",
            advance=self.leading(10) + 4.0, space_after=4.0,
        ))
        comment_lines = []
        for paragraph in metadata.comments.split("\n"):
            wrapped = self.wrap_text(paragraph, 9, self.content_width)
            comment_lines.append(HeaderLine(
                paragraph, 9, align="left",
                advance=self.leading(9) * len(wrapped) + 4.0, space_after=4.0,
            ))
        return HeaderBlock(
            lines=tuple(lines),
            comment_lines=tuple(comment_lines),
            trailing_space=self.leading(10) + 8.0,
        )

    @staticmethod
    def _header_paragraphs(metadata: ReportMetadata) -> List[Tuple[str, float, bool, float]]:
        """(text, font size, bold, spacing after in px) per header paragraph."""
        paragraphs = [
            (f"{REPORT_TITLE} - {metadata.date}", 16, True, 8.0),
            (metadata.institution_name, 14, True, 4.0),
        ]
        if metadata.address:
            paragraphs.append((metadata.address, 12, False, 4.0))
        paragraphs.append((metadata.motif, 12, False, 4.0))
        paragraphs.append((f"{PROCESS_PREFIX} {metadata.process_number}", 12, True, 13.3))
        return paragraphs


def provider_for(format_name: str) -> MeasurementProvider:
    """
    Measurement provider for an output format name.

    Raises:
        ValueError: If the format is unknown
    """
    providers = {"pdf": PdfMeasurement, "docx": DocxMeasurement}
    try:
        return providers[format_name]()
    except KeyError:
        raise ValueError(f"Unknown output format: {format_name!r}") from None
