"""
Module: layout

Purpose:
    Page layout for photo reports.
    Converts normalized photos into numbered figures arranged in rows and
    pages, measured for a specific output format.

Key Functions:
    - compose_figures(): Normalize photos into numbered figures
    - paginate(): Arrange figures onto pages
    - fit_dimensions(): Aspect-preserving fit
    - compose_caption(): Caption wrapping

Key Classes:
    - LayoutConfig: Column count and cell style
    - MeasurementProvider: Format-specific geometry and font metrics
    - LayoutResult: Pages, rows and cells

Dependencies:
    - reportlab: Font metrics for caption measurement
    - images: Normalization strategies

Used By:
    - controller: Report generation
    - output renderers
"""

from .captions import CaptionBlock, CaptionLine, caption_label, compose_caption
from .composer import CompositionResult, compose_figures
from .config import LayoutConfig, LayoutStyle, SUPPORTED_COLUMNS
from .fit import FitSize, fit_dimensions
from .measurement import (
    DocxMeasurement,
    HeaderBlock,
    HeaderLine,
    MeasurementProvider,
    PdfMeasurement,
    provider_for,
)
from .models import Figure, FigureCell, LayoutResult, PagePlan, RowPlan
from .paginator import build_row, paginate

__all__ = [
    # Config
    "LayoutConfig",
    "LayoutStyle",
    "SUPPORTED_COLUMNS",
    # Models
    "Figure",
    "FigureCell",
    "RowPlan",
    "PagePlan",
    "LayoutResult",
    "CaptionBlock",
    "CaptionLine",
    "CompositionResult",
    "FitSize",
    # Measurement
    "MeasurementProvider",
    "PdfMeasurement",
    "DocxMeasurement",
    "HeaderBlock",
    "HeaderLine",
    "provider_for",
    # Functions
    "caption_label",
    "compose_caption",
    "compose_figures",
    "fit_dimensions",
    "build_row",
    "paginate",
]
