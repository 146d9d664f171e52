"""
Module: layout.fit

Purpose:
    Scale image dimensions to fit inside a bounding box while preserving
    aspect ratio.

Key Functions:
    - fit_dimensions(): Fit (width, height) inside (max_width, max_height)
"""

from __future__ import annotations

from typing import NamedTuple, Optional


class FitSize(NamedTuple):
    width: float
    height: float


def fit_dimensions(
    width: float,
    height: float,
    max_width: float,
    max_height: float,
    ndigits: Optional[int] = None,
) -> FitSize:
    """
    Fit a source size inside a box, preserving aspect ratio.

    The scale factor is min(max_width / width, max_height / height), so
    small images are scaled up to touch the box as well.

    Args:
        width: Source width
        height: Source height
        max_width: Box width
        max_height: Box height
        ndigits: Rounding applied to both results (None rounds to int)

    Returns:
        FitSize; (0, 0) when either source dimension is zero

    Example:
        >>> fit_dimensions(1600, 1200, 80, 80)
        FitSize(width=80, height=60)
    """
    if width <= 0 or height <= 0:
        return FitSize(0, 0)

    ratio = min(max_width / width, max_height / height)
    fitted_width = min(round(width * ratio, ndigits), max_width)
    fitted_height = min(round(height * ratio, ndigits), max_height)
    return FitSize(fitted_width, fitted_height)
