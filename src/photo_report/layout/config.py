"""
Module: layout.config

Purpose:
    Configuration for the layout engine: column count and cell style.
    Page geometry lives in the format-specific measurement providers.

Key Classes:
    - LayoutStyle: Plain or bordered cells
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - layout.paginator: Grouping and row geometry
    - output renderers: Border drawing
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SUPPORTED_COLUMNS = (1, 2, 3)


class LayoutStyle(str, Enum):
    """Cell style: plain cells or a visible rule around each cell."""

    PLAIN = "plain"
    BORDERED = "bordered"


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for figure layout (immutable).

    Attributes:
        columns: Figures per row, 1 to 3
        style: Plain or bordered cells
        rounded_borders: Bordered cells use a rounded rule in fixed-page
            output (square when False)

    Example:
        >>> config = LayoutConfig(columns=3, style="bordered")
        >>> config.is_bordered
        True
    """

    columns: int = 1
    style: LayoutStyle = LayoutStyle.PLAIN
    rounded_borders: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.columns not in SUPPORTED_COLUMNS:
            raise ValueError(f"columns must be one of {SUPPORTED_COLUMNS}: {self.columns}")
        if not isinstance(self.style, LayoutStyle):
            try:
                object.__setattr__(self, "style", LayoutStyle(self.style))
            except ValueError:
                raise ValueError(f"Unknown layout style: {self.style!r}") from None

    @property
    def is_bordered(self) -> bool:
        return self.style is LayoutStyle.BORDERED

    @property
    def is_single_column(self) -> bool:
        return self.columns == 1
