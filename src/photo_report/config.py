"""
Module: config

Purpose:
    Configuration dataclass for report generation. Immutable configuration
    with validation on construction.

Key Classes:
    - ReportConfig: Output location, layout and normalization options

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - controller: Report generation
    - cli: Built from command-line arguments
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from photo_report.layout.config import LayoutConfig

SUPPORTED_FORMATS = ("pdf", "docx")


@dataclass(frozen=True)
class ReportConfig:
    """
    Configuration for generating a report (immutable).

    Attributes:
        output_dir: Directory receiving the artifacts (created if missing)
        layout: Column count and cell style
        formats: Output formats to produce, subset of ("pdf", "docx")
        prefer_isolated: Normalize images in worker processes when the
            platform supports them
        max_workers: Worker process count (None picks from CPU count)
        write_metadata: Write report_metadata.json next to the artifacts

    Example:
        >>> config = ReportConfig(output_dir=Path("out"), formats=("pdf",))
        >>> config.layout.columns
        1
    """

    output_dir: Path
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    formats: Tuple[str, ...] = SUPPORTED_FORMATS
    prefer_isolated: bool = True
    max_workers: Optional[int] = None
    write_metadata: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        formats = tuple(f.lower() for f in self.formats)
        if not formats:
            raise ValueError("At least one output format is required")
        unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported output formats: {unknown}")
        if len(set(formats)) != len(formats):
            raise ValueError(f"Duplicate output formats: {list(formats)}")
        object.__setattr__(self, "formats", formats)
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive: {self.max_workers}")
