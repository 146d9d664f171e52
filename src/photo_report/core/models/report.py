"""
Module: core.models.report

Purpose:
    Input records for a single report generation request: the free-text
    report metadata and the ordered photo records. Both are read-only
    inside the rendering pipeline.

Key Classes:
    - ReportMetadata: Header fields printed on the first page
    - PhotoRecord: One source photo with caption and rotation

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - layout.composer: Requests normalization per photo
    - layout.measurement: Header block sizing
    - output renderers: Header drawing
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

# Rotations accepted by the normalizer, clockwise degrees
VALID_ROTATIONS = (0, 90, 180, 270)

PhotoSource = Union[bytes, Path]


@dataclass(frozen=True)
class ReportMetadata:
    """
    Report header fields (immutable).

    Attributes:
        institution_name: Name of the inspected institution
        motif: Reason for the report
        process_number: Administrative process number
        address: Optional street address (omitted from header when empty)
        date: Report date, already formatted for display (DD/MM/YYYY)
        comments: Optional free-text comments, may contain newlines

    Example:
        >>> meta = ReportMetadata("Escola Estadual", "Vistoria", "123/2024")
        >>> meta.has_comments
        False
    """

    institution_name: str
    motif: str
    process_number: str
    address: str = ""
    date: str = ""
    comments: str = ""

    @property
    def has_comments(self) -> bool:
        """True when the comments section should be rendered."""
        return bool(self.comments and self.comments.strip())


@dataclass(frozen=True)
class PhotoRecord:
    """
    One photo supplied by the selection step.

    Position in the photo list defines the figure number; the id is
    stable across reordering.

    Attributes:
        id: Stable identifier
        source: Encoded image bytes or path to an image file
        description: Caption text (may be empty)
        rotation: Clockwise rotation in degrees, one of 0/90/180/270

    Example:
        >>> PhotoRecord("a1", b"...", rotation=-90).rotation
        270
    """

    id: str
    source: PhotoSource
    description: str = ""
    rotation: int = 0

    def __post_init__(self) -> None:
        """Normalize and validate rotation on construction."""
        if isinstance(self.source, str):
            object.__setattr__(self, "source", Path(self.source))
        normalized = int(self.rotation) % 360
        if normalized not in VALID_ROTATIONS:
            raise ValueError(
                f"rotation must be a multiple of 90 degrees: {self.rotation}"
            )
        object.__setattr__(self, "rotation", normalized)
