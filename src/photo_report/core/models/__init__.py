"""
Core Models Package

Immutable input records for a report generation request. All models are
frozen dataclasses so they can be handed to worker processes and shared
between the PDF and DOCX passes without copying.
"""

from .report import PhotoRecord, ReportMetadata, VALID_ROTATIONS

__all__ = [
    "PhotoRecord",
    "ReportMetadata",
    "VALID_ROTATIONS",
]
