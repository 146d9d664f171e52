"""Core data models shared by every stage of the report pipeline."""

from .models import PhotoRecord, ReportMetadata

__all__ = ["PhotoRecord", "ReportMetadata"]
