"""
Module: output

Purpose:
    Document assembly for photo reports.
    Converts a LayoutResult into PDF (ReportLab) or DOCX (python-docx)
    bytes and names the resulting artifacts.

Key Functions:
    - render_to_pdf(): Render layout to PDF
    - render_to_docx(): Render layout to DOCX
    - build_filename(): Artifact file name

Dependencies:
    - reportlab: PDF generation
    - python-docx: DOCX generation
    - layout.models: LayoutResult

Used By:
    - controller: Pipeline orchestration
"""

from .docx_renderer import render_to_docx
from .naming import FALLBACK_NAME, REPORT_LABEL, build_filename, sanitize_institution_name
from .pdf_renderer import render_to_pdf

__all__ = [
    "render_to_pdf",
    "render_to_docx",
    "build_filename",
    "sanitize_institution_name",
    "REPORT_LABEL",
    "FALLBACK_NAME",
]
