"""
Module: output.naming

Purpose:
    Artifact file names: "Relatório_fotografico_<institution>.<ext>".

Key Functions:
    - sanitize_institution_name(): Filename-safe institution segment
    - build_filename(): Full artifact file name
"""

from __future__ import annotations

import re

REPORT_LABEL = "Relatório_fotografico"
FALLBACK_NAME = "Instituicao"

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)
_ALPHANUMERIC = re.compile(r"[a-z0-9]", re.IGNORECASE)


def sanitize_institution_name(institution: str) -> str:
    """
    Replace every character outside [A-Za-z0-9] with an underscore.

    Falls back to FALLBACK_NAME when no letter or digit remains.

    Example:
        >>> sanitize_institution_name("Escola São José")
        'Escola_S_o_Jos_'
        >>> sanitize_institution_name("  ")
        'Instituicao'
    """
    institution = institution or ""
    if not _ALPHANUMERIC.search(institution):
        return FALLBACK_NAME
    return _UNSAFE_CHARS.sub("_", institution)


def build_filename(ext: str, institution: str) -> str:
    """
    Artifact file name for an output format.

    Example:
        >>> build_filename("pdf", "Escola Modelo")
        'Relatório_fotografico_Escola_Modelo.pdf'
    """
    ext = ext.lstrip(".").lower()
    return f"{REPORT_LABEL}_{sanitize_institution_name(institution)}.{ext}"
