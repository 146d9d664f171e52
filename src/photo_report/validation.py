"""
Module: validation

Purpose:
    Checks run by the caller before a generation starts: required header
    fields and at least one photo. The messages are the ones shown to the
    person filling in the report.

Key Functions:
    - validate_request(): Collect every validation problem
    - format_report_date(): "YYYY-MM-DD" -> "DD/MM/YYYY"

Key Classes:
    - ValidationError: Raised with every message at once
"""

from __future__ import annotations

import re
from typing import List, Sequence

from photo_report.core.models import PhotoRecord, ReportMetadata

# (attribute, label shown to the user)
REQUIRED_FIELDS = (
    ("institution_name", "Nome da instituição escolar"),
    ("motif", "Motivo"),
    ("process_number", "Processo nº"),
    ("date", "Data do Relatório"),
)
NO_PHOTOS_MESSAGE = "É necessário adicionar pelo menos uma imagem ao relatório."

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationError(Exception):
    """
    Request failed validation; generation must not start.

    Attributes:
        messages: One message per problem, in form order
    """

    def __init__(self, messages: Sequence[str]) -> None:
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


def validate_request(metadata: ReportMetadata, photos: Sequence[PhotoRecord]) -> None:
    """
    Validate a generation request.

    Missing fields are reported together; the photo check only runs
    once every required field is present.

    Raises:
        ValidationError: With every problem found

    Example:
        >>> validate_request(ReportMetadata("", "Vistoria", "1", date="2024-05-01"), photos)
        Traceback (most recent call last):
        ...
        ValidationError: O campo "Nome da instituição escolar" é obrigatório.
    """
    messages: List[str] = [
        f'O campo "{label}" é obrigatório.'
        for attribute, label in REQUIRED_FIELDS
        if not (getattr(metadata, attribute) or "").strip()
    ]
    if messages:
        raise ValidationError(messages)

    if not photos:
        raise ValidationError([NO_PHOTOS_MESSAGE])


def format_report_date(value: str) -> str:
    """
    Format an ISO date for the report header.

    Values not in YYYY-MM-DD form are returned unchanged.

    Example:
        >>> format_report_date("2024-05-01")
        '01/05/2024'
    """
    value = (value or "").strip()
    if not _ISO_DATE.match(value):
        return value
    return "/".join(reversed(value.split("-")))
