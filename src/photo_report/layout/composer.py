"""
Module: layout.composer

Purpose:
    Compose Figures from the ordered photo list.
    Requests normalization for every photo up front, then collects the
    results in document order.

Key Functions:
    - compose_figures(): Normalize all photos and number them

Key Classes:
    - CompositionResult: Figures plus skipped photos and warnings

Dependencies:
    - images.provider: ImageNormalizer
    - core.models: PhotoRecord

Used By:
    - controller: Report generation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from photo_report.core.models import PhotoRecord
from photo_report.images import ImageDecodeError, ImageNormalizer, NormalizationRequest

from .models import Figure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositionResult:
    """
    Output of figure composition.

    Attributes:
        figures: Figures in document order
        skipped: Figure numbers whose photo could not be decoded
        warnings: One message per skipped photo
    """

    figures: Tuple[Figure, ...]
    skipped: Tuple[int, ...] = ()
    warnings: List[str] = field(default_factory=list)

    @property
    def figure_numbers(self) -> Tuple[int, ...]:
        return tuple(figure.number for figure in self.figures)


def compose_figures(
    photos: Sequence[PhotoRecord],
    normalizer: ImageNormalizer,
) -> CompositionResult:
    """
    Normalize every photo and turn it into a numbered Figure.

    All requests are submitted before any result is awaited, so an
    isolated normalizer processes photos concurrently. Figure numbers come
    from the photo's position in the list: when photo 3 fails, the result
    holds figures 1, 2, 4, 5.

    Args:
        photos: Photos in document order
        normalizer: Normalization strategy

    Returns:
        CompositionResult with surviving figures and skipped numbers
    """
    submitted: List[Tuple[int, PhotoRecord, NormalizationRequest]] = []
    for number, photo in enumerate(photos, start=1):
        request = normalizer.submit(photo.source, photo.rotation)
        submitted.append((number, photo, request))
    logger.debug(f"Submitted {len(submitted)} normalization requests via {normalizer.name}")

    figures: List[Figure] = []
    skipped: List[int] = []
    warnings: List[str] = []

    for number, photo, request in submitted:
        try:
            image = normalizer.result(request)
        except ImageDecodeError as e:
            message = f"Figure {number} ({photo.id}) skipped: {e}"
            logger.warning(message)
            skipped.append(number)
            warnings.append(message)
            continue

        figures.append(Figure(
            number=number,
            photo_id=photo.id,
            description=photo.description,
            image=image,
        ))

    logger.info(f"Composed {len(figures)} figures ({len(skipped)} skipped)")
    return CompositionResult(figures=tuple(figures), skipped=tuple(skipped), warnings=warnings)
