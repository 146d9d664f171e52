"""
Module: images

Purpose:
    Source photo normalization for the report pipeline: decoding,
    downscaling, rotation and JPEG re-encoding, executed through one of
    two interchangeable strategies.

Key Classes:
    - ImageNormalizer: Abstract normalization capability
    - ProcessPoolNormalizer: Worker-process strategy
    - SynchronousNormalizer: In-process fallback
    - NormalizedImage: Encoded result with final dimensions
    - ImageDecodeError: Per-image recoverable failure

Key Functions:
    - normalize_image(): Normalize one photo
    - create_normalizer(): Probe and select a strategy

Dependencies:
    - PIL: Image manipulation
    - concurrent.futures: Worker processes

Used By:
    - layout.composer: Figure composition
    - controller: Session lifecycle
"""

from .normalizer import (
    ImageDecodeError,
    MAX_DIMENSION,
    NormalizedImage,
    normalize_image,
    scaled_dimensions,
)
from .provider import (
    ImageNormalizer,
    ProcessPoolNormalizer,
    SynchronousNormalizer,
    create_normalizer,
    supports_isolated_workers,
)
from .requests import NormalizationRequest, RequestTable

__all__ = [
    "ImageDecodeError",
    "MAX_DIMENSION",
    "NormalizedImage",
    "normalize_image",
    "scaled_dimensions",
    "ImageNormalizer",
    "ProcessPoolNormalizer",
    "SynchronousNormalizer",
    "create_normalizer",
    "supports_isolated_workers",
    "NormalizationRequest",
    "RequestTable",
]
