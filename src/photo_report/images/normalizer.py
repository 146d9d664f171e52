"""
Module: images.normalizer

Purpose:
    Prepare an arbitrary source photo for embedding in a report: decode,
    apply EXIF orientation, flatten transparency onto white, downscale,
    rotate and re-encode as JPEG.

Key Functions:
    - normalize_image(): Full normalization of one photo
    - scaled_dimensions(): Downscaled size before rotation

Key Classes:
    - NormalizedImage: Encoded JPEG plus final pixel dimensions
    - ImageDecodeError: Source could not be decoded

Dependencies:
    - PIL: Decoding, resampling, rotation, JPEG encoding

Used By:
    - images.provider: Executed in worker processes or in-process
"""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

# Neither side of a normalized image exceeds this many pixels
MAX_DIMENSION = 1600
JPEG_QUALITY = 80
BACKGROUND_COLOR = (255, 255, 255)

# Pillow plugins report corrupt data through any of these
_DECODE_ERRORS = (OSError, ValueError, SyntaxError, struct.error, Image.DecompressionBombError)

# Clockwise rotation -> PIL transpose (PIL rotates counter-clockwise)
_CLOCKWISE_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


class ImageDecodeError(Exception):
    """Source photo could not be decoded."""
    pass


@dataclass(frozen=True)
class NormalizedImage:
    """
    Normalized photo ready for embedding (immutable).

    Attributes:
        data: JPEG-encoded bytes
        width: Final width in pixels (after rotation)
        height: Final height in pixels (after rotation)
        rotation: Clockwise rotation that was applied

    Example:
        >>> img = normalize_image(jpeg_bytes, 90)
        >>> img.is_portrait
        True
    """

    data: bytes
    width: int
    height: int
    rotation: int = 0

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        return (self.width, self.height)

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width


def scaled_dimensions(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> Tuple[int, int]:
    """
    Compute the downscaled size of a source image.

    Only shrinks: images already within the bound keep their size.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_dimension: Upper bound for both sides

    Returns:
        (width, height) preserving the source aspect ratio

    Example:
        >>> scaled_dimensions(4000, 3000)
        (1600, 1200)
    """
    if width > max_dimension or height > max_dimension:
        ratio = min(max_dimension / width, max_dimension / height)
        width = max(1, round(width * ratio))
        height = max(1, round(height * ratio))
    return width, height


def normalize_image(
    source: Union[bytes, Path],
    rotation: int = 0,
    *,
    max_dimension: int = MAX_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> NormalizedImage:
    """
    Normalize one source photo.

    Steps:
    1. Decode (bytes or file path) and apply the EXIF orientation tag
    2. Downscale so neither side exceeds max_dimension
    3. Flatten onto an opaque white surface (transparency is dropped)
    4. Rotate clockwise; width/height swap for 90 and 270
    5. Encode as JPEG

    Args:
        source: Encoded image bytes or path to an image file
        rotation: Clockwise rotation, one of 0/90/180/270
        max_dimension: Bound applied to the pre-rotation orientation
        quality: JPEG quality

    Returns:
        NormalizedImage with final dimensions

    Raises:
        ImageDecodeError: If the source cannot be read or decoded
        ValueError: If rotation is not a multiple of 90
    """
    rotation = rotation % 360
    if rotation not in (0, 90, 180, 270):
        raise ValueError(f"rotation must be a multiple of 90 degrees: {rotation}")

    img = _decode(source)
    try:
        img = ImageOps.exif_transpose(img)

        width, height = scaled_dimensions(img.width, img.height, max_dimension)
        if (width, height) != img.size:
            img = img.resize((width, height), Image.Resampling.LANCZOS)

        surface = _flatten(img)

        transpose = _CLOCKWISE_TRANSPOSE.get(rotation)
        if transpose is not None:
            surface = surface.transpose(transpose)

        buf = io.BytesIO()
        surface.save(buf, format="JPEG", quality=quality)
    except _DECODE_ERRORS as e:
        # Truncated data surfaces on first pixel access, not on open
        raise ImageDecodeError(f"Failed to decode image: {e}") from e

    logger.debug(
        f"Normalized image to {surface.width}x{surface.height} "
        f"(rotation={rotation}, {buf.tell()} bytes)"
    )
    return NormalizedImage(
        data=buf.getvalue(),
        width=surface.width,
        height=surface.height,
        rotation=rotation,
    )


def _decode(source: Union[bytes, Path]) -> Image.Image:
    """Open the source image, mapping every read failure to ImageDecodeError."""
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(Path(source))
        img.load()
    except _DECODE_ERRORS as e:
        raise ImageDecodeError(f"Failed to decode image: {e}") from e
    return img


def _flatten(img: Image.Image) -> Image.Image:
    """Composite onto white so the JPEG never carries transparency."""
    if img.mode in ("RGBa", "La"):
        # Premultiplied alpha
        img = img.convert(img.mode.upper())
    if "A" in img.getbands() or "transparency" in img.info:
        rgba = img.convert("RGBA")
        surface = Image.new("RGB", rgba.size, BACKGROUND_COLOR)
        surface.paste(rgba, mask=rgba.getchannel("A"))
        return surface
    if img.mode != "RGB":
        return img.convert("RGB")
    return img
