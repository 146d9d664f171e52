import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import photo_report
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from photo_report.core.models import PhotoRecord, ReportMetadata  # noqa: E402
from photo_report.images import NormalizedImage, SynchronousNormalizer  # noqa: E402
from photo_report.layout import Figure  # noqa: E402


def encode_image(size=(160, 120), mode="RGB", fmt="JPEG", color="white") -> bytes:
    """Encode a solid image of the given size."""
    img = Image.new(mode, size, color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


# Common test fixtures
@pytest.fixture
def image_bytes():
    """Factory for encoded test images."""
    return encode_image


@pytest.fixture
def metadata():
    """Complete report metadata without comments."""
    return ReportMetadata(
        institution_name="Escola Estadual Modelo",
        motif="Vistoria de manutenção",
        process_number="2024/0001",
        address="Rua das Flores, 100",
        date="01/05/2024",
    )


@pytest.fixture
def photo_factory():
    """Factory for PhotoRecords backed by in-memory JPEGs."""
    def _create(index: int, size=(160, 120), description: str = "", rotation: int = 0, source=None):
        return PhotoRecord(
            id=f"photo-{index}",
            source=source if source is not None else encode_image(size),
            description=description,
            rotation=rotation,
        )
    return _create


@pytest.fixture
def figure_factory():
    """Factory for Figures with a real JPEG of the given pixel size."""
    def _create(number: int, size=(160, 120), description: str = ""):
        return Figure(
            number=number,
            photo_id=f"photo-{number}",
            description=description,
            image=NormalizedImage(data=encode_image(size), width=size[0], height=size[1]),
        )
    return _create


@pytest.fixture
def sync_normalizer():
    normalizer = SynchronousNormalizer()
    yield normalizer
    normalizer.close()
