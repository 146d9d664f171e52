"""
Unit tests for normalization strategies and strategy selection.
"""

import pytest

from photo_report.images import (
    ImageDecodeError,
    ProcessPoolNormalizer,
    SynchronousNormalizer,
    create_normalizer,
    provider,
    supports_isolated_workers,
)


class TestSynchronousNormalizer:
    """In-process strategy honors the submit/result contract."""

    def test_submit_returns_completed_request(self, sync_normalizer, image_bytes):
        # Act
        request = sync_normalizer.submit(image_bytes((200, 100)), 90)

        # Assert
        assert request.done
        assert sync_normalizer.result(request).size == (100, 200)
        assert len(sync_normalizer.requests) == 0

    def test_decode_failure_raised_from_result_not_submit(self, sync_normalizer):
        request = sync_normalizer.submit(b"broken", 0)

        with pytest.raises(ImageDecodeError):
            sync_normalizer.result(request)

    def test_failure_does_not_affect_other_requests(self, sync_normalizer, image_bytes):
        bad = sync_normalizer.submit(b"broken")
        good = sync_normalizer.submit(image_bytes((50, 40)))

        assert sync_normalizer.result(good).size == (50, 40)
        with pytest.raises(ImageDecodeError):
            sync_normalizer.result(bad)

    def test_normalize_shortcut(self, sync_normalizer, image_bytes):
        assert sync_normalizer.normalize(image_bytes((30, 20)), 270).size == (20, 30)

    def test_each_normalizer_owns_its_table(self):
        assert SynchronousNormalizer().requests is not SynchronousNormalizer().requests


class TestCreateNormalizer:
    """Strategy selection happens once through the capability probe."""

    def test_synchronous_when_isolation_not_preferred(self):
        normalizer = create_normalizer(prefer_isolated=False)

        assert isinstance(normalizer, SynchronousNormalizer)
        assert normalizer.name == "synchronous"

    def test_falls_back_when_probe_fails(self, monkeypatch):
        # Arrange
        monkeypatch.setattr(provider, "supports_isolated_workers", lambda: False)

        # Act
        normalizer = create_normalizer(prefer_isolated=True)

        # Assert
        assert isinstance(normalizer, SynchronousNormalizer)

    def test_isolated_when_probe_succeeds(self, monkeypatch):
        monkeypatch.setattr(provider, "supports_isolated_workers", lambda: True)

        with create_normalizer(prefer_isolated=True, max_workers=2) as normalizer:
            assert isinstance(normalizer, ProcessPoolNormalizer)
            assert normalizer.max_workers == 2


@pytest.mark.skipif(not supports_isolated_workers(), reason="worker processes unavailable")
class TestProcessPoolNormalizer:
    """Isolated strategy in real worker processes."""

    def test_results_awaited_by_request(self, image_bytes):
        # Arrange
        with ProcessPoolNormalizer(max_workers=2) as normalizer:
            requests = [
                normalizer.submit(image_bytes((200, 100)), 0),
                normalizer.submit(image_bytes((200, 100)), 90),
                normalizer.submit(image_bytes((120, 60)), 180),
            ]

            # Act
            sizes = [normalizer.result(r).size for r in requests]

            # Assert
            assert sizes == [(200, 100), (100, 200), (120, 60)]
            assert len(normalizer.requests) == 0

    def test_decode_failure_crosses_process_boundary(self):
        with ProcessPoolNormalizer(max_workers=1) as normalizer:
            request = normalizer.submit(b"broken")

            with pytest.raises(ImageDecodeError):
                normalizer.result(request)

    def test_close_without_submit_is_noop(self):
        normalizer = ProcessPoolNormalizer(max_workers=1)

        normalizer.close()
        normalizer.close()
