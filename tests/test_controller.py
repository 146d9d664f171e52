"""
Tests for the report pipeline controller.

Runs the full pipeline in-process and checks the files it leaves behind.
"""

import json
from concurrent.futures.process import BrokenProcessPool
from pathlib import Path

import pytest

from photo_report import controller
from photo_report.config import ReportConfig
from photo_report.controller import (
    FAILURE_MESSAGE,
    METADATA_FILENAME,
    PackagingError,
    ReportSession,
    generate_report,
    generate_with_status,
)
from photo_report.images import SynchronousNormalizer
from photo_report.layout import LayoutConfig


@pytest.fixture
def config(tmp_path):
    return ReportConfig(output_dir=tmp_path / "out", prefer_isolated=False)


@pytest.fixture
def photos(photo_factory):
    return [photo_factory(n, description=f"foto {n}") for n in range(1, 4)]


class TestGenerateReport:

    def test_writes_both_artifacts(self, metadata, photos, config):
        # Act
        result = generate_report(metadata, photos, config)

        # Assert
        assert set(result.artifacts) == {"pdf", "docx"}
        assert result.artifacts["pdf"].name == "Relatório_fotografico_Escola_Estadual_Modelo.pdf"
        assert result.artifacts["docx"].name == "Relatório_fotografico_Escola_Estadual_Modelo.docx"
        for path in result.artifacts.values():
            assert path.exists()
            assert path.parent == config.output_dir
        assert result.artifacts["pdf"].read_bytes().startswith(b"%PDF")
        assert result.figure_numbers == (1, 2, 3)
        assert result.page_counts["pdf"] >= 1

    def test_no_temporary_files_left(self, metadata, photos, config):
        generate_report(metadata, photos, config)

        assert not list(config.output_dir.glob("*.tmp"))

    def test_single_format(self, metadata, photos, tmp_path):
        config = ReportConfig(output_dir=tmp_path, formats=("docx",), prefer_isolated=False)

        result = generate_report(metadata, photos, config)

        assert list(result.artifacts) == ["docx"]
        assert not list(tmp_path.glob("*.pdf"))

    def test_metadata_file(self, metadata, photos, config):
        # Act
        result = generate_report(metadata, photos, config)

        # Assert
        assert result.metadata_path == config.output_dir / METADATA_FILENAME
        data = json.loads(result.metadata_path.read_text(encoding="utf-8"))
        assert data["institution_name"] == "Escola Estadual Modelo"
        assert data["figure_numbers"] == [1, 2, 3]
        assert data["skipped"] == []
        assert data["artifacts"]["pdf"]["unit"] == "mm"
        assert data["artifacts"]["docx"]["unit"] == "px"
        assert data["artifacts"]["pdf"]["pages"][0]["page"] == 1

    def test_metadata_file_disabled(self, metadata, photos, tmp_path):
        config = ReportConfig(output_dir=tmp_path, prefer_isolated=False, write_metadata=False)

        result = generate_report(metadata, photos, config)

        assert result.metadata_path is None
        assert not (tmp_path / METADATA_FILENAME).exists()

    def test_undecodable_photo_skipped(self, metadata, photo_factory, config):
        """The remaining figures keep their own numbers."""
        # Arrange
        photos = [photo_factory(n) for n in range(1, 6)]
        photos[2] = photo_factory(3, source=b"not an image")

        # Act
        result = generate_report(metadata, photos, config)

        # Assert
        assert result.figure_numbers == (1, 2, 4, 5)
        assert result.skipped == (3,)
        assert any("Figure 3" in w for w in result.warnings)

    def test_supplied_normalizer_left_open(self, metadata, photos, config, sync_normalizer):
        generate_report(metadata, photos, config, sync_normalizer)
        result = generate_report(metadata, photos, config, sync_normalizer)

        assert result.figure_count == 3

    def test_render_failure_writes_nothing(self, metadata, photos, config, monkeypatch):
        # Arrange
        def broken_renderer(*args, **kwargs):
            raise RuntimeError("renderer exploded")

        monkeypatch.setitem(controller._RENDERERS, "docx", broken_renderer)

        # Act / Assert
        with pytest.raises(PackagingError, match="DOCX"):
            generate_report(metadata, photos, config)
        assert not config.output_dir.exists() or not any(config.output_dir.iterdir())

    def test_unwritable_output_dir(self, metadata, photos, tmp_path):
        # Arrange
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = ReportConfig(output_dir=blocker, prefer_isolated=False)

        # Act / Assert
        with pytest.raises(PackagingError):
            generate_report(metadata, photos, config)

    def test_corrupt_ppm_skipped(self, metadata, photo_factory, config):
        # Arrange
        corrupt = b"P6\n\xee0 10\n255\n" + bytes(300)
        photos = [photo_factory(1), photo_factory(2, source=corrupt), photo_factory(3)]

        # Act
        status = generate_with_status(metadata, photos, config)

        # Assert
        assert status.ok
        assert status.result.skipped == (2,)
        assert status.result.figure_numbers == (1, 3)

    def test_broken_worker_pool(self, metadata, photos, config, sync_normalizer, monkeypatch):
        # Arrange
        def broken_result(request):
            raise BrokenProcessPool("worker died")

        monkeypatch.setattr(sync_normalizer, "result", broken_result)

        # Act / Assert
        with pytest.raises(PackagingError, match="normalization"):
            generate_report(metadata, photos, config, sync_normalizer)
        assert not config.output_dir.exists()

    def test_failed_move_rolls_back(self, metadata, photos, config, monkeypatch):
        # Arrange
        original_replace = Path.replace
        calls = []

        def flaky_replace(self, target):
            calls.append(target)
            if len(calls) == 2:
                raise OSError("device busy")
            return original_replace(self, target)

        monkeypatch.setattr(Path, "replace", flaky_replace)

        # Act / Assert
        with pytest.raises(PackagingError, match="move"):
            generate_report(metadata, photos, config)
        assert list(config.output_dir.iterdir()) == []

    def test_metadata_write_failure_is_warning(self, metadata, photos, config):
        # Arrange
        (config.output_dir / METADATA_FILENAME).mkdir(parents=True)

        # Act
        result = generate_report(metadata, photos, config)

        # Assert
        assert result.metadata_path is None
        assert result.artifacts["pdf"].exists()
        assert any("metadata" in w for w in result.warnings)


class TestGenerateWithStatus:

    def test_success_message_names_artifacts(self, metadata, photos, config):
        status = generate_with_status(metadata, photos, config)

        assert status.ok
        assert status.message.startswith("Relatório gerado com 3 figura(s)")
        assert "Relatório_fotografico_Escola_Estadual_Modelo.pdf" in status.message
        assert status.result.figure_count == 3

    def test_success_message_lists_skipped(self, metadata, photo_factory, config):
        photos = [photo_factory(1), photo_factory(2, source=b"broken")]

        status = generate_with_status(metadata, photos, config)

        assert status.ok
        assert "(imagens ignoradas: 2)" in status.message

    def test_failure_is_single_message(self, metadata, photos, config, monkeypatch):
        def broken_renderer(*args, **kwargs):
            raise RuntimeError("renderer exploded")

        monkeypatch.setitem(controller._RENDERERS, "pdf", broken_renderer)

        status = generate_with_status(metadata, photos, config)

        assert not status.ok
        assert status.message == FAILURE_MESSAGE
        assert status.result is None


class TestReportSession:

    def test_normalizer_created_lazily_and_reused(self, metadata, photos, config):
        with ReportSession(config) as session:
            first = session.normalizer
            session.generate(metadata, photos)
            session.generate(metadata, photos)

            assert session.normalizer is first
            assert isinstance(first, SynchronousNormalizer)

    def test_layout_override(self, metadata, photos, config, sync_normalizer):
        # Arrange
        session = ReportSession(config, sync_normalizer)

        # Act
        result = session.generate(metadata, photos, layout=LayoutConfig(columns=3, style="bordered"))

        # Assert
        data = json.loads(result.metadata_path.read_text(encoding="utf-8"))
        assert data["columns"] == 3
        assert data["style"] == "bordered"
        assert session.config.layout.columns == 1

    def test_close_releases_normalizer(self, config, monkeypatch):
        # Arrange
        session = ReportSession(config)
        normalizer = session.normalizer
        closed = []
        monkeypatch.setattr(normalizer, "close", lambda: closed.append(True))

        # Act
        session.close()

        # Assert
        assert closed == [True]
        assert session.normalizer is not normalizer

    def test_status_on_failure(self, metadata, photos, config, monkeypatch):
        monkeypatch.setattr(controller, "_write_artifacts", _raise_packaging)

        with ReportSession(config) as session:
            status = session.generate_with_status(metadata, photos)

        assert not status.ok
        assert status.message == FAILURE_MESSAGE


def _raise_packaging(*args):
    raise PackagingError("disk full")
