"""
Unit tests for ReportConfig validation.
"""

from pathlib import Path

import pytest

from photo_report.config import SUPPORTED_FORMATS, ReportConfig


class TestReportConfig:

    def test_defaults(self, tmp_path):
        config = ReportConfig(output_dir=tmp_path)

        assert config.formats == SUPPORTED_FORMATS
        assert config.layout.columns == 1
        assert config.prefer_isolated
        assert config.write_metadata

    def test_output_dir_coerced_to_path(self):
        config = ReportConfig(output_dir="out")

        assert config.output_dir == Path("out")

    def test_formats_lowercased(self, tmp_path):
        config = ReportConfig(output_dir=tmp_path, formats=("PDF",))

        assert config.formats == ("pdf",)

    @pytest.mark.parametrize("formats", [(), ("odt",), ("pdf", "pdf")])
    def test_invalid_formats(self, tmp_path, formats):
        with pytest.raises(ValueError):
            ReportConfig(output_dir=tmp_path, formats=formats)

    def test_invalid_max_workers(self, tmp_path):
        with pytest.raises(ValueError, match="max_workers"):
            ReportConfig(output_dir=tmp_path, max_workers=0)
