"""
Tests for DOCX rendering.

Generated documents are read back with python-docx.
"""

import io

import pytest
from docx import Document
from docx.oxml.ns import qn

from photo_report.core.models import ReportMetadata
from photo_report.layout import DocxMeasurement, LayoutConfig, PdfMeasurement, paginate
from photo_report.output import render_to_docx


def _render(figures, metadata, config):
    measure = DocxMeasurement()
    layout = paginate(figures, config, measure, metadata)
    return Document(io.BytesIO(render_to_docx(layout, metadata, config, measure)))


class TestSequentialLayout:
    """Single-column plain style uses paragraphs, not a table."""

    def test_no_table_one_picture_per_figure(self, figure_factory, metadata):
        doc = _render([figure_factory(n) for n in range(1, 4)], metadata, LayoutConfig(columns=1))

        assert len(doc.tables) == 0
        assert len(doc.inline_shapes) == 3

    def test_caption_bold_label_italic_description(self, figure_factory, metadata):
        # Act
        doc = _render([figure_factory(1, description="Fachada principal")], metadata, LayoutConfig())

        # Assert
        caption = next(p for p in doc.paragraphs if p.text.startswith("Figura 1"))
        assert caption.text == "Figura 1: Fachada principal"
        assert caption.runs[0].bold
        assert caption.runs[1].italic


class TestTableLayout:

    def test_scenario_eight_figures_three_columns(self, figure_factory, metadata):
        # Act
        doc = _render([figure_factory(n) for n in range(1, 9)], metadata, LayoutConfig(columns=3))

        # Assert
        assert len(doc.tables) == 1
        table = doc.tables[0]
        assert len(table.rows) == 3
        assert len(table.rows[0].cells) == 3
        last = table.rows[-1].cells
        assert "Figura 7" in last[0].text
        assert "Figura 8" in last[1].text
        assert last[2].text == ""
        assert len(doc.inline_shapes) == 8

    def test_rows_cannot_split(self, figure_factory, metadata):
        doc = _render([figure_factory(n) for n in range(1, 5)], metadata, LayoutConfig(columns=2))

        for row in doc.tables[0].rows:
            assert row._tr.trPr.find(qn("w:cantSplit")) is not None

    def test_cells_vertically_centered(self, figure_factory, metadata):
        doc = _render([figure_factory(1), figure_factory(2)], metadata, LayoutConfig(columns=2))

        for cell in doc.tables[0].rows[0].cells:
            v_align = cell._tc.tcPr.find(qn("w:vAlign"))
            assert v_align.get(qn("w:val")) == "center"

    @pytest.mark.parametrize("style, expected", [("plain", "nil"), ("bordered", "single")])
    def test_border_visibility_follows_style(self, figure_factory, metadata, style, expected):
        doc = _render([figure_factory(1), figure_factory(2)], metadata, LayoutConfig(columns=2, style=style))

        borders = doc.tables[0]._tbl.tblPr.find(qn("w:tblBorders"))
        assert borders.find(qn("w:top")).get(qn("w:val")) == expected

    def test_single_column_bordered_uses_table(self, figure_factory, metadata):
        doc = _render([figure_factory(1), figure_factory(2)], metadata, LayoutConfig(columns=1, style="bordered"))

        assert len(doc.tables) == 1
        assert len(doc.tables[0].rows) == 2

    def test_picture_size_in_emu(self, figure_factory, metadata):
        """A 1600x1200 photo in a 290x220 px box is drawn 290 px wide."""
        doc = _render([figure_factory(1, (1600, 1200)), figure_factory(2)], metadata, LayoutConfig(columns=2))

        assert doc.inline_shapes[0].width == 290 * 9525


class TestHeader:

    def test_header_paragraphs(self, figure_factory, metadata):
        doc = _render([figure_factory(1)], metadata, LayoutConfig())

        texts = [p.text for p in doc.paragraphs[:5]]
        assert texts == [
            "Relatório Fotográfico - 01/05/2024",
            "Escola Estadual Modelo",
            "Rua das Flores, 100",
            "Vistoria de manutenção",
            "Processo nº 2024/0001",
        ]
        assert doc.paragraphs[0].runs[0].bold

    def test_comments_one_paragraph_per_line(self, figure_factory):
        # Arrange
        metadata = ReportMetadata(
            institution_name="Escola",
            motif="Vistoria",
            process_number="1",
            date="01/05/2024",
            comments="Primeira linha\nSegunda linha",
        )

        # Act
        doc = _render([figure_factory(1)], metadata, LayoutConfig())

        # Assert
        texts = [p.text for p in doc.paragraphs]
        start = texts.index("Comentários:")
        assert texts[start + 1:start + 3] == ["Primeira linha", "Segunda linha"]

    def test_rejects_layout_for_other_format(self, figure_factory, metadata):
        config = LayoutConfig()
        layout = paginate([figure_factory(1)], config, PdfMeasurement(), metadata)

        with pytest.raises(ValueError):
            render_to_docx(layout, metadata, config)
