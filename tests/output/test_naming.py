"""
Unit tests for artifact naming.
"""

import pytest

from photo_report.output import FALLBACK_NAME, build_filename, sanitize_institution_name


class TestSanitizeInstitutionName:

    def test_spaces_replaced(self):
        assert sanitize_institution_name("Escola Modelo") == "Escola_Modelo"

    def test_accented_characters_replaced(self):
        assert sanitize_institution_name("São José") == "S_o_Jos_"

    @pytest.mark.parametrize("name", ["", "   ", "---", "ãé"])
    def test_fallback_when_nothing_alphanumeric(self, name):
        assert sanitize_institution_name(name) == FALLBACK_NAME


class TestBuildFilename:

    def test_pdf(self):
        assert build_filename("pdf", "Escola Modelo") == "Relatório_fotografico_Escola_Modelo.pdf"

    def test_docx_fallback(self):
        assert build_filename("docx", "") == "Relatório_fotografico_Instituicao.docx"

    def test_extension_normalized(self):
        assert build_filename(".PDF", "E1") == "Relatório_fotografico_E1.pdf"
