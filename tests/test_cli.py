"""
Tests for the photo-report command line.
"""

import json

import pytest

from photo_report.cli import ManifestError, load_manifest, main
from photo_report.controller import METADATA_FILENAME
from photo_report.validation import NO_PHOTOS_MESSAGE


@pytest.fixture
def manifest(tmp_path, image_bytes):
    """Manifest with two photos stored next to it."""
    photo_dir = tmp_path / "fotos"
    photo_dir.mkdir()
    (photo_dir / "a.jpg").write_bytes(image_bytes((320, 240)))
    (photo_dir / "b.png").write_bytes(image_bytes((200, 300), fmt="PNG"))

    path = tmp_path / "relatorio.json"
    path.write_text(json.dumps({
        "metadata": {
            "institution_name": "Escola Modelo",
            "motif": "Vistoria",
            "process_number": "2024/7",
            "date": "2024-05-01",
        },
        "layout": {"columns": 2, "style": "bordered"},
        "photos": [
            {"id": "a", "path": "fotos/a.jpg", "description": "Fachada"},
            "fotos/b.png",
        ],
    }), encoding="utf-8")
    return path


class TestLoadManifest:

    def test_reads_metadata_photos_and_layout(self, manifest):
        metadata, photos, layout = load_manifest(manifest)

        assert metadata.institution_name == "Escola Modelo"
        assert metadata.date == "2024-05-01"
        assert [p.id for p in photos] == ["a", "2"]
        assert photos[0].source == manifest.parent / "fotos" / "a.jpg"
        assert photos[0].description == "Fachada"
        assert layout == {"columns": 2, "style": "bordered"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError):
            load_manifest(tmp_path / "missing.json")

    def test_photo_without_path(self, tmp_path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"photos": [{"id": "x"}]}), encoding="utf-8")

        with pytest.raises(ManifestError, match="no path"):
            load_manifest(path)

    def test_invalid_rotation(self, tmp_path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"photos": [{"path": "a.jpg", "rotation": 45}]}), encoding="utf-8")

        with pytest.raises(ManifestError, match="invalid"):
            load_manifest(path)


class TestMain:

    def test_manifest_generates_documents(self, manifest, tmp_path, capsys):
        # Arrange
        out = tmp_path / "saida"

        # Act
        code = main([str(manifest), "--sync", "-o", str(out)])

        # Assert
        assert code == 0
        assert (out / "Relatório_fotografico_Escola_Modelo.pdf").exists()
        assert (out / "Relatório_fotografico_Escola_Modelo.docx").exists()
        assert "Relatório gerado com 2 figura(s)" in capsys.readouterr().out

    def test_date_formatted_for_header(self, manifest, tmp_path):
        out = tmp_path / "saida"

        main([str(manifest), "--sync", "-o", str(out), "--format", "pdf"])

        data = json.loads((out / METADATA_FILENAME).read_text(encoding="utf-8"))
        assert data["date"] == "01/05/2024"
        assert data["columns"] == 2
        assert list(data["artifacts"]) == ["pdf"]

    def test_flags_override_manifest(self, manifest, tmp_path):
        out = tmp_path / "saida"

        main([str(manifest), "--sync", "-o", str(out), "--institution", "Outra Escola", "--columns", "3"])

        data = json.loads((out / METADATA_FILENAME).read_text(encoding="utf-8"))
        assert data["institution_name"] == "Outra Escola"
        assert data["columns"] == 3

    def test_photo_paths_with_flags(self, tmp_path, image_bytes):
        # Arrange
        photo = tmp_path / "foto.jpg"
        photo.write_bytes(image_bytes())
        out = tmp_path / "saida"

        # Act
        code = main([
            str(photo), "--sync", "-o", str(out),
            "--institution", "Escola", "--motif", "Vistoria",
            "--process", "1", "--date", "2024-05-01",
        ])

        # Assert
        assert code == 0
        assert (out / "Relatório_fotografico_Escola.docx").exists()

    def test_missing_fields_reported(self, tmp_path, image_bytes, capsys):
        # Arrange
        photo = tmp_path / "foto.jpg"
        photo.write_bytes(image_bytes())

        # Act
        code = main([str(photo), "--sync", "-o", str(tmp_path), "--motif", "Vistoria", "--process", "1"])

        # Assert
        assert code == 1
        err = capsys.readouterr().err
        assert 'O campo "Nome da instituição escolar" é obrigatório.' in err
        assert 'O campo "Data do Relatório" é obrigatório.' in err
        assert not list(tmp_path.glob("*.pdf"))

    def test_manifest_without_photos(self, tmp_path, capsys):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"metadata": {
            "institution_name": "E", "motif": "M", "process_number": "1", "date": "2024-05-01",
        }}), encoding="utf-8")

        code = main([str(path), "--sync"])

        assert code == 1
        assert NO_PHOTOS_MESSAGE in capsys.readouterr().err

    def test_unreadable_manifest(self, tmp_path, capsys):
        path = tmp_path / "m.json"
        path.write_text("{not json", encoding="utf-8")

        assert main([str(path), "--sync"]) == 1
        assert "Cannot read manifest" in capsys.readouterr().err
