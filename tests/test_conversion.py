"""Tests for the IfcOpenShell converter and the OBJ scene writer."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ifcregression.conversion import ConversionError, MeshData, write_obj_scene


# ── Scene writer ─────────────────────────────────────────────────────────────

class TestSceneWriter:

    def test_mesh_from_flat(self):
        mesh = MeshData.from_flat([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2], name="w")
        assert mesh.vertices == [(0, 0, 0), (1, 0, 0), (0, 1, 0)]
        assert mesh.faces == [(0, 1, 2)]

    def test_write_offsets_faces_per_mesh(self, tmp_path: Path):
        tri = MeshData.from_flat([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2], name="first")
        other = MeshData.from_flat([0, 0, 1, 1, 0, 1, 0, 1, 1], [0, 1, 2])
        dest = write_obj_scene([tri, other], tmp_path / "out" / "m.ifc.scene.obj")

        lines = dest.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "o first"
        assert "o mesh_1" in lines
        faces = [line for line in lines if line.startswith("f ")]
        assert faces == ["f 1 2 3", "f 4 5 6"]
        assert sum(1 for line in lines if line.startswith("v ")) == 6

    def test_write_empty_scene(self, tmp_path: Path):
        dest = write_obj_scene([], tmp_path / "empty.obj")
        assert dest.is_file()


# ── IfcOpenShell converter ───────────────────────────────────────────────────

@pytest.fixture
def converter_cls():
    pytest.importorskip("ifcopenshell")
    from ifcregression.conversion.ifc import IfcOpenShellConverter

    return IfcOpenShellConverter


@pytest.fixture
def sample_ifc(tmp_path: Path, converter_cls) -> Path:
    import ifcopenshell
    import ifcopenshell.guid

    model = ifcopenshell.file(schema="IFC4")
    model.create_entity("IfcProject", GlobalId=ifcopenshell.guid.new(), Name="Regression")
    model.create_entity("IfcWall", GlobalId=ifcopenshell.guid.new(), Name="Wall 1")
    model.create_entity("IfcWall", GlobalId=ifcopenshell.guid.new(), Name="Wall 2")
    path = tmp_path / "sample.ifc"
    model.write(str(path))
    return path


class TestIfcOpenShellConverter:

    def test_extensions(self, converter_cls):
        converter = converter_cls()
        assert converter.supports(Path("a.IFC"))
        assert converter.supports(Path("a.ifczip"))
        assert not converter.supports(Path("a.dwg"))

    def test_unsupported_extension(self, tmp_path: Path, converter_cls):
        path = tmp_path / "drawing.dwg"
        path.write_text("not a model", encoding="utf-8")
        with pytest.raises(ConversionError, match="does not support"):
            converter_cls().open(path)

    def test_summary(self, sample_ifc: Path, converter_cls):
        with converter_cls().open(sample_ifc) as model:
            summary = model.summary()
        assert summary.schema_identifier == "IFC4"
        assert summary.product_count == 2
        assert summary.entity_count >= 3
        assert summary.application == "Unknown"

    def test_caching_writes_converted_copy(self, sample_ifc: Path, tmp_path: Path, converter_cls):
        cache = tmp_path / "sample.ifc.cache"
        with converter_cls().open(sample_ifc, cache_path=cache):
            pass
        assert cache.is_file()
        assert cache.stat().st_size > 0

    def test_unparseable_file_raises(self, tmp_path: Path, converter_cls):
        path = tmp_path / "broken.ifc"
        path.write_text("this is not STEP", encoding="utf-8")
        with pytest.raises(Exception):
            converter_cls().open(path)

    def test_kernel_log_forwards_only_new_text(self, converter_cls, monkeypatch: pytest.MonkeyPatch, caplog):
        import ifcregression.conversion.ifc as ifc_module

        buffer = ["unit not set\n"]
        monkeypatch.setattr(ifc_module.ifcopenshell, "get_log", lambda: buffer[0], raising=False)

        first, second = converter_cls(), converter_cls()
        assert first._kernel_log is not second._kernel_log

        with caplog.at_level(logging.WARNING, logger="ifcregression.conversion.ifc"):
            first._kernel_log.forward()
            buffer[0] += "duplicate GlobalId\n"
            first._kernel_log.forward()
            first._kernel_log.forward()
            second._kernel_log.forward()

        messages = [r.getMessage() for r in caplog.records if r.name == "ifcregression.conversion.ifc"]
        assert messages == [
            "unit not set",
            "duplicate GlobalId",
            "unit not set",
            "duplicate GlobalId",
        ]
