"""Tests for the typer command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from ifcregression import cli
from ifcregression.conversion.base import ConvertedModel, ModelConverter, ModelSummary
from ifcregression.report.result_set import ResultSet

runner = CliRunner()


class _StubModel(ConvertedModel):

    def generate_geometry(self) -> int:
        return 1

    def write_scene(self, dest: Path) -> Path:
        dest.write_text("o mesh_0\n", encoding="utf-8")
        return dest

    def summary(self) -> ModelSummary:
        return ModelSummary(schema_identifier="IFC2X3", entity_count=5)


class _StubConverter(ModelConverter):

    def __init__(self, settings) -> None:
        self.settings = settings

    @property
    def extensions(self) -> tuple[str, ...]:
        return (".ifc",)

    def open(self, source: Path, cache_path: Path | None = None) -> _StubModel:
        if "broken" in source.name:
            raise RuntimeError("cannot parse")
        return _StubModel()


@pytest.fixture(autouse=True)
def stub_converter(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cli, "_make_converter", _StubConverter)


def _reports(root: Path) -> list[Path]:
    return sorted(root.glob("IfcRegression_*.csv"))


class TestCli:

    def test_empty_directory_writes_report(self, tmp_path: Path):
        result = runner.invoke(cli.app, [str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert len(_reports(tmp_path)) == 1
        assert "0 files: 0 passed, 0 failed" in result.output

    def test_summary_counts_failures(self, tmp_path: Path):
        (tmp_path / "good.ifc").write_text("x", encoding="utf-8")
        (tmp_path / "broken.ifc").write_text("x", encoding="utf-8")
        result = runner.invoke(cli.app, [str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "2 files: 1 passed, 1 failed" in result.output

        records = list(ResultSet.load_from_file(_reports(tmp_path)[0]))
        assert [(r.file_name, r.failed) for r in records] == [("broken.ifc", True), ("good.ifc", False)]

    def test_top_only_and_extension(self, tmp_path: Path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "deep.ifc").write_text("x", encoding="utf-8")
        (tmp_path / "top.IFC").write_text("x", encoding="utf-8")
        (tmp_path / "zipped.ifczip").write_text("x", encoding="utf-8")

        result = runner.invoke(cli.app, [str(tmp_path), "--top-only", "-e", "ifc", "-e", ".ifczip"])
        assert result.exit_code == 0, result.output
        names = [r.file_name for r in ResultSet.load_from_file(_reports(tmp_path)[0])]
        assert names == ["top.IFC", "zipped.ifczip"]

    def test_scene_and_caching_flags(self, tmp_path: Path):
        (tmp_path / "a.ifc").write_text("x", encoding="utf-8")
        result = runner.invoke(cli.app, [str(tmp_path), "--scene", "--caching"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "a.ifc.scene.obj").is_file()
        record = ResultSet.load_from_file(_reports(tmp_path)[0])[0]
        assert record.scene_file_bytes > 0

    def test_missing_root_is_rejected(self, tmp_path: Path):
        result = runner.invoke(cli.app, [str(tmp_path / "nope")])
        assert result.exit_code != 0
        assert not _reports(tmp_path)

    def test_report_write_failure_exits_1(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        def _fail(self, path):
            raise OSError("read-only file system")

        monkeypatch.setattr(ResultSet, "write_to_file", _fail)
        result = runner.invoke(cli.app, [str(tmp_path)])
        assert result.exit_code == 1
        assert "Failed to write report" in result.output

    def test_transitions_listed_on_second_run(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "model.ifc").write_text("x", encoding="utf-8")
        assert runner.invoke(cli.app, [str(tmp_path)]).exit_code == 0

        def _broken(self):
            raise RuntimeError("header unreadable")

        monkeypatch.setattr(_StubModel, "summary", _broken)
        result = runner.invoke(cli.app, [str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "1 new failures" in result.output
        assert "model.ifc: Passed -> Failed" in result.output
