"""Tests for the usdmesh CLI."""

from pathlib import Path

from typer.testing import CliRunner

from usdmesh.cli import app

runner = CliRunner()


def test_info_lists_objects(sample_scene_yaml: Path):
    result = runner.invoke(app, ["info", str(sample_scene_yaml)])
    assert result.exit_code == 0, result.output
    assert "Quad" in result.output
    assert "Strip" in result.output
    assert "Empty" in result.output


def test_schema_prints_step_models():
    result = runner.invoke(app, ["schema"])
    assert result.exit_code == 0, result.output
    assert "scene_path" in result.output
    assert "frame_start" in result.output


def test_export_rejects_missing_scene(tmp_path: Path):
    result = runner.invoke(
        app, ["export", str(tmp_path / "missing.yaml"), "--data-root", str(tmp_path)]
    )
    assert result.exit_code == 1
