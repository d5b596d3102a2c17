"""Tests for YAML/JSON loading, scene contracts and the step base class."""

import json
from pathlib import Path
from typing import ClassVar

import pytest
import yaml
from pydantic import BaseModel, ValidationError

from usdmesh.core.config_loader import load_config, load_scene
from usdmesh.core.contracts import MeshSpec, SceneSpec, StepMeta
from usdmesh.core.step_base import BaseStep
from usdmesh.steps.s01_usd_export.config import UsdExportConfig


class TestContracts:
    def test_step_meta(self):
        meta = StepMeta(step_name="test", elapsed_seconds=1.5, params={"a": 1})
        assert meta.step_name == "test"
        assert meta.elapsed_seconds == 1.5

    def test_mesh_spec_defaults(self):
        spec = MeshSpec()
        assert spec.vertices == []
        assert spec.material_indices is None
        assert spec.creases == []

    def test_vertex_needs_three_components(self):
        with pytest.raises(ValidationError, match="expected 3"):
            MeshSpec(vertices=[[0, 0]])

    def test_polygon_needs_three_corners(self):
        with pytest.raises(ValidationError, match="at least 3"):
            MeshSpec(vertices=[[0, 0, 0], [1, 0, 0]], polygons=[[0, 1]])

    def test_polygon_index_range(self):
        with pytest.raises(ValidationError, match="outside"):
            MeshSpec(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], polygons=[[0, 1, 3]])

    def test_crease_value_range(self):
        with pytest.raises(ValidationError, match="out of range"):
            MeshSpec(
                vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                polygons=[[0, 1, 2]],
                creases=[[0, 1, 300]],
            )

    def test_material_indices_length(self):
        with pytest.raises(ValidationError, match="material indices"):
            MeshSpec(
                vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                polygons=[[0, 1, 2]],
                material_indices=[0, 0],
            )

    def test_unknown_material(self):
        with pytest.raises(ValidationError, match="unknown material 'Gold'"):
            SceneSpec(
                objects=[{"name": "A", "mesh": {"material_slots": ["Gold"]}}],
            )

    def test_duplicate_material_names(self):
        with pytest.raises(ValidationError, match="unique"):
            SceneSpec(materials=[{"name": "A"}, {"name": "A"}])


class TestLoadScene:
    def test_yaml(self, sample_scene_yaml: Path):
        scene = load_scene(sample_scene_yaml)
        assert [o.name for o in scene.objects] == ["Quad", "Strip", "Empty"]
        assert scene.objects[2].mesh is None
        assert sorted(scene.objects[1].keyframes) == [1, 3]

    def test_json(self, tmp_path: Path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({
            "materials": [{"name": "M"}],
            "objects": [{
                "name": "Tri",
                "mesh": {
                    "vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                    "polygons": [[0, 1, 2]],
                    "material_slots": ["M"],
                },
                "keyframes": {"2": [[0, 0, 0], [1, 0, 0], [0, 1, 1]]},
            }],
        }))
        scene = load_scene(path)
        assert scene.objects[0].mesh.material_slots == ["M"]
        assert list(scene.objects[0].keyframes) == [2]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_scene(tmp_path / "nope.yaml")

    def test_top_level_must_be_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_scene(path)


class TestLoadConfig:
    def test_none_gives_defaults(self):
        cfg = load_config(None, UsdExportConfig)
        assert cfg == UsdExportConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path, UsdExportConfig) == UsdExportConfig()

    def test_values(self, tmp_path: Path):
        path = tmp_path / "s01.yaml"
        with open(path, "w") as f:
            yaml.dump({"frame_start": 5, "frame_end": 8, "animated": True, "up_axis": "Y"}, f)
        cfg = load_config(path, UsdExportConfig)
        assert cfg.frames == [5, 6, 7, 8]
        assert cfg.up_axis == "Y"

    def test_repo_step_config_loads(self):
        path = Path(__file__).resolve().parents[2] / "configs" / "steps" / "s01_usd_export.yaml"
        cfg = load_config(path, UsdExportConfig)
        assert cfg.animated is True
        assert cfg.frame_end >= cfg.frame_start


class _EchoInput(BaseModel):
    value: int


class _EchoOutput(BaseModel):
    value: int
    meta: StepMeta


class _EchoConfig(BaseModel):
    offset: int = 0


class _EchoStep(BaseStep[_EchoInput, _EchoOutput, _EchoConfig]):
    name: ClassVar[str] = "echo"
    input_type: ClassVar = _EchoInput
    output_type: ClassVar = _EchoOutput
    config_type: ClassVar = _EchoConfig

    def validate_inputs(self, inputs: _EchoInput) -> bool:
        return inputs.value >= 0

    def run(self, inputs: _EchoInput) -> _EchoOutput:
        return _EchoOutput(value=inputs.value + self.config.offset, meta=StepMeta(step_name=self.name))


class TestBaseStep:
    def test_execute_fills_elapsed(self, tmp_path: Path):
        step = _EchoStep(config=_EchoConfig(offset=2), data_root=tmp_path)
        out = step.execute(_EchoInput(value=1))
        assert out.value == 3
        assert out.meta.elapsed_seconds == step.elapsed_seconds
        assert out.meta.elapsed_seconds >= 0.0

    def test_validation_failure(self, tmp_path: Path):
        step = _EchoStep(config=_EchoConfig(), data_root=tmp_path)
        with pytest.raises(ValueError, match="Input validation failed"):
            step.execute(_EchoInput(value=-1))

    def test_schemas(self):
        assert "value" in _EchoStep.get_input_schema()["properties"]
        assert "meta" in _EchoStep.get_output_schema()["properties"]
        assert "offset" in _EchoStep.get_config_schema()["properties"]
