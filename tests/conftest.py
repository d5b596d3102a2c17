"""Shared pytest fixtures for usdmesh tests."""

from pathlib import Path

import pytest
import yaml

from usdmesh.core.mesh import Material, Mesh


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with the standard output directory."""
    (tmp_path / "processed").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def metal() -> Material:
    return Material(name="Metal", diffuse_color=[0.6, 0.1, 0.1, 1.0], metallic=1.0)


@pytest.fixture
def glass() -> Material:
    return Material(
        name="Glass", use_backface_culling=True, diffuse_color=[0.7, 0.9, 1.0, 0.4]
    )


@pytest.fixture
def creased_quad(metal: Material) -> Mesh:
    """Unit quad, all four edges infinitely sharp, one material slot."""
    return Mesh.from_polygons(
        "Quad",
        [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
        [[0, 1, 2, 3]],
        material_slots=[metal],
        creases={(0, 1): 255, (1, 2): 255, (2, 3): 255, (3, 0): 255},
    )


@pytest.fixture
def two_triangles(metal: Material, glass: Material) -> Mesh:
    """Two triangles sharing edge 1-2, one per material slot."""
    return Mesh.from_polygons(
        "Strip",
        [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]],
        [[0, 1, 2], [1, 3, 2]],
        material_indices=[0, 1],
        material_slots=[metal, glass],
    )


@pytest.fixture
def sample_scene_yaml(tmp_path: Path) -> Path:
    """Scene file with a creased quad, an animated two-material strip and an empty object."""
    scene = {
        "materials": [
            {"name": "Painted Metal", "diffuse_color": [0.6, 0.1, 0.1, 1.0], "metallic": 1.0},
            {"name": "Glass", "use_backface_culling": True, "diffuse_color": [0.7, 0.9, 1.0, 0.4]},
        ],
        "objects": [
            {
                "name": "Quad",
                "mesh": {
                    "vertices": [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
                    "polygons": [[0, 1, 2, 3]],
                    "material_slots": ["Painted Metal"],
                    "creases": [[0, 1, 255], [1, 2, 255], [2, 3, 255], [3, 0, 255]],
                },
            },
            {
                "name": "Strip",
                "mesh": {
                    "vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]],
                    "polygons": [[0, 1, 2], [1, 3, 2]],
                    "material_indices": [0, 1],
                    "material_slots": ["Glass", "Painted Metal"],
                    "creases": [[1, 2, 128]],
                },
                "keyframes": {
                    1: [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]],
                    3: [[0, 0, 0], [1, 0, 2], [0, 1, 0], [1, 1, 2]],
                },
            },
            {"name": "Empty", "mesh": None},
        ],
    }
    path = tmp_path / "scene.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(scene, f)
    return path
