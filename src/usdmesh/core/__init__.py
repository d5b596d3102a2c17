"""usdmesh core: mesh model, scene contracts, base step, config loading."""

from .step_base import BaseStep
from .contracts import MaterialSpec, MeshSpec, ObjectSpec, SceneSpec, StepMeta
from .config_loader import load_config, load_scene
from .logging import setup_logging
from .mesh import Material, Mesh, SceneObject, build_scene

__all__ = [
    "BaseStep",
    "MaterialSpec",
    "MeshSpec",
    "ObjectSpec",
    "SceneSpec",
    "StepMeta",
    "load_config",
    "load_scene",
    "setup_logging",
    "Material",
    "Mesh",
    "SceneObject",
    "build_scene",
]
