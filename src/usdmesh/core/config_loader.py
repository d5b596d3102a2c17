"""YAML/JSON loading into Pydantic models (step configs and scene files)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel

from .contracts import SceneSpec

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top of {path}, got {type(raw).__name__}")
    return raw


def load_config(config_path: Path | None, config_class: type[ModelT]) -> ModelT:
    """Load a step config YAML into its Pydantic model.

    A missing path (None) or an empty file gives the model defaults.
    """
    if config_path is None:
        return config_class()
    raw = _read_yaml(Path(config_path))
    logger.debug(f"Loaded {config_class.__name__} from {config_path}: {raw}")
    return config_class(**raw)


def load_scene(scene_path: Path) -> SceneSpec:
    """Load and validate a scene description. JSON is read through the YAML parser."""
    raw = _read_yaml(Path(scene_path))
    scene = SceneSpec(**raw)
    logger.info(
        f"Scene {Path(scene_path).name}: {len(scene.objects)} objects, "
        f"{len(scene.materials)} materials"
    )
    return scene
