"""Step 01: USD mesh export (scene description → USD stage).

Every object is written as a UsdGeom.Mesh under the configured root prim,
once per exported frame. Materials and GeomSubsets are authored at the
first frame only.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from usdmesh.core.config_loader import load_scene
from usdmesh.core.contracts import StepMeta
from usdmesh.core.mesh import SceneObject, build_scene
from usdmesh.core.step_base import BaseStep
from .config import UsdExportConfig
from .contracts import UsdExportInput, UsdExportOutput

logger = logging.getLogger(__name__)

SCENE_SUFFIXES = (".yaml", ".yml", ".json")


def _has_pxr() -> bool:
    """Check if pxr (usd-core) is available."""
    try:
        from pxr import Usd  # noqa: F401
        return True
    except ImportError:
        return False


def _object_paths(
    objects: list[SceneObject], root_prim: str, reserved: tuple[str, ...] = ()
) -> list[str]:
    """One unique prim path per object under ``root_prim``, avoiding ``reserved``."""
    from ._materials import sanitize_name

    used: set[str] = set(reserved)
    paths = []
    for obj in objects:
        base = f"{root_prim}/{sanitize_name(obj.name)}"
        path = base
        counter = 1
        while path in used:
            path = f"{base}_{counter}"
            counter += 1
        used.add(path)
        paths.append(path)
    return paths


class UsdExportStep(BaseStep[UsdExportInput, UsdExportOutput, UsdExportConfig]):
    name: ClassVar[str] = "usd_export"
    input_type: ClassVar = UsdExportInput
    output_type: ClassVar = UsdExportOutput
    config_type: ClassVar = UsdExportConfig

    def validate_inputs(self, inputs: UsdExportInput) -> bool:
        if not inputs.scene_path.exists():
            logger.error(f"Scene file not found: {inputs.scene_path}")
            return False
        if inputs.scene_path.suffix.lower() not in SCENE_SUFFIXES:
            logger.error(f"Expected a .yaml/.yml/.json scene, got: {inputs.scene_path.suffix}")
            return False
        return True

    def run(self, inputs: UsdExportInput) -> UsdExportOutput:
        if not _has_pxr():
            raise RuntimeError("usd-core not installed. Install with: pip install usd-core")

        from pxr import Usd, UsdGeom

        from ._mesh_writer import MeshWriter
        from ._session import ExportSession

        cfg = self.config
        objects = build_scene(load_scene(inputs.scene_path))

        output_dir = self.data_root / "processed"
        output_dir.mkdir(parents=True, exist_ok=True)
        usd_path = output_dir / cfg.output_name

        # --- Stage setup ---
        stage = Usd.Stage.CreateNew(str(usd_path))
        UsdGeom.SetStageUpAxis(stage, UsdGeom.Tokens.z if cfg.up_axis == "Z" else UsdGeom.Tokens.y)
        UsdGeom.SetStageMetersPerUnit(stage, cfg.meters_per_unit)
        UsdGeom.Xform.Define(stage, cfg.root_prim)
        top_level = "/" + cfg.root_prim.strip("/").split("/")[0]
        stage.SetDefaultPrim(stage.GetPrimAtPath(top_level))
        if cfg.animated:
            stage.SetStartTimeCode(cfg.frame_start)
            stage.SetEndTimeCode(cfg.frame_end)

        session = ExportSession(
            stage,
            materials_scope=cfg.materials_scope,
            animated=cfg.animated,
            export_materials=cfg.export_materials,
        )
        writer = MeshWriter(session)
        paths = _object_paths(objects, cfg.root_prim, reserved=(cfg.materials_scope,))

        # --- Per-frame writes ---
        num_meshes = num_skipped = num_subsets = num_creases = 0
        frames = cfg.frames
        for frame in frames:
            session.set_frame(frame)
            first_frame = not session.frame_has_been_written
            for obj, path in zip(objects, paths):
                result = writer.do_write(obj, path)
                if not first_frame:
                    continue
                if result is None:
                    num_skipped += 1
                    continue
                num_meshes += 1
                num_creases += result.num_creases
                if result.assignment is not None:
                    num_subsets += len(result.assignment.subsets)
            session.mark_frame_written()
            logger.debug(f"Frame {frame} written")

        stage.Save()

        size_kb = usd_path.stat().st_size / 1024
        logger.info(
            f"USD exported: {usd_path} ({size_kb:.1f} KB, {num_meshes} meshes, "
            f"{num_skipped} skipped, {len(frames)} time samples, "
            f"{len(session.registry)} materials, {num_subsets} subsets)"
        )

        return UsdExportOutput(
            usd_path=usd_path,
            num_meshes=num_meshes,
            num_skipped=num_skipped,
            num_time_samples=len(frames),
            num_materials=len(session.registry),
            num_subsets=num_subsets,
            num_creases=num_creases,
            meta=StepMeta(step_name=self.name, params=cfg.model_dump()),
        )
