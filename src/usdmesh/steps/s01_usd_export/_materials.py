"""Material registration and material / GeomSubset binding for exported meshes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from usdmesh.core.mesh import Material, Mesh

if TYPE_CHECKING:
    from pxr import Usd, UsdGeom, UsdShade

logger = logging.getLogger(__name__)


def sanitize_name(name: str) -> str:
    """Make ``name`` usable as a USD prim name (letters, digits, underscores)."""
    sanitized = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in name)
    if sanitized and sanitized[0].isdigit():
        sanitized = "_" + sanitized
    return sanitized or "_unnamed"


class MaterialRegistry:
    """Maps Material handles to UsdShade.Material prims on one stage.

    ensure_usd_material() is idempotent: the same material name always
    resolves to the same prim.
    """

    def __init__(self, stage: Usd.Stage, scope_path: str = "/Root/Looks"):
        self.stage = stage
        self.scope_path = scope_path
        self._cache: dict[str, UsdShade.Material] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def ensure_usd_material(self, material: Material) -> UsdShade.Material:
        from pxr import Gf, Sdf, UsdGeom, UsdShade

        if material.name in self._cache:
            return self._cache[material.name]

        if not self.stage.GetPrimAtPath(self.scope_path).IsValid():
            UsdGeom.Scope.Define(self.stage, self.scope_path)

        prim_name = sanitize_name(material.name)
        mat_path = f"{self.scope_path}/{prim_name}"
        counter = 1
        while self.stage.GetPrimAtPath(mat_path).IsValid():
            mat_path = f"{self.scope_path}/{prim_name}_{counter}"
            counter += 1

        usd_material = UsdShade.Material.Define(self.stage, mat_path)
        shader = UsdShade.Shader.Define(self.stage, f"{mat_path}/previewShader")
        shader.CreateIdAttr("UsdPreviewSurface")
        color = material.diffuse_color
        shader.CreateInput("diffuseColor", Sdf.ValueTypeNames.Color3f).Set(
            Gf.Vec3f(color[0], color[1], color[2])
        )
        shader.CreateInput("roughness", Sdf.ValueTypeNames.Float).Set(material.roughness)
        shader.CreateInput("metallic", Sdf.ValueTypeNames.Float).Set(material.metallic)
        if len(color) > 3 and color[3] < 1.0:
            shader.CreateInput("opacity", Sdf.ValueTypeNames.Float).Set(color[3])
        usd_material.CreateSurfaceOutput().ConnectToSource(shader.ConnectableAPI(), "surface")

        self._cache[material.name] = usd_material
        logger.debug(f"Defined material {mat_path} for '{material.name}'")
        return usd_material


@dataclass
class MaterialAssignment:
    """What assign_materials() authored on one mesh."""

    mesh_material: str | None = None
    double_sided: bool | None = None
    subsets: list[str] = field(default_factory=list)


def _bind(prim: Usd.Prim, usd_material: UsdShade.Material) -> None:
    from pxr import UsdShade

    UsdShade.MaterialBindingAPI.Apply(prim).Bind(usd_material)


def assign_materials(
    mesh: Mesh,
    usd_mesh: UsdGeom.Mesh,
    face_groups: Mapping[int, np.ndarray],
    registry: MaterialRegistry,
) -> MaterialAssignment:
    """Bind the first valid material to the whole mesh, then one subset per slot.

    Hydra's GL viewport does not resolve subset bindings, so the first
    non-empty slot is always bound to the entire mesh as a fallback. USD has
    no per-subset double-sidedness; the flag comes from that first material.
    """
    from pxr import UsdShade, Vt

    result = MaterialAssignment()
    if mesh.material_count == 0:
        return result

    mesh_material_bound = False
    for slot in range(mesh.material_count):
        material = mesh.material_at(slot)
        if material is None:
            continue

        usd_material = registry.ensure_usd_material(material)
        _bind(usd_mesh.GetPrim(), usd_material)

        result.double_sided = not material.use_backface_culling
        usd_mesh.CreateDoubleSidedAttr().Set(result.double_sided)
        result.mesh_material = usd_material.GetPath().pathString
        mesh_material_bound = True
        break

    if not mesh_material_bound:
        # USD defaults to single-sided, the source data to double-sided.
        result.double_sided = True
        usd_mesh.CreateDoubleSidedAttr().Set(True)

    if not mesh_material_bound or len(face_groups) < 2:
        # Nothing to split: the whole-mesh binding already covers it.
        return result

    binding_api = UsdShade.MaterialBindingAPI.Apply(usd_mesh.GetPrim())
    for slot in sorted(face_groups):
        # The slot table may have changed since extraction.
        material = mesh.material_at(slot)
        if material is None:
            continue

        usd_material = registry.ensure_usd_material(material)
        subset_name = usd_material.GetPath().name
        face_indices = Vt.IntArray([int(i) for i in face_groups[slot]])
        subset = binding_api.CreateMaterialBindSubset(subset_name, face_indices)
        _bind(subset.GetPrim(), usd_material)
        result.subsets.append(subset.GetPath().pathString)

    logger.debug(f"{usd_mesh.GetPath()}: {len(result.subsets)} material subsets")
    return result
