"""Pydantic models for scene description files and shared step metadata."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class StepMeta(BaseModel):
    """Metadata attached to every step output for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class MaterialSpec(BaseModel):
    """A material that mesh slots can reference by name."""

    name: str = Field(..., min_length=1)
    use_backface_culling: bool = Field(False, description="Cull back faces (single-sided)")
    diffuse_color: list[float] = Field(
        default=[0.8, 0.8, 0.8, 1.0], min_length=3, max_length=4, description="RGB(A) 0-1"
    )
    roughness: float = Field(0.5, ge=0.0, le=1.0)
    metallic: float = Field(0.0, ge=0.0, le=1.0)


class MeshSpec(BaseModel):
    """Polygon mesh given as vertex positions and per-polygon vertex index lists."""

    vertices: list[list[float]] = Field(default_factory=list)
    polygons: list[list[int]] = Field(default_factory=list)
    material_indices: Optional[list[int]] = Field(
        None, description="Material slot per polygon (default: all slot 0)"
    )
    material_slots: list[Optional[str]] = Field(
        default_factory=list, description="Material name per slot, null for an empty slot"
    )
    creases: list[list[int]] = Field(
        default_factory=list, description="Creased edges as [v1, v2, value 0-255]"
    )

    @field_validator("vertices")
    @classmethod
    def _check_vertices(cls, v: list[list[float]]) -> list[list[float]]:
        for i, pos in enumerate(v):
            if len(pos) != 3:
                raise ValueError(f"vertex {i} has {len(pos)} components, expected 3")
        return v

    @field_validator("polygons")
    @classmethod
    def _check_polygons(cls, v: list[list[int]]) -> list[list[int]]:
        for i, poly in enumerate(v):
            if len(poly) < 3:
                raise ValueError(f"polygon {i} has {len(poly)} corners, expected at least 3")
        return v

    @field_validator("creases")
    @classmethod
    def _check_creases(cls, v: list[list[int]]) -> list[list[int]]:
        for crease in v:
            if len(crease) != 3:
                raise ValueError(f"crease {crease} must be [v1, v2, value]")
            if not 0 <= crease[2] <= 255:
                raise ValueError(f"crease value {crease[2]} out of range 0..255")
        return v

    @model_validator(mode="after")
    def _check_indices(self) -> MeshSpec:
        n_verts = len(self.vertices)
        for poly in self.polygons:
            if any(idx < 0 or idx >= n_verts for idx in poly):
                raise ValueError(f"polygon {poly} references a vertex outside 0..{n_verts - 1}")
        if self.material_indices is not None:
            if len(self.material_indices) != len(self.polygons):
                raise ValueError(
                    f"{len(self.material_indices)} material indices for "
                    f"{len(self.polygons)} polygons"
                )
            if any(idx < 0 for idx in self.material_indices):
                raise ValueError("material indices must be non-negative")
        return self


class ObjectSpec(BaseModel):
    """One scene object. ``mesh: null`` marks an object without exportable geometry."""

    name: str = Field(..., min_length=1)
    mesh: Optional[MeshSpec] = None
    keyframes: dict[int, list[list[float]]] = Field(
        default_factory=dict, description="Vertex positions per frame (animated objects)"
    )


class SceneSpec(BaseModel):
    """Top-level scene description loaded from YAML or JSON."""

    materials: list[MaterialSpec] = Field(default_factory=list)
    objects: list[ObjectSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_material_refs(self) -> SceneSpec:
        names = [m.name for m in self.materials]
        if len(set(names)) != len(names):
            raise ValueError("material names must be unique")
        known = set(names)
        for obj in self.objects:
            if obj.mesh is None:
                continue
            for slot in obj.mesh.material_slots:
                if slot is not None and slot not in known:
                    raise ValueError(f"object '{obj.name}' references unknown material '{slot}'")
        return self
