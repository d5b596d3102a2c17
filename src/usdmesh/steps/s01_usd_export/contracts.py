"""I/O contracts for Step 01: USD mesh export (scene file -> USD stage)."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from usdmesh.core.contracts import StepMeta


class UsdExportInput(BaseModel):
    scene_path: Path = Field(..., description="Scene description (.yaml/.yml/.json)")


class UsdExportOutput(BaseModel):
    usd_path: Optional[Path] = Field(None, description="Path to the written USD stage")
    num_meshes: int = Field(0, description="Objects written as UsdGeom.Mesh")
    num_skipped: int = Field(0, description="Objects skipped for lack of a mesh")
    num_time_samples: int = Field(0, description="Frames written")
    num_materials: int = Field(0, description="UsdShade materials defined")
    num_subsets: int = Field(0, description="Material GeomSubsets written")
    num_creases: int = Field(0, description="Crease runs written at the first time sample")
    meta: Optional[StepMeta] = None
