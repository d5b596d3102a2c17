"""Configuration for Step 01: USD mesh export."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class UsdExportConfig(BaseModel):
    output_name: str = Field("scene.usda", description="Output file name (.usda/.usdc/.usd)")

    frame_start: int = Field(1, description="First exported frame")
    frame_end: int = Field(1, description="Last exported frame (inclusive)")
    animated: bool = Field(
        False, description="Write time samples per frame; otherwise a single default sample"
    )

    root_prim: str = Field("/Root", description="Prim path all objects are written under")
    materials_scope: str = Field("/Root/Looks", description="Scope for UsdShade materials")
    export_materials: bool = Field(True, description="Bind materials and write GeomSubsets")

    up_axis: Literal["Y", "Z"] = Field("Z", description="USD stage up axis")
    meters_per_unit: float = Field(1.0, gt=0, description="USD meters per unit")

    @field_validator("output_name")
    @classmethod
    def _check_suffix(cls, v: str) -> str:
        if not v.endswith((".usda", ".usdc", ".usd")):
            raise ValueError(f"output_name must end in .usda, .usdc or .usd: {v}")
        return v

    @field_validator("root_prim", "materials_scope")
    @classmethod
    def _check_prim_path(cls, v: str) -> str:
        if not v.startswith("/") or v == "/" or v.endswith("/"):
            raise ValueError(f"expected an absolute prim path like /Root, got {v!r}")
        return v

    @model_validator(mode="after")
    def _check_frame_range(self) -> "UsdExportConfig":
        if self.frame_end < self.frame_start:
            raise ValueError(
                f"frame_end ({self.frame_end}) is before frame_start ({self.frame_start})"
            )
        return self

    @property
    def frames(self) -> list[int]:
        if not self.animated:
            return [self.frame_start]
        return list(range(self.frame_start, self.frame_end + 1))
