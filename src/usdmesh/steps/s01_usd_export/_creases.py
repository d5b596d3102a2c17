"""Edge creases -> UsdGeom.Mesh crease runs.

Every creased edge becomes its own two-vertex run. Adjacent creased edges
are not merged into longer runs.
"""

from __future__ import annotations

import numpy as np

from usdmesh.core.mesh import CREASE_INFINITE, CREASE_NONE, Mesh

from ._geometry import MeshExportRecord

CREASE_FACTOR = 1.0 / 255.0


def sharpness_infinite() -> float:
    """UsdGeom.Mesh.SHARPNESS_INFINITE."""
    from pxr import UsdGeom

    return float(UsdGeom.Mesh.SHARPNESS_INFINITE)


def crease_to_sharpness(crease: np.ndarray) -> np.ndarray:
    """De-quantize 1..254 linearly into (0, 1); 255 maps to the infinite sentinel."""
    crease = np.asarray(crease, dtype=np.uint8)
    sharpness = crease.astype(np.float32) * np.float32(CREASE_FACTOR)
    infinite = crease == CREASE_INFINITE
    if infinite.any():
        sharpness[infinite] = sharpness_infinite()
    return sharpness


def get_creases(mesh: Mesh, record: MeshExportRecord) -> None:
    crease = np.asarray(mesh.edge_crease, dtype=np.uint8)
    creased = np.flatnonzero(crease != CREASE_NONE)

    if not len(creased):
        record.crease_lengths = np.zeros(0, dtype=np.int32)
        record.crease_vertex_indices = np.zeros(0, dtype=np.int32)
        record.crease_sharpness = np.zeros(0, dtype=np.float32)
        return

    edges = np.asarray(mesh.edges, dtype=np.int32).reshape(-1, 2)
    record.crease_vertex_indices = edges[creased].reshape(-1).copy()
    record.crease_lengths = np.full(len(creased), 2, dtype=np.int32)
    record.crease_sharpness = crease_to_sharpness(crease[creased])
