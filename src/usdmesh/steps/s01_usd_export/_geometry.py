"""Flatten a Mesh into UsdGeom.Mesh-ready arrays.

Vertex positions, face vertex counts and face vertex indices are copied in
polygon/loop order; polygons are grouped per material slot when the mesh
has more than one slot (those groups later become GeomSubsets).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from usdmesh.core.mesh import Mesh

logger = logging.getLogger(__name__)


@dataclass
class MeshExportRecord:
    """Arrays for one mesh write, discarded once the write call returns."""

    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float32))
    face_vertex_counts: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int32))
    face_indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int32))
    face_groups: dict[int, np.ndarray] = field(default_factory=dict)

    # One entry per crease run; every run here is a single edge (two vertices).
    crease_lengths: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int32))
    # Vertex indices of all runs, laid out back to back.
    crease_vertex_indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int32))
    # One sharpness per run (UsdGeom.Mesh.SHARPNESS_INFINITE for a perfectly sharp crease).
    crease_sharpness: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float32))

    @property
    def has_creases(self) -> bool:
        return len(self.crease_lengths) > 0


def get_vertices(mesh: Mesh, record: MeshExportRecord) -> None:
    """Copy vertex positions; array position equals vertex index."""
    record.points = np.asarray(mesh.vertices, dtype=np.float32).reshape(-1, 3).copy()


def get_loops_polys(mesh: Mesh, record: MeshExportRecord) -> None:
    """Fill face_vertex_counts / face_indices, and face_groups for multi-slot meshes."""
    totals = np.asarray(mesh.polygon_loop_total, dtype=np.int32)
    starts = np.asarray(mesh.polygon_loop_start, dtype=np.int64)
    loop_vertex = np.asarray(mesh.loop_vertex, dtype=np.int32)

    record.face_vertex_counts = totals.copy()

    if len(totals):
        # Loop index of every face corner, polygon by polygon.
        corner_offsets = np.arange(int(totals.sum())) - np.repeat(np.cumsum(totals) - totals, totals)
        loop_indices = np.repeat(starts, totals) + corner_offsets
        record.face_indices = loop_vertex[loop_indices].astype(np.int32)
    else:
        record.face_indices = np.zeros(0, dtype=np.int32)

    # Subsets are only needed for material assignment.
    if mesh.material_count <= 1:
        record.face_groups = {}
        return

    mat_index = np.asarray(mesh.polygon_material_index, dtype=np.int32)
    record.face_groups = {
        int(slot): np.flatnonzero(mat_index == slot).astype(np.int32)
        for slot in np.unique(mat_index)
    }


def get_geometry_data(mesh: Mesh) -> MeshExportRecord:
    """Build the export record: geometry, topology, face groups and creases."""
    from ._creases import get_creases

    record = MeshExportRecord()
    get_vertices(mesh, record)
    get_loops_polys(mesh, record)
    get_creases(mesh, record)

    logger.debug(
        f"{mesh.name}: {len(record.points)} points, {len(record.face_vertex_counts)} faces, "
        f"{len(record.crease_lengths)} creases, {len(record.face_groups)} face groups"
    )
    return record
