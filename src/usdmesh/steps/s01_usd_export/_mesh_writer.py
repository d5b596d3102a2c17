"""Write one scene object as a UsdGeom.Mesh at the session's current time sample."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from usdmesh.core.mesh import Mesh, SceneObject

from ._geometry import MeshExportRecord, get_geometry_data
from ._materials import MaterialAssignment, assign_materials
from ._mesh_source import MeshSource, source_for
from ._session import ExportSession

logger = logging.getLogger(__name__)


@dataclass
class MeshWriteResult:
    usd_path: str
    num_points: int
    num_faces: int
    num_creases: int
    assignment: MaterialAssignment | None = None


@contextmanager
def export_mesh(source: MeshSource, obj: SceneObject) -> Iterator[Mesh | None]:
    """Acquire the mesh for ``obj``; owned meshes are freed on every exit path."""
    mesh = source.get_export_mesh(obj)
    if mesh is None:
        yield None
        return
    try:
        yield mesh
    finally:
        if source.needs_free:
            source.free_export_mesh(mesh)


class MeshWriter:
    """Writes meshes into the session's stage.

    Points, topology and creases are written at every time sample. Materials
    and GeomSubsets are only written while the session's first time sample
    is being exported.
    """

    def __init__(self, session: ExportSession):
        self.session = session

    def do_write(
        self, obj: SceneObject, usd_path: str, source: MeshSource | None = None
    ) -> MeshWriteResult | None:
        """Write ``obj`` to ``usd_path``. Returns None when it has no mesh to export."""
        if source is None:
            source = source_for(obj, self.session)

        with export_mesh(source, obj) as mesh:
            if mesh is None:
                logger.warning(f"Skipping object '{obj.name}': no exportable mesh")
                return None
            return self.write_mesh(mesh, usd_path)

    def write_mesh(self, mesh: Mesh, usd_path: str) -> MeshWriteResult:
        from pxr import UsdGeom

        timecode = self.session.time_code
        usd_mesh = UsdGeom.Mesh.Define(self.session.stage, usd_path)

        record = get_geometry_data(mesh)
        self._write_geometry(usd_mesh, record, timecode)

        result = MeshWriteResult(
            usd_path=usd_path,
            num_points=len(record.points),
            num_faces=len(record.face_vertex_counts),
            num_creases=len(record.crease_lengths),
        )

        # TODO: rebind when face groups or material slots change between time samples.
        if self.session.frame_has_been_written or not self.session.export_materials:
            return result

        result.assignment = assign_materials(
            mesh, usd_mesh, record.face_groups, self.session.registry
        )
        return result

    @staticmethod
    def _write_geometry(usd_mesh, record: MeshExportRecord, timecode) -> None:
        from pxr import Gf, Vt

        points = [Gf.Vec3f(*p) for p in record.points.tolist()]
        usd_mesh.CreatePointsAttr().Set(Vt.Vec3fArray(points), timecode)
        usd_mesh.CreateFaceVertexCountsAttr().Set(
            Vt.IntArray(record.face_vertex_counts.tolist()), timecode
        )
        usd_mesh.CreateFaceVertexIndicesAttr().Set(
            Vt.IntArray(record.face_indices.tolist()), timecode
        )

        if len(record.points):
            lo = record.points.min(axis=0).tolist()
            hi = record.points.max(axis=0).tolist()
            usd_mesh.CreateExtentAttr().Set(
                Vt.Vec3fArray([Gf.Vec3f(*lo), Gf.Vec3f(*hi)]), timecode
            )

        if record.has_creases:
            usd_mesh.CreateCreaseLengthsAttr().Set(
                Vt.IntArray(record.crease_lengths.tolist()), timecode
            )
            usd_mesh.CreateCreaseIndicesAttr().Set(
                Vt.IntArray(record.crease_vertex_indices.tolist()), timecode
            )
            usd_mesh.CreateCreaseSharpnessesAttr().Set(
                Vt.FloatArray(record.crease_sharpness.tolist()), timecode
            )
