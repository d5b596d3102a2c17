"""Where a mesh writer gets its mesh from: borrowed or generated per frame.

EvaluatedMeshSource hands out the object's own mesh (never freed).
GeneratedMeshSource builds a new mesh for the current frame; the writer
owns it and must free it after use.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from usdmesh.core.mesh import Mesh, SceneObject

from ._session import ExportSession

logger = logging.getLogger(__name__)


class MeshSource(ABC):
    needs_free: ClassVar[bool] = False

    @abstractmethod
    def get_export_mesh(self, obj: SceneObject) -> Mesh | None:
        """Mesh to export for ``obj``, or None when it has no geometry."""
        ...

    def free_export_mesh(self, mesh: Mesh) -> None:
        """Release a mesh returned by get_export_mesh(). Only called when needs_free."""
        mesh.free()


class EvaluatedMeshSource(MeshSource):
    needs_free: ClassVar[bool] = False

    def get_export_mesh(self, obj: SceneObject) -> Mesh | None:
        return obj.mesh

    def free_export_mesh(self, mesh: Mesh) -> None:
        raise RuntimeError(f"Mesh '{mesh.name}' is borrowed and must not be freed")


class GeneratedMeshSource(MeshSource):
    """Evaluates vertex keyframes at the session's current frame."""

    needs_free: ClassVar[bool] = True

    def __init__(self, session: ExportSession):
        self.session = session
        self.live = 0

    def get_export_mesh(self, obj: SceneObject) -> Mesh | None:
        if obj.mesh is None:
            return None
        mesh = obj.mesh.with_vertices(obj.vertices_at(self.session.frame))
        self.live += 1
        return mesh

    def free_export_mesh(self, mesh: Mesh) -> None:
        mesh.free()
        self.live -= 1


def source_for(obj: SceneObject, session: ExportSession) -> MeshSource:
    if obj.is_animated:
        return GeneratedMeshSource(session)
    return EvaluatedMeshSource()
