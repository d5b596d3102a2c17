"""In-memory polygon mesh: vertices, loops, polygons, creased edges, material slots.

Polygons reference a contiguous run of loops (face corners); each loop
references one vertex. Edges carry an 8-bit quantized crease value where
0 means "not creased" and 255 means "infinitely sharp".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .contracts import MaterialSpec, MeshSpec, ObjectSpec, SceneSpec

logger = logging.getLogger(__name__)

CREASE_NONE = 0
CREASE_INFINITE = 255


@dataclass
class Material:
    """Material handle referenced by a mesh's material slots."""

    name: str
    use_backface_culling: bool = False
    diffuse_color: list[float] = field(default_factory=lambda: [0.8, 0.8, 0.8, 1.0])
    roughness: float = 0.5
    metallic: float = 0.0


@dataclass
class Mesh:
    """Polygon mesh with loop topology and per-polygon material slot indices."""

    name: str
    vertices: np.ndarray  # (V, 3) float
    polygon_loop_start: np.ndarray  # (P,) int
    polygon_loop_total: np.ndarray  # (P,) int
    polygon_material_index: np.ndarray  # (P,) int
    loop_vertex: np.ndarray  # (L,) int
    edges: np.ndarray  # (E, 2) int
    edge_crease: np.ndarray  # (E,) uint8
    material_slots: list[Material | None] = field(default_factory=list)
    freed: bool = False

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_polygons(self) -> int:
        return len(self.polygon_loop_total)

    @property
    def num_loops(self) -> int:
        return len(self.loop_vertex)

    @property
    def material_count(self) -> int:
        return len(self.material_slots)

    def material_at(self, slot: int) -> Material | None:
        """Material in ``slot``, or None for an empty or out-of-range slot."""
        if 0 <= slot < len(self.material_slots):
            return self.material_slots[slot]
        return None

    def with_vertices(self, vertices: np.ndarray) -> Mesh:
        """Copy of this mesh with replaced vertex positions (topology shared)."""
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        if len(vertices) != self.num_vertices:
            raise ValueError(
                f"Mesh '{self.name}' has {self.num_vertices} vertices, "
                f"got {len(vertices)} positions"
            )
        return replace(
            self, vertices=vertices, material_slots=list(self.material_slots), freed=False
        )

    def free(self) -> None:
        """Drop array data. Only meant for snapshots owned by the exporter."""
        if self.freed:
            raise RuntimeError(f"Mesh '{self.name}' freed twice")
        empty_int = np.zeros(0, dtype=np.int32)
        self.vertices = np.zeros((0, 3), dtype=np.float64)
        self.polygon_loop_start = empty_int
        self.polygon_loop_total = empty_int
        self.polygon_material_index = empty_int
        self.loop_vertex = empty_int
        self.edges = np.zeros((0, 2), dtype=np.int32)
        self.edge_crease = np.zeros(0, dtype=np.uint8)
        self.material_slots = []
        self.freed = True

    @classmethod
    def from_polygons(
        cls,
        name: str,
        vertices: Sequence[Sequence[float]] | np.ndarray,
        polygons: Sequence[Sequence[int]],
        *,
        material_indices: Sequence[int] | None = None,
        material_slots: Sequence[Material | None] = (),
        edges: Sequence[Sequence[int]] | None = None,
        creases: Mapping[tuple[int, int], int] | None = None,
    ) -> Mesh:
        """Build loop/polygon/edge tables from per-polygon vertex index lists.

        Args:
            name: Mesh name.
            vertices: (V, 3) vertex positions.
            polygons: Vertex indices of each polygon, in corner order.
            material_indices: Material slot per polygon (default: slot 0).
            material_slots: Material per slot; None marks an empty slot.
            edges: Explicit edge list. When omitted, edges are derived from
                polygon boundaries in order of first appearance.
            creases: Crease value per edge, keyed by vertex pair in either order.

        Returns:
            The assembled Mesh.
        """
        verts = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        totals = np.array([len(p) for p in polygons], dtype=np.int32)
        starts = np.zeros(len(polygons), dtype=np.int32)
        if len(polygons) > 1:
            starts[1:] = np.cumsum(totals)[:-1]
        loop_vertex = np.array([v for p in polygons for v in p], dtype=np.int32)

        if loop_vertex.size and (loop_vertex.min() < 0 or loop_vertex.max() >= len(verts)):
            raise ValueError(f"Mesh '{name}' has polygon corners outside the vertex range")

        if material_indices is None:
            mat_index = np.zeros(len(polygons), dtype=np.int32)
        else:
            mat_index = np.asarray(material_indices, dtype=np.int32)
            if len(mat_index) != len(polygons):
                raise ValueError(
                    f"Mesh '{name}': {len(mat_index)} material indices for "
                    f"{len(polygons)} polygons"
                )

        if edges is None:
            edge_list = _boundary_edges(polygons)
        else:
            edge_list = [tuple(int(v) for v in e) for e in edges]
        edge_arr = np.array(edge_list, dtype=np.int32).reshape(-1, 2)

        crease_lookup = {}
        for (v1, v2), value in (creases or {}).items():
            if not CREASE_NONE <= int(value) <= CREASE_INFINITE:
                raise ValueError(f"Crease value {value} out of range 0..255")
            crease_lookup[frozenset((int(v1), int(v2)))] = int(value)
        edge_crease = np.array(
            [crease_lookup.get(frozenset(e), CREASE_NONE) for e in edge_arr.tolist()],
            dtype=np.uint8,
        )
        unmatched = set(crease_lookup) - {frozenset(e) for e in edge_arr.tolist()}
        if unmatched:
            logger.warning(f"Mesh '{name}': {len(unmatched)} creases do not match any edge")

        return cls(
            name=name,
            vertices=verts,
            polygon_loop_start=starts,
            polygon_loop_total=totals,
            polygon_material_index=mat_index,
            loop_vertex=loop_vertex,
            edges=edge_arr,
            edge_crease=edge_crease,
            material_slots=list(material_slots),
        )


def _boundary_edges(polygons: Sequence[Sequence[int]]) -> list[tuple[int, int]]:
    """Unique undirected polygon boundary edges, in order of first appearance."""
    seen: set[frozenset[int]] = set()
    edges: list[tuple[int, int]] = []
    for poly in polygons:
        n = len(poly)
        for i in range(n):
            v1, v2 = int(poly[i]), int(poly[(i + 1) % n])
            key = frozenset((v1, v2))
            if v1 == v2 or key in seen:
                continue
            seen.add(key)
            edges.append((v1, v2))
    return edges


@dataclass
class SceneObject:
    """An exportable object: its evaluated mesh plus optional vertex keyframes.

    ``mesh`` is None for objects without exportable geometry. Objects with
    keyframes get a fresh mesh generated per frame.
    """

    name: str
    mesh: Mesh | None
    keyframes: dict[int, np.ndarray] = field(default_factory=dict)

    @property
    def is_animated(self) -> bool:
        return bool(self.keyframes)

    def vertices_at(self, frame: float) -> np.ndarray:
        """Vertex positions at ``frame``, linearly interpolated between keyframes."""
        if self.mesh is None:
            raise ValueError(f"Object '{self.name}' has no mesh")
        if not self.keyframes:
            return self.mesh.vertices

        frames = sorted(self.keyframes)
        if frame <= frames[0]:
            return self.keyframes[frames[0]]
        if frame >= frames[-1]:
            return self.keyframes[frames[-1]]

        upper = next(i for i, f in enumerate(frames) if f >= frame)
        f0, f1 = frames[upper - 1], frames[upper]
        t = (frame - f0) / (f1 - f0)
        return (1.0 - t) * self.keyframes[f0] + t * self.keyframes[f1]


def build_material(spec: MaterialSpec) -> Material:
    return Material(
        name=spec.name,
        use_backface_culling=spec.use_backface_culling,
        diffuse_color=list(spec.diffuse_color),
        roughness=spec.roughness,
        metallic=spec.metallic,
    )


def build_mesh(name: str, spec: MeshSpec, materials: Mapping[str, Material]) -> Mesh:
    """Turn a validated MeshSpec into a Mesh, resolving material slot names."""
    slots = [materials[slot] if slot is not None else None for slot in spec.material_slots]
    creases = {(c[0], c[1]): c[2] for c in spec.creases}
    return Mesh.from_polygons(
        name,
        spec.vertices,
        spec.polygons,
        material_indices=spec.material_indices,
        material_slots=slots,
        creases=creases,
    )


def build_object(spec: ObjectSpec, materials: Mapping[str, Material]) -> SceneObject:
    mesh = build_mesh(spec.name, spec.mesh, materials) if spec.mesh is not None else None
    keyframes = {
        frame: np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        for frame, positions in spec.keyframes.items()
    }
    if mesh is not None:
        for frame, positions in keyframes.items():
            if len(positions) != mesh.num_vertices:
                raise ValueError(
                    f"Object '{spec.name}' keyframe {frame} has {len(positions)} "
                    f"positions, mesh has {mesh.num_vertices} vertices"
                )
    return SceneObject(name=spec.name, mesh=mesh, keyframes=keyframes)


def build_scene(spec: SceneSpec) -> list[SceneObject]:
    """Build all scene objects, sharing Material instances by name."""
    materials = {m.name: build_material(m) for m in spec.materials}
    objects = [build_object(o, materials) for o in spec.objects]
    logger.info(f"Built {len(objects)} objects with {len(materials)} materials")
    return objects
