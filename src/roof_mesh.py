"""
Sloped roof surface: height lifting, face normals and ridge/valley extraction.

Footprint vertices sit at roof_height and drains at drain_height, so every
triangle of the constrained triangulation becomes a tilted roof plane. Edges
shared by two triangles whose normals diverge are the visible fold lines.

Mesh buffers use Y-up coordinates: (plan-x, elevation, plan-y).
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from roof_model import Drain, RoofConfig, Vertex2D
from triangulation import Triangulation, triangulate_footprint

logger = logging.getLogger(__name__)

# dot(n1, n2) below this marks a ridge/valley (~2.6 degrees of tilt difference)
RIDGE_DOT_THRESHOLD = 0.999

_UP = np.array([0.0, 1.0, 0.0])


@dataclass
class TriangleRecord:
    """A retained triangle in canonical (up-facing) winding."""
    indices: Tuple[int, int, int]   # into the combined point array
    normal: np.ndarray              # (3,) unit normal, Y-up


@dataclass(frozen=True)
class RidgeSegment:
    """Plan-space endpoints of one ridge/valley edge. Endpoint order is arbitrary."""
    p1: Tuple[float, float]
    p2: Tuple[float, float]


@dataclass
class RoofMesh:
    """Non-indexed roof surface.

    Every triangle corner gets its own position/uv entry, so positions has
    3 rows per triangle and shared vertices are duplicated.
    """
    positions: np.ndarray                  # (3T, 3) Y-up
    uvs: np.ndarray                        # (3T, 2) plan coordinates
    triangles: List[TriangleRecord] = field(default_factory=list)
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)))
    ridges: List[RidgeSegment] = field(default_factory=list)

    @property
    def face_count(self) -> int:
        return len(self.triangles)

    @property
    def is_empty(self) -> bool:
        return self.face_count == 0

    def face_normals(self) -> np.ndarray:
        """(T, 3) unit normals in triangle order."""
        if self.is_empty:
            return np.zeros((0, 3), dtype=float)
        return np.array([t.normal for t in self.triangles])

    def to_trimesh(self) -> trimesh.Trimesh:
        """Trimesh view of the buffer; vertices are not merged."""
        faces = np.arange(len(self.positions), dtype=np.int64).reshape(-1, 3)
        return trimesh.Trimesh(vertices=self.positions, faces=faces, process=False)


def vertex_elevations(
    n_points: int,
    n_footprint: int,
    roof_height: float,
    drain_height: float,
) -> np.ndarray:
    """Elevation per combined point: roof_height for footprint, drain_height for drains."""
    heights = np.full(n_points, float(drain_height))
    heights[:n_footprint] = float(roof_height)
    return heights


def lift_triangles(
    triangulation: Triangulation,
    roof_height: float,
    drain_height: float,
) -> Tuple[List[TriangleRecord], np.ndarray, np.ndarray]:
    """Lift plan triangles to 3D and compute one unit normal per face.

    Each triangle is put in the winding whose normal has a positive
    elevation component before its normal is stored, so adjacent faces
    always compare like for like.

    Returns:
        (records, positions (3T, 3), uvs (3T, 2))
    """
    if triangulation.is_empty:
        return [], np.zeros((0, 3), dtype=float), np.zeros((0, 2), dtype=float)

    points = triangulation.points
    heights = vertex_elevations(
        len(points), triangulation.n_footprint, roof_height, drain_height,
    )
    lifted = np.column_stack([points[:, 0], heights, points[:, 1]])  # (N, 3)

    tris = triangulation.triangles.copy()
    corners = lifted[tris]                      # (T, 3, 3)
    normals = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])

    flip = normals[:, 1] < 0
    tris[flip] = tris[flip][:, [0, 2, 1]]
    normals[flip] = -normals[flip]

    lengths = np.linalg.norm(normals, axis=1)
    degenerate = lengths < 1e-12
    if np.any(degenerate):
        logger.debug("%d zero-area triangles given an up normal", int(degenerate.sum()))
    normals[degenerate] = _UP
    lengths[degenerate] = 1.0
    normals = normals / lengths[:, None]

    records = [
        TriangleRecord(indices=(int(a), int(b), int(c)), normal=n)
        for (a, b, c), n in zip(tris, normals)
    ]
    flat = tris.reshape(-1)
    return records, lifted[flat], points[flat].copy()


def extract_ridges(
    triangles: Sequence[TriangleRecord],
    points: np.ndarray,
    threshold: float = RIDGE_DOT_THRESHOLD,
) -> List[RidgeSegment]:
    """Find internal edges where the two adjacent face normals diverge.

    Adjacency comes from trimesh, which only pairs faces across edges shared
    by exactly two triangles, so boundary edges are never ridges. Stored
    normals are compared rather than trimesh's, keeping the up normal given
    to zero-area faces. The output is unbounded; capping is up to the
    renderer.
    """
    if not triangles:
        return []

    points = np.asarray(points, dtype=float)
    plan = np.column_stack([points[:, 0], np.zeros(len(points)), points[:, 1]])
    faces = np.array([t.indices for t in triangles], dtype=np.int64)
    mesh = trimesh.Trimesh(vertices=plan, faces=faces, process=False)

    adjacency = mesh.face_adjacency             # (P, 2) face index pairs
    if len(adjacency) == 0:
        return []
    edges = mesh.face_adjacency_edges           # (P, 2) shared vertex indices
    normals = np.array([t.normal for t in triangles])
    dots = np.einsum("ij,ij->i", normals[adjacency[:, 0]], normals[adjacency[:, 1]])

    return [
        RidgeSegment(
            p1=(float(points[a][0]), float(points[a][1])),
            p2=(float(points[b][0]), float(points[b][1])),
        )
        for a, b in edges[dots < threshold]
    ]


def build_roof_mesh(
    vertices: Sequence[Vertex2D],
    drains: Sequence[Drain],
    config: Optional[RoofConfig] = None,
    ridge_threshold: float = RIDGE_DOT_THRESHOLD,
) -> Optional[RoofMesh]:
    """Triangulate, lift and extract ridges for one footprint.

    Args:
        vertices: Ordered footprint ring.
        drains: Drain points (elevation = config.drain_height).
        config: Heights; defaults to RoofConfig().
        ridge_threshold: Normal dot product below which an edge is a ridge.

    Returns:
        RoofMesh, possibly empty for degenerate footprints, or None when the
        footprint has fewer than 3 vertices.
    """
    if config is None:
        config = RoofConfig()
    if len(vertices) < 3:
        return None

    triangulation = triangulate_footprint(vertices, drains)
    records, positions, uvs = lift_triangles(
        triangulation, config.roof_height, config.drain_height,
    )
    ridges = extract_ridges(records, triangulation.points, ridge_threshold)

    logger.debug("Roof mesh: %d faces, %d ridges", len(records), len(ridges))
    return RoofMesh(
        positions=positions,
        uvs=uvs,
        triangles=records,
        points=triangulation.points,
        ridges=ridges,
    )
