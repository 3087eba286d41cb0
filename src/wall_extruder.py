"""
Perimeter wall extrusion.

Offsets the footprint inward by the wall thickness with mitered corners, then
emits four quads per footprint edge (outer face, inner face, top rim, bottom
cap) between elevation 0 and roof_height.

Mesh buffers use Y-up coordinates: (plan-x, elevation, plan-y).
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import trimesh

from geometry_primitives import is_counter_clockwise, vertices_to_array
from roof_model import RoofConfig, Vertex2D

logger = logging.getLogger(__name__)

MIN_EDGE_LENGTH = 1e-9
MIN_BISECTOR_LENGTH = 1e-3
MIN_MITER_DOT = 1e-6

_QUAD_UVS = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


@dataclass
class WallMesh:
    """Indexed wall mesh. Each quad owns 4 vertices and 2 triangles."""
    vertices: np.ndarray                  # (4Q, 3) Y-up
    uvs: np.ndarray                       # (4Q, 2)
    faces: np.ndarray                     # (2Q, 3) int
    inner_points: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)))

    @property
    def quad_count(self) -> int:
        return len(self.faces) // 2

    @property
    def triangle_count(self) -> int:
        return len(self.faces)

    def to_trimesh(self) -> trimesh.Trimesh:
        return trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)


def _edge_directions(ring: np.ndarray) -> np.ndarray:
    """Unit direction of edge i -> i+1. Zero-length edges get a zero vector."""
    deltas = np.roll(ring, -1, axis=0) - ring
    lengths = np.linalg.norm(deltas, axis=1)
    safe = np.where(lengths < MIN_EDGE_LENGTH, 1.0, lengths)
    dirs = deltas / safe[:, None]
    dirs[lengths < MIN_EDGE_LENGTH] = 0.0
    return dirs


def compute_inner_polygon(vertices: Sequence[Vertex2D], thickness: float) -> np.ndarray:
    """Inward mitered offset of the footprint ring.

    The miter distance thickness / dot(n, bisector) keeps the wall thickness
    constant across each corner. Near-parallel or opposite edges (vanishing
    bisector) fall back to a plain offset along the incoming edge normal.

    Returns:
        (N, 2) inner vertices, one per footprint vertex.
    """
    ring = vertices_to_array(vertices)
    n = len(ring)
    if n == 0:
        return ring

    dirs = _edge_directions(ring)
    # Left normal points inward for CCW rings, right normal for CW rings.
    if is_counter_clockwise(ring):
        normals = np.column_stack([-dirs[:, 1], dirs[:, 0]])
    else:
        normals = np.column_stack([dirs[:, 1], -dirs[:, 0]])

    valid = np.any(normals != 0.0, axis=1)
    if not valid.any():
        return ring.copy()

    inner = np.empty_like(ring)
    for i in range(n):
        # Zero-length edges are skipped in favour of the nearest real edge.
        k_in = (i - 1) % n
        while not valid[k_in]:
            k_in = (k_in - 1) % n
        k_out = i
        while not valid[k_out]:
            k_out = (k_out + 1) % n
        n_in = normals[k_in]      # edge arriving at vertex i
        n_out = normals[k_out]    # edge leaving vertex i

        bisector = n_in + n_out
        b_len = float(np.linalg.norm(bisector))
        if b_len < MIN_BISECTOR_LENGTH:
            inner[i] = ring[i] + n_in * thickness
            continue

        bisector /= b_len
        dot = float(np.dot(n_in, bisector))
        miter = thickness / dot if abs(dot) > MIN_MITER_DOT else thickness
        inner[i] = ring[i] + bisector * miter

    return inner


def extrude_walls(
    vertices: Sequence[Vertex2D],
    roof_height: float,
    thickness: float,
) -> Optional[WallMesh]:
    """Extrude mitered perimeter walls from elevation 0 to roof_height.

    Args:
        vertices: Ordered footprint ring.
        roof_height: Wall top elevation.
        thickness: Inward wall thickness; 0 gives coincident inner/outer faces.

    Returns:
        WallMesh with 4 quads per edge, or None for fewer than 3 vertices.
    """
    if len(vertices) < 3:
        return None

    outer = vertices_to_array(vertices)
    inner = compute_inner_polygon(vertices, thickness)
    n = len(outer)
    top = float(roof_height)
    base = 0.0

    quad_vertices: List[tuple] = []

    def add_quad(p1, p2, p3, p4) -> None:
        quad_vertices.extend([p1, p2, p3, p4])

    for i in range(n):
        j = (i + 1) % n
        (ox1, oy1), (ox2, oy2) = outer[i], outer[j]
        (ix1, iy1), (ix2, iy2) = inner[i], inner[j]

        # Outer face
        add_quad((ox1, base, oy1), (ox2, base, oy2), (ox2, top, oy2), (ox1, top, oy1))
        # Inner face, reversed winding
        add_quad((ix2, base, iy2), (ix1, base, iy1), (ix1, top, iy1), (ix2, top, iy2))
        # Top rim
        add_quad((ox1, top, oy1), (ox2, top, oy2), (ix2, top, iy2), (ix1, top, iy1))
        # Bottom cap, reversed winding
        add_quad((ox1, base, oy1), (ix1, base, iy1), (ix2, base, iy2), (ox2, base, oy2))

    quad_count = len(quad_vertices) // 4
    starts = np.arange(quad_count, dtype=np.int64) * 4
    faces = np.empty((quad_count * 2, 3), dtype=np.int64)
    faces[0::2] = np.column_stack([starts, starts + 1, starts + 2])
    faces[1::2] = np.column_stack([starts, starts + 2, starts + 3])

    logger.debug("Extruded %d wall quads for %d edges", quad_count, n)
    return WallMesh(
        vertices=np.array(quad_vertices, dtype=float),
        uvs=np.tile(np.array(_QUAD_UVS), (quad_count, 1)),
        faces=faces,
        inner_points=inner,
    )


def extrude_project_walls(vertices: Sequence[Vertex2D], config: RoofConfig) -> Optional[WallMesh]:
    """extrude_walls with height and thickness taken from a RoofConfig."""
    return extrude_walls(vertices, config.roof_height, config.wall_thickness)
