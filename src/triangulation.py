"""
Constrained triangulation of a roof footprint and its drains.

Delaunay triangulates the convex hull of footprint vertices + drain points.
For concave footprints the hull contains triangles outside the roof, so every
triangle whose centroid fails the ray-casting test is discarded.
"""
import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.spatial import Delaunay, QhullError

from geometry_primitives import points_in_polygon, vertices_to_array
from roof_model import Drain, Vertex2D

logger = logging.getLogger(__name__)


@dataclass
class Triangulation:
    """Retained triangles over the combined point array.

    Indices [0, n_footprint) are footprint vertices; the rest are drains.
    """
    points: np.ndarray       # (N, 2) combined plan points
    n_footprint: int
    triangles: np.ndarray    # (T, 3) int vertex indices

    @property
    def is_empty(self) -> bool:
        return len(self.triangles) == 0

    def centroids(self) -> np.ndarray:
        """(T, 2) plan-space centroids of the retained triangles."""
        if self.is_empty:
            return np.zeros((0, 2), dtype=float)
        return self.points[self.triangles].mean(axis=1)


def combined_points(
    vertices: Sequence[Vertex2D],
    drains: Sequence[Drain],
) -> np.ndarray:
    """Footprint vertices followed by drain points, as (N, 2)."""
    ring = vertices_to_array(vertices)
    if not drains:
        return ring
    drain_pts = np.array([(d.x, d.y) for d in drains], dtype=float)
    return np.vstack([ring, drain_pts])


def triangulate_footprint(
    vertices: Sequence[Vertex2D],
    drains: Sequence[Drain] = (),
) -> Triangulation:
    """Delaunay-triangulate footprint + drains and keep triangles inside the footprint.

    Args:
        vertices: Ordered footprint ring (>= 3 vertices for any output).
        drains: Interior sample points.

    Returns:
        Triangulation. Empty when the footprint has fewer than 3 vertices or
        the point set is degenerate (collinear / coincident).
    """
    points = combined_points(vertices, drains)
    n_footprint = len(vertices)
    empty = Triangulation(points, n_footprint, np.zeros((0, 3), dtype=int))

    if n_footprint < 3:
        logger.debug("Footprint has %d vertices, nothing to triangulate", n_footprint)
        return empty

    try:
        delaunay = Delaunay(points)
    except (QhullError, ValueError) as exc:
        logger.debug("Delaunay failed on degenerate footprint: %s", exc)
        return empty

    candidates = np.asarray(delaunay.simplices, dtype=int)
    centroids = points[candidates].mean(axis=1)
    inside = points_in_polygon(centroids, points[:n_footprint])
    retained = candidates[inside]

    logger.debug(
        "Triangulated %d points: %d candidates, %d inside footprint",
        len(points), len(candidates), len(retained),
    )
    return Triangulation(points, n_footprint, retained)
