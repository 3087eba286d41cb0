"""
Shared plan-space geometry helpers.

Shoelace area, ring orientation, ray-casting point-in-polygon and bounding
boxes over footprint vertex rings, plus conversions to Shapely for export and
cross-checking.
"""
from typing import Iterable, Sequence, Tuple

import numpy as np
from shapely.geometry import Polygon

from roof_model import Obstacle, Vertex2D


def vertices_to_array(vertices: Sequence[Vertex2D]) -> np.ndarray:
    """Footprint ring as an (N, 2) float array."""
    if len(vertices) == 0:
        return np.zeros((0, 2), dtype=float)
    return np.array([(v.x, v.y) for v in vertices], dtype=float)


def signed_area(ring: np.ndarray) -> float:
    """Shoelace sum / 2. Positive for counter-clockwise rings."""
    if len(ring) < 3:
        return 0.0
    x = ring[:, 0]
    y = ring[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    return 0.5 * float(np.sum(x * y_next - x_next * y))


def polygon_area(vertices: Sequence[Vertex2D]) -> float:
    """Absolute shoelace area. 0 for fewer than 3 vertices."""
    return abs(signed_area(vertices_to_array(vertices)))


def is_counter_clockwise(ring: np.ndarray) -> bool:
    """True for CCW rings; zero-area rings count as CCW."""
    return signed_area(ring) >= 0.0


def points_in_polygon(points: np.ndarray, ring: np.ndarray) -> np.ndarray:
    """Ray-casting membership test for many points at once.

    An edge (i, j) crosses the +x ray from a point when its y-span straddles
    the point's y and the crossing x lies to the right of the point. Odd
    crossing counts are inside.

    Args:
        points: (M, 2) query points
        ring: (N, 2) polygon vertices, not closed

    Returns:
        (M,) boolean array
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(ring) < 3 or len(points) == 0:
        return np.zeros(len(points), dtype=bool)

    px = points[:, 0][:, None]
    py = points[:, 1][:, None]
    xi = ring[:, 0][None, :]
    yi = ring[:, 1][None, :]
    xj = np.roll(ring[:, 0], 1)[None, :]
    yj = np.roll(ring[:, 1], 1)[None, :]

    straddles = (yi > py) != (yj > py)
    # Horizontal edges never straddle, so their inf/nan crossings are masked.
    with np.errstate(divide="ignore", invalid="ignore"):
        cross_x = (xj - xi) * (py - yi) / (yj - yi) + xi
    crossings = straddles & (px < cross_x)
    return (np.count_nonzero(crossings, axis=1) % 2) == 1


def point_in_polygon(x: float, y: float, vertices: Sequence[Vertex2D]) -> bool:
    """Single-point convenience wrapper around points_in_polygon."""
    ring = vertices_to_array(vertices)
    return bool(points_in_polygon(np.array([[x, y]]), ring)[0])


def bounding_box(points: Iterable[Tuple[float, float]]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y). Raises ValueError on empty input."""
    arr = np.asarray(list(points), dtype=float).reshape(-1, 2)
    if len(arr) == 0:
        raise ValueError("Cannot compute bounding box of no points")
    mins = arr.min(axis=0)
    maxs = arr.max(axis=0)
    return (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


# ─── Shapely conversions ─────────────────────────────────────────────────────

def obstacle_to_polygon(obstacle: Obstacle) -> Polygon:
    """Obstacle rectangle as a Shapely Polygon, corners in Obstacle.corners() order."""
    return Polygon(obstacle.corners())
