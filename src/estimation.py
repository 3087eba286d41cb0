"""
Material cost estimation.

A linear pricing heuristic over the footprint: net tileable area times a base
rate adjusted for roof height and tile size. Not a structural calculation.
"""
import math
from dataclasses import asdict, dataclass
from typing import Dict, Sequence

from geometry_primitives import polygon_area
from roof_model import Obstacle, RoofProject, Vertex2D

BASELINE_HEIGHT_M = 3.0
HEIGHT_SURCHARGE_PER_M = 0.1    # +10% per meter above the baseline
BASELINE_TILE_SIZE_M = 0.5


@dataclass(frozen=True)
class Estimate:
    """Area and cost breakdown for one roof."""
    footprint_area: float
    obstacles_area: float
    net_area: float
    effective_rate: float
    total_cost: float
    tile_count: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


def obstacles_area(obstacles: Sequence[Obstacle]) -> float:
    """Sum of obstacle rectangles, not clipped to the footprint."""
    return float(sum(o.width * o.height for o in obstacles))


def height_factor(roof_height: float) -> float:
    return 1.0 + max(0.0, (roof_height - BASELINE_HEIGHT_M) * HEIGHT_SURCHARGE_PER_M)


def tile_factor(tile_size: float) -> float:
    """Smaller tiles need more labor: 1 + (0.5 - tile_size) below 0.5 m."""
    if tile_size < BASELINE_TILE_SIZE_M:
        return 1.0 + (BASELINE_TILE_SIZE_M - tile_size)
    return 1.0


def tile_count(net_area: float, tile_size: float) -> int:
    """Tiles needed to cover net_area, rounded up."""
    if tile_size <= 0 or net_area <= 0:
        return 0
    return int(math.ceil(net_area / (tile_size * tile_size)))


def calculate_estimates(
    vertices: Sequence[Vertex2D],
    obstacles: Sequence[Obstacle],
    base_rate: float,
    roof_height: float,
    tile_size: float,
) -> Estimate:
    """Compute footprint/obstacle/net areas and the resulting cost.

    Args:
        vertices: Ordered footprint ring.
        obstacles: Rectangles subtracted from the tileable area.
        base_rate: Material cost per square meter.
        roof_height: Edge height, drives the height surcharge.
        tile_size: Tile edge length, drives the labor factor.
    """
    footprint = polygon_area(vertices)
    blocked = obstacles_area(obstacles)
    net = max(0.0, footprint - blocked)
    rate = base_rate * height_factor(roof_height) * tile_factor(tile_size)

    return Estimate(
        footprint_area=footprint,
        obstacles_area=blocked,
        net_area=net,
        effective_rate=rate,
        total_cost=net * rate,
        tile_count=tile_count(net, tile_size),
    )


def estimate_project(project: RoofProject) -> Estimate:
    cfg = project.config
    return calculate_estimates(
        project.vertices,
        project.obstacles,
        cfg.material_cost_per_sq_meter,
        cfg.roof_height,
        cfg.tile_size,
    )
