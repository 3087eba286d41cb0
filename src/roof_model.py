"""
Core data structures for the roof planner.

A RoofProject is the caller-owned state struct: footprint vertices, obstacles,
drains and the RoofConfig. Every geometry function takes these as input and
never mutates them.
"""
import uuid
from dataclasses import asdict, dataclass, field, replace
from typing import Dict, List, Optional, Tuple


def new_entity_id() -> str:
    """Short random id for obstacles and drains."""
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class Vertex2D:
    """A plan-space coordinate in meters."""
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Obstacle:
    """
    Axis-aligned rectangle on the roof (chimney, skylight, vent).

    Attributes:
        x, y: Center of the rectangle
        width: Extent along plan x
        height: Extent along plan y (plan size, not elevation)
    """
    x: float
    y: float
    width: float
    height: float
    id: str = field(default_factory=new_entity_id)

    @property
    def area(self) -> float:
        return self.width * self.height

    def corners(self) -> List[Tuple[float, float]]:
        """Four corners, counter-clockwise from the min corner."""
        hw = self.width / 2
        hh = self.height / 2
        return [
            (self.x - hw, self.y - hh),
            (self.x + hw, self.y - hh),
            (self.x + hw, self.y + hh),
            (self.x - hw, self.y + hh),
        ]


@dataclass
class Drain:
    """Interior sample point; its elevation is RoofConfig.drain_height."""
    x: float
    y: float
    id: str = field(default_factory=new_entity_id)


@dataclass(frozen=True)
class RoofConfig:
    """Scalar parameters read by the geometry and estimation code."""
    roof_height: float = 3.0       # elevation of all footprint vertices (m)
    drain_height: float = 2.5      # elevation of all drain vertices (m)
    tile_size: float = 0.5         # tile edge length (m)
    wall_thickness: float = 0.2    # perimeter wall thickness (m)
    material_cost_per_sq_meter: float = 50.0


@dataclass
class RoofProject:
    """
    Complete editable roof state.

    The editing helpers mutate this struct in place; it belongs to the caller.
    """
    vertices: List[Vertex2D] = field(default_factory=list)
    obstacles: List[Obstacle] = field(default_factory=list)
    drains: List[Drain] = field(default_factory=list)
    config: RoofConfig = field(default_factory=RoofConfig)

    # ─── Footprint ───────────────────────────────────────────────────────

    def add_vertex(self, x: float, y: float) -> Vertex2D:
        vertex = Vertex2D(float(x), float(y))
        self.vertices.append(vertex)
        return vertex

    def update_vertex(self, index: int, x: float, y: float) -> None:
        if not 0 <= index < len(self.vertices):
            raise IndexError(f"No footprint vertex at index {index}")
        self.vertices[index] = Vertex2D(float(x), float(y))

    # ─── Obstacles ───────────────────────────────────────────────────────

    def add_obstacle(self, obstacle: Obstacle) -> Obstacle:
        self.obstacles.append(obstacle)
        return obstacle

    def get_obstacle(self, obstacle_id: str) -> Optional[Obstacle]:
        for obstacle in self.obstacles:
            if obstacle.id == obstacle_id:
                return obstacle
        return None

    def update_obstacle(self, obstacle_id: str, **updates) -> Obstacle:
        """Change position/size of an obstacle. Unknown fields raise TypeError."""
        if "id" in updates:
            raise ValueError("Obstacle id cannot be changed")
        for i, obstacle in enumerate(self.obstacles):
            if obstacle.id == obstacle_id:
                updated = replace(obstacle, **updates)
                self.obstacles[i] = updated
                return updated
        raise KeyError(f"Unknown obstacle id: {obstacle_id}")

    def remove_obstacle(self, obstacle_id: str) -> None:
        self.obstacles = [o for o in self.obstacles if o.id != obstacle_id]

    # ─── Drains ──────────────────────────────────────────────────────────

    def add_drain(self, drain: Drain) -> Drain:
        self.drains.append(drain)
        return drain

    def remove_drain(self, drain_id: str) -> None:
        self.drains = [d for d in self.drains if d.id != drain_id]

    # ─── Whole-project operations ────────────────────────────────────────

    def reset(self) -> None:
        """Clear geometry; configuration is kept."""
        self.vertices = []
        self.obstacles = []
        self.drains = []

    def with_config(self, **changes) -> "RoofProject":
        """Return a copy of this project with some config values replaced.

        Obstacles and drains are copied too, so editing one project never
        changes the other.
        """
        return RoofProject(
            vertices=list(self.vertices),
            obstacles=[replace(o) for o in self.obstacles],
            drains=[replace(d) for d in self.drains],
            config=replace(self.config, **changes),
        )

    def to_dict(self) -> Dict:
        return {
            "vertices": [asdict(v) for v in self.vertices],
            "obstacles": [asdict(o) for o in self.obstacles],
            "drains": [asdict(d) for d in self.drains],
            "config": asdict(self.config),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "RoofProject":
        return cls(
            vertices=[Vertex2D(float(v["x"]), float(v["y"])) for v in data.get("vertices", [])],
            obstacles=[Obstacle(**o) for o in data.get("obstacles", [])],
            drains=[Drain(**d) for d in data.get("drains", [])],
            config=RoofConfig(**data.get("config", {})),
        )
