"""
Shared test fixtures for the roof planner tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from roof_model import Drain, Obstacle, RoofConfig, RoofProject, Vertex2D


def make_ring(coords):
    return [Vertex2D(float(x), float(y)) for x, y in coords]


@pytest.fixture
def unit_square():
    """[(0,0),(1,0),(1,1),(0,1)], counter-clockwise."""
    return make_ring([(0, 0), (1, 0), (1, 1), (0, 1)])


@pytest.fixture
def square_10m():
    """A 10x10m counter-clockwise square."""
    return make_ring([(0, 0), (10, 0), (10, 10), (0, 10)])


@pytest.fixture
def l_shape():
    """Concave L-shaped footprint (notch cut from the top-right)."""
    return make_ring([(0, 0), (10, 0), (10, 4), (4, 4), (4, 10), (0, 10)])


@pytest.fixture
def default_config():
    return RoofConfig()


@pytest.fixture
def hip_project(square_10m):
    """10x10m square with one drain in the middle."""
    return RoofProject(
        vertices=list(square_10m),
        drains=[Drain(x=5.0, y=5.0, id="d1")],
        config=RoofConfig(roof_height=3.0, drain_height=2.5),
    )


@pytest.fixture
def round_trip_project():
    """5m square, a 1x1 obstacle and a drain, both at the center."""
    return RoofProject(
        vertices=make_ring([(0, 0), (5, 0), (5, 5), (0, 5)]),
        obstacles=[Obstacle(x=2.5, y=2.5, width=1.0, height=1.0, id="o1")],
        drains=[Drain(x=2.5, y=2.5, id="d1")],
    )
