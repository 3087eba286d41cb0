"""Tests for dxf_exporter module."""
import io
import os
import tempfile

import ezdxf
import pytest

from conftest import make_ring
from dxf_exporter import DXFExportConfig, roof_to_dxf, roof_to_dxf_string
from roof_model import RoofProject


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield d


def _reload(text: str):
    return ezdxf.read(io.StringIO(text))


class TestRoofToDXF:
    """File export."""

    def test_exports_file(self, tmp_dir, round_trip_project):
        filepath = os.path.join(tmp_dir, "nested", "roof.dxf")
        result = roof_to_dxf(round_trip_project, filepath)

        assert result == filepath
        assert os.path.isfile(filepath)
        assert os.path.getsize(filepath) > 0

    def test_layers_and_colors(self, round_trip_project):
        doc = _reload(roof_to_dxf_string(round_trip_project))
        expected = {"ROOF_BORDER": 5, "OBSTACLES": 1, "DRAINS": 3, "ROOF_MESH": 7}
        for name, color in expected.items():
            assert doc.layers.has_entry(name)
            assert doc.layers.get(name).color == color


class TestEntities:
    """Entity content per layer."""

    def test_footprint_polyline(self, round_trip_project):
        msp = _reload(roof_to_dxf_string(round_trip_project)).modelspace()
        borders = msp.query('LWPOLYLINE[layer=="ROOF_BORDER"]')
        assert len(borders) == 1
        border = borders[0]
        assert border.closed
        assert list(border.get_points(format="xy")) == [(0, 0), (5, 0), (5, 5), (0, 5)]

    def test_repeated_closing_vertex_is_kept(self):
        coords = [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
        project = RoofProject(vertices=make_ring(coords))
        msp = _reload(roof_to_dxf_string(project)).modelspace()
        border = msp.query('LWPOLYLINE[layer=="ROOF_BORDER"]')[0]
        assert len(border) == 5
        assert list(border.get_points(format="xy")) == coords

    def test_obstacle_corners(self, round_trip_project):
        msp = _reload(roof_to_dxf_string(round_trip_project)).modelspace()
        obstacles = msp.query('LWPOLYLINE[layer=="OBSTACLES"]')
        assert len(obstacles) == 1
        assert obstacles[0].closed
        points = list(obstacles[0].get_points(format="xy"))
        assert points == [(2.0, 2.0), (3.0, 2.0), (3.0, 3.0), (2.0, 3.0)]

    def test_drain_circle(self, round_trip_project):
        msp = _reload(roof_to_dxf_string(round_trip_project)).modelspace()
        circles = msp.query('CIRCLE[layer=="DRAINS"]')
        assert len(circles) == 1
        assert circles[0].dxf.radius == pytest.approx(0.15)
        assert tuple(circles[0].dxf.center)[:2] == pytest.approx((2.5, 2.5))

    def test_mesh_faces_are_z_up(self, round_trip_project):
        msp = _reload(roof_to_dxf_string(round_trip_project)).modelspace()
        faces = msp.query('3DFACE[layer=="ROOF_MESH"]')
        assert len(faces) == 4
        for face in faces:
            # Fourth corner repeats the third
            assert tuple(face.dxf.vtx3) == pytest.approx(tuple(face.dxf.vtx2))
            zs = sorted(face.dxf.get(f"vtx{i}").z for i in range(3))
            assert zs == pytest.approx([2.5, 3.0, 3.0])

    def test_mesh_can_be_disabled(self, round_trip_project):
        config = DXFExportConfig(include_mesh=False)
        msp = _reload(roof_to_dxf_string(round_trip_project, config)).modelspace()
        assert len(msp.query("3DFACE")) == 0

    def test_partial_footprint_has_no_mesh(self):
        project = RoofProject(vertices=make_ring([(0, 0), (1, 0)]))
        msp = _reload(roof_to_dxf_string(project)).modelspace()
        assert len(msp.query("LWPOLYLINE")) == 1
        assert len(msp.query("3DFACE")) == 0

    def test_empty_project(self):
        msp = _reload(roof_to_dxf_string(RoofProject())).modelspace()
        assert len(msp) == 0
