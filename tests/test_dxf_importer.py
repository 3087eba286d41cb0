"""Tests for dxf_importer module."""
import io
import os

import ezdxf
import pytest

from dxf_exporter import roof_to_dxf, roof_to_dxf_string
from dxf_importer import (
    ImportParseError,
    ImportRejectedError,
    ImportedRoof,
    load_roof_entities,
    parse_dxf,
    parse_dxf_strict,
    read_dxf,
)
from geometry_primitives import bounding_box
from roof_model import RoofConfig, RoofProject


def _to_text(doc) -> str:
    stream = io.StringIO()
    doc.write(stream)
    return stream.getvalue()


class TestRoundTrip:
    """Export then import the same project."""

    def test_square_round_trip(self, round_trip_project):
        imported = parse_dxf(roof_to_dxf_string(round_trip_project))
        assert imported is not None

        original_bbox = bounding_box(v.as_tuple() for v in round_trip_project.vertices)
        assert bounding_box(v.as_tuple() for v in imported.vertices) == pytest.approx(original_bbox)

        assert len(imported.obstacles) == 1
        assert len(imported.drains) == 1
        obstacle = imported.obstacles[0]
        assert (obstacle.x, obstacle.y) == pytest.approx((2.5, 2.5))
        assert (obstacle.width, obstacle.height) == pytest.approx((1.0, 1.0))
        drain = imported.drains[0]
        assert (drain.x, drain.y) == pytest.approx((2.5, 2.5))

    def test_file_round_trip(self, tmp_path, round_trip_project):
        path = roof_to_dxf(round_trip_project, str(tmp_path / "roof.dxf"))
        imported = read_dxf(path)
        assert len(imported.vertices) == 4

    def test_apply_keeps_existing_config(self, round_trip_project):
        imported = parse_dxf(roof_to_dxf_string(round_trip_project))
        current = RoofProject(config=RoofConfig(roof_height=7.0))
        merged = imported.apply_to(current)
        assert merged.config.roof_height == 7.0
        assert len(merged.vertices) == 4


class TestHeuristics:
    """Footprint selection and obstacle reconstruction."""

    def test_largest_bbox_is_footprint_regardless_of_order(self):
        doc = ezdxf.new("R2010")
        msp = doc.modelspace()
        msp.add_lwpolyline([(1, 1), (2, 1), (2, 3), (1, 3)], close=True)
        msp.add_lwpolyline([(0, 0), (8, 0), (8, 6), (0, 6)], close=True)
        msp.add_lwpolyline([(5, 5), (5.5, 5), (5.5, 5.5)], close=True)

        result = load_roof_entities(doc)
        assert [v.as_tuple() for v in result.vertices] == [(0, 0), (8, 0), (8, 6), (0, 6)]
        assert len(result.obstacles) == 2
        first = result.obstacles[0]
        assert (first.x, first.y, first.width, first.height) == pytest.approx((1.5, 2.0, 1.0, 2.0))

    def test_tie_keeps_earliest(self):
        doc = ezdxf.new("R2010")
        msp = doc.modelspace()
        msp.add_lwpolyline([(0, 0), (4, 0), (4, 4), (0, 4)], close=True)
        msp.add_lwpolyline([(10, 10), (14, 10), (14, 14), (10, 14)], close=True)

        result = load_roof_entities(doc)
        assert result.vertices[0].as_tuple() == (0, 0)
        assert (result.obstacles[0].x, result.obstacles[0].y) == pytest.approx((12.0, 12.0))

    def test_degenerate_extent_defaults_to_one(self):
        doc = ezdxf.new("R2010")
        msp = doc.modelspace()
        msp.add_lwpolyline([(0, 0), (8, 0), (8, 6), (0, 6)], close=True)
        msp.add_lwpolyline([(2, 3), (5, 3)])

        obstacle = load_roof_entities(doc).obstacles[0]
        assert obstacle.width == pytest.approx(3.0)
        assert obstacle.height == 1.0
        assert (obstacle.x, obstacle.y) == pytest.approx((3.5, 3.0))

    def test_legacy_polyline_supported(self):
        doc = ezdxf.new("R2010")
        doc.modelspace().add_polyline2d([(0, 0), (6, 0), (6, 3)], close=True)
        result = load_roof_entities(doc)
        assert len(result.vertices) == 3

    def test_circles_only(self):
        doc = ezdxf.new("R2010")
        doc.modelspace().add_circle((3, 4), radius=2.0)
        result = load_roof_entities(doc)
        assert result.vertices == []
        assert [(d.x, d.y) for d in result.drains] == [(3.0, 4.0)]


class TestFailures:
    """Rejected and malformed input."""

    def test_empty_document_rejected(self):
        text = _to_text(ezdxf.new("R2010"))
        with pytest.raises(ImportRejectedError):
            parse_dxf_strict(text)
        assert parse_dxf(text) is None

    def test_unrelated_entities_rejected(self):
        doc = ezdxf.new("R2010")
        doc.modelspace().add_line((0, 0), (10, 10))
        assert parse_dxf(_to_text(doc)) is None

    def test_garbage_is_parse_error(self):
        garbage = "hello\nworld\nthis is\nnot a dxf\n"
        with pytest.raises(ImportParseError):
            parse_dxf_strict(garbage)
        assert parse_dxf(garbage) is None

    def test_missing_file(self, tmp_path):
        assert read_dxf(os.path.join(str(tmp_path), "missing.dxf")) is None

    def test_imported_roof_empty_flag(self):
        assert ImportedRoof().is_empty
