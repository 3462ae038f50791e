"""Tests for rotation-aware port geometry and the snapping helpers."""

from __future__ import annotations

import pytest

from pidsync.shared import Point
from pidsync.shared.geometry import (
    Orientation,
    anchor_point,
    closest_point_on_polyline,
    find_segment,
    grid_round,
    label_anchor,
    nearest_port,
    orientation_of,
    port_position,
    resolve_relative,
)


def _tee(shapes, rotation=0.0):
    return shapes.create_node("p-tee", x=0, y=0, node_id="TEE-1", rotation=rotation)


def _xy(point: Point):
    return pytest.approx((point.x, point.y), abs=1e-6)


# --- Port positions ---


def test_resolve_relative_percentage_and_absolute():
    assert resolve_relative("25%", 80) == 20
    assert resolve_relative(" 100% ", 40) == 40
    assert resolve_relative(12, 80) == 12
    assert resolve_relative(None, 80) == 0


def test_port_position_unrotated(shapes):
    tee = _tee(shapes)
    assert _xy(port_position(tee, tee.get_port("left"))) == (0, 20)
    assert _xy(port_position(tee, tee.get_port("right"))) == (40, 20)
    assert _xy(port_position(tee, tee.get_port("branch"))) == (20, 40)


def test_port_position_rotates_clockwise_about_centre(shapes):
    tee = _tee(shapes, rotation=90)
    assert _xy(port_position(tee, tee.get_port("left"))) == (20, 0)
    assert _xy(port_position(tee, tee.get_port("right"))) == (20, 40)
    assert _xy(port_position(tee, tee.get_port("branch"))) == (0, 20)


def test_nearest_port_after_rotation(shapes):
    """A query at the visual top of a node turned 90 degrees finds the declared left port."""
    tee = _tee(shapes, rotation=90)
    assert nearest_port(tee, Point(x=20, y=0)).id == "left"
    assert nearest_port(tee, Point(x=20, y=-3)).id == "left"
    assert nearest_port(tee, Point(x=21, y=45)).id == "right"
    assert nearest_port(tee, Point(x=-5, y=20)).id == "branch"


def test_nearest_port_tie_prefers_first_declared(shapes):
    tee = _tee(shapes)
    assert nearest_port(tee, Point(x=20, y=20)).id == "left"


def test_nearest_port_without_ports(shapes):
    tapping_point = shapes.create_node("tapping-point")
    assert nearest_port(tapping_point, Point(x=0, y=0)) is None


def test_anchor_point_defaults_to_centre(shapes):
    tee = _tee(shapes, rotation=90)
    assert _xy(anchor_point(tee, None)) == (20, 20)
    assert _xy(anchor_point(tee, "missing")) == (20, 20)
    assert _xy(anchor_point(tee, "left")) == (20, 0)


# --- Segments ---


def test_closest_point_on_polyline():
    path = [Point(x=0, y=0), Point(x=100, y=0), Point(x=100, y=100)]
    assert _xy(closest_point_on_polyline(path, Point(x=50, y=10))) == (50, 0)
    assert _xy(closest_point_on_polyline(path, Point(x=110, y=50))) == (100, 50)


def test_closest_point_on_polyline_rejects_empty_path():
    with pytest.raises(ValueError):
        closest_point_on_polyline([], Point())


def test_find_segment_uses_tolerance_expanded_boxes():
    path = [Point(x=0, y=0), Point(x=100, y=0), Point(x=100, y=100)]
    start, end = find_segment(path, Point(x=100, y=50), tolerance=5)
    assert (start.x, start.y, end.x, end.y) == (100, 0, 100, 100)
    assert find_segment(path, Point(x=50, y=4), tolerance=5)[0] == path[0]
    assert find_segment(path, Point(x=50, y=30), tolerance=5) is None


# --- Snapping ---


@pytest.mark.parametrize("value,expected", [
    (14.9, 10),
    (15, 20),
    (20, 20),
    (-15, -10),
    (0, 0),
])
def test_grid_round_halves_round_up(value, expected):
    assert grid_round(value, 10) == expected


@pytest.mark.parametrize("rotation,expected", [
    (0, Orientation.HORIZONTAL),
    (180, Orientation.HORIZONTAL),
    (355, Orientation.HORIZONTAL),
    (95, Orientation.VERTICAL),
    (270, Orientation.VERTICAL),
    (-90, Orientation.VERTICAL),
    (45, Orientation.OBLIQUE),
])
def test_orientation_of(rotation, expected):
    assert orientation_of(rotation, 10) == expected


# --- Labels ---


def test_label_anchor_below_unrotated_node(shapes):
    valve = shapes.create_node("p-cv-manual")
    assert _xy(label_anchor(valve, "bottom", 15)) == (0, 25)
    assert _xy(label_anchor(valve, "right", 15)) == (35, 0)


def test_label_anchor_stays_below_on_screen_when_rotated(shapes):
    valve = shapes.create_node("p-cv-manual", rotation=90)
    assert _xy(label_anchor(valve, "bottom", 15)) == (35, 0)
