"""Tests for the shape catalog and its node factory."""

from __future__ import annotations

import json
import logging

import pytest

from pidsync.services.shape_catalog import (
    ShapeCatalog,
    load_shape_catalog,
    parse_shape_definitions,
)
from pidsync.shared import CatalogError, ConfigurationError, InstrumentAttributes
from pidsync.shared.taxonomy import TAPPING_POINT_SHAPE, default_shape_for


@pytest.mark.parametrize("node_type,spec", [
    ("Reactor", None),
    ("Exchanger", None),
    ("LiquidPump", None),
    ("CentrifugalPump", None),
    ("ControlValve", None),
    ("Valve", None),
    ("Fitting", None),
    ("Tank", None),
    ("Tank", "Vertical"),
    ("Instrument", "Local"),
    ("Instrument", "Panel"),
    ("Instrument", None),
    ("OffPageConnector", None),
    ("TappingPoint", None),
    ("SomethingNew", None),
])
def test_default_shapes_are_registered(shapes, node_type, spec):
    assert default_shape_for(node_type, spec) in shapes


def test_builtin_catalog_contents(shapes):
    assert TAPPING_POINT_SHAPE in shapes
    assert shapes.get("drawing-frame-a2").background
    assert [p.id for p in shapes.ports_for("p-cv-pneumatic")] == ["in", "out", "actuator"]
    assert shapes.ports_for("no-such-shape") == []


def test_get_unknown_shape_raises(shapes):
    with pytest.raises(CatalogError):
        shapes.get("no-such-shape")


def test_ports_for_returns_copies(shapes):
    ports = shapes.ports_for("p-valve")
    ports[0].description = "changed"
    assert shapes.get("p-valve").ports[0].description == "Inlet"


def test_create_node_applies_shape_defaults(shapes):
    node = shapes.create_node("p-inst-panel", x=10, y=20, node_id="PIC-1", loopNum="201")
    assert node.id == "PIC-1"
    assert (node.position.x, node.position.y) == (10, 20)
    assert (node.size.width, node.size.height) == (40, 40)
    assert isinstance(node.attributes, InstrumentAttributes)
    assert node.attributes.tag_id == "PIC"
    assert node.attributes.display_tag == "PIC-201"
    assert node.z_index == 2


def test_create_node_background_frame(shapes):
    frame = shapes.create_node("drawing-frame-a2", node_id="FRAME")
    assert frame.is_background
    assert frame.z_index == 0
    assert frame.type == "Frame"


def test_create_node_generates_ids(shapes):
    assert shapes.create_node("p-valve").id != shapes.create_node("p-valve").id


def test_duplicate_port_ids_keep_first(caplog):
    payload = {
        "name": "x-dup",
        "type": "Valve",
        "ports": [
            {"id": "in", "x": "0%", "y": "50%", "direction": "in"},
            {"id": "in", "x": "100%", "y": "50%", "direction": "out"},
        ],
    }
    with caplog.at_level(logging.WARNING):
        (definition,) = parse_shape_definitions(payload)
    assert [p.id for p in definition.ports] == ["in"]
    assert definition.ports[0].x == "0%"
    assert "more than once" in caplog.text


@pytest.mark.parametrize("payload", [
    {"type": "Valve"},
    {"name": "bad-size", "type": "Valve", "width": 0},
    {"name": "bad-port", "type": "Valve", "ports": [{"id": "in", "x": "left"}]},
    ["not-a-definition"],
])
def test_malformed_definitions_raise(payload):
    with pytest.raises(ConfigurationError):
        parse_shape_definitions(payload)


def test_load_extra_directory_overrides(tmp_path, settings):
    override = [{"name": "p-valve", "type": "Valve", "width": 60, "height": 30, "ports": []},
                {"name": "x-custom", "type": "Filter"}]
    (tmp_path / "custom.json").write_text(json.dumps(override), encoding="utf-8")
    settings.shape_library_dir = tmp_path

    catalog = load_shape_catalog(settings)
    assert isinstance(catalog, ShapeCatalog)
    assert catalog.get("p-valve").width == 60
    assert "x-custom" in catalog
    assert "p-cv-manual" in catalog


def test_load_missing_directory_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_shape_catalog(directories=[tmp_path / "absent"])


def test_load_invalid_json_raises(tmp_path):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_shape_catalog(directories=[tmp_path])
