"""Tests for the diagram <-> graph mapping."""

from __future__ import annotations

import json

import pytest
from scenes import FRAME, LINE_ID, PUMP_A, PUMP_B, build_pump_line, endpoints, pipe, place

from pidsync.services.persistence import (
    GraphMapper,
    pack_waypoints,
    port_description,
    port_region,
    unpack_waypoints,
)
from pidsync.shared import (
    DiagramEdge,
    EdgeEnd,
    Layout,
    Point,
    SignalSubtype,
)

DRAWING = "D-100"
INSTRUMENT = "PT-101"


def _plant(canvas, shapes, topology):
    """Pump line with a spliced valve, a tap, a control signal and a routed, traced line."""
    place(canvas, shapes, "drawing-frame-a2", 0, 0, FRAME)
    build_pump_line(canvas, shapes)
    place(canvas, shapes, "p-cv-manual", 150, 95, "V-1", tag="HV-1", size="2in")
    place(canvas, shapes, "p-inst-remote", 230, 0, INSTRUMENT, tagId="PT", loopNum="101")
    gesture = topology.start_connection(INSTRUMENT, "process", Point(x=250, y=60))
    canvas.release_connection(gesture.id, Point(x=253, y=101))
    place(canvas, shapes, "p-cv-pneumatic", 400, 300, "FV-1", tag="FV-1")
    topology.connect(INSTRUMENT, "output", "FV-1", "actuator")
    place(canvas, shapes, "p-tank", 500, 200, "T-101", tag="T-101", volume="20m3")
    pipe(canvas, PUMP_B, "discharge", "T-101", "inlet", edge_id="L-1003",
         waypoints=[(530, 100)], tag="L-1003", fluid="Water",
         diameter_class="DN100", insulation_kind="ST")
    canvas.rotate_node("T-101", 90)
    return topology.last_tap.tapping_point_id


def _node_view(node):
    return (
        node.shape, node.type, node.attributes.display_tag,
        node.position.x, node.position.y, node.size.width, node.size.height, node.rotation,
    )


def _edge_view(edge):
    return (
        endpoints(edge),
        tuple((p.x, p.y) for p in edge.waypoints),
        json.dumps(edge.attributes.model_dump(), sort_keys=True),
    )


def test_round_trip_preserves_nodes_and_edges(canvas, shapes, topology, persistence):
    _plant(canvas, shapes, topology)
    document = canvas.to_document()

    persistence.save(DRAWING, document)
    loaded = persistence.load(DRAWING)

    assert loaded.warnings == []
    expected_nodes = {n.id: _node_view(n) for n in document.nodes if not n.is_background}
    assert {n.id: _node_view(n) for n in loaded.document.nodes} == expected_nodes
    assert {_edge_view(e) for e in loaded.document.edges} == {_edge_view(e) for e in document.edges}


def test_round_trip_restores_ports_and_styles(canvas, shapes, topology, persistence):
    _plant(canvas, shapes, topology)
    document = canvas.to_document()

    persistence.save(DRAWING, document)
    loaded = persistence.load(DRAWING).document

    nodes = loaded.node_index()
    assert [p.id for p in nodes["FV-1"].ports] == ["in", "out", "actuator"]
    traced = next(e for e in loaded.edges if e.is_pipe and e.attributes.tag == "L-1003")
    assert traced.style.dash_array == "5 5"
    signal = next(e for e in loaded.edges if e.is_signal)
    assert signal.style.dash_array == "4 4"


def test_measurement_is_stored_from_instrument(canvas, shapes, topology, persistence, graph_repository):
    """The drawn T -> PT-101 measurement is stored PT-101 -> T and drawn T -> PT-101 again on load."""
    tap_id = _plant(canvas, shapes, topology)

    persistence.save(DRAWING, canvas.to_document())

    (stored,) = graph_repository.relationships_of("MEASURES")
    assert (stored["source"], stored["target"]) == (INSTRUMENT, tap_id)
    assert stored["properties"]["fromPort"] == "process"
    assert stored["properties"]["fluid"] == "Signal"

    loaded = persistence.load(DRAWING).document
    (measurement,) = [e for e in loaded.edges if e.signal_subtype == SignalSubtype.MEASURES]
    assert endpoints(measurement) == (tap_id, None, INSTRUMENT, "process")


def test_control_signal_keeps_drawn_direction(canvas, shapes, topology, persistence, graph_repository):
    _plant(canvas, shapes, topology)

    persistence.save(DRAWING, canvas.to_document())

    (stored,) = graph_repository.relationships_of("CONTROLS")
    assert (stored["source"], stored["target"]) == (INSTRUMENT, "FV-1")
    assert stored["properties"]["toPort"] == "actuator"


def test_assets_carry_labels_layout_and_business_data(canvas, shapes, topology, persistence, graph_repository):
    tap_id = _plant(canvas, shapes, topology)

    persistence.save(DRAWING, canvas.to_document())

    assert FRAME not in graph_repository.uids()
    valve = graph_repository.asset("V-1")
    assert valve["labels"] == ["Asset", "Equipment", "Valve"]
    assert valve["properties"]["Tag"] == "HV-1"
    assert valve["properties"]["size"] == "2in"
    assert valve["properties"]["drawingId"] == DRAWING
    assert json.loads(valve["properties"]["layout"]) == {
        "x": 150, "y": 90, "w": 40, "h": 20, "a": 0, "s": "p-cv-manual",
    }
    assert graph_repository.asset(INSTRUMENT)["properties"]["Tag"] == "PT-101"
    assert graph_repository.asset("T-101")["properties"]["volume"] == "20m3"
    assert graph_repository.asset(tap_id)["labels"] == ["Asset", "Instrument", "Connection"]


def test_pipe_rows_carry_line_data_and_port_semantics(canvas, shapes, topology, persistence, graph_repository):
    _plant(canvas, shapes, topology)

    persistence.save(DRAWING, canvas.to_document())

    (traced,) = [r for r in graph_repository.relationships_of("PIPE") if r["properties"]["tag"] == "L-1003"]
    properties = traced["properties"]
    assert properties["fromPort"] == "discharge"
    assert properties["toPort"] == "inlet"
    assert properties["diameterClass"] == "DN100"
    assert properties["insulationKind"] == "ST"
    assert properties["fromDescription"] == "Discharge"
    assert properties["toRegion"] == "top"
    assert json.loads(properties["waypoints"]) == [{"x": 530.0, "y": 100.0}]


# --- Save direction edge cases ---


def test_dangling_and_background_edges_are_skipped(canvas, shapes):
    line = build_pump_line(canvas, shapes)
    document = canvas.to_document()
    document.edges.append(DiagramEdge(
        id="loose",
        source=EdgeEnd(node_id=PUMP_A, port_id="discharge"),
        target=EdgeEnd(point=Point(x=10, y=10)),
    ))
    document.edges.append(DiagramEdge(
        id="ghost",
        source=EdgeEnd(node_id=PUMP_A),
        target=EdgeEnd(node_id="not-on-canvas"),
    ))

    snapshot = GraphMapper(shapes).to_graph(DRAWING, document)

    assert [r.source_uid for r in snapshot.relationships] == [PUMP_A]
    assert snapshot.skipped_edge_ids == ["loose", "ghost"]
    assert line.id == LINE_ID


def test_measurement_drawn_from_instrument_round_trips(canvas, shapes, topology, persistence, graph_repository):
    place(canvas, shapes, "p-inst-remote", 0, 0, INSTRUMENT)
    place(canvas, shapes, "p-p101", 100, 0, PUMP_A)
    drawn = topology.connect(INSTRUMENT, "process", PUMP_A, "suction")
    assert drawn.signal_subtype == SignalSubtype.MEASURES

    persistence.save(DRAWING, canvas.to_document())

    (stored,) = graph_repository.relationships_of("MEASURES")
    assert (stored["source"], stored["target"]) == (PUMP_A, INSTRUMENT)

    loaded = persistence.load(DRAWING).document
    (measurement,) = loaded.edges
    assert endpoints(measurement) == (INSTRUMENT, "process", PUMP_A, "suction")
    canvas.load(loaded)
    canvas.validate_edge(measurement)


# --- Load direction repairs ---


def test_legacy_pose_properties(shapes):
    warnings = []
    node = GraphMapper(shapes).asset_to_node({
        "uid": "T-9", "type": "Tank", "Tag": "T-9",
        "x": 10.4, "y": 20, "width": 120, "height": 80, "angle": 90,
    }, warnings)

    assert warnings == []
    assert node.shape == "p-tank"
    assert (node.position.x, node.position.y, node.rotation) == (10, 20, 90)
    assert [p.id for p in node.ports] == ["inlet", "vent", "outlet"]
    assert node.attributes.tag == "T-9"


def test_malformed_layout_falls_back_to_defaults(shapes):
    warnings = []
    node = GraphMapper(shapes).asset_to_node(
        {"uid": "V-9", "type": "Valve", "layout": "{not json"}, warnings,
    )

    assert len(warnings) == 1
    assert node.shape == "p-cv-manual"
    assert (node.position.x, node.position.y) == (0, 0)


def test_unknown_shape_loads_without_ports(shapes):
    warnings = []
    layout = Layout(x=5, y=5, s="x-retired").pack()
    node = GraphMapper(shapes).asset_to_node({"uid": "X-9", "type": "Valve", "layout": layout}, warnings)

    assert node.shape == "x-retired"
    assert node.ports == []
    assert len(warnings) == 1


def test_invalid_label_position_is_dropped(shapes):
    node = GraphMapper(shapes).asset_to_node(
        {"uid": "P-9", "type": "LiquidPump", "labelPosition": "diagonal", "flow": "10m3/h"},
    )
    assert node.attributes.label_position == "bottom"
    assert node.attributes.flow == "10m3/h"


def test_asset_without_uid_is_skipped(shapes):
    warnings = []
    assert GraphMapper(shapes).asset_to_node({"type": "Valve"}, warnings) is None
    assert warnings


def test_malformed_waypoints_and_unknown_ends(shapes):
    mapper = GraphMapper(shapes)
    warnings = []
    assets = [
        {"uid": PUMP_A, "type": "LiquidPump", "layout": Layout(s="p-p101").pack()},
        {"uid": PUMP_B, "type": "LiquidPump", "layout": Layout(s="p-p101").pack()},
    ]
    relationships = [
        {"kind": "PIPE", "source": PUMP_A, "target": PUMP_B,
         "properties": {"fromPort": "discharge", "toPort": "suction", "waypoints": '[{"x": 1}]'}},
        {"kind": "PIPE", "source": PUMP_A, "target": "gone", "properties": {}},
    ]

    document = mapper.from_graph(assets, relationships, warnings)

    assert len(document.edges) == 1
    assert document.edges[0].waypoints == []
    assert document.edges[0].attributes.fluid == "Water"
    assert len(warnings) == 2


# --- Helpers ---


def test_waypoint_packing():
    packed = pack_waypoints([Point(x=1, y=2), Point(x=3.5, y=4)])
    assert packed == '[{"x":1.0,"y":2.0},{"x":3.5,"y":4.0}]'
    assert unpack_waypoints(packed)[1] == Point(x=3.5, y=4)
    assert unpack_waypoints("") == []
    with pytest.raises(ValueError):
        unpack_waypoints('{"x": 1, "y": 2}')


def test_port_semantics(shapes):
    tank_ports = {p.id: p for p in shapes.ports_for("p-tank")}
    assert port_region(tank_ports["outlet"]) == "Liquid"
    assert port_region(tank_ports["inlet"]) == "top"
    assert port_region(None) == "default"
    assert port_description(tank_ports["inlet"]) == "Inlet"
    assert port_description(None) == "unknown"
