"""Tests for routing exclusion sets."""

from __future__ import annotations

from scenes import FRAME, PUMP_A, PUMP_B, build_pump_line, pipe, place

from pidsync.services.topology import apply_routing, compute_exclusions, refresh_all
from pidsync.shared import DiagramEdge, EdgeEnd, SignalAttributes, SignalSubtype


def _scene(canvas, shapes):
    build_pump_line(canvas, shapes)
    place(canvas, shapes, "p-cv-manual", 500, 300, "V-1")
    place(canvas, shapes, "p-tee", 600, 300, "TEE-1")
    place(canvas, shapes, "p-inst-remote", 500, 500, "PT-1")
    place(canvas, shapes, "p-cv-pneumatic", 600, 500, "FV-1")


def test_pipe_between_ordinary_nodes_excludes_only_frame(canvas, shapes):
    line = build_pump_line(canvas, shapes)
    assert compute_exclusions(line, canvas, FRAME) == [FRAME]


def test_inline_endpoints_are_excluded(canvas, shapes):
    _scene(canvas, shapes)
    into_valve = pipe(canvas, PUMP_A, "discharge", "V-1", "in", edge_id="E1")
    valve_to_tee = pipe(canvas, "V-1", "out", "TEE-1", "left", edge_id="E2")
    tee_to_pump = pipe(canvas, "TEE-1", "right", PUMP_B, "suction", edge_id="E3")

    assert compute_exclusions(into_valve, canvas, FRAME) == [FRAME, "V-1"]
    assert compute_exclusions(valve_to_tee, canvas, FRAME) == [FRAME, "V-1", "TEE-1"]
    assert compute_exclusions(tee_to_pump, canvas, FRAME) == [FRAME, "TEE-1"]


def test_signal_edges_exclude_only_frame(canvas, shapes):
    _scene(canvas, shapes)
    signal = canvas.add_edge(DiagramEdge(
        id="S1",
        source=EdgeEnd(node_id="PT-1", port_id="output"),
        target=EdgeEnd(node_id="FV-1", port_id="actuator"),
        attributes=SignalAttributes(subtype=SignalSubtype.CONTROLS),
    ))
    assert compute_exclusions(signal, canvas, FRAME) == [FRAME]


def test_apply_routing_sets_policy(canvas, shapes, settings):
    _scene(canvas, shapes)
    pipe(canvas, PUMP_A, "discharge", "V-1", "in", edge_id="E1")

    apply_routing(canvas, "E1", settings)

    policy = canvas.get_edge("E1").routing
    assert policy.router == settings.router_name
    assert policy.padding == settings.router_padding
    assert policy.exclude_nodes == [settings.background_frame_id, "V-1"]


def test_apply_routing_ignores_unknown_edge(canvas, settings):
    apply_routing(canvas, "missing", settings)


def test_refresh_all_covers_pipes_only(canvas, shapes, settings):
    _scene(canvas, shapes)
    pipe(canvas, PUMP_A, "discharge", "V-1", "in", edge_id="E1")
    canvas.add_edge(DiagramEdge(
        id="S1",
        source=EdgeEnd(node_id="PT-1", port_id="output"),
        target=EdgeEnd(node_id="FV-1", port_id="actuator"),
        attributes=SignalAttributes(subtype=SignalSubtype.CONTROLS),
    ))

    assert refresh_all(canvas, settings) == 2
    assert canvas.get_edge("E1").routing.exclude_nodes == [FRAME, "V-1"]
    assert canvas.get_edge("S1").routing is None
