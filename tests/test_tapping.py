"""Tests for instrument taps on pipes."""

from __future__ import annotations

import pytest
from scenes import (
    DROP_LINE_ID,
    LINE_ID,
    PUMP_A,
    PUMP_B,
    build_drop_line,
    build_pump_line,
    endpoints,
    pipe,
    pipes_of,
    place,
)

from pidsync.services.topology import InstrumentTapper, SpliceStatus, TapStatus
from pidsync.shared import NotificationLevel, Point, SignalSubtype

INSTRUMENT = "PT-101"


@pytest.fixture
def instrument(canvas, shapes, pump_line):
    """A pressure transmitter above the pump line; its process port is at (170, 40)."""
    return place(canvas, shapes, "p-inst-remote", 150, 0, INSTRUMENT, tagId="PT", loopNum="101")


def _drag(topology, port="process"):
    return topology.start_connection(INSTRUMENT, port, Point(x=170, y=60))


def test_release_on_pipe_creates_tap(canvas, topology, instrument, pump_line, inbox):
    """Tapping PT-101 onto P-101 -> P-102 yields T -> PT-101 plus P-101 -> T -> P-102."""
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=173, y=101))

    result = topology.last_tap
    assert result.status == TapStatus.TAPPED
    tap_id = result.tapping_point_id
    assert canvas.get_edge(gesture.id) is None
    assert canvas.get_edge(LINE_ID) is None

    signal = canvas.get_edge(result.signal_edge_id)
    assert signal.is_signal
    assert signal.signal_subtype == SignalSubtype.MEASURES
    assert endpoints(signal) == (tap_id, None, INSTRUMENT, "process")

    assert {endpoints(p) for p in pipes_of(canvas)} == {
        (PUMP_A, "discharge", tap_id, None),
        (tap_id, None, PUMP_B, "suction"),
    }
    for half in pipes_of(canvas):
        assert half.attributes.model_dump() == pump_line.attributes.model_dump()
    assert len(canvas.edges()) == 3
    assert "Tapping point created" in inbox.messages(NotificationLevel.SUCCESS)


def test_tapping_point_sits_on_the_pipe(canvas, topology, instrument):
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=173, y=103))

    tapping_point = canvas.get_node(topology.last_tap.tapping_point_id)
    assert tapping_point.type == "TappingPoint"
    assert tapping_point.z_index == 10
    assert (tapping_point.center.x, tapping_point.center.y) == (170, 100)


def test_tapping_point_is_not_spliced_again(canvas, topology, instrument):
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=173, y=101))

    assert topology.last_splice.status == SpliceStatus.ALREADY_CONNECTED


def test_release_on_edge_under_pointer(canvas, topology, instrument):
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=228, y=130), edge_under_id=LINE_ID)

    result = topology.last_tap
    assert result.status == TapStatus.TAPPED
    assert result.replaced_edge_id == LINE_ID
    tapping_point = canvas.get_node(result.tapping_point_id)
    assert (tapping_point.center.x, tapping_point.center.y) == (230, 100)


def test_release_on_empty_canvas_cancels(canvas, topology, instrument):
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=600, y=600))

    assert topology.last_tap.status == TapStatus.CANCELLED
    assert canvas.get_edge(gesture.id) is None
    assert [e.id for e in canvas.edges()] == [LINE_ID]


def test_release_on_node_connects_signal(canvas, topology, instrument):
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=300, y=100),
                              target_node_id=PUMP_B, target_port_id="suction")

    assert topology.last_tap.status == TapStatus.CONNECTED
    edge = canvas.get_edge(gesture.id)
    assert edge.is_signal
    assert endpoints(edge) == (INSTRUMENT, "process", PUMP_B, "suction")
    assert canvas.get_edge(LINE_ID) is not None


def test_valid_target_wins_over_edge_under_pointer(canvas, topology, instrument):
    gesture = _drag(topology)

    canvas.release_connection(gesture.id, Point(x=300, y=100), target_node_id=PUMP_B,
                              target_port_id="suction", edge_under_id=LINE_ID)

    assert topology.last_tap.status == TapStatus.CONNECTED
    assert canvas.get_edge(gesture.id).is_signal
    assert [e.id for e in pipes_of(canvas)] == [LINE_ID]


def test_gesture_from_other_nodes_is_not_a_tap(canvas, topology, instrument):
    gesture = topology.start_connection(PUMP_A, "discharge", Point(x=80, y=100))

    canvas.release_connection(gesture.id, Point(x=173, y=101))

    assert topology.last_tap.status == TapStatus.NOT_INSTRUMENT
    assert canvas.get_edge(gesture.id) is None
    assert [e.id for e in canvas.edges()] == [LINE_ID]


def test_invalid_signal_rolls_back(canvas, topology, instrument, inbox):
    """A tap drawn from the output port cannot carry a measurement into it."""
    gesture = _drag(topology, port="output")

    canvas.release_connection(gesture.id, Point(x=173, y=101))

    assert topology.last_tap.status == TapStatus.FAILED
    assert [e.id for e in canvas.edges()] == [LINE_ID]
    assert sorted(n.id for n in canvas.nodes()) == sorted([PUMP_A, PUMP_B, INSTRUMENT])
    assert inbox.messages(NotificationLevel.WARNING)


# --- Tap coordinate ---


def test_tap_coordinate_locks_to_vertical_run(canvas, shapes, settings):
    drop = build_drop_line(canvas, shapes)
    tapper = InstrumentTapper(canvas, shapes, settings)

    tap = tapper.tap_coordinate(drop, Point(x=103, y=277))

    assert (tap.x, tap.y) == (100, 280)
    assert drop.id == DROP_LINE_ID


def test_tap_coordinate_on_routed_pipe_rounds_both_axes(canvas, shapes, settings):
    build_pump_line(canvas, shapes)
    routed = pipe(canvas, PUMP_A, "discharge", PUMP_B, "suction",
                  edge_id="L-1002", waypoints=[(180, 100), (180, 200)])
    tapper = InstrumentTapper(canvas, shapes, settings)

    tap = tapper.tap_coordinate(routed, Point(x=183, y=147))

    assert (tap.x, tap.y) == (180, 150)
