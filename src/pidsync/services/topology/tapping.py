"""
Instrument tap insertion.

Releasing a connection dragged out of an instrument onto a pipe creates a
tapping point on the pipe, splits the pipe through it and draws a
measurement signal from the tapping point to the instrument.
"""

import uuid
from typing import Optional

from ...shared import (
    DiagramEdge,
    EdgeEnd,
    Notification,
    NotificationLevel,
    Notifier,
    Point,
    Settings,
    SignalAttributes,
    SignalSubtype,
    ValidationError,
    get_logger,
    get_settings,
    log_notifier,
)
from ...shared.geometry import grid_round, is_horizontal_segment, is_vertical_segment
from ...shared.taxonomy import INSTRUMENT_TYPE, TAPPING_POINT_SHAPE, signal_style
from ..canvas import Canvas, EdgeReleasedEvent
from ..shape_catalog import ShapeCatalog
from .models import TapResult, TapStatus
from .routing import apply_routing, refresh_all
from .splice import split_pipe

TAPPING_POINT_Z_INDEX = 10


class InstrumentTapper:
    """
    Turns an instrument's connection gesture released on a pipe into a tap.
    """

    def __init__(self, canvas: Canvas, catalog: ShapeCatalog,
                 settings: Settings = None, notifier: Notifier = None):
        self.canvas = canvas
        self.catalog = catalog
        self.settings = settings or get_settings()
        self.notify = notifier or log_notifier
        self.logger = get_logger(__name__)

    def handle_release(self, event: EdgeReleasedEvent) -> TapResult:
        """
        Handle the end of a connection gesture.

        Args:
            event: Release event of the in-progress edge

        Returns:
            What happened to the gesture
        """
        gesture = self.canvas.get_edge(event.edge_id)
        if gesture is None:
            return TapResult(status=TapStatus.CANCELLED, gesture_edge_id=event.edge_id)

        instrument = self.canvas.get_node(gesture.source.node_id)
        if instrument is None or instrument.type != INSTRUMENT_TYPE:
            return TapResult(status=TapStatus.NOT_INSTRUMENT, gesture_edge_id=gesture.id)

        pipe = self._pipe_at_release(gesture, event)
        if pipe is None:
            if gesture.target.is_connected:
                return TapResult(status=TapStatus.CONNECTED, gesture_edge_id=gesture.id)
            self.canvas.remove_edge(gesture.id)
            self.logger.debug(f"Connection gesture {gesture.id} cancelled")
            return TapResult(status=TapStatus.CANCELLED, gesture_edge_id=gesture.id)

        tap = self.tap_coordinate(pipe, event.point)

        try:
            with self.canvas.batch():
                tapping_point = self.catalog.create_node(TAPPING_POINT_SHAPE)
                tapping_point.position = Point(
                    x=tap.x - tapping_point.size.width / 2,
                    y=tap.y - tapping_point.size.height / 2,
                )
                tapping_point.z_index = TAPPING_POINT_Z_INDEX
                self.canvas.add_node(tapping_point)

                self.canvas.remove_edge(gesture.id)

                signal = DiagramEdge(
                    id=str(uuid.uuid4()),
                    source=EdgeEnd(node_id=tapping_point.id),
                    target=EdgeEnd(node_id=instrument.id, port_id=gesture.source.port_id),
                    attributes=SignalAttributes(subtype=SignalSubtype.MEASURES),
                    style=signal_style(),
                )
                self.canvas.add_edge(signal)

                upstream, downstream = split_pipe(self.canvas, pipe, tapping_point.id, None, None)
                apply_routing(self.canvas, signal.id, self.settings)
                refresh_all(self.canvas, self.settings)
        except ValidationError as e:
            self.canvas.remove_edge(gesture.id)
            message = f"Cannot tap pipe for {instrument.attributes.display_tag or instrument.id}: {e}"
            self.logger.warning(message)
            self.notify(Notification(NotificationLevel.WARNING, message))
            return TapResult(status=TapStatus.FAILED, gesture_edge_id=gesture.id)

        self.logger.info(f"Tapped pipe {pipe.id} at ({tap.x}, {tap.y}) for {instrument.id}")
        self.notify(Notification(NotificationLevel.SUCCESS, "Tapping point created"))
        return TapResult(
            status=TapStatus.TAPPED,
            gesture_edge_id=gesture.id,
            tapping_point_id=tapping_point.id,
            signal_edge_id=signal.id,
            replaced_edge_id=pipe.id,
            pipe_edge_ids=[upstream.id, downstream.id],
        )

    def _pipe_at_release(self, gesture: DiagramEdge, event: EdgeReleasedEvent) -> Optional[DiagramEdge]:
        if gesture.target.is_connected:
            return None
        under = self.canvas.get_edge(event.edge_under_id)
        if under is not None and under.is_pipe and under.id != gesture.id:
            return under
        for edge in self.canvas.hit_test_edges(
            event.point, self.settings.geometry_tolerance, exclude=[gesture.id],
        ):
            if edge.is_pipe and not edge.is_dangling:
                return edge
        return None

    def tap_coordinate(self, pipe: DiagramEdge, point: Point) -> Point:
        """
        Where the tapping point goes.

        On a straight run without waypoints the coordinate locks onto the pipe
        across the run and is grid rounded along it; otherwise both axes are
        grid rounded.
        """
        grid = self.settings.grid_size
        tolerance = self.settings.geometry_tolerance
        if not pipe.waypoints:
            start = self.canvas.endpoint_point(pipe.source)
            end = self.canvas.endpoint_point(pipe.target)
            if is_horizontal_segment(start, end, tolerance):
                return Point(x=grid_round(point.x, grid), y=start.y)
            if is_vertical_segment(start, end, tolerance):
                return Point(x=start.x, y=grid_round(point.y, grid))
        return Point(x=grid_round(point.x, grid), y=grid_round(point.y, grid))
