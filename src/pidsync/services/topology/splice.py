"""
Pipe splice engine.

Dropping an unconnected inline component (valve, control valve, fitting,
tapping point) onto a pipe cuts the pipe in two and reconnects both halves
to the component's ports:

    A ──────────── B      becomes      A ───── [V] ───── B

The component is first snapped onto the pipe; the halves keep the original
pipe's attributes and style.
"""

import uuid
from typing import Optional, Tuple

from ...shared import (
    DiagramEdge,
    DiagramNode,
    EdgeEnd,
    Notification,
    NotificationLevel,
    Notifier,
    Point,
    Port,
    Settings,
    get_logger,
    get_settings,
    log_notifier,
)
from ...shared.geometry import (
    Orientation,
    closest_point_on_polyline,
    find_segment,
    grid_round,
    is_horizontal_segment,
    nearest_port,
    orientation_of,
)
from ...shared.taxonomy import OMNIDIRECTIONAL_TYPES, is_inline
from ..canvas import Canvas
from .models import SpliceResult, SpliceStatus
from .routing import apply_routing, refresh_all


def find_pipe_under(canvas: Canvas, node: DiagramNode) -> Optional[DiagramEdge]:
    """First connected pipe whose rendered bounding box intersects the node's, in canvas order."""
    bbox = node.bbox
    for edge in canvas.edges():
        if not edge.is_pipe or edge.is_dangling or edge.touches(node.id):
            continue
        if canvas.edge_bbox(edge.id).intersects(bbox):
            return edge
    return None


def locate_segment(canvas: Canvas, pipe: DiagramEdge, query: Point,
                   tolerance: float) -> Tuple[Point, Point, Point, bool]:
    """
    Find where on a pipe's rendered path a point lands.

    Returns:
        (closest point, segment start, segment end, segment is horizontal).
        Without a containing segment the pipe's overall terminals are used
        and the run is horizontal when it spans more in x than in y.
    """
    points = canvas.route_points(pipe.id)
    closest = closest_point_on_polyline(points, query)
    segment = find_segment(points, closest, tolerance)
    if segment is not None:
        start, end = segment
        return closest, start, end, is_horizontal_segment(start, end, tolerance)
    start, end = points[0], points[-1]
    return closest, start, end, abs(start.x - end.x) > abs(start.y - end.y)


def split_pipe(canvas: Canvas,
               pipe: DiagramEdge,
               node_id: str,
               inbound_port: Optional[str],
               outbound_port: Optional[str]) -> Tuple[DiagramEdge, DiagramEdge]:
    """
    Replace ``pipe`` with two pipes through a node.

    Args:
        canvas: Canvas holding the pipe
        pipe: Pipe to cut
        node_id: Node inserted into the run
        inbound_port: Port receiving the upstream half; None for the node centre
        outbound_port: Port feeding the downstream half; None for the node centre

    Returns:
        The (upstream, downstream) pipes
    """
    upstream = DiagramEdge(
        id=str(uuid.uuid4()),
        source=pipe.source.model_copy(deep=True),
        target=EdgeEnd(node_id=node_id, port_id=inbound_port),
        attributes=pipe.attributes.model_copy(deep=True),
        style=pipe.style.model_copy(deep=True),
        z_index=pipe.z_index,
    )
    downstream = DiagramEdge(
        id=str(uuid.uuid4()),
        source=EdgeEnd(node_id=node_id, port_id=outbound_port),
        target=pipe.target.model_copy(deep=True),
        attributes=pipe.attributes.model_copy(deep=True),
        style=pipe.style.model_copy(deep=True),
        z_index=pipe.z_index,
    )
    canvas.remove_edge(pipe.id)
    canvas.add_edge(upstream)
    canvas.add_edge(downstream)
    return upstream, downstream


class PipeSplicer:
    """
    Splices inline components into the pipe they are dropped on.
    """

    def __init__(self, canvas: Canvas, settings: Settings = None, notifier: Notifier = None):
        """
        Initialize the splicer.

        Args:
            canvas: Canvas to operate on
            settings: Geometry settings; the global settings when omitted
            notifier: Receives user-facing warnings
        """
        self.canvas = canvas
        self.settings = settings or get_settings()
        self.notify = notifier or log_notifier
        self.logger = get_logger(__name__)

    def splice(self, node_id: str) -> SpliceResult:
        """
        Try to splice a node into the pipe beneath it.

        Args:
            node_id: Node just added or released

        Returns:
            What happened; the diagram is only modified on SPLICED
        """
        node = self.canvas.get_node(node_id)
        if node is None or node.is_background or not is_inline(node.type):
            return SpliceResult(status=SpliceStatus.NOT_INLINE, node_id=node_id)
        if self.canvas.connected_edges(node_id):
            return SpliceResult(status=SpliceStatus.ALREADY_CONNECTED, node_id=node_id)

        pipe = find_pipe_under(self.canvas, node)
        if pipe is None:
            return SpliceResult(status=SpliceStatus.NO_PIPE, node_id=node_id)

        tolerance = self.settings.geometry_tolerance
        closest, start, end, horizontal = locate_segment(self.canvas, pipe, node.center, tolerance)

        if node.type not in OMNIDIRECTIONAL_TYPES:
            orientation = orientation_of(node.rotation, self.settings.orientation_tolerance_deg)
            wanted = Orientation.HORIZONTAL if horizontal else Orientation.VERTICAL
            if orientation != wanted:
                self.logger.debug(
                    f"Not splicing {node_id}: {orientation.value} component on a {wanted.value} pipe"
                )
                return SpliceResult(status=SpliceStatus.ORIENTATION_MISMATCH, node_id=node_id)

        snapped = self._snapped(node, closest, horizontal)
        inbound = nearest_port(snapped, start)
        outbound = nearest_port(snapped, end)

        if inbound is None or outbound is None:
            self._warn(f"No port of {node.attributes.tag or node.shape} can join the pipe")
            return SpliceResult(status=SpliceStatus.NO_PORT, node_id=node_id)
        if not self._directions_allow(inbound, outbound):
            self._warn(
                f"Ports '{inbound.id}' and '{outbound.id}' of {node.attributes.tag or node.shape} "
                f"do not match the flow direction of the pipe"
            )
            return SpliceResult(status=SpliceStatus.DIRECTION_CONFLICT, node_id=node_id)

        with self.canvas.batch():
            self.canvas.set_position(node_id, snapped.position.x, snapped.position.y)
            upstream, downstream = split_pipe(self.canvas, pipe, node_id, inbound.id, outbound.id)
            apply_routing(self.canvas, upstream.id, self.settings)
            apply_routing(self.canvas, downstream.id, self.settings)
            refresh_all(self.canvas, self.settings)

        self.logger.info(f"Spliced {node_id} into pipe {pipe.id}")
        self.notify(Notification(NotificationLevel.SUCCESS, "Component spliced into pipe"))
        return SpliceResult(
            status=SpliceStatus.SPLICED,
            node_id=node_id,
            replaced_edge_id=pipe.id,
            new_edge_ids=[upstream.id, downstream.id],
        )

    def _snapped(self, node: DiagramNode, on_pipe: Point, horizontal: bool) -> DiagramNode:
        """Copy of the node centred across the pipe, grid aligned."""
        grid = self.settings.grid_size
        offset = self.settings.splice_perpendicular_offset
        x, y = node.position.x, node.position.y
        if horizontal:
            y = on_pipe.y - node.size.height / 2 + offset
        else:
            x = on_pipe.x - node.size.width / 2 + offset
        snapped = node.model_copy(deep=True)
        snapped.position = Point(x=grid_round(x, grid), y=grid_round(y, grid))
        return snapped

    @staticmethod
    def _directions_allow(inbound: Port, outbound: Port) -> bool:
        return inbound.accepts_incoming and outbound.accepts_outgoing

    def _warn(self, message: str) -> None:
        self.logger.warning(message)
        self.notify(Notification(NotificationLevel.WARNING, message))
