"""
Canvas capability surface.

``Canvas`` is what the topology engines and the editor session need from a
drawing surface: cell storage, geometry queries, batched mutation and an
explicit event subscription interface. ``InMemoryCanvas`` is the headless
implementation used by the API, the editor session and the tests; its
rendered path is the straight polyline through the edge's terminals and
waypoints.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ...shared import (
    DiagramDocument,
    DiagramEdge,
    DiagramNode,
    EdgeEnd,
    Point,
    Rect,
    RoutingPolicy,
    ValidationError,
    get_logger,
)
from ...shared.geometry import anchor_point, distance_to_polyline
from .events import (
    CanvasEvent,
    CellClickedEvent,
    DiagramChangedEvent,
    EdgeConnectedEvent,
    EdgeReleasedEvent,
    EventHandler,
    NodeEvent,
)


class Canvas(ABC):
    """Abstract drawing surface."""

    # --- Events ---

    @abstractmethod
    def subscribe(self, event: CanvasEvent, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unregisters it."""

    @abstractmethod
    def emit(self, event: CanvasEvent, payload: object) -> None:
        pass

    # --- Cells ---

    @abstractmethod
    def add_node(self, node: DiagramNode) -> DiagramNode:
        pass

    @abstractmethod
    def remove_node(self, node_id: str) -> None:
        pass

    @abstractmethod
    def get_node(self, node_id: Optional[str]) -> Optional[DiagramNode]:
        pass

    @abstractmethod
    def nodes(self) -> List[DiagramNode]:
        pass

    @abstractmethod
    def add_edge(self, edge: DiagramEdge) -> DiagramEdge:
        pass

    @abstractmethod
    def remove_edge(self, edge_id: str) -> None:
        pass

    @abstractmethod
    def get_edge(self, edge_id: Optional[str]) -> Optional[DiagramEdge]:
        pass

    @abstractmethod
    def edges(self) -> List[DiagramEdge]:
        pass

    @abstractmethod
    def connected_edges(self, node_id: str) -> List[DiagramEdge]:
        pass

    @abstractmethod
    def update_node(self, node_id: str, **fields) -> DiagramNode:
        pass

    @abstractmethod
    def update_edge(self, edge_id: str, **fields) -> DiagramEdge:
        pass

    @abstractmethod
    def set_position(self, node_id: str, x: float, y: float) -> None:
        pass

    @abstractmethod
    def set_routing(self, edge_id: str, policy: RoutingPolicy) -> None:
        pass

    # --- Geometry ---

    @abstractmethod
    def node_bbox(self, node_id: str) -> Rect:
        pass

    @abstractmethod
    def endpoint_point(self, end: EdgeEnd) -> Point:
        pass

    @abstractmethod
    def route_points(self, edge_id: str) -> List[Point]:
        """Rendered path of an edge, terminals included."""

    @abstractmethod
    def edge_bbox(self, edge_id: str) -> Rect:
        pass

    @abstractmethod
    def hit_test_edges(self, point: Point, tolerance: float,
                       exclude: Iterable[str] = ()) -> List[DiagramEdge]:
        pass

    # --- Whole-diagram operations ---

    @abstractmethod
    def batch(self):
        """Context manager grouping mutations into one change."""

    @abstractmethod
    def load(self, document: DiagramDocument) -> None:
        """Replace all cells without raising events."""

    @abstractmethod
    def to_document(self) -> DiagramDocument:
        pass


class InMemoryCanvas(Canvas):
    """
    Headless canvas.

    Events raised inside ``batch()`` are queued and delivered when the
    outermost batch exits, with ``diagram:changed`` coalesced into a single
    notification. A batch that raises restores the cells it started from and
    drops its queued events.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._nodes: Dict[str, DiagramNode] = {}
        self._edges: Dict[str, DiagramEdge] = {}
        self._handlers: Dict[CanvasEvent, List[EventHandler]] = defaultdict(list)
        self._batch_depth = 0
        self._pending: List[Tuple[CanvasEvent, object]] = []

    # --- Events ---

    def subscribe(self, event: CanvasEvent, handler: EventHandler) -> Callable[[], None]:
        event = CanvasEvent(event)
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: CanvasEvent, payload: object) -> None:
        event = CanvasEvent(event)
        if self._batch_depth:
            if event == CanvasEvent.CHANGED and any(e == CanvasEvent.CHANGED for e, _ in self._pending):
                return
            self._pending.append((event, payload))
            return
        for handler in list(self._handlers[event]):
            handler(payload)

    def _changed(self, reason: str) -> None:
        self.emit(CanvasEvent.CHANGED, DiagramChangedEvent(reason=reason))

    @contextmanager
    def batch(self):
        outermost = self._batch_depth == 0
        snapshot = self._snapshot() if outermost else None
        self._batch_depth += 1
        try:
            yield self
        except Exception:
            self._batch_depth -= 1
            if outermost:
                self._nodes, self._edges = snapshot
                self._pending.clear()
                self.logger.debug("Batch failed; canvas restored")
            raise
        self._batch_depth -= 1
        if outermost:
            self._flush()

    def _snapshot(self) -> Tuple[Dict[str, DiagramNode], Dict[str, DiagramEdge]]:
        return (
            {k: v.model_copy(deep=True) for k, v in self._nodes.items()},
            {k: v.model_copy(deep=True) for k, v in self._edges.items()},
        )

    def _flush(self) -> None:
        pending, self._pending = self._pending, []
        changed = [item for item in pending if item[0] == CanvasEvent.CHANGED]
        for event, payload in pending:
            if event != CanvasEvent.CHANGED:
                self.emit(event, payload)
        for event, payload in changed[:1]:
            self.emit(event, payload)

    # --- Nodes ---

    def add_node(self, node: DiagramNode) -> DiagramNode:
        if node.id in self._nodes:
            raise ValidationError(f"Node '{node.id}' already exists")
        self._nodes[node.id] = node
        self.emit(CanvasEvent.NODE_ADDED, NodeEvent(node_id=node.id))
        self._changed("node added")
        return node

    def remove_node(self, node_id: str) -> None:
        if node_id not in self._nodes:
            return
        for edge in self.connected_edges(node_id):
            del self._edges[edge.id]
        del self._nodes[node_id]
        self._changed("node removed")

    def get_node(self, node_id: Optional[str]) -> Optional[DiagramNode]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def nodes(self) -> List[DiagramNode]:
        return list(self._nodes.values())

    def _require_node(self, node_id: str) -> DiagramNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise ValidationError(f"Unknown node '{node_id}'")
        return node

    def update_node(self, node_id: str, **fields) -> DiagramNode:
        node = self._require_node(node_id)
        for name, value in fields.items():
            setattr(node, name, value)
        self._changed("node updated")
        return node

    def set_position(self, node_id: str, x: float, y: float) -> None:
        node = self._require_node(node_id)
        node.position = Point(x=x, y=y)
        self._changed("node moved")

    # --- Edges ---

    def validate_edge(self, edge: DiagramEdge) -> None:
        """
        Check an edge against the connection rules.

        Raises:
            ValidationError: If the edge loops onto one node, an end references
                a missing node, a background node or a missing port, or the
                ports' directions forbid the connection
        """
        if not (edge.source.is_connected or edge.target.is_connected):
            raise ValidationError(f"Edge '{edge.id}' is not attached to any node")
        if edge.source.is_connected and edge.source.node_id == edge.target.node_id:
            raise ValidationError(f"Edge '{edge.id}' connects node '{edge.source.node_id}' to itself")

        source_port = self._validate_end(edge, edge.source)
        target_port = self._validate_end(edge, edge.target)

        if source_port is not None and not source_port.accepts_outgoing:
            raise ValidationError(
                f"Port '{source_port.id}' of '{edge.source.node_id}' only accepts incoming connections"
            )
        if target_port is not None and not target_port.accepts_incoming:
            raise ValidationError(
                f"Port '{target_port.id}' of '{edge.target.node_id}' only accepts outgoing connections"
            )

    def _validate_end(self, edge: DiagramEdge, end: EdgeEnd):
        if not end.is_connected:
            return None
        node = self._nodes.get(end.node_id)
        if node is None:
            raise ValidationError(f"Edge '{edge.id}' references unknown node '{end.node_id}'")
        if node.is_background:
            raise ValidationError(f"Edge '{edge.id}' cannot attach to background node '{node.id}'")
        if end.port_id is None:
            return None
        port = node.get_port(end.port_id)
        if port is None:
            raise ValidationError(f"Node '{node.id}' has no port '{end.port_id}'")
        return port

    def add_edge(self, edge: DiagramEdge) -> DiagramEdge:
        if edge.id in self._edges:
            raise ValidationError(f"Edge '{edge.id}' already exists")
        self.validate_edge(edge)
        self._edges[edge.id] = edge
        self._changed("edge added")
        return edge

    def remove_edge(self, edge_id: str) -> None:
        if self._edges.pop(edge_id, None) is not None:
            self._changed("edge removed")

    def get_edge(self, edge_id: Optional[str]) -> Optional[DiagramEdge]:
        if edge_id is None:
            return None
        return self._edges.get(edge_id)

    def edges(self) -> List[DiagramEdge]:
        return list(self._edges.values())

    def connected_edges(self, node_id: str) -> List[DiagramEdge]:
        return [edge for edge in self._edges.values() if edge.touches(node_id)]

    def _require_edge(self, edge_id: str) -> DiagramEdge:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise ValidationError(f"Unknown edge '{edge_id}'")
        return edge

    def update_edge(self, edge_id: str, **fields) -> DiagramEdge:
        edge = self._require_edge(edge_id)
        for name, value in fields.items():
            setattr(edge, name, value)
        self._changed("edge updated")
        return edge

    def set_routing(self, edge_id: str, policy: RoutingPolicy) -> None:
        edge = self._require_edge(edge_id)
        if edge.routing == policy:
            return
        edge.routing = policy
        self._changed("routing updated")

    # --- Geometry ---

    def node_bbox(self, node_id: str) -> Rect:
        return self._require_node(node_id).bbox

    def endpoint_point(self, end: EdgeEnd) -> Point:
        if end.is_connected:
            return anchor_point(self._require_node(end.node_id), end.port_id)
        return end.point

    def route_points(self, edge_id: str) -> List[Point]:
        edge = self._require_edge(edge_id)
        return [
            self.endpoint_point(edge.source),
            *edge.waypoints,
            self.endpoint_point(edge.target),
        ]

    def edge_bbox(self, edge_id: str) -> Rect:
        return Rect.from_points(self.route_points(edge_id))

    def hit_test_edges(self, point: Point, tolerance: float,
                       exclude: Iterable[str] = ()) -> List[DiagramEdge]:
        """Edges whose rendered path passes within ``tolerance`` of a point, in insertion order."""
        excluded = set(exclude)
        return [
            edge for edge in self._edges.values()
            if edge.id not in excluded
            and distance_to_polyline(self.route_points(edge.id), point) <= tolerance
        ]

    # --- Gestures ---

    def move_node(self, node_id: str, x: float, y: float) -> None:
        """A node dragged to a new place and released."""
        self.set_position(node_id, x, y)
        self.emit(CanvasEvent.NODE_RELEASED, NodeEvent(node_id=node_id))

    def rotate_node(self, node_id: str, angle: float) -> None:
        self.update_node(node_id, rotation=angle)
        self.emit(CanvasEvent.NODE_ROTATED, NodeEvent(node_id=node_id))

    def begin_connection(self, edge: DiagramEdge) -> DiagramEdge:
        """Start a connection gesture; the edge's target is a loose point."""
        return self.add_edge(edge)

    def release_connection(self,
                           edge_id: str,
                           point: Point,
                           target_node_id: Optional[str] = None,
                           target_port_id: Optional[str] = None,
                           edge_under_id: Optional[str] = None) -> None:
        """
        Finish a connection gesture.

        The edge attaches to the target node when the connection is valid;
        otherwise its end stays at the release point. ``edge:connected`` is
        raised for an attached edge, then ``edge:released`` in every case.
        """
        edge = self._require_edge(edge_id)
        connected = False
        if target_node_id is not None:
            candidate = edge.model_copy(deep=True)
            candidate.target = EdgeEnd(node_id=target_node_id, port_id=target_port_id)
            try:
                self.validate_edge(candidate)
            except ValidationError as e:
                self.logger.debug(f"Connection of {edge_id} rejected: {e}")
            else:
                edge.target = candidate.target
                connected = True
                self._changed("edge connected")
        if not connected:
            edge.target = EdgeEnd(point=point)

        if connected:
            self.emit(CanvasEvent.EDGE_CONNECTED, EdgeConnectedEvent(edge_id=edge_id))
        self.emit(CanvasEvent.EDGE_RELEASED, EdgeReleasedEvent(
            edge_id=edge_id,
            point=point,
            target_node_id=target_node_id if connected else None,
            edge_under_id=edge_under_id,
        ))

    def click_cell(self, cell_id: str, double: bool = False) -> None:
        self.emit(CanvasEvent.CELL_CLICKED, CellClickedEvent(cell_id=cell_id, double=double))

    # --- Whole diagram ---

    def load(self, document: DiagramDocument) -> None:
        self._nodes = {node.id: node for node in document.nodes}
        self._edges = {edge.id: edge for edge in document.edges}
        self._pending.clear()

    def clear(self) -> None:
        self.load(DiagramDocument())

    def to_document(self) -> DiagramDocument:
        return DiagramDocument(
            nodes=[node.model_copy(deep=True) for node in self._nodes.values()],
            edges=[edge.model_copy(deep=True) for edge in self._edges.values()],
        )
