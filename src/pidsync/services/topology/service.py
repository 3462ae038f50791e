"""
Topology Service implementation.

Keeps the pipe network consistent while the diagram is edited: the splice
and tap engines run as canvas event handlers, connections made by gesture are
classified as pipes or signals, and routing exclusions and label anchors are
refreshed as the topology changes.
"""

import uuid
from typing import Callable, List, Optional

from ...shared import (
    ACTUATOR_PORT_ID,
    DiagramEdge,
    EdgeEnd,
    Notifier,
    PipeAttributes,
    Point,
    Settings,
    SignalAttributes,
    SignalSubtype,
    get_logger,
    get_settings,
    log_notifier,
)
from ...shared.geometry import label_anchor
from ...shared.taxonomy import INSTRUMENT_TYPE, pipe_style, signal_style
from ..canvas import (
    Canvas,
    CanvasEvent,
    EdgeConnectedEvent,
    EdgeReleasedEvent,
    NodeEvent,
)
from ..shape_catalog import ShapeCatalog
from .models import SpliceResult, TapResult
from .routing import apply_routing, refresh_all
from .splice import PipeSplicer
from .tapping import InstrumentTapper


class TopologyService:
    """
    Diagram topology engine.

    Call ``attach()`` to start reacting to canvas events and ``detach()`` to
    stop.
    """

    def __init__(self,
                 canvas: Canvas,
                 catalog: ShapeCatalog,
                 settings: Settings = None,
                 notifier: Notifier = None):
        """
        Initialize the Topology service.

        Args:
            canvas: Canvas being edited
            catalog: Shape catalog used to create tapping points
            settings: Geometry and routing settings
            notifier: Receives user-facing notifications
        """
        self.logger = get_logger(__name__)
        self.canvas = canvas
        self.catalog = catalog
        self.settings = settings or get_settings()
        self.notify = notifier or log_notifier

        self.splicer = PipeSplicer(canvas, self.settings, self.notify)
        self.tapper = InstrumentTapper(canvas, catalog, self.settings, self.notify)

        self._unsubscribers: List[Callable[[], None]] = []
        self.last_splice: Optional[SpliceResult] = None
        self.last_tap: Optional[TapResult] = None

    def attach(self) -> None:
        if self._unsubscribers:
            return
        subscriptions = [
            (CanvasEvent.NODE_ADDED, self._on_node_dropped),
            (CanvasEvent.NODE_RELEASED, self._on_node_dropped),
            (CanvasEvent.NODE_ROTATED, self._on_node_rotated),
            (CanvasEvent.EDGE_CONNECTED, self._on_edge_connected),
            (CanvasEvent.EDGE_RELEASED, self._on_edge_released),
        ]
        for event, handler in subscriptions:
            self._unsubscribers.append(self.canvas.subscribe(event, handler))
        self.logger.debug("Topology handlers attached")

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    # Event handlers

    def _on_node_dropped(self, event: NodeEvent) -> None:
        self.last_splice = self.splicer.splice(event.node_id)

    def _on_node_rotated(self, event: NodeEvent) -> None:
        self.update_label_anchor(event.node_id)

    def _on_edge_connected(self, event: EdgeConnectedEvent) -> None:
        self.classify_connection(event.edge_id)

    def _on_edge_released(self, event: EdgeReleasedEvent) -> None:
        self.last_tap = self.tapper.handle_release(event)
        edge = self.canvas.get_edge(event.edge_id)
        if edge is not None and edge.is_dangling:
            # Loose ends are never kept
            self.canvas.remove_edge(edge.id)

    # Connections

    def new_pipe_attributes(self, source_node_id: Optional[str]) -> PipeAttributes:
        """Attributes for a new pipe: those of the last pipe on the source node, else defaults."""
        if source_node_id is not None:
            pipes = [e for e in self.canvas.connected_edges(source_node_id) if e.is_pipe]
            if pipes:
                last = pipes[-1].attributes
                return PipeAttributes(
                    fluid=last.fluid,
                    material=last.material,
                    diameter_class=last.diameter_class,
                    pressure_class=last.pressure_class,
                    insulation_kind=last.insulation_kind,
                )
        return PipeAttributes()

    def start_connection(self, source_node_id: str, source_port_id: Optional[str],
                         point: Point) -> DiagramEdge:
        """Begin a connection gesture from a node port towards a loose point."""
        attributes = self.new_pipe_attributes(source_node_id)
        edge = DiagramEdge(
            id=str(uuid.uuid4()),
            source=EdgeEnd(node_id=source_node_id, port_id=source_port_id),
            target=EdgeEnd(point=point),
            attributes=attributes,
            style=pipe_style(attributes.fluid, attributes.insulation_kind),
        )
        return self.canvas.begin_connection(edge)

    def connect(self,
                source_node_id: str,
                source_port_id: Optional[str],
                target_node_id: str,
                target_port_id: Optional[str],
                waypoints: Optional[List[Point]] = None) -> DiagramEdge:
        """
        Connect two node ports as a user connection would.

        Returns:
            The new edge after classification

        Raises:
            ValidationError: If the connection breaks a connection rule
        """
        attributes = self.new_pipe_attributes(source_node_id)
        edge = DiagramEdge(
            id=str(uuid.uuid4()),
            source=EdgeEnd(node_id=source_node_id, port_id=source_port_id),
            target=EdgeEnd(node_id=target_node_id, port_id=target_port_id),
            waypoints=list(waypoints or []),
            attributes=attributes,
            style=pipe_style(attributes.fluid, attributes.insulation_kind),
        )
        self.canvas.add_edge(edge)
        self.classify_connection(edge.id)
        return self.canvas.get_edge(edge.id)

    def classify_connection(self, edge_id: str) -> None:
        """
        Turn a freshly connected edge into a signal where it carries one.

        Edges leaving an instrument measure; edges ending on an actuator port
        control. Everything else stays a pipe and triggers a routing refresh.
        """
        edge = self.canvas.get_edge(edge_id)
        if edge is None:
            return
        source = self.canvas.get_node(edge.source.node_id)
        from_instrument = source is not None and source.type == INSTRUMENT_TYPE
        to_actuator = edge.target.port_id == ACTUATOR_PORT_ID

        if from_instrument or to_actuator:
            subtype = SignalSubtype.CONTROLS if to_actuator else SignalSubtype.MEASURES
            self.canvas.update_edge(
                edge_id,
                attributes=SignalAttributes(subtype=subtype),
                style=signal_style(),
            )
            apply_routing(self.canvas, edge_id, self.settings)
            self.logger.debug(f"Edge {edge_id} classified as {subtype.value} signal")
        else:
            refresh_all(self.canvas, self.settings)

    # Presentation

    def update_label_anchor(self, node_id: str) -> None:
        node = self.canvas.get_node(node_id)
        if node is None or node.is_background:
            return
        anchor = label_anchor(node, node.attributes.label_position, self.settings.label_padding)
        self.canvas.update_node(node_id, label_anchor=anchor)

    def refresh_label_anchors(self) -> None:
        for node in self.canvas.nodes():
            self.update_label_anchor(node.id)

    def refresh_routing(self) -> int:
        return refresh_all(self.canvas, self.settings)
