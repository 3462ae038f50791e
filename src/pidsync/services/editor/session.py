"""
Editor session.

Owns the canvas of the drawing being edited and coordinates it with the
catalog and the graph: opening, saving, discarding, switching drawings
behind the unsaved-changes gate, and following off-page connectors.
"""

from enum import Enum
from typing import Callable, List, Optional

from ...shared import (
    DiagramDocument,
    Notification,
    NotificationLevel,
    Notifier,
    PersistenceError,
    Settings,
    ValidationError,
    get_logger,
    get_settings,
    log_notifier,
)
from ...shared.taxonomy import CONNECTOR_TYPE
from ..canvas import Canvas, CanvasEvent, CellClickedEvent, DiagramChangedEvent, InMemoryCanvas
from ..drawing_catalog import Drawing, DrawingCatalogService
from ..persistence import GraphPersistenceService, SaveResult
from ..shape_catalog import ShapeCatalog
from ..topology import TopologyService


class SwitchDecision(str, Enum):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


# Asked which way to go when leaving a drawing with unsaved changes
DecisionCallback = Callable[[str], SwitchDecision]


def _cancel(target_drawing_id: str) -> SwitchDecision:
    return SwitchDecision.CANCEL


class EditorSession:
    """
    One user's editing session.
    """

    def __init__(self,
                 drawings: DrawingCatalogService,
                 persistence: GraphPersistenceService,
                 shapes: ShapeCatalog,
                 canvas: Optional[Canvas] = None,
                 settings: Settings = None,
                 notifier: Notifier = None,
                 decide: DecisionCallback = None):
        """
        Initialize the editor session.

        Args:
            drawings: Drawing catalog
            persistence: Graph persistence
            shapes: Shape catalog
            canvas: Canvas to edit on; a headless one when omitted
            settings: Settings
            notifier: Receives user-facing notifications
            decide: Unsaved-changes prompt; cancels the switch when omitted
        """
        self.logger = get_logger(__name__)
        self.drawings = drawings
        self.persistence = persistence
        self.shapes = shapes
        self.canvas = canvas or InMemoryCanvas()
        self.settings = settings or get_settings()
        self.notify = notifier or log_notifier
        self.decide = decide or _cancel

        self.topology = TopologyService(self.canvas, shapes, self.settings, self.notify)
        self.topology.attach()
        self.canvas.subscribe(CanvasEvent.CHANGED, self._on_changed)
        self.canvas.subscribe(CanvasEvent.CELL_CLICKED, self._on_cell_clicked)

        self.drawing_id: Optional[str] = None
        self.dirty = False

    def _on_changed(self, event: DiagramChangedEvent) -> None:
        self.dirty = True

    def _on_cell_clicked(self, event: CellClickedEvent) -> None:
        if not event.double:
            return
        node = self.canvas.get_node(event.cell_id)
        if node is not None and node.type == CONNECTOR_TYPE:
            self.follow_connector(node.id)

    # Lifecycle

    def start(self) -> List[Drawing]:
        """List drawings, creating the default one on an empty catalog, and open the first."""
        drawings = self.drawings.ensure_default_drawing()
        self.open(drawings[0].id)
        return drawings

    def _background_document(self) -> DiagramDocument:
        frame = self.shapes.create_node(
            self.settings.background_frame_shape,
            node_id=self.settings.background_frame_id,
        )
        return DiagramDocument(nodes=[frame])

    def open(self, drawing_id: str) -> bool:
        """
        Load a drawing onto the canvas.

        On failure the canvas holds only the background frame and an error is
        notified.

        Returns:
            Whether the drawing loaded
        """
        document = self._background_document()
        try:
            result = self.persistence.load(drawing_id)
        except PersistenceError as e:
            self.canvas.load(document)
            self.drawing_id = drawing_id
            self.dirty = False
            self.notify(Notification(NotificationLevel.ERROR, f"Could not load drawing: {e}"))
            return False

        document.nodes.extend(
            node for node in result.document.nodes
            if node.id != self.settings.background_frame_id
        )
        document.edges.extend(result.document.edges)
        self.canvas.load(document)
        self.topology.refresh_routing()
        self.topology.refresh_label_anchors()

        self.drawing_id = drawing_id
        self.dirty = False
        if result.warnings:
            self.notify(Notification(
                NotificationLevel.WARNING,
                f"Drawing loaded with {len(result.warnings)} repaired entries",
            ))
        return True

    def save(self) -> SaveResult:
        """
        Save the open drawing.

        Raises:
            ValidationError: If no drawing is open
            PersistenceError: If the save failed; the session stays dirty
        """
        if self.drawing_id is None:
            raise ValidationError("No drawing is open")
        try:
            result = self.persistence.save(self.drawing_id, self.canvas.to_document())
        except PersistenceError as e:
            self.notify(Notification(NotificationLevel.ERROR, f"Save failed: {e}"))
            raise
        self.dirty = False
        self.notify(Notification(NotificationLevel.SUCCESS, "Drawing saved"))
        return result

    def discard(self) -> bool:
        """Drop unsaved changes by reloading the open drawing."""
        if self.drawing_id is None:
            self.dirty = False
            return True
        return self.open(self.drawing_id)

    def switch_drawing(self, target_drawing_id: str, decide: DecisionCallback = None) -> bool:
        """
        Leave the open drawing for another one.

        With unsaved changes the decision callback chooses: SAVE first (the
        switch is abandoned if the save fails), DISCARD the changes, or CANCEL.

        Returns:
            Whether the target drawing is now open
        """
        if self.dirty:
            decision = SwitchDecision((decide or self.decide)(target_drawing_id))
            if decision == SwitchDecision.CANCEL:
                return False
            if decision == SwitchDecision.SAVE:
                try:
                    self.save()
                except PersistenceError:
                    return False
        return self.open(target_drawing_id)

    def follow_connector(self, node_id: str, decide: DecisionCallback = None) -> bool:
        """Open the drawing an off-page connector points to."""
        node = self.canvas.get_node(node_id)
        if node is None or node.type != CONNECTOR_TYPE:
            return False
        target = node.attributes.target_drawing_id
        if not target:
            self.notify(Notification(NotificationLevel.WARNING, "Connector has no target drawing"))
            return False
        return self.switch_drawing(target, decide)
