"""
Canvas events and their payloads.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ...shared import Point


class CanvasEvent(str, Enum):
    NODE_ADDED = "node:added"
    NODE_RELEASED = "node:released"
    NODE_ROTATED = "node:rotated"
    EDGE_CONNECTED = "edge:connected"
    EDGE_RELEASED = "edge:released"
    CELL_CLICKED = "cell:clicked"
    CHANGED = "diagram:changed"


@dataclass(frozen=True)
class NodeEvent:
    """A node was added, dropped after a drag, or rotated."""

    node_id: str


@dataclass(frozen=True)
class EdgeConnectedEvent:
    """An edge end was attached to a node by a gesture."""

    edge_id: str


@dataclass(frozen=True)
class EdgeReleasedEvent:
    """
    The mouse was released at the end of a connection gesture.

    ``target_node_id`` is set when the edge ended on a valid node;
    ``edge_under_id`` names the edge the pointer was released on, if any.
    """

    edge_id: str
    point: Point
    target_node_id: Optional[str] = None
    edge_under_id: Optional[str] = None


@dataclass(frozen=True)
class CellClickedEvent:
    cell_id: str
    double: bool = False


@dataclass(frozen=True)
class DiagramChangedEvent:
    reason: str


EventHandler = Callable[[object], None]
