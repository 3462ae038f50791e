"""
Canvas Service.

Drawing surface abstraction, its event vocabulary and the headless canvas.
"""

from .canvas import Canvas, InMemoryCanvas
from .events import (
    CanvasEvent,
    CellClickedEvent,
    DiagramChangedEvent,
    EdgeConnectedEvent,
    EdgeReleasedEvent,
    EventHandler,
    NodeEvent,
)

__all__ = [
    "Canvas",
    "InMemoryCanvas",
    "CanvasEvent",
    "CellClickedEvent",
    "DiagramChangedEvent",
    "EdgeConnectedEvent",
    "EdgeReleasedEvent",
    "EventHandler",
    "NodeEvent",
]
