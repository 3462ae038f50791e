"""
Editor Service.

Editing session tying the canvas, the topology engine and persistence together.
"""

from .session import DecisionCallback, EditorSession, SwitchDecision

__all__ = [
    "EditorSession",
    "SwitchDecision",
    "DecisionCallback",
]
