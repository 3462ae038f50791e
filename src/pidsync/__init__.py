"""
P&ID Sync - P&ID diagram editor core kept in sync with a Neo4j plant graph.
"""

__version__ = "1.0.0"
__author__ = "P&ID Sync Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.models.diagram import DiagramDocument, DiagramEdge, DiagramNode
from .shared.exceptions import PidSyncError, ConfigurationError

__all__ = [
    "get_settings",
    "DiagramDocument",
    "DiagramEdge",
    "DiagramNode",
    "PidSyncError",
    "ConfigurationError",
]
