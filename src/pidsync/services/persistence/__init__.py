"""
Graph Persistence Service.

Translation of drawings to and from the Neo4j graph, and cross-page
connector linking.
"""

from .linker import ConnectorLinker
from .mapper import GraphMapper, pack_waypoints, port_description, port_region, unpack_waypoints
from .models import GraphSnapshot, LoadResult, SaveResult
from .repository import GraphRepository
from .service import GraphPersistenceService

__all__ = [
    "GraphPersistenceService",
    "GraphMapper",
    "GraphRepository",
    "ConnectorLinker",
    "GraphSnapshot",
    "LoadResult",
    "SaveResult",
    "pack_waypoints",
    "unpack_waypoints",
    "port_region",
    "port_description",
]
