"""
Database infrastructure for P&ID Sync.
"""

from .connection_manager import DatabaseManager, get_database, close_database_connections
from .base_repository import BaseRepository

__all__ = [
    "DatabaseManager",
    "get_database",
    "close_database_connections",
    "BaseRepository",
]
