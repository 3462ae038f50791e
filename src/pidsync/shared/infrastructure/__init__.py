"""
Shared infrastructure components for P&ID Sync.

Provides centralized infrastructure services including:
- Neo4j connection management and the base repository
- Logging configuration
"""

from .database.connection_manager import DatabaseManager, get_database, close_database_connections
from .database.base_repository import BaseRepository
from .monitoring.logger import get_logger, setup_logging

__all__ = [
    # Database
    "DatabaseManager",
    "get_database",
    "close_database_connections",
    "BaseRepository",

    # Monitoring
    "get_logger",
    "setup_logging",
]
