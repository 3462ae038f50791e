"""
Neo4j connection management.

One driver is shared by the graph persistence and drawing catalog
repositories. Sessions opened here translate driver failures into
DatabaseError.
"""

import threading
import time
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Dict, Generator, List, Optional

from neo4j import Driver, GraphDatabase, Session
from neo4j.exceptions import AuthError, Neo4jError, ServiceUnavailable

from ...config.settings import get_settings
from ...exceptions import ConfigurationError, DatabaseError
from ..monitoring.logger import get_logger


class DatabaseManager:
    """
    Process-wide owner of the Neo4j driver.

    The driver is created lazily on first use and re-verified at most once per
    ``health_check_interval`` seconds.
    """

    _instance: Optional["DatabaseManager"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.settings = get_settings()
        self.logger = get_logger(__name__)
        self.health_check_interval = 60
        self._driver: Optional[Driver] = None
        self._last_health_check = 0.0
        self._is_healthy = False
        self._initialized = True

    @property
    def driver(self) -> Driver:
        """
        The shared driver, created on first access.

        Raises:
            ConfigurationError: If credentials are missing or rejected
            DatabaseError: If the server cannot be reached
        """
        if self._driver is None:
            with self._lock:
                if self._driver is None:
                    self._driver = self._create_driver()
        self._verify_if_due()
        return self._driver

    def _create_driver(self) -> Driver:
        config = self.settings.database_config
        if not config['password']:
            raise ConfigurationError("NEO4J_PASSWORD is required")

        try:
            driver = GraphDatabase.driver(
                config['uri'],
                auth=(config['user'], config['password']),
                max_connection_pool_size=config['max_connections'],
                connection_acquisition_timeout=config['connection_timeout'],
            )
            driver.verify_connectivity()
        except AuthError as e:
            raise ConfigurationError(f"Database authentication failed: {e}")
        except ServiceUnavailable as e:
            raise DatabaseError(f"Database service unavailable: {e}")

        self.logger.info(f"Connected to Neo4j at {config['uri']}")
        self._is_healthy = True
        self._last_health_check = time.time()
        return driver

    def _verify_if_due(self) -> None:
        now = time.time()
        if now - self._last_health_check < self.health_check_interval:
            return
        self._last_health_check = now
        try:
            self._driver.verify_connectivity()
            self._is_healthy = True
        except (ServiceUnavailable, Neo4jError) as e:
            self._is_healthy = False
            raise DatabaseError(f"Database is not reachable: {e}")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """A driver session; errors raised inside the block become DatabaseError."""
        session = self.driver.session(database=self.settings.database_config['database'])
        try:
            yield session
        except DatabaseError:
            raise
        except Exception as e:
            self.logger.error(f"Database session error: {e}")
            raise DatabaseError(f"Database operation failed: {e}")
        finally:
            session.close()

    def run(self, query: str, parameters: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """Run one auto-committed query and return its records as dictionaries."""
        with self.session() as session:
            return [record.data() for record in session.run(query, parameters or {})]

    def close(self) -> None:
        with self._lock:
            if self._driver is not None:
                self._driver.close()
                self.logger.info("Closed Neo4j driver")
            self._driver = None
            self._is_healthy = False

    def status(self) -> Dict[str, Any]:
        """Connection state for health reporting; never opens a connection."""
        return {
            'connected': self._driver is not None,
            'healthy': self._is_healthy,
            'last_health_check': self._last_health_check,
        }


@lru_cache()
def get_database() -> DatabaseManager:
    """Get the global database manager instance."""
    return DatabaseManager()


def close_database_connections():
    """Close the shared driver on application shutdown."""
    get_database().close()
