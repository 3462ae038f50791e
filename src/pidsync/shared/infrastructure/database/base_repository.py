"""
Base repository for the Neo4j-backed repositories.
"""

from contextlib import contextmanager
from typing import Any, Dict, List

from .connection_manager import DatabaseManager, get_database
from ...exceptions import DatabaseError


class BaseRepository:
    """
    Base repository for consistent database operations.

    Subclasses issue single queries through ``execute_query`` and group
    writes that must succeed together inside ``transaction()``.
    """

    def __init__(self, db: DatabaseManager = None):
        """
        Initialize repository with database connection.

        Args:
            db: Database manager; the process-wide one when omitted
        """
        self.db = db or get_database()

    @contextmanager
    def transaction(self):
        """
        Context manager for an explicit unit of work.

        Commits when the block completes and rolls back on any error, which is
        re-raised as DatabaseError.
        """
        with self.db.session() as session:
            tx = session.begin_transaction()
            try:
                yield tx
                tx.commit()
            except Exception as e:
                tx.rollback()
                raise DatabaseError(f"Transaction failed: {e}")
            finally:
                tx.close()

    def execute_query(self, query: str, parameters: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """
        Execute a Cypher query and return results.

        Args:
            query: Cypher query string
            parameters: Query parameters

        Returns:
            List of result records as dictionaries
        """
        try:
            return self.db.run(query, parameters)
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Query execution failed: {e}")

    @staticmethod
    def run_in(tx, query: str, parameters: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """Run a query inside an open transaction and return its records as dictionaries."""
        result = tx.run(query, parameters or {})
        return [record.data() for record in result]
