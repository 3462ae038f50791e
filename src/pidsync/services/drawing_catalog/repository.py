"""
Neo4j repository for the drawing catalog.
"""

from typing import Any, Dict, List, Optional

from ...shared import BaseRepository
from ...shared.taxonomy import BASE_LABEL, DRAWING_LABEL

_RETURN_DRAWING = """
RETURN d.id AS id, d.name AS name, d.createdAt AS created_at, d.updatedAt AS updated_at
"""


class DrawingRepository(BaseRepository):
    """
    Repository for ``Drawing`` records.
    """

    def list_drawings(self) -> List[Dict[str, Any]]:
        query = f"""
        MATCH (d:{DRAWING_LABEL})
        {_RETURN_DRAWING}
        ORDER BY created_at, name
        """
        return self.execute_query(query)

    def get_drawing(self, drawing_id: str) -> Optional[Dict[str, Any]]:
        query = f"""
        MATCH (d:{DRAWING_LABEL} {{id: $drawing_id}})
        {_RETURN_DRAWING}
        LIMIT 1
        """
        records = self.execute_query(query, {'drawing_id': drawing_id})
        return records[0] if records else None

    def orphan_drawing_ids(self) -> List[str]:
        """Drawing ids used by assets but missing from the catalog."""
        query = f"""
        MATCH (n:{BASE_LABEL})
        WHERE n.drawingId IS NOT NULL
          AND NOT EXISTS {{ MATCH (:{DRAWING_LABEL} {{id: n.drawingId}}) }}
        RETURN DISTINCT n.drawingId AS id
        """
        return [record['id'] for record in self.execute_query(query)]

    def register_drawing(self, drawing_id: str, name: str) -> None:
        query = f"""
        MERGE (d:{DRAWING_LABEL} {{id: $drawing_id}})
        ON CREATE SET d.name = $name, d.createdAt = datetime(), d.updatedAt = datetime()
        """
        self.execute_query(query, {'drawing_id': drawing_id, 'name': name})

    def remove_duplicates(self) -> int:
        """Keep one record per drawing id; returns how many were removed."""
        query = f"""
        MATCH (d:{DRAWING_LABEL})
        WITH d.id AS id, collect(d) AS records
        WHERE size(records) > 1
        FOREACH (extra IN tail(records) | DETACH DELETE extra)
        RETURN sum(size(records) - 1) AS removed
        """
        records = self.execute_query(query)
        return (records[0]['removed'] or 0) if records else 0

    def create_drawing(self, drawing_id: str, name: str) -> Dict[str, Any]:
        query = f"""
        CREATE (d:{DRAWING_LABEL} {{id: $drawing_id, name: $name, createdAt: datetime(), updatedAt: datetime()}})
        {_RETURN_DRAWING}
        """
        return self.execute_query(query, {'drawing_id': drawing_id, 'name': name})[0]

    def rename_drawing(self, drawing_id: str, name: str) -> Optional[Dict[str, Any]]:
        query = f"""
        MATCH (d:{DRAWING_LABEL} {{id: $drawing_id}})
        SET d.name = $name, d.updatedAt = datetime()
        {_RETURN_DRAWING}
        """
        records = self.execute_query(query, {'drawing_id': drawing_id, 'name': name})
        return records[0] if records else None

    def delete_drawing(self, drawing_id: str) -> bool:
        """Delete a drawing and all of its assets; False when it did not exist."""
        with self.transaction() as tx:
            records = self.run_in(tx, f"""
            MATCH (d:{DRAWING_LABEL} {{id: $drawing_id}})
            DETACH DELETE d
            RETURN count(d) AS deleted
            """, {'drawing_id': drawing_id})
            self.run_in(tx, f"""
            MATCH (n:{BASE_LABEL} {{drawingId: $drawing_id}})
            DETACH DELETE n
            """, {'drawing_id': drawing_id})
        return bool(records and records[0]['deleted'])
