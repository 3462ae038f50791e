"""
Neo4j repository for drawing contents.

Every method takes an open transaction from ``transaction()`` so a save or
load runs as one unit of work.
"""

import re
from typing import Any, Dict, List, Sequence, Tuple

from ...shared import BaseRepository, RelationshipKind
from ...shared.taxonomy import BASE_LABEL, CONNECTOR_TYPE, DRAWING_LABEL

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_STORED_KINDS = (RelationshipKind.PIPE, RelationshipKind.MEASURES, RelationshipKind.CONTROLS)


def _label_clause(labels: Sequence[str]) -> str:
    """``:Asset:Equipment:Valve`` for a label set; labels are spliced into Cypher so they are checked."""
    for label in labels:
        if not _IDENTIFIER.match(label):
            raise ValueError(f"Invalid label '{label}'")
    return "".join(f":{label}" for label in labels)


def _relationship_type(kind: str) -> str:
    kind = RelationshipKind(kind).value
    if not _IDENTIFIER.match(kind):
        raise ValueError(f"Invalid relationship type '{kind}'")
    return kind


class GraphRepository(BaseRepository):
    """
    Repository for the asset nodes and relationships of drawings.
    """

    def touch_drawing(self, tx, drawing_id: str) -> None:
        """Create the drawing record if needed and stamp its update time."""
        query = f"""
        MERGE (d:{DRAWING_LABEL} {{id: $drawing_id}})
        ON CREATE SET d.name = $drawing_id, d.createdAt = datetime()
        SET d.updatedAt = datetime()
        """
        self.run_in(tx, query, {'drawing_id': drawing_id})

    def delete_assets(self, tx, drawing_id: str) -> int:
        query = f"""
        MATCH (n:{BASE_LABEL} {{drawingId: $drawing_id}})
        DETACH DELETE n
        RETURN count(n) AS deleted
        """
        records = self.run_in(tx, query, {'drawing_id': drawing_id})
        return records[0]['deleted'] if records else 0

    def create_assets(self, tx, labels: Sequence[str], rows: List[Dict[str, Any]]) -> int:
        """
        Batch-insert asset nodes sharing one label set.

        Args:
            tx: Open transaction
            labels: Label set, base label first
            rows: Node property maps

        Returns:
            Number of nodes created
        """
        if not rows:
            return 0
        query = f"""
        UNWIND $rows AS row
        CREATE (n{_label_clause(labels)})
        SET n = row
        RETURN count(n) AS created
        """
        records = self.run_in(tx, query, {'rows': rows})
        return records[0]['created'] if records else 0

    def create_relationships(self, tx, drawing_id: str, kind: str,
                             rows: List[Dict[str, Any]]) -> int:
        """
        Batch-insert relationships of one kind between assets of a drawing.

        Args:
            tx: Open transaction
            drawing_id: Drawing owning both ends
            kind: Relationship type
            rows: ``{source, target, properties}`` rows

        Returns:
            Number of relationships created
        """
        if not rows:
            return 0
        query = f"""
        UNWIND $rows AS row
        MATCH (s:{BASE_LABEL} {{uid: row.source, drawingId: $drawing_id}})
        MATCH (t:{BASE_LABEL} {{uid: row.target, drawingId: $drawing_id}})
        CREATE (s)-[r:{_relationship_type(kind)}]->(t)
        SET r = row.properties
        RETURN count(r) AS created
        """
        records = self.run_in(tx, query, {'rows': rows, 'drawing_id': drawing_id})
        return records[0]['created'] if records else 0

    def fetch_assets(self, tx, drawing_id: str) -> List[Dict[str, Any]]:
        """Property maps of all assets of a drawing."""
        query = f"""
        MATCH (n:{BASE_LABEL} {{drawingId: $drawing_id}})
        RETURN properties(n) AS properties
        """
        return [record['properties'] for record in self.run_in(tx, query, {'drawing_id': drawing_id})]

    def fetch_relationships(self, tx, drawing_id: str) -> List[Dict[str, Any]]:
        """Stored PIPE, MEASURES and CONTROLS rows between assets of a drawing."""
        types = "|".join(kind.value for kind in _STORED_KINDS)
        query = f"""
        MATCH (s:{BASE_LABEL} {{drawingId: $drawing_id}})-[r:{types}]->(t:{BASE_LABEL} {{drawingId: $drawing_id}})
        RETURN type(r) AS kind, s.uid AS source, t.uid AS target, properties(r) AS properties
        """
        return self.run_in(tx, query, {'drawing_id': drawing_id})

    def find_connector_peers(self, tx, drawing_id: str, tag: str) -> List[Tuple[str, str]]:
        """
        Off-page connectors with the given tag in other drawings.

        Node ids are only unique within a drawing, so peers come back as
        ``(drawing_id, uid)`` pairs.
        """
        query = f"""
        MATCH (b:{CONNECTOR_TYPE} {{Tag: $tag}})
        WHERE b.drawingId <> $drawing_id
        RETURN b.drawingId AS drawing_id, b.uid AS uid
        """
        records = self.run_in(tx, query, {'tag': tag, 'drawing_id': drawing_id})
        return [(record['drawing_id'], record['uid']) for record in records]

    def merge_link(self, tx, source: Tuple[str, str], target: Tuple[str, str]) -> None:
        """Link two connectors, each given as ``(drawing_id, uid)``, with one undirected LINKS_TO."""
        query = f"""
        MATCH (a:{BASE_LABEL} {{drawingId: $source_drawing_id, uid: $source_uid}})
        MATCH (b:{BASE_LABEL} {{drawingId: $target_drawing_id, uid: $target_uid}})
        MERGE (a)-[:{RelationshipKind.LINKS_TO.value}]-(b)
        """
        self.run_in(tx, query, {
            'source_drawing_id': source[0], 'source_uid': source[1],
            'target_drawing_id': target[0], 'target_uid': target[1],
        })
