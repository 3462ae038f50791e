"""
Graph Persistence Service implementation.

Saves a drawing by replacing all of its persisted rows in one transaction
and loads it back into a diagram document.
"""

from typing import Optional

from ...shared import (
    DatabaseError,
    DiagramDocument,
    PersistenceError,
    get_logger,
)
from ..shape_catalog import ShapeCatalog
from .linker import ConnectorLinker
from .mapper import GraphMapper
from .models import LoadResult, SaveResult
from .repository import GraphRepository


class GraphPersistenceService:
    """
    Drawing save and load against Neo4j.
    """

    def __init__(self, catalog: ShapeCatalog, repository: Optional[GraphRepository] = None):
        """
        Initialize the Graph Persistence service.

        Args:
            catalog: Shape catalog used to rebuild ports on load
            repository: Graph repository; a Neo4j-backed one when omitted
        """
        self.logger = get_logger(__name__)
        self.mapper = GraphMapper(catalog)
        self.repository = repository or GraphRepository()
        self.linker = ConnectorLinker(self.repository)

    def save(self, drawing_id: str, document: DiagramDocument) -> SaveResult:
        """
        Replace the persisted contents of a drawing.

        Args:
            drawing_id: Drawing to write
            document: Current diagram

        Returns:
            Counts of what was written

        Raises:
            PersistenceError: If the transaction failed; nothing was changed
        """
        snapshot = self.mapper.to_graph(drawing_id, document)

        try:
            with self.repository.transaction() as tx:
                self.repository.touch_drawing(tx, drawing_id)
                self.repository.delete_assets(tx, drawing_id)

                asset_count = 0
                for labels, assets in snapshot.assets_by_labels().items():
                    rows = [asset.to_neo4j_dict() for asset in assets]
                    asset_count += self.repository.create_assets(tx, labels, rows)

                relationship_count = 0
                for kind, relationships in snapshot.relationships_by_kind().items():
                    rows = [relationship.to_batch_row() for relationship in relationships]
                    relationship_count += self.repository.create_relationships(tx, drawing_id, kind, rows)

                link_count = self.linker.link(tx, drawing_id, snapshot.assets)
        except DatabaseError as e:
            self.logger.error(f"Failed to save drawing {drawing_id}: {e}")
            raise PersistenceError(f"Save of drawing '{drawing_id}' failed: {e}")

        self.logger.info(
            f"Saved drawing {drawing_id}: {asset_count} assets, "
            f"{relationship_count} relationships, {link_count} links"
        )
        return SaveResult(
            drawing_id=drawing_id,
            asset_count=asset_count,
            relationship_count=relationship_count,
            link_count=link_count,
            skipped_edge_ids=snapshot.skipped_edge_ids,
        )

    def load(self, drawing_id: str) -> LoadResult:
        """
        Read a drawing back.

        Args:
            drawing_id: Drawing to read

        Returns:
            The rebuilt diagram and any warnings about malformed stored data

        Raises:
            PersistenceError: If the drawing could not be read
        """
        try:
            with self.repository.transaction() as tx:
                assets = self.repository.fetch_assets(tx, drawing_id)
                relationships = self.repository.fetch_relationships(tx, drawing_id)
        except DatabaseError as e:
            self.logger.error(f"Failed to load drawing {drawing_id}: {e}")
            raise PersistenceError(f"Load of drawing '{drawing_id}' failed: {e}")

        warnings = []
        document = self.mapper.from_graph(assets, relationships, warnings)
        self.logger.info(
            f"Loaded drawing {drawing_id}: {len(document.nodes)} nodes, {len(document.edges)} edges"
        )
        return LoadResult(drawing_id=drawing_id, document=document, warnings=warnings)
