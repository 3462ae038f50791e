"""
Data models for graph persistence.
"""

from typing import List
from pydantic import Field

from ...shared import BaseModel, DiagramDocument, PersistedAssetNode, PersistedRelationship


class GraphSnapshot(BaseModel):
    """A drawing translated to persisted rows."""

    drawing_id: str
    assets: List[PersistedAssetNode] = Field(default_factory=list)
    relationships: List[PersistedRelationship] = Field(default_factory=list)
    skipped_edge_ids: List[str] = Field(default_factory=list, description="Dangling or unresolvable edges")

    def assets_by_labels(self):
        """Assets grouped by label set, in first-seen order."""
        groups = {}
        for asset in self.assets:
            groups.setdefault(tuple(asset.labels), []).append(asset)
        return groups

    def relationships_by_kind(self):
        groups = {}
        for relationship in self.relationships:
            groups.setdefault(relationship.kind, []).append(relationship)
        return groups


class SaveResult(BaseModel):
    """Outcome of a successful save."""

    drawing_id: str
    asset_count: int = 0
    relationship_count: int = 0
    link_count: int = 0
    skipped_edge_ids: List[str] = Field(default_factory=list)


class LoadResult(BaseModel):
    """A drawing read back from the graph."""

    drawing_id: str
    document: DiagramDocument = Field(default_factory=DiagramDocument)
    warnings: List[str] = Field(default_factory=list)
