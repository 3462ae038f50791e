"""
Cross-page connector linker.

Off-page connectors carrying the same tag on different drawings represent
the same line leaving one sheet and entering another. After a save, each
tagged connector of the saved drawing is linked to its peers by an
undirected LINKS_TO.
"""

from typing import FrozenSet, Iterable, Set, Tuple

from ...shared import PersistedAssetNode, get_logger
from ...shared.taxonomy import CONNECTOR_TYPE


class ConnectorLinker:
    """Links tagged off-page connectors across drawings."""

    def __init__(self, repository):
        """
        Args:
            repository: Provides ``find_connector_peers`` and ``merge_link``
        """
        self.repository = repository
        self.logger = get_logger(__name__)

    def link(self, tx, drawing_id: str, assets: Iterable[PersistedAssetNode]) -> int:
        """
        Link the saved drawing's connectors to their peers.

        Args:
            tx: Open transaction of the save
            drawing_id: Drawing just saved
            assets: Assets just written for that drawing

        Returns:
            Number of connector pairs linked in this run
        """
        seen: Set[FrozenSet[Tuple[str, str]]] = set()
        for asset in assets:
            if asset.node_type != CONNECTOR_TYPE:
                continue
            # Stored tags are already stripped
            tag = asset.properties.get("Tag")
            if not tag:
                continue
            connector = (drawing_id, asset.uid)
            for drawing, uid in self.repository.find_connector_peers(tx, drawing_id, tag):
                peer = (drawing, uid)
                pair = frozenset((connector, peer))
                if pair in seen:
                    continue
                seen.add(pair)
                self.repository.merge_link(tx, connector, peer)

        if seen:
            self.logger.info(f"Linked {len(seen)} off-page connector pairs from {drawing_id}")
        return len(seen)
