"""
Graph persistence mapper.

Pure translation between the diagram model and the persisted graph rows.
No database access happens here; ``GraphPersistenceService`` runs the
resulting rows through the repository.

Measurement signals are stored with their drawn ends swapped, so a tap
drawn tapping point -> instrument is stored instrument -> tapping point;
loading swaps them back.
"""

import json
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ...shared import (
    ACTUATOR_PORT_ID,
    DiagramDocument,
    DiagramEdge,
    DiagramNode,
    EdgeEnd,
    EdgeStyle,
    LabelPosition,
    Layout,
    PersistedAssetNode,
    PersistedRelationship,
    PipeAttributes,
    Point,
    Port,
    RelationshipKind,
    SignalAttributes,
    SignalSubtype,
    Size,
    build_node_attributes,
    get_logger,
)
from ...shared.models.graph import ASSET_RESERVED_PROPERTIES
from ...shared.taxonomy import (
    TAPPING_POINT_TYPE,
    default_shape_for,
    labels_for,
    pipe_style,
    signal_style,
)
from ..shape_catalog import ShapeCatalog
from .models import GraphSnapshot

_LABEL_POSITIONS = {p.value for p in LabelPosition}


def port_region(port: Optional[Port]) -> str:
    if port is None:
        return "default"
    return port.region or port.group or "default"


def port_description(port: Optional[Port]) -> str:
    if port is None:
        return "unknown"
    return port.description or port.id


def _clean_tag(tag: Optional[str]) -> Optional[str]:
    return tag.strip() if isinstance(tag, str) else tag


def pack_waypoints(points: Iterable[Point]) -> str:
    return json.dumps([{"x": p.x, "y": p.y} for p in points], separators=(",", ":"))


def unpack_waypoints(raw: Optional[str]) -> List[Point]:
    """
    Decode stored waypoints.

    Raises:
        ValueError: If the value is not a JSON array of points
    """
    if not raw:
        return []
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("Waypoints must be a JSON array")
    return [Point(x=item["x"], y=item["y"]) for item in data]


class GraphMapper:
    """
    Translates drawings to graph rows and back.
    """

    def __init__(self, catalog: ShapeCatalog):
        """
        Initialize the mapper.

        Args:
            catalog: Shape catalog providing ports for loaded nodes
        """
        self.catalog = catalog
        self.logger = get_logger(__name__)

    # Save direction

    def to_graph(self, drawing_id: str, document: DiagramDocument) -> GraphSnapshot:
        """
        Translate a whole drawing.

        Background nodes are left out; edges that are dangling or touch a node
        that is not persisted are skipped.
        """
        nodes = {node.id: node for node in document.nodes if not node.is_background}
        snapshot = GraphSnapshot(drawing_id=drawing_id)
        snapshot.assets = [self.node_to_asset(drawing_id, node) for node in nodes.values()]

        for edge in document.edges:
            relationship = self.edge_to_relationship(edge, nodes)
            if relationship is None:
                snapshot.skipped_edge_ids.append(edge.id)
                continue
            snapshot.relationships.append(relationship)

        if snapshot.skipped_edge_ids:
            self.logger.debug(f"Skipped {len(snapshot.skipped_edge_ids)} unattached edges of {drawing_id}")
        return snapshot

    def node_to_asset(self, drawing_id: str, node: DiagramNode) -> PersistedAssetNode:
        attributes = node.attributes
        properties: Dict[str, Any] = {
            "Tag": _clean_tag(attributes.display_tag),
            "desc": attributes.desc,
            "labelPosition": attributes.label_position,
        }
        properties.update(attributes.business_properties())
        return PersistedAssetNode(
            uid=node.id,
            drawing_id=drawing_id,
            node_type=node.type,
            layout=Layout.from_pose(
                node.position.x, node.position.y,
                node.size.width, node.size.height,
                node.rotation, node.shape,
            ),
            labels=labels_for(node.type),
            properties=properties,
        )

    @staticmethod
    def relationship_kind(edge: DiagramEdge) -> RelationshipKind:
        if edge.is_pipe:
            return RelationshipKind.PIPE
        if edge.target.port_id == ACTUATOR_PORT_ID or edge.signal_subtype == SignalSubtype.CONTROLS:
            return RelationshipKind.CONTROLS
        return RelationshipKind.MEASURES

    def edge_to_relationship(self, edge: DiagramEdge,
                             nodes: Dict[str, DiagramNode]) -> Optional[PersistedRelationship]:
        """
        Translate one edge.

        Args:
            edge: Edge to store
            nodes: Persisted nodes of the drawing by id

        Returns:
            The relationship, or None when an end is not a persisted node
        """
        if edge.is_dangling:
            return None
        source = nodes.get(edge.source.node_id)
        target = nodes.get(edge.target.node_id)
        if source is None or target is None:
            return None

        kind = self.relationship_kind(edge)
        waypoints = pack_waypoints(edge.waypoints)

        if kind == RelationshipKind.PIPE:
            attributes: PipeAttributes = edge.attributes
            source_port = source.get_port(edge.source.port_id)
            target_port = target.get_port(edge.target.port_id)
            return PersistedRelationship(
                kind=kind,
                source_uid=source.id,
                target_uid=target.id,
                from_port=edge.source.port_id,
                to_port=edge.target.port_id,
                fluid=attributes.fluid,
                waypoints=waypoints,
                tag=attributes.tag,
                material=attributes.material,
                diameter_class=attributes.diameter_class,
                pressure_class=attributes.pressure_class,
                insulation_kind=attributes.insulation_kind,
                from_region=port_region(source_port),
                from_description=port_description(source_port),
                to_region=port_region(target_port),
                to_description=port_description(target_port),
            )

        stored_source, stored_target = edge.source, edge.target
        if kind == RelationshipKind.MEASURES:
            # Drawn towards the instrument, stored from it
            stored_source, stored_target = edge.target, edge.source
        return PersistedRelationship(
            kind=kind,
            source_uid=stored_source.node_id,
            target_uid=stored_target.node_id,
            from_port=stored_source.port_id,
            to_port=stored_target.port_id,
            fluid="Signal",
            waypoints=waypoints,
        )

    # Load direction

    def from_graph(self,
                   asset_records: Iterable[Dict[str, Any]],
                   relationship_records: Iterable[Dict[str, Any]],
                   warnings: Optional[List[str]] = None) -> DiagramDocument:
        """
        Rebuild a drawing from fetched rows.

        Args:
            asset_records: Property maps of the drawing's asset nodes
            relationship_records: Rows with ``kind``, ``source``, ``target`` and ``properties``
            warnings: Collects messages about malformed stored data

        Returns:
            The reconstructed drawing, without background frame
        """
        warnings = warnings if warnings is not None else []
        nodes: Dict[str, DiagramNode] = {}
        for properties in asset_records:
            node = self.asset_to_node(properties, warnings)
            if node is not None:
                nodes[node.id] = node

        edges = []
        for record in relationship_records:
            edge = self.relationship_to_edge(record, nodes, warnings)
            if edge is not None:
                edges.append(edge)

        return DiagramDocument(nodes=list(nodes.values()), edges=edges)

    def _warn(self, warnings: List[str], message: str) -> None:
        self.logger.warning(message)
        warnings.append(message)

    def decode_layout(self, properties: Dict[str, Any], warnings: List[str]) -> Layout:
        raw = properties.get("layout")
        if raw is None:
            return Layout.from_legacy(properties)
        try:
            return Layout.unpack(raw)
        except (ValueError, TypeError) as e:
            self._warn(warnings, f"Malformed layout on asset {properties.get('uid')}: {e}")
            return Layout()

    def asset_to_node(self, properties: Dict[str, Any],
                      warnings: Optional[List[str]] = None) -> Optional[DiagramNode]:
        warnings = warnings if warnings is not None else []
        uid = properties.get("uid")
        if not uid:
            self._warn(warnings, "Skipped an asset without uid")
            return None

        node_type = properties.get("type") or "Unknown"
        layout = self.decode_layout(properties, warnings)
        shape = layout.s or properties.get("shape") or default_shape_for(node_type, properties.get("spec"))
        if shape not in self.catalog:
            self._warn(warnings, f"Asset {uid} uses unknown shape '{shape}'; it has no ports")

        fields = {k: v for k, v in properties.items() if k not in ASSET_RESERVED_PROPERTIES}
        if fields.get("labelPosition") not in _LABEL_POSITIONS:
            fields.pop("labelPosition", None)
        try:
            attributes = build_node_attributes(node_type, **fields)
        except PydanticValidationError as e:
            self._warn(warnings, f"Asset {uid} has invalid attributes, keeping its type only: {e}")
            attributes = build_node_attributes(node_type)

        return DiagramNode(
            id=uid,
            shape=shape,
            position=Point(x=layout.x, y=layout.y),
            size=Size(width=layout.w, height=layout.h),
            rotation=layout.a,
            ports=self.catalog.ports_for(shape),
            attributes=attributes,
            z_index=10 if node_type == TAPPING_POINT_TYPE else 2,
        )

    def relationship_to_edge(self, record: Dict[str, Any], nodes: Dict[str, DiagramNode],
                             warnings: Optional[List[str]] = None) -> Optional[DiagramEdge]:
        warnings = warnings if warnings is not None else []
        relationship = PersistedRelationship.from_neo4j(
            record["kind"], record["source"], record["target"], record.get("properties") or {},
        )
        if relationship.source_uid not in nodes or relationship.target_uid not in nodes:
            self._warn(warnings, f"Skipped {relationship.kind} between unknown assets")
            return None

        source = EdgeEnd(node_id=relationship.source_uid, port_id=relationship.from_port or None)
        target = EdgeEnd(node_id=relationship.target_uid, port_id=relationship.to_port or None)

        try:
            waypoints = unpack_waypoints(relationship.waypoints)
        except (ValueError, TypeError, KeyError) as e:
            self._warn(warnings, f"Malformed waypoints on {relationship.kind} "
                                 f"{relationship.source_uid}->{relationship.target_uid}: {e}")
            waypoints = []

        if relationship.kind == RelationshipKind.PIPE:
            attributes, style = self._pipe_attributes(relationship)
        else:
            subtype = (SignalSubtype.CONTROLS if relationship.kind == RelationshipKind.CONTROLS
                       else SignalSubtype.MEASURES)
            attributes, style = SignalAttributes(subtype=subtype), signal_style()
            if relationship.kind == RelationshipKind.MEASURES:
                source, target = target, source

        return DiagramEdge(
            id=str(uuid.uuid4()),
            source=source,
            target=target,
            waypoints=waypoints,
            attributes=attributes,
            style=style,
        )

    @staticmethod
    def _pipe_attributes(relationship: PersistedRelationship) -> Tuple[PipeAttributes, EdgeStyle]:
        values = {
            "tag": relationship.tag,
            "fluid": relationship.fluid,
            "material": relationship.material,
            "diameter_class": relationship.diameter_class,
            "pressure_class": relationship.pressure_class,
            "insulation_kind": relationship.insulation_kind,
        }
        attributes = PipeAttributes(**{k: v for k, v in values.items() if v is not None})
        return attributes, pipe_style(attributes.fluid, attributes.insulation_kind)
