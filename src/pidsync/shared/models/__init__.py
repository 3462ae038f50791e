"""
Shared data models for P&ID Sync.
"""

from .base import BaseModel, TimestampMixin
from .geometry import Point, Size, Rect
from .attributes import (
    LabelPosition,
    SignalSubtype,
    NodeAttributes,
    NodeAttributesBase,
    EquipmentAttributes,
    PumpAttributes,
    VesselAttributes,
    ExchangerAttributes,
    ValveAttributes,
    InstrumentAttributes,
    ConnectorAttributes,
    TappingPointAttributes,
    FrameAttributes,
    EdgeAttributes,
    PipeAttributes,
    SignalAttributes,
    attributes_class_for,
    build_node_attributes,
)
from .diagram import (
    ACTUATOR_PORT_ID,
    PortDirection,
    EdgeKind,
    Port,
    DiagramNode,
    EdgeEnd,
    EdgeStyle,
    RoutingPolicy,
    DiagramEdge,
    DiagramDocument,
)
from .graph import RelationshipKind, Layout, PersistedAssetNode, PersistedRelationship

__all__ = [
    # Base models
    "BaseModel",
    "TimestampMixin",
    # Geometry
    "Point",
    "Size",
    "Rect",
    # Attributes
    "LabelPosition",
    "SignalSubtype",
    "NodeAttributes",
    "NodeAttributesBase",
    "EquipmentAttributes",
    "PumpAttributes",
    "VesselAttributes",
    "ExchangerAttributes",
    "ValveAttributes",
    "InstrumentAttributes",
    "ConnectorAttributes",
    "TappingPointAttributes",
    "FrameAttributes",
    "EdgeAttributes",
    "PipeAttributes",
    "SignalAttributes",
    "attributes_class_for",
    "build_node_attributes",
    # Diagram
    "ACTUATOR_PORT_ID",
    "PortDirection",
    "EdgeKind",
    "Port",
    "DiagramNode",
    "EdgeEnd",
    "EdgeStyle",
    "RoutingPolicy",
    "DiagramEdge",
    "DiagramDocument",
    # Persisted graph
    "RelationshipKind",
    "Layout",
    "PersistedAssetNode",
    "PersistedRelationship",
]
