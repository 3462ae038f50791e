"""
Diagram models: the in-memory state edited on the canvas.

These models are what the splice and tap engines mutate and what the graph
persistence mapper translates to and from Neo4j.
"""

from enum import Enum
from typing import Dict, List, Optional, Union
from pydantic import Field, field_validator, model_validator

from .attributes import (
    EdgeAttributes,
    NodeAttributes,
    PipeAttributes,
    SignalAttributes,
    SignalSubtype,
)
from .base import BaseModel
from .geometry import Point, Rect, Size


ACTUATOR_PORT_ID = "actuator"


class PortDirection(str, Enum):
    IN = "in"
    OUT = "out"
    BIDIRECTIONAL = "bi"


class EdgeKind(str, Enum):
    PIPE = "Pipe"
    SIGNAL = "Signal"


class Port(BaseModel):
    """
    A connection point on a node.

    ``x``/``y`` are either a percentage string of the node size (``"50%"``) or an
    absolute offset, both in the node's unrotated local frame.
    """

    id: str = Field(..., description="Port id, unique within its node")
    group: str = Field(default="default", description="Visual port group")
    x: Union[float, str] = Field(default=0.0, description="Relative x position")
    y: Union[float, str] = Field(default=0.0, description="Relative y position")
    direction: PortDirection = Field(default=PortDirection.BIDIRECTIONAL)
    region: Optional[str] = Field(default=None, description="Semantic zone, e.g. 'ShellSide:Vapor'")
    description: Optional[str] = Field(default=None, description="Free-text description")

    @field_validator('x', 'y')
    @classmethod
    def validate_relative_coordinate(cls, v):
        if isinstance(v, str):
            text = v.strip()
            if not text.endswith('%'):
                raise ValueError(f"Relative port coordinate must be a number or a percentage, got {v!r}")
            float(text[:-1])
            return text
        return v

    @property
    def is_actuator(self) -> bool:
        return self.id == ACTUATOR_PORT_ID

    @property
    def accepts_incoming(self) -> bool:
        return self.direction != PortDirection.OUT

    @property
    def accepts_outgoing(self) -> bool:
        return self.direction != PortDirection.IN


class DiagramNode(BaseModel):
    """A placed shape on the canvas."""

    id: str = Field(..., description="Node id, also the stable persisted uid")
    shape: str = Field(..., description="Shape kind from the shape catalog")
    position: Point = Field(default_factory=Point, description="Top-left corner of the unrotated node")
    size: Size = Field(default_factory=Size)
    rotation: float = Field(default=0.0, description="Rotation in degrees about the node center")
    ports: List[Port] = Field(default_factory=list)
    attributes: NodeAttributes
    is_background: bool = Field(default=False, description="Background nodes never connect and are not persisted")
    label_anchor: Optional[Point] = Field(default=None, description="Label offset in the node's local frame")
    z_index: int = Field(default=2)

    @field_validator('ports')
    @classmethod
    def validate_unique_ports(cls, v):
        seen = set()
        for port in v:
            if port.id in seen:
                raise ValueError(f"Duplicate port id '{port.id}'")
            seen.add(port.id)
        return v

    @property
    def type(self) -> str:
        return self.attributes.type

    @property
    def bbox(self) -> Rect:
        """Unrotated bounding box."""
        return Rect(x=self.position.x, y=self.position.y, width=self.size.width, height=self.size.height)

    @property
    def center(self) -> Point:
        return self.bbox.center

    def get_port(self, port_id: Optional[str]) -> Optional[Port]:
        if port_id is None:
            return None
        return next((p for p in self.ports if p.id == port_id), None)


class EdgeEnd(BaseModel):
    """
    One end of an edge.

    Connected ends name a node and, optionally, one of its ports; a node end
    without a port uses the node's implicit centre connection point. Only the
    loose end of an in-progress connection gesture carries a bare point.
    """

    node_id: Optional[str] = None
    port_id: Optional[str] = None
    point: Optional[Point] = None

    @model_validator(mode='after')
    def validate_end(self):
        if self.node_id is None and self.point is None:
            raise ValueError("Edge end needs a node or a point")
        return self

    @property
    def is_connected(self) -> bool:
        return self.node_id is not None


class EdgeStyle(BaseModel):
    """Presentation attributes derived from fluid and insulation."""

    stroke: str = "#5F95FF"
    stroke_width: float = 2.0
    dash_array: Optional[str] = None
    marker_width: float = 8.0
    marker_height: float = 6.0


class RoutingPolicy(BaseModel):
    """Router settings for one edge."""

    router: str = "manhattan"
    padding: int = 10
    exclude_nodes: List[str] = Field(default_factory=list)


class DiagramEdge(BaseModel):
    """A pipe or signal line between two node ports."""

    id: str = Field(..., description="Edge id")
    source: EdgeEnd
    target: EdgeEnd
    waypoints: List[Point] = Field(default_factory=list, description="Ordered user vertices")
    attributes: EdgeAttributes = Field(default_factory=PipeAttributes)
    style: EdgeStyle = Field(default_factory=EdgeStyle)
    routing: Optional[RoutingPolicy] = None
    z_index: int = Field(default=1)

    @property
    def kind(self) -> EdgeKind:
        if isinstance(self.attributes, SignalAttributes):
            return EdgeKind.SIGNAL
        return EdgeKind.PIPE

    @property
    def is_pipe(self) -> bool:
        return self.kind == EdgeKind.PIPE

    @property
    def is_signal(self) -> bool:
        return self.kind == EdgeKind.SIGNAL

    @property
    def signal_subtype(self) -> Optional[SignalSubtype]:
        if isinstance(self.attributes, SignalAttributes):
            return SignalSubtype(self.attributes.subtype)
        return None

    @property
    def is_dangling(self) -> bool:
        return not (self.source.is_connected and self.target.is_connected)

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source.node_id, self.target.node_id)


class DiagramDocument(BaseModel):
    """A whole drawing as exchanged through the API."""

    nodes: List[DiagramNode] = Field(default_factory=list)
    edges: List[DiagramEdge] = Field(default_factory=list)

    def node_index(self) -> Dict[str, DiagramNode]:
        return {node.id: node for node in self.nodes}
