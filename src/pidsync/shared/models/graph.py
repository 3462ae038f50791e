"""
Persisted graph models.

These models represent the rows stored in Neo4j for a drawing:
- PersistedAssetNode: one ``:Asset`` node per non-background diagram node
- PersistedRelationship: PIPE / MEASURES / CONTROLS lines and LINKS_TO pairings
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import Field

from .base import BaseModel


class RelationshipKind(str, Enum):
    PIPE = "PIPE"
    MEASURES = "MEASURES"
    CONTROLS = "CONTROLS"
    LINKS_TO = "LINKS_TO"


class Layout(BaseModel):
    """
    Packed node pose.

    Stored as a single JSON property ``{"x", "y", "w", "h", "a", "s"}`` with
    integer-rounded geometry.
    """

    x: int = 0
    y: int = 0
    w: int = 40
    h: int = 40
    a: int = 0
    s: str = ""

    @classmethod
    def from_pose(cls, x: float, y: float, width: float, height: float,
                  rotation: float, shape: str) -> "Layout":
        return cls(
            x=round(x), y=round(y), w=round(width), h=round(height),
            a=round(rotation), s=shape or "",
        )

    def pack(self) -> str:
        return json.dumps(self.model_dump(), separators=(",", ":"))

    @classmethod
    def unpack(cls, raw: str) -> "Layout":
        """
        Decode a packed layout.

        Raises:
            ValueError: If the value is not a JSON object
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("Layout must be a JSON object")
        return cls(**{k: v for k, v in data.items() if k in cls.model_fields and v is not None})

    @classmethod
    def from_legacy(cls, properties: Dict[str, Any]) -> "Layout":
        """Build a layout from the discrete pose properties written by older saves."""
        return cls(
            x=round(properties.get('x') or 0),
            y=round(properties.get('y') or 0),
            w=round(properties.get('width') or 40),
            h=round(properties.get('height') or 40),
            a=round(properties.get('angle') or 0),
            s=properties.get('shape') or "",
        )


# Properties owned by the mapper; everything else on an asset node is business data
ASSET_RESERVED_PROPERTIES = frozenset(
    {"uid", "drawingId", "layout", "x", "y", "width", "height", "angle", "shape"}
)


class PersistedAssetNode(BaseModel):
    """An ``:Asset`` node in Neo4j."""

    uid: str = Field(..., description="Stable cross-session id")
    drawing_id: str = Field(..., description="Owning drawing")
    node_type: str = Field(..., description="Semantic type")
    layout: Layout = Field(default_factory=Layout)
    labels: List[str] = Field(default_factory=list, description="Label set, base label first")
    properties: Dict[str, Any] = Field(default_factory=dict, description="Flattened business attributes")

    @property
    def label_key(self) -> str:
        return ":".join(self.labels)

    def to_neo4j_dict(self) -> Dict[str, Any]:
        """Convert to dictionary suitable for Neo4j storage."""
        data = dict(self.properties)
        data.update({
            'uid': self.uid,
            'drawingId': self.drawing_id,
            'type': self.node_type,
            'layout': self.layout.pack(),
        })
        return data


class PersistedRelationship(BaseModel):
    """
    A relationship in Neo4j.

    ``source_uid``/``target_uid`` are the stored direction, which for MEASURES is
    the reverse of the drawn direction.
    """

    kind: RelationshipKind
    source_uid: str
    target_uid: str
    from_port: Optional[str] = Field(default=None, alias="fromPort")
    to_port: Optional[str] = Field(default=None, alias="toPort")
    fluid: Optional[str] = None
    waypoints: Optional[str] = Field(default=None, description="JSON array of {x, y}")

    # PIPE only
    tag: Optional[str] = None
    material: Optional[str] = None
    diameter_class: Optional[str] = Field(default=None, alias="diameterClass")
    pressure_class: Optional[str] = Field(default=None, alias="pressureClass")
    insulation_kind: Optional[str] = Field(default=None, alias="insulationKind")
    from_region: Optional[str] = Field(default=None, alias="fromRegion")
    from_description: Optional[str] = Field(default=None, alias="fromDescription")
    to_region: Optional[str] = Field(default=None, alias="toRegion")
    to_description: Optional[str] = Field(default=None, alias="toDescription")

    def to_neo4j_dict(self) -> Dict[str, Any]:
        """Relationship properties by persisted name, without unset values."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={'kind', 'source_uid', 'target_uid'},
        )

    def to_batch_row(self) -> Dict[str, Any]:
        """Row for an ``UNWIND`` batch insert."""
        return {
            'source': self.source_uid,
            'target': self.target_uid,
            'properties': self.to_neo4j_dict(),
        }

    @classmethod
    def from_neo4j(cls, kind: str, source_uid: str, target_uid: str,
                   properties: Dict[str, Any]) -> "PersistedRelationship":
        known = {
            key: value for key, value in properties.items()
            if key in _RELATIONSHIP_ALIASES
        }
        return cls(kind=kind, source_uid=source_uid, target_uid=target_uid, **known)


_RELATIONSHIP_ALIASES = frozenset(
    (info.alias or name)
    for name, info in PersistedRelationship.model_fields.items()
    if name not in ('kind', 'source_uid', 'target_uid')
)
