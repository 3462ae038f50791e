"""
Semantic attribute models for diagram nodes and edges.

Node and edge attribute bags are tagged unions: the ``variant`` field selects
the model, and the variant itself is chosen from the node's semantic type
(``Valve``, ``CentrifugalPump``, ``Instrument`` ...). Field aliases are the
property names used in the persisted graph.
"""

from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Literal, Optional, Tuple, Type, Union
from pydantic import Field

from .base import BaseModel


class LabelPosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class SignalSubtype(str, Enum):
    MEASURES = "Measures"
    CONTROLS = "Controls"


# --- Node attributes ---


class NodeAttributesBase(BaseModel):
    """Fields common to every node variant."""

    type: str = Field(default="Unknown", description="Semantic type, e.g. 'Valve'")
    tag: str = Field(default="", alias="Tag", description="Plant tag shown on the drawing")
    desc: str = Field(default="", description="Free-text description")
    label_position: LabelPosition = Field(default=LabelPosition.BOTTOM, alias="labelPosition")

    # Business fields persisted as flattened properties when non-empty
    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = ()

    @property
    def display_tag(self) -> str:
        """Tag as persisted; instruments derive theirs from function and loop."""
        return self.tag

    def business_properties(self) -> Dict[str, Any]:
        """Non-empty business fields keyed by their persisted names."""
        properties = {}
        for name in self.BUSINESS_FIELDS:
            value = getattr(self, name)
            if value is None or value == "":
                continue
            alias = type(self).model_fields[name].alias or name
            properties[alias] = value
        return properties


class EquipmentAttributes(NodeAttributesBase):
    variant: Literal["equipment"] = "equipment"
    spec: Optional[str] = None
    material: Optional[str] = None

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = ("spec", "material")


class PumpAttributes(NodeAttributesBase):
    variant: Literal["pump"] = "pump"
    spec: Optional[str] = None
    flow: Optional[str] = None
    head: Optional[str] = None
    power: Optional[str] = None
    material: Optional[str] = None

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = ("spec", "flow", "head", "power", "material")


class VesselAttributes(NodeAttributesBase):
    variant: Literal["vessel"] = "vessel"
    spec: Optional[str] = None
    volume: Optional[str] = None
    material: Optional[str] = None
    design_pressure: Optional[str] = Field(default=None, alias="designPressure")
    design_temp: Optional[str] = Field(default=None, alias="designTemp")
    internals: Optional[str] = None

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = (
        "spec", "volume", "material", "design_pressure", "design_temp", "internals",
    )


class ExchangerAttributes(NodeAttributesBase):
    variant: Literal["exchanger"] = "exchanger"
    spec: Optional[str] = None
    area: Optional[str] = None
    material: Optional[str] = None
    design_pressure: Optional[str] = Field(default=None, alias="designPressure")
    tube_pressure: Optional[str] = Field(default=None, alias="tubePressure")

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = (
        "spec", "area", "material", "design_pressure", "tube_pressure",
    )


class ValveAttributes(NodeAttributesBase):
    variant: Literal["valve"] = "valve"
    spec: Optional[str] = None
    size: Optional[str] = None
    valve_class: Optional[str] = Field(default=None, alias="valveClass")
    fail_position: Optional[str] = Field(default=None, alias="failPosition")

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = ("spec", "size", "valve_class", "fail_position")


class InstrumentAttributes(NodeAttributesBase):
    variant: Literal["instrument"] = "instrument"
    spec: Optional[str] = None
    range: Optional[str] = None
    unit: Optional[str] = None
    tag_id: Optional[str] = Field(default=None, alias="tagId")
    loop_num: Optional[str] = Field(default=None, alias="loopNum")

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = ("spec", "range", "unit", "tag_id", "loop_num")

    @property
    def display_tag(self) -> str:
        """``TI-101`` from function ``TI`` and loop ``101``; falls back to the plain tag."""
        function = self.tag_id or ""
        loop = self.loop_num or ""
        if not function and not loop:
            return self.tag
        return f"{function}-{loop}" if loop else function


class ConnectorAttributes(NodeAttributesBase):
    variant: Literal["connector"] = "connector"
    spec: Optional[str] = None
    target_drawing_id: Optional[str] = Field(default=None, alias="targetDrawingId")
    connector_label: Optional[str] = Field(default=None, alias="connectorLabel")

    BUSINESS_FIELDS: ClassVar[Tuple[str, ...]] = ("spec", "target_drawing_id", "connector_label")


class TappingPointAttributes(NodeAttributesBase):
    variant: Literal["tapping_point"] = "tapping_point"
    type: str = "TappingPoint"


class FrameAttributes(NodeAttributesBase):
    variant: Literal["frame"] = "frame"
    type: str = "Frame"


NodeAttributes = Annotated[
    Union[
        EquipmentAttributes,
        PumpAttributes,
        VesselAttributes,
        ExchangerAttributes,
        ValveAttributes,
        InstrumentAttributes,
        ConnectorAttributes,
        TappingPointAttributes,
        FrameAttributes,
    ],
    Field(discriminator="variant"),
]


_VARIANT_BY_TYPE: Dict[str, Type[NodeAttributesBase]] = {
    **dict.fromkeys(
        ["Pump", "LiquidPump", "CentrifugalPump", "DiaphragmPump", "PistonPump",
         "GearPump", "Compressor", "Fan", "JetPump"],
        PumpAttributes,
    ),
    **dict.fromkeys(
        ["Reactor", "FixedBedReactor", "Tank", "Evaporator", "Separator"],
        VesselAttributes,
    ),
    **dict.fromkeys(["Exchanger", "VerticalExchanger", "GasCooler"], ExchangerAttributes),
    **dict.fromkeys(
        ["Valve", "ControlValve", "SafetyValve", "BreatherValve", "Trap"],
        ValveAttributes,
    ),
    "Instrument": InstrumentAttributes,
    "OffPageConnector": ConnectorAttributes,
    "TappingPoint": TappingPointAttributes,
    "Frame": FrameAttributes,
}


def attributes_class_for(node_type: str) -> Type[NodeAttributesBase]:
    """Attribute variant for a semantic type; unknown types get the generic equipment variant."""
    return _VARIANT_BY_TYPE.get(node_type, EquipmentAttributes)


def build_node_attributes(node_type: str, **fields: Any) -> NodeAttributesBase:
    """
    Build the attribute variant for a semantic type.

    Args:
        node_type: Semantic type such as 'Valve'
        **fields: Field values by name or persisted alias; unknown keys are ignored

    Returns:
        Attribute model of the matching variant
    """
    cls = attributes_class_for(node_type)
    accepted = {}
    for name, info in cls.model_fields.items():
        if name == "variant":
            continue
        for key in (name, info.alias):
            if key and key in fields and fields[key] is not None:
                accepted[name] = fields[key]
                break
    accepted["type"] = node_type
    return cls(**accepted)


# --- Edge attributes ---


class PipeAttributes(BaseModel):
    """Process line attributes."""

    variant: Literal["pipe"] = "pipe"
    tag: str = Field(default="", description="Line number shown as the edge label")
    fluid: str = Field(default="Water")
    material: str = Field(default="CS")
    diameter_class: str = Field(default="DN50", alias="diameterClass")
    pressure_class: str = Field(default="PN16", alias="pressureClass")
    insulation_kind: str = Field(default="None", alias="insulationKind")


class SignalAttributes(BaseModel):
    """Instrument signal line attributes."""

    variant: Literal["signal"] = "signal"
    subtype: SignalSubtype = Field(default=SignalSubtype.MEASURES)
    fluid: Literal["Signal"] = "Signal"


EdgeAttributes = Annotated[
    Union[PipeAttributes, SignalAttributes],
    Field(discriminator="variant"),
]
