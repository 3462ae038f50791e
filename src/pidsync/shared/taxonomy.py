"""
Semantic type taxonomy.

Fixed tables keyed by semantic type: graph label sets, default shape kinds,
inline-capable components, fluid colours and the edge styles derived from
them.
"""

from typing import Dict, List, Optional, Tuple

from .models.diagram import EdgeStyle

BASE_LABEL = "Asset"
DRAWING_LABEL = "Drawing"

_LABELS: Dict[str, Tuple[str, ...]] = {
    "Reactor": ("Equipment", "Reactor"),
    "FixedBedReactor": ("Equipment", "Reactor"),
    "Exchanger": ("Equipment", "Exchanger"),
    "VerticalExchanger": ("Equipment", "Exchanger"),
    "Evaporator": ("Equipment", "Exchanger"),
    "GasCooler": ("Equipment", "Exchanger"),
    "Pump": ("Equipment", "Pump"),
    "LiquidPump": ("Equipment", "Pump"),
    "CentrifugalPump": ("Equipment", "Pump"),
    "DiaphragmPump": ("Equipment", "Pump"),
    "PistonPump": ("Equipment", "Pump"),
    "GearPump": ("Equipment", "Pump"),
    "JetPump": ("Equipment", "Pump"),
    "Compressor": ("Equipment", "Pump", "Compressor"),
    "Fan": ("Equipment", "Pump", "Fan"),
    "Valve": ("Equipment", "Valve"),
    "ControlValve": ("Equipment", "Valve", "ControlValve"),
    "Tank": ("Equipment", "Vessel", "Storage"),
    "Separator": ("Equipment", "Vessel", "Separator"),
    "Fitting": ("Equipment", "Fitting"),
    "Instrument": ("Instrument",),
    "TappingPoint": ("Instrument", "Connection"),
    "SafetyValve": ("Equipment", "Valve", "SafetyDevice"),
    "RuptureDisc": ("Equipment", "SafetyDevice", "Fitting"),
    "BreatherValve": ("Equipment", "Valve", "SafetyDevice"),
    "Trap": ("Equipment", "Valve", "Trap"),
    "Filter": ("Equipment", "Fitting", "Filter"),
    "FlameArrester": ("Equipment", "SafetyDevice", "Fitting"),
    "SightGlass": ("Equipment", "Fitting", "Indicator"),
    "Silencer": ("Equipment", "Fitting"),
    "OffPageConnector": ("Instrument", "Connector", "OffPageConnector"),
}
_DEFAULT_LABELS = ("Equipment", "Other")

_DEFAULT_SHAPES: Dict[str, str] = {
    "Reactor": "p-r101",
    "Exchanger": "p-e101",
    "Pump": "p-centrifugalpump",
    "LiquidPump": "p-p101",
    "CentrifugalPump": "p-centrifugalpump",
    "DiaphragmPump": "p-diaphragmpump",
    "PistonPump": "p-pistonpump",
    "Compressor": "p-compressor",
    "GearPump": "p-gearpump",
    "Fan": "p-fan",
    "JetPump": "p-jetpump",
    "ControlValve": "p-cv-pneumatic",
    "Valve": "p-cv-manual",
    "Fitting": "p-tee",
    "GasCooler": "p-gascooler",
    "Trap": "p-trap",
    "FixedBedReactor": "p-fixedbedreactor",
    "VerticalExchanger": "p-exchangervertical",
    "Evaporator": "p-e13",
    "TappingPoint": "tapping-point",
    "OffPageConnector": "p-opc",
}
_FALLBACK_SHAPE = "p-valve"

# Components drawn as part of the pipe run; the router ignores their bodies
INLINE_TYPES = frozenset({"ControlValve", "Valve", "Fitting", "TappingPoint"})

# Inline components that splice into pipes in any orientation
OMNIDIRECTIONAL_TYPES = frozenset({"Fitting"})

TAPPING_POINT_TYPE = "TappingPoint"
TAPPING_POINT_SHAPE = "tapping-point"
INSTRUMENT_TYPE = "Instrument"
CONNECTOR_TYPE = "OffPageConnector"

FLUID_COLORS: Dict[str, str] = {
    "Water": "#1890ff",
    "Steam": "#ff4d4f",
    "Air": "#52c41a",
    "N2": "#13c2c2",
    "Oil": "#fa8c16",
    "Salt": "#722ed1",
    "Naphthalene": "#8c8c8c",
    "PA": "#eb2f96",
    "CrudePA": "#f759ab",
    "ProductGas": "#faad14",
    "TailGas": "#bfbfbf",
    "Signal": "#888888",
}
DEFAULT_FLUID_COLOR = "#5F95FF"

# Insulation kinds drawn dashed: steam, electric and oil tracing
TRACED_INSULATION = frozenset({"ST", "ET", "OT"})


def labels_for(node_type: str) -> List[str]:
    """Label set of a semantic type, base label first."""
    return [BASE_LABEL, *_LABELS.get(node_type, _DEFAULT_LABELS)]


def default_shape_for(node_type: str, spec: Optional[str] = None) -> str:
    """Shape kind used for a node persisted without one."""
    if node_type == "Tank":
        return "p-tankvertical" if spec == "Vertical" else "p-tank"
    if node_type == INSTRUMENT_TYPE:
        if spec == "Local":
            return "p-inst-local"
        if spec == "Panel":
            return "p-inst-panel"
        return "p-inst-remote"
    return _DEFAULT_SHAPES.get(node_type, _FALLBACK_SHAPE)


def is_inline(node_type: Optional[str]) -> bool:
    return node_type in INLINE_TYPES


def pipe_style(fluid: Optional[str], insulation_kind: Optional[str] = None) -> EdgeStyle:
    """
    Style of a process line.

    Jacketed lines are drawn heavy in the heat-transfer oil colour; traced
    lines are dashed.
    """
    stroke = FLUID_COLORS.get(fluid or "", DEFAULT_FLUID_COLOR)
    insulation = insulation_kind or ""
    if insulation.startswith("Jacket"):
        return EdgeStyle(stroke=FLUID_COLORS["Oil"], stroke_width=4.0)
    if insulation in TRACED_INSULATION:
        return EdgeStyle(stroke=stroke, dash_array="5 5")
    return EdgeStyle(stroke=stroke)


def signal_style() -> EdgeStyle:
    return EdgeStyle(
        stroke=FLUID_COLORS["Signal"],
        stroke_width=1.0,
        dash_array="4 4",
        marker_width=10.0,
        marker_height=6.0,
    )
