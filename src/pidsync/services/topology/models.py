"""
Data models for the topology engines.
"""

from enum import Enum
from typing import List, Optional
from pydantic import Field

from ...shared import BaseModel


class SpliceStatus(str, Enum):
    SPLICED = "spliced"
    NOT_INLINE = "not_inline"
    ALREADY_CONNECTED = "already_connected"
    NO_PIPE = "no_pipe"
    ORIENTATION_MISMATCH = "orientation_mismatch"
    NO_PORT = "no_port"
    DIRECTION_CONFLICT = "direction_conflict"


class SpliceResult(BaseModel):
    """Outcome of dropping a component onto the canvas."""

    status: SpliceStatus
    node_id: str
    replaced_edge_id: Optional[str] = None
    new_edge_ids: List[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == SpliceStatus.SPLICED


class TapStatus(str, Enum):
    TAPPED = "tapped"
    NOT_INSTRUMENT = "not_instrument"
    CONNECTED = "connected"
    CANCELLED = "cancelled"
    FAILED = "failed"


class TapResult(BaseModel):
    """Outcome of releasing a connection gesture started from an instrument."""

    status: TapStatus
    gesture_edge_id: str
    tapping_point_id: Optional[str] = None
    signal_edge_id: Optional[str] = None
    replaced_edge_id: Optional[str] = None
    pipe_edge_ids: List[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == TapStatus.TAPPED
