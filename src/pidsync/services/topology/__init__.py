"""
Topology Service.

Pipe splicing, instrument taps, connection classification and routing
exclusions for the diagram being edited.
"""

from .models import SpliceResult, SpliceStatus, TapResult, TapStatus
from .routing import apply_routing, compute_exclusions, refresh_all, routing_policy_for
from .service import TopologyService
from .splice import PipeSplicer, find_pipe_under, locate_segment, split_pipe
from .tapping import InstrumentTapper

__all__ = [
    "TopologyService",
    "PipeSplicer",
    "InstrumentTapper",
    "SpliceResult",
    "SpliceStatus",
    "TapResult",
    "TapStatus",
    "apply_routing",
    "compute_exclusions",
    "refresh_all",
    "routing_policy_for",
    "find_pipe_under",
    "locate_segment",
    "split_pipe",
]
