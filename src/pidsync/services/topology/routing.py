"""
Routing exclusion policy.

The pipe router treats node bodies as obstacles. Inline components sit on
the pipe run, so the pipes attached to them exclude them; every edge
excludes the background drawing frame.
"""

from typing import List, Optional

from ...shared import DiagramEdge, RoutingPolicy, Settings, get_logger, get_settings
from ...shared.taxonomy import is_inline
from ..canvas import Canvas


def compute_exclusions(edge: DiagramEdge, canvas: Canvas, frame_id: str) -> List[str]:
    """
    Node ids the router must ignore for one edge.

    Args:
        edge: Edge to route
        canvas: Canvas holding the edge's endpoints
        frame_id: Id of the background frame

    Returns:
        The frame id, followed by each inline endpoint of a pipe edge
    """
    excluded = [frame_id]
    if not edge.is_pipe:
        return excluded
    for end in (edge.source, edge.target):
        node = canvas.get_node(end.node_id)
        if node is not None and is_inline(node.type) and node.id not in excluded:
            excluded.append(node.id)
    return excluded


def routing_policy_for(edge: DiagramEdge, canvas: Canvas,
                       settings: Optional[Settings] = None) -> RoutingPolicy:
    settings = settings or get_settings()
    return RoutingPolicy(
        router=settings.router_name,
        padding=settings.router_padding,
        exclude_nodes=compute_exclusions(edge, canvas, settings.background_frame_id),
    )


def apply_routing(canvas: Canvas, edge_id: str, settings: Optional[Settings] = None) -> None:
    """Recompute the routing policy of one edge after it was created or reconnected."""
    edge = canvas.get_edge(edge_id)
    if edge is None:
        return
    canvas.set_routing(edge_id, routing_policy_for(edge, canvas, settings))


def refresh_all(canvas: Canvas, settings: Optional[Settings] = None) -> int:
    """
    Recompute the routing policy of every pipe edge.

    Returns:
        Number of pipe edges refreshed
    """
    count = 0
    for edge in canvas.edges():
        if edge.is_pipe:
            canvas.set_routing(edge.id, routing_policy_for(edge, canvas, settings))
            count += 1
    get_logger(__name__).debug(f"Refreshed routing of {count} pipes")
    return count
