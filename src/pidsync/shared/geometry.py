"""
Rotation-aware canvas geometry.

Port positions are declared in a node's unrotated local frame; the node is
drawn rotated about its centre. Everything here works in canvas coordinates
(y grows downwards, positive angles turn clockwise on screen).
"""

import math
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from .models.diagram import DiagramNode, Port
from .models.geometry import Point, Size

# Distances closer than this count as ties
_TIE_EPSILON = 1e-9


class Orientation(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    OBLIQUE = "oblique"


def resolve_relative(value, extent: float) -> float:
    """Decode one relative port coordinate: ``"25%"`` of the extent, or an absolute offset."""
    if isinstance(value, str):
        return float(value.strip()[:-1]) / 100.0 * extent
    return float(value or 0.0)


def local_port_offset(port: Port, size: Size) -> Tuple[float, float]:
    return resolve_relative(port.x, size.width), resolve_relative(port.y, size.height)


def rotate_point(point: Point, center: Point, degrees: float) -> Point:
    """Rotate a point about a centre."""
    rad = math.radians(degrees)
    dx = point.x - center.x
    dy = point.y - center.y
    return Point(
        x=dx * math.cos(rad) - dy * math.sin(rad) + center.x,
        y=dx * math.sin(rad) + dy * math.cos(rad) + center.y,
    )


def _rotation_matrix(degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([[c, -s], [s, c]])


def port_positions(node: DiagramNode) -> np.ndarray:
    """
    Visual positions of all ports of a node.

    Returns:
        Array of shape (len(node.ports), 2), in declaration order
    """
    if not node.ports:
        return np.empty((0, 2))
    offsets = np.array([local_port_offset(p, node.size) for p in node.ports], dtype=float)
    origin = np.array([node.position.x, node.position.y])
    center = np.array([node.center.x, node.center.y])
    unrotated = origin + offsets
    return (unrotated - center) @ _rotation_matrix(node.rotation).T + center


def port_position(node: DiagramNode, port: Port) -> Point:
    """Visual position of one port."""
    dx, dy = local_port_offset(port, node.size)
    absolute = Point(x=node.position.x + dx, y=node.position.y + dy)
    return rotate_point(absolute, node.center, node.rotation)


def nearest_port(node: DiagramNode, point: Point) -> Optional[Port]:
    """
    Port closest to a canvas point.

    Args:
        node: Node whose ports are searched
        point: Query point in canvas coordinates

    Returns:
        The closest port, the first declared one on equal distance, or None
        when the node has no ports
    """
    if not node.ports:
        return None
    positions = port_positions(node)
    distances = np.hypot(positions[:, 0] - point.x, positions[:, 1] - point.y)
    best = distances.min()
    index = int(np.flatnonzero(distances <= best + _TIE_EPSILON)[0])
    return node.ports[index]


def anchor_point(node: DiagramNode, port_id: Optional[str]) -> Point:
    """Where an edge attaches: the named port, else the node centre."""
    port = node.get_port(port_id)
    if port is None:
        return node.center
    return port_position(node, port)


def closest_point_on_segment(p1: Point, p2: Point, query: Point) -> Point:
    a = np.array([p1.x, p1.y])
    b = np.array([p2.x, p2.y])
    q = np.array([query.x, query.y])
    ab = b - a
    length_sq = float(ab @ ab)
    if length_sq == 0.0:
        return Point(x=p1.x, y=p1.y)
    t = min(1.0, max(0.0, float((q - a) @ ab) / length_sq))
    closest = a + t * ab
    return Point(x=float(closest[0]), y=float(closest[1]))


def closest_point_on_polyline(points: Sequence[Point], query: Point) -> Point:
    """Closest point to ``query`` on a polyline; the first segment wins on ties."""
    if not points:
        raise ValueError("Polyline has no points")
    if len(points) == 1:
        return points[0]
    best_point = points[0]
    best_distance = math.inf
    for p1, p2 in zip(points, points[1:]):
        candidate = closest_point_on_segment(p1, p2, query)
        distance = candidate.distance_to(query)
        if distance < best_distance - _TIE_EPSILON:
            best_point, best_distance = candidate, distance
    return best_point


def distance_to_polyline(points: Sequence[Point], query: Point) -> float:
    return closest_point_on_polyline(points, query).distance_to(query)


def find_segment(points: Sequence[Point], query: Point,
                 tolerance: float) -> Optional[Tuple[Point, Point]]:
    """
    First segment whose tolerance-expanded bounding box contains ``query``.

    Returns:
        The segment's (start, end) in path order, or None
    """
    for p1, p2 in zip(points, points[1:]):
        if (min(p1.x, p2.x) - tolerance <= query.x <= max(p1.x, p2.x) + tolerance
                and min(p1.y, p2.y) - tolerance <= query.y <= max(p1.y, p2.y) + tolerance):
            return p1, p2
    return None


def is_horizontal_segment(p1: Point, p2: Point, tolerance: float) -> bool:
    return abs(p1.y - p2.y) < tolerance


def is_vertical_segment(p1: Point, p2: Point, tolerance: float) -> bool:
    return abs(p1.x - p2.x) < tolerance


def normalize_angle(degrees: float) -> float:
    """Angle in [0, 360)."""
    return (degrees % 360 + 360) % 360


def orientation_of(rotation: float, tolerance: float = 10.0) -> Orientation:
    """Classify a component rotation as horizontal (near 0/180), vertical (near 90/270) or oblique."""
    angle = normalize_angle(rotation)
    folded = angle % 180
    if folded < tolerance or folded > 180 - tolerance:
        return Orientation.HORIZONTAL
    if abs(folded - 90) < tolerance:
        return Orientation.VERTICAL
    return Orientation.OBLIQUE


def grid_round(value: float, grid: float) -> float:
    """Round to the nearest grid line, halves rounding up."""
    return math.floor(value / grid + 0.5) * grid


def label_anchor(node: DiagramNode, position: str, padding: float) -> Point:
    """
    Label offset in the node's local frame.

    The label sits ``padding`` outside the node's visual outline on the requested
    side of the screen, whatever the node rotation; the visual offset is rotated
    back into the local frame.
    """
    rad = math.radians(node.rotation)
    sin = abs(math.sin(rad))
    cos = abs(math.cos(rad))
    half_w = (node.size.width * cos + node.size.height * sin) / 2
    half_h = (node.size.width * sin + node.size.height * cos) / 2

    offsets = {
        'top': (0.0, -(half_h + padding)),
        'bottom': (0.0, half_h + padding),
        'left': (-(half_w + padding), 0.0),
        'right': (half_w + padding, 0.0),
        'center': (0.0, 0.0),
    }
    vx, vy = offsets.get(position, offsets['bottom'])
    local = rotate_point(Point(x=vx, y=vy), Point(x=0.0, y=0.0), -node.rotation)
    return Point(x=round(local.x, 6), y=round(local.y, 6))
