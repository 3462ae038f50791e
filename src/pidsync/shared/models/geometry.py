"""
Geometry value models shared by the canvas, the engines and the mapper.
"""

import math
from typing import Iterable

from .base import BaseModel


class Point(BaseModel):
    """A point in canvas coordinates."""

    x: float = 0.0
    y: float = 0.0

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


class Size(BaseModel):
    """Width and height of a node in its unrotated frame."""

    width: float = 40.0
    height: float = 40.0


class Rect(BaseModel):
    """Axis-aligned rectangle."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(x=self.x + self.width / 2, y=self.y + self.height / 2)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def intersects(self, other: "Rect") -> bool:
        """Inclusive overlap test; zero-area rectangles of straight pipes still intersect."""
        return (
            self.x <= other.right and other.x <= self.right
            and self.y <= other.bottom and other.y <= self.bottom
        )

    def contains(self, point: Point, margin: float = 0.0) -> bool:
        return (
            self.x - margin <= point.x <= self.right + margin
            and self.y - margin <= point.y <= self.bottom + margin
        )

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Rect":
        points = list(points)
        if not points:
            raise ValueError("Cannot build a rectangle from no points")
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))
