"""
Geometry Module - Coordinate Math
=================================
Small stateless helpers shared by the classifier, the stroke model and the
view transform. Points are plain ``(x, y)`` pairs; whether a point lives in
screen space or world space is decided by the caller.
"""

import math
from typing import NamedTuple


class Point(NamedTuple):
    """A 2D point in either screen space or world space."""
    x: float
    y: float

    def to_pixel(self) -> tuple:
        """Return integer pixel coordinates for OpenCV drawing calls."""
        return (int(round(self.x)), int(round(self.y)))


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def midpoint(p1: Point, p2: Point) -> Point:
    """Point halfway between ``p1`` and ``p2``."""
    return Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)


def to_screen(x: float, y: float, width: float, height: float) -> Point:
    """
    Map normalized landmark coordinates (0-1) to screen pixels.

    The x axis is mirrored so the drawing matches a selfie view of the
    camera feed.
    """
    return Point((1 - x) * width, y * height)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
