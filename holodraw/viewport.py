"""
Viewport Module - World/Screen Transform
========================================
Owns the zoom state of the drawing surface. Strokes are stored in world
space so they stay anchored while the view zooms; everything drawn on
screen goes through ``to_screen``.
"""

import numpy as np

from holodraw.config import ViewConfig
from holodraw.geometry import Point, clamp


class ViewTransform:
    """
    Scale and offset mapping between world space and screen space.

    The scale is clamped to ``[min_scale, max_scale]`` on every write.
    The offset is never driven by a gesture and stays at whatever was last
    set (``(0, 0)`` by default).
    """

    def __init__(self, config: ViewConfig = None, scale: float = 1.0,
                 offset_x: float = 0.0, offset_y: float = 0.0):
        self.config = config or ViewConfig()
        self._scale = 1.0
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.set_scale(scale)

    @property
    def scale(self) -> float:
        return self._scale

    def set_scale(self, scale: float) -> float:
        """Set the zoom factor, clamped to the configured range."""
        self._scale = clamp(scale, self.config.min_scale, self.config.max_scale)
        return self._scale

    def zoom_by(self, delta: float) -> float:
        """Add ``delta`` to the zoom factor; returns the clamped result."""
        return self.set_scale(self._scale + delta)

    def to_world(self, screen_point: Point) -> Point:
        """Convert a screen-space point to world space."""
        return Point(
            (screen_point.x - self.offset_x) / self._scale,
            (screen_point.y - self.offset_y) / self._scale,
        )

    def to_screen(self, world_point: Point) -> Point:
        """Convert a world-space point to screen space."""
        return Point(
            world_point.x * self._scale + self.offset_x,
            world_point.y * self._scale + self.offset_y,
        )

    def apply(self, world_points: np.ndarray) -> np.ndarray:
        """Transform an (N, 2) array of world points to screen space."""
        return world_points * self._scale + np.array([self.offset_x, self.offset_y])
