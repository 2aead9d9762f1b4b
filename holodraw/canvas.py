"""
Canvas Module - Strokes and Render Surfaces
===========================================
Holds the finalized strokes and the stroke being drawn, renders them as
smoothed curves onto a transparent content layer, and manages the two
layers (content and UI overlay) that are blended over the video feed.

Stroke points are stored in world space; rendering maps them through the
current view transform.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from holodraw.config import DrawingSettings, Tool
from holodraw.geometry import Point, midpoint
from holodraw.viewport import ViewTransform

logger = logging.getLogger(__name__)


ERASER_STRENGTH = 0.8   # Share of existing alpha removed under the eraser
CURVE_STEPS = 8         # Samples per quadratic segment


@dataclass(frozen=True)
class Stroke:
    """
    A finished stroke. Immutable once appended to the canvas.

    Attributes:
        points: World-space points in drawing order
        color: BGR color of the stroke
        width: Line width in world units
        tool: Pen or eraser
    """
    points: Tuple[Point, ...]
    color: Tuple[int, int, int]
    width: int
    tool: Tool = Tool.PEN


class StrokeCanvas:
    """
    Stroke storage for the drawing surface.

    Finalized strokes are append-only; the only way to remove them is
    ``clear``, which drops everything at once.
    """

    def __init__(self):
        self._strokes: List[Stroke] = []
        self._active: List[Point] = []

    @property
    def strokes(self) -> Tuple[Stroke, ...]:
        return tuple(self._strokes)

    @property
    def active_points(self) -> Tuple[Point, ...]:
        return tuple(self._active)

    def has_active(self) -> bool:
        """Check if a stroke is currently being drawn."""
        return len(self._active) > 0

    def add_point(self, world_point: Point):
        """Append a world-space point to the stroke being drawn."""
        self._active.append(world_point)

    def finalize(self, settings: DrawingSettings) -> Optional[Stroke]:
        """
        Turn the active points into a finished stroke.

        Returns:
            The new stroke, or None if nothing was being drawn
        """
        if not self._active:
            return None

        stroke = Stroke(
            points=tuple(self._active),
            color=settings.color,
            width=settings.size,
            tool=settings.tool
        )
        self._strokes.append(stroke)
        self._active = []
        logger.debug("Stroke finalized: %d points, %s", len(stroke.points), stroke.tool.value)
        return stroke

    def clear(self):
        """Drop every finalized stroke and the active stroke."""
        self._strokes.clear()
        self._active = []

    def is_empty(self) -> bool:
        """Check if there is nothing on the canvas."""
        return not self._strokes and not self._active

    def get_stroke_count(self) -> int:
        return len(self._strokes)

    def get_point_count(self) -> int:
        """Get total number of points across all strokes, active one included."""
        return sum(len(s.points) for s in self._strokes) + len(self._active)


def _quadratic(start: Point, control: Point, end: Point, steps: int) -> List[Point]:
    """Sample a quadratic Bezier curve, excluding its start point."""
    samples = []
    for i in range(1, steps + 1):
        t = i / steps
        u = 1 - t
        samples.append(Point(
            u * u * start.x + 2 * u * t * control.x + t * t * end.x,
            u * u * start.y + 2 * u * t * control.y + t * t * end.y,
        ))
    return samples


def smooth_path(points: Sequence[Point], steps: int = CURVE_STEPS) -> List[Point]:
    """
    Convert a raw point sequence into a lightly smoothed polyline.

    For each consecutive pair (p1, p2) a quadratic curve is drawn from the
    current pen position with p1 as control point, ending at the midpoint of
    p1 and p2. This rounds corners without moving the stroke off its samples.

    Returns:
        The sampled path, or an empty list for fewer than 2 points
    """
    if len(points) < 2:
        return []

    path = [points[0]]
    pen = points[0]
    for p1, p2 in zip(points, points[1:]):
        end = midpoint(p1, p2)
        path.extend(_quadratic(pen, p1, end, steps))
        pen = end
    return path


class CompositeMode(Enum):
    """How stroke pixels combine with what is already on the layer."""
    SOURCE_OVER = auto()       # Paint on top
    DESTINATION_OUT = auto()   # Remove existing ink


class StrokeRenderer:
    """
    Draws strokes onto a BGRA content layer.

    Eraser strokes switch the renderer to a destructive composite mode; the
    mode is always restored to SOURCE_OVER after each stroke.
    """

    def __init__(self):
        self.composite = CompositeMode.SOURCE_OVER

    def render(
        self,
        layer: np.ndarray,
        canvas: StrokeCanvas,
        view: ViewTransform,
        settings: DrawingSettings
    ):
        """
        Render all finalized strokes, then the active stroke.

        Args:
            layer: BGRA image to draw on
            canvas: Stroke storage
            view: Current world-to-screen transform
            settings: Settings used for the active stroke
        """
        for stroke in canvas.strokes:
            self.draw_stroke(layer, stroke.points, stroke.color, stroke.width, stroke.tool, view)

        if canvas.has_active():
            self.draw_stroke(
                layer, canvas.active_points,
                settings.color, settings.size, settings.tool, view
            )

    def draw_stroke(
        self,
        layer: np.ndarray,
        points: Sequence[Point],
        color: Tuple[int, int, int],
        width: int,
        tool: Tool,
        view: ViewTransform
    ):
        """Draw one stroke; strokes with fewer than 2 points draw nothing."""
        path = smooth_path(points)
        if not path:
            return

        screen = view.apply(np.asarray(path, dtype=np.float64))
        polyline = np.round(screen).astype(np.int32).reshape((-1, 1, 2))
        thickness = max(1, int(round(width * view.scale)))

        if tool == Tool.ERASER:
            self.composite = CompositeMode.DESTINATION_OUT
        try:
            if self.composite == CompositeMode.DESTINATION_OUT:
                mask = np.zeros(layer.shape[:2], dtype=np.uint8)
                cv2.polylines(mask, [polyline], False, 255, thickness, cv2.LINE_AA)
                keep = 1.0 - (mask.astype(np.float32) / 255.0) * ERASER_STRENGTH
                layer[:, :, 3] = (layer[:, :, 3] * keep).astype(np.uint8)
            else:
                cv2.polylines(layer, [polyline], False, (*color, 255), thickness, cv2.LINE_AA)
        finally:
            self.composite = CompositeMode.SOURCE_OVER


class RenderSurfaces:
    """
    The two transparent layers drawn over the video: strokes and particles
    on the content layer, cursors and indicators on the UI layer. Both match
    the video's native resolution.
    """

    def __init__(self):
        self.width = 0
        self.height = 0
        self.content: Optional[np.ndarray] = None
        self.ui: Optional[np.ndarray] = None

    def ensure_size(self, width: int, height: int) -> bool:
        """
        Reallocate both layers when the video resolution is first known or
        changes.

        Returns:
            True if the layers were (re)allocated
        """
        if self.content is not None and (width, height) == (self.width, self.height):
            return False

        self.width = width
        self.height = height
        self.content = np.zeros((height, width, 4), dtype=np.uint8)
        self.ui = np.zeros((height, width, 4), dtype=np.uint8)
        logger.info("Render surfaces sized to %dx%d", width, height)
        return True

    def is_ready(self) -> bool:
        return self.content is not None

    def clear(self):
        """Clear both layers for a new frame."""
        self.content[:] = 0
        self.ui[:] = 0


def overlay_layer(frame: np.ndarray, layer: np.ndarray, alpha: float = 1.0) -> np.ndarray:
    """
    Blend a BGRA layer over a BGR frame.

    Args:
        frame: BGR video frame
        layer: BGRA layer of the same size
        alpha: Extra opacity applied to the whole layer (0-1)

    Returns:
        New frame with the layer blended in
    """
    layer_alpha = (layer[:, :, 3:4].astype(np.float32) / 255.0) * alpha
    blended = (
        frame.astype(np.float32) * (1 - layer_alpha) +
        layer[:, :, :3].astype(np.float32) * layer_alpha
    )
    return blended.astype(np.uint8)
