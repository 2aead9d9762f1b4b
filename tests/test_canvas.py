import numpy as np
import pytest

from holodraw.canvas import (
    CompositeMode,
    RenderSurfaces,
    StrokeCanvas,
    StrokeRenderer,
    overlay_layer,
    smooth_path,
)
from holodraw.config import DrawingSettings, NeonPalette, Tool
from holodraw.geometry import Point
from holodraw.viewport import ViewTransform


def test_finalize_builds_stroke_from_settings():
    canvas = StrokeCanvas()
    for x in (10, 20, 30):
        canvas.add_point(Point(x, 5))

    stroke = canvas.finalize(DrawingSettings(color=NeonPalette.PINK, size=12))
    assert stroke.points == (Point(10, 5), Point(20, 5), Point(30, 5))
    assert stroke.color == NeonPalette.PINK
    assert stroke.width == 12
    assert stroke.tool == Tool.PEN
    assert canvas.get_stroke_count() == 1
    assert not canvas.has_active()


def test_finalize_without_active_points_is_noop():
    canvas = StrokeCanvas()
    assert canvas.finalize(DrawingSettings()) is None
    assert canvas.get_stroke_count() == 0


def test_finalized_strokes_are_not_affected_by_later_settings():
    canvas = StrokeCanvas()
    canvas.add_point(Point(0, 0))
    canvas.finalize(DrawingSettings(size=2))
    canvas.add_point(Point(1, 1))
    canvas.finalize(DrawingSettings(size=24))
    assert [s.width for s in canvas.strokes] == [2, 24]


def test_clear_and_counts():
    canvas = StrokeCanvas()
    canvas.add_point(Point(0, 0))
    canvas.add_point(Point(1, 0))
    canvas.finalize(DrawingSettings())
    canvas.add_point(Point(2, 0))
    assert canvas.get_point_count() == 3
    assert not canvas.is_empty()

    canvas.clear()
    assert canvas.is_empty()
    assert canvas.get_point_count() == 0


def test_smooth_path_needs_two_points():
    assert smooth_path([]) == []
    assert smooth_path([Point(5, 5)]) == []


def test_smooth_path_starts_at_first_point_and_ends_at_last_midpoint():
    points = [Point(0, 0), Point(10, 0), Point(10, 10)]
    path = smooth_path(points, steps=4)
    assert path[0] == Point(0, 0)
    assert path[-1] == Point(10, 5)
    assert len(path) == 1 + 2 * 4


def layer(w=100, h=60):
    return np.zeros((h, w, 4), dtype=np.uint8)


def test_single_point_stroke_draws_nothing():
    target = layer()
    StrokeRenderer().draw_stroke(target, [Point(50, 30)], (255, 255, 255), 6, Tool.PEN, ViewTransform())
    assert not target.any()


def test_pen_stroke_is_opaque():
    target = layer()
    renderer = StrokeRenderer()
    renderer.draw_stroke(target, [Point(10, 30), Point(50, 30), Point(90, 30)],
                         (255, 255, 0), 6, Tool.PEN, ViewTransform())
    assert target[30, 40, 3] == 255
    assert tuple(target[30, 40, :3]) == (255, 255, 0)


def test_eraser_reduces_alpha_and_restores_composite():
    target = layer()
    target[:, :, :] = (0, 255, 0, 255)
    renderer = StrokeRenderer()
    renderer.draw_stroke(target, [Point(10, 30), Point(50, 30), Point(90, 30)],
                         (0, 0, 0), 10, Tool.ERASER, ViewTransform())

    assert target[30, 40, 3] == pytest.approx(51, abs=1)
    assert target[5, 5, 3] == 255
    assert renderer.composite == CompositeMode.SOURCE_OVER


def test_composite_restored_even_when_drawing_fails():
    renderer = StrokeRenderer()
    bad_layer = np.zeros((10, 10), dtype=np.uint8)
    with pytest.raises(Exception):
        renderer.draw_stroke(bad_layer, [Point(0, 0), Point(5, 5)],
                             (0, 0, 0), 4, Tool.ERASER, ViewTransform())
    assert renderer.composite == CompositeMode.SOURCE_OVER


def test_render_draws_pen_after_eraser_normally():
    canvas = StrokeCanvas()
    for p in (Point(10, 30), Point(50, 30), Point(90, 30)):
        canvas.add_point(p)
    canvas.finalize(DrawingSettings(tool=Tool.ERASER, size=10))
    for p in (Point(50, 5), Point(50, 30), Point(50, 55)):
        canvas.add_point(p)

    target = layer()
    StrokeRenderer().render(target, canvas, ViewTransform(), DrawingSettings(size=6))
    assert target[20, 50, 3] == 255


def test_render_surfaces_resize():
    surfaces = RenderSurfaces()
    assert not surfaces.is_ready()
    assert surfaces.ensure_size(640, 480)
    assert surfaces.content.shape == (480, 640, 4)
    assert surfaces.ui.shape == (480, 640, 4)
    assert not surfaces.ensure_size(640, 480)
    assert surfaces.ensure_size(1280, 720)
    assert surfaces.content.shape == (720, 1280, 4)


def test_overlay_layer_blends_by_alpha():
    frame = np.zeros((2, 2, 3), dtype=np.uint8)
    top = np.zeros((2, 2, 4), dtype=np.uint8)
    top[0, 0] = (200, 100, 50, 255)
    out = overlay_layer(frame, top)
    assert tuple(out[0, 0]) == (200, 100, 50)
    assert tuple(out[1, 1]) == (0, 0, 0)
