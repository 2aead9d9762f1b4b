"""
Menu Module - Hands-Free Settings Panel
=======================================
Lays out the settings panel as hit-testable regions and draws it over the
video. The panel only reports what was picked; applying the change is the
interaction core's job (see ``SettingsUpdate``).
"""

from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from holodraw.config import BRUSH_SIZES, DrawingSettings, NeonPalette, Tool
from holodraw.dwell import Bounds, DwellSelector, MenuRegion
from holodraw.geometry import Point


PANEL_WIDTH = 600
PANEL_HEIGHT = 420

ACCENT = (255, 255, 0)
ACCENT_DIM = (120, 120, 0)
PANEL_BG = (10, 10, 10)


def selection_to_update(region: MenuRegion) -> Dict[str, object]:
    """
    Translate a selected region into a partial settings update.

    Picking a color also switches back to the pen.
    """
    if region.kind == 'color':
        return {'color': region.value, 'tool': Tool.PEN}
    if region.kind == 'size':
        return {'size': int(region.value)}
    if region.kind == 'tool':
        return {'tool': Tool(region.value)}
    return {}


class SettingsMenu:
    """
    Presentational settings menu.

    Regions are recomputed from the frame size, so they always match what
    is drawn this frame.
    """

    def __init__(self, colors: Tuple[Tuple[int, int, int], ...] = None,
                 sizes: Tuple[int, ...] = BRUSH_SIZES):
        self.colors = colors or NeonPalette.get_all()
        self.sizes = sizes

    def panel_bounds(self, width: int, height: int) -> Bounds:
        panel_w = min(PANEL_WIDTH, width - 20)
        panel_h = min(PANEL_HEIGHT, height - 20)
        left = (width - panel_w) / 2
        top = (height - panel_h) / 2
        return Bounds(left, top, left + panel_w, top + panel_h)

    def build_regions(self, width: int, height: int) -> List[MenuRegion]:
        """Compute the hit-testable regions for a frame of the given size."""
        panel = self.panel_bounds(width, height)
        cx = (panel.left + panel.right) / 2
        regions: List[MenuRegion] = []

        # Tools row
        tool_size = 64
        gap = 24
        y = panel.top + 70
        tools = [Tool.PEN, Tool.ERASER]
        x = cx - (len(tools) * tool_size + (len(tools) - 1) * gap) / 2
        for tool in tools:
            regions.append(MenuRegion(
                'tool', tool.value, Bounds(x, y, x + tool_size, y + tool_size)
            ))
            x += tool_size + gap

        # Sizes row, dot diameter grows with brush size
        y_center = panel.top + 210
        diameters = [s * 2 + 10 for s in self.sizes]
        x = cx - (sum(diameters) + (len(diameters) - 1) * gap) / 2
        for size, d in zip(self.sizes, diameters):
            regions.append(MenuRegion(
                'size', size, Bounds(x, y_center - d / 2, x + d, y_center + d / 2)
            ))
            x += d + gap

        # Colors row
        swatch = 48
        color_gap = 16
        y = panel.top + 290
        x = cx - (len(self.colors) * swatch + (len(self.colors) - 1) * color_gap) / 2
        for color in self.colors:
            regions.append(MenuRegion(
                'color', tuple(color), Bounds(x, y, x + swatch, y + swatch)
            ))
            x += swatch + color_gap

        return regions

    def draw(
        self,
        frame: np.ndarray,
        settings: DrawingSettings,
        cursor: Optional[Point],
        dwell: DwellSelector
    ) -> np.ndarray:
        """
        Draw the panel, hover/confirmation feedback and the menu cursor.

        Args:
            frame: BGR image to draw on
            settings: Current drawing settings (for the selected markers)
            cursor: Menu cursor in screen space
            dwell: Dwell engine, for hover and pulse state

        Returns:
            Frame with the menu drawn
        """
        h, w = frame.shape[:2]

        # Dim the whole frame behind the panel
        frame[:] = (frame * 0.4).astype(np.uint8)

        panel = self.panel_bounds(w, h)
        p1 = (int(panel.left), int(panel.top))
        p2 = (int(panel.right), int(panel.bottom))
        cv2.rectangle(frame, p1, p2, PANEL_BG, -1)
        cv2.rectangle(frame, p1, p2, ACCENT, 2)

        title = "SYSTEM INTERFACE"
        (tw, _), _ = cv2.getTextSize(title, cv2.FONT_HERSHEY_SIMPLEX, 0.8, 2)
        cv2.putText(frame, title, (int((panel.left + panel.right - tw) / 2), p1[1] + 45),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, ACCENT, 2, cv2.LINE_AA)

        for region in self.build_regions(w, h):
            self._draw_region(frame, region, settings, dwell)

        hint = "HOVER TO SELECT"
        (hw, _), _ = cv2.getTextSize(hint, cv2.FONT_HERSHEY_SIMPLEX, 0.45, 1)
        cv2.putText(frame, hint, (int((panel.left + panel.right - hw) / 2), p2[1] - 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45, ACCENT_DIM, 1, cv2.LINE_AA)

        if cursor is not None:
            c = cursor.to_pixel()
            cv2.circle(frame, c, 12, (255, 255, 255), 2, cv2.LINE_AA)
            cv2.circle(frame, c, 4, (255, 255, 255), -1, cv2.LINE_AA)

        return frame

    def _draw_region(self, frame: np.ndarray, region: MenuRegion,
                     settings: DrawingSettings, dwell: DwellSelector):
        b = region.bounds
        p1 = (int(b.left), int(b.top))
        p2 = (int(b.right), int(b.bottom))
        center = (int((b.left + b.right) / 2), int((b.top + b.bottom) / 2))
        radius = int((b.right - b.left) / 2)

        if region.kind == 'tool':
            selected = settings.tool.value == region.value
            cv2.rectangle(frame, p1, p2, (60, 60, 0) if selected else (30, 30, 30), -1)
            cv2.rectangle(frame, p1, p2, ACCENT if selected else ACCENT_DIM, 1)
            label = "PEN" if region.value == Tool.PEN.value else "ERASE"
            cv2.putText(frame, label, (p1[0] + 6, center[1] + 5),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.45, ACCENT, 1, cv2.LINE_AA)
        elif region.kind == 'size':
            selected = settings.size == region.value
            cv2.circle(frame, center, radius, (80, 80, 80), -1, cv2.LINE_AA)
            if selected:
                cv2.circle(frame, center, radius + 3, ACCENT, 2, cv2.LINE_AA)
        else:
            selected = settings.tool == Tool.PEN and tuple(settings.color) == region.value
            cv2.circle(frame, center, radius, region.value, -1, cv2.LINE_AA)
            if selected:
                cv2.circle(frame, center, radius + 4, (255, 255, 255), 2, cv2.LINE_AA)

        if dwell.hovered_id == region.region_id:
            cv2.circle(frame, center, radius + 8, (255, 255, 255), 3, cv2.LINE_AA)
        if dwell.is_pulsing(region.region_id):
            cv2.circle(frame, center, radius, (255, 255, 255), -1, cv2.LINE_AA)
