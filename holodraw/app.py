"""
App Module - Main Application Interface
=======================================
Real-time gesture drawing surface over the mirrored webcam feed.
Wires the camera, hand tracker, interaction core, dwell menu and render
layers into one frame loop.
"""

import argparse
import logging
import time
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from holodraw.camera import Camera
from holodraw.canvas import RenderSurfaces, StrokeRenderer, overlay_layer
from holodraw.config import AppConfig
from holodraw.dwell import DeferredScheduler, DwellSelector, MenuRegion
from holodraw.gesture_logic import Gesture, GestureReading, draw_hud
from holodraw.hand_tracking import HandTracker, TrackerInitError, draw_landmarks
from holodraw.interaction import CloseMenu, FrameContext, SettingsUpdate, process_frame
from holodraw.menu import SettingsMenu, selection_to_update

logger = logging.getLogger(__name__)


WINDOW_NAME = "HoloDraw"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# UI Colors (BGR)
UI_ACCENT_COLOR = (255, 255, 0)


class HoloDrawApp:
    """
    Main application class for the gesture drawing surface.

    Each displayed frame runs, in order: due dwell callbacks, queued menu
    events, gesture classification and the state machine, the particle
    tick, then the render pass.
    """

    def __init__(self, config: AppConfig = None):
        self.config = config or AppConfig()

        self.camera = Camera(self.config.camera)
        self.tracker: Optional[HandTracker] = None
        self.tracker_error: Optional[str] = None

        self.ctx = FrameContext.create(self.config)
        self.scheduler = DeferredScheduler()
        self.dwell = DwellSelector(self.scheduler, self._on_menu_select, self.config.dwell)
        self.menu = SettingsMenu()

        self.surfaces = RenderSurfaces()
        self.renderer = StrokeRenderer()

        self._running = False
        self._last_sequence = -1

    def _on_menu_select(self, region: MenuRegion):
        """Dwell completion: queue the change for the next frame."""
        self.ctx.post(SettingsUpdate(selection_to_update(region)))

    def _start_tracker(self):
        try:
            self.tracker = HandTracker(self.config.tracker)
        except TrackerInitError as e:
            # No retry; the app stays on the loading screen
            self.tracker_error = str(e)
            logger.error("Hand tracking unavailable: %s", e)

    def step(self, frame: np.ndarray, timestamp_ms: int) -> np.ndarray:
        """
        Run one full frame.

        Args:
            frame: Raw (unmirrored) BGR camera frame
            timestamp_ms: Capture time of the frame

        Returns:
            The composed display frame
        """
        h, w = frame.shape[:2]
        display = cv2.flip(frame, 1)

        if self.tracker is None:
            return self._draw_loading(display)

        self.scheduler.run_pending()

        hands = self.tracker.process(frame, timestamp_ms)
        reading = process_frame(self.ctx, hands, w, h)
        self.ctx.particles.tick()
        self._update_dwell(w, h)

        try:
            display = self._render(display, hands, reading)
        except (cv2.error, ValueError) as e:
            logger.warning("Render pass failed, skipping frame: %s", e)
        return display

    def _update_dwell(self, width: int, height: int):
        """Hit-test the menu cursor, or drop all dwell state once the menu is closed."""
        if self.ctx.menu_open:
            regions = self.menu.build_regions(width, height)
            self.dwell.update(self.ctx.menu_cursor, regions)
        else:
            self.dwell.reset()

    def _render(self, display: np.ndarray, hands, reading: GestureReading) -> np.ndarray:
        """Compose layers, menu and HUD onto the mirrored frame."""
        h, w = display.shape[:2]
        self.surfaces.ensure_size(w, h)
        self.surfaces.clear()

        ctx = self.ctx
        ctx.particles.render(self.surfaces.content)
        self.renderer.render(self.surfaces.content, ctx.canvas, ctx.view, ctx.settings)

        draw_landmarks(self.surfaces.ui, hands)
        self._draw_pinch_indicator(self.surfaces.ui)

        display = overlay_layer(display, self.surfaces.content)
        display = overlay_layer(display, self.surfaces.ui)

        if ctx.menu_open:
            self.menu.draw(display, ctx.settings, ctx.menu_cursor, self.dwell)

        return draw_hud(display, reading.gesture, ctx.settings.tool.value, ctx.view.scale)

    def _draw_pinch_indicator(self, layer: np.ndarray):
        """Dot in the brush color at the tip of the stroke being drawn."""
        ctx = self.ctx
        if ctx.gesture != Gesture.PINCH or not ctx.canvas.has_active():
            return
        tip = ctx.view.to_screen(ctx.canvas.active_points[-1])
        radius = int(ctx.settings.size / 2 + 2)
        cv2.circle(layer, tip.to_pixel(), radius, (*ctx.settings.color, 255), -1, cv2.LINE_AA)

    def _draw_loading(self, display: np.ndarray) -> np.ndarray:
        h, w = display.shape[:2]
        display = (display * 0.3).astype(np.uint8)
        text = "INITIALIZING NEURAL LINK..."
        (tw, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.9, 2)
        cv2.putText(display, text, ((w - tw) // 2, h // 2),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.9, UI_ACCENT_COLOR, 2, cv2.LINE_AA)
        if self.tracker_error:
            cv2.putText(display, "Hand tracking unavailable", (20, h - 20),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 255), 1, cv2.LINE_AA)
        return display

    def handle_key(self, key: int) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if should quit, True otherwise
        """
        if key in (ord('q'), ord('Q')):
            return False

        if key == 27:  # Escape
            if not self.ctx.menu_open:
                return False
            self.ctx.post(CloseMenu())
        elif key in (ord('m'), ord('M')):
            if self.ctx.menu_open:
                self.ctx.post(CloseMenu())

        return True

    def run(self):
        """Run the main application loop."""
        logger.info("HoloDraw starting")
        logger.info("Gestures: pinch draws, open palm opens the menu, "
                    "V sign dissolves, two hands zoom")
        logger.info("Keys: [M]/[Esc] close menu, [Q] quit")

        if not self.camera.start():
            logger.error("Failed to start camera")
            return

        self._start_tracker()
        self._running = True
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(WINDOW_NAME, self.camera.width, self.camera.height)

        try:
            while self._running:
                captured = self.camera.read()
                if captured is None or captured.sequence == self._last_sequence:
                    time.sleep(0.001)
                    continue
                self._last_sequence = captured.sequence

                display = self.step(captured.image, captured.timestamp_ms)
                cv2.imshow(WINDOW_NAME, display)

                key = cv2.waitKey(1) & 0xFF
                if not self.handle_key(key):
                    break
        finally:
            self._running = False
            self.dwell.shutdown()
            self.camera.stop()
            if self.tracker is not None:
                self.tracker.release()
            cv2.destroyAllWindows()
            logger.info("Application closed")


def build_config(args: argparse.Namespace) -> AppConfig:
    """Environment configuration with command line overrides applied."""
    config = AppConfig.from_env()
    if args.camera is not None:
        config.camera.camera_id = args.camera
    if args.width is not None:
        config.camera.width = args.width
    if args.height is not None:
        config.camera.height = args.height
    if args.model is not None:
        config.tracker.model_path = Path(args.model)
    return config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HoloDraw - Draw in the air with hand gestures")
    parser.add_argument('--camera', type=int, default=None, help='Camera device index')
    parser.add_argument('--width', type=int, default=None, help='Requested frame width')
    parser.add_argument('--height', type=int, default=None, help='Requested frame height')
    parser.add_argument('--model', type=str, default=None, help='Path to hand_landmarker.task')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT
    )

    app = HoloDrawApp(build_config(args))
    app.run()


if __name__ == "__main__":
    main()
