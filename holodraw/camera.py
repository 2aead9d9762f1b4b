"""
Camera Module - Webcam Stream Handler
======================================
Captures webcam frames on a background thread so the frame loop always
gets the newest image without blocking on the device.

Frames are returned exactly as the camera delivers them. Mirroring for the
selfie view happens at display time, after hand detection.
"""

import logging
import threading
import time
from typing import NamedTuple, Optional

import cv2
import numpy as np

from holodraw.config import CameraConfig

logger = logging.getLogger(__name__)


class CapturedFrame(NamedTuple):
    """A camera frame with its capture time in milliseconds since start."""
    image: np.ndarray
    timestamp_ms: int
    sequence: int


class Camera:
    """
    Webcam stream handler with a capture thread.

    ``read`` hands out a copy of the latest frame together with its
    sequence number, so the caller can tell a fresh frame from one it has
    already processed.
    """

    def __init__(self, config: CameraConfig = None):
        self.config = config or CameraConfig()
        self.width = self.config.width
        self.height = self.config.height

        self.cap: Optional[cv2.VideoCapture] = None

        # Threading components for non-blocking capture
        self._latest: Optional[CapturedFrame] = None
        self._frame_lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

        self._frame_count = 0
        self._start_time = 0.0

    def start(self) -> bool:
        """
        Open the device and start the capture thread.

        Returns:
            True if camera started successfully, False otherwise
        """
        self.cap = cv2.VideoCapture(self.config.camera_id)

        if not self.cap.isOpened():
            logger.error("Failed to open camera %d", self.config.camera_id)
            self.cap.release()
            self.cap = None
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.fps)
        # Buffer of one frame for minimum latency
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        # Actual resolution may differ from requested
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info("Camera started: %dx%d @ %dfps", self.width, self.height, self.config.fps)

        self._running = True
        self._start_time = time.monotonic()
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        return True

    def _capture_loop(self):
        while self._running:
            ret, frame = self.cap.read()
            if not ret:
                time.sleep(0.001)
                continue

            timestamp_ms = int((time.monotonic() - self._start_time) * 1000)
            with self._frame_lock:
                self._frame_count += 1
                self._latest = CapturedFrame(frame, timestamp_ms, self._frame_count)

    def read(self) -> Optional[CapturedFrame]:
        """
        Get the latest captured frame.

        Returns:
            A copy of the newest frame, or None before the first frame arrives
        """
        with self._frame_lock:
            if self._latest is None:
                return None
            latest = self._latest
        return latest._replace(image=latest.image.copy())

    def get_frame(self) -> Optional[np.ndarray]:
        """Get just the latest image (convenience method)."""
        captured = self.read()
        return captured.image if captured is not None else None

    def stop(self):
        """Stop the camera capture and release resources."""
        self._running = False

        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("Camera stopped")

    def __enter__(self):
        if not self.start():
            raise RuntimeError(f"Could not open camera {self.config.camera_id}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
