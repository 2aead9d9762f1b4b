"""
Hand Tracking Module - MediaPipe Hand Landmark Detection
=========================================================
Detects up to two hands per frame and returns their 21 normalized
landmarks as ``LandmarkSet`` objects.

Uses the MediaPipe Tasks API (0.10.x) in VIDEO mode, which tracks between
sequential frames instead of re-detecting every frame.
"""

import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import List, Sequence, Tuple

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from holodraw.config import TrackerConfig
from holodraw.geometry import to_screen
from holodraw.landmarks import FINGERTIPS, HandLandmark, LandmarkSet

logger = logging.getLogger(__name__)


MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path(__file__).parent.parent / "models" / "hand_landmarker.task"


class TrackerInitError(RuntimeError):
    """The hand landmark model could not be loaded."""


def _download_model(model_path: Path) -> None:
    """Download the hand landmarker model if not present."""
    logger.info("Downloading hand landmarker model...")
    model_path.parent.mkdir(parents=True, exist_ok=True)
    urllib.request.urlretrieve(MODEL_URL, model_path)
    logger.info("Model downloaded to %s", model_path)


class HandTracker:
    """
    Hand tracking using MediaPipe Hand Landmarker (Tasks API).

    Construction either yields a working tracker or raises
    ``TrackerInitError``; there is no automatic retry.
    """

    def __init__(self, config: TrackerConfig = None):
        """
        Initialize the hand tracker.

        Args:
            config: Hand count, confidence thresholds and model location
        """
        self.config = config or TrackerConfig()
        self._model_path = self.config.model_path or DEFAULT_MODEL_PATH

        try:
            if not self._model_path.exists():
                _download_model(self._model_path)

            base_options = python.BaseOptions(model_asset_path=str(self._model_path))
            options = vision.HandLandmarkerOptions(
                base_options=base_options,
                running_mode=vision.RunningMode.VIDEO,
                num_hands=self.config.max_hands,
                min_hand_detection_confidence=self.config.min_detection_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
                min_hand_presence_confidence=self.config.min_detection_confidence
            )
            self.detector = vision.HandLandmarker.create_from_options(options)
        except (OSError, urllib.error.URLError, RuntimeError, ValueError) as e:
            raise TrackerInitError(f"Could not initialize hand landmarker: {e}") from e

        # VIDEO mode requires strictly increasing timestamps
        self._last_timestamp_ms = -1
        logger.info("Hand tracker ready (max %d hands)", self.config.max_hands)

    def process(self, frame: np.ndarray, timestamp_ms: int) -> List[LandmarkSet]:
        """
        Detect hands in a frame.

        Args:
            frame: BGR image from camera (not mirrored)
            timestamp_ms: Capture time in milliseconds

        Returns:
            Zero, one or two landmark sets; empty when nothing was found
        """
        timestamp_ms = int(timestamp_ms)
        if timestamp_ms <= self._last_timestamp_ms:
            timestamp_ms = self._last_timestamp_ms + 1
        self._last_timestamp_ms = timestamp_ms

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
        results = self.detector.detect_for_video(mp_image, timestamp_ms)

        hands: List[LandmarkSet] = []
        if not results.hand_landmarks:
            return hands

        for idx, hand_landmarks in enumerate(results.hand_landmarks):
            handedness = "Right"
            if results.handedness and idx < len(results.handedness):
                hand_info = results.handedness[idx]
                if hand_info:
                    handedness = hand_info[0].category_name
            try:
                hands.append(LandmarkSet.from_sequence(hand_landmarks, handedness))
            except ValueError as e:
                logger.warning("Dropping malformed hand: %s", e)

        return hands[:self.config.max_hands]

    def release(self):
        """Release resources."""
        if self.detector:
            self.detector.close()


# Finger connections for the skeleton overlay
HAND_CONNECTIONS: Tuple[Tuple[HandLandmark, HandLandmark], ...] = (
    (HandLandmark.WRIST, HandLandmark.THUMB_CMC),
    (HandLandmark.THUMB_CMC, HandLandmark.THUMB_MCP),
    (HandLandmark.THUMB_MCP, HandLandmark.THUMB_IP),
    (HandLandmark.THUMB_IP, HandLandmark.THUMB_TIP),
    (HandLandmark.WRIST, HandLandmark.INDEX_MCP),
    (HandLandmark.INDEX_MCP, HandLandmark.INDEX_PIP),
    (HandLandmark.INDEX_PIP, HandLandmark.INDEX_DIP),
    (HandLandmark.INDEX_DIP, HandLandmark.INDEX_TIP),
    (HandLandmark.INDEX_MCP, HandLandmark.MIDDLE_MCP),
    (HandLandmark.MIDDLE_MCP, HandLandmark.MIDDLE_PIP),
    (HandLandmark.MIDDLE_PIP, HandLandmark.MIDDLE_DIP),
    (HandLandmark.MIDDLE_DIP, HandLandmark.MIDDLE_TIP),
    (HandLandmark.MIDDLE_MCP, HandLandmark.RING_MCP),
    (HandLandmark.RING_MCP, HandLandmark.RING_PIP),
    (HandLandmark.RING_PIP, HandLandmark.RING_DIP),
    (HandLandmark.RING_DIP, HandLandmark.RING_TIP),
    (HandLandmark.RING_MCP, HandLandmark.PINKY_MCP),
    (HandLandmark.WRIST, HandLandmark.PINKY_MCP),
    (HandLandmark.PINKY_MCP, HandLandmark.PINKY_PIP),
    (HandLandmark.PINKY_PIP, HandLandmark.PINKY_DIP),
    (HandLandmark.PINKY_DIP, HandLandmark.PINKY_TIP),
)


def draw_landmarks(
    layer: np.ndarray,
    hands: Sequence[LandmarkSet],
    color: Tuple[int, int, int] = (255, 255, 0),
    alpha: int = 110
) -> np.ndarray:
    """
    Draw faint hand skeletons on the BGRA UI layer, mirrored like the
    drawing so they line up with the selfie view.
    """
    h, w = layer.shape[:2]
    paint = (*color, alpha)
    for hand in hands:
        points = {lm: to_screen(*hand[lm], w, h).to_pixel() for lm in HandLandmark}
        for start, end in HAND_CONNECTIONS:
            cv2.line(layer, points[start], points[end], paint, 1, cv2.LINE_AA)
        for lm in FINGERTIPS:
            cv2.circle(layer, points[lm], 4, paint, -1, cv2.LINE_AA)
    return layer


if __name__ == "__main__":
    # Test hand tracking module
    import time
    from holodraw.camera import Camera

    logging.basicConfig(level=logging.INFO)
    print("Testing Hand Tracking Module")
    print("=" * 40)
    print("Press 'q' to quit")

    with Camera() as cam:
        tracker = HandTracker()
        start = time.monotonic()

        while True:
            frame = cam.get_frame()
            if frame is None:
                continue

            hands = tracker.process(frame, int((time.monotonic() - start) * 1000))

            display = cv2.flip(frame, 1)
            overlay = np.zeros((*display.shape[:2], 4), dtype=np.uint8)
            draw_landmarks(overlay, hands)
            mask = overlay[:, :, 3] > 0
            display[mask] = overlay[:, :, :3][mask]
            cv2.putText(display, f"Hands: {len(hands)}", (10, 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 255, 0), 2)

            cv2.imshow("Hand Tracking Test", display)
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break

        tracker.release()
        cv2.destroyAllWindows()
