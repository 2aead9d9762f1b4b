"""
Landmarks Module - Hand Landmark Sets
=====================================
Per-frame output of the pose estimator: 21 normalized points per hand,
indexed by anatomical role.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, Tuple


LANDMARK_COUNT = 21


class HandLandmark(IntEnum):
    """
    MediaPipe hand landmark indices.
    Reference: https://mediapipe.dev/images/mobile/hand_landmarks.png
    """
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGERTIPS = (
    HandLandmark.THUMB_TIP,
    HandLandmark.INDEX_TIP,
    HandLandmark.MIDDLE_TIP,
    HandLandmark.RING_TIP,
    HandLandmark.PINKY_TIP,
)


@dataclass(frozen=True)
class LandmarkSet:
    """
    One detected hand for a single frame.

    Attributes:
        points: Exactly 21 normalized (x, y) pairs in landmark order
        handedness: 'Left' or 'Right' as reported by the estimator
    """
    points: Tuple[Tuple[float, float], ...]
    handedness: str = "Right"

    def __post_init__(self):
        if len(self.points) != LANDMARK_COUNT:
            raise ValueError(
                f"LandmarkSet needs {LANDMARK_COUNT} points, got {len(self.points)}"
            )
        # Normalize any sequence input into an immutable tuple of pairs
        object.__setattr__(
            self, "points", tuple((float(x), float(y)) for x, y in self.points)
        )

    def __getitem__(self, landmark: HandLandmark) -> Tuple[float, float]:
        return self.points[int(landmark)]

    @classmethod
    def from_sequence(cls, points: Sequence, handedness: str = "Right") -> "LandmarkSet":
        """Build from any sequence of objects with ``x``/``y`` or (x, y) pairs."""
        pairs = []
        for point in points:
            if hasattr(point, "x") and hasattr(point, "y"):
                pairs.append((point.x, point.y))
            else:
                pairs.append((point[0], point[1]))
        return cls(points=tuple(pairs), handedness=handedness)
