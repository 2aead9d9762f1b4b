"""
Gesture Logic Module - Landmark Geometry to Gesture
===================================================
Classifies the hands visible in a single frame into one discrete gesture.

The classifier is memoryless: the only value carried between frames is the
previous inter-hand distance used for two-hand zoom, and it is passed in and
returned explicitly by the caller.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from holodraw.config import GestureConfig
from holodraw.geometry import Point, distance, midpoint, to_screen
from holodraw.landmarks import HandLandmark, LandmarkSet


class Gesture(Enum):
    """Recognized gestures for the drawing surface."""
    UNKNOWN = auto()        # No recognized gesture
    PINCH = auto()          # Thumb + index together - draw
    OPEN_PALM = auto()      # All fingers spread - open menu
    V_SIGN = auto()         # Index + middle apart - dissolve
    TWO_HAND_ZOOM = auto()  # Two hands visible - zoom


@dataclass(frozen=True)
class GestureReading:
    """
    Classifier output for one frame.

    Attributes:
        gesture: The detected gesture
        hand_count: Number of hands that were classified
        pinch_point: Thumb/index midpoint in screen space (single hand)
        index_tip: Index fingertip in screen space (single hand)
        hand_distance: Index-to-index distance in pixels (two hands)
        zoom_delta: Scale change to apply this frame (two hands, after the first frame)
    """
    gesture: Gesture
    hand_count: int = 0
    pinch_point: Optional[Point] = None
    index_tip: Optional[Point] = None
    hand_distance: Optional[float] = None
    zoom_delta: Optional[float] = None


DEFAULT_CONFIG = GestureConfig()


def hand_to_screen(hand: LandmarkSet, width: float, height: float) -> Dict[HandLandmark, Point]:
    """Map the landmarks needed for classification into mirrored screen space."""
    needed = (
        HandLandmark.WRIST,
        HandLandmark.THUMB_TIP,
        HandLandmark.INDEX_TIP,
        HandLandmark.MIDDLE_TIP,
        HandLandmark.RING_TIP,
        HandLandmark.PINKY_TIP,
    )
    return {lm: to_screen(*hand[lm], width, height) for lm in needed}


def calculate_finger_states(
    points: Dict[HandLandmark, Point],
    extension_ratio: float = DEFAULT_CONFIG.extension_ratio
) -> Dict[str, bool]:
    """
    Determine which of middle, ring and pinky are extended.

    A finger counts as extended when its tip is farther from the wrist than
    ``extension_ratio`` times the index tip's distance from the wrist. The
    thumb is not tested this way; pinch uses an absolute distance instead.
    """
    wrist = points[HandLandmark.WRIST]
    reach = distance(wrist, points[HandLandmark.INDEX_TIP]) * extension_ratio

    fingers = {
        'middle': HandLandmark.MIDDLE_TIP,
        'ring': HandLandmark.RING_TIP,
        'pinky': HandLandmark.PINKY_TIP,
    }
    return {
        name: distance(wrist, points[tip]) > reach
        for name, tip in fingers.items()
    }


def classify_hand(
    hand: LandmarkSet,
    width: float,
    height: float,
    config: GestureConfig = DEFAULT_CONFIG
) -> GestureReading:
    """
    Classify a single hand.

    Rules are checked in precedence order; the first match wins because the
    finger-extension tests are not mutually exclusive:
        1. PINCH: thumb/index tips closer than the pinch threshold and the
           middle finger not extended
        2. OPEN_PALM: middle, ring and pinky extended and the index tip far
           enough from the wrist
        3. V_SIGN: index and middle tips spread apart, ring and pinky curled
    """
    points = hand_to_screen(hand, width, height)
    states = calculate_finger_states(points, config.extension_ratio)

    wrist = points[HandLandmark.WRIST]
    thumb_tip = points[HandLandmark.THUMB_TIP]
    index_tip = points[HandLandmark.INDEX_TIP]
    middle_tip = points[HandLandmark.MIDDLE_TIP]

    pinch_point = midpoint(thumb_tip, index_tip)

    if distance(thumb_tip, index_tip) < config.pinch_threshold and not states['middle']:
        gesture = Gesture.PINCH
    elif (states['middle'] and states['ring'] and states['pinky']
          and distance(wrist, index_tip) > config.open_palm_reach):
        gesture = Gesture.OPEN_PALM
    elif (distance(index_tip, middle_tip) > config.v_sign_spread
          and not states['ring'] and not states['pinky']):
        gesture = Gesture.V_SIGN
    else:
        gesture = Gesture.UNKNOWN

    return GestureReading(
        gesture=gesture,
        hand_count=1,
        pinch_point=pinch_point,
        index_tip=index_tip,
    )


def classify_hands(
    hands: Sequence[LandmarkSet],
    width: float,
    height: float,
    previous_distance: Optional[float] = None,
    config: GestureConfig = DEFAULT_CONFIG
) -> Tuple[GestureReading, Optional[float]]:
    """
    Classify every hand visible in a frame.

    Args:
        hands: Zero, one or two landmark sets for this frame
        width: Video frame width in pixels
        height: Video frame height in pixels
        previous_distance: Inter-hand distance returned for the previous frame
        config: Classifier thresholds

    Returns:
        Tuple of (GestureReading, previous distance to pass next frame)
    """
    if len(hands) >= 2:
        first = to_screen(*hands[0][HandLandmark.INDEX_TIP], width, height)
        second = to_screen(*hands[1][HandLandmark.INDEX_TIP], width, height)
        hand_distance = distance(first, second)

        zoom_delta = None
        if previous_distance is not None:
            zoom_delta = (hand_distance - previous_distance) * config.zoom_speed

        reading = GestureReading(
            gesture=Gesture.TWO_HAND_ZOOM,
            hand_count=2,
            hand_distance=hand_distance,
            zoom_delta=zoom_delta,
        )
        return reading, hand_distance

    if len(hands) == 1:
        return classify_hand(hands[0], width, height, config), None

    return GestureReading(gesture=Gesture.UNKNOWN), None


GESTURE_INFO = {
    Gesture.UNKNOWN: {
        'name': 'UNKNOWN',
        'description': 'No gesture detected',
    },
    Gesture.PINCH: {
        'name': 'PINCH',
        'description': 'Thumb + index together - Draw',
    },
    Gesture.OPEN_PALM: {
        'name': 'OPEN_PALM',
        'description': 'Open palm - Menu',
    },
    Gesture.V_SIGN: {
        'name': 'V_SIGN',
        'description': 'Index + middle apart - Dissolve',
    },
    Gesture.TWO_HAND_ZOOM: {
        'name': 'TWO_HAND_ZOOM',
        'description': 'Two index fingers - Zoom',
    },
}


def get_gesture_info(gesture: Gesture) -> dict:
    """Get the display name and description of a gesture."""
    return GESTURE_INFO.get(gesture, GESTURE_INFO[Gesture.UNKNOWN])


HUD_COLOR = (255, 200, 0)
HUD_LEGEND = (
    "GESTURES:",
    "PINCH: Draw",
    "OPEN PALM: Menu",
    "V-SIGN: Dissolve",
    "2 HANDS: Zoom",
)


def draw_hud(
    frame: np.ndarray,
    gesture: Gesture,
    tool_name: str,
    scale: float
) -> np.ndarray:
    """
    Draw the status HUD in the bottom-left corner.

    Args:
        frame: Image to draw on
        gesture: Gesture classified this frame
        tool_name: Current drawing tool
        scale: Current zoom factor

    Returns:
        Frame with HUD overlay
    """
    h = frame.shape[0]
    info = get_gesture_info(gesture)

    x = 24
    y = h - 24 - 20 * (len(HUD_LEGEND) + 4)

    dot_color = (0, 0, 255) if gesture == Gesture.UNKNOWN else (0, 255, 0)
    cv2.circle(frame, (x + 4, y - 5), 5, dot_color, -1)
    cv2.putText(frame, f"STATUS: {info['name']}", (x + 16, y),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, HUD_COLOR, 1, cv2.LINE_AA)
    y += 20
    cv2.putText(frame, f"TOOL: {tool_name.upper()}", (x, y),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, HUD_COLOR, 1, cv2.LINE_AA)
    y += 20
    cv2.putText(frame, f"ZOOM: {scale:.2f}x", (x, y),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, HUD_COLOR, 1, cv2.LINE_AA)
    y += 30

    for line in HUD_LEGEND:
        cv2.putText(frame, line, (x, y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.4, (150, 120, 0), 1, cv2.LINE_AA)
        y += 20

    return frame
