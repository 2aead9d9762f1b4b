import random

import pytest

from holodraw.config import AppConfig
from holodraw.interaction import FrameContext
from holodraw.landmarks import LANDMARK_COUNT, HandLandmark, LandmarkSet

WIDTH = 1280
HEIGHT = 720

_TIPS = {
    'wrist': HandLandmark.WRIST,
    'thumb': HandLandmark.THUMB_TIP,
    'index': HandLandmark.INDEX_TIP,
    'middle': HandLandmark.MIDDLE_TIP,
    'ring': HandLandmark.RING_TIP,
    'pinky': HandLandmark.PINKY_TIP,
}


def make_hand(width=WIDTH, height=HEIGHT, **screen_points):
    """
    Build a LandmarkSet from mirrored screen-space positions.

    Keyword names are wrist, thumb, index, middle, ring and pinky. Every
    landmark that is not given sits on the wrist.
    """
    wrist = screen_points.get('wrist', (640, 600))
    screen = [wrist] * LANDMARK_COUNT
    for name, pos in screen_points.items():
        screen[_TIPS[name]] = pos
    normalized = [(1 - sx / width, sy / height) for sx, sy in screen]
    return LandmarkSet(points=tuple(normalized))


def pinch_hand(**overrides):
    points = dict(wrist=(640, 600), index=(640, 300), thumb=(660, 300),
                  middle=(640, 550), ring=(650, 560), pinky=(660, 570))
    points.update(overrides)
    return make_hand(**points)


def open_palm_hand():
    return make_hand(wrist=(640, 600), index=(640, 300), middle=(660, 290),
                     ring=(690, 300), pinky=(730, 340), thumb=(500, 450))


def v_sign_hand():
    return make_hand(wrist=(640, 600), index=(580, 300), middle=(700, 300),
                     ring=(650, 560), pinky=(660, 570), thumb=(620, 520))


def unknown_hand():
    return make_hand(wrist=(640, 600), index=(640, 500), middle=(640, 530),
                     ring=(640, 540), pinky=(640, 550), thumb=(700, 520))


def pointing_hand(index):
    """A hand whose index tip is at ``index``; used for two-hand zoom."""
    return make_hand(wrist=(index[0], index[1] + 200), index=index)


@pytest.fixture
def ctx():
    return FrameContext.create(AppConfig(), rng=random.Random(7))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
