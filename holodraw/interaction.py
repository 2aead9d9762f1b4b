"""
Interaction Module - Per-Frame State Machine
============================================
Consumes one classifier reading per frame and drives the stroke canvas,
the view transform and the particle system.

All mutable core state lives in a single ``FrameContext`` that is passed
explicitly to ``process_frame``. Actions from the menu (settings updates
and close) are queued on the context and applied at the start of the next
frame, never mid-frame.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Deque, Dict, Optional, Sequence, Union

from holodraw.canvas import StrokeCanvas
from holodraw.config import AppConfig, DrawingSettings
from holodraw.geometry import Point
from holodraw.gesture_logic import Gesture, GestureReading, classify_hands
from holodraw.landmarks import LandmarkSet
from holodraw.particles import ParticleSystem
from holodraw.viewport import ViewTransform

logger = logging.getLogger(__name__)


class InteractionMode(Enum):
    """Persistent interaction states. Dissolve is a one-shot action, not a state."""
    IDLE = auto()
    DRAWING = auto()
    MENU_OPEN = auto()


@dataclass(frozen=True)
class SettingsUpdate:
    """Partial drawing-settings change requested by the menu."""
    changes: Dict[str, object]


@dataclass(frozen=True)
class CloseMenu:
    """Explicit close action from the menu collaborator."""


MenuEvent = Union[SettingsUpdate, CloseMenu]


@dataclass
class FrameContext:
    """
    Everything the frame loop owns and mutates.

    Attributes:
        view: World/screen transform
        canvas: Finalized and active strokes
        particles: Live dissolve particles
        settings: Current brush settings
        config: Application configuration
        mode: Current interaction state
        previous_hand_distance: Inter-hand distance carried for zoom
        menu_cursor: Index fingertip published while the menu is open
        gesture: Gesture classified on the last frame
        events: Menu events waiting for the next frame
    """
    view: ViewTransform
    canvas: StrokeCanvas
    particles: ParticleSystem
    settings: DrawingSettings
    config: AppConfig
    mode: InteractionMode = InteractionMode.IDLE
    previous_hand_distance: Optional[float] = None
    menu_cursor: Optional[Point] = None
    gesture: Gesture = Gesture.UNKNOWN
    events: Deque[MenuEvent] = field(default_factory=deque)

    @classmethod
    def create(cls, config: AppConfig = None, rng: random.Random = None) -> "FrameContext":
        config = config or AppConfig()
        return cls(
            view=ViewTransform(config.view),
            canvas=StrokeCanvas(),
            particles=ParticleSystem(config.particles, rng),
            settings=config.drawing.merged(),
            config=config,
        )

    @property
    def menu_open(self) -> bool:
        return self.mode == InteractionMode.MENU_OPEN

    def post(self, event: MenuEvent):
        """Queue a menu event for the next frame."""
        self.events.append(event)


def apply_menu_events(ctx: FrameContext) -> int:
    """
    Apply queued menu events in arrival order.

    Returns:
        Number of events applied
    """
    applied = 0
    while ctx.events:
        event = ctx.events.popleft()
        if isinstance(event, SettingsUpdate):
            ctx.settings = ctx.settings.merged(**event.changes)
            logger.info("Settings updated: color=%s size=%d tool=%s",
                        ctx.settings.color, ctx.settings.size, ctx.settings.tool.value)
        elif isinstance(event, CloseMenu):
            if ctx.menu_open:
                ctx.mode = InteractionMode.IDLE
                ctx.menu_cursor = None
                logger.info("Menu closed")
        applied += 1
    return applied


def dissolve(ctx: FrameContext) -> int:
    """
    Convert all stroke geometry into particles and clear the canvas.

    Returns:
        Number of particles spawned
    """
    if ctx.canvas.is_empty():
        return 0

    spawned = 0
    for stroke in ctx.canvas.strokes:
        spawned += ctx.particles.spawn(stroke.points, stroke.color, stroke.width, ctx.view)
    spawned += ctx.particles.spawn(
        ctx.canvas.active_points, ctx.settings.color, ctx.settings.size, ctx.view
    )

    ctx.canvas.clear()
    logger.info("Dissolved drawing into %d particles", spawned)
    return spawned


def apply_gesture(ctx: FrameContext, reading: GestureReading):
    """
    Advance the interaction state machine by one classifier reading.

    Transitions, in order:
        - TWO_HAND_ZOOM only changes the view scale
        - outside the menu, PINCH extends the active stroke and any other
          gesture finalizes it; OPEN_PALM then opens the menu (latched,
          further OPEN_PALM frames change nothing)
        - V_SIGN dissolves the drawing in every state
        - while the menu is open, a single hand's index tip is the cursor
    """
    gesture = reading.gesture

    if gesture != ctx.gesture:
        logger.debug("Gesture %s -> %s", ctx.gesture.name, gesture.name)
    ctx.gesture = gesture

    if gesture == Gesture.TWO_HAND_ZOOM:
        if reading.zoom_delta is not None:
            ctx.view.zoom_by(reading.zoom_delta)
    elif not ctx.menu_open:
        if gesture == Gesture.PINCH and reading.pinch_point is not None:
            ctx.canvas.add_point(ctx.view.to_world(reading.pinch_point))
            ctx.mode = InteractionMode.DRAWING
        else:
            ctx.canvas.finalize(ctx.settings)
            ctx.mode = InteractionMode.IDLE

        if gesture == Gesture.OPEN_PALM:
            ctx.mode = InteractionMode.MENU_OPEN
            logger.info("Menu opened")

    if gesture == Gesture.V_SIGN:
        dissolve(ctx)

    if ctx.menu_open and reading.hand_count == 1:
        ctx.menu_cursor = reading.index_tip
    else:
        ctx.menu_cursor = None


def process_frame(
    ctx: FrameContext,
    hands: Sequence[LandmarkSet],
    width: int,
    height: int
) -> GestureReading:
    """
    Run the interaction core for one frame.

    Queued menu events are applied first, then the frame's hands are
    classified and the state machine advanced. A frame with no fresh
    landmarks should be passed as an empty ``hands`` sequence.

    Returns:
        The classifier reading for this frame
    """
    apply_menu_events(ctx)

    reading, ctx.previous_hand_distance = classify_hands(
        hands, width, height, ctx.previous_hand_distance, ctx.config.gesture
    )
    apply_gesture(ctx, reading)
    return reading

