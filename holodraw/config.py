"""
Config Module - Application Settings
====================================
Dataclass settings for every subsystem. Defaults reproduce the tuned
behaviour of the drawing surface; ``AppConfig.from_env`` lets a ``.env``
file or the shell override the capture and tracking parameters.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


ENV_PREFIX = "HOLODRAW_"


class Tool(Enum):
    """Drawing tools selectable from the menu."""
    PEN = "pen"
    ERASER = "eraser"


class NeonPalette:
    """Menu color palette (BGR)."""

    CYAN = (255, 255, 0)
    PINK = (85, 0, 255)
    NEON_GREEN = (20, 255, 57)
    YELLOW = (0, 255, 255)
    WHITE = (255, 255, 255)

    @classmethod
    def get_all(cls) -> Tuple[Tuple[int, int, int], ...]:
        """Get all palette colors in menu order."""
        return (cls.CYAN, cls.PINK, cls.NEON_GREEN, cls.YELLOW, cls.WHITE)


BRUSH_SIZES = (2, 6, 12, 24)


@dataclass
class DrawingSettings:
    """Current brush settings, copied into each stroke when it is finalized."""
    color: Tuple[int, int, int] = NeonPalette.CYAN
    size: int = 6
    tool: Tool = Tool.PEN

    def merged(self, **updates) -> "DrawingSettings":
        """Return a copy with the given fields replaced; unknown keys are ignored."""
        values = {
            'color': self.color,
            'size': self.size,
            'tool': self.tool,
        }
        for key, value in updates.items():
            if key in values and value is not None:
                values[key] = value
        return DrawingSettings(**values)


@dataclass
class GestureConfig:
    """Single-frame classifier thresholds, in screen pixels."""
    pinch_threshold: float = 40.0
    v_sign_spread: float = 40.0
    open_palm_reach: float = 100.0
    extension_ratio: float = 0.8
    zoom_speed: float = 0.005


@dataclass
class ViewConfig:
    min_scale: float = 0.5
    max_scale: float = 3.0


@dataclass
class ParticleConfig:
    gravity: float = 0.05
    decay: float = 0.01
    sample_stride: int = 2


@dataclass
class DwellConfig:
    dwell_time: float = 0.8   # Seconds of continuous hover before selecting
    pulse_time: float = 0.2   # Seconds the confirmation pulse stays visible


@dataclass
class CameraConfig:
    camera_id: int = 0
    width: int = 1280
    height: int = 720
    fps: int = 30


@dataclass
class TrackerConfig:
    max_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    model_path: Optional[Path] = None


@dataclass
class AppConfig:
    """Top-level configuration bundle."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    gesture: GestureConfig = field(default_factory=GestureConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    dwell: DwellConfig = field(default_factory=DwellConfig)
    drawing: DrawingSettings = field(default_factory=DrawingSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Build a config from ``HOLODRAW_*`` environment variables.

        Invalid values are logged and the default is kept.

        Recognized variables:
            HOLODRAW_CAMERA, HOLODRAW_WIDTH, HOLODRAW_HEIGHT, HOLODRAW_FPS,
            HOLODRAW_MODEL_PATH, HOLODRAW_MIN_DETECTION_CONFIDENCE,
            HOLODRAW_MIN_TRACKING_CONFIDENCE, HOLODRAW_DWELL_TIME
        """
        env = os.environ if environ is None else environ
        config = cls()

        config.camera.camera_id = _read(env, "CAMERA", int, config.camera.camera_id)
        config.camera.width = _read(env, "WIDTH", int, config.camera.width)
        config.camera.height = _read(env, "HEIGHT", int, config.camera.height)
        config.camera.fps = _read(env, "FPS", int, config.camera.fps)

        config.tracker.min_detection_confidence = _read(
            env, "MIN_DETECTION_CONFIDENCE", float,
            config.tracker.min_detection_confidence
        )
        config.tracker.min_tracking_confidence = _read(
            env, "MIN_TRACKING_CONFIDENCE", float,
            config.tracker.min_tracking_confidence
        )
        model_path = env.get(ENV_PREFIX + "MODEL_PATH")
        if model_path:
            config.tracker.model_path = Path(model_path)

        config.dwell.dwell_time = _read(env, "DWELL_TIME", float, config.dwell.dwell_time)
        return config


def _read(env: Mapping[str, str], name: str, cast, default):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s%s=%r, using %r", ENV_PREFIX, name, raw, default)
        return default
