"""
Particles Module - Dissolve Effect
==================================
Turns stroke geometry into falling, fading particles. Particles live in
screen space: once spawned they no longer follow the view transform.
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import cv2
import numpy as np

from holodraw.config import ParticleConfig
from holodraw.geometry import Point
from holodraw.viewport import ViewTransform

logger = logging.getLogger(__name__)


@dataclass
class Particle:
    """A single dissolve particle (screen-space position)."""
    x: float
    y: float
    vx: float
    vy: float
    color: Tuple[int, int, int]
    size: float
    life: float = 1.0


class ParticleSystem:
    """
    Per-frame physics for dissolve particles.

    Particles are only created in bulk by ``spawn`` and only ever die; the
    live set shrinks tick by tick until it is empty.
    """

    def __init__(self, config: ParticleConfig = None, rng: random.Random = None):
        self.config = config or ParticleConfig()
        self.rng = rng or random.Random()
        self._particles: List[Particle] = []

    def __len__(self) -> int:
        return len(self._particles)

    @property
    def particles(self) -> Tuple[Particle, ...]:
        return tuple(self._particles)

    def spawn(
        self,
        points: Sequence[Point],
        color: Tuple[int, int, int],
        size: float,
        view: ViewTransform
    ) -> int:
        """
        Sample every ``sample_stride``-th world point into a particle.

        Args:
            points: World-space stroke points
            color: Stroke color
            size: Stroke width; particle radius is random up to this plus one
            view: Transform used to place particles on screen

        Returns:
            Number of particles created
        """
        created = 0
        for i, point in enumerate(points):
            if i % self.config.sample_stride != 0:
                continue
            screen = view.to_screen(point)
            self._particles.append(Particle(
                x=screen.x,
                y=screen.y,
                vx=(self.rng.random() - 0.5) * 2,
                vy=self.rng.random() * 2 + 1,
                color=color,
                size=self.rng.random() * size + 1,
                life=1.0
            ))
            created += 1
        return created

    def tick(self):
        """Advance every particle by one frame and drop the dead ones."""
        for p in self._particles:
            p.x += p.vx
            p.y += p.vy
            p.vy += self.config.gravity
            # Rounded so a particle spawned at 1.0 hits exactly 0 after 1/decay ticks
            p.life = round(p.life - self.config.decay, 9)

        before = len(self._particles)
        self._particles = [p for p in self._particles if p.life > 0]
        if before and not self._particles:
            logger.debug("Dissolve finished")

    def render(self, layer: np.ndarray):
        """Draw particles on a BGRA layer with opacity equal to their life."""
        for p in self._particles:
            alpha = int(round(max(0.0, min(1.0, p.life)) * 255))
            cv2.circle(
                layer,
                (int(round(p.x)), int(round(p.y))),
                max(1, int(round(p.size))),
                (*p.color, alpha),
                -1,
                cv2.LINE_AA
            )


def sampled_count(point_counts: Iterable[int], stride: int = 2) -> int:
    """Number of particles a dissolve produces for strokes of the given lengths."""
    return sum((n + stride - 1) // stride for n in point_counts)
