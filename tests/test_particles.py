import random

import numpy as np
import pytest

from holodraw.config import NeonPalette, ParticleConfig
from holodraw.geometry import Point
from holodraw.particles import ParticleSystem, sampled_count
from holodraw.viewport import ViewTransform


def line(n):
    return [Point(float(i), 0.0) for i in range(n)]


@pytest.fixture
def system():
    return ParticleSystem(rng=random.Random(3))


@pytest.mark.parametrize("n, expected", [(1, 1), (2, 1), (5, 3), (10, 5)])
def test_spawn_samples_every_other_point(system, n, expected):
    assert system.spawn(line(n), NeonPalette.CYAN, 6, ViewTransform()) == expected
    assert len(system) == expected


def test_sampled_count():
    assert sampled_count([5, 10, 1]) == 3 + 5 + 1
    assert sampled_count([]) == 0


def test_spawn_uses_screen_space_and_ranges(system):
    view = ViewTransform(scale=2.0)
    system.spawn([Point(10, 20), Point(11, 20), Point(30, 40)], NeonPalette.PINK, 6, view)

    first, second = system.particles
    assert (first.x, first.y) == (20, 40)
    assert (second.x, second.y) == (60, 80)
    for p in system.particles:
        assert -1 <= p.vx <= 1
        assert 1 <= p.vy <= 3
        assert 1 <= p.size <= 7
        assert p.color == NeonPalette.PINK
        assert p.life == 1.0


def test_tick_physics(system):
    system.spawn([Point(0, 0)], NeonPalette.CYAN, 6, ViewTransform())
    p = system.particles[0]
    x, y, vx, vy = p.x, p.y, p.vx, p.vy

    system.tick()
    assert p.x == pytest.approx(x + vx)
    assert p.y == pytest.approx(y + vy)
    assert p.vy == pytest.approx(vy + 0.05)
    assert p.life == pytest.approx(0.99)


def test_particle_dies_after_exactly_100_ticks(system):
    system.spawn([Point(0, 0)], NeonPalette.CYAN, 6, ViewTransform())
    for _ in range(99):
        system.tick()
    assert len(system) == 1
    assert system.particles[0].life == pytest.approx(0.01)

    system.tick()
    assert len(system) == 0


def test_custom_decay():
    system = ParticleSystem(ParticleConfig(decay=0.25), rng=random.Random(1))
    system.spawn(line(3), NeonPalette.WHITE, 2, ViewTransform())
    for _ in range(3):
        system.tick()
    assert len(system) == 2
    system.tick()
    assert len(system) == 0


class FixedRandom:
    def random(self):
        return 0.5


def test_render_uses_life_as_alpha():
    system = ParticleSystem(rng=FixedRandom())
    layer = np.zeros((300, 300, 4), dtype=np.uint8)
    system.spawn([Point(50, 20)], (0, 0, 255), 20, ViewTransform())
    for _ in range(50):
        system.tick()

    p = system.particles[0]
    assert p.life == 0.5
    assert p.x == 50
    assert p.y == pytest.approx(181.25)

    system.render(layer)
    assert layer[181, 50, 3] == 128
    assert tuple(layer[181, 50, :3]) == (0, 0, 255)
