"""
Pytest fixtures and helpers for glasscast tests.
"""
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from glasscast.scene import Color, Light, Wall, World

WHITE = Color(255, 255, 255, 255)


def make_world(walls=(), position=(0.0, 0.0), color=WHITE, fixed=True):
    """World from (start, end, color) tuples."""
    return World(
        walls=tuple(Wall(start=s, end=e, color=c) for s, e, c in walls),
        light=Light(position=position, color=color, fixed=fixed),
    )


class RecordingSink:
    """Pixel sink that remembers every write in order."""

    def __init__(self):
        self.writes = []

    def set_pixel(self, x, y, color):
        self.writes.append((x, y, tuple(color)))


@pytest.fixture
def empty_world():
    return make_world()


@pytest.fixture
def single_wall_world():
    """Light at the origin, red-absorbing wall across the x axis at x=5."""
    return make_world([((5.0, -5.0), (5.0, 5.0), (100, 0, 0, 255))])


@pytest.fixture
def scene_dict():
    return {
        "walls": [
            {"color": [120, 0, 0, 255], "start": {"x": 20, "y": 5}, "end": {"x": 20, "y": 35}},
            {"color": [0, 90, 140], "start": {"x": 5, "y": 30}, "end": {"x": 35, "y": 30}},
        ],
        "light": {"fixed": False, "color": [255, 255, 255, 255], "position": {"x": 10, "y": 15}},
    }


@pytest.fixture
def canvas_size():
    return (10, 10)


def assert_colors_valid(colors):
    """Every channel in [0, 255] and alpha fully opaque."""
    colors = np.asarray(colors)
    assert np.all(colors >= 0) and np.all(colors <= 255), f"Channel out of range: {colors}"
    assert np.all(colors[:, 3] == 255), f"Alpha not opaque: {colors[:, 3]}"
