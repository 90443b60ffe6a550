"""
Scene model for glasscast: walls, the light, and the World snapshot.

Raw color tuples are resolved into Color values once, when the scene is
built. A World never changes after construction; moving the light produces
a new snapshot.
"""
import json
import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import NamedTuple

import numpy as np

from glasscast import constants
from glasscast.geometry import FLOAT, point_segment_distance, vec2

logger = logging.getLogger(__name__)


class SceneFormatError(ValueError):
    """Raised when a scene document cannot be turned into a World."""


class Color(NamedTuple):
    """8-bit RGBA color."""
    r: int
    g: int
    b: int
    a: int = constants.OPAQUE

    @classmethod
    def from_raw(cls, values):
        """
        Resolve a raw (r, g, b[, a]) tuple into a clamped Color.

        Floats are rounded, every channel is clamped to [0, 255] and a
        missing alpha defaults to fully opaque.
        """
        try:
            channels = [float(v) for v in values]
        except (TypeError, ValueError) as exc:
            raise SceneFormatError(f"color must be a sequence of numbers, got {values!r}") from exc

        if len(channels) not in (3, 4):
            raise SceneFormatError(f"color needs 3 or 4 channels, got {len(channels)}")
        if not all(math.isfinite(c) for c in channels):
            raise SceneFormatError(f"color channels must be finite, got {values!r}")
        if len(channels) == 3:
            channels.append(constants.OPAQUE)

        clamped = np.clip(np.rint(channels), constants.CHANNEL_MIN, constants.CHANNEL_MAX)
        return cls(*(int(c) for c in clamped))

    @classmethod
    def from_array(cls, array):
        return cls(*(int(c) for c in array))


def _as_point(value, name):
    v = np.asarray(value, dtype=FLOAT)
    if v.shape != (2,):
        raise ValueError(f"{name} must be a 2D point, got shape {v.shape}")
    if not np.all(np.isfinite(v)):
        raise ValueError(f"{name} must be finite, got {value!r}")
    v = v.copy()
    v.setflags(write=False)
    return v


@dataclass(frozen=True, eq=False)
class Wall:
    """
    Line-segment occluder.

    Attributes:
        start: (2,) segment start in pixel space
        end: (2,) segment end in pixel space
        color: channels removed from any ray crossing the wall
    """
    start: np.ndarray
    end: np.ndarray
    color: Color

    def __post_init__(self):
        object.__setattr__(self, "start", _as_point(self.start, "start"))
        object.__setattr__(self, "end", _as_point(self.end, "end"))
        if not isinstance(self.color, Color):
            object.__setattr__(self, "color", Color.from_raw(self.color))


@dataclass(frozen=True, eq=False)
class Light:
    """
    Point light source.

    Attributes:
        position: (2,) emission origin in pixel space
        color: base color of every ray
        fixed: when False, an input feed may move the light between sweeps
    """
    position: np.ndarray
    color: Color
    fixed: bool = True

    def __post_init__(self):
        object.__setattr__(self, "position", _as_point(self.position, "position"))
        if not isinstance(self.color, Color):
            object.__setattr__(self, "color", Color.from_raw(self.color))


@dataclass(frozen=True, eq=False)
class World:
    """
    Immutable snapshot of the walls and the light for one trace pass.

    Wall data is also packed into arrays so probes can be tested against
    every wall in a single vectorized call:
        wall_starts: (N, 2) float32
        wall_ends: (N, 2) float32
        wall_colors: (N, 4) int16
    """
    walls: tuple
    light: Light
    wall_starts: np.ndarray = field(init=False, repr=False, compare=False)
    wall_ends: np.ndarray = field(init=False, repr=False, compare=False)
    wall_colors: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        walls = tuple(self.walls)
        object.__setattr__(self, "walls", walls)

        if walls:
            starts = np.stack([w.start for w in walls]).astype(FLOAT)
            ends = np.stack([w.end for w in walls]).astype(FLOAT)
            colors = np.array([w.color for w in walls], dtype=np.int16)
        else:
            starts = np.zeros((0, 2), dtype=FLOAT)
            ends = np.zeros((0, 2), dtype=FLOAT)
            colors = np.zeros((0, 4), dtype=np.int16)

        for arr in (starts, ends, colors):
            arr.setflags(write=False)
        object.__setattr__(self, "wall_starts", starts)
        object.__setattr__(self, "wall_ends", ends)
        object.__setattr__(self, "wall_colors", colors)

    def with_light_position(self, position):
        """New snapshot with the light moved to `position`."""
        return replace(self, light=replace(self.light, position=position))

    def nearest_first(self):
        """New snapshot with walls ordered by distance from the light."""
        if not self.walls:
            return self
        distances = point_segment_distance(self.light.position, self.wall_starts, self.wall_ends)
        order = np.argsort(distances, kind="stable")
        return replace(self, walls=tuple(self.walls[i] for i in order))


def _require(mapping, key, where):
    if not isinstance(mapping, dict):
        raise SceneFormatError(f"{where} must be an object, got {type(mapping).__name__}")
    if key not in mapping:
        raise SceneFormatError(f"{where} is missing '{key}'")
    return mapping[key]


def _parse_point(data, where):
    x = _require(data, "x", where)
    y = _require(data, "y", where)
    for name, value in (("x", x), ("y", y)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise SceneFormatError(f"{where}.{name} must be a finite number, got {value!r}")
    return vec2(x, y)


def _parse_color(data, where):
    if isinstance(data, (str, bytes, dict)):
        raise SceneFormatError(f"{where} must be a list of channels, got {data!r}")
    try:
        return Color.from_raw(data)
    except SceneFormatError as exc:
        raise SceneFormatError(f"{where}: {exc}") from exc


def world_from_dict(data):
    """
    Build a World from a decoded scene document.

    Expected shape:
        {"walls": [{"color": [r, g, b, a], "start": {"x", "y"}, "end": {"x", "y"}}],
         "light": {"fixed": bool, "color": [r, g, b, a], "position": {"x", "y"}}}

    Raises:
        SceneFormatError: on any structural problem; no partial World is built
    """
    raw_walls = _require(data, "walls", "scene")
    raw_light = _require(data, "light", "scene")
    if not isinstance(raw_walls, list):
        raise SceneFormatError(f"scene.walls must be a list, got {type(raw_walls).__name__}")

    walls = []
    for i, raw in enumerate(raw_walls):
        where = f"walls[{i}]"
        walls.append(Wall(
            start=_parse_point(_require(raw, "start", where), f"{where}.start"),
            end=_parse_point(_require(raw, "end", where), f"{where}.end"),
            color=_parse_color(_require(raw, "color", where), f"{where}.color"),
        ))

    fixed = _require(raw_light, "fixed", "light")
    if not isinstance(fixed, bool):
        raise SceneFormatError(f"light.fixed must be a boolean, got {fixed!r}")
    light = Light(
        position=_parse_point(_require(raw_light, "position", "light"), "light.position"),
        color=_parse_color(_require(raw_light, "color", "light"), "light.color"),
        fixed=fixed,
    )
    return World(walls=tuple(walls), light=light)


def load_world(path):
    """Read and validate a JSON scene file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SceneFormatError(f"cannot read scene file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SceneFormatError(f"{path} is not valid JSON: {exc}") from exc

    world = world_from_dict(data)
    logger.info("Loaded %s: %d walls, light at (%.1f, %.1f)",
                path, len(world.walls), *world.light.position)
    return world
