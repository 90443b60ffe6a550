"""
Ray marching and occlusion attenuation.

A ray starts at the light and samples the scene at fixed steps. At each
sample a small probe decides whether the sample sits on a wall; if so the
wall's color is subtracted from the color the ray carries. The march ends
as soon as a sample leaves the canvas.
"""
import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from glasscast import constants
from glasscast.geometry import (
    FLOAT,
    intersect_lines_vectorized,
    point_segment_distance,
    probe_segment,
    segment_contains,
)
from glasscast.scene import Color

logger = logging.getLogger(__name__)

# Occlusion result for samples that touch no wall: subtracts nothing.
NO_OCCLUSION = Color(0, 0, 0, 0)


class ProbeMode(Enum):
    """How a sample point is tested against walls."""
    SEGMENT = "segment"    # X of two diagonal probe segments crossing the wall
    DISTANCE = "distance"  # point-to-segment distance below the probe width


@dataclass(frozen=True)
class TraceSettings:
    """
    Parameters of a single march.

    Attributes:
        step_size: distance between consecutive samples (canvas units)
        probe: ProbeMode used for the wall test
        probe_width: per-axis extent of the probe segments, or the distance
            threshold in DISTANCE mode
        max_steps: optional cap on emitted samples (None = until out of bounds)
    """
    step_size: float = constants.DEFAULT_STEP_SIZE
    probe: ProbeMode = ProbeMode.SEGMENT
    probe_width: float = constants.DEFAULT_PROBE_WIDTH
    max_steps: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "probe", ProbeMode(self.probe))
        if not self.step_size > 0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")
        if not self.probe_width > 0:
            raise ValueError(f"probe_width must be positive, got {self.probe_width}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps}")
        if self.step_size > self.probe_width:
            logger.warning("step_size %.3g exceeds probe_width %.3g; thin walls can be skipped",
                           self.step_size, self.probe_width)


DEFAULT_SETTINGS = TraceSettings()


def probe_hits(points, world, settings=DEFAULT_SETTINGS):
    """
    Test sample points against every wall of the world.

    Args:
        points: (S, 2) sample points
        world: World snapshot
        settings: TraceSettings selecting the probe

    Returns:
        (S, N) boolean matrix, True where sample s touches wall n
    """
    points = np.asarray(points, dtype=FLOAT).reshape(-1, 2)
    starts = world.wall_starts[None, :, :]
    ends = world.wall_ends[None, :, :]

    if settings.probe is ProbeMode.DISTANCE:
        distances = point_segment_distance(points[:, None, :], starts, ends)
        return distances < settings.probe_width

    # One of the two diagonals meets any wall line at 45 degrees or more,
    # so samples within probe_width / 2 of the line are always caught.
    hits = np.zeros((len(points), len(world.walls)), dtype=bool)
    tol = constants.CONTAINMENT_TOLERANCE
    for anti in (False, True):
        p_start, p_end = probe_segment(points, settings.probe_width, anti=anti)
        p_start = p_start[:, None, :]
        p_end = p_end[:, None, :]

        hit_points, valid_mask = intersect_lines_vectorized(p_start, p_end, starts, ends)
        on_probe = segment_contains(hit_points, p_start, p_end, tol)
        on_wall = segment_contains(hit_points, starts, ends, tol)
        hits |= valid_mask & on_probe & on_wall
    return hits


def _occlusion_arrays(points, world, settings):
    """(S, 4) int32 occlusion colors, first wall in collection order per sample."""
    occlusion = np.zeros((len(points), 4), dtype=np.int32)
    if not world.walls or len(points) == 0:
        return occlusion

    hits = probe_hits(points, world, settings)
    any_hit = hits.any(axis=1)
    first = hits.argmax(axis=1)
    occlusion[any_hit] = world.wall_colors[first[any_hit]]
    return occlusion


def occlusion_color(point, world, settings=DEFAULT_SETTINGS):
    """
    Color of the first wall (in collection order) under the sample point.

    Returns NO_OCCLUSION when no wall is touched.
    """
    occlusion = _occlusion_arrays(np.asarray(point, dtype=FLOAT).reshape(1, 2), world, settings)[0]
    if not occlusion.any():
        return NO_OCCLUSION
    return Color.from_array(occlusion)


def attenuate(color, occlusion):
    """Subtract the occlusion channels from the ray color; alpha becomes opaque."""
    channels = np.asarray(color, dtype=np.int32) - np.asarray(occlusion, dtype=np.int32)
    channels = np.clip(channels, constants.CHANNEL_MIN, constants.CHANNEL_MAX)
    channels[3] = constants.OPAQUE
    return Color.from_array(channels)


def in_bounds(pixels, canvas_size):
    """Inclusive [0, width] x [0, height] test for (..., 2) pixels."""
    pixels = np.asarray(pixels, dtype=FLOAT)
    upper = np.asarray(canvas_size, dtype=FLOAT)
    return np.all((pixels >= 0.0) & (pixels <= upper), axis=-1)


def _check_direction(direction):
    direction = np.asarray(direction, dtype=FLOAT)
    if direction.shape != (2,):
        raise ValueError(f"direction must be a 2D vector, got shape {direction.shape}")
    if not np.all(np.isfinite(direction)) or not np.any(direction):
        raise ValueError(f"direction must be a finite non-zero vector, got {direction}")
    return direction


def trace_ray(origin, direction, canvas_size, color, world, settings=DEFAULT_SETTINGS):
    """
    March one ray from `origin` along `direction`.

    Sample i sits at origin + direction * (i * step_size). Each sample is
    probed against the walls, the carried color is attenuated, and the
    (pixel, color) pair is yielded. Every step that touches a wall
    attenuates again; a ray lingering inside a wall's probe width is
    darkened once per sample.

    Args:
        origin: (2,) start of the ray (the light position)
        direction: (2,) non-zero direction, normally a unit vector
        canvas_size: (width, height) inclusive bound of the march
        color: starting Color carried by the ray
        world: World snapshot
        settings: TraceSettings

    Yields:
        tuple: (pixel (2,) float32, Color)
    """
    origin = np.asarray(origin, dtype=FLOAT)
    direction = _check_direction(direction)
    step = FLOAT(settings.step_size)
    current = Color(*color)

    i = 0
    while settings.max_steps is None or i < settings.max_steps:
        pixel = origin + direction * (FLOAT(i) * step)
        if not in_bounds(pixel, canvas_size):
            return
        current = attenuate(current, occlusion_color(pixel, world, settings))
        yield pixel, current
        i += 1


def _sample_count(direction, canvas_size, settings):
    width, height = canvas_size
    travel = np.hypot(width, height) / (settings.step_size * float(np.linalg.norm(direction)))
    n = int(np.ceil(travel)) + 2
    if settings.max_steps is not None:
        n = min(n, settings.max_steps)
    return n


def trace_ray_arrays(origin, direction, canvas_size, color, world, settings=DEFAULT_SETTINGS):
    """
    Vectorized march producing the same samples as trace_ray.

    Occlusion colors are non-negative, so clamping after each subtraction
    equals clamping the running total once: color_i = clip(base - sum(occ[:i+1])).

    Returns:
        tuple: (pixels (S, 2) float32, colors (S, 4) uint8)
    """
    origin = np.asarray(origin, dtype=FLOAT)
    direction = _check_direction(direction)

    n = _sample_count(direction, canvas_size, settings)
    magnitudes = np.arange(n, dtype=FLOAT) * FLOAT(settings.step_size)
    pixels = origin[None, :] + direction[None, :] * magnitudes[:, None]

    outside = ~in_bounds(pixels, canvas_size)
    if np.any(outside):
        pixels = pixels[:np.argmax(outside)]

    occlusion = _occlusion_arrays(pixels, world, settings)
    base = np.asarray(color, dtype=np.int32)
    colors = np.clip(base[None, :] - np.cumsum(occlusion, axis=0),
                     constants.CHANNEL_MIN, constants.CHANNEL_MAX)
    colors[:, 3] = constants.OPAQUE
    return pixels, colors.astype(np.uint8)


def cast_ray(origin, direction, canvas_size, color, world, sink, settings=DEFAULT_SETTINGS):
    """
    March one ray and write every sample to a pixel sink.

    Returns:
        Color: the color carried past the last sample (the input color if
        nothing was emitted)
    """
    current = Color(*color)
    for pixel, current in trace_ray(origin, direction, canvas_size, color, world, settings):
        sink.set_pixel(int(np.floor(pixel[0])), int(np.floor(pixel[1])), current)
    return current
