"""
Angular sweep: one march per integer-degree direction around the light.
"""
import logging
import time
from dataclasses import dataclass

import numpy as np

from glasscast import constants
from glasscast.geometry import direction_from_degrees
from glasscast.scene import Color
from glasscast.tracing import DEFAULT_SETTINGS, trace_ray_arrays

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepSettings:
    """
    Angular partition of a sweep.

    Angles are integer degrees in [angle_start, angle_stop) visited in
    ascending order; later rays overwrite earlier ones on shared pixels.
    """
    angle_start: int = constants.DEFAULT_ANGLE_START
    angle_stop: int = constants.DEFAULT_ANGLE_STOP
    angle_step: int = constants.DEFAULT_ANGLE_STEP
    nearest_wall_first: bool = False

    def __post_init__(self):
        for name in ("angle_start", "angle_stop", "angle_step"):
            value = getattr(self, name)
            if isinstance(value, bool) or int(value) != value:
                raise ValueError(f"{name} must be an integer number of degrees, got {value!r}")
            object.__setattr__(self, name, int(value))
        if self.angle_step <= 0:
            raise ValueError(f"angle_step must be positive, got {self.angle_step}")
        if self.angle_stop < self.angle_start:
            raise ValueError(f"angle_stop ({self.angle_stop}) is before angle_start ({self.angle_start})")


DEFAULT_SWEEP = SweepSettings()


def sweep_angles(settings=DEFAULT_SWEEP):
    """Ascending integer angles (degrees) visited by a sweep."""
    return np.arange(settings.angle_start, settings.angle_stop, settings.angle_step)


def sweep(world, sink, canvas_size, trace_settings=DEFAULT_SETTINGS,
          sweep_settings=DEFAULT_SWEEP, color=None):
    """
    Trace every direction of the sweep from the current light and write the
    samples to `sink`.

    Each direction starts from `color` (the light's own color by default)
    and is traced to completion independently.

    Args:
        world: World snapshot (read only)
        sink: object with set_pixel(x, y, color); a set_pixels(xs, ys, colors)
            method is used when present
        canvas_size: (width, height) bound of every march
        trace_settings: TraceSettings for each march
        sweep_settings: SweepSettings selecting the directions
        color: starting color, defaults to world.light.color

    Returns:
        int: number of samples written
    """
    if sweep_settings.nearest_wall_first:
        world = world.nearest_first()
    color = world.light.color if color is None else Color(*color)
    origin = world.light.position

    angles = sweep_angles(sweep_settings)
    directions = direction_from_degrees(angles)
    batched = hasattr(sink, "set_pixels")

    t0 = time.perf_counter()
    written = 0
    for direction in directions:
        pixels, colors = trace_ray_arrays(origin, direction, canvas_size, color, world, trace_settings)
        if len(pixels) == 0:
            continue
        coords = np.floor(pixels).astype(np.int64)
        if batched:
            sink.set_pixels(coords[:, 0], coords[:, 1], colors)
        else:
            for (x, y), c in zip(coords, colors):
                sink.set_pixel(int(x), int(y), Color.from_array(c))
        written += len(pixels)

    logger.debug("Swept %d directions from (%.1f, %.1f): %d samples against %d walls in %.3fs",
                 len(angles), origin[0], origin[1], written, len(world.walls),
                 time.perf_counter() - t0)
    return written
