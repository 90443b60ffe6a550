"""
Pixel sinks and the frame loop around the sweep.
"""
import functools
import logging
import os
from typing import Protocol

import numpy as np
import PIL.Image

from glasscast import constants
from glasscast.sweep import DEFAULT_SWEEP, sweep
from glasscast.tracing import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


class PixelSink(Protocol):
    """Surface the engine writes samples into. Coordinates are pre-checked."""

    def set_pixel(self, x: int, y: int, color) -> None:
        ...


class ImageSink:
    """
    RGBA numpy canvas.

    The march bound is inclusive, so samples can land on column `width` and
    row `height`; the buffer has one spare column and row which are cropped
    on export.
    """

    def __init__(self, width, height, background=constants.BACKGROUND_COLOR):
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas must have positive size, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._buffer = np.empty((self.height + 1, self.width + 1, 4), dtype=np.uint8)
        self._buffer[:] = np.asarray(background, dtype=np.uint8)

    @property
    def canvas_size(self):
        return (self.width, self.height)

    def set_pixel(self, x: int, y: int, color) -> None:
        self._buffer[y, x] = color

    def set_pixels(self, xs, ys, colors):
        """
        Write a batch of samples in order; the last write to a pixel wins.
        """
        xs = np.asarray(xs)
        ys = np.asarray(ys)
        colors = np.asarray(colors, dtype=np.uint8)

        # Fancy-index assignment does not define an order for duplicates,
        # so keep only the final occurrence of each pixel.
        flat = ys * (self.width + 1) + xs
        _, rev_idx = np.unique(flat[::-1], return_index=True)
        keep = len(flat) - 1 - rev_idx
        self._buffer[ys[keep], xs[keep]] = colors[keep]

    def to_array(self):
        """(height, width, 4) uint8 copy of the canvas."""
        return self._buffer[:self.height, :self.width].copy()

    def to_image(self):
        return PIL.Image.fromarray(self.to_array())


def save_frame(frame, path):
    """Save an RGBA frame (array or PIL image) as a PNG."""
    directory = os.path.dirname(os.fspath(path))
    if directory:
        os.makedirs(directory, exist_ok=True)
    image = frame if isinstance(frame, PIL.Image.Image) else PIL.Image.fromarray(frame)
    image.save(path)
    logger.info("Saved frame to %s", path)


class LightRenderer:
    """
    Renders full frames of a World, one sweep per light position.

    Frames are memoized per light position, so an unchanged light is not
    traced again.
    """

    def __init__(self, world, width=constants.DEFAULT_CANVAS_WIDTH,
                 height=constants.DEFAULT_CANVAS_HEIGHT, trace_settings=None,
                 sweep_settings=None, background=constants.BACKGROUND_COLOR):
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas must have positive size, got {width}x{height}")
        self.world = world
        self.width = int(width)
        self.height = int(height)
        self.trace_settings = trace_settings or DEFAULT_SETTINGS
        self.sweep_settings = sweep_settings or DEFAULT_SWEEP
        self.background = tuple(background)

    def resolve_position(self, light_position=None):
        """Position to trace from; a fixed light ignores the override."""
        if light_position is None:
            return self.world.light.position
        if self.world.light.fixed:
            logger.debug("Light is fixed; ignoring position %s", tuple(light_position))
            return self.world.light.position
        return light_position

    @functools.lru_cache(maxsize=32)
    def _render_cached(self, x, y):
        world = self.world.with_light_position((x, y))
        sink = ImageSink(self.width, self.height, self.background)
        sweep(world, sink, sink.canvas_size, self.trace_settings, self.sweep_settings)
        frame = sink.to_array()
        frame.setflags(write=False)
        return frame

    def render(self, light_position=None):
        """
        Render one frame.

        Args:
            light_position: optional (x, y) pixel position feeding a
                non-fixed light

        Returns:
            (height, width, 4) read-only uint8 RGBA array
        """
        x, y = self.resolve_position(light_position)
        return self._render_cached(float(x), float(y))

    def render_image(self, light_position=None):
        return PIL.Image.fromarray(self.render(light_position))
