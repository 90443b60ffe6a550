import numpy as np
import pytest

from glasscast.rendering import ImageSink
from glasscast.sweep import SweepSettings, sweep, sweep_angles
from glasscast.tracing import TraceSettings
from conftest import WHITE, RecordingSink, make_world


class SinglePixelSink:
    """Wraps an ImageSink but only exposes set_pixel."""

    def __init__(self, inner):
        self.inner = inner

    def set_pixel(self, x, y, color):
        self.inner.set_pixel(x, y, color)


def test_sweep_angles_ascending():
    np.testing.assert_array_equal(sweep_angles(SweepSettings(0, 180, 45)), [0, 45, 90, 135])
    assert len(sweep_angles()) == 360


@pytest.mark.parametrize("kwargs", [
    {"angle_step": 0},
    {"angle_step": 1.5},
    {"angle_start": 90, "angle_stop": 10},
])
def test_sweep_settings_validation(kwargs):
    with pytest.raises(ValueError):
        SweepSettings(**kwargs)


def test_sweep_visits_angles_in_order():
    world = make_world(position=(5.0, 5.0))
    sink = RecordingSink()

    written = sweep(world, sink, (10, 10), sweep_settings=SweepSettings(0, 360, 90))

    assert written == len(sink.writes)
    # Each ray starts at the light; rays are 6 samples long from the centre.
    assert written == 4 * 6
    starts = sink.writes[::6]
    assert all((x, y) == (5, 5) for x, y, _ in starts)
    ends = [sink.writes[i * 6 + 5][:2] for i in range(4)]
    assert ends == [(10, 5), (5, 10), (0, 5), (5, 0)]
    assert all(c == tuple(WHITE) for _, _, c in sink.writes)


def test_batched_and_per_pixel_sinks_agree():
    world = make_world([
        ((30.0, 5.0), (30.0, 45.0), (90, 0, 0, 255)),
        ((5.0, 40.0), (45.0, 40.0), (0, 60, 200, 255)),
        ((10.0, 10.0), (20.0, 30.0), (30, 30, 30, 255)),
    ], position=(20.0, 20.0))
    size = (50, 50)

    batched = ImageSink(*size)
    per_pixel = ImageSink(*size)
    sweep(world, batched, size)
    sweep(world, SinglePixelSink(per_pixel), size)

    np.testing.assert_array_equal(batched.to_array(), per_pixel.to_array())


def test_sweep_starts_from_given_color():
    world = make_world(position=(5.0, 5.0))
    sink = RecordingSink()
    sweep(world, sink, (10, 10), sweep_settings=SweepSettings(0, 1, 1), color=(10, 20, 30, 255))
    assert all(c == (10, 20, 30, 255) for _, _, c in sink.writes)


def test_sweep_nearest_wall_first():
    far = ((5.0, 4.0), (5.0, 10.0), (100, 0, 0, 255))
    near = ((0.0, 5.0), (10.0, 5.0), (0, 100, 0, 255))
    world = make_world([far, near], position=(2.0, 2.0))
    size = (10, 10)

    literal = RecordingSink()
    sweep(world, literal, size, sweep_settings=SweepSettings(45, 46, 1))
    nearest = RecordingSink()
    sweep(world, nearest, size, sweep_settings=SweepSettings(45, 46, 1, nearest_wall_first=True))

    # Both walls pass through (5, 5); the diagonal sample probing it lands in pixel (4, 4).
    assert (4, 4, (155, 255, 255, 255)) in literal.writes
    assert (4, 4, (255, 155, 255, 255)) in nearest.writes


def test_sweep_with_coarse_step_logs_warning(caplog):
    world = make_world(position=(5.0, 5.0))
    with caplog.at_level("DEBUG", logger="glasscast"):
        sweep(world, RecordingSink(), (10, 10), TraceSettings(step_size=1.5), SweepSettings(0, 10, 5))
    assert "thin walls" in caplog.text
    assert "Swept 2 directions" in caplog.text
