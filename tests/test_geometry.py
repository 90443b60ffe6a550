import numpy as np
import pytest

from glasscast.geometry import (
    direction_from_degrees,
    intersect_lines,
    intersect_lines_vectorized,
    line_coefficients,
    point_segment_distance,
    probe_segment,
    segment_contains,
    vec2,
)


def _on_line(point, start, end):
    a, b, c = line_coefficients(start, end)
    return a * point[0] + b * point[1] == pytest.approx(c, abs=1e-3)


def test_line_coefficients():
    a, b, c = line_coefficients((1.0, 2.0), (4.0, 6.0))
    assert (a, b) == (4.0, -3.0)
    assert c == pytest.approx(4.0 * 1.0 - 3.0 * 2.0)


@pytest.mark.parametrize("seg_a, seg_b", [
    (((0, 0), (10, 0)), ((5, -5), (5, 5))),
    (((0, 0), (1, 1)), ((0, 4), (4, 0))),
    (((-3, 2), (7, 5)), ((1, -8), (2, 9))),
    # Lines cross outside both segments; still reported.
    (((0, 0), (1, 0)), ((10, 1), (10, 2))),
])
def test_non_parallel_lines_intersect_on_both(seg_a, seg_b):
    point = intersect_lines(*seg_a, *seg_b)
    assert point is not None
    assert point.dtype == np.float32
    assert _on_line(point, *seg_a)
    assert _on_line(point, *seg_b)


@pytest.mark.parametrize("seg_a, seg_b", [
    (((0, 0), (10, 0)), ((0, 5), (10, 5))),      # parallel
    (((0, 0), (10, 0)), ((10, 5), (0, 5))),      # anti-parallel
    (((0, 0), (10, 0)), ((2, 0), (8, 0))),       # collinear overlap
    (((1, 1), (4, 4)), ((1, 1), (4, 4))),        # identical
])
def test_parallel_lines_do_not_intersect(seg_a, seg_b):
    assert intersect_lines(*seg_a, *seg_b) is None


def test_vectorized_intersection_broadcasts():
    probes_start = np.array([[0, 0], [0, 1]], dtype=np.float32)[:, None, :]
    probes_end = np.array([[10, 0], [10, 1]], dtype=np.float32)[:, None, :]
    walls_start = np.array([[5, -5], [0, 3]], dtype=np.float32)[None, :, :]
    walls_end = np.array([[5, 5], [10, 3]], dtype=np.float32)[None, :, :]

    points, valid = intersect_lines_vectorized(probes_start, probes_end, walls_start, walls_end)

    assert points.shape == (2, 2, 2)
    np.testing.assert_array_equal(valid, [[True, False], [True, False]])
    np.testing.assert_allclose(points[0, 0], [5, 0])
    np.testing.assert_allclose(points[1, 0], [5, 1])
    assert np.all(np.isnan(points[:, 1]))


def test_segment_contains_is_inclusive():
    starts = np.array([[0, 0]], dtype=np.float32)
    ends = np.array([[10, 0]], dtype=np.float32)
    points = np.array([[0, 0], [10, 0], [5, 0], [10.5, 0], [np.nan, 0]], dtype=np.float32)
    np.testing.assert_array_equal(segment_contains(points, starts, ends),
                                  [True, True, True, False, False])
    assert segment_contains(np.array([10.00005, 0], dtype=np.float32), starts[0], ends[0], tol=1e-4)


def test_point_segment_distance():
    starts = np.array([[0, 0], [0, 0]], dtype=np.float32)
    ends = np.array([[10, 0], [0, 0]], dtype=np.float32)
    d = point_segment_distance(np.array([5, 3], dtype=np.float32), starts, ends)
    np.testing.assert_allclose(d, [3.0, np.hypot(5, 3)], rtol=1e-6)
    # Beyond the end: distance to the endpoint
    d_end = point_segment_distance(np.array([13, 4], dtype=np.float32), starts[0], ends[0])
    assert d_end == pytest.approx(5.0)


def test_probe_segment_diagonals():
    start, end = probe_segment(vec2(5, 0), 1.0)
    np.testing.assert_allclose(start, [4.5, -0.5])
    np.testing.assert_allclose(end, [5.5, 0.5])
    start, end = probe_segment(vec2(5, 0), 1.0, anti=True)
    np.testing.assert_allclose(start, [4.5, 0.5])
    np.testing.assert_allclose(end, [5.5, -0.5])


def test_direction_from_degrees_unit_vectors():
    dirs = direction_from_degrees([0, 90, 180, 270, 45])
    assert dirs.dtype == np.float32
    np.testing.assert_allclose(np.linalg.norm(dirs, axis=1), 1.0, rtol=1e-6)
    np.testing.assert_allclose(dirs[0], [1, 0], atol=1e-7)
    np.testing.assert_allclose(dirs[1], [0, 1], atol=1e-7)
    np.testing.assert_allclose(dirs[2], [-1, 0], atol=1e-7)


def test_vec2_is_read_only():
    v = vec2(1, 2)
    with pytest.raises(ValueError):
        v[0] = 3
