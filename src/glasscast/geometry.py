"""
2D geometry primitives for the glasscast light caster.

Points and directions are float32 numpy arrays. Every solver here accepts
broadcastable batches so a probe can be tested against all walls at once.
"""
import numpy as np

FLOAT = np.float32


def vec2(x, y):
    """Build a read-only float32 Vector2."""
    v = np.array([x, y], dtype=FLOAT)
    v.setflags(write=False)
    return v


def line_coefficients(start, end):
    """
    Coefficients of the line a*x + b*y = c through two points.

    Args:
        start, end: (..., 2) arrays of segment endpoints

    Returns:
        tuple: (a, b, c) arrays with the leading shape of the inputs
    """
    start = np.asarray(start, dtype=FLOAT)
    end = np.asarray(end, dtype=FLOAT)
    x1, y1 = start[..., 0], start[..., 1]
    x2, y2 = end[..., 0], end[..., 1]

    a = y2 - y1
    b = x1 - x2
    c = a * x1 + b * y1
    return a, b, c


def intersect_lines_vectorized(a_start, a_end, b_start, b_end):
    """
    Intersection of the infinite lines through two (batches of) segments.

    Inputs broadcast against each other, e.g. probes of shape (S, 1, 2)
    against walls of shape (1, N, 2) give an (S, N) result.

    Returns:
        tuple: (points, valid_mask) where points is (..., 2) and valid_mask
        is False where the lines are parallel (delta exactly 0)
    """
    a1, b1, c1 = line_coefficients(a_start, a_end)
    a2, b2, c2 = line_coefficients(b_start, b_end)

    delta = a1 * b2 - a2 * b1
    valid_mask = delta != 0.0

    # Parallel lines get a dummy divisor; their points are NaN'd below.
    safe_delta = np.where(valid_mask, delta, FLOAT(1.0))
    x = (b2 * c1 - b1 * c2) / safe_delta
    y = (a1 * c2 - a2 * c1) / safe_delta

    points = np.stack([x, y], axis=-1).astype(FLOAT)
    points[~valid_mask] = np.nan
    return points, valid_mask


def intersect_lines(a_start, a_end, b_start, b_end):
    """
    Intersection point of the infinite lines through segments A and B.

    Returns None for parallel, anti-parallel and collinear segments; the
    parallel test is an exact comparison against zero.
    """
    points, valid_mask = intersect_lines_vectorized(a_start, a_end, b_start, b_end)
    if not valid_mask:
        return None
    return points


def segment_contains(points, starts, ends, tol=0.0):
    """
    Check that points lie inside the bounding boxes of their segments.

    For a point already known to be on the segment's line this is
    equivalent to lying on the segment itself. Bounds are inclusive and
    widened by `tol`. NaN points are never contained.
    """
    points = np.asarray(points, dtype=FLOAT)
    starts = np.asarray(starts, dtype=FLOAT)
    ends = np.asarray(ends, dtype=FLOAT)

    lo = np.minimum(starts, ends) - tol
    hi = np.maximum(starts, ends) + tol
    inside = (points >= lo) & (points <= hi)
    return np.all(inside, axis=-1)


def point_segment_distance(points, starts, ends):
    """
    Euclidean distance from points to segments (broadcasting).

    Degenerate segments (start == end) fall back to point distance.
    """
    points = np.asarray(points, dtype=FLOAT)
    starts = np.asarray(starts, dtype=FLOAT)
    ends = np.asarray(ends, dtype=FLOAT)

    seg = ends - starts
    rel = points - starts
    seg_len_sq = np.sum(seg * seg, axis=-1)

    with np.errstate(divide='ignore', invalid='ignore'):
        t = np.where(seg_len_sq > 0.0, np.sum(rel * seg, axis=-1) / seg_len_sq, 0.0)
    t = np.clip(t, 0.0, 1.0).astype(FLOAT)

    closest = starts + t[..., None] * seg
    return np.linalg.norm(points - closest, axis=-1)


def probe_segment(points, width, anti=False):
    """
    Diagonal probe segment of the given per-axis extent centred on points.

    The main diagonal runs from P-(w/2, w/2) to P+(w/2, w/2); `anti` gives
    P+(-w/2, w/2) to P+(w/2, -w/2).

    Returns:
        tuple: (starts, ends) each shaped like `points`
    """
    points = np.asarray(points, dtype=FLOAT)
    half = FLOAT(width / 2.0)
    offset = np.array([half, -half if anti else half], dtype=FLOAT)
    return points - offset, points + offset


def direction_from_degrees(angles):
    """Unit (cos, sin) direction vectors for angles in degrees."""
    radians = np.deg2rad(np.asarray(angles, dtype=np.float64))
    return np.stack([np.cos(radians), np.sin(radians)], axis=-1).astype(FLOAT)
