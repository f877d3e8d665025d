"""
Vector helpers for the point/path graph.

Positions are numpy float64 arrays of shape (3,). The world is a voxel
grid with y pointing up, so the horizontal plane is x/z and the
"2d" helpers below ignore the y component.
"""

import math
from numbers import Real
from typing import Optional, Tuple

import numpy as np

from ..exceptions import InvalidArgumentError

X, Y, Z = 0, 1, 2

# Below this length a direction vector is treated as degenerate
EPSILON = 1e-6


def as_position(value) -> np.ndarray:
    """
    Validate 'value' as a 3D coordinate and return a private copy.

    Accepts any sequence or array of three finite real numbers.

    Args:
        value: Candidate coordinate, e.g. (x, y, z) or np.array([x, y, z])

    Returns:
        New float64 array of shape (3,)

    Raises:
        InvalidArgumentError: If 'value' is not a well-formed coordinate
    """
    if isinstance(value, (str, bytes)):
        raise InvalidArgumentError(f"Position {value!r} is not a 3D coordinate")
    if not isinstance(value, np.ndarray):
        try:
            items = list(value)
        except TypeError as e:
            raise InvalidArgumentError(
                f"Position {value!r} is not a 3D coordinate"
            ) from e
        if any(isinstance(v, bool) or not isinstance(v, Real) for v in items):
            raise InvalidArgumentError(f"Position {value!r} is not a 3D coordinate")
        value = items
    try:
        position = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Position {value!r} is not a 3D coordinate") from e
    if position.shape != (3,) or not np.all(np.isfinite(position)):
        raise InvalidArgumentError(f"Position {value!r} is not a 3D coordinate")
    return position


def distance(a, b) -> float:
    """Euclidean distance between two positions."""
    return float(np.linalg.norm(np.asarray(b) - np.asarray(a)))


def normalize(v) -> np.ndarray:
    """Unit vector along 'v', or a zero vector if 'v' is degenerate."""
    v = np.asarray(v, dtype=np.float64)
    length = np.linalg.norm(v)
    if length < EPSILON:
        return np.zeros(3)
    return v / length


def angle_between(v1, v2) -> float:
    """
    Angle in radians between two 3D direction vectors.

    Returns 0 when either vector is degenerate, so coincident points
    count as collinear.
    """
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)
    len1 = np.linalg.norm(v1)
    len2 = np.linalg.norm(v2)
    if len1 < EPSILON or len2 < EPSILON:
        return 0.0
    cos_angle = np.clip(np.dot(v1, v2) / (len1 * len2), -1.0, 1.0)
    return float(np.arccos(cos_angle))


def dominant_horizontal_axis(v) -> int:
    """Index of the horizontal axis (X or Z) with the larger magnitude in 'v'.

    Ties go to X.
    """
    return X if abs(v[X]) >= abs(v[Z]) else Z


def flatten_xz(v) -> np.ndarray:
    """Project 'v' onto the horizontal plane."""
    return np.array([v[X], 0.0, v[Z]], dtype=np.float64)


def xz_dot(v1, v2) -> float:
    return float(v1[X] * v2[X] + v1[Z] * v2[Z])


def xz_length_sq(v) -> float:
    return xz_dot(v, v)


def xz_length(v) -> float:
    return math.sqrt(xz_length_sq(v))


def angle_between_2d(dir1, dir2) -> float:
    """Angle in radians between two directions projected onto the x/z plane."""
    return angle_between(flatten_xz(dir1), flatten_xz(dir2))


def segments_are_parallel(seg1_start, seg1_end, seg2_start, seg2_end,
                          threshold: float = math.pi / 6) -> bool:
    """
    Check if two segments are parallel in the horizontal plane.

    Segments pointing in opposite directions count as parallel too.

    Args:
        seg1_start, seg1_end: First segment
        seg2_start, seg2_end: Second segment
        threshold: Largest angle (radians) still considered parallel

    Returns:
        True if the angle is below 'threshold' or above pi - 'threshold'
    """
    dir1 = np.asarray(seg1_end) - np.asarray(seg1_start)
    dir2 = np.asarray(seg2_end) - np.asarray(seg2_start)
    angle = angle_between_2d(dir1, dir2)
    return angle < threshold or angle > (math.pi - threshold)


def direction_parallel_to_segment(direction, seg_start, seg_end,
                                  threshold: float = math.pi / 6) -> bool:
    """Check if 'direction' runs along the segment in the horizontal plane."""
    seg_dir = np.asarray(seg_end) - np.asarray(seg_start)
    angle = angle_between_2d(direction, seg_dir)
    return angle < threshold or angle > (math.pi - threshold)


def point_to_segment_distance(pos, seg_start, seg_end) -> Tuple[float, np.ndarray]:
    """
    Shortest distance from 'pos' to a segment.

    The closest point is found in the horizontal plane; the returned
    distance is measured in 3D to that point.

    Returns:
        Tuple of (distance, closest point on the segment)
    """
    pos = np.asarray(pos, dtype=np.float64)
    seg_start = np.asarray(seg_start, dtype=np.float64)
    seg_dir = np.asarray(seg_end, dtype=np.float64) - seg_start
    seg_len_sq = xz_length_sq(seg_dir)

    if seg_len_sq < EPSILON:
        return xz_length(pos - seg_start), seg_start.copy()

    t = xz_dot(pos - seg_start, seg_dir) / seg_len_sq
    t = max(0.0, min(1.0, t))
    closest = seg_start + seg_dir * t
    return distance(pos, closest), closest


def calculate_segment_intersection(
    seg1_start, seg1_end, seg2_start, seg2_end
) -> Optional[Tuple[np.ndarray, float, float]]:
    """
    Intersection of two segments in the horizontal plane.

    Touching near the segment ends (first and last 1% of either segment)
    does not count as an intersection. The y of the returned point is the
    mean of both segment starts.

    Returns:
        Tuple of (intersection, t1, t2) with t1/t2 the parameters along
        each segment, or None if the segments are parallel or disjoint
    """
    seg1_start = np.asarray(seg1_start, dtype=np.float64)
    seg2_start = np.asarray(seg2_start, dtype=np.float64)
    d1 = np.asarray(seg1_end, dtype=np.float64) - seg1_start
    d2 = np.asarray(seg2_end, dtype=np.float64) - seg2_start

    cross = d1[X] * d2[Z] - d1[Z] * d2[X]
    if abs(cross) < EPSILON:
        return None

    delta = seg2_start - seg1_start
    t1 = (delta[X] * d2[Z] - delta[Z] * d2[X]) / cross
    t2 = (delta[X] * d1[Z] - delta[Z] * d1[X]) / cross

    if t1 < 0.01 or t1 > 0.99 or t2 < 0.01 or t2 > 0.99:
        return None

    intersection = seg1_start + d1 * t1
    intersection[Y] = (seg1_start[Y] + seg2_start[Y]) / 2
    return intersection, float(t1), float(t2)
