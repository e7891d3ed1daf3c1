"""Geometric helpers for curves, arcs and rectangles.

Provides:
    - Quadratic / cubic Bézier evaluation over numpy parameter arrays
    - Uniform parameter sampling (t = i / steps)
    - Truncation of float samples to integer pixel coordinates
    - Arc offsets in clock orientation (0° = up, clockwise) and in
      conventional orientation (0° = right, counter-clockwise)
    - Control-point reflection for smooth curve continuation

Used by:
    - Curve evaluator: Bézier → polyline of integer samples
    - Rasterizer: arc and radius sampling
    - Path interpreter: S/T control-point reflection

All coordinates are canvas pixels. Float → int conversion truncates toward
zero everywhere so curves meet the integer endpoints of ``line``.
"""

import math
from typing import Sequence, Tuple, Union

import numpy as np

Point = Tuple[float, float]
ArrayLike = Union[float, Sequence[float], np.ndarray]


def sample_params(steps: int) -> np.ndarray:
    """Return ``steps + 1`` uniform parameters in [0, 1].

    Computed as ``i / steps`` per element so t=0 and t=1 are exact.
    """
    return np.arange(steps + 1, dtype=np.float64) / float(steps)


def bezier_quadratic_eval(p0: Point, c: Point, p1: Point, t: ArrayLike) -> np.ndarray:
    """Evaluate a quadratic Bézier curve.

    Parameters
    ----------
    p0, c, p1 : tuple of float
        Start point, control point, end point
    t : float or array-like
        Parameter values in [0, 1]

    Returns
    -------
    np.ndarray
        Points, shape (2,) for scalar t or (N, 2) for N parameters

    Notes
    -----
    B(t) = (1-t)²·p0 + 2(1-t)t·c + t²·p1
    """
    t = np.asarray(t, dtype=np.float64)
    a = 1.0 - t
    b0 = a * a
    b1 = 2.0 * t * a
    b2 = t * t
    pts = np.asarray([p0, c, p1], dtype=np.float64)
    x = b0 * pts[0, 0] + b1 * pts[1, 0] + b2 * pts[2, 0]
    y = b0 * pts[0, 1] + b1 * pts[1, 1] + b2 * pts[2, 1]
    return np.stack([x, y], axis=-1)


def bezier_cubic_eval(p0: Point, c1: Point, c2: Point, p1: Point, t: ArrayLike) -> np.ndarray:
    """Evaluate a cubic Bézier curve.

    Parameters
    ----------
    p0, c1, c2, p1 : tuple of float
        Start point, first control, second control, end point
    t : float or array-like
        Parameter values in [0, 1]

    Returns
    -------
    np.ndarray
        Points, shape (2,) for scalar t or (N, 2) for N parameters

    Notes
    -----
    B(t) = (1-t)³·p0 + 3(1-t)²t·c1 + 3(1-t)t²·c2 + t³·p1
    """
    t = np.asarray(t, dtype=np.float64)
    a = 1.0 - t
    aa = a * a
    tt = t * t
    b0 = a * aa
    b1 = 3.0 * aa * t
    b2 = 3.0 * a * tt
    b3 = tt * t
    pts = np.asarray([p0, c1, c2, p1], dtype=np.float64)
    x = b0 * pts[0, 0] + b1 * pts[1, 0] + b2 * pts[2, 0] + b3 * pts[3, 0]
    y = b0 * pts[0, 1] + b1 * pts[1, 1] + b2 * pts[2, 1] + b3 * pts[3, 1]
    return np.stack([x, y], axis=-1)


def truncate_points(points: np.ndarray) -> np.ndarray:
    """Convert float samples to int64 pixels, truncating toward zero."""
    return np.trunc(points).astype(np.int64)


def round_half_away(v: float) -> int:
    """Round to nearest integer, ties away from zero (not banker's rounding)."""
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


def clock_offset(radius: int, angle_deg: int) -> Tuple[int, int]:
    """Offset of a point at ``angle_deg`` on a circle, 0° = up, clockwise.

    Returns
    -------
    tuple of int
        (dx, dy) with dy in screen direction (+Y down)
    """
    rad = math.radians(angle_deg % 360)
    dx = round_half_away(radius * math.sin(rad))
    dy = round_half_away(radius * math.cos(rad))
    return dx, -dy


def math_offset(radius: int, angle_deg: int) -> Tuple[int, int]:
    """Offset of a point at ``angle_deg``, 0° = right, counter-clockwise.

    Returns
    -------
    tuple of int
        (dx, dy) with dy in screen direction (+Y down)
    """
    rad = math.radians(angle_deg % 360)
    dx = round_half_away(radius * math.cos(rad))
    dy = round_half_away(radius * math.sin(rad))
    return dx, -dy


def reflect_point(current: Point, control: Point) -> Point:
    """Reflect ``control`` through ``current``: current + (current - control)."""
    return (current[0] + (current[0] - control[0]),
            current[1] + (current[1] - control[1]))


def normalize_rect(x0: int, y0: int, x1: int, y1: int) -> Tuple[int, int, int, int]:
    """Order rectangle corners so (x0, y0) is top-left and (x1, y1) bottom-right."""
    if x0 > x1:
        x0, x1 = x1, x0
    if y0 > y1:
        y0, y1 = y1, y0
    return x0, y0, x1, y1
