"""Bézier curve rasterization.

Curves are flattened to ``canvas.steps + 1`` uniform samples (t = i / steps),
truncated to integer pixels and joined with device-coordinate lines. Control
and end points are scaled once up front; the joining lines are not scaled
again.

Usage:
    from blockpaint.engine import curves
    curves.cubic_bezier(canvas, (0, 0), (10, 0), (10, 20), (30, 20))
    x, y = curves.point_on_quadratic(canvas, (0, 0), (5, 10), (10, 0), 0.5)
"""

from typing import Tuple

import numpy as np

from blockpaint.utils.geometry import (
    Point,
    bezier_cubic_eval,
    bezier_quadratic_eval,
    sample_params,
    truncate_points,
)

from .canvas import Canvas
from .raster import draw_line


def _scaled_points(canvas: Canvas, *points: Point) -> Tuple[Tuple[int, int], ...]:
    return tuple(canvas.scaled(x, y) for x, y in points)


def _polyline(canvas: Canvas, samples: np.ndarray, start: Tuple[int, int], on: bool) -> None:
    px, py = start
    for x, y in truncate_points(samples).tolist():
        draw_line(canvas, px, py, x, y, on)
        px, py = x, y


def quadratic_bezier(canvas: Canvas, p0: Point, c: Point, p1: Point, on: bool = True) -> None:
    """Draw a quadratic Bézier from ``p0`` to ``p1`` with control ``c``."""
    p0, c, p1 = _scaled_points(canvas, p0, c, p1)
    samples = bezier_quadratic_eval(p0, c, p1, sample_params(canvas.steps))
    _polyline(canvas, samples, p0, on)


def cubic_bezier(canvas: Canvas, p0: Point, c1: Point, c2: Point, p1: Point, on: bool = True) -> None:
    """Draw a cubic Bézier from ``p0`` to ``p1`` with controls ``c1``, ``c2``."""
    p0, c1, c2, p1 = _scaled_points(canvas, p0, c1, c2, p1)
    samples = bezier_cubic_eval(p0, c1, c2, p1, sample_params(canvas.steps))
    _polyline(canvas, samples, p0, on)


def point_on_quadratic(canvas: Canvas, p0: Point, c: Point, p1: Point, t: float) -> Tuple[float, float]:
    """Point at parameter ``t`` of a quadratic Bézier (scaled, not painted)."""
    p0, c, p1 = _scaled_points(canvas, p0, c, p1)
    x, y = bezier_quadratic_eval(p0, c, p1, t)
    return float(x), float(y)


def point_on_cubic(canvas: Canvas, p0: Point, c1: Point, c2: Point, p1: Point, t: float) -> Tuple[float, float]:
    """Point at parameter ``t`` of a cubic Bézier (scaled, not painted)."""
    p0, c1, c2, p1 = _scaled_points(canvas, p0, c1, c2, p1)
    x, y = bezier_cubic_eval(p0, c1, c2, p1, t)
    return float(x), float(y)
