"""Integer rasterization of primitives onto a Canvas.

Provides:
    - line / dotted_line: Bresenham stepping with inclusive endpoints
    - circle: midpoint circle, four-way symmetric plotting
    - ellipse_rect: two-phase midpoint ellipse fitted inside a rectangle
    - rectangle: outline or filled, inclusive bounds
    - flood_fill: 4-connected fill driven by an explicit work-list
    - dot_arc / line_arc / line_radius: angle 0 = up, clockwise
    - dot_arc_math / line_arc_math: angle 0 = right, counter-clockwise

Every public primitive applies the canvas scale factor exactly once to its
inputs and then writes device pixels through Canvas.plot, so clipping and
toggle mode apply uniformly. Out-of-range geometry is clipped, never reported.

Usage:
    from blockpaint.engine import raster
    raster.rectangle(canvas, 0, 0, 31, 15)
    raster.flood_fill(canvas, 5, 5, True)
"""

import logging
from collections import deque
from typing import Callable, Tuple

import numpy as np

from blockpaint.utils.geometry import clock_offset, math_offset, normalize_rect

from .canvas import Canvas

logger = logging.getLogger(__name__)

# 8-bit dot patterns for dotted_line (LSB is tested first)
DOT_1X1 = 0b01010101
DOT_2X2 = 0b00110011
DOT_4X4 = 0b00001111
DOT_1X3 = 0b00010001
DOT_3X2X1 = 0b00100111
DOT_6X2 = 0b00111111
DOT_7X1 = 0b01111111
DOT_5X1X1 = 0b01011111


# ============================================================================
# DEVICE-COORDINATE HELPERS
# ============================================================================

def _bresenham(x0: int, y0: int, x1: int, y1: int):
    """Yield every pixel from (x0, y0) to (x1, y1), endpoints included."""
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def draw_line(canvas: Canvas, x0: int, y0: int, x1: int, y1: int, on: bool = True) -> None:
    """Line between device pixels (no scaling).

    Endpoints are put in a fixed order first, so a line and its reverse
    paint the same pixels.
    """
    if (x1, y1) < (x0, y0):
        x0, y0, x1, y1 = x1, y1, x0, y0
    for x, y in _bresenham(x0, y0, x1, y1):
        canvas.plot(x, y, on)


# ============================================================================
# LINES
# ============================================================================

def line(canvas: Canvas, x0: int, y0: int, x1: int, y1: int, on: bool = True) -> None:
    """Draw a line from (x0, y0) to (x1, y1) inclusive."""
    x0, y0 = canvas.scaled(x0, y0)
    x1, y1 = canvas.scaled(x1, y1)
    draw_line(canvas, x0, y0, x1, y1, on)


def dotted_line(
    canvas: Canvas,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    on: bool = True,
    pattern: int = DOT_1X1,
) -> None:
    """Draw a line painting only where the rotating 8-bit pattern has a 1.

    The low bit decides each step; the pattern then rotates right by one, the
    bit shifted out re-entering at bit 7, whether or not the step painted.
    """
    x0, y0 = canvas.scaled(x0, y0)
    x1, y1 = canvas.scaled(x1, y1)
    pat = pattern & 0xff
    for x, y in _bresenham(x0, y0, x1, y1):
        if pat & 0x01:
            canvas.plot(x, y, on)
            pat = (pat >> 1) | 0x80
        else:
            pat >>= 1


# ============================================================================
# CIRCLES AND ELLIPSES
# ============================================================================

def circle(canvas: Canvas, cx: int, cy: int, r: int, on: bool = True) -> None:
    """Midpoint circle of radius ``r`` around (cx, cy)."""
    cx, cy = canvas.scaled(cx, cy)
    r = canvas.scaled_length(r)

    x = -r
    y = 0
    err = 2 - 2 * r
    while True:
        canvas.plot(cx - x, cy + y, on)
        canvas.plot(cx - y, cy - x, on)
        canvas.plot(cx + x, cy - y, on)
        canvas.plot(cx + y, cy + x, on)
        r = err
        if r > x:
            x += 1
            err += x * 2 + 1
        if r <= y:
            y += 1
            err += y * 2 + 1
        if x >= 0:
            break


def ellipse_rect(canvas: Canvas, x0: int, y0: int, x1: int, y1: int, on: bool = True) -> None:
    """Ellipse fitted exactly inside the rectangle spanned by two corners.

    Corner order does not matter. The second loop finishes flat ellipses
    (b small relative to a) and may repaint pixels on the rows the first
    loop already touched.
    """
    x0, y0 = canvas.scaled(x0, y0)
    x1, y1 = canvas.scaled(x1, y1)

    a = abs(x1 - x0)
    b = abs(y1 - y0)
    b1 = b & 1
    dx = 4 * (1 - a) * b * b
    dy = 4 * (b1 + 1) * a * a
    err = dx + dy + b1 * a * a

    if x0 > x1:
        x0 = x1
        x1 += a
    if y0 > y1:
        y0 = y1
    y0 += (b + 1) // 2
    y1 = y0 - b1
    a *= 8 * a
    b1 = 8 * b * b

    while True:
        canvas.plot(x1, y0, on)
        canvas.plot(x0, y0, on)
        canvas.plot(x0, y1, on)
        canvas.plot(x1, y1, on)
        e2 = 2 * err
        if e2 >= dx:
            x0 += 1
            x1 -= 1
            dx += b1
            err += dx
        if e2 <= dy:
            y0 += 1
            y1 -= 1
            dy += a
            err += dy
        if x0 > x1:
            break

    while y0 - y1 < b:
        canvas.plot(x0 - 1, y0, on)
        canvas.plot(x1 + 1, y0, on)
        y0 += 1
        canvas.plot(x0 - 1, y1, on)
        canvas.plot(x1 + 1, y1, on)
        y1 -= 1


# ============================================================================
# AREAS
# ============================================================================

def rectangle(
    canvas: Canvas,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    on: bool = True,
    filled: bool = False,
) -> None:
    """Rectangle outline (or filled area) with inclusive corners."""
    x0, y0 = canvas.scaled(x0, y0)
    x1, y1 = canvas.scaled(x1, y1)
    x0, y0, x1, y1 = normalize_rect(x0, y0, x1, y1)

    for x in range(x0, x1 + 1):
        canvas.plot(x, y0, on)
    for y in range(y0 + 1, y1):
        if filled:
            for x in range(x0, x1 + 1):
                canvas.plot(x, y, on)
        else:
            canvas.plot(x0, y, on)
            canvas.plot(x1, y, on)
    if y1 != y0:
        for x in range(x0, x1 + 1):
            canvas.plot(x, y1, on)


def flood_fill(canvas: Canvas, x: int, y: int, on: bool = True) -> int:
    """Fill the 4-connected region sharing the seed's state with ``on``.

    Parameters
    ----------
    canvas : Canvas
        Target canvas
    x, y : int
        Seed position (scaled)
    on : bool
        New state for the region

    Returns
    -------
    int
        Number of pixels written (0 if the seed already has the new state)

    Notes
    -----
    Uses an explicit deque instead of recursion, so region size is bounded by
    memory only. A pixel is queued once; writes that leave the state
    unchanged (e.g. a nonzero background color) cannot make the fill revisit it.
    """
    x, y = canvas.scaled(x, y)
    target = canvas.is_set(x, y)
    if target == on or not canvas.in_bounds(x, y):
        return 0

    seen = np.zeros((canvas.height, canvas.width), dtype=bool)
    pending = deque([(x, y)])
    seen[y, x] = True
    painted = 0

    while pending:
        px, py = pending.popleft()
        if canvas.is_set(px, py) != target:
            continue
        canvas.plot(px, py, on)
        painted += 1
        for nx, ny in ((px + 1, py), (px - 1, py), (px, py + 1), (px, py - 1)):
            if canvas.in_bounds(nx, ny) and not seen[ny, nx]:
                seen[ny, nx] = True
                pending.append((nx, ny))

    logger.debug(f"Flood fill from ({x}, {y}) painted {painted} pixels")
    return painted


# ============================================================================
# ARCS
# ============================================================================

OffsetFn = Callable[[int, int], Tuple[int, int]]


def _arc_span(a1: int, a2: int, step: int):
    """Normalized (a1, a2) or None when the arc draws nothing."""
    if a1 == a2 or step < 1:
        return None
    if a1 < 0 or a2 < 0 or a1 > 360 or a2 > 360:
        return None
    if a1 > a2:
        a2 += 360
    return a1, a2


def _dot_arc(canvas, cx, cy, r, a1, a2, step, on, offset: OffsetFn) -> None:
    span = _arc_span(a1, a2, step)
    if span is None:
        return
    cx, cy = canvas.scaled(cx, cy)
    r = canvas.scaled_length(r)
    a1, a2 = span
    for angle in range(a1, a2, step):
        ox, oy = offset(r, angle)
        canvas.plot(cx + ox, cy + oy, on)


def _line_arc(canvas, cx, cy, r, a1, a2, step, on, offset: OffsetFn) -> None:
    span = _arc_span(a1, a2, step)
    if span is None:
        return
    cx, cy = canvas.scaled(cx, cy)
    r = canvas.scaled_length(r)
    a1, a2 = span

    prev = None
    for angle in range(a1, a2, step):
        cur = offset(r, angle)
        if prev is not None:
            draw_line(canvas, cx + prev[0], cy + prev[1], cx + cur[0], cy + cur[1], on)
        prev = cur
    end = offset(r, a2)
    draw_line(canvas, cx + prev[0], cy + prev[1], cx + end[0], cy + end[1], on)


def dot_arc(canvas: Canvas, cx: int, cy: int, r: int, a1: int, a2: int, step: int, on: bool = True) -> None:
    """Plot arc samples every ``step`` degrees from a1 up to (excluding) a2.

    Angles are in degrees within [0, 360], 0 = up, increasing clockwise. An
    end angle below the start wraps by +360.
    """
    _dot_arc(canvas, cx, cy, r, a1, a2, step, on, clock_offset)


def line_arc(canvas: Canvas, cx: int, cy: int, r: int, a1: int, a2: int, step: int, on: bool = True) -> None:
    """Connect arc samples with lines and close exactly at the end angle.

    Same angle convention as dot_arc.
    """
    _line_arc(canvas, cx, cy, r, a1, a2, step, on, clock_offset)


def dot_arc_math(canvas: Canvas, cx: int, cy: int, r: int, a1: int, a2: int, step: int, on: bool = True) -> None:
    """dot_arc with 0 = right, increasing counter-clockwise."""
    _dot_arc(canvas, cx, cy, r, a1, a2, step, on, math_offset)


def line_arc_math(canvas: Canvas, cx: int, cy: int, r: int, a1: int, a2: int, step: int, on: bool = True) -> None:
    """line_arc with 0 = right, increasing counter-clockwise."""
    _line_arc(canvas, cx, cy, r, a1, a2, step, on, math_offset)


def line_radius(canvas: Canvas, cx: int, cy: int, r1: int, r2: int, angle: int, on: bool = True) -> None:
    """Radial line at ``angle`` (0 = up, clockwise) from radius r1 to r2."""
    cx, cy = canvas.scaled(cx, cy)
    r1 = canvas.scaled_length(r1)
    r2 = canvas.scaled_length(r2)
    ox1, oy1 = clock_offset(r1, angle)
    ox2, oy2 = clock_offset(r2, angle)
    draw_line(canvas, cx + ox1, cy + oy1, cx + ox2, cy + oy2, on)
