"""Render engine: quantize a Canvas into rows of text.

Provides:
    - render() / render_region(): canvas (or a rectangle of it) → text lines
    - smallest_bounds() / render_smallest(): crop to the drawn content
    - text(): place characters in the half-resolution overlay grid
    - text_buffer() and friends: decorate the last rendered frame in place
    - hbar(): eighth-block horizontal bar strings

Encodings:
    - No-color mode: each 2x2 pixel block (2x1 / 1x2 with aspect overrides)
      becomes one of 16 quadrant characters, bit weights 8/4/2/1 for
      top-left/top-right/bottom-left/bottom-right. Invert flips which pixel
      state counts as "on".
    - Color modes: one cell per column and pixel-row pair. The top pixel sets
      the background, the bottom pixel colors a lower half block. Escapes are
      emitted only on change and every row ends with a reset.

Rendered lines carry no terminator; the result is also stored as
``canvas.buffer``.

Usage:
    from blockpaint.engine import render
    for row in render.render_smallest(canvas):
        print(row)
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from blockpaint.utils.color import RESET, ColorMode, bg_escape, fg_escape
from blockpaint.utils.errors import ParseError
from blockpaint.utils.geometry import normalize_rect

from .canvas import Canvas

logger = logging.getLogger(__name__)

BLOCK_CHARS = (
    " ",  # 0
    "▗",  # 1
    "▖",  # 2
    "▄",  # 3
    "▝",  # 4
    "▐",  # 5
    "▞",  # 6
    "▟",  # 7
    "▘",  # 8
    "▚",  # 9
    "▌",  # 10
    "▙",  # 11
    "▀",  # 12
    "▜",  # 13
    "▛",  # 14
    "█",  # 15
)
LOWER_HALF = "▄"

# Nine-character frame sets: corners, edges and an unused center, row by row
SINGLE_FRAME = "┌─┐│*│└─┘"
DOUBLE_FRAME = "╔═╗║*║╚═╝"
ROUND_FRAME = "╭─╮│*│╰─╯"
BLOCK_FRAME = "▛▀▜▌*▐▙▄▟"
TEXT_FRAME = "+-+|*|+-+"

# Frame part selection: bit (8 - i) enables frame character i
FRAME_TOP_LEFT = 1 << 8
FRAME_TOP = 1 << 7
FRAME_TOP_RIGHT = 1 << 6
FRAME_LEFT = 1 << 5
FRAME_RIGHT = 1 << 3
FRAME_BOTTOM_LEFT = 1 << 2
FRAME_BOTTOM = 1 << 1
FRAME_BOTTOM_RIGHT = 1 << 0
FRAME_ALL = 0x1EF

HBAR_CHARS = "█▏▎▍▌▋▊▉"


# ============================================================================
# RENDERING
# ============================================================================

def _visible(canvas: Canvas) -> np.ndarray:
    """Packed colors as reads see them, padded with one zero row and column.

    Pixels outside an active clip read as 0, like Canvas.color_at.
    """
    h, w = canvas.height, canvas.width
    grid = np.zeros((h + 1, w + 1), dtype=np.uint32)
    grid[:h, :w] = canvas.pixels
    if canvas.clipping:
        ys, xs = np.mgrid[0:h + 1, 0:w + 1]
        grid[~canvas.bounds_mask(xs, ys)] = 0
    return grid


def _render_blocks(canvas: Canvas, grid: np.ndarray, x1: int, y1: int, x2: int, y2: int) -> List[str]:
    ax, ay = canvas.aspect_x, canvas.aspect_y
    xs = np.arange(x1, x2, 2 - ax)
    ys = np.arange(y1, y2, 2 - ay)
    if xs.size == 0 or ys.size == 0:
        return []

    on = (grid != 0) == (not canvas.invert)
    yy = ys[:, None]
    xx = xs[None, :]
    idx = (on[yy, xx] * 8
           + on[yy, xx + 1 - ax] * 4
           + on[yy + 1 - ay, xx] * 2
           + on[yy + 1 - ay, xx + 1 - ax])
    chars = np.array(BLOCK_CHARS)[idx]
    return [''.join(row) for row in chars]


def _render_colors(canvas: Canvas, grid: np.ndarray, x1: int, y1: int, x2: int, y2: int) -> List[str]:
    mode = canvas.color_mode
    lines = []
    for y in range(y1, y2, 2):
        parts = []
        cur_bg: Optional[int] = None
        cur_fg: Optional[int] = None
        overlay = canvas.overlay[y // 2]
        for x in range(x1, x2):
            top = int(grid[y, x])
            bottom = int(grid[y + 1, x])
            if cur_bg != top:
                parts.append(bg_escape(mode, top))
                cur_bg = top
            if cur_fg != bottom:
                parts.append(fg_escape(mode, bottom))
                cur_fg = bottom
            ch = overlay[x]
            if ch:
                parts.append(ch)
            elif top != bottom:
                parts.append(LOWER_HALF)
            else:
                parts.append(" ")
        parts.append(RESET)
        lines.append(''.join(parts))
    return lines


def render_region(canvas: Canvas, x1: int, y1: int, x2: int, y2: int) -> List[str]:
    """Render the rectangle [x1, x2) x [y1, y2) of ``canvas``.

    Parameters
    ----------
    canvas : Canvas
        Source canvas
    x1, y1 : int
        Top-left pixel (inclusive)
    x2, y2 : int
        Bottom-right bound (exclusive)

    Returns
    -------
    List[str]
        Text rows, also stored as ``canvas.buffer``

    Notes
    -----
    The rectangle is clamped to the canvas; an empty rectangle renders no
    rows.
    """
    x1, x2 = max(0, x1), min(canvas.width, x2)
    y1, y2 = max(0, y1), min(canvas.height, y2)

    grid = _visible(canvas)
    if canvas.color_mode == ColorMode.NONE:
        lines = _render_blocks(canvas, grid, x1, y1, x2, y2)
    else:
        lines = _render_colors(canvas, grid, x1, y1, x2, y2)

    canvas.buffer = lines
    logger.debug(f"Rendered {len(lines)} rows from ({x1}, {y1})-({x2}, {y2})")
    return lines


def render(canvas: Canvas) -> List[str]:
    """Render the whole canvas."""
    return render_region(canvas, 0, 0, canvas.width, canvas.height)


def smallest_bounds(canvas: Canvas, background: int = 0) -> Tuple[int, int, int, int]:
    """Bounding rectangle of all pixels differing from ``background``.

    Returns
    -------
    Tuple[int, int, int, int]
        (x1, y1, x2, y2) with exclusive x2/y2, one pixel of margin on every
        side where the canvas allows. The whole canvas when nothing is drawn.
    """
    ys, xs = np.nonzero(canvas.pixels != background)
    if xs.size == 0:
        return 0, 0, canvas.width, canvas.height
    return (max(0, int(xs.min()) - 1),
            max(0, int(ys.min()) - 1),
            min(canvas.width, int(xs.max()) + 2),
            min(canvas.height, int(ys.max()) + 2))


def render_smallest(canvas: Canvas, background: int = 0) -> List[str]:
    """Render only the area holding drawn pixels (see smallest_bounds)."""
    return render_region(canvas, *smallest_bounds(canvas, background))


# ============================================================================
# TEXT OVERLAY
# ============================================================================

def text(canvas: Canvas, x: int, y: int, s: str) -> None:
    """Write ``s`` into the overlay grid at pixel (x, y).

    Characters land on overlay row ``y // 2`` and stop at the right canvas
    edge. Each covered cell gets its top pixel cleared and bottom pixel set,
    so color renders show the text in the foreground color over the
    background color. Positions outside the canvas are ignored.
    """
    if not (0 <= x < canvas.width and 0 <= y < canvas.height):
        return
    row = y // 2
    for i, ch in enumerate(s):
        xx = x + i
        if xx >= canvas.width:
            break
        canvas.overlay[row, xx] = ch
        # Direct writes: toggle mode must not flip the cell colors
        if canvas.in_bounds(xx, row * 2):
            canvas.pixels[row * 2, xx] = canvas.background
        if canvas.in_bounds(xx, row * 2 + 1):
            canvas.pixels[row * 2 + 1, xx] = canvas.foreground


def text_frame(canvas: Canvas, x1: int, y1: int, x2: int, y2: int,
               frame: str = SINGLE_FRAME, parts: int = FRAME_ALL) -> None:
    """Draw a character frame into the overlay grid (see text)."""
    if not _valid_frame(canvas, frame):
        return
    _frame(lambda x, y, s: text(canvas, x, y, s), x1, y1, x2, y2, frame, parts)


# ============================================================================
# RENDERED BUFFER DECORATION
# ============================================================================

def _buffer_position(canvas: Canvas, x: int, y: int, scale: bool) -> Tuple[int, int]:
    if scale:
        x, y = canvas.scaled(x, y)
        if canvas.aspect_x == 0:
            x //= 2
        if canvas.aspect_y == 0:
            y //= 2
    return x, y


def text_buffer(canvas: Canvas, x: int, y: int, s: str, scale: bool = False) -> None:
    """Overwrite characters of the last rendered frame.

    Parameters
    ----------
    canvas : Canvas
        Canvas whose ``buffer`` is edited
    x, y : int
        Character column and row in the buffer
    s : str
        Replacement text; the line keeps its length, excess text is cut
    scale : bool
        Treat (x, y) as pixel coordinates: apply the canvas scale, then
        halve each axis without an aspect override
    """
    x, y = _buffer_position(canvas, x, y, scale)
    if x < 0 or y < 0 or y >= len(canvas.buffer):
        return
    line = canvas.buffer[y]
    if x > len(line):
        return
    canvas.buffer[y] = (line[:x] + s + line[x + len(s):])[:len(line)]


def text_frame_buffer(canvas: Canvas, x1: int, y1: int, x2: int, y2: int,
                      frame: str = SINGLE_FRAME, parts: int = FRAME_ALL,
                      scale: bool = False) -> None:
    """Draw a character frame onto the last rendered frame.

    With ``scale`` the corners are pixel coordinates (see text_buffer) and
    horizontal edges span half the pixel width unless the x aspect override
    is active.
    """
    if not _valid_frame(canvas, frame):
        return
    span = None
    if scale and canvas.aspect_x == 0:
        span = (max(x1, x2) - min(x1, x2)) // 2
    _frame(lambda x, y, s: text_buffer(canvas, x, y, s, scale),
           x1, y1, x2, y2, frame, parts, span)


def text_line_h_buffer(canvas: Canvas, x1: int, y1: int, x2: int, y2: int,
                       frame: str = SINGLE_FRAME, scale: bool = False) -> None:
    """Horizontal separator from x1 (inclusive) to x2 (exclusive) on row y1."""
    if not _valid_frame(canvas, frame):
        return
    if x1 > x2:
        x1, x2 = x2, x1
        y1, y2 = y2, y1
    text_buffer(canvas, x1, y1, frame[1] * (x2 - x1), scale)


def text_line_v_buffer(canvas: Canvas, x1: int, y1: int, x2: int, y2: int,
                       frame: str = SINGLE_FRAME, scale: bool = False) -> None:
    """Vertical separator in column x1 from y1 (inclusive) to y2 (exclusive)."""
    if not _valid_frame(canvas, frame):
        return
    if y1 > y2:
        x1, x2 = x2, x1
        y1, y2 = y2, y1
    for y in range(y1, y2):
        text_buffer(canvas, x1, y, frame[3], scale)


def _valid_frame(canvas: Canvas, frame: str) -> bool:
    if len(frame) == 9:
        return True
    canvas.record_error(ParseError(f"Frame set needs 9 characters, got {len(frame)}"))
    return False


def _frame(put, x1: int, y1: int, x2: int, y2: int, frame: str, parts: int,
           span: Optional[int] = None) -> None:
    """Emit frame pieces through ``put(x, y, s)``.

    Nothing is drawn for frames narrower or shorter than two cells; edges are
    skipped when there is no room between the corners.
    """
    x1, y1, x2, y2 = normalize_rect(x1, y1, x2, y2)
    if x2 - x1 < 1 or y2 - y1 < 1:
        return

    if y2 - y1 >= 2:
        for y in range(y1 + 1, y2):
            if parts & FRAME_LEFT:
                put(x1, y, frame[3])
            if parts & FRAME_RIGHT:
                put(x2, y, frame[5])

    if x2 - x1 >= 2:
        width = span if span is not None else x2 - x1 - 1
        if parts & FRAME_TOP:
            put(x1 + 1, y1, frame[1] * width)
        if parts & FRAME_BOTTOM:
            put(x1 + 1, y2, frame[7] * width)

    if parts & FRAME_TOP_LEFT:
        put(x1, y1, frame[0])
    if parts & FRAME_TOP_RIGHT:
        put(x2, y1, frame[2])
    if parts & FRAME_BOTTOM_LEFT:
        put(x1, y2, frame[6])
    if parts & FRAME_BOTTOM_RIGHT:
        put(x2, y2, frame[8])


def hbar(size: int) -> str:
    """Horizontal bar ``size`` eighths of a cell long."""
    if size <= 0:
        return ""
    full, rest = divmod(size, 8)
    bar = HBAR_CHARS[0] * full
    if rest:
        bar += HBAR_CHARS[rest]
    return bar
