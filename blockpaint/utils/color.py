"""Packed colors and ANSI escape construction.

Provides:
    - ColorMode: rendering modes (none, 16-color, 256-palette, truecolor)
    - rgb() / unpack_rgb(): 0xRRGGBB packing helpers
    - rgb_mul(): dim or brighten a packed color
    - fg_escape() / bg_escape(): SGR sequences per color mode
    - parse_color_mode(): int / name → ColorMode

Used by:
    - Canvas: foreground/background colors, color mode selection
    - Render engine: escape emission for half-block cells
    - Asset store: picture import from RGB images

Packed color layout:
    - Truecolor: 0xRRGGBB (24 bits used)
    - Palette: index 0-255 in the low byte
    - 16-color: SGR foreground code (30-37) in the low byte; background is +10

Invariants:
    - 0 is the background/unset value in every mode
"""

from enum import IntEnum
from typing import Tuple, Union

from .errors import ParseError


class ColorMode(IntEnum):
    """Color rendering mode of a canvas."""
    NONE = 0
    COLOR16 = 1
    PALETTE = 2
    TRUECOLOR = 3


# SGR foreground codes for the 16-color mode
BLACK = 30
RED = 31
GREEN = 32
YELLOW = 33
BLUE = 34
MAGENTA = 35
CYAN = 36
WHITE = 37
DEFAULT = 38
RESET_CODE = 39

RESET = "\033[0m"
ESC_HOME = "\033[0;0H"
ESC_CLEAR = "\033[J"

_MODE_NAMES = {
    "none": ColorMode.NONE,
    "nocolor": ColorMode.NONE,
    "16": ColorMode.COLOR16,
    "color16": ColorMode.COLOR16,
    "palette": ColorMode.PALETTE,
    "256": ColorMode.PALETTE,
    "truecolor": ColorMode.TRUECOLOR,
    "rgb": ColorMode.TRUECOLOR,
}


def rgb(r: int, g: int, b: int) -> int:
    """Pack 8-bit channels into a 0xRRGGBB value."""
    return ((r & 0xff) << 16) | ((g & 0xff) << 8) | (b & 0xff)


def unpack_rgb(color: int) -> Tuple[int, int, int]:
    """Split a packed 0xRRGGBB value into (r, g, b)."""
    return (color >> 16) & 0xff, (color >> 8) & 0xff, color & 0xff


def rgb_mul(color: int, mod: float) -> int:
    """Scale every channel of a packed color by ``mod``.

    Parameters
    ----------
    color : int
        Packed 0xRRGGBB color
    mod : float
        Multiplier (<1 dims, >1 brightens)

    Returns
    -------
    int
        Packed color, channels truncated and clamped to 255
    """
    r, g, b = unpack_rgb(color)
    r = min(int(r * mod), 255)
    g = min(int(g * mod), 255)
    b = min(int(b * mod), 255)
    return rgb(r, g, b)


def fg_escape(mode: ColorMode, color: int) -> str:
    """SGR sequence selecting ``color`` as foreground in ``mode``."""
    if mode == ColorMode.COLOR16:
        return f"\033[1;{color & 0xff}m"
    if mode == ColorMode.PALETTE:
        return f"\033[38;5;{color & 0xff}m"
    if mode == ColorMode.TRUECOLOR:
        r, g, b = unpack_rgb(color)
        return f"\033[38;2;{r};{g};{b}m"
    return ""


def bg_escape(mode: ColorMode, color: int) -> str:
    """SGR sequence selecting ``color`` as background in ``mode``."""
    if mode == ColorMode.COLOR16:
        return f"\033[1;{(color & 0xff) + 10}m"
    if mode == ColorMode.PALETTE:
        return f"\033[48;5;{color & 0xff}m"
    if mode == ColorMode.TRUECOLOR:
        r, g, b = unpack_rgb(color)
        return f"\033[48;2;{r};{g};{b}m"
    return ""


def parse_color_mode(value: Union[int, str, ColorMode]) -> ColorMode:
    """Resolve a color mode from its number or name.

    Parameters
    ----------
    value : int, str or ColorMode
        0-3, or one of "none", "16", "palette", "truecolor" (and aliases)

    Returns
    -------
    ColorMode

    Raises
    ------
    ParseError
        If the value names no supported mode
    """
    if isinstance(value, str):
        mode = _MODE_NAMES.get(value.strip().lower())
        if mode is None:
            raise ParseError(f"Unsupported color mode: {value!r}")
        return mode
    try:
        return ColorMode(value)
    except ValueError as e:
        raise ParseError(f"Unsupported color mode: {value!r}") from e
