"""Bit-packed glyph, stamp and picture assets and their compositing.

Provides:
    - normalize_rows(): left-justify 64-bit rows and measure their width
    - Glyph / Font: per-character bitmaps with kerning groups
    - Stamp: a single reusable bitmap
    - Picture: dense color grid with optional tile ("segment") addressing
    - AssetRegistry: named fonts, stamps and pictures owned by a Canvas
    - font_print() / stamp() / picture(): paint assets onto a Canvas
    - default_font() / default_stamp(): built-in assets registered as "__std"

Row format:
    Each bitmap row is an unsigned 64-bit integer. After normalization the
    leftmost column is bit 63; ``bit_length`` holds the minimum trailing-zero
    count over all rows, so the detected width is ``64 - bit_length``.
    Normalization runs lazily on first use and is gated by ``prepared``.

Usage:
    from blockpaint.engine import assets
    assets.font_print(canvas, canvas.assets.get_font("__std"), 1, 1, "HELLO")
    assets.picture(canvas, sprite, 10, 4, segment=3, transparent=True)
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import numpy as np

from blockpaint.utils.color import ColorMode
from blockpaint.utils.errors import DimensionError
from blockpaint.utils.validators import MAX_X, MAX_Y, ROW_BITS, ROW_MASK

if TYPE_CHECKING:
    from .canvas import Canvas

logger = logging.getLogger(__name__)


# ============================================================================
# ROW NORMALIZATION
# ============================================================================

def _trailing_zeros(v: int) -> int:
    if v == 0:
        return ROW_BITS
    return (v & -v).bit_length() - 1


def normalize_rows(rows: List[int], width: int = 0) -> Tuple[List[int], int]:
    """Left-justify bitmap rows against bit 63.

    Parameters
    ----------
    rows : List[int]
        Unsigned 64-bit rows with arbitrary left margins
    width : int
        Known bitmap width; 0 detects it from the greatest row

    Returns
    -------
    Tuple[List[int], int]
        (shifted rows, minimum trailing-zero count). The trailing-zero count
        is 64 for an empty or all-zero row set.

    Notes
    -----
    With width 0 the shift is the leading-zero count of the greatest row.
    Rows whose greatest value already has bit 63 set are left unshifted
    whatever the width, so normalizing twice changes nothing.
    """
    top = max(rows, default=0)
    if top.bit_length() == ROW_BITS:
        shift = 0
    elif width:
        shift = ROW_BITS - width
    else:
        shift = ROW_BITS - top.bit_length()
    shifted = [(r << shift) & ROW_MASK for r in rows]
    bit_length = min((_trailing_zeros(r) for r in shifted), default=ROW_BITS)
    return shifted, bit_length


# ============================================================================
# ASSET RECORDS
# ============================================================================

@dataclass
class Glyph:
    """One font character.

    ``width`` is the advance width; 0 means detect it from the widest row on
    prepare. ``gn`` is the glyph's own glue group, ``ga`` the group it kerns
    against.
    """
    data: List[int] = field(default_factory=list)
    width: int = 0
    height: int = 0
    bit_length: int = 0
    offset_x: int = 0
    offset_y: int = 0
    gn: int = 0
    ga: int = 0
    prepared: bool = False

    def prepare(self) -> None:
        if self.prepared:
            return
        if self.width == 0:
            self.width = max((r.bit_length() for r in self.data), default=0)
        self.height = len(self.data)
        self.data, self.bit_length = normalize_rows(self.data, self.width)
        self.prepared = True


@dataclass
class Font:
    """Mapping from character code to Glyph."""
    chars: Dict[int, Glyph] = field(default_factory=dict)
    prepared: bool = False

    def prepare(self) -> None:
        if self.prepared:
            return
        for glyph in self.chars.values():
            glyph.prepare()
        self.prepared = True
        logger.debug(f"Prepared font with {len(self.chars)} glyphs")

    def add_char(self, code: int, glyph: Glyph) -> None:
        """Add or replace a glyph (prepared lazily with the font)."""
        self.chars[code] = glyph
        if self.prepared:
            glyph.prepare()

    def glyph(self, ch: str) -> Optional[Glyph]:
        self.prepare()
        return self.chars.get(ord(ch))


@dataclass
class Stamp:
    """Single bit-packed bitmap."""
    data: List[int] = field(default_factory=list)
    bit_length: int = 0
    prepared: bool = False

    def prepare(self) -> None:
        if self.prepared:
            return
        self.data, self.bit_length = normalize_rows(self.data)
        self.prepared = True

    @property
    def width(self) -> int:
        self.prepare()
        return ROW_BITS - self.bit_length

    @property
    def height(self) -> int:
        return len(self.data)


@dataclass
class Picture:
    """Dense color grid with optional tiles.

    Parameters
    ----------
    width, height : int
        Picture size in pixels
    data : array-like
        Row-major packed colors, ``width * height`` values or (height, width)
    tile_width, tile_height : int
        Tile size for segment addressing, 0 = untiled
    mode : ColorMode
        Color mode the data was authored for
    color_key : int
        Color treated as transparent by transparent blits

    Raises
    ------
    DimensionError
        If the size is outside the canvas limits or doesn't match ``data``
    """
    width: int
    height: int
    data: np.ndarray
    tile_width: int = 0
    tile_height: int = 0
    mode: ColorMode = ColorMode.TRUECOLOR
    color_key: int = 0

    def __post_init__(self):
        if not (1 <= self.width <= MAX_X and 1 <= self.height <= MAX_Y):
            raise DimensionError(f"Picture size {self.width}x{self.height} outside limits")
        data = np.asarray(self.data, dtype=np.uint32)
        if data.size != self.width * self.height:
            raise DimensionError(
                f"Picture data has {data.size} values, expected {self.width}x{self.height}"
            )
        self.data = data.reshape(self.height, self.width)

    @property
    def tile_count(self) -> int:
        if self.tile_width <= 0 or self.tile_height <= 0:
            return 0
        return (self.width // self.tile_width) * (self.height // self.tile_height)

    def segment_rect(self, segment: int) -> Tuple[int, int, int, int]:
        """Source rectangle (x, y, w, h) of a 1-based, row-major segment.

        Segment 0, or any value outside 1..tile_count, selects the whole
        picture.
        """
        if segment < 1 or segment > self.tile_count:
            return 0, 0, self.width, self.height
        per_row = self.width // self.tile_width
        col = (segment - 1) % per_row
        row = (segment - 1) // per_row
        return col * self.tile_width, row * self.tile_height, self.tile_width, self.tile_height


@dataclass(frozen=True)
class FontInfo:
    max_width: int
    max_height: int
    chars: int


def font_info(font: Font) -> FontInfo:
    """Largest glyph width/height and glyph count of ``font``."""
    font.prepare()
    return FontInfo(
        max_width=max((g.width for g in font.chars.values()), default=0),
        max_height=max((g.height for g in font.chars.values()), default=0),
        chars=len(font.chars),
    )


# ============================================================================
# REGISTRY
# ============================================================================

class AssetRegistry:
    """Named fonts, stamps and pictures.

    Adding under an existing name replaces the entry; removing a missing
    name is a no-op returning False; lookups of missing names return None.
    """

    def __init__(self):
        self.fonts: Dict[str, Font] = {"__std": default_font()}
        self.stamps: Dict[str, Stamp] = {"__std": default_stamp()}
        self.pictures: Dict[str, Picture] = {}

    def add_font(self, name: str, font: Font) -> None:
        self.fonts[name] = font

    def remove_font(self, name: str) -> bool:
        return self.fonts.pop(name, None) is not None

    def get_font(self, name: str) -> Optional[Font]:
        return self.fonts.get(name)

    def add_stamp(self, name: str, stamp: Stamp) -> None:
        self.stamps[name] = stamp

    def remove_stamp(self, name: str) -> bool:
        return self.stamps.pop(name, None) is not None

    def get_stamp(self, name: str) -> Optional[Stamp]:
        return self.stamps.get(name)

    def add_picture(self, name: str, picture: Picture) -> None:
        self.pictures[name] = picture

    def remove_picture(self, name: str) -> bool:
        return self.pictures.pop(name, None) is not None

    def get_picture(self, name: str) -> Optional[Picture]:
        return self.pictures.get(name)


# ============================================================================
# COMPOSITING
# ============================================================================

def _paint_rows(canvas: "Canvas", x0: int, y0: int, rows: List[int], on: bool, ax: int, ay: int) -> None:
    """Paint the set bits of left-justified rows, doubling pixels per axis flag."""
    for j, row in enumerate(rows):
        if row == 0:
            continue
        y = y0 + j * (1 + ay)
        for i in range(ROW_BITS):
            if not (row >> (ROW_BITS - 1 - i)) & 1:
                continue
            x = x0 + i * (1 + ax)
            canvas.plot(x, y, on)
            if ax:
                canvas.plot(x + 1, y, on)
            if ay:
                canvas.plot(x, y + 1, on)
                if ax:
                    canvas.plot(x + 1, y + 1, on)


def font_print(
    canvas: "Canvas",
    font: Font,
    x: int,
    y: int,
    text: str,
    on: bool = True,
    spacing: int = 0,
) -> int:
    """Print ``text`` with ``font``, top-left at (x, y).

    Parameters
    ----------
    canvas : Canvas
        Target canvas (its font aspect flags double glyph pixels)
    font : Font
        Font to print with
    x, y : int
        Top-left of the first glyph (scaled)
    text : str
        Characters to print; ones missing from the font advance one column
    on : bool
        Paint state
    spacing : int
        Extra columns after every glyph

    Returns
    -------
    int
        Device x coordinate after the last glyph

    Notes
    -----
    A glyph whose ``ga`` equals the previous glyph's nonzero ``gn`` is drawn
    one column further left, and the advance shrinks by one as well.
    """
    x, y = canvas.scaled(x, y)
    ax, ay = canvas.font_aspect_x, canvas.font_aspect_y
    last_group = 0

    for ch in text:
        glyph = font.glyph(ch)
        if glyph is None:
            width, shift, last_group = 0, 0, 0
        else:
            shift = -1 if last_group != 0 and glyph.ga == last_group else 0
            _paint_rows(canvas, x + shift + glyph.offset_x, y + glyph.offset_y, glyph.data, on, ax, ay)
            width = glyph.width
            last_group = glyph.gn
        x += width + 1 + shift + spacing
        if ax:
            x += width + 1 + shift
    return x


def stamp(canvas: "Canvas", stamp: Stamp, x: int, y: int, on: bool = True, opaque: bool = False) -> None:
    """Paint ``stamp`` with its top-left at (x, y).

    With ``opaque`` the unset bits inside the stamp width are painted with
    the opposite state instead of being skipped.
    """
    x, y = canvas.scaled(x, y)
    width = stamp.width
    for j, row in enumerate(stamp.data):
        for i in range(width):
            if (row >> (ROW_BITS - 1 - i)) & 1:
                canvas.plot(x + i, y + j, on)
            elif opaque:
                canvas.plot(x + i, y + j, not on)


def picture(
    canvas: "Canvas",
    pic: Picture,
    x: int,
    y: int,
    segment: int = 0,
    transparent: bool = False,
) -> None:
    """Blit a picture (or one tile of it) with its top-left at (x, y).

    Parameters
    ----------
    canvas : Canvas
        Target canvas
    pic : Picture
        Source picture
    x, y : int
        Destination top-left (scaled)
    segment : int
        1-based tile index; 0 or out of range blits the whole picture
    transparent : bool
        Skip source pixels equal to ``pic.color_key``
    """
    x, y = canvas.scaled(x, y)
    sx, sy, w, h = pic.segment_rect(segment)
    block = pic.data[sy:sy + h, sx:sx + w]

    ys, xs = np.mgrid[y:y + h, x:x + w]
    mask = canvas.bounds_mask(xs, ys)
    if transparent:
        mask &= block != pic.color_key
    canvas.pixels[ys[mask], xs[mask]] = block[mask]


# ============================================================================
# BUILT-IN ASSETS
# ============================================================================

def _g(rows: List[int], width: int = 0, gn: int = 0, ga: int = 0) -> Glyph:
    return Glyph(data=list(rows), width=width, gn=gn, ga=ga)


def default_font() -> Font:
    """5-row font with digits, upper-case letters and common punctuation.

    L and T form a kerning pair (T kerns against L), as do T and J.
    """
    font = Font(chars={
        32: _g([0b000, 0b000, 0b000, 0b000, 0b000], width=3),
        46: _g([0b000, 0b000, 0b000, 0b000, 0b010], width=3),
        44: _g([0b000, 0b000, 0b000, 0b010, 0b100]),
        33: _g([0b010, 0b010, 0b010, 0b000, 0b010]),
        40: _g([0b001, 0b010, 0b010, 0b010, 0b001]),
        41: _g([0b010, 0b001, 0b001, 0b001, 0b010]),
        91: _g([0b011, 0b010, 0b010, 0b010, 0b011]),
        93: _g([0b011, 0b001, 0b001, 0b001, 0b011]),
        42: _g([0b00000, 0b00100, 0b11111, 0b01010, 0b00000]),
        43: _g([0b000, 0b010, 0b111, 0b010, 0b000]),
        45: _g([0b000, 0b000, 0b111, 0b000, 0b000]),
        47: _g([0b001, 0b010, 0b010, 0b100, 0b100]),
        92: _g([0b100, 0b010, 0b010, 0b001, 0b001]),
        61: _g([0b000, 0b111, 0b000, 0b111, 0b000]),
        65: _g([0b01110, 0b10001, 0b11111, 0b10001, 0b10001]),
        66: _g([0b11110, 0b10001, 0b11110, 0b10001, 0b11110]),
        67: _g([0b01110, 0b10001, 0b10000, 0b10001, 0b01110]),
        68: _g([0b11110, 0b10001, 0b10001, 0b10001, 0b11110]),
        69: _g([0b1111, 0b1000, 0b1110, 0b1000, 0b1111]),
        70: _g([0b1111, 0b1000, 0b1110, 0b1000, 0b1000]),
        71: _g([0b01110, 0b10000, 0b10111, 0b10001, 0b01110]),
        72: _g([0b10001, 0b10001, 0b11111, 0b10001, 0b10001]),
        73: _g([0b111, 0b010, 0b010, 0b010, 0b111]),
        74: _g([0b0001, 0b0001, 0b0001, 0b1001, 0b0110], ga=2),
        75: _g([0b10001, 0b11110, 0b10100, 0b10010, 0b10001]),
        76: _g([0b1000, 0b1000, 0b1000, 0b1000, 0b1111], gn=1),
        77: _g([0b10001, 0b11011, 0b10101, 0b10001, 0b10001]),
        78: _g([0b10001, 0b11001, 0b10101, 0b10011, 0b10001]),
        79: _g([0b01110, 0b10001, 0b10001, 0b10001, 0b01110]),
        80: _g([0b11110, 0b10001, 0b11110, 0b10000, 0b10000]),
        81: _g([0b01110, 0b10001, 0b10001, 0b10010, 0b01101]),
        82: _g([0b11110, 0b10001, 0b11110, 0b10010, 0b10001]),
        83: _g([0b01111, 0b10000, 0b01110, 0b00001, 0b11110]),
        84: _g([0b11111, 0b00100, 0b00100, 0b00100, 0b00100], gn=2, ga=1),
        85: _g([0b10001, 0b10001, 0b10001, 0b10001, 0b01110]),
        86: _g([0b10001, 0b10001, 0b10001, 0b01010, 0b00100]),
        87: _g([0b10001, 0b10001, 0b10101, 0b11011, 0b10001]),
        88: _g([0b10001, 0b01010, 0b00100, 0b01010, 0b10001]),
        89: _g([0b10001, 0b01010, 0b00100, 0b00100, 0b00100]),
        90: _g([0b11111, 0b00010, 0b00100, 0b01000, 0b11111]),
        48: _g([0b01110, 0b10001, 0b10101, 0b10001, 0b01110]),
        49: _g([0b010, 0b110, 0b010, 0b010, 0b111]),
        50: _g([0b11110, 0b00001, 0b01110, 0b10000, 0b11111]),
        51: _g([0b11110, 0b00001, 0b01110, 0b00001, 0b11110]),
        52: _g([0b10010, 0b10010, 0b11111, 0b00010, 0b00010]),
        53: _g([0b11111, 0b10000, 0b11110, 0b00001, 0b11110]),
        54: _g([0b01110, 0b10000, 0b11110, 0b10001, 0b01110]),
        55: _g([0b11111, 0b00001, 0b00010, 0b00100, 0b01000]),
        56: _g([0b01110, 0b10001, 0b01110, 0b10001, 0b01110]),
        57: _g([0b01110, 0b10001, 0b01111, 0b00001, 0b01110]),
    })
    font.prepare()
    return font


def default_stamp() -> Stamp:
    """56x13 badge bitmap."""
    return Stamp(data=[
        0b00111111111111111111111111110011111111111111111111111100,
        0b01000000000000000000000000000111111111111111111111111110,
        0b10011111000000000000000000011000001100100111011000001111,
        0b10011000100000000000000000011001110100100111010011110111,
        0b10011000101000000000000010011001110100100011010011111111,
        0b10011000100000000000000010011001110100100101010011111111,
        0b10011111001010001001110010011001110100100110010011000111,
        0b10011000001001010010001010011001110100100111010011110111,
        0b10011000001000100011111010011001110100100111010011110111,
        0b10011000001001010010000010011001110100100111010011110111,
        0b10011000001010001001110011011000001100100111011000001111,
        0b01000000000000000000000000001111111111111111111111111110,
        0b00111111111111111111111111100111111111111111111111111100,
    ])
