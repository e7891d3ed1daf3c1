"""Pixel/color canvas: the session object every drawing call mutates.

Holds the packed-color pixel grid, the half-resolution text overlay, clipping,
scale and aspect state, drawing colors, the color mode, the last rendered
frame, the last recorded error and the named asset registry.

Coordinate conventions:
    - Public pixel calls (set_pixel, get_pixel, ...) pass coordinates through
      the scale factor first.
    - plot / plot_color / is_set / color_at take device coordinates and are
      used by the rasterizer after it has scaled its inputs once.
    - Writes outside the canvas or an active clip rectangle are ignored;
      reads there return background / False.

Usage:
    canvas = Canvas(160, 96)
    canvas.set_color_mode("truecolor")
    canvas.set_color(color.rgb(255, 128, 0))
    raster.line(canvas, 0, 0, 159, 95)
    lines = render.render(canvas)
"""

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

import numpy as np

from blockpaint.utils.color import ColorMode, parse_color_mode
from blockpaint.utils.errors import AssetStoreError, BlockPaintError, DimensionError, ParseError
from blockpaint.utils.validators import DEF_STEP, MAX_STEP, MAX_X, MAX_Y, CanvasConfigV1

from .assets import AssetRegistry, Font, Picture, Stamp

if TYPE_CHECKING:
    from .store import AssetStore

logger = logging.getLogger(__name__)


def _check_dimensions(width: int, height: int) -> Optional[DimensionError]:
    if width < 1 or height < 1 or width > MAX_X or height > MAX_Y:
        return DimensionError(
            f"Canvas dimensions {width}x{height} outside [1, {MAX_X}]x[1, {MAX_Y}]"
        )
    return None


class Canvas:
    """Virtual pixel canvas and drawing session state.

    Parameters
    ----------
    width : int
        Width in pixels, 1..MAX_X
    height : int
        Height in pixels, 1..MAX_Y

    Raises
    ------
    DimensionError
        If either dimension is outside its range

    Attributes
    ----------
    pixels : np.ndarray
        (height, width) uint32 packed colors, 0 = background
    overlay : np.ndarray
        (height // 2 + 1, width) single characters, '' = empty
    foreground, background : int
        Colors written for "on" / "off" pixels
    color_mode : ColorMode
        Rendering mode used by the render engine
    buffer : List[str]
        Last rendered frame
    last_error : Optional[BlockPaintError]
        Most recent recorded failure
    assets : AssetRegistry
        Named fonts, stamps and pictures ("__std" font and stamp preloaded)
    """

    def __init__(self, width: int, height: int):
        err = _check_dimensions(width, height)
        if err is not None:
            raise err

        self._allocate(width, height)
        self.clip_rect: Tuple[int, int, int, int] = (0, 0, 0, 0)
        self.clipping = False
        self.foreground = 1
        self.background = 0
        self.toggle = False
        self.invert = False
        self.scale_factor = 0.0
        self.steps = DEF_STEP
        self.aspect_x = 0
        self.aspect_y = 0
        self.font_aspect_x = 0
        self.font_aspect_y = 0
        self.color_mode = ColorMode.NONE
        self.buffer: List[str] = []
        self.last_error: Optional[BlockPaintError] = None
        self.assets = AssetRegistry()

        logger.debug(f"Canvas created: {width}x{height}")

    @classmethod
    def from_config(cls, cfg: CanvasConfigV1) -> "Canvas":
        """Build a canvas from a validated canvas.v1 config."""
        canvas = cls(cfg.width, cfg.height)
        canvas.color_mode = cfg.color_mode
        canvas.set_step(cfg.step)
        canvas.set_scale(cfg.scale)
        canvas.set_aspect(cfg.aspect.x, cfg.aspect.y)
        canvas.set_font_aspect(cfg.font_aspect.x, cfg.font_aspect.y)
        canvas.set_invert(cfg.invert)
        canvas.set_toggle(cfg.toggle)
        canvas.set_color(cfg.foreground, cfg.background)
        if cfg.clip is not None:
            clip = cfg.clip
            canvas.set_clipping(clip.enabled, (clip.x0, clip.y0, clip.x1, clip.y1))
        logger.info(
            f"Canvas configured: {cfg.width}x{cfg.height}, mode={canvas.color_mode.name}, "
            f"step={canvas.steps}, scale={canvas.scale_factor}"
        )
        return canvas

    # ------------------------------------------------------------------
    # Dimensions and errors

    def _allocate(self, width: int, height: int) -> None:
        self._width = width
        self._height = height
        self.pixels = np.zeros((height, width), dtype=np.uint32)
        self.overlay = np.full((height // 2 + 1, width), '', dtype='<U1')

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def set_dimensions(self, width: int, height: int) -> Optional[DimensionError]:
        """Reallocate the canvas at a new size.

        Invalid sizes leave the canvas untouched; the error is recorded in
        ``last_error`` and returned.
        """
        err = _check_dimensions(width, height)
        if err is not None:
            self.record_error(err)
            return err
        self._allocate(width, height)
        return None

    def clear(self) -> None:
        """Zero the pixel and overlay grids, keeping the dimensions."""
        self._allocate(self._width, self._height)

    def record_error(self, err: BlockPaintError) -> BlockPaintError:
        """Store ``err`` as the last error and log it."""
        self.last_error = err
        logger.warning(f"{type(err).__name__}: {err}")
        return err

    # ------------------------------------------------------------------
    # Drawing state

    def set_color(self, foreground: int, background: Optional[int] = None) -> None:
        """Set the drawing foreground, and optionally background, color."""
        self.foreground = int(foreground)
        if background is not None:
            self.background = int(background)

    def set_toggle(self, enabled: bool) -> None:
        self.toggle = bool(enabled)

    def set_invert(self, enabled: bool) -> None:
        self.invert = bool(enabled)

    def set_scale(self, factor: float) -> None:
        """Uniform scale applied to public coordinates; 0 disables."""
        self.scale_factor = float(factor)

    def set_step(self, steps: int) -> None:
        """Curve sample count; values outside [1, 50] fall back to the default."""
        if steps < 1 or steps > MAX_STEP:
            self.steps = DEF_STEP
        else:
            self.steps = int(steps)

    def set_aspect(self, x: Union[bool, int], y: Union[bool, int]) -> None:
        """Render 1 pixel per cell column (x) and/or row (y) in no-color mode."""
        self.aspect_x = 1 if x and x > 0 else 0
        self.aspect_y = 1 if y and y > 0 else 0

    def set_font_aspect(self, x: Union[bool, int], y: Union[bool, int]) -> None:
        """Double glyph pixels horizontally (x) and/or vertically (y)."""
        self.font_aspect_x = 1 if x and x > 0 else 0
        self.font_aspect_y = 1 if y and y > 0 else 0

    def set_color_mode(self, mode: Union[int, str, ColorMode]) -> Optional[ParseError]:
        """Select the rendering color mode.

        Unsupported values keep the current mode; the ParseError is recorded
        in ``last_error`` and returned.
        """
        try:
            self.color_mode = parse_color_mode(mode)
        except ParseError as e:
            self.record_error(e)
            return e
        return None

    def set_clipping(self, enable: bool, rect: Optional[Tuple[int, int, int, int]] = None) -> None:
        """Enable or disable the inclusive clip rectangle.

        Enabling without ``rect`` reuses the last configured rectangle.
        """
        self.clipping = bool(enable)
        if rect is not None:
            x0, y0, x1, y1 = rect
            self.clip_rect = (int(x0), int(y0), int(x1), int(y1))

    # ------------------------------------------------------------------
    # Coordinate helpers

    def scaled(self, x: float, y: float) -> Tuple[int, int]:
        """Apply the scale factor to a point (truncating toward zero)."""
        if self.scale_factor != 0.0:
            return int(x * self.scale_factor), int(y * self.scale_factor)
        return int(x), int(y)

    def scaled_length(self, v: float) -> int:
        """Apply the scale factor to a length such as a radius."""
        if self.scale_factor != 0.0:
            return int(v * self.scale_factor)
        return int(v)

    def in_bounds(self, x: int, y: int) -> bool:
        """True if device pixel (x, y) is writable (canvas and active clip)."""
        if self.clipping:
            cx0, cy0, cx1, cy1 = self.clip_rect
            if x < cx0 or x > cx1 or y < cy0 or y > cy1:
                return False
        return 0 <= x < self._width and 0 <= y < self._height

    def bounds_mask(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Vectorized in_bounds over integer coordinate arrays."""
        mask = (xs >= 0) & (xs < self._width) & (ys >= 0) & (ys < self._height)
        if self.clipping:
            cx0, cy0, cx1, cy1 = self.clip_rect
            mask &= (xs >= cx0) & (xs <= cx1) & (ys >= cy0) & (ys <= cy1)
        return mask

    # ------------------------------------------------------------------
    # Device-coordinate access (no scaling)

    def plot(self, x: int, y: int, on: bool = True) -> None:
        if not self.in_bounds(x, y):
            return
        if self.toggle:
            on = self.pixels[y, x] == 0
        self.pixels[y, x] = self.foreground if on else self.background

    def plot_color(self, x: int, y: int, color: int) -> None:
        if not self.in_bounds(x, y):
            return
        self.pixels[y, x] = color

    def is_set(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return bool(self.pixels[y, x] != 0)

    def color_at(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            return 0
        return int(self.pixels[y, x])

    # ------------------------------------------------------------------
    # Public pixel API (scaled)

    def set_pixel(self, x: int, y: int, on: bool = True) -> None:
        """Set (or clear) the pixel at (x, y); ignored outside bounds/clip."""
        self.plot(*self.scaled(x, y), on)

    def set_pixel_color(self, x: int, y: int, color: int) -> None:
        """Write a packed color at (x, y); ignored outside bounds/clip."""
        self.plot_color(*self.scaled(x, y), color)

    def get_pixel(self, x: int, y: int) -> bool:
        """True if the pixel at (x, y) holds a nonzero color."""
        return self.is_set(*self.scaled(x, y))

    def get_pixel_color(self, x: int, y: int) -> int:
        """Packed color at (x, y); 0 outside bounds/clip."""
        return self.color_at(*self.scaled(x, y))

    # ------------------------------------------------------------------
    # Asset store bridge

    def import_font(self, store: "AssetStore", name: str, register_as: Optional[str] = None) -> Optional[Font]:
        """Load a font from ``store`` and register it; None on failure."""
        try:
            font = store.load_font(name)
        except AssetStoreError as e:
            self.record_error(e)
            return None
        self.assets.add_font(register_as or name, font)
        return font

    def import_stamp(self, store: "AssetStore", name: str, register_as: Optional[str] = None) -> Optional[Stamp]:
        """Load a stamp from ``store`` and register it; None on failure."""
        try:
            stamp = store.load_stamp(name)
        except AssetStoreError as e:
            self.record_error(e)
            return None
        self.assets.add_stamp(register_as or name, stamp)
        return stamp

    def import_picture(self, store: "AssetStore", name: str, register_as: Optional[str] = None) -> Optional[Picture]:
        """Load a picture from ``store`` and register it; None on failure."""
        try:
            picture = store.load_picture(name)
        except (AssetStoreError, DimensionError) as e:
            self.record_error(e)
            return None
        self.assets.add_picture(register_as or name, picture)
        return picture
