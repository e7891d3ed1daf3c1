"""Tests for the Canvas session object.

Test suites:
1. Construction and dimensions
2. Bounds and clipping
3. Pixel state (toggle, colors, scale)
4. Session settings (step, color mode, aspect)
5. Config and asset store bridge

Fixtures:
- canvas: blank 32x16 canvas in no-color mode

Run:
    pytest tests/test_canvas.py -v
"""

import numpy as np
import pytest

from blockpaint.engine.canvas import Canvas
from blockpaint.engine.store import YamlAssetStore
from blockpaint.utils.color import ColorMode
from blockpaint.utils.errors import AssetStoreError, DimensionError, ParseError
from blockpaint.utils.validators import DEF_STEP, MAX_X, CanvasConfigV1


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def canvas():
    """Blank 32x16 canvas."""
    return Canvas(32, 16)


# ============================================================================
# TEST SUITE 1: Construction and dimensions
# ============================================================================

def test_initialization(canvas):
    """New canvas is blank with default session state."""
    assert canvas.width == 32
    assert canvas.height == 16
    assert canvas.pixels.shape == (16, 32)
    assert canvas.pixels.dtype == np.uint32
    assert not canvas.pixels.any()
    assert canvas.overlay.shape == (9, 32)
    assert canvas.color_mode == ColorMode.NONE
    assert canvas.steps == DEF_STEP
    assert canvas.last_error is None


@pytest.mark.parametrize("w,h", [(0, 10), (10, 0), (-1, 5), (MAX_X + 1, 10), (10, 2001)])
def test_invalid_dimensions_raise(w, h):
    """Constructor rejects sizes outside 1..MAX."""
    with pytest.raises(DimensionError, match="outside"):
        Canvas(w, h)


def test_max_width_accepted():
    c = Canvas(MAX_X, 1)
    assert c.width == MAX_X


def test_set_dimensions_invalid_is_recorded(canvas):
    """Invalid resize keeps the canvas and records the error."""
    canvas.set_pixel(1, 1)
    err = canvas.set_dimensions(0, 5)

    assert isinstance(err, DimensionError)
    assert canvas.last_error is err
    assert canvas.width == 32
    assert canvas.get_pixel(1, 1)


def test_set_dimensions_reallocates(canvas):
    canvas.set_pixel(1, 1)
    assert canvas.set_dimensions(8, 6) is None
    assert canvas.pixels.shape == (6, 8)
    assert not canvas.pixels.any()


def test_clear(canvas):
    canvas.set_pixel(3, 3)
    canvas.overlay[0, 0] = "x"
    canvas.clear()
    assert not canvas.pixels.any()
    assert canvas.overlay[0, 0] == ""
    assert canvas.width == 32


# ============================================================================
# TEST SUITE 2: Bounds and clipping
# ============================================================================

@pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (32, 0), (0, 16), (100, 100)])
def test_out_of_bounds_is_noop(canvas, x, y):
    """Writes outside the canvas are ignored; reads return background."""
    before = canvas.pixels.copy()
    canvas.set_pixel(x, y)
    canvas.set_pixel_color(x, y, 0xff)

    assert np.array_equal(canvas.pixels, before)
    assert canvas.get_pixel(x, y) is False
    assert canvas.get_pixel_color(x, y) == 0


def test_clip_rect_limits_writes(canvas):
    canvas.set_clipping(True, (2, 2, 5, 5))
    canvas.set_pixel(1, 1)
    canvas.set_pixel(3, 3)
    canvas.set_pixel(5, 5)
    canvas.set_pixel(6, 5)

    assert canvas.pixels[1, 1] == 0
    assert canvas.pixels[3, 3] != 0
    assert canvas.pixels[5, 5] != 0
    assert canvas.pixels[5, 6] == 0


def test_clip_reads_hide_outside_pixels(canvas):
    canvas.set_pixel(0, 0)
    canvas.set_clipping(True, (2, 2, 5, 5))
    assert canvas.get_pixel(0, 0) is False

    canvas.set_clipping(False)
    assert canvas.get_pixel(0, 0) is True


def test_clip_reenable_reuses_rect(canvas):
    canvas.set_clipping(True, (2, 2, 5, 5))
    canvas.set_clipping(False)
    canvas.set_clipping(True)
    assert canvas.clip_rect == (2, 2, 5, 5)
    assert not canvas.in_bounds(1, 1)


def test_bounds_mask_matches_in_bounds(canvas):
    canvas.set_clipping(True, (4, 2, 20, 10))
    ys, xs = np.mgrid[-2:18, -2:34]
    mask = canvas.bounds_mask(xs, ys)
    expected = np.array([[canvas.in_bounds(int(x), int(y)) for x in row_x]
                         for row_x, y in zip(xs, ys[:, 0])])
    assert np.array_equal(mask, expected)


# ============================================================================
# TEST SUITE 3: Pixel state
# ============================================================================

def test_set_and_clear_pixel(canvas):
    canvas.set_pixel(4, 7)
    assert canvas.get_pixel(4, 7)
    canvas.set_pixel(4, 7, False)
    assert not canvas.get_pixel(4, 7)


def test_toggle_flips_state(canvas):
    canvas.set_toggle(True)
    canvas.set_pixel(2, 2)
    assert canvas.get_pixel(2, 2)
    canvas.set_pixel(2, 2)
    assert not canvas.get_pixel(2, 2)


def test_colors_written(canvas):
    canvas.set_color(0xff0000, 0x000010)
    canvas.set_pixel(1, 1)
    canvas.set_pixel(2, 1, False)

    assert canvas.get_pixel_color(1, 1) == 0xff0000
    # A nonzero background still reads as set
    assert canvas.get_pixel_color(2, 1) == 0x000010
    assert canvas.get_pixel(2, 1)


def test_set_color_keeps_background(canvas):
    canvas.set_color(5, 7)
    canvas.set_color(9)
    assert canvas.foreground == 9
    assert canvas.background == 7


def test_scale_applied_to_public_calls(canvas):
    canvas.set_scale(2.0)
    canvas.set_pixel(3, 4)
    assert canvas.pixels[8, 6] != 0
    assert canvas.get_pixel(3, 4)
    assert canvas.scaled(1.9, 1.9) == (3, 3)


def test_scale_zero_disables(canvas):
    canvas.set_scale(0)
    assert canvas.scaled(5, 6) == (5, 6)
    assert canvas.scaled_length(7) == 7


# ============================================================================
# TEST SUITE 4: Session settings
# ============================================================================

@pytest.mark.parametrize("steps,expected", [(1, 1), (50, 50), (0, DEF_STEP), (51, DEF_STEP), (-3, DEF_STEP)])
def test_set_step(canvas, steps, expected):
    canvas.set_step(steps)
    assert canvas.steps == expected


def test_set_color_mode(canvas):
    assert canvas.set_color_mode("truecolor") is None
    assert canvas.color_mode == ColorMode.TRUECOLOR
    assert canvas.set_color_mode(2) is None
    assert canvas.color_mode == ColorMode.PALETTE


def test_set_color_mode_invalid_recorded(canvas):
    err = canvas.set_color_mode("bogus")
    assert isinstance(err, ParseError)
    assert canvas.last_error is err
    assert canvas.color_mode == ColorMode.NONE


def test_aspect_flags_normalized(canvas):
    canvas.set_aspect(True, 0)
    assert (canvas.aspect_x, canvas.aspect_y) == (1, 0)
    canvas.set_font_aspect(-1, 3)
    assert (canvas.font_aspect_x, canvas.font_aspect_y) == (0, 1)


# ============================================================================
# TEST SUITE 5: Config and asset store bridge
# ============================================================================

def test_from_config():
    cfg = CanvasConfigV1(**{
        "schema": "canvas.v1",
        "width": 40,
        "height": 20,
        "color_mode": "palette",
        "step": 20,
        "aspect": {"x": True},
        "foreground": 9,
        "clip": {"x0": 1, "y0": 1, "x1": 10, "y1": 10},
    })
    c = Canvas.from_config(cfg)

    assert (c.width, c.height) == (40, 20)
    assert c.color_mode == ColorMode.PALETTE
    assert c.steps == 20
    assert c.aspect_x == 1 and c.aspect_y == 0
    assert c.foreground == 9
    assert c.clipping
    assert c.clip_rect == (1, 1, 10, 10)


def test_registry_preloaded(canvas):
    assert canvas.assets.get_font("__std") is not None
    assert canvas.assets.get_stamp("__std") is not None
    assert canvas.assets.get_picture("__std") is None


def test_import_missing_asset_recorded(canvas, tmp_path):
    store = YamlAssetStore(tmp_path)
    assert canvas.import_font(store, "nope") is None
    assert isinstance(canvas.last_error, AssetStoreError)
    assert canvas.import_picture(store, "nope") is None
    assert canvas.assets.get_picture("nope") is None
