"""Test packed colors and ANSI escape construction.

Tests for blockpaint.utils.color:
    - rgb / unpack_rgb packing
    - rgb_mul dimming and clamping
    - Escape sequences per color mode
    - Color mode parsing

Test cases:
    - test_rgb_pack_unpack()
    - test_rgb_masks_channels()
    - test_rgb_mul()
    - test_escapes_per_mode()
    - test_parse_color_mode()
    - test_parse_color_mode_rejects()
    - test_cursor_escapes()

Run:
    pytest tests/test_color.py -v
"""

import pytest

from blockpaint.utils import color
from blockpaint.utils.color import ESC_CLEAR, ESC_HOME, RESET, ColorMode
from blockpaint.utils.errors import ParseError


def test_rgb_pack_unpack():
    c = color.rgb(18, 52, 86)
    assert c == 0x123456
    assert color.unpack_rgb(c) == (18, 52, 86)


def test_rgb_masks_channels():
    assert color.rgb(256 + 1, 0, 0) == 0x010000


def test_rgb_mul():
    assert color.rgb_mul(color.rgb(100, 50, 200), 0.5) == color.rgb(50, 25, 100)
    assert color.rgb_mul(color.rgb(200, 10, 255), 2.0) == color.rgb(255, 20, 255)
    assert color.rgb_mul(0x808080, 0.0) == 0


@pytest.mark.parametrize("mode,fg,bg", [
    (ColorMode.NONE, "", ""),
    (ColorMode.COLOR16, "\033[1;32m", "\033[1;42m"),
    (ColorMode.PALETTE, "\033[38;5;32m", "\033[48;5;32m"),
    (ColorMode.TRUECOLOR, "\033[38;2;0;0;32m", "\033[48;2;0;0;32m"),
])
def test_escapes_per_mode(mode, fg, bg):
    assert color.fg_escape(mode, color.GREEN) == fg
    assert color.bg_escape(mode, color.GREEN) == bg


@pytest.mark.parametrize("value,mode", [
    (0, ColorMode.NONE),
    (3, ColorMode.TRUECOLOR),
    ("16", ColorMode.COLOR16),
    (" Palette ", ColorMode.PALETTE),
    ("rgb", ColorMode.TRUECOLOR),
    (ColorMode.PALETTE, ColorMode.PALETTE),
])
def test_parse_color_mode(value, mode):
    assert color.parse_color_mode(value) == mode


@pytest.mark.parametrize("value", [4, -1, "cmyk", ""])
def test_parse_color_mode_rejects(value):
    with pytest.raises(ParseError, match="Unsupported color mode"):
        color.parse_color_mode(value)


def test_cursor_escapes():
    assert ESC_HOME == "\033[0;0H"
    assert ESC_CLEAR == "\033[J"
    assert RESET == "\033[0m"
