"""Test YAML schema validation and config loading.

Tests for blockpaint.utils.validators:
    - Load a valid canvas.v1 YAML
    - Reject invalid YAMLs with clear error messages
    - Bounds checking (out-of-range values rejected)
    - Schema tags (canvas.v1, font.v1, stamp.v1, picture.v1)

Test cases:
    - test_canvas_defaults()
    - test_canvas_color_mode_names()
    - test_canvas_out_of_bounds()
    - test_canvas_wrong_schema()
    - test_load_canvas_config()
    - test_load_canvas_config_missing()
    - test_load_canvas_config_invalid()
    - test_logging_section()
    - test_glyph_row_overflow()
    - test_picture_shape_checks()

Run:
    pytest tests/test_schemas.py -v
"""

import pytest
from pydantic import ValidationError

from blockpaint.utils import validators
from blockpaint.utils.color import ColorMode
from blockpaint.utils.validators import (
    CanvasConfigV1,
    FontV1,
    GlyphV1,
    LoggingConfig,
    PictureV1,
    StampV1,
)


def test_canvas_defaults():
    cfg = CanvasConfigV1(width=80, height=48)
    assert cfg.schema_version == "canvas.v1"
    assert cfg.color_mode == ColorMode.NONE
    assert cfg.step == validators.DEF_STEP
    assert cfg.scale == 0.0
    assert cfg.clip is None
    assert not cfg.aspect.x and not cfg.aspect.y


@pytest.mark.parametrize("value,mode", [
    ("truecolor", ColorMode.TRUECOLOR),
    ("256", ColorMode.PALETTE),
    (1, ColorMode.COLOR16),
    ("none", ColorMode.NONE),
])
def test_canvas_color_mode_names(value, mode):
    assert CanvasConfigV1(width=4, height=4, color_mode=value).color_mode == mode


@pytest.mark.parametrize("overrides", [
    {"width": 0},
    {"width": validators.MAX_X + 1},
    {"height": validators.MAX_Y + 1},
    {"step": 0},
    {"step": validators.MAX_STEP + 1},
    {"scale": -1.0},
    {"color_mode": "sepia"},
])
def test_canvas_out_of_bounds(overrides):
    data = {"width": 10, "height": 10, **overrides}
    with pytest.raises(ValidationError):
        CanvasConfigV1(**data)


def test_canvas_wrong_schema():
    with pytest.raises(ValidationError, match="canvas.v1"):
        CanvasConfigV1(**{"schema": "canvas.v2", "width": 4, "height": 4})


def test_load_canvas_config(tmp_path):
    path = tmp_path / "canvas.yaml"
    path.write_text(
        "schema: canvas.v1\n"
        "width: 160\n"
        "height: 96\n"
        "color_mode: truecolor\n"
        "scale: 2.0\n"
        "font_aspect: {x: true}\n"
        "clip: {x0: 0, y0: 0, x1: 79, y1: 47}\n"
    )
    cfg = validators.load_canvas_config(path)

    assert (cfg.width, cfg.height) == (160, 96)
    assert cfg.color_mode == ColorMode.TRUECOLOR
    assert cfg.scale == 2.0
    assert cfg.font_aspect.x
    assert cfg.clip.enabled
    assert cfg.clip.x1 == 79


def test_load_canvas_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        validators.load_canvas_config(tmp_path / "absent.yaml")


def test_load_canvas_config_invalid(tmp_path):
    path = tmp_path / "canvas.yaml"
    path.write_text("schema: canvas.v1\nwidth: 0\nheight: 10\n")
    with pytest.raises(ValueError, match="validation failed"):
        validators.load_canvas_config(path)


def test_logging_section():
    cfg = CanvasConfigV1(width=4, height=4, logging={"log_level": "debug", "json": True})
    assert cfg.logging.log_level == "DEBUG"
    assert cfg.logging.json_format is True

    with pytest.raises(ValidationError, match="log_level"):
        LoggingConfig(log_level="chatty")


def test_glyph_row_overflow():
    with pytest.raises(ValidationError, match="64 bits"):
        GlyphV1(data=[1 << 64])
    with pytest.raises(ValidationError):
        StampV1(data=[-1])


def test_font_record_keys():
    record = FontV1(chars={"65": {"data": [1, 2]}})
    assert 65 in record.chars
    assert record.chars[65].data == [1, 2]


def test_picture_shape_checks():
    PictureV1(width=2, height=2, data=[0, 1, 2, 3], tile_width=1, tile_height=1)

    with pytest.raises(ValidationError, match="expected 2x2"):
        PictureV1(width=2, height=2, data=[0, 1, 2])
    with pytest.raises(ValidationError, match="Tile"):
        PictureV1(width=2, height=2, data=[0, 1, 2, 3], tile_width=4, tile_height=1)
