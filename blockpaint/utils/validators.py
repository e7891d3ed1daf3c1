"""YAML schema validation and config loading.

Provides centralized validation for all blockpaint files using pydantic:
    - Canvas schema (canvas.v1.yaml): dimensions, color mode, scale, aspect, clip
    - Font schema (font.v1.yaml): glyph bitmaps with kerning groups
    - Stamp schema (stamp.v1.yaml): single bit-packed bitmap
    - Picture schema (picture.v1.yaml): dense color grid with optional tiles

All loaders fail fast with actionable messages (offending keys, expected ranges).

Units:
    - Geometry: canvas pixels
    - Bitmap rows: unsigned 64-bit integers, bit 63 = leftmost column after
      normalization
    - Colors: packed ints (see utils.color)

Usage:
    from blockpaint.utils import validators

    cfg = validators.load_canvas_config("canvas.yaml")
    canvas = Canvas.from_config(cfg)
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .color import ColorMode, parse_color_mode
from .errors import ParseError


# ============================================================================
# LIMITS
# ============================================================================

MAX_X = 4000
MAX_Y = 2000
DEF_STEP = 15
MAX_STEP = 50
ROW_BITS = 64
ROW_MASK = (1 << ROW_BITS) - 1


def _check_rows(rows: List[int]) -> List[int]:
    for i, row in enumerate(rows):
        if row < 0 or row > ROW_MASK:
            raise ValueError(f"Row {i} value {row} does not fit in {ROW_BITS} bits")
    return rows


# ============================================================================
# CANVAS SCHEMA V1
# ============================================================================

class AxisFlags(BaseModel):
    """Per-axis on/off switches (aspect overrides, font doubling)."""
    x: bool = False
    y: bool = False


class ClipRect(BaseModel):
    """Inclusive clip rectangle in canvas pixels."""
    x0: int
    y0: int
    x1: int
    y1: int
    enabled: bool = True


class LoggingConfig(BaseModel):
    """Arguments forwarded to logging_config.setup_logging()."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = Field(False, alias="json")
    color: bool = True

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}, got {v}")
        return v.upper()


class CanvasConfigV1(BaseModel):
    """Canvas session configuration (canvas.v1.yaml schema)."""
    schema_version: str = Field("canvas.v1", alias="schema", description="Schema version")
    width: int = Field(..., ge=1, le=MAX_X, description="Canvas width (px)")
    height: int = Field(..., ge=1, le=MAX_Y, description="Canvas height (px)")
    color_mode: ColorMode = Field(ColorMode.NONE, description="none, 16, palette or truecolor")
    step: int = Field(DEF_STEP, ge=1, le=MAX_STEP, description="Curve sample count")
    scale: float = Field(0.0, ge=0.0, description="Uniform scale factor, 0 disables")
    aspect: AxisFlags = Field(default_factory=AxisFlags)
    font_aspect: AxisFlags = Field(default_factory=AxisFlags)
    invert: bool = False
    toggle: bool = False
    foreground: int = Field(1, ge=0, le=0xFFFFFFFF)
    background: int = Field(0, ge=0, le=0xFFFFFFFF)
    clip: Optional[ClipRect] = None
    logging: Optional[LoggingConfig] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "canvas.v1":
            raise ValueError(f"Expected schema 'canvas.v1', got '{v}'")
        return v

    @field_validator('color_mode', mode='before')
    @classmethod
    def validate_color_mode(cls, v: Union[int, str, ColorMode]) -> ColorMode:
        try:
            return parse_color_mode(v)
        except ParseError as e:
            raise ValueError(str(e)) from e


# ============================================================================
# ASSET SCHEMAS V1
# ============================================================================

class GlyphV1(BaseModel):
    """One font character: bit-packed rows plus kerning groups."""
    offset_x: int = 0
    offset_y: int = 0
    width: int = Field(0, ge=0, le=ROW_BITS, description="Advance width, 0 = detect")
    height: int = Field(0, ge=0, description="Row count (filled on prepare)")
    bit_length: int = Field(0, ge=0, le=ROW_BITS, description="Min trailing zeros")
    gn: int = Field(0, ge=0, description="Own glue group")
    ga: int = Field(0, ge=0, description="Group this glyph kerns against")
    prepared: bool = Field(False, description="Rows already left-justified")
    data: List[int] = Field(default_factory=list)

    @field_validator('data')
    @classmethod
    def validate_rows(cls, v: List[int]) -> List[int]:
        return _check_rows(v)


class FontV1(BaseModel):
    """Font record (font.v1.yaml schema)."""
    schema_version: str = Field("font.v1", alias="schema", description="Schema version")
    prepared: bool = False
    chars: Dict[int, GlyphV1] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "font.v1":
            raise ValueError(f"Expected schema 'font.v1', got '{v}'")
        return v


class StampV1(BaseModel):
    """Stamp record (stamp.v1.yaml schema)."""
    schema_version: str = Field("stamp.v1", alias="schema", description="Schema version")
    prepared: bool = False
    bit_length: int = Field(0, ge=0, le=ROW_BITS)
    data: List[int] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "stamp.v1":
            raise ValueError(f"Expected schema 'stamp.v1', got '{v}'")
        return v

    @field_validator('data')
    @classmethod
    def validate_rows(cls, v: List[int]) -> List[int]:
        return _check_rows(v)


class PictureV1(BaseModel):
    """Picture record (picture.v1.yaml schema)."""
    schema_version: str = Field("picture.v1", alias="schema", description="Schema version")
    mode: ColorMode = Field(ColorMode.TRUECOLOR)
    color_key: int = Field(0, ge=0, le=0xFFFFFFFF, description="Transparent color")
    width: int = Field(..., ge=1, le=MAX_X)
    height: int = Field(..., ge=1, le=MAX_Y)
    tile_width: int = Field(0, ge=0)
    tile_height: int = Field(0, ge=0)
    data: List[int] = Field(..., description="Row-major packed colors")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "picture.v1":
            raise ValueError(f"Expected schema 'picture.v1', got '{v}'")
        return v

    @field_validator('mode', mode='before')
    @classmethod
    def validate_mode(cls, v: Union[int, str, ColorMode]) -> ColorMode:
        try:
            return parse_color_mode(v)
        except ParseError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode='after')
    def validate_data_shape(self) -> 'PictureV1':
        """Data must hold exactly width × height colors; tiles must fit."""
        expected = self.width * self.height
        if len(self.data) != expected:
            raise ValueError(
                f"Picture data has {len(self.data)} values, expected {self.width}x{self.height}={expected}"
            )
        if self.tile_width > self.width or self.tile_height > self.height:
            raise ValueError(
                f"Tile {self.tile_width}x{self.tile_height} larger than picture {self.width}x{self.height}"
            )
        return self


# ============================================================================
# PUBLIC API
# ============================================================================

def load_canvas_config(path: Union[str, Path]) -> CanvasConfigV1:
    """Load and validate canvas config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to canvas.v1.yaml file

    Returns
    -------
    CanvasConfigV1
        Validated canvas configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Canvas config not found: {path}")

    data = fs.load_yaml(path)
    try:
        return CanvasConfigV1(**(data or {}))
    except Exception as e:
        raise ValueError(f"Canvas config validation failed at {path}: {e}") from e
