"""blockpaint: character-cell 2D rendering for text terminals.

This package rasterizes vector and bitmap primitives onto a virtual pixel
canvas and compresses the result into rows of Unicode block-drawing glyphs,
optionally carrying ANSI color state.

Architecture layers (strict one-way dependency):
    blockpaint/engine/ → blockpaint/utils/

Key invariants:
    - Integer pixel coordinates; the canvas scale factor is applied once
    - Packed colors: 0 is background, any nonzero value reads as "set"
    - Bitmap rows always fit in 64 bits
    - YAML-only asset and config files
"""

__version__ = "1.2.0"
