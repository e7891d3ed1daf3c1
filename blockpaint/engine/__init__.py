"""Drawing engine: canvas, rasterization, assets and text rendering.

Provides the drawing session and everything that mutates or reads it:
    - Canvas: pixel/color grid, clip rectangle, scale/aspect, overlay text
    - Rasterizer: lines, dotted lines, circles, ellipses, rectangles,
      flood fill, arcs and radius lines
    - Curves: quadratic and cubic Bézier flattening
    - Path interpreter: compact SVG-like path strings
    - Assets: fonts, stamps and tiled pictures composited onto the canvas
    - Render engine: block-character and half-block ANSI color output

Modules:
    - canvas: Canvas session object
    - raster: primitive rasterizer
    - curves: Bézier rasterization
    - path: PathInterpreter, draw_path
    - assets: Glyph, Font, Stamp, Picture, AssetRegistry, painting
    - render: render, render_region, render_smallest, text overlay, frames
    - store: AssetStore protocol, YamlAssetStore, image conversion

Invariants:
    - Public coordinates pass through the canvas scale factor exactly once
    - Drawing never raises on bad geometry (clipped, not reported)
    - Only the Canvas constructor raises; other failures land in last_error
    - Single-threaded; a Canvas is not internally synchronized
"""
