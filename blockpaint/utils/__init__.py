"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config and asset record validation (validators)
    - Packed colors and ANSI escapes (color)
    - Bézier and arc geometry (geometry)
    - Atomic I/O, YAML and images (fs)
    - Exception types (errors)
    - Unified logging (logging_config)

No module in utils/ may import from blockpaint.engine.

Convenience imports:
    from blockpaint.utils import color, geometry, validators
    from blockpaint.utils.logging_config import setup_logging, get_logger
"""

from . import color
from . import errors
from . import fs
from . import geometry
from . import logging_config
from . import validators

from .errors import AssetStoreError, BlockPaintError, DimensionError, ParseError
from .logging_config import get_logger, log_context, push_context, setup_logging

__all__ = [
    # Modules
    'color',
    'errors',
    'fs',
    'geometry',
    'logging_config',
    'validators',
    # Direct exports
    'AssetStoreError',
    'BlockPaintError',
    'DimensionError',
    'ParseError',
    'setup_logging',
    'get_logger',
    'push_context',
    'log_context',
]
