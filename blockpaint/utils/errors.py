"""Exception types shared by the engine and the asset store.

The engine records these on ``Canvas.last_error`` instead of raising them
across its boundary; only the ``Canvas`` constructor and the asset store raise.
"""


class BlockPaintError(Exception):
    """Base class for all blockpaint failures."""

    pass


class DimensionError(BlockPaintError):
    """Canvas or asset dimension outside ``[1, max]``."""

    pass


class ParseError(BlockPaintError):
    """Unparseable path token or unsupported color-mode value."""

    pass


class AssetStoreError(BlockPaintError):
    """An asset record could not be loaded or saved."""

    pass
