"""Asset persistence: the store contract and a YAML-backed implementation.

Provides:
    - AssetStore: protocol the canvas import helpers depend on
    - YamlAssetStore: records under <root>/{fonts,stamps,pictures}/<name>.yaml
    - picture_from_image() / picture_to_image(): Pillow image conversion

Records are validated with the pydantic schemas in utils.validators
(font.v1, stamp.v1, picture.v1) and written atomically through utils.fs.
Every failure surfaces as AssetStoreError with the offending path; the
store never retries.

Usage:
    from blockpaint.engine.store import YamlAssetStore

    store = YamlAssetStore("assets/")
    store.save_font("std", canvas.assets.get_font("__std"))
    canvas.import_font(store, "std", register_as="small")
"""

import logging
import re
from pathlib import Path
from typing import List, Protocol, Union

import numpy as np
import yaml
from pydantic import ValidationError

from blockpaint.utils import fs
from blockpaint.utils.color import ColorMode
from blockpaint.utils.errors import AssetStoreError, DimensionError
from blockpaint.utils.logging_config import log_context
from blockpaint.utils.validators import FontV1, GlyphV1, PictureV1, StampV1

from .assets import Font, Glyph, Picture, Stamp

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r'^[A-Za-z0-9_.-]+$')
KINDS = ("fonts", "stamps", "pictures")


class AssetStore(Protocol):
    """Load/save contract for named asset records.

    Implementations raise AssetStoreError on any failure.
    """

    def load_font(self, name: str) -> Font: ...

    def save_font(self, name: str, font: Font) -> None: ...

    def load_stamp(self, name: str) -> Stamp: ...

    def save_stamp(self, name: str, stamp: Stamp) -> None: ...

    def load_picture(self, name: str) -> Picture: ...

    def save_picture(self, name: str, picture: Picture) -> None: ...


# ============================================================================
# RECORD CONVERSION
# ============================================================================

def font_to_record(font: Font) -> FontV1:
    return FontV1(
        prepared=font.prepared,
        chars={
            code: GlyphV1(
                offset_x=g.offset_x,
                offset_y=g.offset_y,
                width=g.width,
                height=g.height,
                bit_length=g.bit_length,
                gn=g.gn,
                ga=g.ga,
                prepared=g.prepared,
                data=list(g.data),
            )
            for code, g in font.chars.items()
        },
    )


def font_from_record(record: FontV1) -> Font:
    chars = {
        code: Glyph(
            data=list(g.data),
            width=g.width,
            height=g.height,
            bit_length=g.bit_length,
            offset_x=g.offset_x,
            offset_y=g.offset_y,
            gn=g.gn,
            ga=g.ga,
            prepared=g.prepared or record.prepared,
        )
        for code, g in record.chars.items()
    }
    return Font(chars=chars, prepared=record.prepared)


def stamp_to_record(stamp: Stamp) -> StampV1:
    return StampV1(prepared=stamp.prepared, bit_length=stamp.bit_length, data=list(stamp.data))


def stamp_from_record(record: StampV1) -> Stamp:
    return Stamp(data=list(record.data), bit_length=record.bit_length, prepared=record.prepared)


def picture_to_record(picture: Picture) -> PictureV1:
    return PictureV1(
        mode=picture.mode,
        color_key=picture.color_key,
        width=picture.width,
        height=picture.height,
        tile_width=picture.tile_width,
        tile_height=picture.tile_height,
        data=picture.data.ravel().tolist(),
    )


def picture_from_record(record: PictureV1) -> Picture:
    return Picture(
        width=record.width,
        height=record.height,
        data=np.asarray(record.data, dtype=np.uint32),
        tile_width=record.tile_width,
        tile_height=record.tile_height,
        mode=record.mode,
        color_key=record.color_key,
    )


# ============================================================================
# YAML STORE
# ============================================================================

class YamlAssetStore:
    """Asset store keeping one YAML file per record.

    Parameters
    ----------
    root : Union[str, Path]
        Store directory; kind subdirectories are created on first save
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def path_for(self, kind: str, name: str) -> Path:
        """File path of record ``name`` of ``kind`` ("fonts", "stamps", "pictures").

        Raises
        ------
        AssetStoreError
            If the kind is unknown or the name contains characters outside
            [A-Za-z0-9_.-]
        """
        if kind not in KINDS:
            raise AssetStoreError(f"Unknown asset kind: {kind!r}, expected one of {KINDS}")
        if not _NAME_RE.match(name) or name in ('.', '..'):
            raise AssetStoreError(f"Invalid asset name: {name!r}")
        return self.root / kind / f"{name}.yaml"

    def names(self, kind: str) -> List[str]:
        """Sorted names of the stored records of ``kind``."""
        if kind not in KINDS:
            raise AssetStoreError(f"Unknown asset kind: {kind!r}, expected one of {KINDS}")
        return fs.list_records(self.root / kind)

    def delete(self, kind: str, name: str) -> bool:
        """Remove a record; False if it did not exist."""
        removed = fs.safe_remove(self.path_for(kind, name))
        if removed:
            logger.info(f"Deleted {kind[:-1]} '{name}'")
        return removed

    def _load(self, kind: str, name: str, model):
        path = self.path_for(kind, name)
        with log_context(asset=f"{kind}/{name}"):
            if not path.exists():
                raise AssetStoreError(f"{kind[:-1].capitalize()} '{name}' not found: {path}")
            try:
                data = fs.load_yaml(path)
                record = model(**(data or {}))
            except (yaml.YAMLError, ValidationError, TypeError) as e:
                raise AssetStoreError(f"Invalid {kind[:-1]} record at {path}: {e}") from e
            logger.info(f"Loaded {kind[:-1]} '{name}' from {path}")
        return record

    def _save(self, kind: str, name: str, record) -> None:
        path = self.path_for(kind, name)
        with log_context(asset=f"{kind}/{name}"):
            try:
                fs.atomic_yaml_dump(record.model_dump(mode='json', by_alias=True), path)
            except RuntimeError as e:
                raise AssetStoreError(f"Failed to save {kind[:-1]} '{name}': {e}") from e
            logger.info(f"Saved {kind[:-1]} '{name}' to {path}")

    def load_font(self, name: str) -> Font:
        return font_from_record(self._load("fonts", name, FontV1))

    def save_font(self, name: str, font: Font) -> None:
        self._save("fonts", name, font_to_record(font))

    def load_stamp(self, name: str) -> Stamp:
        return stamp_from_record(self._load("stamps", name, StampV1))

    def save_stamp(self, name: str, stamp: Stamp) -> None:
        self._save("stamps", name, stamp_to_record(stamp))

    def load_picture(self, name: str) -> Picture:
        record = self._load("pictures", name, PictureV1)
        try:
            return picture_from_record(record)
        except DimensionError as e:
            raise AssetStoreError(f"Invalid picture record '{name}': {e}") from e

    def save_picture(self, name: str, picture: Picture) -> None:
        self._save("pictures", name, picture_to_record(picture))


# ============================================================================
# IMAGE CONVERSION
# ============================================================================

def picture_from_image(
    path: Union[str, Path],
    tile_width: int = 0,
    tile_height: int = 0,
    color_key: int = 0
) -> Picture:
    """Convert an image file into a truecolor Picture.

    Parameters
    ----------
    path : Union[str, Path]
        Any image format Pillow reads; converted to RGB
    tile_width, tile_height : int
        Tile size for segment addressing, 0 = untiled
    color_key : int
        Packed color treated as transparent

    Returns
    -------
    Picture
        Packed 0xRRGGBB pixels

    Raises
    ------
    AssetStoreError
        If the file is missing or the image exceeds the canvas limits
    """
    try:
        img = fs.load_image_rgb(path).astype(np.uint32)
    except (FileNotFoundError, OSError) as e:
        raise AssetStoreError(f"Cannot read image {path}: {e}") from e

    data = (img[..., 0] << 16) | (img[..., 1] << 8) | img[..., 2]
    h, w = data.shape
    try:
        return Picture(width=w, height=h, data=data, tile_width=tile_width,
                       tile_height=tile_height, mode=ColorMode.TRUECOLOR, color_key=color_key)
    except DimensionError as e:
        raise AssetStoreError(f"Image {path} cannot become a picture: {e}") from e


def picture_to_image(picture: Picture, path: Union[str, Path]) -> None:
    """Write a truecolor Picture to an image file (format from the extension)."""
    data = picture.data
    img = np.stack([(data >> 16) & 0xff, (data >> 8) & 0xff, data & 0xff], axis=-1).astype(np.uint8)
    try:
        fs.atomic_save_image(img, path)
    except (RuntimeError, ValueError) as e:
        raise AssetStoreError(f"Failed to write image {path}: {e}") from e
