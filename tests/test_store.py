"""Tests for YAML asset persistence and image conversion.

Test cases:
    - test_font_roundtrip()
    - test_stamp_roundtrip()
    - test_picture_roundtrip()
    - test_record_has_schema_tag()
    - test_missing_record_raises()
    - test_invalid_record_raises()
    - test_invalid_name_raises()
    - test_canvas_import_registers()
    - test_image_to_picture()
    - test_picture_to_image_roundtrip()
    - test_missing_image_raises()
    - test_names_and_delete()
    - test_unknown_kind_raises()
    - test_prepared_glyph_survives_roundtrip()

Run:
    pytest tests/test_store.py -v
"""

import numpy as np
import pytest
import yaml
from PIL import Image

from blockpaint.engine import assets
from blockpaint.engine.assets import Font, Glyph, Picture, Stamp, default_font
from blockpaint.engine.canvas import Canvas
from blockpaint.engine.store import YamlAssetStore, picture_from_image, picture_to_image
from blockpaint.utils.color import rgb
from blockpaint.utils.errors import AssetStoreError


@pytest.fixture
def store(tmp_path):
    """Empty store rooted in a temporary directory."""
    return YamlAssetStore(tmp_path / "assets")


def test_font_roundtrip(store):
    font = default_font()
    store.save_font("std", font)
    loaded = store.load_font("std")

    assert loaded.prepared
    assert loaded.chars == font.chars


def test_stamp_roundtrip(store):
    stamp = Stamp(data=[0b101, 0b010])
    stamp.prepare()
    store.save_stamp("dots", stamp)
    loaded = store.load_stamp("dots")

    assert loaded == stamp
    assert loaded.width == 3


def test_picture_roundtrip(store):
    pic = Picture(width=3, height=2, data=[1, 2, 3, 4, 5, 0xffffff], tile_width=1, tile_height=2, color_key=5)
    store.save_picture("tiles", pic)
    loaded = store.load_picture("tiles")

    assert np.array_equal(loaded.data, pic.data)
    assert (loaded.tile_width, loaded.tile_height) == (1, 2)
    assert loaded.color_key == 5
    assert loaded.mode == pic.mode


def test_record_has_schema_tag(store):
    store.save_stamp("s", Stamp(data=[1]))
    with open(store.path_for("stamps", "s")) as f:
        data = yaml.safe_load(f)
    assert data["schema"] == "stamp.v1"


def test_missing_record_raises(store):
    with pytest.raises(AssetStoreError, match="not found"):
        store.load_font("absent")


def test_invalid_record_raises(store):
    path = store.path_for("pictures", "bad")
    path.parent.mkdir(parents=True)
    path.write_text("schema: picture.v1\nwidth: 2\nheight: 2\ndata: [1, 2, 3]\n")

    with pytest.raises(AssetStoreError, match="Invalid picture"):
        store.load_picture("bad")


def test_wrong_schema_raises(store):
    path = store.path_for("stamps", "wrong")
    path.parent.mkdir(parents=True)
    path.write_text("schema: font.v1\ndata: [1]\n")

    with pytest.raises(AssetStoreError):
        store.load_stamp("wrong")


@pytest.mark.parametrize("name", ["../escape", "a/b", "", ".."])
def test_invalid_name_raises(store, name):
    with pytest.raises(AssetStoreError, match="Invalid asset name"):
        store.path_for("fonts", name)


def test_canvas_import_registers(store):
    store.save_stamp("dot", Stamp(data=[1]))
    canvas = Canvas(8, 8)

    stamp = canvas.import_stamp(store, "dot", register_as="pixel")
    assert stamp is not None
    assert canvas.assets.get_stamp("pixel") is stamp
    assert canvas.last_error is None


def test_canvas_import_font(store):
    store.save_font("std", default_font())
    canvas = Canvas(8, 8)
    assert canvas.import_font(store, "std") is not None
    assert canvas.assets.get_font("std").glyph("A") is not None


def test_image_to_picture(tmp_path):
    img = np.zeros((2, 3, 3), dtype=np.uint8)
    img[0, 0] = (255, 128, 1)
    img[1, 2] = (0, 0, 255)
    path = tmp_path / "sprite.png"
    Image.fromarray(img).save(path)

    pic = picture_from_image(path, tile_width=1, tile_height=1)
    assert (pic.width, pic.height) == (3, 2)
    assert pic.data[0, 0] == rgb(255, 128, 1)
    assert pic.data[1, 2] == 0x0000ff
    assert pic.tile_count == 6


def test_picture_to_image_roundtrip(tmp_path):
    pic = Picture(width=2, height=2, data=[0xff0000, 0x00ff00, 0x0000ff, 0x123456])
    path = tmp_path / "out.png"
    picture_to_image(pic, path)

    again = picture_from_image(path)
    assert np.array_equal(again.data, pic.data)


def test_missing_image_raises(tmp_path):
    with pytest.raises(AssetStoreError, match="Cannot read image"):
        picture_from_image(tmp_path / "nope.png")


def test_names_and_delete(store):
    store.save_stamp("b", Stamp(data=[1]))
    store.save_stamp("a", Stamp(data=[1]))
    assert store.names("stamps") == ["a", "b"]
    assert store.names("fonts") == []

    assert store.delete("stamps", "a") is True
    assert store.delete("stamps", "a") is False
    assert store.names("stamps") == ["b"]


def test_unknown_kind_raises(store):
    with pytest.raises(AssetStoreError, match="Unknown asset kind"):
        store.path_for("sounds", "x")
    with pytest.raises(AssetStoreError, match="Unknown asset kind"):
        store.names("sounds")


def test_prepared_glyph_survives_roundtrip(store):
    glyph = Glyph(data=[0b111, 0b101, 0b111])
    glyph.prepare()
    store.save_font("f", Font(chars={65: glyph}))

    loaded = store.load_font("f")
    assert loaded.chars[65].prepared
    assert loaded.chars[65].data == glyph.data

    canvas = Canvas(8, 8)
    assets.font_print(canvas, loaded, 0, 0, "A")
    assert int(np.count_nonzero(canvas.pixels)) == 8
