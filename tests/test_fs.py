"""Test filesystem utilities.

Tests for blockpaint.utils.fs:
    - Atomic writes (no .tmp leftovers)
    - YAML dump/load
    - Image save/load
    - Directory creation, record listing and safe removal

Run:
    pytest tests/test_fs.py -v
"""

import numpy as np
import pytest

from blockpaint.utils import fs


def test_atomic_write_text(tmp_path):
    path = tmp_path / "sub" / "out.txt"
    fs.atomic_write_text(path, "hello")
    assert path.read_text() == "hello"
    assert [p.name for p in path.parent.iterdir()] == ["out.txt"]


def test_yaml_roundtrip(tmp_path):
    path = tmp_path / "rec.yaml"
    data = {"schema": "stamp.v1", "data": [1 << 63, 5], "nested": {"a": True}}
    fs.atomic_yaml_dump(data, path)
    assert fs.load_yaml(path) == data


def test_yaml_preserves_key_order(tmp_path):
    path = tmp_path / "rec.yaml"
    fs.atomic_yaml_dump({"z": 1, "a": 2}, path)
    assert path.read_text().splitlines()[0].startswith("z:")


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "absent.yaml")


def test_image_roundtrip(tmp_path):
    img = np.arange(2 * 4 * 3, dtype=np.uint8).reshape(2, 4, 3)
    path = tmp_path / "img.png"
    fs.atomic_save_image(img, path)
    assert np.array_equal(fs.load_image_rgb(path), img)


def test_save_image_rejects_dtype(tmp_path):
    with pytest.raises(ValueError, match="uint8"):
        fs.atomic_save_image(np.zeros((2, 2, 3), dtype=np.float32), tmp_path / "x.png")


def test_ensure_dir_and_safe_remove(tmp_path):
    d = fs.ensure_dir(tmp_path / "a" / "b")
    assert d.is_dir()
    f = d / "f.txt"
    f.write_text("x")
    assert fs.safe_remove(f) is True
    assert fs.safe_remove(f) is False


def test_list_records(tmp_path):
    assert fs.list_records(tmp_path / "missing") == []
    for name in ("b.yaml", "a.yaml", "notes.txt"):
        (tmp_path / name).write_text("x: 1\n")
    (tmp_path / "sub.yaml").mkdir()
    assert fs.list_records(tmp_path) == ["a", "b"]
