"""Atomic filesystem operations for asset records and images.

Provides:
    - Atomic replacement: every write lands in a sibling tmp file that is
      fsynced and renamed over the target, so readers never see a partial
      record
    - YAML load/save (PyYAML safe_load / safe_dump)
    - RGB image load/save through Pillow as numpy arrays
    - Record listing for store directories

Used by:
    - YamlAssetStore: font / stamp / picture records, image conversion
    - validators: canvas configuration files

Usage:
    from blockpaint.utils import fs
    fs.atomic_yaml_dump(record, root / "fonts" / "std.yaml")
    pixels = fs.load_image_rgb("sprite.png")
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np
import yaml
from PIL import Image


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create ``p`` (and parents) if missing; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def _replace_atomically(path: Path, tmp_path: Path, write: Callable[[Path], None]) -> None:
    """Run ``write(tmp_path)`` then rename tmp_path over ``path``.

    Raises
    ------
    RuntimeError
        If writing or renaming fails; the tmp file is removed first
    """
    ensure_dir(path.parent)
    try:
        write(tmp_path)
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_bytes(path: Union[str, Path], data: bytes, tmp_suffix: str = ".tmp") -> None:
    """Write ``data`` to ``path`` atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        File contents
    tmp_suffix : str
        Suffix appended to the target name for the tmp file

    Raises
    ------
    RuntimeError
        If the write or rename fails
    """
    path = Path(path)

    def write(tmp: Path) -> None:
        with open(tmp, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    _replace_atomically(path, path.with_suffix(path.suffix + tmp_suffix), write)


def atomic_write_text(path: Union[str, Path], text: str, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, text.encode(encoding))


# ============================================================================
# YAML
# ============================================================================

def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Serialize ``obj`` with safe_dump (block style, key order kept) and write it atomically."""
    text = yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write_text(path, text)


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse a YAML file with safe_load.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    yaml.YAMLError
        If parsing fails (message includes the path)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def list_records(directory: Union[str, Path], suffix: str = ".yaml") -> List[str]:
    """Sorted stems of the ``suffix`` files in ``directory`` ([] if it doesn't exist)."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.iterdir() if p.is_file() and p.suffix == suffix)


# ============================================================================
# IMAGES
# ============================================================================

def load_image_rgb(path: Union[str, Path]) -> np.ndarray:
    """Load an image file as an (H, W, 3) uint8 RGB array.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    with Image.open(path) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8)


def atomic_save_image(
    img: np.ndarray,
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Save an (H, W, 3) or (H, W) uint8 array atomically.

    The tmp file keeps the target extension so Pillow picks the same format.

    Raises
    ------
    ValueError
        If ``img`` is not uint8
    RuntimeError
        If encoding or renaming fails
    """
    if img.dtype != np.uint8:
        raise ValueError(f"Expected uint8 image, got {img.dtype}")

    path = Path(path)
    pil_img = Image.fromarray(img)
    _replace_atomically(
        path,
        path.with_name(path.stem + ".tmp" + path.suffix),
        lambda tmp: pil_img.save(tmp, **(pil_kwargs or {})),
    )


def safe_remove(path: Union[str, Path]) -> bool:
    """Remove a file; False if it was already missing."""
    path = Path(path)
    if path.exists():
        path.unlink()
        return True
    return False
