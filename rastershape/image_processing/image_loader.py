"""Image loading for the analysis workflow and the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

import numpy as np
from PIL import Image

from ..codec import ImageKind, RasterBuffer, read_image
from ..errors import InvalidFormat

_NETPBM_MAGICS = {b"P4", b"P5", b"P6", b"P7"}


def is_netpbm(path: Union[str, Path]) -> bool:
    """Check the magic signature instead of trusting the extension."""
    with open(path, "rb") as handle:
        return handle.read(2) in _NETPBM_MAGICS


def load_raster(image_path: Union[str, Path]) -> RasterBuffer:
    """
    Load an image file as a RasterBuffer.

    Netpbm files go through the codec; anything else is opened with Pillow
    and converted to grayscale (mode ``L``), bilevel (mode ``1``) or RGB.

    Args:
        image_path: Path to the image file

    Returns:
        Decoded image
    """
    image_path = Path(image_path)
    if not image_path.is_file():
        raise FileNotFoundError(f"Could not load image: {image_path}")

    if is_netpbm(image_path):
        return read_image(image_path)

    try:
        with Image.open(image_path) as img:
            if img.mode == "1":
                pixels = np.array(img, dtype=bool)
                return RasterBuffer.from_pixels(pixels, kind=ImageKind.BINARY)
            if img.mode in ("L", "I;16", "I;16B"):
                pixels = np.array(img)
                return RasterBuffer.from_pixels(pixels, kind=ImageKind.GRAYSCALE)
            pixels = np.array(img.convert("RGB"))
    except OSError as exc:
        raise InvalidFormat(f"Unreadable image {image_path}: {exc}") from exc
    return RasterBuffer.from_pixels(pixels, kind=ImageKind.RGB)


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """Load an image file straight into a pixel array."""
    return load_raster(image_path).to_pixels()


def expand_inputs(paths: Iterable[Union[str, Path]], pattern: str = "*") -> List[Path]:
    """Expand directories into the files they contain (non-recursive, sorted)."""
    expanded: List[Path] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            expanded.extend(sorted(p for p in path.glob(pattern) if p.is_file()))
        else:
            expanded.append(path)
    return expanded
