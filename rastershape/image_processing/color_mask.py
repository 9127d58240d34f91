"""HSV range thresholding into 0/255 masks."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple, Union

import numpy as np

from ..errors import InvalidParameter
from .color_space import convert_to_hsv
from .histogram import equalize_value_channel

FOREGROUND = 255
BACKGROUND = 0

HSVBounds = Tuple[Tuple[int, int, int], Tuple[int, int, int]]

# Bounds use the stored HSV scale of convert_to_hsv (hue 0-179, s/v 0-255).
# Red wraps around hue 0, so it needs two bands.
COLOR_PRESETS: Dict[str, List[HSVBounds]] = {
    "red": [
        ((0, 130, 80), (10, 255, 255)),
        ((165, 130, 80), (179, 255, 255)),
    ],
    "blue": [
        ((104, 110, 80), (124, 255, 255)),
    ],
}


def _check_bounds(lower: Sequence[int], upper: Sequence[int]) -> None:
    if len(lower) != 3 or len(upper) != 3:
        raise InvalidParameter("HSV bounds need exactly three values each")
    for lo, hi in zip(lower, upper):
        if not (0 <= lo <= 255 and 0 <= hi <= 255):
            raise InvalidParameter(f"HSV bounds must be in [0, 255], got {lower}-{upper}")


def in_range(hsv: np.ndarray, lower: Sequence[int], upper: Sequence[int]) -> np.ndarray:
    """
    Inclusive per-channel range test.

    Args:
        hsv: (H, W, 3) uint8 image
        lower: Lower bound per channel
        upper: Upper bound per channel

    Returns:
        (H, W) uint8 mask, 255 where all three channels are in range.
    """
    hsv = np.asarray(hsv)
    if hsv.ndim != 3 or hsv.shape[2] < 3:
        raise InvalidParameter(f"Expected an (H, W, 3) image, got {hsv.shape}")
    _check_bounds(lower, upper)

    inside = np.ones(hsv.shape[:2], dtype=bool)
    for channel in range(3):
        values = hsv[:, :, channel]
        inside &= (values >= lower[channel]) & (values <= upper[channel])
    return np.where(inside, FOREGROUND, BACKGROUND).astype(np.uint8)


def resolve_bands(preset: str) -> List[HSVBounds]:
    """Look up the HSV bands of a named colour preset."""
    try:
        return COLOR_PRESETS[preset]
    except KeyError as exc:
        raise InvalidParameter(
            f"Unknown colour preset {preset!r}; expected one of {sorted(COLOR_PRESETS)}"
        ) from exc


def color_mask(
    rgb: np.ndarray,
    bands: Union[str, Sequence[HSVBounds]],
    *,
    equalize_value: bool = False,
) -> np.ndarray:
    """
    Build a mask of the pixels whose HSV value falls in any of ``bands``.

    Args:
        rgb: (H, W, 3) uint8 RGB image
        bands: Preset name, or one or more (lower, upper) HSV bounds whose
            results are OR-ed
        equalize_value: Equalize the V channel before thresholding

    Returns:
        (H, W) uint8 mask with 0 / 255 values
    """
    if isinstance(bands, str):
        bands = resolve_bands(bands)
    if not bands:
        raise InvalidParameter("At least one HSV band is required")
    hsv = convert_to_hsv(rgb)
    if equalize_value:
        hsv = equalize_value_channel(hsv)

    mask = np.zeros(hsv.shape[:2], dtype=np.uint8)
    for lower, upper in bands:
        mask |= in_range(hsv, lower, upper)
    return mask


def threshold_gray(gray: np.ndarray, threshold: int = 127) -> np.ndarray:
    """Mask of the grayscale pixels strictly brighter than ``threshold``."""
    gray = np.asarray(gray)
    if gray.ndim != 2:
        raise InvalidParameter(f"Expected an (H, W) grayscale image, got {gray.shape}")
    return np.where(gray > threshold, FOREGROUND, BACKGROUND).astype(np.uint8)
