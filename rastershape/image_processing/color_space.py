"""RGB to HSV / grayscale conversion (pure numpy, no OpenCV)."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..errors import InvalidParameter


def rgb_to_hsv(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """
    Convert one RGB triple (0-255 per channel) to HSV.

    Returns:
        (h, s, v) with h in [0, 360), s and v in [0, 1]. Achromatic input
        (r == g == b) yields h = 0 and s = 0.
    """
    r_n = r / 255.0
    g_n = g / 255.0
    b_n = b / 255.0

    max_val = max(r_n, g_n, b_n)
    min_val = min(r_n, g_n, b_n)
    diff = max_val - min_val

    if diff == 0:
        h = 0.0
    elif max_val == r_n:
        h = 60.0 * ((g_n - b_n) / diff)
    elif max_val == g_n:
        h = 60.0 * (2.0 + (b_n - r_n) / diff)
    else:
        h = 60.0 * (4.0 + (r_n - g_n) / diff)

    if h < 0.0:
        h += 360.0
    if h >= 360.0:
        h -= 360.0

    s = 0.0 if max_val == 0 else diff / max_val
    return h, s, max_val


def _as_rgb(image: np.ndarray) -> np.ndarray:
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] < 3:
        raise InvalidParameter(f"Expected an (H, W, 3) RGB image, got {image.shape}")
    if image.dtype != np.uint8:
        raise InvalidParameter(f"Expected uint8 RGB samples, got {image.dtype}")
    return image[:, :, :3]


def convert_to_hsv(rgb: np.ndarray) -> np.ndarray:
    """
    Convert an RGB image to a uint8 HSV image.

    Hue is stored halved (0-179) so it fits in a byte; saturation and value
    are scaled to 0-255. All three channels are truncated, matching
    ``rgb_to_hsv`` pixel for pixel.

    Args:
        rgb: (H, W, 3) uint8 image in RGB order

    Returns:
        New (H, W, 3) uint8 image; the input is not modified.
    """
    rgb = _as_rgb(rgb).astype(np.int32)
    r, g, b = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]

    max_val = rgb.max(axis=2)
    min_val = rgb.min(axis=2)
    diff = max_val - min_val
    safe_diff = np.where(diff == 0, 1, diff).astype(np.float64)

    hue = np.zeros(max_val.shape, dtype=np.float64)
    red_max = (diff != 0) & (max_val == r)
    green_max = (diff != 0) & (max_val == g) & ~red_max
    blue_max = (diff != 0) & ~red_max & ~green_max
    hue = np.where(red_max, 60.0 * ((g - b) / safe_diff), hue)
    hue = np.where(green_max, 60.0 * (2.0 + (b - r) / safe_diff), hue)
    hue = np.where(blue_max, 60.0 * (4.0 + (r - g) / safe_diff), hue)
    hue = np.where(hue < 0.0, hue + 360.0, hue)

    hsv = np.empty(rgb.shape, dtype=np.uint8)
    hsv[:, :, 0] = np.clip(np.floor(hue / 2.0), 0, 179).astype(np.uint8)
    # integer arithmetic keeps s and v exact for 8-bit input
    safe_max = np.where(max_val == 0, 1, max_val)
    hsv[:, :, 1] = np.where(max_val == 0, 0, (diff * 255) // safe_max).astype(np.uint8)
    hsv[:, :, 2] = max_val.astype(np.uint8)
    return hsv


def rgb_to_gray(rgb: np.ndarray) -> np.ndarray:
    """Luminance (0.299 R + 0.587 G + 0.114 B), truncated to uint8."""
    rgb = _as_rgb(rgb).astype(np.float64)
    gray = rgb[:, :, 0] * 0.299 + rgb[:, :, 1] * 0.587 + rgb[:, :, 2] * 0.114
    return np.clip(gray, 0, 255).astype(np.uint8)
