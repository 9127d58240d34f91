"""Histogram equalization for a single 8-bit channel."""

from __future__ import annotations

import numpy as np

from ..errors import InvalidParameter


def channel_histogram(channel: np.ndarray) -> np.ndarray:
    """256-bin histogram of a uint8 channel."""
    channel = np.asarray(channel)
    if channel.dtype != np.uint8:
        raise InvalidParameter(f"Expected a uint8 channel, got {channel.dtype}")
    return np.bincount(channel.reshape(-1), minlength=256).astype(np.int64)


def equalization_lut(histogram: np.ndarray) -> np.ndarray:
    """
    Build the lookup table ``cdf'[i] = (cdf[i] - cdf_min) * 255 / (cdf_max - cdf_min)``.

    ``cdf_min`` is the smallest non-zero cumulative count. A histogram with a
    single occupied bin (or no samples) has ``cdf_max == cdf_min`` and maps
    every value to itself.
    """
    cdf = np.cumsum(np.asarray(histogram, dtype=np.int64))
    occupied = cdf[cdf > 0]
    if occupied.size == 0:
        return np.arange(256, dtype=np.uint8)

    cdf_min = int(occupied[0])
    cdf_max = int(cdf[-1])
    if cdf_max == cdf_min:
        return np.arange(256, dtype=np.uint8)

    lut = ((cdf - cdf_min) * 255) // (cdf_max - cdf_min)
    return np.clip(lut, 0, 255).astype(np.uint8)


def equalize_channel(channel: np.ndarray) -> np.ndarray:
    """Return an equalized copy of a uint8 channel."""
    lut = equalization_lut(channel_histogram(channel))
    return lut[np.asarray(channel)]


def equalize_value_channel(hsv: np.ndarray) -> np.ndarray:
    """Equalize the V channel of an (H, W, 3) HSV image, leaving H and S untouched."""
    hsv = np.asarray(hsv)
    if hsv.ndim != 3 or hsv.shape[2] < 3:
        raise InvalidParameter(f"Expected an (H, W, 3) HSV image, got {hsv.shape}")
    equalized = hsv.copy()
    equalized[:, :, 2] = equalize_channel(hsv[:, :, 2])
    return equalized
