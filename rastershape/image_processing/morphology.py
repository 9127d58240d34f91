"""Square structuring-element erosion / dilation and their compositions.

Edge policy: pixels closer than ``radius`` to any image edge are not
filtered. They are set to a fixed fill value instead and never clamp or
wrap. Plain ``erode`` fills with 255 and plain ``dilate`` with 0.
``opening`` and ``closing`` fill with 0 at both stages, so a border set by
the first stage is never spread inward by the second. A ``border_value``
argument overrides every fill.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..errors import InvalidParameter

ERODE_FILL = 255
DILATE_FILL = 0


def kernel_radius(kernel_size: int) -> int:
    """Validate an odd kernel size and return its radius."""
    if int(kernel_size) != kernel_size or kernel_size < 1:
        raise InvalidParameter(f"Kernel size must be a positive integer, got {kernel_size}")
    if kernel_size % 2 == 0:
        raise InvalidParameter(f"Kernel size must be odd, got {kernel_size}")
    return (int(kernel_size) - 1) // 2


def _reference_channel(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return image
    if image.ndim == 3:
        return image[:, :, 0]
    raise InvalidParameter(f"Unsupported image shape: {image.shape}")


def _filter(
    image: np.ndarray,
    kernel_size: int,
    reducer,
    fill: int,
) -> np.ndarray:
    image = np.asarray(image)
    radius = kernel_radius(kernel_size)
    channel = _reference_channel(image)
    height, width = channel.shape

    result = np.full((height, width), fill, dtype=image.dtype)
    if height > 2 * radius and width > 2 * radius:
        windows = sliding_window_view(channel, (kernel_size, kernel_size))
        result[radius : height - radius, radius : width - radius] = reducer(
            windows, axis=(2, 3)
        )

    if image.ndim == 3:
        return np.repeat(result[:, :, np.newaxis], image.shape[2], axis=2)
    return result


def _check_iterations(iterations: int) -> None:
    if iterations < 1:
        raise InvalidParameter(f"iterations must be >= 1, got {iterations}")


def erode(
    image: np.ndarray,
    kernel_size: int,
    *,
    iterations: int = 1,
    border_value: Optional[int] = None,
) -> np.ndarray:
    """
    Minimum filter over a square ``kernel_size`` neighbourhood.

    Args:
        image: (H, W) or (H, W, C) array; channel 0 is the reference channel
        kernel_size: Odd side length of the structuring element
        iterations: Number of times the filter is applied
        border_value: Fill for unfiltered border pixels (default 255)

    Returns:
        New array with the input's shape; every channel holds the result.
    """
    _check_iterations(iterations)
    fill = ERODE_FILL if border_value is None else border_value
    result = np.asarray(image)
    for _ in range(iterations):
        result = _filter(result, kernel_size, np.min, fill)
    return result


def dilate(
    image: np.ndarray,
    kernel_size: int,
    *,
    iterations: int = 1,
    border_value: Optional[int] = None,
) -> np.ndarray:
    """Maximum filter over a square ``kernel_size`` neighbourhood (border fill 0)."""
    _check_iterations(iterations)
    fill = DILATE_FILL if border_value is None else border_value
    result = np.asarray(image)
    for _ in range(iterations):
        result = _filter(result, kernel_size, np.max, fill)
    return result


def opening(
    image: np.ndarray,
    kernel_size: int,
    *,
    iterations: int = 1,
    border_value: Optional[int] = None,
) -> np.ndarray:
    """Erosion followed by dilation; removes specks smaller than the kernel.

    With ``iterations`` > 1 the erosion is repeated first, then the dilation.
    Both stages fill the unfiltered border with ``border_value`` (default 0).
    """
    fill = DILATE_FILL if border_value is None else border_value
    eroded = erode(image, kernel_size, iterations=iterations, border_value=fill)
    return dilate(eroded, kernel_size, iterations=iterations, border_value=fill)


def closing(
    image: np.ndarray,
    kernel_size: int,
    *,
    iterations: int = 1,
    border_value: Optional[int] = None,
) -> np.ndarray:
    """Dilation followed by erosion; fills holes smaller than the kernel."""
    fill = DILATE_FILL if border_value is None else border_value
    dilated = dilate(image, kernel_size, iterations=iterations, border_value=fill)
    return erode(dilated, kernel_size, iterations=iterations, border_value=fill)
