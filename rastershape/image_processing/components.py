"""Connected-component labelling and small-component removal."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.ndimage import generate_binary_structure, label

from ..errors import InvalidParameter
from .color_mask import BACKGROUND, FOREGROUND
from .morphology import closing

# 4-connectivity: rank-1 cross; 8-connectivity: full 3x3 square
_STRUCTURES = {
    4: generate_binary_structure(2, 1),
    8: generate_binary_structure(2, 2),
}


def label_components(mask: np.ndarray, connectivity: int = 4) -> Tuple[np.ndarray, int]:
    """
    Label the connected foreground regions of a mask.

    Args:
        mask: (H, W) array, any non-zero pixel is foreground
        connectivity: 4 or 8

    Returns:
        (labels, count): int32 label image (0 = background, 1..count in
        row-major order of each component's first pixel) and the number of
        components.
    """
    if connectivity not in _STRUCTURES:
        raise InvalidParameter(f"connectivity must be 4 or 8, got {connectivity}")
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise InvalidParameter(f"Expected an (H, W) mask, got {mask.shape}")

    labels = np.zeros(mask.shape, dtype=np.int32)
    count = label(mask != 0, structure=_STRUCTURES[connectivity], output=labels)
    return labels, int(count)


def remove_small_components(
    mask: np.ndarray,
    min_area: int,
    *,
    close_kernel: int = 0,
    connectivity: int = 4,
) -> np.ndarray:
    """
    Drop foreground components with fewer than ``min_area`` pixels.

    Args:
        mask: (H, W) mask, non-zero = foreground
        min_area: Minimum pixel count of a kept component
        close_kernel: Odd kernel for a closing pass before labelling (0 = skip)
        connectivity: 4 or 8

    Returns:
        New (H, W) uint8 mask with 0 / 255 values
    """
    if min_area < 0:
        raise InvalidParameter(f"min_area must be >= 0, got {min_area}")
    mask = np.asarray(mask)
    if close_kernel:
        mask = closing(mask, close_kernel, border_value=BACKGROUND)

    labels, count = label_components(mask, connectivity=connectivity)
    if count == 0:
        return np.zeros(labels.shape, dtype=np.uint8)

    areas = np.bincount(labels.reshape(-1), minlength=count + 1)
    keep = areas >= min_area
    keep[0] = False
    return np.where(keep[labels], FOREGROUND, BACKGROUND).astype(np.uint8)
