"""
Moore-neighbour boundary tracing on binary masks.

The eight compass directions are walked clockwise (in image coordinates,
y pointing down) starting one step past the direction that points back to
the pixel just left. A trace stops when it is back on its seed pixel and
is about to repeat its first move, so seeds sitting on a junction are not
cut short.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from ..errors import InvalidParameter
from ..image_processing.components import label_components
from .contour_models import Contour

# (dx, dy) for N, NE, E, SE, S, SW, W, NW
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
)
WEST = 6

_VALID_MODES = {"all", "external"}


def _opposite(direction: int) -> int:
    return (direction + 4) % 8


def _next_move(
    foreground: np.ndarray,
    x: int,
    y: int,
    backtrack: int,
) -> Optional[int]:
    """First foreground neighbour clockwise after ``backtrack``, or None."""
    height, width = foreground.shape
    for step in range(1, 9):
        direction = (backtrack + step) % 8
        dx, dy = DIRECTIONS[direction]
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height and foreground[ny, nx]:
            return direction
    return None


def trace_boundary(
    foreground: np.ndarray,
    seed: Tuple[int, int],
    max_steps: Optional[int] = None,
) -> List[Tuple[int, int]]:
    """
    Trace one closed boundary starting at ``seed``.

    Args:
        foreground: (H, W) boolean mask
        seed: (x, y) foreground pixel whose west neighbour is background
        max_steps: Bound on moves; defaults to 8 per foreground pixel

    Returns:
        Cyclic list of (x, y) points; a single point for an isolated pixel.
    """
    x, y = seed
    first_move = _next_move(foreground, x, y, WEST)
    points = [(x, y)]
    if first_move is None:
        return points

    # Each pixel is entered at most once per incoming direction.
    if max_steps is None:
        max_steps = _step_bound(foreground)
    move = first_move
    for _ in range(max_steps):
        dx, dy = DIRECTIONS[move]
        x, y = x + dx, y + dy
        move = _next_move(foreground, x, y, _opposite(move))
        if (x, y) == seed and move == first_move:
            break
        points.append((x, y))
    return points


def _step_bound(foreground: np.ndarray) -> int:
    return 8 * int(np.count_nonzero(foreground)) + 8


def _outer_background(foreground: np.ndarray) -> np.ndarray:
    """Mask of the background pixels 4-connected to the image frame."""
    padded = np.pad(~foreground, 1, constant_values=True)
    labels, _ = label_components(padded, connectivity=4)
    return (labels == labels[0, 0])[1:-1, 1:-1]


def find_contours(
    mask: np.ndarray,
    foreground: int = 255,
    mode: str = "all",
) -> List[Contour]:
    """
    Find the boundaries of all foreground regions in a mask.

    Args:
        mask: (H, W) mask; pixels equal to ``foreground`` (or True for a
            boolean mask) belong to a region
        foreground: Sentinel value of foreground pixels
        mode: "all" for outer boundaries and hole boundaries,
            "external" for outer boundaries only

    Returns:
        Contours in row-major order of their seed pixels.
    """
    if mode not in _VALID_MODES:
        raise InvalidParameter(f"mode must be one of {sorted(_VALID_MODES)}, got {mode!r}")
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise InvalidParameter(f"Expected an (H, W) mask, got {mask.shape}")

    fg = mask.astype(bool) if mask.dtype == bool else mask == foreground
    if not fg.any():
        return []

    visited = np.zeros(fg.shape, dtype=bool)
    west_background = fg.copy()
    west_background[:, 1:] &= ~fg[:, :-1]
    outer = _outer_background(fg) if mode == "external" else None
    max_steps = _step_bound(fg)

    contours: List[Contour] = []
    for y, x in np.argwhere(west_background):
        if visited[y, x]:
            continue
        if outer is not None and x > 0 and not outer[y, x - 1]:
            continue
        points = trace_boundary(fg, (int(x), int(y)), max_steps=max_steps)
        for px, py in points:
            visited[py, px] = True
        contours.append(Contour(points))
    return contours
