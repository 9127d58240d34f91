"""Polygon approximation and regular-polygon (octagon / square) detection."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from ..errors import InvalidParameter
from .contour_models import PolygonMatch
from .shape_metrics import ContourLike, as_points, contour_area, contour_centroid, contour_perimeter


def _point_line_distances(points: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    direction = end - start
    length = float(np.hypot(direction[0], direction[1]))
    offsets = points - start
    if length == 0.0:
        return np.hypot(offsets[:, 0], offsets[:, 1])
    cross = direction[0] * offsets[:, 1] - direction[1] * offsets[:, 0]
    return np.abs(cross) / length


def _simplify_chain(points: np.ndarray, epsilon: float) -> List[int]:
    """Douglas-Peucker on an open chain; returns kept indices, endpoints included."""
    keep = {0, len(points) - 1}
    stack = [(0, len(points) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        distances = _point_line_distances(points[first + 1 : last], points[first], points[last])
        split = int(np.argmax(distances))
        if distances[split] > epsilon:
            split += first + 1
            keep.add(split)
            stack.append((first, split))
            stack.append((split, last))
    return sorted(keep)


def approximate_polygon(contour: ContourLike, epsilon: float) -> np.ndarray:
    """
    Simplify a closed contour with the Douglas-Peucker algorithm.

    The contour is split at its first point and the point farthest from it;
    both halves are simplified independently.

    Args:
        contour: Closed contour
        epsilon: Maximum distance between the contour and the approximation

    Returns:
        (M, 2) float64 array of polygon vertices in contour order.
    """
    if epsilon < 0:
        raise InvalidParameter(f"epsilon must be >= 0, got {epsilon}")
    points = as_points(contour)
    if len(points) < 3:
        return points.copy()

    offsets = points - points[0]
    far = int(np.argmax(np.hypot(offsets[:, 0], offsets[:, 1])))
    if far == 0:
        return points[:1].copy()

    forward = points[: far + 1]
    backward = np.vstack([points[far:], points[:1]])
    first_half = _simplify_chain(forward, epsilon)
    second_half = [far + i for i in _simplify_chain(backward, epsilon)[1:-1]]
    return points[first_half + second_half]


def _edge_lengths(vertices: np.ndarray) -> np.ndarray:
    steps = np.roll(vertices, -1, axis=0) - vertices
    return np.hypot(steps[:, 0], steps[:, 1])


def _match(kind: str, contour: ContourLike, vertices: np.ndarray, edges: np.ndarray) -> PolygonMatch:
    return PolygonMatch(
        kind=kind,
        vertices=tuple((int(round(x)), int(round(y))) for x, y in vertices),
        centroid=contour_centroid(contour),
        edge_lengths=tuple(float(e) for e in edges),
    )


def detect_octagons(
    contours: Sequence[ContourLike],
    min_perimeter: float = 50.0,
    approx_factor: float = 0.02,
    min_edge_ratio: float = 0.8,
) -> List[PolygonMatch]:
    """
    Find contours that approximate a regular octagon.

    A contour matches when its perimeter is at least ``min_perimeter``, its
    approximation (epsilon = ``approx_factor`` * perimeter) has exactly 8
    vertices, and the shortest edge is at least ``min_edge_ratio`` times the
    longest.
    """
    matches: List[PolygonMatch] = []
    for contour in contours:
        perimeter = contour_perimeter(contour)
        if perimeter < min_perimeter:
            continue
        vertices = approximate_polygon(contour, approx_factor * perimeter)
        if len(vertices) != 8:
            continue
        edges = _edge_lengths(vertices)
        if edges.max() > 0 and edges.min() / edges.max() >= min_edge_ratio:
            matches.append(_match("octagon", contour, vertices, edges))
    return matches


def detect_squares(
    contours: Sequence[ContourLike],
    min_area: float = 1000.0,
    approx_factor: float = 0.02,
    max_side_ratio: float = 1.2,
) -> List[PolygonMatch]:
    """Find contours whose 4-vertex approximation has roughly equal sides."""
    matches: List[PolygonMatch] = []
    for contour in contours:
        perimeter = contour_perimeter(contour)
        if perimeter == 0.0:
            continue
        vertices = approximate_polygon(contour, approx_factor * perimeter)
        if len(vertices) != 4 or contour_area(vertices) <= min_area:
            continue
        edges = _edge_lengths(vertices)
        if edges.max() <= max_side_ratio * edges.min():
            matches.append(_match("square", contour, vertices, edges))
    return matches
