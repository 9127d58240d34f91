"""
Geometric measurements on traced contours.

Contours are cyclic: every formula wraps from the last point back to the
first. ``contour_centroid`` (mean of the boundary points) is the centre
used by ``fit_circle``; ``mask_centroid`` (mean of every foreground pixel)
is a separate measurement and differs from it on non-convex or hollow
shapes.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import DegenerateGeometry, InvalidParameter, RasterError
from .contour_models import BBox2D, Circle, Contour, ShapeDescriptor, ShapeResult
from .contour_tracer import find_contours

ContourLike = Union[Contour, np.ndarray, Sequence[Tuple[float, float]]]


def as_points(contour: ContourLike) -> np.ndarray:
    """Return contour points as an (N, 2) float64 array."""
    if isinstance(contour, Contour):
        points = contour.points
    else:
        points = np.asarray(contour)
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(points) == 0:
        raise DegenerateGeometry("Contour has no points")
    return points


def contour_area(contour: ContourLike) -> float:
    """Polygon area by the shoelace formula."""
    points = as_points(contour)
    x, y = points[:, 0], points[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    return float(abs(np.sum(x * y_next - x_next * y)) / 2.0)


def contour_perimeter(contour: ContourLike) -> float:
    """Sum of Euclidean distances between cyclic-consecutive points."""
    points = as_points(contour)
    steps = np.roll(points, -1, axis=0) - points
    return float(np.sum(np.hypot(steps[:, 0], steps[:, 1])))


def circularity(contour: ContourLike) -> float:
    """
    4*pi*area / perimeter**2; 1.0 for a circle, smaller for other shapes.

    Raises:
        DegenerateGeometry: If the perimeter is zero (single point)
    """
    perimeter = contour_perimeter(contour)
    if perimeter == 0.0:
        raise DegenerateGeometry("Circularity is undefined for a zero-perimeter contour")
    return 4.0 * math.pi * contour_area(contour) / (perimeter * perimeter)


def contour_centroid(contour: ContourLike) -> Tuple[float, float]:
    """Unweighted mean of the contour points."""
    points = as_points(contour)
    cx, cy = points.mean(axis=0)
    return float(cx), float(cy)


def mask_centroid(mask: np.ndarray, foreground: Optional[int] = None) -> Tuple[float, float]:
    """
    Mean (x, y) of all foreground pixels of a filled mask.

    Args:
        mask: (H, W) mask
        foreground: Foreground value; None treats any non-zero pixel as foreground
    """
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise InvalidParameter(f"Expected an (H, W) mask, got {mask.shape}")
    selected = mask != 0 if foreground is None else mask == foreground
    ys, xs = np.nonzero(selected)
    if len(xs) == 0:
        raise DegenerateGeometry("Mask has no foreground pixels")
    return float(xs.mean()), float(ys.mean())


def fit_circle(contour: ContourLike) -> Circle:
    """
    Approximate a contour by a circle.

    The centre is the mean of the contour points and the radius the mean
    distance from that centre to each point. This is not a geometric
    least-squares circle fit.
    """
    points = as_points(contour)
    center = points.mean(axis=0)
    offsets = points - center
    radius = float(np.mean(np.hypot(offsets[:, 0], offsets[:, 1])))
    return Circle(center=(float(center[0]), float(center[1])), radius=radius)


def classify_by_circularity(contour: ContourLike, min_circularity: float) -> bool:
    """Accept a contour iff its circularity is at least ``min_circularity``."""
    return circularity(contour) >= min_circularity


def bounding_box(contour: ContourLike) -> BBox2D:
    """Pixel bounding box of the contour points (exclusive max bounds)."""
    points = as_points(contour)
    x0, y0 = np.floor(points.min(axis=0)).astype(int)
    x1, y1 = np.floor(points.max(axis=0)).astype(int) + 1
    return BBox2D(int(x0), int(y0), int(x1), int(y1))


def describe_shape(contour: ContourLike) -> ShapeDescriptor:
    """Compute every measurement of one contour."""
    points = as_points(contour)
    return ShapeDescriptor(
        area=contour_area(points),
        perimeter=contour_perimeter(points),
        circularity=circularity(points),
        centroid=contour_centroid(points),
        circle=fit_circle(points),
        bbox=bounding_box(points),
        num_points=len(points),
    )


def analyze_contours(contours: Sequence[ContourLike]) -> List[ShapeResult]:
    """
    Describe a batch of contours.

    A contour that cannot be measured yields a ``ShapeResult`` carrying the
    error message; the remaining contours are still processed.
    """
    results: List[ShapeResult] = []
    for index, contour in enumerate(contours):
        try:
            results.append(ShapeResult(index=index, descriptor=describe_shape(contour)))
        except RasterError as exc:
            results.append(ShapeResult(index=index, error=str(exc)))
    return results


def find_circles(
    mask: np.ndarray,
    min_circularity: float = 0.8,
    *,
    min_points: int = 5,
    foreground: int = 255,
) -> List[Circle]:
    """
    Trace a mask and fit circles to the sufficiently round contours.

    Args:
        mask: (H, W) mask
        min_circularity: Circularity threshold for a contour to count as a circle
        min_points: Contours with fewer points are skipped
        foreground: Foreground sentinel of the mask

    Returns:
        One circle per accepted contour, in tracing order.
    """
    circles: List[Circle] = []
    for result in analyze_contours(find_contours(mask, foreground=foreground)):
        descriptor = result.descriptor
        if descriptor is None or descriptor.num_points < min_points:
            continue
        if descriptor.circularity >= min_circularity:
            circles.append(descriptor.circle)
    return circles
