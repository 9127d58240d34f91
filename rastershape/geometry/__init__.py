"""Contour tracing and shape measurement."""

from .contour_models import (
    BBox2D,
    Circle,
    Contour,
    PolygonMatch,
    ShapeDescriptor,
    ShapeResult,
)
from .contour_tracer import DIRECTIONS, find_contours, trace_boundary
from .polygon import approximate_polygon, detect_octagons, detect_squares
from .shape_metrics import (
    analyze_contours,
    bounding_box,
    circularity,
    classify_by_circularity,
    contour_area,
    contour_centroid,
    contour_perimeter,
    describe_shape,
    find_circles,
    fit_circle,
    mask_centroid,
)

__all__ = [
    "BBox2D",
    "Circle",
    "Contour",
    "DIRECTIONS",
    "PolygonMatch",
    "ShapeDescriptor",
    "ShapeResult",
    "analyze_contours",
    "approximate_polygon",
    "bounding_box",
    "circularity",
    "classify_by_circularity",
    "contour_area",
    "contour_centroid",
    "contour_perimeter",
    "describe_shape",
    "detect_octagons",
    "detect_squares",
    "find_circles",
    "find_contours",
    "fit_circle",
    "mask_centroid",
    "trace_boundary",
]
