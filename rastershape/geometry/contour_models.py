"""Data models for traced contours and the descriptors derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class BBox2D:
    """Axis-aligned 2D bounding box using exclusive max bounds."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def w(self) -> int:
        """Width in pixels."""
        return self.x1 - self.x0

    @property
    def h(self) -> int:
        """Height in pixels."""
        return self.y1 - self.y0

    def to_dict(self) -> Dict[str, int]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


@dataclass(frozen=True)
class Contour:
    """Ordered, cyclic boundary of one traced region.

    Points are integer ``(x, y)`` pixel coordinates (column, row) in
    discovery order; the last point is adjacent to the first.
    """

    points: np.ndarray  # (N, 2) int64, read-only

    def __post_init__(self):
        points = np.array(self.points, dtype=np.int64).reshape(-1, 2)
        points.setflags(write=False)
        object.__setattr__(self, "points", points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def start(self) -> Tuple[int, int]:
        """Seed pixel the trace started from."""
        x, y = self.points[0]
        return int(x), int(y)

    def to_list(self) -> list:
        return [(int(x), int(y)) for x, y in self.points]


@dataclass(frozen=True)
class Circle:
    """Circle approximation: centre and radius in pixels."""

    center: Point2D
    radius: float

    def to_dict(self) -> Dict[str, object]:
        return {"center": list(self.center), "radius": self.radius}


@dataclass(frozen=True)
class ShapeDescriptor:
    """Geometric summary of one contour."""

    area: float
    perimeter: float
    circularity: float
    centroid: Point2D
    circle: Circle
    bbox: BBox2D
    num_points: int

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "area": self.area,
            "perimeter": self.perimeter,
            "circularity": self.circularity,
            "centroid": list(self.centroid),
            "circle": self.circle.to_dict(),
            "bbox": self.bbox.to_dict(),
            "num_points": self.num_points,
        }


@dataclass(frozen=True)
class ShapeResult:
    """Per-contour outcome of a batch analysis: a descriptor or an error."""

    index: int
    descriptor: Optional[ShapeDescriptor] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.descriptor is not None

    def to_dict(self) -> Dict[str, object]:
        return {
            "index": self.index,
            "descriptor": self.descriptor.to_dict() if self.descriptor else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class PolygonMatch:
    """A contour whose polygon approximation matched a regular shape."""

    kind: str
    vertices: Tuple[Tuple[int, int], ...]
    centroid: Point2D
    edge_lengths: Tuple[float, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "vertices": [list(v) for v in self.vertices],
            "centroid": list(self.centroid),
            "edge_lengths": list(self.edge_lengths),
        }
