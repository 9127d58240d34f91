"""Exception types raised by the codec and the analysis helpers."""

from __future__ import annotations


class RasterError(ValueError):
    """Base class for all rastershape errors."""


class InvalidFormat(RasterError):
    """Bad magic signature or malformed header token."""


class TruncatedData(RasterError):
    """Fewer raster bytes are available than the header promises."""


class InvalidParameter(RasterError):
    """An argument is out of range (even kernel size, zero dimensions, ...)."""


class DegenerateGeometry(RasterError):
    """A contour cannot produce the requested ratio (zero perimeter, no points)."""
