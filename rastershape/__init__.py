"""Netpbm codec and pure-numpy shape analysis for binary masks."""

from .errors import (
    DegenerateGeometry,
    InvalidFormat,
    InvalidParameter,
    RasterError,
    TruncatedData,
)

__version__ = "0.1.0"

__all__ = [
    "DegenerateGeometry",
    "InvalidFormat",
    "InvalidParameter",
    "RasterError",
    "TruncatedData",
    "__version__",
]
