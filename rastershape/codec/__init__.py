"""Netpbm codec and raster container."""

from .netpbm import decode, decode_bytes, encode, read_image, write_image
from .raster import (
    ImageKind,
    RasterBuffer,
    bytes_per_channel,
    create_blank_image,
    expected_data_size,
)

__all__ = [
    "ImageKind",
    "RasterBuffer",
    "bytes_per_channel",
    "create_blank_image",
    "decode",
    "decode_bytes",
    "encode",
    "expected_data_size",
    "read_image",
    "write_image",
]
