"""In-memory raster container with Netpbm channel/precision metadata."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import numpy as np

from ..errors import InvalidParameter


class ImageKind(Enum):
    """Raster kinds understood by the codec, keyed by their magic signature."""

    BINARY = "P4"
    GRAYSCALE = "P5"
    RGB = "P6"

    @property
    def magic(self) -> str:
        return self.value

    @property
    def channels(self) -> int:
        return 3 if self is ImageKind.RGB else 1

    @classmethod
    def from_magic(cls, magic: str) -> Optional["ImageKind"]:
        for kind in cls:
            if kind.value == magic:
                return kind
        return None


def bytes_per_channel(max_value: int) -> int:
    """Bytes needed to store one sample with the given maximum value."""
    return 1 if max_value < 256 else 2


def expected_data_size(width: int, height: int, kind: ImageKind, max_value: int) -> int:
    """
    Length of the storage buffer for an image.

    Binary images are packed 8 pixels per byte in row-major order with no
    per-row padding, so only the final byte may carry padding bits.
    """
    if kind is ImageKind.BINARY:
        return (width * height + 7) // 8
    return width * height * kind.channels * bytes_per_channel(max_value)


@dataclass(eq=False)
class RasterBuffer:
    """
    Pixel storage plus the metadata needed to interpret it.

    ``data`` is a flat uint8 array in storage layout: packed bits for binary
    images (bit 1 = white), 8-bit samples or big-endian 16-bit samples for
    grayscale and RGB images.
    """

    width: int
    height: int
    kind: ImageKind
    max_value: int
    data: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidParameter(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.kind is ImageKind.BINARY:
            if self.max_value != 1:
                raise InvalidParameter("Binary images must have max_value == 1")
        elif not (1 <= self.max_value <= 65535):
            raise InvalidParameter("max_value must be in [1, 65535]")

        data = np.ascontiguousarray(self.data, dtype=np.uint8).reshape(-1)
        expected = expected_data_size(self.width, self.height, self.kind, self.max_value)
        if data.size != expected:
            raise InvalidParameter(
                f"Buffer holds {data.size} bytes, {self.kind.name} "
                f"{self.width}x{self.height} needs {expected}"
            )
        self.data = data

    @property
    def channels(self) -> int:
        return self.kind.channels

    @property
    def bytes_per_channel(self) -> int:
        """Bytes per sample (0 for packed binary data)."""
        if self.kind is ImageKind.BINARY:
            return 0
        return bytes_per_channel(self.max_value)

    @property
    def bytes_per_pixel(self) -> int:
        return self.channels * self.bytes_per_channel

    @classmethod
    def allocate(
        cls,
        width: int,
        height: int,
        kind: ImageKind,
        max_value: Optional[int] = None,
    ) -> "RasterBuffer":
        """Allocate a zero-filled (black) image."""
        if max_value is None:
            max_value = 1 if kind is ImageKind.BINARY else 255
        if width <= 0 or height <= 0:
            raise InvalidParameter(
                f"Image dimensions must be positive, got {width}x{height}"
            )
        size = expected_data_size(width, height, kind, max_value)
        return cls(width, height, kind, max_value, np.zeros(size, dtype=np.uint8))

    @classmethod
    def from_pixels(
        cls,
        pixels: np.ndarray,
        kind: Optional[ImageKind] = None,
        max_value: Optional[int] = None,
    ) -> "RasterBuffer":
        """
        Pack a pixel array into a new buffer.

        Args:
            pixels: (H, W) or (H, W, 3) array. For binary images every
                non-zero pixel is white.
            kind: Target kind; inferred from shape and dtype when omitted
                (bool -> binary, 2-D -> grayscale, 3 channels -> RGB).
            max_value: Sample maximum for grayscale/RGB images. Defaults to
                255 for 8-bit input and 65535 for wider input.

        Returns:
            RasterBuffer that owns a fresh copy of the data.
        """
        pixels = np.asarray(pixels)
        if pixels.ndim not in (2, 3):
            raise InvalidParameter(f"Unsupported pixel shape: {pixels.shape}")

        if kind is None:
            if pixels.ndim == 3:
                kind = ImageKind.RGB
            elif pixels.dtype == bool:
                kind = ImageKind.BINARY
            else:
                kind = ImageKind.GRAYSCALE

        if kind is ImageKind.RGB:
            if pixels.ndim != 3 or pixels.shape[2] != 3:
                raise InvalidParameter(f"RGB pixels must be (H, W, 3), got {pixels.shape}")
        elif pixels.ndim == 3:
            if pixels.shape[2] != 1:
                raise InvalidParameter(
                    f"{kind.name} pixels must be single channel, got {pixels.shape}"
                )
            pixels = pixels[:, :, 0]

        height, width = pixels.shape[:2]

        if kind is ImageKind.BINARY:
            bits = (pixels != 0).reshape(-1)
            # packbits zero-fills the tail of the final byte
            return cls(width, height, kind, 1, np.packbits(bits))

        if max_value is None:
            max_value = 255 if pixels.dtype.itemsize == 1 else 65535
        if pixels.size and (pixels.min() < 0 or pixels.max() > max_value):
            raise InvalidParameter(f"Pixel values must be within [0, {max_value}]")

        if bytes_per_channel(max_value) == 1:
            data = pixels.astype(np.uint8).reshape(-1)
        else:
            data = np.frombuffer(pixels.astype(">u2").tobytes(), dtype=np.uint8)
        return cls(width, height, kind, max_value, data.copy())

    def to_pixels(self) -> np.ndarray:
        """
        Unpack into a pixel array.

        Binary images come back as (H, W) uint8 with 0 / 255 values so the
        result can be used directly as a mask. Grayscale images are (H, W),
        RGB images (H, W, 3); 16-bit images use uint16.
        """
        count = self.width * self.height
        if self.kind is ImageKind.BINARY:
            bits = np.unpackbits(self.data)[:count]
            return (bits.reshape(self.height, self.width) * 255).astype(np.uint8)

        shape = (self.height, self.width)
        if self.channels > 1:
            shape = shape + (self.channels,)
        if self.bytes_per_channel == 1:
            return self.data.reshape(shape).copy()
        return self.data.view(">u2").astype(np.uint16).reshape(shape)

    def copy(self) -> "RasterBuffer":
        """Return an independent copy (no shared storage)."""
        return replace(self, data=self.data.copy())


def create_blank_image(
    width: int,
    height: int,
    kind: ImageKind = ImageKind.BINARY,
    max_value: Optional[int] = None,
) -> RasterBuffer:
    """Create an all-white image of the given kind."""
    image = RasterBuffer.allocate(width, height, kind, max_value)
    if kind is ImageKind.BINARY:
        image.data[:] = 0xFF
        # keep padding bits of the final byte at zero
        tail = (width * height) % 8
        if tail:
            image.data[-1] = (0xFF << (8 - tail)) & 0xFF
    else:
        white = image.to_pixels()
        white[...] = image.max_value
        image = RasterBuffer.from_pixels(white, kind=kind, max_value=image.max_value)
    return image
