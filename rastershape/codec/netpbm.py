"""Binary Netpbm (P4 / P5 / P6) reader and writer.

Packing convention for P4 images, kept symmetric between encode and decode:

* pixels are packed 8 per byte, most significant bit first, in row-major
  order with **no per-row padding** (``ceil(width * height / 8)`` bytes);
* a set bit is a **white** pixel and a cleared bit a black one.

Both points deviate from the canonical Netpbm PBM format, which pads every
row to a byte boundary and uses 1 for black. Files written here read back
bit-exactly, but are not interchangeable with other PBM tools.
"""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np

from ..errors import InvalidFormat, TruncatedData
from .raster import ImageKind, RasterBuffer, expected_data_size

_WHITESPACE = frozenset(b" \t\n\v\f\r")
_MAX_SAMPLE_VALUE = 65535
_READ_CHUNK = 1 << 20


class _HeaderScanner:
    """Byte-at-a-time reader with one byte of push-back for header tokens."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._pending = b""

    def read_byte(self) -> bytes:
        if self._pending:
            byte, self._pending = self._pending, b""
            return byte
        return self._stream.read(1)

    def unread(self, byte: bytes) -> None:
        self._pending = byte

    def skip_whitespace_and_comments(self) -> None:
        """Skip runs of whitespace and ``#`` comments (up to end of line)."""
        while True:
            byte = self.read_byte()
            while byte and byte[0] in _WHITESPACE:
                byte = self.read_byte()
            if byte == b"#":
                while byte and byte != b"\n":
                    byte = self.read_byte()
                continue
            if byte:
                self.unread(byte)
            return

    def read_positive_int(self, name: str) -> int:
        self.skip_whitespace_and_comments()
        digits = bytearray()
        byte = self.read_byte()
        while byte and byte.isdigit():
            digits += byte
            byte = self.read_byte()
        if byte:
            self.unread(byte)
        if not digits:
            if not byte:
                raise InvalidFormat(f"Unexpected end of header while reading {name}")
            raise InvalidFormat(f"Expected a decimal {name}, found {byte!r}")
        value = int(digits)
        if value <= 0:
            raise InvalidFormat(f"{name} must be a positive integer, got {value}")
        return value

    def read_separator(self) -> None:
        """Consume the single whitespace byte (or comment) that ends the header.

        A comment right after the last token ends with its newline, which
        then serves as the separator.
        """
        byte = self.read_byte()
        if byte == b"#":
            while byte and byte != b"\n":
                byte = self.read_byte()
        if not byte:
            raise TruncatedData("Header ends without raster data")
        if byte[0] not in _WHITESPACE:
            raise InvalidFormat(f"Expected whitespace after header, found {byte!r}")

    def read_exact(self, size: int) -> bytes:
        """Read up to ``size`` bytes in bounded chunks, stopping early at EOF."""
        chunks = [self._pending]
        received = len(self._pending)
        self._pending = b""
        while received < size:
            chunk = self._stream.read(min(_READ_CHUNK, size - received))
            if not chunk:
                break
            chunks.append(chunk)
            received += len(chunk)
        return b"".join(chunks)


def decode(stream: BinaryIO) -> RasterBuffer:
    """
    Decode one image from a binary stream.

    The stream is left positioned right after the raster, so concatenated
    images can be read with repeated calls.

    Raises:
        InvalidFormat: Unknown magic or malformed header token.
        TruncatedData: Fewer raster bytes than the header promises.
    """
    magic = stream.read(2)
    try:
        kind = ImageKind.from_magic(magic.decode("ascii"))
    except UnicodeDecodeError:
        kind = None
    if kind is None:
        if magic == b"P7":
            raise InvalidFormat("PAM (P7) images are not supported")
        raise InvalidFormat(f"Not a binary Netpbm image (magic {magic!r})")

    scanner = _HeaderScanner(stream)
    width = scanner.read_positive_int("width")
    height = scanner.read_positive_int("height")
    max_value = 1
    if kind is not ImageKind.BINARY:
        max_value = scanner.read_positive_int("maxval")
        if max_value > _MAX_SAMPLE_VALUE:
            raise InvalidFormat(f"maxval must be <= {_MAX_SAMPLE_VALUE}, got {max_value}")
    scanner.read_separator()

    size = expected_data_size(width, height, kind, max_value)
    payload = scanner.read_exact(size)
    if len(payload) < size:
        raise TruncatedData(
            f"{kind.magic} {width}x{height} needs {size} bytes, got {len(payload)}"
        )

    data = np.frombuffer(payload, dtype=np.uint8).copy()
    return RasterBuffer(width, height, kind, max_value, data)


def decode_bytes(payload: bytes) -> RasterBuffer:
    """Decode an image held in memory."""
    return decode(io.BytesIO(payload))


def read_image(path: Union[str, Path]) -> RasterBuffer:
    """Read a P4 / P5 / P6 file from disk."""
    with open(path, "rb") as handle:
        return decode(handle)


def encode(image: RasterBuffer) -> bytes:
    """Serialize an image, header included."""
    header = f"{image.kind.magic}\n{image.width} {image.height}\n"
    if image.kind is not ImageKind.BINARY:
        header += f"{image.max_value}\n"

    data = image.data
    if image.kind is ImageKind.BINARY:
        tail = (image.width * image.height) % 8
        if tail:
            data = data.copy()
            data[-1] &= (0xFF << (8 - tail)) & 0xFF
    return header.encode("ascii") + data.tobytes()


def write_image(path: Union[str, Path], image: RasterBuffer) -> None:
    """
    Write an image to disk.

    The payload is encoded up front and written through a temporary file in
    the target directory, so a failure never leaves a partial file behind.
    """
    path = Path(path)
    payload = encode(image)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
