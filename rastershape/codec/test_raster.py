"""Tests for RasterBuffer and blank images (pure Python)."""

from __future__ import annotations

import unittest

import numpy as np

from rastershape.codec.raster import (
    ImageKind,
    RasterBuffer,
    bytes_per_channel,
    create_blank_image,
    expected_data_size,
)
from rastershape.errors import InvalidParameter


class TestRasterBuffer(unittest.TestCase):
    def test_storage_sizes(self) -> None:
        self.assertEqual(expected_data_size(3, 3, ImageKind.BINARY, 1), 2)
        self.assertEqual(expected_data_size(4, 2, ImageKind.GRAYSCALE, 255), 8)
        self.assertEqual(expected_data_size(2, 2, ImageKind.RGB, 65535), 24)

    def test_bytes_per_channel(self) -> None:
        self.assertEqual(bytes_per_channel(255), 1)
        self.assertEqual(bytes_per_channel(256), 2)
        image = RasterBuffer.allocate(2, 2, ImageKind.RGB, 1023)
        self.assertEqual(image.bytes_per_pixel, 6)

    def test_rejects_zero_dimensions(self) -> None:
        with self.assertRaises(InvalidParameter):
            RasterBuffer.allocate(0, 4, ImageKind.GRAYSCALE)

    def test_rejects_wrong_buffer_length(self) -> None:
        with self.assertRaises(InvalidParameter):
            RasterBuffer(3, 3, ImageKind.BINARY, 1, np.zeros(1, dtype=np.uint8))

    def test_rejects_binary_max_value(self) -> None:
        with self.assertRaises(InvalidParameter):
            RasterBuffer(8, 1, ImageKind.BINARY, 255, np.zeros(1, dtype=np.uint8))

    def test_rejects_out_of_range_pixels(self) -> None:
        pixels = np.array([[300]], dtype=np.uint16)
        with self.assertRaises(InvalidParameter):
            RasterBuffer.from_pixels(pixels, max_value=255)

    def test_kind_inference(self) -> None:
        self.assertIs(RasterBuffer.from_pixels(np.zeros((2, 2), dtype=bool)).kind, ImageKind.BINARY)
        self.assertIs(RasterBuffer.from_pixels(np.zeros((2, 2), dtype=np.uint8)).kind, ImageKind.GRAYSCALE)
        self.assertIs(RasterBuffer.from_pixels(np.zeros((2, 2, 3), dtype=np.uint8)).kind, ImageKind.RGB)

    def test_copy_does_not_share_storage(self) -> None:
        image = RasterBuffer.allocate(2, 2, ImageKind.GRAYSCALE)
        clone = image.copy()
        clone.data[0] = 42
        self.assertEqual(image.data[0], 0)

    def test_from_pixels_copies_input(self) -> None:
        pixels = np.zeros((2, 2), dtype=np.uint8)
        image = RasterBuffer.from_pixels(pixels)
        pixels[0, 0] = 5
        self.assertEqual(image.data[0], 0)


class TestBlankImage(unittest.TestCase):
    def test_binary_blank_is_white(self) -> None:
        image = create_blank_image(3, 3)
        self.assertEqual(image.data.tolist(), [0xFF, 0x80])
        self.assertTrue(np.all(image.to_pixels() == 255))

    def test_grayscale_blank_uses_max_value(self) -> None:
        image = create_blank_image(4, 3, ImageKind.GRAYSCALE, max_value=100)
        self.assertTrue(np.all(image.to_pixels() == 100))

    def test_sixteen_bit_rgb_blank(self) -> None:
        image = create_blank_image(2, 2, ImageKind.RGB, max_value=4095)
        pixels = image.to_pixels()
        self.assertEqual(pixels.shape, (2, 2, 3))
        self.assertTrue(np.all(pixels == 4095))


if __name__ == "__main__":
    unittest.main()
