"""Tests for HSV range masks (pure Python)."""

from __future__ import annotations

import unittest

import numpy as np

from rastershape.errors import InvalidParameter
from rastershape.image_processing.color_mask import (
    color_mask,
    in_range,
    resolve_bands,
    threshold_gray,
)

# pure red, red near the hue wrap, blue, green, dark red, white
_SWATCHES = np.array(
    [[[255, 0, 0], [255, 0, 40], [0, 0, 255], [0, 255, 0], [60, 0, 0], [255, 255, 255]]],
    dtype=np.uint8,
)


class TestInRange(unittest.TestCase):
    def test_inclusive_bounds(self) -> None:
        hsv = np.array([[[10, 100, 100], [11, 100, 100], [0, 99, 100]]], dtype=np.uint8)
        mask = in_range(hsv, (0, 100, 100), (10, 255, 255))
        self.assertEqual(mask[0].tolist(), [255, 0, 0])

    def test_rejects_bad_bounds(self) -> None:
        with self.assertRaises(InvalidParameter):
            in_range(np.zeros((1, 1, 3), dtype=np.uint8), (0, 0), (1, 1))


class TestColorMask(unittest.TestCase):
    def test_red_preset_covers_hue_wrap(self) -> None:
        mask = color_mask(_SWATCHES, resolve_bands("red"))
        self.assertEqual(mask[0].tolist(), [255, 255, 0, 0, 0, 0])

    def test_blue_preset(self) -> None:
        mask = color_mask(_SWATCHES, resolve_bands("blue"))
        self.assertEqual(mask[0].tolist(), [0, 0, 255, 0, 0, 0])

    def test_preset_name_accepted(self) -> None:
        np.testing.assert_array_equal(
            color_mask(_SWATCHES, "red"), color_mask(_SWATCHES, resolve_bands("red"))
        )

    def test_unknown_preset(self) -> None:
        with self.assertRaises(InvalidParameter):
            resolve_bands("green")

    def test_needs_a_band(self) -> None:
        with self.assertRaises(InvalidParameter):
            color_mask(_SWATCHES, [])

    def test_threshold_gray(self) -> None:
        gray = np.array([[0, 127, 128, 255]], dtype=np.uint8)
        self.assertEqual(threshold_gray(gray)[0].tolist(), [0, 0, 255, 255])


if __name__ == "__main__":
    unittest.main()
