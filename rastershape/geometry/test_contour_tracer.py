"""Tests for Moore-neighbour contour tracing (pure Python)."""

from __future__ import annotations

import unittest
from unittest import mock

import numpy as np

from rastershape.errors import InvalidParameter
from rastershape.geometry import contour_tracer
from rastershape.geometry.contour_tracer import DIRECTIONS, find_contours, trace_boundary


def _mask(height: int, width: int) -> np.ndarray:
    return np.zeros((height, width), dtype=np.uint8)


class TestFindContours(unittest.TestCase):
    def test_empty_mask(self) -> None:
        self.assertEqual(find_contours(_mask(4, 4)), [])

    def test_single_pixel(self) -> None:
        mask = _mask(5, 5)
        mask[2, 2] = 255
        contours = find_contours(mask)
        self.assertEqual(len(contours), 1)
        self.assertEqual(contours[0].to_list(), [(2, 2)])

    def test_single_pixel_at_corner(self) -> None:
        mask = _mask(3, 3)
        mask[0, 0] = 255
        self.assertEqual(find_contours(mask)[0].to_list(), [(0, 0)])

    def test_two_by_two_block(self) -> None:
        mask = _mask(4, 4)
        mask[1:3, 1:3] = 255
        contours = find_contours(mask)
        self.assertEqual(contours[0].to_list(), [(1, 1), (2, 1), (2, 2), (1, 2)])

    def test_filled_square_boundary(self) -> None:
        mask = _mask(9, 9)
        mask[2:7, 2:7] = 255
        contours = find_contours(mask)
        self.assertEqual(len(contours), 1)
        points = contours[0].to_list()
        self.assertEqual(points[0], (2, 2))
        self.assertEqual(len(points), 16)
        expected = {(x, y) for x in range(2, 7) for y in range(2, 7)} - {
            (x, y) for x in range(3, 6) for y in range(3, 6)
        }
        self.assertEqual(set(points), expected)

    def test_line_is_walked_both_ways(self) -> None:
        mask = _mask(3, 5)
        mask[1, 1:4] = 255
        contour = find_contours(mask)[0]
        self.assertEqual(contour.to_list(), [(1, 1), (2, 1), (3, 1), (2, 1)])

    def test_hole_contour_and_external_mode(self) -> None:
        mask = _mask(7, 7)
        mask[1:6, 1:6] = 255
        mask[3, 3] = 0
        everything = find_contours(mask, mode="all")
        self.assertEqual(len(everything), 2)
        self.assertEqual(set(everything[1].to_list()), {(4, 3), (3, 2), (2, 3), (3, 4)})
        external = find_contours(mask, mode="external")
        self.assertEqual(len(external), 1)
        self.assertEqual(external[0].start, (1, 1))

    def test_separate_regions_in_scan_order(self) -> None:
        mask = _mask(6, 8)
        mask[3:5, 1:3] = 255
        mask[0:2, 5:7] = 255
        starts = [c.start for c in find_contours(mask)]
        self.assertEqual(starts, [(5, 0), (1, 3)])

    def test_boolean_mask_and_custom_foreground(self) -> None:
        mask = _mask(4, 4)
        mask[1, 1] = 1
        self.assertEqual(len(find_contours(mask.astype(bool))), 1)
        self.assertEqual(len(find_contours(mask, foreground=1)), 1)
        self.assertEqual(find_contours(mask), [])

    def test_random_masks_terminate_with_adjacent_points(self) -> None:
        rng = np.random.default_rng(21)
        for _ in range(5):
            mask = np.where(rng.random((30, 30)) < 0.45, 255, 0).astype(np.uint8)
            for contour in find_contours(mask):
                points = contour.points
                self.assertTrue(np.all(mask[points[:, 1], points[:, 0]] == 255))
                if len(points) > 1:
                    steps = np.abs(np.roll(points, -1, axis=0) - points).max(axis=1)
                    self.assertTrue(np.all(steps == 1))

    def test_many_contours_share_one_step_bound(self) -> None:
        mask = _mask(40, 60)
        mask[::2, ::3] = 255
        mask[::2, 1::3] = 255
        with mock.patch.object(
            contour_tracer, "_step_bound", wraps=contour_tracer._step_bound
        ) as bound:
            contours = find_contours(mask)
        self.assertEqual(bound.call_count, 1)
        self.assertEqual(len(contours), 400)
        self.assertEqual(contours[0].to_list(), [(0, 0), (1, 0)])

    def test_trace_stops_at_max_steps(self) -> None:
        mask = _mask(9, 9)
        mask[2:7, 2:7] = 255
        fg = mask == 255
        self.assertEqual(len(trace_boundary(fg, (2, 2))), 16)
        self.assertEqual(trace_boundary(fg, (2, 2), max_steps=3), [(2, 2), (3, 2), (4, 2), (5, 2)])

    def test_points_are_read_only(self) -> None:
        mask = _mask(4, 4)
        mask[1:3, 1:3] = 255
        contour = find_contours(mask)[0]
        with self.assertRaises(ValueError):
            contour.points[0, 0] = 9

    def test_direction_table_is_immutable(self) -> None:
        self.assertIsInstance(DIRECTIONS, tuple)
        self.assertEqual(len(DIRECTIONS), 8)

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(InvalidParameter):
            find_contours(_mask(3, 3), mode="tree")
        with self.assertRaises(InvalidParameter):
            find_contours(np.zeros((3, 3, 3), dtype=np.uint8))


if __name__ == "__main__":
    unittest.main()
