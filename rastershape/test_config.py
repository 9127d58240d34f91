"""Tests for analysis configuration (pure Python)."""

from __future__ import annotations

import json
from pathlib import Path
import tempfile
import unittest

from rastershape.config import (
    AnalysisConfig,
    MaskConfig,
    MorphologyConfig,
    ShapeFilterConfig,
    apply_overrides,
    load_overrides,
)
from rastershape.errors import InvalidParameter


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_validate(self) -> None:
        cfg = AnalysisConfig()
        cfg.validate()
        json.dumps(cfg.to_dict())

    def test_default_cleanup_matches_detector(self) -> None:
        morph = MorphologyConfig()
        self.assertEqual((morph.open_kernel, morph.close_kernel, morph.iterations), (3, 3, 2))


class TestConfigValidation(unittest.TestCase):
    def test_invalid_preset(self) -> None:
        with self.assertRaises(InvalidParameter):
            MaskConfig(preset="green").validate()

    def test_inverted_custom_bounds(self) -> None:
        with self.assertRaises(InvalidParameter):
            MaskConfig(preset="custom", lower=(10, 0, 0), upper=(5, 255, 255)).validate()

    def test_even_kernel(self) -> None:
        with self.assertRaises(InvalidParameter):
            MorphologyConfig(open_kernel=4).validate()

    def test_zero_kernel_skips(self) -> None:
        MorphologyConfig(open_kernel=0, close_kernel=0).validate()

    def test_invalid_iterations(self) -> None:
        with self.assertRaises(InvalidParameter):
            MorphologyConfig(iterations=0).validate()

    def test_invalid_circularity(self) -> None:
        with self.assertRaises(InvalidParameter):
            ShapeFilterConfig(min_circularity=1.5).validate()

    def test_invalid_contour_mode(self) -> None:
        with self.assertRaises(InvalidParameter):
            ShapeFilterConfig(contour_mode="tree").validate()

    def test_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            ShapeFilterConfig(min_points=0).validate()


class TestOverrides(unittest.TestCase):
    def test_partial_overrides(self) -> None:
        cfg = AnalysisConfig()
        apply_overrides(cfg, {"mask": {"preset": "blue"}, "shape_filter": {"min_circularity": 0.6}})
        self.assertEqual(cfg.mask.preset, "blue")
        self.assertEqual(cfg.shape_filter.min_circularity, 0.6)
        self.assertEqual(cfg.morphology.open_kernel, 3)

    def test_unknown_keys_rejected(self) -> None:
        with self.assertRaises(InvalidParameter):
            apply_overrides(AnalysisConfig(), {"mask": {"colour": "red"}})
        with self.assertRaises(InvalidParameter):
            apply_overrides(AnalysisConfig(), {"render": {}})

    def test_wrongly_typed_values_rejected(self) -> None:
        bad = (
            {"morphology": {"open_kernel": "x"}},
            {"mask": {"lower": 5}},
            {"mask": {"upper": ["a", 0, 0]}},
            {"shape_filter": {"min_circularity": None}},
        )
        for overrides in bad:
            with self.assertRaises(InvalidParameter):
                apply_overrides(AnalysisConfig(), overrides)

    def test_non_object_group_rejected(self) -> None:
        for group in ({"mask": 5}, {"morphology": [1, 2]}):
            with self.assertRaises(InvalidParameter):
                apply_overrides(AnalysisConfig(), group)

    def test_from_dict_round_trip(self) -> None:
        cfg = AnalysisConfig()
        cfg.mask.lower = (100, 50, 50)
        cfg.mask.preset = "custom"
        rebuilt = AnalysisConfig.from_dict(cfg.to_dict())
        self.assertEqual(rebuilt.to_dict(), cfg.to_dict())

    def test_from_dict_validates(self) -> None:
        with self.assertRaises(InvalidParameter):
            AnalysisConfig.from_dict({"morphology": {"close_kernel": 2}})

    def test_inline_json_wins_over_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cfg.json"
            path.write_text(json.dumps({"mask": {"preset": "blue", "gray_threshold": 90}}))
            merged = load_overrides(path, '{"mask": {"preset": "red"}}')
        self.assertEqual(merged, {"mask": {"preset": "red", "gray_threshold": 90}})

    def test_invalid_json(self) -> None:
        with self.assertRaises(InvalidParameter):
            load_overrides(config_json="{not json")
        with self.assertRaises(InvalidParameter):
            load_overrides(config_json="[1, 2]")


if __name__ == "__main__":
    unittest.main()
