"""Configuration models for the shape-analysis workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .errors import InvalidParameter

_VALID_PRESETS = {"red", "blue", "custom"}
_VALID_CONTOUR_MODES = {"all", "external"}


def _check_kernel(name: str, value: int) -> None:
    if value < 0:
        raise InvalidParameter(f"{name} must be >= 0")
    if value and value % 2 == 0:
        raise InvalidParameter(f"{name} must be odd (or 0 to skip)")


@dataclass
class MaskConfig:
    """Configuration for turning an input image into a binary mask."""

    preset: str = "red"
    lower: Tuple[int, int, int] = (0, 0, 0)
    upper: Tuple[int, int, int] = (179, 255, 255)
    equalize_value: bool = False
    gray_threshold: int = 127

    def validate(self) -> None:
        """Validate configuration values."""
        if self.preset not in _VALID_PRESETS:
            raise InvalidParameter(f"preset must be one of {sorted(_VALID_PRESETS)}")
        if len(self.lower) != 3 or len(self.upper) != 3:
            raise InvalidParameter("lower and upper must have three values")
        for lo, hi in zip(self.lower, self.upper):
            if not (0 <= lo <= 255 and 0 <= hi <= 255):
                raise InvalidParameter("lower and upper values must be in [0, 255]")
            if lo > hi:
                raise InvalidParameter("lower must not exceed upper")
        if not (0 <= self.gray_threshold <= 255):
            raise InvalidParameter("gray_threshold must be in [0, 255]")

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "preset": self.preset,
            "lower": list(self.lower),
            "upper": list(self.upper),
            "equalize_value": self.equalize_value,
            "gray_threshold": self.gray_threshold,
        }


@dataclass
class MorphologyConfig:
    """Configuration for mask cleanup."""

    open_kernel: int = 3
    close_kernel: int = 3
    iterations: int = 2
    min_component_area: int = 0

    def validate(self) -> None:
        """Validate configuration values."""
        _check_kernel("open_kernel", self.open_kernel)
        _check_kernel("close_kernel", self.close_kernel)
        if self.iterations < 1:
            raise InvalidParameter("iterations must be >= 1")
        if self.min_component_area < 0:
            raise InvalidParameter("min_component_area must be >= 0")

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "open_kernel": self.open_kernel,
            "close_kernel": self.close_kernel,
            "iterations": self.iterations,
            "min_component_area": self.min_component_area,
        }


@dataclass
class ShapeFilterConfig:
    """Configuration for contour selection and shape classification."""

    min_circularity: float = 0.8
    min_area: float = 0.0
    min_perimeter: float = 0.0
    min_points: int = 5
    contour_mode: str = "external"

    def validate(self) -> None:
        """Validate configuration values."""
        if not (0.0 <= self.min_circularity <= 1.0):
            raise InvalidParameter("min_circularity must be in [0, 1]")
        if self.min_area < 0 or self.min_perimeter < 0:
            raise InvalidParameter("min_area and min_perimeter must be >= 0")
        if self.min_points < 1:
            raise InvalidParameter("min_points must be >= 1")
        if self.contour_mode not in _VALID_CONTOUR_MODES:
            raise InvalidParameter(
                f"contour_mode must be one of {sorted(_VALID_CONTOUR_MODES)}"
            )

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "min_circularity": self.min_circularity,
            "min_area": self.min_area,
            "min_perimeter": self.min_perimeter,
            "min_points": self.min_points,
            "contour_mode": self.contour_mode,
        }


@dataclass
class AnalysisConfig:
    """Root configuration for the analysis workflow."""

    mask: MaskConfig = field(default_factory=MaskConfig)
    morphology: MorphologyConfig = field(default_factory=MorphologyConfig)
    shape_filter: ShapeFilterConfig = field(default_factory=ShapeFilterConfig)

    def validate(self) -> None:
        """Validate configuration values across groups."""
        self.mask.validate()
        self.morphology.validate()
        self.shape_filter.validate()

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict matching the override schema."""
        return {
            "mask": self.mask.to_dict(),
            "morphology": self.morphology.to_dict(),
            "shape_filter": self.shape_filter.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnalysisConfig":
        """Build a validated config from (possibly partial) override data."""
        cfg = cls()
        apply_overrides(cfg, data or {})
        cfg.validate()
        return cfg


def _convert(group: str, key: str, value: Any, cast: Callable[[Any], Any]) -> Any:
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"Invalid {group}.{key}: {value!r}") from exc


def _int_tuple(value: Any) -> Tuple[int, ...]:
    return tuple(int(v) for v in value)


def apply_overrides(cfg: AnalysisConfig, overrides: Dict[str, Any]) -> None:
    """Apply a nested override mapping onto ``cfg`` in place.

    Unknown groups or keys, groups that are not mappings, and values of the
    wrong type raise InvalidParameter so typos are not ignored.
    """
    if not overrides:
        return
    if not isinstance(overrides, dict):
        raise InvalidParameter("Config overrides must be a JSON object")

    known = {
        "mask": cfg.mask.to_dict(),
        "morphology": cfg.morphology.to_dict(),
        "shape_filter": cfg.shape_filter.to_dict(),
    }
    for group, values in overrides.items():
        if group not in known:
            raise InvalidParameter(f"Unknown config group: {group}")
        if not isinstance(values, dict):
            raise InvalidParameter(f"Config group {group} must be an object, got {values!r}")
        unknown = set(values) - set(known[group])
        if unknown:
            raise InvalidParameter(f"Unknown {group} keys: {sorted(unknown)}")

    mask = overrides.get("mask", {})
    if "preset" in mask:
        cfg.mask.preset = str(mask["preset"])
    if "lower" in mask:
        cfg.mask.lower = _convert("mask", "lower", mask["lower"], _int_tuple)
    if "upper" in mask:
        cfg.mask.upper = _convert("mask", "upper", mask["upper"], _int_tuple)
    if "equalize_value" in mask:
        cfg.mask.equalize_value = bool(mask["equalize_value"])
    if "gray_threshold" in mask:
        cfg.mask.gray_threshold = _convert("mask", "gray_threshold", mask["gray_threshold"], int)

    morph = overrides.get("morphology", {})
    for key in ("open_kernel", "close_kernel", "iterations", "min_component_area"):
        if key in morph:
            setattr(cfg.morphology, key, _convert("morphology", key, morph[key], int))

    shape = overrides.get("shape_filter", {})
    for key in ("min_circularity", "min_area", "min_perimeter"):
        if key in shape:
            setattr(cfg.shape_filter, key, _convert("shape_filter", key, shape[key], float))
    if "min_points" in shape:
        cfg.shape_filter.min_points = _convert("shape_filter", "min_points", shape["min_points"], int)
    if "contour_mode" in shape:
        cfg.shape_filter.contour_mode = str(shape["contour_mode"])


def load_overrides(
    config_path: Optional[Union[str, Path]] = None,
    config_json: Optional[str] = None,
) -> Dict[str, Any]:
    """Merge overrides from a JSON file and an inline JSON string (inline wins)."""
    overrides: Dict[str, Any] = {}
    try:
        sources = []
        if config_path:
            with open(config_path, "r", encoding="utf-8") as handle:
                sources.append(json.load(handle))
        if config_json:
            sources.append(json.loads(config_json))
    except json.JSONDecodeError as exc:
        raise InvalidParameter(f"Invalid config JSON: {exc}") from exc
    for source in sources:
        if not isinstance(source, dict):
            raise InvalidParameter("Config overrides must be a JSON object")
        for group, values in source.items():
            if isinstance(values, dict) and isinstance(overrides.get(group), dict):
                overrides[group] = {**overrides[group], **values}
            else:
                overrides[group] = values
    return overrides
