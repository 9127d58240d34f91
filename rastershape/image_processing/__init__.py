"""Colour conversion, masking, morphology and image loading helpers."""

from .color_mask import COLOR_PRESETS, color_mask, in_range, resolve_bands, threshold_gray
from .color_space import convert_to_hsv, rgb_to_gray, rgb_to_hsv
from .components import label_components, remove_small_components
from .histogram import equalize_channel, equalize_value_channel
from .image_loader import load_image, load_raster
from .morphology import closing, dilate, erode, opening

__all__ = [
    "COLOR_PRESETS",
    "closing",
    "color_mask",
    "convert_to_hsv",
    "dilate",
    "equalize_channel",
    "equalize_value_channel",
    "erode",
    "in_range",
    "label_components",
    "load_image",
    "load_raster",
    "opening",
    "remove_small_components",
    "resolve_bands",
    "rgb_to_gray",
    "rgb_to_hsv",
    "threshold_gray",
]
