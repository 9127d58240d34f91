"""
Shape-analysis workflow.

Ties together loading, masking, mask cleanup, contour tracing and shape
measurement, recording stage timings and log lines on an AnalysisContext.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from .codec import ImageKind, RasterBuffer
from .config import AnalysisConfig
from .errors import RasterError
from .geometry import (
    Circle,
    Contour,
    PolygonMatch,
    ShapeResult,
    analyze_contours,
    detect_octagons,
    detect_squares,
    find_contours,
)
from .image_processing import (
    closing,
    color_mask,
    load_raster,
    opening,
    remove_small_components,
    resolve_bands,
    threshold_gray,
)
from .image_processing.color_mask import BACKGROUND, FOREGROUND
from .utils.analysis_context import AnalysisContext
from .utils.progress import iter_progress
from .utils.report import build_report


@dataclass
class ImageAnalysis:
    """Everything measured on one input image."""

    path: str
    width: int = 0
    height: int = 0
    kind: Optional[str] = None
    contour_count: int = 0
    shapes: List[ShapeResult] = field(default_factory=list)
    circles: List[Circle] = field(default_factory=list)
    polygons: List[PolygonMatch] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dict."""
        return {
            "path": self.path,
            "width": self.width,
            "height": self.height,
            "kind": self.kind,
            "contour_count": self.contour_count,
            "shapes": [shape.to_dict() for shape in self.shapes],
            "circles": [circle.to_dict() for circle in self.circles],
            "polygons": [polygon.to_dict() for polygon in self.polygons],
            "error": self.error,
        }


def _to_uint8(pixels: np.ndarray, max_value: int) -> np.ndarray:
    if pixels.dtype == np.uint8 and max_value == 255:
        return pixels
    scaled = pixels.astype(np.uint32) * 255 // max_value
    return scaled.astype(np.uint8)


class ShapeAnalysisWorkflow:
    """Main workflow class for finding shapes in raster images."""

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        context: Optional[AnalysisContext] = None,
        show_progress: bool = False,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.config.validate()
        self.context = context or AnalysisContext()
        self.context.config = self.config
        self.show_progress = show_progress
        self.analyses: List[ImageAnalysis] = []

    def load(self, path: Union[str, Path]) -> RasterBuffer:
        """Decode an image file (Netpbm via the codec, anything else via Pillow)."""
        with self.context.time_block("load"):
            return load_raster(path)

    def build_mask(self, raster: RasterBuffer) -> np.ndarray:
        """Turn a decoded image into a 0/255 foreground mask."""
        mask_cfg = self.config.mask
        with self.context.time_block("build_mask"):
            pixels = raster.to_pixels()
            if raster.kind is ImageKind.BINARY:
                return pixels
            pixels = _to_uint8(pixels, raster.max_value)
            if raster.kind is ImageKind.GRAYSCALE:
                return threshold_gray(pixels, mask_cfg.gray_threshold)
            if mask_cfg.preset == "custom":
                bands = [(tuple(mask_cfg.lower), tuple(mask_cfg.upper))]
            else:
                bands = resolve_bands(mask_cfg.preset)
            return color_mask(pixels, bands, equalize_value=mask_cfg.equalize_value)

    def clean_mask(self, mask: np.ndarray) -> np.ndarray:
        """Opening, closing and small-component removal, as configured."""
        morph = self.config.morphology
        with self.context.time_block("clean_mask"):
            if morph.open_kernel:
                mask = opening(
                    mask, morph.open_kernel, iterations=morph.iterations, border_value=BACKGROUND
                )
            if morph.close_kernel:
                mask = closing(
                    mask, morph.close_kernel, iterations=morph.iterations, border_value=BACKGROUND
                )
            if morph.min_component_area:
                mask = remove_small_components(mask, morph.min_component_area)
            return mask

    def trace(self, mask: np.ndarray) -> List[Contour]:
        """Trace contours, dropping those shorter than ``min_points``."""
        shape_cfg = self.config.shape_filter
        with self.context.time_block("trace"):
            contours = find_contours(mask, foreground=FOREGROUND, mode=shape_cfg.contour_mode)
            return [c for c in contours if len(c) >= shape_cfg.min_points]

    def analyze(self, contours: Sequence[Contour], analysis: ImageAnalysis) -> ImageAnalysis:
        """Measure contours and fill the shape, circle and polygon lists."""
        shape_cfg = self.config.shape_filter
        with self.context.time_block("analyze"):
            kept: List[Contour] = []
            for result in analyze_contours(contours):
                if not result.ok:
                    self.context.log(
                        "WARNING",
                        "Skipping degenerate contour",
                        path=analysis.path,
                        index=result.index,
                        error=result.error,
                    )
                    analysis.shapes.append(result)
                    continue
                descriptor = result.descriptor
                if descriptor.area < shape_cfg.min_area:
                    continue
                if descriptor.perimeter < shape_cfg.min_perimeter:
                    continue
                analysis.shapes.append(result)
                kept.append(contours[result.index])
                if descriptor.circularity >= shape_cfg.min_circularity:
                    analysis.circles.append(descriptor.circle)

            analysis.polygons.extend(detect_octagons(kept))
            analysis.polygons.extend(detect_squares(kept))
        return analysis

    def analyze_file(self, path: Union[str, Path]) -> ImageAnalysis:
        """Run every stage on one image file."""
        raster = self.load(path)
        analysis = ImageAnalysis(
            path=str(path),
            width=raster.width,
            height=raster.height,
            kind=raster.kind.name.lower(),
        )
        mask = self.clean_mask(self.build_mask(raster))
        if not mask.any():
            self.context.log("WARNING", "Empty mask", path=analysis.path)

        contours = self.trace(mask)
        analysis.contour_count = len(contours)
        self.analyze(contours, analysis)
        self.context.log(
            "INFO",
            "Analyzed image",
            path=analysis.path,
            contours=analysis.contour_count,
            circles=len(analysis.circles),
            polygons=len(analysis.polygons),
        )
        return analysis

    def run(self, paths: Sequence[Union[str, Path]]) -> List[ImageAnalysis]:
        """
        Analyze every input; a failing image is recorded and skipped.

        Returns:
            One ImageAnalysis per input path, in order.
        """
        self.context.log("INFO", "Starting analysis", images=len(paths))
        for path in iter_progress(paths, desc="Analyzing", enabled=self.show_progress):
            try:
                analysis = self.analyze_file(path)
            except (RasterError, OSError) as exc:
                self.context.log("ERROR", f"Failed to analyze {path}: {exc}")
                analysis = ImageAnalysis(path=str(path), error=str(exc))
            self.analyses.append(analysis)
        return self.analyses

    def report(self) -> Dict[str, Any]:
        """Build the run report for everything analyzed so far."""
        return build_report(
            self.context, images=[analysis.to_dict() for analysis in self.analyses]
        )

