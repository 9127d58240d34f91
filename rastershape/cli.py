"""Command-line entry point: ``rastershape analyze|convert|blank``."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

import numpy as np

from .codec import ImageKind, RasterBuffer, create_blank_image, write_image
from .config import AnalysisConfig, apply_overrides, load_overrides
from .errors import InvalidParameter, RasterError
from .image_processing import load_raster, rgb_to_gray, threshold_gray
from .image_processing.image_loader import expand_inputs
from .pipeline import ShapeAnalysisWorkflow
from .utils.analysis_context import AnalysisContext
from .utils.progress import progress_print
from .utils.report import write_report

_KIND_BY_SUFFIX = {
    ".pbm": ImageKind.BINARY,
    ".pgm": ImageKind.GRAYSCALE,
    ".ppm": ImageKind.RGB,
}
_KIND_BY_NAME = {kind.name.lower(): kind for kind in ImageKind}


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rastershape",
        description="Netpbm conversion and shape analysis for raster masks.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Find contours, circles and polygons")
    analyze.add_argument("images", nargs="+", help="Image files or directories")
    analyze.add_argument(
        "--preset",
        choices=["red", "blue", "custom"],
        default=None,
        help="Colour preset for RGB inputs",
    )
    analyze.add_argument(
        "--min-circularity",
        type=float,
        default=None,
        help="Circularity threshold for circle detection (0-1)",
    )
    analyze.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="JSON file with config overrides",
    )
    analyze.add_argument(
        "--config-json",
        default=None,
        help="Inline JSON config overrides (applied after --config)",
    )
    analyze.add_argument("--output", default=None, help="Write the JSON report here")
    analyze.add_argument("--progress", action="store_true", help="Show a progress bar")
    analyze.add_argument("--quiet", action="store_true", help="Suppress log lines")

    convert = sub.add_parser("convert", help="Convert an image to PBM/PGM/PPM")
    convert.add_argument("src", help="Source image")
    convert.add_argument("dst", help="Destination (.pbm, .pgm or .ppm)")
    convert.add_argument(
        "--threshold",
        type=int,
        default=127,
        help="Gray level above which pixels become white in a PBM",
    )

    blank = sub.add_parser("blank", help="Write a white image")
    blank.add_argument("width", type=int)
    blank.add_argument("height", type=int)
    blank.add_argument("dst")
    blank.add_argument("--kind", choices=sorted(_KIND_BY_NAME), default="binary")
    blank.add_argument("--max-value", type=int, default=None)

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> AnalysisConfig:
    cfg = AnalysisConfig()
    apply_overrides(cfg, load_overrides(args.config_path, args.config_json))
    if args.preset is not None:
        cfg.mask.preset = args.preset
    if args.min_circularity is not None:
        cfg.shape_filter.min_circularity = args.min_circularity
    cfg.validate()
    return cfg


def _run_analyze(args: argparse.Namespace) -> int:
    try:
        cfg = _build_config(args)
    except (InvalidParameter, OSError) as exc:
        progress_print(f"Error: {exc}")
        return 2

    context = AnalysisContext(quiet=args.quiet)
    workflow = ShapeAnalysisWorkflow(cfg, context, show_progress=args.progress)
    analyses = workflow.run(expand_inputs(args.images))
    report = workflow.report()

    if args.output:
        write_report(args.output, report)
        context.log("INFO", "Wrote report", path=args.output)
    else:
        print(json.dumps(report, indent=2))

    return 0 if all(analysis.ok for analysis in analyses) else 1


def _convert_pixels(raster: RasterBuffer, kind: ImageKind, threshold: int) -> RasterBuffer:
    pixels = raster.to_pixels()
    if raster.kind is not ImageKind.BINARY and raster.max_value != 255:
        pixels = (pixels.astype(np.uint32) * 255 // raster.max_value).astype(np.uint8)
    if pixels.ndim == 3:
        gray = rgb_to_gray(pixels)
    else:
        gray = pixels

    if kind is ImageKind.BINARY:
        return RasterBuffer.from_pixels(threshold_gray(gray, threshold), kind=kind)
    if kind is ImageKind.GRAYSCALE:
        return RasterBuffer.from_pixels(gray, kind=kind)
    if pixels.ndim == 2:
        pixels = np.repeat(pixels[:, :, np.newaxis], 3, axis=2)
    return RasterBuffer.from_pixels(pixels, kind=kind)


def _run_convert(args: argparse.Namespace) -> int:
    dst = Path(args.dst)
    kind = _KIND_BY_SUFFIX.get(dst.suffix.lower())
    if kind is None:
        progress_print(f"Error: unsupported output extension {dst.suffix!r}")
        return 2
    try:
        raster = load_raster(args.src)
        write_image(dst, _convert_pixels(raster, kind, args.threshold))
    except (RasterError, OSError) as exc:
        progress_print(f"Error: {exc}")
        return 1
    progress_print(f"Wrote {dst} ({kind.magic}, {raster.width}x{raster.height})")
    return 0


def _run_blank(args: argparse.Namespace) -> int:
    try:
        image = create_blank_image(
            args.width, args.height, _KIND_BY_NAME[args.kind], max_value=args.max_value
        )
    except InvalidParameter as exc:
        progress_print(f"Error: {exc}")
        return 2
    try:
        write_image(args.dst, image)
    except OSError as exc:
        progress_print(f"Error: {exc}")
        return 1
    progress_print(f"Wrote {args.dst} ({image.kind.magic}, {image.width}x{image.height})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    if args.command == "analyze":
        return _run_analyze(args)
    if args.command == "convert":
        return _run_convert(args)
    return _run_blank(args)


if __name__ == "__main__":
    raise SystemExit(main())
