"""Tests for the rastershape command line (pure Python)."""

from __future__ import annotations

import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

from rastershape.cli import main
from rastershape.codec import ImageKind, read_image


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> int:
        with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(io.StringIO()):
            return main(list(argv))

    def _disk_png(self) -> Path:
        ys, xs = np.mgrid[0:60, 0:60]
        image = np.full((60, 60, 3), 255, dtype=np.uint8)
        image[(xs - 30) ** 2 + (ys - 30) ** 2 <= 225] = (255, 0, 0)
        path = self.tmp / "disk.png"
        Image.fromarray(image).save(path)
        return path

    def test_blank(self) -> None:
        dst = self.tmp / "blank.pbm"
        self.assertEqual(self._run("blank", "3", "3", str(dst)), 0)
        self.assertEqual(dst.read_bytes(), b"P4\n3 3\n\xff\x80")

    def test_blank_grayscale(self) -> None:
        dst = self.tmp / "blank.pgm"
        self.assertEqual(self._run("blank", "2", "2", str(dst), "--kind", "grayscale"), 0)
        self.assertEqual(read_image(dst).to_pixels().tolist(), [[255, 255], [255, 255]])

    def test_blank_rejects_zero_size(self) -> None:
        self.assertEqual(self._run("blank", "0", "3", str(self.tmp / "x.pbm")), 2)

    def test_convert_png_to_pbm(self) -> None:
        dst = self.tmp / "disk.pbm"
        self.assertEqual(self._run("convert", str(self._disk_png()), str(dst)), 0)
        image = read_image(dst)
        self.assertIs(image.kind, ImageKind.BINARY)
        pixels = image.to_pixels()
        self.assertEqual(int(pixels[0, 0]), 255)
        self.assertEqual(int(pixels[30, 30]), 0)

    def test_convert_to_ppm(self) -> None:
        dst = self.tmp / "disk.ppm"
        self.assertEqual(self._run("convert", str(self._disk_png()), str(dst)), 0)
        self.assertEqual(read_image(dst).to_pixels()[30, 30].tolist(), [255, 0, 0])

    def test_convert_unknown_extension(self) -> None:
        self.assertEqual(self._run("convert", str(self._disk_png()), str(self.tmp / "x.txt")), 2)

    def test_convert_missing_source(self) -> None:
        self.assertEqual(self._run("convert", str(self.tmp / "nope.png"), str(self.tmp / "x.pgm")), 1)

    def test_analyze_writes_report(self) -> None:
        report_path = self.tmp / "report.json"
        code = self._run(
            "analyze", str(self._disk_png()), "--output", str(report_path), "--quiet"
        )
        self.assertEqual(code, 0)
        report = json.loads(report_path.read_text(encoding="utf-8"))
        self.assertEqual(len(report["images"]), 1)
        self.assertEqual(len(report["images"][0]["circles"]), 1)

    def test_analyze_missing_input(self) -> None:
        report_path = self.tmp / "report.json"
        code = self._run("analyze", str(self.tmp / "nope.ppm"), "--output", str(report_path), "--quiet")
        self.assertEqual(code, 1)

    def test_analyze_bad_config(self) -> None:
        code = self._run("analyze", str(self._disk_png()), "--config-json", '{"render": {}}')
        self.assertEqual(code, 2)

    def test_analyze_config_value_of_wrong_type(self) -> None:
        src = str(self._disk_png())
        code = self._run("analyze", src, "--config-json", '{"morphology": {"open_kernel": "x"}}')
        self.assertEqual(code, 2)

    def test_analyze_config_group_not_an_object(self) -> None:
        self.assertEqual(self._run("analyze", str(self._disk_png()), "--config-json", '{"mask": 5}'), 2)

    def test_usage_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("analyze")
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
