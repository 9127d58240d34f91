"""Tests for report schema integrity (pure Python)."""

from __future__ import annotations

import json
from pathlib import Path
import tempfile
import unittest

from rastershape.utils.analysis_context import AnalysisContext
from rastershape.utils.report import build_report, write_report


class TestReportSchema(unittest.TestCase):
    def test_report_contains_required_keys(self) -> None:
        ctx = AnalysisContext()
        report = build_report(ctx, images=[], warnings=[], errors=[])
        for key in (
            "report_version",
            "run_id",
            "created_utc",
            "context",
            "stages",
            "images",
            "warnings",
            "errors",
        ):
            self.assertIn(key, report)

    def test_run_id_consistency(self) -> None:
        ctx = AnalysisContext()
        self.assertEqual(build_report(ctx)["run_id"], ctx.run_id)

    def test_logged_warnings_collected(self) -> None:
        ctx = AnalysisContext(quiet=True)
        ctx.log("WARNING", "Empty mask", path="a.pbm")
        self.assertEqual(build_report(ctx)["warnings"], ["Empty mask"])

    def test_write_report(self) -> None:
        ctx = AnalysisContext()
        report = build_report(ctx, images=[{"path": "x.ppm", "shapes": []}])
        with tempfile.TemporaryDirectory() as tmp:
            path = write_report(Path(tmp) / "report.json", report)
            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), report)
            self.assertEqual(sorted(p.name for p in Path(tmp).iterdir()), ["report.json"])


if __name__ == "__main__":
    unittest.main()
