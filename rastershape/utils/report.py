"""Report helpers recording run metadata and per-image results."""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
from typing import Any, Dict, List, Optional, Union

from .analysis_context import AnalysisContext


def _safe_json(value: Any) -> Any:
    """Ensure value is JSON-serializable; fallback to string."""
    try:
        json.dumps(value)
        return value
    except TypeError:
        return str(value)


def build_report(
    context: AnalysisContext,
    images: Optional[List[Dict[str, Any]]] = None,
    warnings: Optional[List[str]] = None,
    errors: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build the run report payload.

    Warnings and errors default to the ones logged on ``context``.
    """
    return {
        "report_version": context.schema_version,
        "run_id": context.run_id,
        "created_utc": context.created_utc,
        "context": context.to_dict(),
        "stages": [stage.to_dict() for stage in context.stages],
        "images": [_safe_json(entry) for entry in images or []],
        "warnings": context.warnings() if warnings is None else warnings,
        "errors": context.errors() if errors is None else errors,
    }


def write_report(path: Union[str, Path], report: Dict[str, Any]) -> Path:
    """Write the report as indented JSON, replacing ``path`` atomically."""
    path = Path(path)
    payload = json.dumps(report, indent=2)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path
