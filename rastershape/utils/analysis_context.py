"""Run context for shape-analysis workflows."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import time
import uuid
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from ..errors import InvalidParameter
from .progress import progress_print

if TYPE_CHECKING:
    from ..config import AnalysisConfig


SCHEMA_VERSION = "rastershape_report_v1"
LOG_TAG = "[rastershape]"


@dataclass
class StageTiming:
    """Timing information for a workflow stage."""

    stage: str
    elapsed_ms: float
    started_utc: str

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "stage": self.stage,
            "elapsed_ms": self.elapsed_ms,
            "started_utc": self.started_utc,
        }


@dataclass
class AnalysisContext:
    """Execution context: run id, structured log lines and stage timings."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    quiet: bool = False
    created_utc: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    schema_version: str = SCHEMA_VERSION
    stages: List[StageTiming] = field(default_factory=list)
    logs: List[Dict[str, object]] = field(default_factory=list)
    config: Optional["AnalysisConfig"] = None

    def log(self, level: str, message: str, **fields: Any) -> str:
        """Emit a structured log line tagged with the current run_id."""
        ordered_fields = " ".join(f"{key}={fields[key]}" for key in sorted(fields))
        line = f"{LOG_TAG} run_id={self.run_id} level={level} msg={message}"
        if ordered_fields:
            line = f"{line} {ordered_fields}"
        if not self.quiet:
            progress_print(line)
        self.logs.append({"level": level, "message": message, **fields})
        return line

    def warnings(self) -> List[str]:
        return [str(entry["message"]) for entry in self.logs if entry["level"] == "WARNING"]

    def errors(self) -> List[str]:
        return [str(entry["message"]) for entry in self.logs if entry["level"] == "ERROR"]

    @contextlib.contextmanager
    def time_block(self, stage: str) -> Iterator[None]:
        """Context manager that records elapsed time for a stage."""
        start = time.perf_counter()
        started_utc = datetime.now(timezone.utc).isoformat()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            self.stages.append(
                StageTiming(stage=stage, elapsed_ms=elapsed_ms, started_utc=started_utc)
            )

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable dict describing this context."""
        data: Dict[str, object] = {
            "run_id": self.run_id,
            "created_utc": self.created_utc,
            "schema_version": self.schema_version,
        }
        if self.config is not None:
            data["config"] = self.config.to_dict()
        try:
            json.dumps(data)
        except TypeError as exc:
            raise InvalidParameter(
                "AnalysisContext contains non-serializable values"
            ) from exc
        return data
