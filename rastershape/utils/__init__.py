"""Run context, reporting and progress helpers."""

from .analysis_context import AnalysisContext, StageTiming
from .progress import iter_progress, progress_print
from .report import build_report, write_report
