"""Optimization over agent-run traces: scanning, delta classification, reporting."""

from .delta import (
    OptimizeDelta,
    OptimizeDeltaStatus,
    compute_optimize_delta,
    compute_task_overlap,
    relative_delta,
)
from .report import render_optimize_report, write_optimize_report
from .traces import RecentTraceRecord, TraceData, TraceScanStats, count_recent_traces, scan_traces

__all__ = [
    "OptimizeDelta",
    "OptimizeDeltaStatus",
    "RecentTraceRecord",
    "TraceData",
    "TraceScanStats",
    "compute_optimize_delta",
    "compute_task_overlap",
    "count_recent_traces",
    "relative_delta",
    "render_optimize_report",
    "write_optimize_report",
    "scan_traces",
]
