"""Markdown rendering of the optimize report."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional

from ..analyze.recommendations import rank_recommendations
from ..config import OptimizationThresholds
from ..models import HarnessReport
from .delta import OptimizeDelta, OptimizeDeltaStatus
from .traces import TraceScanStats

TOP_RECOMMENDATIONS = 10
OPTIMIZE_REPORT_DIR = ".harness/optimize"

_STATUS_LINES = {
    OptimizeDeltaStatus.IMPROVEMENT: "Status: improvement detected.",
    OptimizeDeltaStatus.REGRESSION: "Status: regression warning.",
    OptimizeDeltaStatus.NEUTRAL: "Status: stable; changes are below uplift thresholds.",
    OptimizeDeltaStatus.INSUFFICIENT_DATA: (
        "Status: insufficient comparative data for optimize deltas."
    ),
}


def render_optimize_report(
    report: HarnessReport,
    stats: TraceScanStats,
    thresholds: OptimizationThresholds,
    trace_dir: Path,
    delta: OptimizeDelta,
) -> str:
    lines: List[str] = [
        "# Harness Optimize Report",
        "",
        f"Overall score: {report.overall_score:.3f}",
        f"Trace directory: {trace_dir}",
        f"Trace records: recent={stats.recent}, stale={stats.stale}, malformed={stats.malformed}",
        f"Recent traces required for optimization: {thresholds.min_traces}",
        "",
    ]
    if stats.malformed > 0:
        lines.append(f"Warning: ignored malformed trace records: {stats.malformed}")

    if stats.recent < thresholds.min_traces:
        lines.append("Status: insufficient data for optimization recommendations.")
        lines.append(
            f"Need at least {thresholds.min_traces} recent traces before computing optimize deltas."
        )
        lines.append("")
        return "\n".join(lines)

    lines.append("## Optimization Delta")
    if delta.baseline_revision is not None and delta.current_revision is not None:
        lines.append(
            f"- revisions compared: baseline=`{delta.baseline_revision}`, "
            f"current=`{delta.current_revision}`"
        )
    lines.append(f"- task overlap: {delta.task_overlap:.2f}")
    lines.append(
        f"- completion delta: {delta.completion_delta:+.3f}, "
        f"token delta (rel): {delta.token_delta_rel:+.3f}, "
        f"step delta (rel): {delta.step_delta_rel:+.3f}"
    )
    lines.append(_STATUS_LINES[delta.status])
    if delta.reason:
        lines.append(f"Reason: {delta.reason}")
    lines.append("")

    if delta.status is OptimizeDeltaStatus.INSUFFICIENT_DATA:
        return "\n".join(lines)

    lines.append("## Top Recommendations")
    ranked = rank_recommendations(report.recommendations)
    if not ranked:
        lines.append("- No recommendations available.")
    for rec in ranked[:TOP_RECOMMENDATIONS]:
        lines.append(
            f"- `{rec.id}`: {rec.summary} (impact: {rec.impact.value}, "
            f"effort: {rec.effort.value}, risk: {rec.risk.value}, "
            f"confidence: {rec.confidence:.2f})"
        )
    lines.append("")
    return "\n".join(lines)


def write_optimize_report(
    root: Path,
    content: str,
    *,
    now: Optional[datetime] = None,
) -> Path:
    """Persist ``content`` under ``.harness/optimize`` and return the file path."""
    stamp = (now or datetime.now(UTC)).strftime("%Y%m%dT%H%M%SZ")
    target = root / OPTIMIZE_REPORT_DIR / f"optimize-{stamp}.md"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


__all__ = ["TOP_RECOMMENDATIONS", "render_optimize_report", "write_optimize_report"]
