"""Markdown rendering of a harness report."""

from __future__ import annotations

from typing import List

from ..models import CATEGORY_NAMES, HarnessReport


def to_markdown(report: HarnessReport) -> str:
    lines: List[str] = [
        "# Harness Report",
        "",
        f"Overall score: {report.overall_score:.3f}",
        "",
        "## Category Scores",
        "",
    ]
    for name, value in zip(CATEGORY_NAMES, report.category_scores.categories()):
        lines.append(f"- {name}: {value:.3f}")
    lines.extend(["", "## Findings", ""])

    if not report.findings:
        lines.append("- none")
    for finding in report.findings:
        level = "blocking" if finding.blocking else "warning"
        lines.append(f"- [{level}] {finding.title}: {finding.body}")
    lines.extend(["", "## Recommendations", ""])

    if not report.recommendations:
        lines.append("- none")
    for rec in report.recommendations:
        lines.append(
            f"- {rec.title} ({rec.impact.value}/{rec.effort.value}, "
            f"confidence {rec.confidence:.2f}): {rec.summary}"
        )
    lines.append("")
    return "\n".join(lines)


__all__ = ["to_markdown"]
