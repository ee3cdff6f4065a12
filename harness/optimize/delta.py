"""Classify the change between the two most recent revisions in trace data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from ..config import OptimizationThresholds
from .traces import RecentTraceRecord

RELATIVE_EPSILON = 1e-7
SUCCESS_OUTCOME = "success"


class OptimizeDeltaStatus(Enum):
    IMPROVEMENT = "Improvement"
    REGRESSION = "Regression"
    NEUTRAL = "Neutral"
    INSUFFICIENT_DATA = "InsufficientData"


@dataclass(frozen=True)
class OptimizeDelta:
    status: OptimizeDeltaStatus
    baseline_revision: Optional[str] = None
    current_revision: Optional[str] = None
    completion_delta: float = 0.0
    token_delta_rel: float = 0.0
    step_delta_rel: float = 0.0
    task_overlap: float = 0.0
    reason: Optional[str] = None


@dataclass(frozen=True)
class RevisionMetrics:
    revision: str
    total: int
    completion_rate: float
    avg_steps: float
    avg_tokens: float
    tasks: FrozenSet[str]
    latest_ts: datetime


@dataclass
class RevisionAccumulator:
    """Running totals for one revision while traces are folded in."""

    total: int = 0
    success: int = 0
    steps_sum: float = 0.0
    steps_count: int = 0
    tokens_sum: float = 0.0
    tokens_count: int = 0
    tasks: Set[str] = field(default_factory=set)
    latest_ts: Optional[datetime] = None

    def add(self, trace: RecentTraceRecord) -> None:
        self.total += 1
        if trace.outcome == SUCCESS_OUTCOME:
            self.success += 1
        if trace.steps is not None:
            self.steps_sum += trace.steps
            self.steps_count += 1
        if trace.token_est is not None:
            self.tokens_sum += trace.token_est
            self.tokens_count += 1
        self.tasks.add(trace.task_id)
        if self.latest_ts is None or trace.timestamp > self.latest_ts:
            self.latest_ts = trace.timestamp

    def to_metrics(self, revision: str) -> Optional[RevisionMetrics]:
        if self.latest_ts is None:
            return None
        return RevisionMetrics(
            revision=revision,
            total=self.total,
            completion_rate=self.success / self.total if self.total else 0.0,
            avg_steps=self.steps_sum / self.steps_count if self.steps_count else 0.0,
            avg_tokens=self.tokens_sum / self.tokens_count if self.tokens_count else 0.0,
            tasks=frozenset(self.tasks),
            latest_ts=self.latest_ts,
        )


def compute_task_overlap(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard similarity of two task sets; two empty sets score 0.0."""
    left, right = set(a), set(b)
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def relative_delta(baseline: float, current: float) -> float:
    if abs(baseline) < RELATIVE_EPSILON:
        return 0.0
    return (current - baseline) / baseline


def _signal(value: float, threshold: float, *, lower_is_better: bool = False) -> int:
    if lower_is_better:
        value = -value
    if value >= threshold:
        return 1
    if value <= -threshold:
        return -1
    return 0


def aggregate_revisions(traces: Iterable[RecentTraceRecord]) -> List[RevisionMetrics]:
    """Fold traces per revision, ordered by latest timestamp then revision id."""
    accumulators: Dict[str, RevisionAccumulator] = {}
    for trace in traces:
        accumulators.setdefault(trace.revision, RevisionAccumulator()).add(trace)
    metrics = [
        result
        for revision, accumulator in accumulators.items()
        if (result := accumulator.to_metrics(revision)) is not None
    ]
    metrics.sort(key=lambda item: (item.latest_ts, item.revision))
    return metrics


def compute_optimize_delta(
    traces: Iterable[RecentTraceRecord],
    thresholds: OptimizationThresholds,
) -> OptimizeDelta:
    revisions = aggregate_revisions(traces)
    if len(revisions) < 2:
        return OptimizeDelta(
            status=OptimizeDeltaStatus.INSUFFICIENT_DATA,
            reason="need traces from at least two revisions",
        )

    baseline, current = revisions[-2], revisions[-1]
    if baseline.total < thresholds.min_traces or current.total < thresholds.min_traces:
        return OptimizeDelta(
            status=OptimizeDeltaStatus.INSUFFICIENT_DATA,
            baseline_revision=baseline.revision,
            current_revision=current.revision,
            reason=(
                f"need at least {thresholds.min_traces} traces per revision "
                f"(baseline={baseline.total}, current={current.total})"
            ),
        )

    overlap = compute_task_overlap(baseline.tasks, current.tasks)
    if overlap < thresholds.task_overlap_threshold:
        return OptimizeDelta(
            status=OptimizeDeltaStatus.INSUFFICIENT_DATA,
            baseline_revision=baseline.revision,
            current_revision=current.revision,
            task_overlap=overlap,
            reason=(
                f"task overlap {overlap:.2f} is below threshold "
                f"{thresholds.task_overlap_threshold:.2f}"
            ),
        )

    completion_delta = current.completion_rate - baseline.completion_rate
    token_delta_rel = relative_delta(baseline.avg_tokens, current.avg_tokens)
    step_delta_rel = relative_delta(baseline.avg_steps, current.avg_steps)

    total_signal = (
        _signal(completion_delta, thresholds.min_uplift_abs)
        + _signal(token_delta_rel, thresholds.min_uplift_rel, lower_is_better=True)
        + _signal(step_delta_rel, thresholds.min_uplift_rel, lower_is_better=True)
    )
    reason = None
    if total_signal > 0:
        status = OptimizeDeltaStatus.IMPROVEMENT
    elif total_signal < 0:
        status = OptimizeDeltaStatus.REGRESSION
    else:
        status = OptimizeDeltaStatus.NEUTRAL
        reason = "changes are below configured uplift thresholds"

    return OptimizeDelta(
        status=status,
        baseline_revision=baseline.revision,
        current_revision=current.revision,
        completion_delta=completion_delta,
        token_delta_rel=token_delta_rel,
        step_delta_rel=step_delta_rel,
        task_overlap=overlap,
        reason=reason,
    )


__all__ = [
    "OptimizeDelta",
    "OptimizeDeltaStatus",
    "RevisionAccumulator",
    "RevisionMetrics",
    "aggregate_revisions",
    "compute_optimize_delta",
    "compute_task_overlap",
    "relative_delta",
]
