"""Repeatable scoring runs with captured context, for before/after comparison."""

from __future__ import annotations

import json
import platform
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .errors import BenchCompareError
from .scan.git_meta import GitMeta

BENCH_DIR = ".harness/bench"
DEFAULT_SUITE = "default"


@dataclass(frozen=True)
class BenchContext:
    os: str
    toolchain: str
    repo_ref: str
    repo_dirty: bool
    harness_version: str
    suite: str
    timestamp: str

    @classmethod
    def capture(
        cls,
        root: Path,
        *,
        suite: Optional[str] = None,
        git: Optional[GitMeta] = None,
        now: Optional[datetime] = None,
    ) -> "BenchContext":
        git = git or GitMeta()
        return cls(
            os=f"{platform.system().lower()}-{platform.machine().lower()}",
            toolchain=detect_toolchain(),
            repo_ref=git.head_ref(root),
            repo_dirty=git.is_dirty(root),
            harness_version=__version__,
            suite=suite or DEFAULT_SUITE,
            timestamp=(now or datetime.now(UTC)).isoformat(),
        )


@dataclass(frozen=True)
class BenchRunResult:
    run: int
    overall_score: float


@dataclass
class BenchReport:
    bench_context: BenchContext
    runs: List[BenchRunResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bench_context": asdict(self.bench_context),
            "runs": [asdict(run) for run in self.runs],
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "BenchReport":
        try:
            context = BenchContext(**payload["bench_context"])
            runs = [
                BenchRunResult(run=int(item["run"]), overall_score=float(item["overall_score"]))
                for item in payload["runs"]
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise BenchCompareError(f"invalid bench report: {exc}") from exc
        return cls(bench_context=context, runs=runs)


def detect_toolchain() -> str:
    return f"{platform.python_implementation()} {platform.python_version()}"


def average_overall_score(runs: List[BenchRunResult]) -> float:
    if not runs:
        return 0.0
    return sum(run.overall_score for run in runs) / len(runs)


def validate_bench_compare_compatibility(
    current: BenchContext,
    baseline: BenchContext,
    force_compare: bool = False,
) -> None:
    """Refuse comparisons across different platforms, toolchains or dirty states."""
    mismatches = [
        f"{name} (baseline={getattr(baseline, name)}, current={getattr(current, name)})"
        for name in ("os", "toolchain", "repo_dirty")
        if getattr(baseline, name) != getattr(current, name)
    ]
    if mismatches and not force_compare:
        raise BenchCompareError(
            "bench compare blocked due to incompatible context: "
            f"{', '.join(mismatches)}. Re-run with --force-compare to override."
        )


def write_bench_report(root: Path, report: BenchReport, *, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now(UTC)).strftime("%Y%m%dT%H%M%SZ")
    target = root / BENCH_DIR / f"bench-{stamp}.json"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
    return target


def load_bench_report(path: Path) -> BenchReport:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise BenchCompareError(f"cannot read bench report {path}: {exc}") from exc
    return BenchReport.from_dict(payload)


__all__ = [
    "BenchContext",
    "BenchReport",
    "BenchRunResult",
    "average_overall_score",
    "detect_toolchain",
    "load_bench_report",
    "validate_bench_compare_compatibility",
    "write_bench_report",
]
