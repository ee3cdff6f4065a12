"""CLI entrypoints for harness commands."""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional, Sequence

from . import __version__
from .analyze import analyze, lint_findings
from .bench import (
    BenchContext,
    BenchReport,
    BenchRunResult,
    average_overall_score,
    load_bench_report,
    validate_bench_compare_compatibility,
    write_bench_report,
)
from .config import (
    DEFAULT_CONFIG_FILE,
    SUPPORTED_PROFILES,
    HarnessConfig,
    OptimizationThresholds,
    load_config,
)
from .continuity import ContinuityLogger
from .errors import HarnessError, NotGitRepoError, PathNotFoundError
from .generator import ApplyMode, SuggestPlan, execute_apply, write_plan
from .logging import configure_logging, get_logger
from .models import Risk
from .optimize import (
    compute_optimize_delta,
    render_optimize_report,
    scan_traces,
    write_optimize_report,
)
from .report import OutputFormat, render
from .scaffold import plan_scaffold, write_scaffold
from .scan import discover

logger = get_logger("cli")

EXIT_SUCCESS = 0
EXIT_WARNINGS = 1
EXIT_BLOCKING = 2
EXIT_RUNTIME = 3

DEFAULT_TRACE_DIR = ".harness/traces"


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        type=Path,
        help="Path to the repository root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="harness",
        description="Assess and improve how legible a repository is to coding agents.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeat for debug output).",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Write starter harness files.")
    _add_path_argument(init_parser)
    init_parser.add_argument("--profile", choices=SUPPORTED_PROFILES, default="general")
    init_parser.add_argument(
        "--dry-run", action="store_true", help="Print the planned files without writing."
    )
    init_parser.add_argument(
        "--no-overwrite", action="store_true", help="Skip files that already exist."
    )

    analyze_parser = subparsers.add_parser("analyze", help="Score the repository and report.")
    _add_path_argument(analyze_parser)
    analyze_parser.add_argument(
        "--format", choices=[fmt.value for fmt in OutputFormat], default=OutputFormat.JSON.value
    )
    analyze_parser.add_argument(
        "--min-impact",
        choices=("safe", "all"),
        default="all",
        help="Limit recommendations to Safe risk when set to 'safe'.",
    )

    lint_parser = subparsers.add_parser("lint", help="List findings only.")
    _add_path_argument(lint_parser)

    suggest_parser = subparsers.add_parser("suggest", help="List ranked recommendations.")
    _add_path_argument(suggest_parser)
    suggest_parser.add_argument(
        "--export-diff",
        action="store_true",
        help="Write a plan file with the Safe recommendations.",
    )

    apply_parser = subparsers.add_parser("apply", help="Apply a plan of safe recommendations.")
    _add_path_argument(apply_parser)
    plan_source = apply_parser.add_mutually_exclusive_group(required=True)
    plan_source.add_argument("--plan-file", help="Plan file relative to the repository root.")
    plan_source.add_argument(
        "--plan-all", action="store_true", help="Apply every Safe recommendation."
    )
    apply_parser.add_argument(
        "--apply-mode",
        choices=[mode.value for mode in ApplyMode],
        default=ApplyMode.PREVIEW.value,
    )
    apply_parser.add_argument(
        "--allow-dirty", action="store_true", help="Skip the clean working tree check."
    )
    apply_parser.add_argument("--yes", action="store_true", help="Do not prompt for confirmation.")

    optimize_parser = subparsers.add_parser(
        "optimize", help="Compare agent-run traces across revisions."
    )
    _add_path_argument(optimize_parser)
    optimize_parser.add_argument(
        "--trace-dir",
        type=Path,
        default=None,
        help=f"Trace directory (defaults to {DEFAULT_TRACE_DIR} under the repository).",
    )

    bench_parser = subparsers.add_parser("bench", help="Run repeatable scoring benchmarks.")
    _add_path_argument(bench_parser)
    bench_parser.add_argument("--suite", default=None)
    bench_parser.add_argument("--runs", type=int, default=1)
    bench_parser.add_argument("--compare", type=Path, default=None, help="Baseline bench report.")
    bench_parser.add_argument(
        "--force-compare",
        action="store_true",
        help="Compare even when the bench contexts differ.",
    )

    return parser


def _require_repository(path: Path) -> None:
    if not path.exists():
        raise PathNotFoundError(str(path))
    if not (path / ".git").exists():
        raise NotGitRepoError(str(path))


def _load_validated_config(path: Path) -> Optional[HarnessConfig]:
    config = load_config(path)
    if config is not None:
        config.validate()
    return config


def _milestone(
    continuity: ContinuityLogger,
    feature: str,
    action: str,
    evidence: Sequence[str],
    next_state: str,
) -> None:
    try:
        continuity.record_milestone(feature, action, evidence, next_state)
    except OSError as exc:
        logger.warning("continuity milestone logging failed: %s", exc)


def _progress(
    continuity: ContinuityLogger,
    feature: str,
    action: str,
    evidence: Sequence[str],
    next_state: str,
) -> None:
    try:
        continuity.record_progress(feature, action, evidence, next_state)
    except OSError as exc:
        logger.warning("continuity progress logging failed: %s", exc)


def _run_init(args: argparse.Namespace) -> int:
    path: Path = args.path
    if not path.exists():
        if args.dry_run:
            print(f"init target would be created: {path}")
        else:
            path.mkdir(parents=True)
    files = plan_scaffold(args.profile)

    print("init plan:")
    for item in files:
        print(f"- {path / item.relative_path}")
    if args.dry_run:
        print("dry-run: no files were written")
        return EXIT_SUCCESS

    continuity = ContinuityLogger(path)
    _milestone(continuity, "init", "start", [f"path={path}"], "running")
    written = write_scaffold(path, files, overwrite=not args.no_overwrite)
    for item in files:
        target = path / item.relative_path
        if target not in written:
            print(f"skip existing: {target}")
    print("init complete")
    _milestone(
        continuity,
        "init",
        "complete",
        [f"written={len(written)}", f"exit_code={EXIT_SUCCESS}"],
        "done",
    )
    return EXIT_SUCCESS


def _run_analyze(args: argparse.Namespace) -> int:
    path: Path = args.path
    _require_repository(path)
    config = _load_validated_config(path)
    continuity = ContinuityLogger(path, config)
    _milestone(continuity, "analyze", "start", [f"path={path}"], "running")

    report = analyze(discover(path, config), config)
    if args.min_impact == "safe":
        report = report.with_safe_recommendations()
    print(render(report, OutputFormat(args.format)))
    _progress(
        continuity,
        "analyze",
        "report_rendered",
        [f"findings={len(report.findings)}", f"recommendations={len(report.recommendations)}"],
        "running",
    )

    if config is None:
        logger.warning("no %s found in %s", DEFAULT_CONFIG_FILE, path)
    if report.has_blocking:
        exit_code = EXIT_BLOCKING
    elif config is None or report.findings:
        exit_code = EXIT_WARNINGS
    else:
        exit_code = EXIT_SUCCESS
    _milestone(continuity, "analyze", "complete", [f"exit_code={exit_code}"], "done")
    return exit_code


def _run_lint(args: argparse.Namespace) -> int:
    path: Path = args.path
    _require_repository(path)
    config = _load_validated_config(path)
    continuity = ContinuityLogger(path, config)
    _milestone(continuity, "lint", "start", [f"path={path}"], "running")

    findings = lint_findings(discover(path, config), config)
    if not findings:
        print("lint: no findings")
        _milestone(continuity, "lint", "complete", [f"exit_code={EXIT_SUCCESS}"], "done")
        return EXIT_SUCCESS

    for finding in findings:
        level = "BLOCKING" if finding.blocking else "WARN"
        print(f"[{level}] {finding.id}: {finding.title}")
        print(f"  {finding.body}")
    exit_code = EXIT_BLOCKING if any(finding.blocking for finding in findings) else EXIT_WARNINGS
    _progress(continuity, "lint", "findings_emitted", [f"findings={len(findings)}"], "running")
    _milestone(continuity, "lint", "complete", [f"exit_code={exit_code}"], "done")
    return exit_code


def _run_suggest(args: argparse.Namespace) -> int:
    path: Path = args.path
    _require_repository(path)
    config = _load_validated_config(path)
    continuity = ContinuityLogger(path, config)
    _milestone(continuity, "suggest", "start", [f"path={path}"], "running")

    report = analyze(discover(path, config), config)
    if not report.recommendations:
        print("suggest: no recommendations")
        _milestone(continuity, "suggest", "complete", [f"exit_code={EXIT_SUCCESS}"], "done")
        return EXIT_SUCCESS

    print("suggestions:")
    for rec in report.recommendations:
        print(f"- {rec.id} [{rec.title} {rec.impact.value}/{rec.risk.value}]")

    if args.export_diff:
        safe_ids = [rec.id for rec in report.recommendations if rec.risk is Risk.SAFE]
        plan_path = write_plan(path, SuggestPlan.new(safe_ids))
        print(f"plan file: {plan_path}")
        _progress(continuity, "suggest", "plan_exported", [f"plan={plan_path}"], "running")

    _milestone(
        continuity,
        "suggest",
        "complete",
        [f"recommendations={len(report.recommendations)}", f"exit_code={EXIT_SUCCESS}"],
        "done",
    )
    return EXIT_SUCCESS


def _run_apply(args: argparse.Namespace) -> int:
    path: Path = args.path
    _require_repository(path)
    config = _load_validated_config(path)
    continuity = ContinuityLogger(path, config)
    try:
        execute_apply(
            path,
            config=config,
            plan_file=args.plan_file,
            plan_all=args.plan_all,
            mode=ApplyMode(args.apply_mode),
            allow_dirty=args.allow_dirty,
            assume_yes=args.yes,
        )
    except HarnessError as exc:
        _milestone(continuity, "apply", "failed", [f"error={exc}"], "blocked")
        raise
    _milestone(continuity, "apply", "complete", [f"exit_code={EXIT_SUCCESS}"], "done")
    return EXIT_SUCCESS


def _run_optimize(args: argparse.Namespace) -> int:
    path: Path = args.path
    _require_repository(path)
    config = _load_validated_config(path)
    continuity = ContinuityLogger(path, config)
    _milestone(continuity, "optimize", "start", [f"path={path}"], "running")

    thresholds = config.optimization_thresholds() if config is not None else OptimizationThresholds()
    trace_dir: Path = args.trace_dir or path / DEFAULT_TRACE_DIR
    now = datetime.now(UTC)
    traces = scan_traces(trace_dir, thresholds.trace_staleness_days, now=now)
    stats = traces.stats
    _progress(
        continuity,
        "optimize",
        "trace_scanned",
        [f"recent={stats.recent}", f"stale={stats.stale}", f"malformed={stats.malformed}"],
        "running",
    )
    delta = compute_optimize_delta(traces.recent, thresholds)

    report = analyze(discover(path, config, now=now), config)
    content = render_optimize_report(report, stats, thresholds, trace_dir, delta)
    out_path = write_optimize_report(path, content, now=now)
    print(f"optimize report: {out_path}")
    _milestone(
        continuity,
        "optimize",
        "complete",
        [f"status={delta.status.value}", f"exit_code={EXIT_SUCCESS}"],
        "done",
    )
    return EXIT_SUCCESS


def _run_bench(args: argparse.Namespace) -> int:
    path: Path = args.path
    _require_repository(path)
    config = _load_validated_config(path)
    continuity = ContinuityLogger(path, config)
    _milestone(continuity, "bench", "start", [f"path={path}"], "running")

    model = discover(path, config)
    runs: List[BenchRunResult] = []
    for index in range(max(args.runs, 0)):
        runs.append(BenchRunResult(run=index + 1, overall_score=analyze(model, config).overall_score))
    _progress(continuity, "bench", "runs_completed", [f"runs={len(runs)}"], "running")

    report = BenchReport(bench_context=BenchContext.capture(path, suite=args.suite), runs=runs)
    if args.compare is not None:
        baseline = load_bench_report(args.compare)
        validate_bench_compare_compatibility(
            report.bench_context, baseline.bench_context, args.force_compare
        )
        current_avg = average_overall_score(report.runs)
        baseline_avg = average_overall_score(baseline.runs)
        print(
            f"bench compare: baseline={baseline_avg:.3f}, current={current_avg:.3f}, "
            f"delta={current_avg - baseline_avg:.3f}"
        )

    report_path = write_bench_report(path, report)
    print(f"bench report: {report_path}")
    _milestone(
        continuity,
        "bench",
        "complete",
        [f"report={report_path}", f"exit_code={EXIT_SUCCESS}"],
        "done",
    )
    return EXIT_SUCCESS


_COMMANDS = {
    "init": _run_init,
    "analyze": _run_analyze,
    "lint": _run_lint,
    "suggest": _run_suggest,
    "apply": _run_apply,
    "optimize": _run_optimize,
    "bench": _run_bench,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for harness commands; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        return _COMMANDS[args.command](args)
    except HarnessError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_RUNTIME
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_RUNTIME


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
