"""Tests for the continuity progress log."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

from harness.config import parse_config
from harness.continuity import ContinuityLogger, ContinuitySettings, LogEntry


class StepClock:
    """Deterministic clock that advances by ``step`` on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


START = datetime(2026, 6, 1, 8, 0, tzinfo=UTC)


def _config(**continuity):  # type: ignore[no-untyped-def]
    return parse_config({"project": {"name": "sample"}, "continuity": continuity})


def test_entry_rendering() -> None:
    entry = LogEntry("2026-06-01T08:00:00+00:00", "analyze", "start", ("path=.", "x=1"), "running")
    empty = LogEntry("2026-06-01T08:00:00+00:00", "lint", "complete", (), "done")

    assert entry.render() == (
        "- timestamp: 2026-06-01T08:00:00+00:00 | feature: analyze | action: start | "
        "evidence: path=., x=1 | next_state: running"
    )
    assert "evidence: - |" in empty.render()


def test_milestone_logs_even_when_sampling_none(tmp_path: Path) -> None:
    logger = ContinuityLogger(tmp_path, _config(log_sampling="none"), clock=StepClock(START))

    logger.record_milestone("analyze", "start", ["path=repo"], "running")

    content = (tmp_path / ".harness/progress.md").read_text(encoding="utf-8")
    assert "feature: analyze" in content
    assert "action: start" in content


def test_progress_skipped_in_milestone_mode(tmp_path: Path) -> None:
    logger = ContinuityLogger(tmp_path, None, clock=StepClock(START))

    logger.record_progress("analyze", "scan", ["signals=ok"], "running")
    logger.flush()

    assert logger.pending == 0
    assert not (tmp_path / ".harness/progress.md").exists()


def test_progress_batches_until_interval(tmp_path: Path) -> None:
    clock = StepClock(START, step=timedelta(seconds=20))
    logger = ContinuityLogger(
        tmp_path, _config(log_sampling="all", batch_interval_secs=60), clock=clock
    )
    progress = tmp_path / ".harness/progress.md"

    logger.record_progress("bench", "run", ["n=1"], "running")
    assert logger.pending == 1
    assert not progress.exists()

    logger.record_progress("bench", "run", ["n=2"], "running")
    assert logger.pending == 0
    assert progress.read_text(encoding="utf-8").count("feature: bench") == 2


def test_custom_progress_path(tmp_path: Path) -> None:
    logger = ContinuityLogger(tmp_path, _config(progress_file="notes/log.md"), clock=StepClock(START))

    logger.record_milestone("init", "complete", [], "done")

    assert (tmp_path / "notes/log.md").exists()


def test_settings_apply_lower_bounds(tmp_path: Path) -> None:
    settings = ContinuitySettings.resolve(
        tmp_path, _config(batch_interval_secs=0, max_log_size_kb=0, retained_logs=0)
    )

    assert settings.batch_interval_secs == 1
    assert settings.max_log_size_kb == 1
    assert settings.retained_logs == 1


def test_rotation_and_pruning(tmp_path: Path) -> None:
    logger = ContinuityLogger(
        tmp_path,
        _config(max_log_size_kb=1, retained_logs=2),
        clock=StepClock(START, step=timedelta(seconds=1)),
    )
    evidence = ["x" * 1100]

    for _ in range(4):
        logger.record_milestone("bench", "run", evidence, "running")

    rotated = logger.rotated_logs()
    assert len(rotated) == 2
    assert all(path.name.startswith("progress-") and path.suffix == ".md" for path in rotated)
    assert (tmp_path / ".harness/progress.md").read_text(encoding="utf-8") == ""
