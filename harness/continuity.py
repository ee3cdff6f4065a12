"""Append-only progress log that lets a later session pick up where one stopped."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

from .config import ContinuityConfig, LogSampling
from .logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .config import HarnessConfig

logger = get_logger("continuity")

DEFAULT_PROGRESS_FILE = ".harness/progress.md"

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ContinuitySettings:
    progress_file: Path
    sampling: LogSampling = LogSampling.MILESTONES
    batch_interval_secs: int = 60
    max_log_size_kb: int = 100
    retained_logs: int = 3

    @classmethod
    def resolve(cls, root: Path, config: Optional["HarnessConfig"]) -> "ContinuitySettings":
        """Apply defaults and lower bounds of one to the configured values."""
        continuity = config.continuity if config is not None else ContinuityConfig()
        progress = Path(continuity.progress_file or DEFAULT_PROGRESS_FILE)
        if not progress.is_absolute():
            progress = root / progress
        return cls(
            progress_file=progress,
            sampling=continuity.log_sampling,
            batch_interval_secs=max(continuity.batch_interval_secs, 1),
            max_log_size_kb=max(continuity.max_log_size_kb, 1),
            retained_logs=max(continuity.retained_logs, 1),
        )


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    feature: str
    action: str
    evidence: Sequence[str] = field(default_factory=tuple)
    next_state: str = ""

    def render(self) -> str:
        evidence = ", ".join(self.evidence) if self.evidence else "-"
        return (
            f"- timestamp: {self.timestamp} | feature: {self.feature} | "
            f"action: {self.action} | evidence: {evidence} | next_state: {self.next_state}"
        )


class ContinuityLogger:
    """Buffered writer for the progress log.

    Milestones are always written immediately. Progress entries are recorded
    only in ``all`` sampling mode and are flushed once the batch interval has
    elapsed since the previous flush.
    """

    def __init__(
        self,
        root: Path,
        config: Optional["HarnessConfig"] = None,
        *,
        clock: Clock = _utc_now,
    ) -> None:
        self.settings = ContinuitySettings.resolve(root, config)
        self._clock = clock
        self._pending: List[LogEntry] = []
        self._last_flush = clock()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def record_milestone(
        self,
        feature: str,
        action: str,
        evidence: Sequence[str] = (),
        next_state: str = "",
    ) -> None:
        self._push(feature, action, evidence, next_state)
        self.flush()

    def record_progress(
        self,
        feature: str,
        action: str,
        evidence: Sequence[str] = (),
        next_state: str = "",
    ) -> None:
        if self.settings.sampling is not LogSampling.ALL:
            return
        self._push(feature, action, evidence, next_state)
        elapsed = (self._clock() - self._last_flush).total_seconds()
        if elapsed >= self.settings.batch_interval_secs:
            self.flush()

    def flush(self) -> None:
        if not self._pending:
            return
        path = self.settings.progress_file
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            for entry in self._pending:
                handle.write(entry.render() + "\n")
        logger.debug("Flushed %d continuity entries to %s", len(self._pending), path)
        self._pending.clear()
        self._last_flush = self._clock()
        self._rotate_if_needed()

    def _push(self, feature: str, action: str, evidence: Sequence[str], next_state: str) -> None:
        self._pending.append(
            LogEntry(
                timestamp=self._clock().isoformat(),
                feature=feature,
                action=action,
                evidence=tuple(evidence),
                next_state=next_state,
            )
        )

    def _rotate_if_needed(self) -> None:
        path = self.settings.progress_file
        if not path.exists() or path.stat().st_size <= self.settings.max_log_size_kb * 1024:
            return
        stamp = self._clock().strftime("%Y%m%dT%H%M%S%f")
        suffix = path.suffix or ".md"
        rotated = path.with_name(f"{path.stem}-{stamp}{suffix}")
        counter = 1
        while rotated.exists():
            rotated = path.with_name(f"{path.stem}-{stamp}-{counter}{suffix}")
            counter += 1
        path.rename(rotated)
        path.write_text("", encoding="utf-8")
        logger.info("Rotated continuity log to %s", rotated.name)
        self._prune_rotated()

    def rotated_logs(self) -> List[Path]:
        path = self.settings.progress_file
        suffix = path.suffix or ".md"
        prefix = f"{path.stem}-"
        return sorted(
            candidate
            for candidate in path.parent.iterdir()
            if candidate.is_file()
            and candidate.name.startswith(prefix)
            and candidate.name.endswith(suffix)
        )

    def _prune_rotated(self) -> None:
        rotated = self.rotated_logs()
        excess = len(rotated) - self.settings.retained_logs
        for stale in rotated[: max(excess, 0)]:
            stale.unlink()
            logger.debug("Pruned rotated continuity log %s", stale.name)


__all__ = ["ContinuityLogger", "ContinuitySettings", "LogEntry"]
