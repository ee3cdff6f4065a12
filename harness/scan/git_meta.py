"""Git metadata lookups used by the scanner, writer and bench."""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ..logging import get_logger

logger = get_logger("scan.git")

_SECONDS_PER_DAY = 86_400


class GitError(RuntimeError):
    """Raised by a git runner when the command exits unsuccessfully."""


class GitMeta:
    """Thin wrapper over ``git`` with an injectable runner for tests."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    def last_commit_unix(self, root: Path, relative_path: str) -> Optional[int]:
        """Return the commit time of the last change to ``relative_path``."""
        try:
            output = self._runner(
                ["git", "-C", str(root), "log", "-1", "--format=%ct", "--", relative_path],
                cwd=root,
            )
        except (GitError, OSError) as exc:
            logger.debug("git log failed for %s: %s", relative_path, exc)
            return None
        try:
            return int(output.strip())
        except ValueError:
            return None

    def doc_age_days(self, root: Path, tracked_paths: Sequence[str], now: datetime) -> Optional[int]:
        """Days since the most recently committed of ``tracked_paths``; None when untracked."""
        stamps = [
            stamp
            for stamp in (self.last_commit_unix(root, path) for path in tracked_paths)
            if stamp is not None
        ]
        if not stamps:
            return None
        elapsed = int(now.timestamp()) - max(stamps)
        return max(elapsed, 0) // _SECONDS_PER_DAY

    def head_ref(self, root: Path) -> str:
        try:
            return self._runner(["git", "rev-parse", "HEAD"], cwd=root).strip() or "unknown"
        except (GitError, OSError):
            return "unknown"

    def status_porcelain(self, root: Path) -> str:
        """Return ``git status --porcelain`` output; raises GitError outside a repository."""
        return self._runner(["git", "status", "--porcelain"], cwd=root)

    def is_dirty(self, root: Path) -> bool:
        try:
            return bool(self.status_porcelain(root).strip())
        except (GitError, OSError):
            return True

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=False,
            text=True,
            capture_output=True,
        )
        if completed.returncode != 0:
            raise GitError(completed.stderr.strip() or f"git exited with {completed.returncode}")
        return completed.stdout


__all__ = ["GitError", "GitMeta"]
