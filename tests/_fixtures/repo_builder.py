"""Helper utilities for constructing temporary repositories in tests."""

from __future__ import annotations

import textwrap
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from harness.config import HarnessConfig
from harness.models import RepoModel
from harness.scan import discover
from harness.scan.git_meta import GitError, GitMeta

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class FakeGitRunner:
    """Stand-in for the git subprocess runner used by GitMeta."""

    def __init__(
        self,
        *,
        commit_times: Optional[Mapping[str, int]] = None,
        status: str = "",
        head: str = "abc123",
        fail: bool = False,
    ) -> None:
        self.commit_times: Dict[str, int] = dict(commit_times or {})
        self.status = status
        self.head = head
        self.fail = fail
        self.calls: List[List[str]] = []

    def __call__(self, args, *, cwd):  # type: ignore[no-untyped-def]
        args = list(args)
        self.calls.append(args)
        if self.fail:
            raise GitError("fatal: not a git repository")
        if "log" in args:
            stamp = self.commit_times.get(args[-1])
            return f"{stamp}\n" if stamp is not None else ""
        if args[1:3] == ["status", "--porcelain"]:
            return self.status
        if args[1:] == ["rev-parse", "HEAD"]:
            return f"{self.head}\n"
        raise GitError(f"unexpected git call: {args}")

    def meta(self) -> GitMeta:
        return GitMeta(runner=self)


class RepoBuilder:
    """Utility for writing files into a throwaway repository and rescanning it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the repository."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def init_git(self) -> Path:
        """Create a bare `.git` marker so CLI repository checks pass."""
        marker = self.root / ".git"
        marker.mkdir(exist_ok=True)
        return marker

    def discover(
        self,
        config: Optional[HarnessConfig] = None,
        *,
        git: Optional[FakeGitRunner] = None,
        now: datetime = FIXED_NOW,
    ) -> RepoModel:
        """Return a fresh model of the repository contents without touching real git."""
        runner = git or FakeGitRunner()
        return discover(self.root, config, now=now, git=runner.meta())

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


__all__ = ["FIXED_NOW", "FakeGitRunner", "RepoBuilder"]
