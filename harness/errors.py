"""Exception types raised by harness components."""

from __future__ import annotations


class HarnessError(RuntimeError):
    """Base class for failures surfaced to the CLI as runtime errors."""


class ConfigError(HarnessError):
    """Raised when configuration is malformed or semantically invalid."""


class ForbiddenToolAccessError(HarnessError):
    """Raised when a planned command matches the forbidden command policy."""

    def __init__(self, command: str) -> None:
        super().__init__(f"forbidden tool access attempt: {command}")
        self.command = command


class LoopDetectedError(HarnessError):
    """Raised when a planned edit count reaches the loop guard threshold."""

    def __init__(self, edits: int, threshold: int) -> None:
        super().__init__(
            f"loop guard triggered: {edits} planned changes reach the threshold of {threshold}"
        )
        self.edits = edits
        self.threshold = threshold


class PathNotFoundError(HarnessError):
    """Raised when a target path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"path does not exist: {path}")
        self.path = path


class NotGitRepoError(HarnessError):
    """Raised when a command requires a git repository."""

    def __init__(self, path: str) -> None:
        super().__init__(f"not a git repository: {path}")
        self.path = path


class DirtyWorktreeError(HarnessError):
    """Raised when apply runs against uncommitted changes."""


class PlanError(HarnessError):
    """Raised for unusable suggest plans (bad path, version mismatch, bad payload)."""


class BenchCompareError(HarnessError):
    """Raised when two bench reports were captured in incompatible contexts."""


__all__ = [
    "BenchCompareError",
    "ConfigError",
    "DirtyWorktreeError",
    "ForbiddenToolAccessError",
    "HarnessError",
    "LoopDetectedError",
    "NotGitRepoError",
    "PathNotFoundError",
    "PlanError",
]
