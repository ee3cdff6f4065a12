"""Repository discovery: turns a working tree into a RepoModel of signals."""

from __future__ import annotations

import tomllib
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..logging import get_logger
from ..models import ContinuitySignals, QualitySignals, RepoModel
from .docs import detect_docs
from .filesystem import list_files, read_text_if_exists, relative_posix
from .git_meta import GitMeta
from .tools import detect_tools

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

logger = get_logger("scan")

DEFAULT_INITIALIZER = ".harness/initializer.prompt.md"
DEFAULT_CODING_PROMPT = ".harness/coding.prompt.md"
DEFAULT_PROGRESS_FILE = ".harness/progress.md"
DEFAULT_FEATURE_STATE = ".harness/feature_list.json"

_TEST_SUFFIXES = ("_test.py", "_test.rs", "_spec.rs", "_test.go", ".test.ts", ".test.js", ".spec.ts")
_TEST_DIRS = ("tests", "test", "__tests__")

_LINT_FILES = (
    "rustfmt.toml",
    ".rustfmt.toml",
    "clippy.toml",
    ".clippy.toml",
    "ruff.toml",
    ".ruff.toml",
    ".flake8",
    ".pylintrc",
    ".pre-commit-config.yaml",
    ".golangci.yml",
    ".eslintrc",
    ".eslintrc.json",
    ".eslintrc.js",
    "eslint.config.js",
)
_PYPROJECT_LINT_TOOLS = ("ruff", "black", "flake8", "pylint", "isort")

_CI_FILES = (".gitlab-ci.yml", ".circleci/config.yml", "azure-pipelines.yml")


def discover(
    root: Path,
    config: Optional["HarnessConfig"] = None,
    *,
    now: datetime | None = None,
    git: GitMeta | None = None,
) -> RepoModel:
    """Scan ``root`` and return every signal the analyzer consumes."""
    now = now or datetime.now(UTC)
    files = list_files(root)
    logger.debug("Scanner discovered %d files under %s", len(files), root)
    relative = [relative_posix(path, root) for path in files]

    return RepoModel(
        root=root,
        file_count=len(files),
        docs=detect_docs(root, now=now, git=git),
        tools=detect_tools(config),
        continuity=detect_continuity(root, config),
        quality=detect_quality(root, relative),
    )


def _configured_path(root: Path, configured: Optional[str], default: str) -> Path:
    candidate = Path(configured or default)
    return candidate if candidate.is_absolute() else root / candidate


def detect_continuity(root: Path, config: Optional["HarnessConfig"]) -> ContinuitySignals:
    settings = config.continuity if config is not None else None
    initializer = _configured_path(root, settings and settings.initializer, DEFAULT_INITIALIZER)
    coding_prompt = _configured_path(root, settings and settings.coding_prompt, DEFAULT_CODING_PROMPT)
    progress_file = _configured_path(root, settings and settings.progress_file, DEFAULT_PROGRESS_FILE)
    feature_state = _configured_path(
        root, settings and settings.feature_state_file, DEFAULT_FEATURE_STATE
    )
    progress_content = read_text_if_exists(progress_file) or ""

    return ContinuitySignals(
        has_initializer_prompt=initializer.exists(),
        has_coding_prompt=coding_prompt.exists(),
        has_progress_file=progress_file.exists(),
        has_feature_state_file=feature_state.exists(),
        has_progress_summary="summary" in progress_content.lower(),
    )


def detect_quality(root: Path, relative_files: Sequence[str]) -> QualitySignals:
    has_ci_workflow = any(path.startswith(".github/workflows/") for path in relative_files) or any(
        (root / name).exists() for name in _CI_FILES
    )
    return QualitySignals(
        has_ci_workflow=has_ci_workflow,
        has_tests=any(_looks_like_test(path) for path in relative_files),
        has_lint_config=_has_lint_config(root),
    )


def _looks_like_test(path: str) -> bool:
    parts = path.split("/")
    name = parts[-1]
    if any(part in _TEST_DIRS for part in parts[:-1]):
        return True
    if name.startswith("test_") and name.endswith(".py"):
        return True
    return name.endswith(_TEST_SUFFIXES)


def _has_lint_config(root: Path) -> bool:
    if any((root / name).exists() for name in _LINT_FILES):
        return True
    return bool(_pyproject_lint_tools(root / "pyproject.toml"))


def _pyproject_lint_tools(path: Path) -> List[str]:
    if not path.exists():
        return []
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return []
    tool = data.get("tool")
    if not isinstance(tool, dict):
        return []
    return [name for name in _PYPROJECT_LINT_TOOLS if name in tool]


__all__ = [
    "DEFAULT_CODING_PROMPT",
    "DEFAULT_FEATURE_STATE",
    "DEFAULT_INITIALIZER",
    "DEFAULT_PROGRESS_FILE",
    "GitMeta",
    "detect_continuity",
    "detect_quality",
    "discover",
]
