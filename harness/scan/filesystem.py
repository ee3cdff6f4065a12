"""Filesystem helpers for repository scanning."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, List, Optional

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    ".idea",
    "target",
}


def iter_files(root: Path) -> Iterator[Path]:
    """Yield every file below ``root``, skipping VCS and tool cache directories."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            yield current_dir / filename


def list_files(root: Path) -> List[Path]:
    return list(iter_files(root))


def relative_posix(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def read_text_if_exists(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


__all__ = ["iter_files", "list_files", "read_text_if_exists", "relative_posix"]
