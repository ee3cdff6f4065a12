"""Starter files written by ``harness init``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from .config import DEFAULT_CONFIG_FILE, SUPPORTED_PROFILES
from .errors import ConfigError
from .scan.docs import AGENTS_FILE, CONTEXT_INDEX_FILE

_CONFIG_TEMPLATE = """\
project:
  name: harness-project
  profile: {profile}

tools:
  baseline:
    commands: [rg, fd, git]
    forbidden:
      - git push --force
      - git reset --hard
      - rm -rf

verification:
  required:
    - {lint_command}
    - {test_command}
  pre_completion_required: true
  loop_guard_enabled: true
"""

_AGENTS_TEMPLATE = """\
# Generated by harness
# Agents

- Context index: docs/context/INDEX.md
"""

_CONTEXT_INDEX_TEMPLATE = """\
# Generated by harness
# Context Index

- AGENTS.md
- harness.yml
"""


@dataclass(frozen=True)
class ScaffoldFile:
    relative_path: str
    content: str


def config_template(profile: str = "general") -> str:
    if profile not in SUPPORTED_PROFILES:
        raise ConfigError(f"unsupported profile: {profile}")
    if profile == "agent":
        return _CONFIG_TEMPLATE.format(
            profile=profile, lint_command="ruff check .", test_command="pytest -q"
        )
    return _CONFIG_TEMPLATE.format(
        profile=profile, lint_command="make lint", test_command="make test"
    )


def plan_scaffold(profile: str = "general") -> List[ScaffoldFile]:
    return [
        ScaffoldFile(DEFAULT_CONFIG_FILE, config_template(profile)),
        ScaffoldFile(AGENTS_FILE, _AGENTS_TEMPLATE),
        ScaffoldFile(CONTEXT_INDEX_FILE, _CONTEXT_INDEX_TEMPLATE),
    ]


def write_scaffold(
    root: Path,
    files: List[ScaffoldFile],
    *,
    overwrite: bool = True,
) -> List[Path]:
    """Write ``files`` under ``root`` and return the paths actually written."""
    written: List[Path] = []
    for item in files:
        target = root / item.relative_path
        if target.exists() and not overwrite:
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(item.content, encoding="utf-8")
        written.append(target)
    return written


__all__ = ["ScaffoldFile", "config_template", "plan_scaffold", "write_scaffold"]
