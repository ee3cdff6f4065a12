"""Apply path: turn recommendation ids into file changes, guarded and reversible."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence

from .. import __version__
from ..errors import DirtyWorktreeError, NotGitRepoError, PathNotFoundError, PlanError
from ..guardrails import validate
from ..logging import get_logger
from ..models import Risk
from ..scan.docs import AGENTS_FILE, CONTEXT_INDEX_FILE
from ..scan.git_meta import GitError, GitMeta
from .manifest import STAMP_FORMAT, load_plan

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

logger = get_logger("generator.writer")

ROLLBACK_DIR = ".harness/rollback"
ARCHITECTURE_FILE = "ARCHITECTURE.md"
CLEAN_TREE_COMMAND = "git status --porcelain"
CONTEXT_LINK_LINE = f"- Context index: {CONTEXT_INDEX_FILE}"

CONTEXT_INDEX_TEMPLATE = "# Generated by harness\n# Context Index\n\n- AGENTS.md\n"
AGENTS_TEMPLATE = f"# Generated by harness\n# Agents\n\n{CONTEXT_LINK_LINE}\n"
ARCHITECTURE_TEMPLATE = "# Generated by harness\n# Architecture\n\n## Overview\n\nTBD.\n"


class ChangeAction(Enum):
    CREATE = "create"
    MODIFY = "modify"


class ApplyMode(Enum):
    PREVIEW = "preview"
    APPLY = "apply"


@dataclass(frozen=True)
class PlannedChange:
    path: Path
    action: ChangeAction
    content: str


@dataclass
class ApplyResult:
    changes: List[PlannedChange] = field(default_factory=list)
    written: bool = False
    rollback_manifest: Optional[Path] = None
    cancelled: bool = False


def validate_plan_path(path: str) -> None:
    """Reject plan paths that escape the repository root."""
    candidate = Path(path)
    if candidate.is_absolute():
        raise PlanError(f"absolute plan path rejected: {path}")
    if ".." in candidate.parts:
        raise PlanError(f"path traversal rejected: {path}")


def resolve_plan(
    root: Path,
    *,
    plan_file: Optional[str] = None,
    plan_all: bool = False,
    config: Optional["HarnessConfig"] = None,
    git: Optional[GitMeta] = None,
) -> List[str]:
    """Return the recommendation ids to apply, from a plan file or a fresh analysis."""
    if plan_all:
        from ..analyze import analyze
        from ..scan import discover

        report = analyze(discover(root, config, git=git), config)
        return [rec.id for rec in report.recommendations if rec.risk is Risk.SAFE]

    if not plan_file:
        raise PlanError("missing --plan-file value")
    validate_plan_path(plan_file)
    full_path = root / plan_file
    if not full_path.exists():
        raise PathNotFoundError(str(full_path))
    plan = load_plan(full_path)
    if plan.version != __version__:
        raise PlanError(
            f"plan version mismatch: expected {__version__}, found {plan.version}"
        )
    return plan.recommendations


def _context_index_changes(root: Path) -> List[PlannedChange]:
    changes: List[PlannedChange] = []
    index = root / CONTEXT_INDEX_FILE
    if not index.exists():
        changes.append(PlannedChange(index, ChangeAction.CREATE, CONTEXT_INDEX_TEMPLATE))

    agents = root / AGENTS_FILE
    if not agents.exists():
        changes.append(PlannedChange(agents, ChangeAction.CREATE, AGENTS_TEMPLATE))
        return changes
    existing = agents.read_text(encoding="utf-8")
    if CONTEXT_INDEX_FILE not in existing:
        if not existing.endswith("\n"):
            existing += "\n"
        changes.append(
            PlannedChange(agents, ChangeAction.MODIFY, f"{existing}{CONTEXT_LINK_LINE}\n")
        )
    return changes


def _architecture_changes(root: Path) -> List[PlannedChange]:
    path = root / ARCHITECTURE_FILE
    if path.exists():
        return []
    return [PlannedChange(path, ChangeAction.CREATE, ARCHITECTURE_TEMPLATE)]


_BUILDERS = {
    "rec.context.index": _context_index_changes,
    "rec.repo.scale": _architecture_changes,
}


def build_changes(root: Path, recommendation_ids: Iterable[str]) -> List[PlannedChange]:
    """Map recommendation ids to file changes; unknown and repeated ids add nothing."""
    changes: List[PlannedChange] = []
    seen: set[str] = set()
    for rec_id in recommendation_ids:
        if rec_id in seen:
            continue
        seen.add(rec_id)
        builder = _BUILDERS.get(rec_id)
        if builder is not None:
            changes.extend(builder(root))
    return changes


def check_clean_tree(
    root: Path,
    config: Optional["HarnessConfig"] = None,
    *,
    git: Optional[GitMeta] = None,
) -> None:
    validate([CLEAN_TREE_COMMAND], 0, config)
    git = git or GitMeta()
    try:
        status = git.status_porcelain(root)
    except (GitError, OSError) as exc:
        raise NotGitRepoError(str(root)) from exc
    if status.strip():
        raise DirtyWorktreeError("working tree is dirty; use --allow-dirty to override")


def _sha256_hex(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def create_rollback_manifest(
    root: Path,
    changes: Sequence[PlannedChange],
    *,
    now: Optional[datetime] = None,
) -> Path:
    """Record each target path, action and pre-change digest before anything is written."""
    moment = now or datetime.now(UTC)
    files = []
    for change in changes:
        try:
            relative = change.path.relative_to(root).as_posix()
        except ValueError:
            relative = change.path.as_posix()
        files.append(
            {
                "path": relative,
                "action": change.action.value,
                "sha256": _sha256_hex(change.path) if change.path.exists() else None,
            }
        )
    manifest = {
        "timestamp": moment.isoformat(),
        "harness_version": __version__,
        "files": files,
    }
    target = root / ROLLBACK_DIR / f"{moment.strftime(STAMP_FORMAT)}.json"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return target


def apply_changes(changes: Iterable[PlannedChange]) -> None:
    for change in changes:
        change.path.parent.mkdir(parents=True, exist_ok=True)
        change.path.write_text(change.content, encoding="utf-8")
        logger.info("%s %s", change.action.value, change.path)


def scope_summary(root: Path, changes: Sequence[PlannedChange]) -> List[str]:
    creates = sum(1 for change in changes if change.action is ChangeAction.CREATE)
    modifies = sum(1 for change in changes if change.action is ChangeAction.MODIFY)
    lines = [f"scope: create={creates} modify={modifies} delete=0"]
    for change in changes:
        try:
            display = change.path.relative_to(root).as_posix()
        except ValueError:
            display = str(change.path)
        lines.append(f"{change.action.value}: {display}")
    return lines


def prompt_confirm() -> bool:
    answer = input("Apply these changes? [y/N]: ")
    return answer.strip().lower() in {"y", "yes"}


def execute_apply(
    root: Path,
    *,
    config: Optional["HarnessConfig"] = None,
    plan_file: Optional[str] = None,
    plan_all: bool = False,
    mode: ApplyMode = ApplyMode.PREVIEW,
    allow_dirty: bool = False,
    assume_yes: bool = False,
    git: Optional[GitMeta] = None,
    confirm: Callable[[], bool] = prompt_confirm,
    echo: Callable[[str], None] = print,
    now: Optional[datetime] = None,
) -> ApplyResult:
    """Run the apply workflow end to end.

    Guardrails run before anything is written; preview mode never writes.
    """
    if not allow_dirty:
        check_clean_tree(root, config, git=git)

    ids = resolve_plan(root, plan_file=plan_file, plan_all=plan_all, config=config, git=git)
    changes = build_changes(root, ids)
    validate([], len(changes), config)

    for line in scope_summary(root, changes):
        echo(line)
    result = ApplyResult(changes=changes)
    if not changes:
        echo("no-op: no changes required")
        return result
    if mode is ApplyMode.PREVIEW:
        echo("preview: no files were written")
        return result
    if not assume_yes and not confirm():
        echo("apply cancelled")
        result.cancelled = True
        return result

    result.rollback_manifest = create_rollback_manifest(root, changes, now=now)
    echo(f"rollback manifest: {result.rollback_manifest}")
    apply_changes(changes)
    result.written = True
    echo(f"apply complete: wrote {len(changes)} file(s)")
    return result


__all__ = [
    "ApplyMode",
    "ApplyResult",
    "ChangeAction",
    "PlannedChange",
    "apply_changes",
    "build_changes",
    "check_clean_tree",
    "create_rollback_manifest",
    "execute_apply",
    "resolve_plan",
    "validate_plan_path",
]
