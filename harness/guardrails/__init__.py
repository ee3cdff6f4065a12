"""Guardrails evaluated before any destructive action."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from ..errors import ForbiddenToolAccessError, LoopDetectedError
from ..logging import get_logger
from .command_policy import CommandPolicy, find_forbidden, is_forbidden
from .loop_guard import DEFAULT_EDIT_THRESHOLD, detect_loop

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

logger = get_logger("guardrails")


def validate(
    commands: Iterable[str],
    planned_edits: int,
    config: Optional["HarnessConfig"] = None,
    *,
    threshold: int | None = None,
) -> None:
    """Fail closed on forbidden commands, then on runaway edit counts.

    The policy is built from ``config`` (defaults when None). ``threshold``
    falls back to ``workflow.max_planned_edits`` and then to the default.
    """
    policy = CommandPolicy.from_config(config)
    forbidden = find_forbidden(commands, policy)
    if forbidden is not None:
        logger.warning("Blocked forbidden command: %s", forbidden)
        raise ForbiddenToolAccessError(forbidden)

    if threshold is None:
        threshold = config.workflow.max_planned_edits if config is not None else DEFAULT_EDIT_THRESHOLD
    if detect_loop(planned_edits, threshold):
        logger.warning("Loop guard tripped at %d planned edits (threshold %d)", planned_edits, threshold)
        raise LoopDetectedError(planned_edits, threshold)


__all__ = [
    "CommandPolicy",
    "DEFAULT_EDIT_THRESHOLD",
    "detect_loop",
    "find_forbidden",
    "is_forbidden",
    "validate",
]
