"""Plan export and guarded application of safe recommendations."""

from .manifest import SuggestPlan, load_plan, write_plan
from .writer import (
    ApplyMode,
    ApplyResult,
    ChangeAction,
    PlannedChange,
    build_changes,
    check_clean_tree,
    execute_apply,
    validate_plan_path,
)

__all__ = [
    "ApplyMode",
    "ApplyResult",
    "ChangeAction",
    "PlannedChange",
    "SuggestPlan",
    "build_changes",
    "check_clean_tree",
    "execute_apply",
    "load_plan",
    "validate_plan_path",
    "write_plan",
]
