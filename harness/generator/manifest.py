"""Suggest plans: the list of recommendation ids exported for a later apply."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import __version__
from ..errors import PlanError

PLAN_DIR = ".harness/plans"
STAMP_FORMAT = "%Y%m%dT%H%M%SZ"


@dataclass
class SuggestPlan:
    recommendations: List[str] = field(default_factory=list)
    version: str = __version__
    generated_at: str = ""

    @classmethod
    def new(cls, recommendations: List[str], *, now: Optional[datetime] = None) -> "SuggestPlan":
        moment = now or datetime.now(UTC)
        return cls(recommendations=list(recommendations), generated_at=moment.isoformat())

    @classmethod
    def from_dict(cls, payload: Any) -> "SuggestPlan":
        if not isinstance(payload, dict):
            raise PlanError("plan file must contain a JSON object")
        version = payload.get("version")
        recommendations = payload.get("recommendations")
        if not isinstance(version, str):
            raise PlanError("plan file is missing a string 'version'")
        if not isinstance(recommendations, list) or not all(
            isinstance(item, str) for item in recommendations
        ):
            raise PlanError("plan 'recommendations' must be a list of strings")
        generated_at = payload.get("generated_at")
        return cls(
            recommendations=recommendations,
            version=version,
            generated_at=generated_at if isinstance(generated_at, str) else "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "generated_at": self.generated_at,
            "recommendations": list(self.recommendations),
        }


def write_plan(root: Path, plan: SuggestPlan, *, now: Optional[datetime] = None) -> Path:
    """Write ``plan`` as pretty JSON under ``.harness/plans`` and return its path."""
    stamp = (now or datetime.now(UTC)).strftime(STAMP_FORMAT)
    target = root / PLAN_DIR / f"plan-{stamp}.json"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(plan.to_dict(), indent=2), encoding="utf-8")
    return target


def load_plan(path: Path) -> SuggestPlan:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PlanError(f"plan file {path} is not valid JSON: {exc}") from exc
    return SuggestPlan.from_dict(payload)


__all__ = ["PLAN_DIR", "SuggestPlan", "load_plan", "write_plan"]
