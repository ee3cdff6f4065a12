"""Recommendation candidates and their deterministic priority order."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from ..models import Effort, Impact, Recommendation, RepoModel, Risk

SMALL_REPO_FILE_COUNT = 20

_IMPACT_RANK = {Impact.HIGH: 0, Impact.MEDIUM: 1, Impact.LOW: 2}
_EFFORT_RANK = {Effort.XS: 0, Effort.S: 1, Effort.M: 2, Effort.L: 3}


def priority_key(recommendation: Recommendation) -> Tuple[int, int, str]:
    """Impact descending, then effort ascending, then id ascending."""
    return (
        _IMPACT_RANK[recommendation.impact],
        _EFFORT_RANK[recommendation.effort],
        recommendation.id,
    )


def rank_recommendations(recommendations: Iterable[Recommendation]) -> List[Recommendation]:
    return sorted(recommendations, key=priority_key)


def candidate_recommendations(model: RepoModel) -> List[Recommendation]:
    candidates = [
        Recommendation(
            id="rec.context.index",
            title="Add Context Index",
            summary="Create docs/context/INDEX.md and link it from AGENTS.md.",
            impact=Impact.HIGH,
            effort=Effort.S,
            risk=Risk.SAFE,
            confidence=0.92,
        ),
        Recommendation(
            id="rec.verification.gate",
            title="Enable Verification Gate",
            summary="Set pre_completion_required and provide required verification commands.",
            impact=Impact.HIGH,
            effort=Effort.S,
            risk=Risk.MEDIUM,
            confidence=0.88,
        ),
        Recommendation(
            id="rec.tools.prune",
            title="Prune Redundant Tools",
            summary="Reduce overlap in grep/find-style tool clusters and remove risky commands.",
            impact=Impact.MEDIUM,
            effort=Effort.M,
            risk=Risk.MEDIUM,
            confidence=0.84,
        ),
    ]
    if model.file_count < SMALL_REPO_FILE_COUNT:
        candidates.append(
            Recommendation(
                id="rec.repo.scale",
                title="Document Repository Scale",
                summary="Add lightweight architecture notes to support agent understanding in small repos.",
                impact=Impact.LOW,
                effort=Effort.XS,
                risk=Risk.SAFE,
                confidence=0.60,
            )
        )
    return candidates


__all__ = [
    "SMALL_REPO_FILE_COUNT",
    "candidate_recommendations",
    "priority_key",
    "rank_recommendations",
]
