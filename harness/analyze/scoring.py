"""Category scorers: fixed bonuses and penalties over signals, clamped to [0, 1]."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from ..models import RepoModel, ScoreCard, clamp_unit

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

FRESH_DOCS_DAYS = 90
TOOL_COUNT_LIMIT = 12


def context_score(model: RepoModel) -> float:
    docs = model.docs
    score = 0.0
    if docs.has_agents_md and docs.agents_has_section_header:
        score += 0.35
    if docs.has_context_index:
        score += 0.20
    if docs.has_architecture_doc:
        score += 0.15
    if docs.readme_links_architecture:
        score += 0.10
    if docs.docs_age_days is not None and docs.docs_age_days < FRESH_DOCS_DAYS:
        score += 0.20
    return clamp_unit(score)


def tools_score(model: RepoModel) -> float:
    tools = model.tools
    score = 1.0
    if len(tools.tool_names) > TOOL_COUNT_LIMIT:
        score -= 0.10
    score -= tools.risky_overlap_clusters * 0.05
    score -= tools.unrestricted_destructive * 0.20
    if tools.has_ambiguous_duplicates:
        score -= 0.15
    return clamp_unit(score)


def continuity_score(model: RepoModel) -> float:
    continuity = model.continuity
    score = 0.0
    if continuity.has_initializer_prompt and continuity.has_coding_prompt:
        score += 0.40
    if continuity.has_progress_file:
        score += 0.25
    if continuity.has_feature_state_file:
        score += 0.20
    if continuity.has_progress_summary:
        score += 0.15
    return clamp_unit(score)


def verification_score(config: Optional["HarnessConfig"]) -> float:
    """Score the verification policy; no configuration means nothing is verified."""
    verification = config.verification if config is not None else None
    if verification is None:
        return 0.0
    score = 0.0
    if verification.required:
        score += 0.50
    if verification.pre_completion_required:
        score += 0.30
    if verification.loop_guard_enabled:
        score += 0.20
    return clamp_unit(score)


def repository_quality_score(model: RepoModel) -> float:
    quality = model.quality
    score = 0.0
    if quality.has_ci_workflow:
        score += 0.40
    if quality.has_tests:
        score += 0.30
    if quality.has_lint_config:
        score += 0.30
    return clamp_unit(score)


def score_repository(
    model: RepoModel,
    config: Optional["HarnessConfig"],
    weights: Sequence[float],
) -> ScoreCard:
    """Compute all five categories and finalize them with ``weights``."""
    return ScoreCard.create(
        context=context_score(model),
        tools=tools_score(model),
        continuity=continuity_score(model),
        verification=verification_score(config),
        repository_quality=repository_quality_score(model),
    ).finalize(weights)


__all__ = [
    "context_score",
    "continuity_score",
    "repository_quality_score",
    "score_repository",
    "tools_score",
    "verification_score",
]
