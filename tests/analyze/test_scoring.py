"""Tests for the category scorers."""

from __future__ import annotations

from pathlib import Path

import pytest

from harness.analyze.scoring import (
    context_score,
    continuity_score,
    repository_quality_score,
    score_repository,
    tools_score,
    verification_score,
)
from harness.config import parse_config
from harness.models import (
    ContinuitySignals,
    DocSignals,
    QualitySignals,
    RepoModel,
    ToolSignals,
)


def _model(**signals) -> RepoModel:  # type: ignore[no-untyped-def]
    return RepoModel(root=Path("."), file_count=30, **signals)


def test_context_score_full_marks() -> None:
    docs = DocSignals(
        has_agents_md=True,
        agents_has_section_header=True,
        has_context_index=True,
        has_architecture_doc=True,
        readme_links_architecture=True,
        docs_age_days=3,
    )

    assert context_score(_model(docs=docs)) == pytest.approx(1.0)


def test_context_score_requires_header_and_fresh_docs() -> None:
    docs = DocSignals(
        has_agents_md=True,
        agents_has_section_header=False,
        has_context_index=True,
        docs_age_days=90,
    )

    assert context_score(_model(docs=docs)) == pytest.approx(0.20)


def test_tools_score_penalties_stack_and_clamp() -> None:
    tools = ToolSignals(
        tool_names=tuple(f"tool{i}" for i in range(13)),
        risky_overlap_clusters=2,
        unrestricted_destructive=1,
        has_ambiguous_duplicates=True,
    )

    assert tools_score(_model(tools=tools)) == pytest.approx(1.0 - 0.10 - 0.10 - 0.20 - 0.15)

    worst = ToolSignals(tool_names=("rm",), unrestricted_destructive=9)
    assert tools_score(_model(tools=worst)) == 0.0


def test_tools_score_default_is_one() -> None:
    assert tools_score(_model(tools=ToolSignals(tool_names=("git", "rg")))) == 1.0


def test_continuity_score_partial() -> None:
    continuity = ContinuitySignals(has_initializer_prompt=True, has_progress_file=True)

    assert continuity_score(_model(continuity=continuity)) == pytest.approx(0.25)


def test_verification_score_without_config_is_zero() -> None:
    assert verification_score(None) == 0.0
    assert verification_score(parse_config({"project": {"name": "x"}})) == 0.0


def test_verification_score_counts_each_policy() -> None:
    config = parse_config(
        {
            "project": {"name": "x"},
            "verification": {"required": ["pytest"], "loop_guard_enabled": True},
        }
    )

    assert verification_score(config) == pytest.approx(0.70)


def test_repository_quality_score() -> None:
    quality = QualitySignals(has_ci_workflow=True, has_lint_config=True)

    assert repository_quality_score(_model(quality=quality)) == pytest.approx(0.70)


def test_score_repository_is_bounded_for_empty_model() -> None:
    card = score_repository(_model(), None, (0.30, 0.25, 0.20, 0.15, 0.10))

    assert card.tools == 1.0
    assert card.overall == pytest.approx(0.25)
    assert all(0.0 <= value <= 1.0 for value in card.categories())
