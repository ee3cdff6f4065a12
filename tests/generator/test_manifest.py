"""Tests for suggest plan files."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from harness import __version__
from harness.errors import PlanError
from harness.generator.manifest import SuggestPlan, load_plan, write_plan

NOW = datetime(2026, 4, 5, 6, 7, 8, tzinfo=UTC)


def test_write_plan_round_trip(tmp_path: Path) -> None:
    plan = SuggestPlan.new(["rec.context.index", "rec.repo.scale"], now=NOW)

    path = write_plan(tmp_path, plan, now=NOW)

    assert path == tmp_path / ".harness/plans/plan-20260405T060708Z.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == {
        "version": __version__,
        "generated_at": NOW.isoformat(),
        "recommendations": ["rec.context.index", "rec.repo.scale"],
    }
    assert load_plan(path) == plan


@pytest.mark.parametrize(
    "payload",
    [
        "[]",
        '{"recommendations": []}',
        '{"version": "0.1.0", "recommendations": "rec.x"}',
        '{"version": "0.1.0", "recommendations": [1]}',
        "{not json",
    ],
)
def test_load_plan_rejects_bad_payloads(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "plan.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(PlanError):
        load_plan(path)
