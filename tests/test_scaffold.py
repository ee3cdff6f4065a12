"""Tests for init scaffolding."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from harness.config import parse_config
from harness.errors import ConfigError
from harness.scaffold import config_template, plan_scaffold, write_scaffold


@pytest.mark.parametrize("profile", ["general", "agent"])
def test_config_template_is_valid_configuration(profile: str) -> None:
    config = parse_config(yaml.safe_load(config_template(profile)))

    config.validate()
    assert config.project.profile == profile
    assert config.verification is not None
    assert config.verification.pre_completion_required is True


def test_unknown_profile_is_rejected() -> None:
    with pytest.raises(ConfigError):
        config_template("robot")


def test_plan_lists_three_files() -> None:
    assert [item.relative_path for item in plan_scaffold()] == [
        "harness.yml",
        "AGENTS.md",
        "docs/context/INDEX.md",
    ]


def test_write_scaffold_respects_overwrite(tmp_path: Path) -> None:
    (tmp_path / "AGENTS.md").write_text("# Mine\n", encoding="utf-8")

    written = write_scaffold(tmp_path, plan_scaffold(), overwrite=False)

    assert tmp_path / "AGENTS.md" not in written
    assert (tmp_path / "AGENTS.md").read_text(encoding="utf-8") == "# Mine\n"
    assert (tmp_path / "docs/context/INDEX.md").exists()
    assert len(written) == 2
