"""Tests for repository discovery."""

from __future__ import annotations

from harness.config import parse_config
from tests._fixtures.repo_builder import RepoBuilder


def test_discover_counts_files_and_skips_vcs(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/app.py": "print('x')\n",
            "node_modules/pkg/index.js": "module.exports = 1\n",
            ".git/HEAD": "ref: refs/heads/main\n",
        }
    )

    model = repo_builder.discover()

    assert model.file_count == 1
    assert model.root == repo_builder.path()


def test_continuity_signals_default_paths(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".harness/initializer.prompt.md": "init\n",
            ".harness/progress.md": "- nothing yet\n",
        }
    )

    continuity = repo_builder.discover().continuity

    assert continuity.has_initializer_prompt is True
    assert continuity.has_coding_prompt is False
    assert continuity.has_progress_file is True
    assert continuity.has_feature_state_file is False
    assert continuity.has_progress_summary is False


def test_continuity_signals_follow_configured_paths(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"notes/log.md": "Summary: all good\n", "state/features.json": "{}\n"})
    config = parse_config(
        {
            "project": {"name": "x"},
            "continuity": {
                "progress_file": "notes/log.md",
                "feature_state_file": "state/features.json",
            },
        }
    )

    continuity = repo_builder.discover(config).continuity

    assert continuity.has_progress_file is True
    assert continuity.has_progress_summary is True
    assert continuity.has_feature_state_file is True


def test_quality_signals_detect_ci_tests_and_lint(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".gitlab-ci.yml": "stages: [test]\n",
            "pkg/widget_test.go": "package pkg\n",
            "pyproject.toml": "[tool.ruff]\nline-length = 100\n",
        }
    )

    quality = repo_builder.discover().quality

    assert quality.has_ci_workflow is True
    assert quality.has_tests is True
    assert quality.has_lint_config is True


def test_quality_signals_absent(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"pyproject.toml": "[project]\nname = 'x'\n", "main.py": "pass\n"})

    quality = repo_builder.discover().quality

    assert quality.has_ci_workflow is False
    assert quality.has_tests is False
    assert quality.has_lint_config is False


def test_unreadable_pyproject_is_ignored(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"pyproject.toml": "[tool.ruff\n"})

    assert repo_builder.discover().quality.has_lint_config is False
