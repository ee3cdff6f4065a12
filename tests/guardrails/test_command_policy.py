"""Tests for forbidden-command matching and alias expansion."""

from __future__ import annotations

import pytest

from harness.config import parse_config
from harness.guardrails.command_policy import (
    DEFAULT_FORBIDDEN,
    CommandPolicy,
    command_matches,
    expand_aliases,
    find_alias_cycle,
    find_forbidden,
    is_forbidden,
    normalize,
)


@pytest.mark.parametrize(
    "command",
    [
        "git push --force",
        "git push --force origin main",
        "  rm   -rf   build/ ",
        "sudo rm -rf /",
        "git reset --hard HEAD~1",
    ],
)
def test_default_rules_block_destructive_commands(command: str) -> None:
    assert is_forbidden(command) is True


@pytest.mark.parametrize("command", ["git status", "rm file.txt", "ls -la", "git push origin"])
def test_default_rules_allow_ordinary_commands(command: str) -> None:
    assert is_forbidden(command) is False


def test_empty_and_whitespace_commands_are_allowed() -> None:
    assert is_forbidden("") is False
    assert is_forbidden("   ") is False


def test_prefix_matching_is_bidirectional() -> None:
    assert command_matches("git push", "git push --force") is True
    assert command_matches("git push --force --tags", "git push --force") is True
    assert command_matches("git pull", "git push --force") is False
    assert command_matches("", "rm -rf") is False


def test_normalize_collapses_whitespace() -> None:
    assert normalize("  git \t status\n") == "git status"


def test_alias_expansion_reaches_forbidden_command() -> None:
    policy = CommandPolicy(aliases={"gpf": "git push --force"})

    assert expand_aliases("gpf origin", policy.aliases) == "git push --force origin"
    assert is_forbidden("gpf origin", policy) is True


def test_chained_aliases_expand_transitively() -> None:
    aliases = {"nuke": "wipe -rf", "wipe": "rm"}

    assert expand_aliases("nuke tmp", aliases) == "rm -rf tmp"
    assert is_forbidden("nuke tmp", CommandPolicy(aliases=aliases)) is True


def test_alias_cycles_terminate() -> None:
    aliases = {"a": "b x", "b": "a y"}

    expanded = expand_aliases("a", aliases)

    assert expanded.split(" ")[0] in {"a", "b"}
    assert is_forbidden("a", CommandPolicy(aliases=aliases)) is False


def test_self_alias_expands_once() -> None:
    assert expand_aliases("ls", {"ls": "ls -la"}) == "ls -la"


def test_policy_from_config_adds_forbidden_and_disabled() -> None:
    config = parse_config(
        {
            "project": {"name": "x"},
            "tools": {
                "baseline": {"forbidden": ["docker  system prune", "rm -rf"]},
                "deprecated": {"disabled": ["curl"]},
                "aliases": {"dsp": "docker system prune -a"},
            },
        }
    )

    policy = CommandPolicy.from_config(config)

    assert policy.forbidden[: len(DEFAULT_FORBIDDEN)] == DEFAULT_FORBIDDEN
    assert policy.forbidden.count("rm -rf") == 1
    assert "docker system prune" in policy.forbidden
    assert is_forbidden("curl https://example.com", policy) is True
    assert is_forbidden("dsp", policy) is True
    assert CommandPolicy.from_config(None) == CommandPolicy()


def test_find_forbidden_returns_first_match() -> None:
    commands = ["git status", "rm -rf build", "git push --force"]

    assert find_forbidden(commands) == "rm -rf build"
    assert find_forbidden(["git status"]) is None


def test_find_alias_cycle() -> None:
    assert find_alias_cycle({"a": "b", "b": "c", "c": "a"}) == ["a", "b", "c", "a"]
    assert find_alias_cycle({"a": "b", "b": "c"}) == []
    assert find_alias_cycle({"ls": "ls -la"}) == []
