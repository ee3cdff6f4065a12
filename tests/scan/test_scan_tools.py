"""Tests for tool inventory signals."""

from __future__ import annotations

from harness.config import parse_config
from harness.scan.tools import DEFAULT_TOOL_NAMES, detect_tools


def _config(**tools):  # type: ignore[no-untyped-def]
    return parse_config({"project": {"name": "x"}, "tools": tools})


def test_defaults_without_config() -> None:
    signals = detect_tools(None)

    assert signals.tool_names == tuple(sorted(DEFAULT_TOOL_NAMES))
    assert signals.risky_overlap_clusters == 0
    assert signals.unrestricted_destructive == 0
    assert signals.has_ambiguous_duplicates is False


def test_empty_config_inventory_falls_back_to_defaults() -> None:
    assert detect_tools(_config()).tool_names == tuple(sorted(DEFAULT_TOOL_NAMES))


def test_overlap_destructive_and_duplicates() -> None:
    signals = detect_tools(
        _config(
            baseline={"read": ["grep", "RG", "find"], "write": ["fd", "rm", "sudo"]},
            specialized={"extra": ["rg"]},
        )
    )

    assert signals.tool_names == ("fd", "find", "grep", "rg", "rg", "rm", "sudo")
    assert signals.risky_overlap_clusters == 2
    assert signals.unrestricted_destructive == 2
    assert signals.has_ambiguous_duplicates is True


def test_baseline_commands_do_not_feed_inventory() -> None:
    signals = detect_tools(_config(baseline={"commands": ["rg", "grep", "rm"]}))

    assert signals.tool_names == tuple(sorted(DEFAULT_TOOL_NAMES))
    assert signals.risky_overlap_clusters == 0
    assert signals.unrestricted_destructive == 0
