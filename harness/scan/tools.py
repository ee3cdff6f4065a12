"""Tool inventory signals derived from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..models import ToolSignals

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

DEFAULT_TOOL_NAMES = ("bash", "ls", "find", "cat", "rg", "git")

OVERLAP_CLUSTERS: Sequence[frozenset[str]] = (
    frozenset({"grep", "rg", "ag", "ack"}),
    frozenset({"find", "fd"}),
)

DESTRUCTIVE_TOOLS = frozenset({"sudo", "mkfs", "fdisk", "rm", "shutdown"})


def detect_tools(config: Optional["HarnessConfig"]) -> ToolSignals:
    names = _collect_config_tools(config) if config is not None else []
    if not names:
        names = list(DEFAULT_TOOL_NAMES)
    names = sorted(name.strip().lower() for name in names if name.strip())

    unique = set(names)
    return ToolSignals(
        tool_names=tuple(names),
        risky_overlap_clusters=sum(1 for cluster in OVERLAP_CLUSTERS if len(cluster & unique) > 1),
        unrestricted_destructive=sum(1 for name in names if name in DESTRUCTIVE_TOOLS),
        has_ambiguous_duplicates=len(unique) != len(names),
    )


def _collect_config_tools(config: "HarnessConfig") -> List[str]:
    baseline = config.tools.baseline
    return [*baseline.read, *baseline.write, *config.tools.extra]


__all__ = ["DEFAULT_TOOL_NAMES", "DESTRUCTIVE_TOOLS", "OVERLAP_CLUSTERS", "detect_tools"]
