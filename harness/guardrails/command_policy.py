"""Forbidden-command matching with alias resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

DEFAULT_FORBIDDEN: Tuple[str, ...] = (
    "git push --force",
    "git reset --hard",
    "rm -rf",
    "sudo rm -rf",
)

MAX_ALIAS_EXPANSIONS = 8


@dataclass(frozen=True)
class CommandPolicy:
    """Forbidden token sequences plus an alias table, read-only per match."""

    forbidden: Tuple[str, ...] = DEFAULT_FORBIDDEN
    aliases: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Optional["HarnessConfig"]) -> "CommandPolicy":
        """Extend the default rules with configured forbidden and disabled tools."""
        if config is None:
            return cls()
        rules: List[str] = list(DEFAULT_FORBIDDEN)
        for rule in (*config.tools.baseline.forbidden, *config.tools.deprecated.disabled):
            normalized = normalize(rule)
            if normalized and normalized not in rules:
                rules.append(normalized)
        return cls(forbidden=tuple(rules), aliases=dict(config.tools.aliases))


_DEFAULT_POLICY = CommandPolicy()


def normalize(command: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join(command.split())


def expand_aliases(command: str, aliases: Mapping[str, str]) -> str:
    """Repeatedly replace the head token with its alias expansion.

    Stops after MAX_ALIAS_EXPANSIONS rounds, when the head has no alias, or
    when a head token comes back around.
    """
    current = normalize(command)
    seen: set[str] = set()
    for _ in range(MAX_ALIAS_EXPANSIONS):
        tokens = current.split(" ")
        head = tokens[0]
        if not head:
            return current
        if head in seen:
            return current
        seen.add(head)
        target = aliases.get(head)
        if target is None:
            return current
        current = normalize(" ".join([target, *tokens[1:]]))
    return current


def _starts_with(tokens: Sequence[str], prefix: Sequence[str]) -> bool:
    return len(tokens) >= len(prefix) and all(a == b for a, b in zip(tokens, prefix))


def command_matches(command: str, rule: str) -> bool:
    """Return True when either token sequence is a prefix of the other."""
    command_tokens = command.split()
    rule_tokens = rule.split()
    if not command_tokens or not rule_tokens:
        return False
    return _starts_with(command_tokens, rule_tokens) or _starts_with(rule_tokens, command_tokens)


def is_forbidden(command: str, policy: CommandPolicy | None = None) -> bool:
    """Decide whether ``command`` is blocked by ``policy`` (the default policy when omitted)."""
    policy = policy or _DEFAULT_POLICY
    expanded = expand_aliases(command, policy.aliases)
    if not expanded:
        return False
    return any(command_matches(expanded, normalize(rule)) for rule in policy.forbidden)


def find_forbidden(commands: Iterable[str], policy: CommandPolicy | None = None) -> Optional[str]:
    """Return the first forbidden command, or None when all are allowed."""
    for command in commands:
        if is_forbidden(command, policy):
            return command
    return None


def find_alias_cycle(aliases: Mapping[str, str]) -> List[str]:
    """Return one alias cycle as a list of head tokens, or an empty list.

    Each alias is an edge from its name to the head token of its expansion.
    Self-references such as ``ls -> ls -la`` are not cycles: expansion stops
    after one round because the head token repeats.
    """
    graph: Dict[str, str] = {}
    for alias, target in aliases.items():
        head = normalize(target).split(" ")[0]
        if head and head != alias:
            graph[alias] = head

    visited: set[str] = set()
    for start in sorted(graph):
        if start in visited:
            continue
        path: List[str] = []
        position: Dict[str, int] = {}
        node: Optional[str] = start
        while node is not None and node in graph and node not in visited:
            if node in position:
                return path[position[node]:] + [node]
            position[node] = len(path)
            path.append(node)
            node = graph[node]
        visited.update(path)
    return []


__all__ = [
    "CommandPolicy",
    "DEFAULT_FORBIDDEN",
    "MAX_ALIAS_EXPANSIONS",
    "command_matches",
    "expand_aliases",
    "find_alias_cycle",
    "find_forbidden",
    "is_forbidden",
    "normalize",
]
