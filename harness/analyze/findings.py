"""Finding generator: independent predicates over signals and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from ..config import DEFAULT_CONFIG_FILE
from ..models import Finding, RepoModel
from ..scan.docs import AGENTS_FILE, CONTEXT_INDEX_FILE

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import HarnessConfig

VERIFICATION_BLOCKING_THRESHOLD = 0.5


def generate_findings(
    model: RepoModel,
    config: Optional["HarnessConfig"],
    verification: float,
) -> List[Finding]:
    """Return one finding per detected issue; order carries no meaning."""
    findings: List[Finding] = []

    if not model.docs.has_agents_md:
        findings.append(
            Finding(
                id="context.missing_agents",
                title="Missing AGENTS.md",
                body="Repository is missing AGENTS.md; agent legibility is reduced.",
                file=AGENTS_FILE,
            )
        )
    if not model.docs.has_context_index:
        findings.append(
            Finding(
                id="context.missing_index",
                title="Missing docs context index",
                body=f"{CONTEXT_INDEX_FILE} is missing, reducing navigability for agents.",
                file=CONTEXT_INDEX_FILE,
            )
        )
    if model.tools.unrestricted_destructive > 0:
        findings.append(
            Finding(
                id="tools.destructive_exposed",
                title="Potentially destructive tools exposed",
                body="Detected unrestricted destructive commands in tool inventory.",
                blocking=True,
                file=DEFAULT_CONFIG_FILE,
            )
        )

    if config is not None:
        findings.extend(_deprecation_findings(config))

    if config is None:
        findings.append(
            Finding(
                id="verification.missing_config",
                title="Verification policy unavailable",
                body=(
                    "Verification checks cannot be evaluated because "
                    f"{DEFAULT_CONFIG_FILE} is missing."
                ),
                file=DEFAULT_CONFIG_FILE,
            )
        )
    elif verification < VERIFICATION_BLOCKING_THRESHOLD:
        findings.append(
            Finding(
                id="verification.incomplete",
                title="Verification policy incomplete",
                body="Verification requirements are incomplete or missing pre-completion checks.",
                blocking=True,
                file=DEFAULT_CONFIG_FILE,
            )
        )

    return findings


def _deprecation_findings(config: "HarnessConfig") -> List[Finding]:
    lists = config.tools.deprecated
    findings: List[Finding] = []
    if lists.observe:
        findings.append(
            Finding(
                id="tools.observe",
                title="Observed tools scheduled for deprecation",
                body=f"Observed tools are still allowed but tracked: {', '.join(lists.observe)}.",
                file=DEFAULT_CONFIG_FILE,
            )
        )
    if lists.deprecated:
        findings.append(
            Finding(
                id="tools.deprecated",
                title="Deprecated tools still enabled",
                body=(
                    "Deprecated tools should be migrated off active workflows: "
                    f"{', '.join(lists.deprecated)}."
                ),
                blocking=True,
                file=DEFAULT_CONFIG_FILE,
            )
        )
    if lists.disabled:
        findings.append(
            Finding(
                id="tools.disabled",
                title="Disabled tools are configured",
                body=(
                    "Disabled tools are forbidden on apply and must not be used: "
                    f"{', '.join(lists.disabled)}."
                ),
                blocking=True,
                file=DEFAULT_CONFIG_FILE,
            )
        )
    return findings


__all__ = ["VERIFICATION_BLOCKING_THRESHOLD", "generate_findings"]
