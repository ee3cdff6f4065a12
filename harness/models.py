"""Core data models shared across harness components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple


def clamp_unit(value: float) -> float:
    """Clamp ``value`` into the closed interval [0, 1]."""
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, float(value)))


# ----------------------------------------------------------------------
# Repository signals


@dataclass(frozen=True)
class DocSignals:
    """Documentation facts observed in the repository."""

    has_agents_md: bool = False
    agents_has_section_header: bool = False
    has_context_index: bool = False
    has_architecture_doc: bool = False
    readme_links_architecture: bool = False
    docs_age_days: Optional[int] = None


@dataclass(frozen=True)
class ToolSignals:
    """Tool inventory facts derived from configuration."""

    tool_names: Tuple[str, ...] = ()
    risky_overlap_clusters: int = 0
    unrestricted_destructive: int = 0
    has_ambiguous_duplicates: bool = False


@dataclass(frozen=True)
class ContinuitySignals:
    """Presence of continuity artifacts (prompts, progress log, feature state)."""

    has_initializer_prompt: bool = False
    has_coding_prompt: bool = False
    has_progress_file: bool = False
    has_feature_state_file: bool = False
    has_progress_summary: bool = False


@dataclass(frozen=True)
class QualitySignals:
    """General repository hygiene facts."""

    has_ci_workflow: bool = False
    has_tests: bool = False
    has_lint_config: bool = False


@dataclass(frozen=True)
class RepoModel:
    """All signals observed for one repository in one run."""

    root: Path
    file_count: int
    docs: DocSignals = field(default_factory=DocSignals)
    tools: ToolSignals = field(default_factory=ToolSignals)
    continuity: ContinuitySignals = field(default_factory=ContinuitySignals)
    quality: QualitySignals = field(default_factory=QualitySignals)


# ----------------------------------------------------------------------
# Scores


CATEGORY_NAMES: Tuple[str, ...] = (
    "context",
    "tools",
    "continuity",
    "verification",
    "repository_quality",
)


@dataclass(frozen=True)
class ScoreCard:
    """Five category scores plus the weighted overall score, all within [0, 1]."""

    context: float
    tools: float
    continuity: float
    verification: float
    repository_quality: float
    overall: float = 0.0

    @classmethod
    def create(
        cls,
        context: float,
        tools: float,
        continuity: float,
        verification: float,
        repository_quality: float,
    ) -> "ScoreCard":
        return cls(
            context=clamp_unit(context),
            tools=clamp_unit(tools),
            continuity=clamp_unit(continuity),
            verification=clamp_unit(verification),
            repository_quality=clamp_unit(repository_quality),
        )

    def categories(self) -> Tuple[float, ...]:
        return (
            self.context,
            self.tools,
            self.continuity,
            self.verification,
            self.repository_quality,
        )

    def finalize(self, weights: Sequence[float]) -> "ScoreCard":
        """Return a copy whose ``overall`` is the weighted sum of the clamped categories."""
        clamped = [clamp_unit(value) for value in self.categories()]
        overall = sum(value * weight for value, weight in zip(clamped, weights))
        return ScoreCard(*clamped, overall=clamp_unit(overall))

    def to_dict(self) -> Dict[str, float]:
        payload = dict(zip(CATEGORY_NAMES, self.categories()))
        payload["overall"] = self.overall
        return payload


# ----------------------------------------------------------------------
# Findings and recommendations


@dataclass(frozen=True)
class Finding:
    """A concrete issue surfaced by rule evaluation."""

    id: str
    title: str
    body: str
    blocking: bool = False
    file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "blocking": self.blocking,
            "file": self.file,
        }


class Impact(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Effort(Enum):
    XS = "Xs"
    S = "S"
    M = "M"
    L = "L"


class Risk(Enum):
    SAFE = "Safe"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class Recommendation:
    """An actionable suggestion; confidence is clamped to [0, 1] on construction."""

    id: str
    title: str
    summary: str
    impact: Impact
    effort: Effort
    risk: Risk
    confidence: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_unit(self.confidence))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "impact": self.impact.value,
            "effort": self.effort.value,
            "risk": self.risk.value,
            "confidence": self.confidence,
        }


@dataclass
class HarnessReport:
    """Result of one analysis run, consumed by renderers and the apply path."""

    overall_score: float
    category_scores: ScoreCard
    findings: List[Finding] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    @property
    def has_blocking(self) -> bool:
        return any(finding.blocking for finding in self.findings)

    def sort_recommendations(self) -> None:
        from .analyze.recommendations import rank_recommendations

        self.recommendations = rank_recommendations(self.recommendations)

    def safe_recommendations(self) -> List[Recommendation]:
        return [rec for rec in self.recommendations if rec.risk is Risk.SAFE]

    def with_safe_recommendations(self) -> "HarnessReport":
        return replace(self, recommendations=self.safe_recommendations())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "category_scores": self.category_scores.to_dict(),
            "findings": [finding.to_dict() for finding in self.findings],
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }


__all__ = [
    "CATEGORY_NAMES",
    "ContinuitySignals",
    "DocSignals",
    "Effort",
    "Finding",
    "HarnessReport",
    "Impact",
    "QualitySignals",
    "Recommendation",
    "RepoModel",
    "Risk",
    "ScoreCard",
    "ToolSignals",
    "clamp_unit",
]
