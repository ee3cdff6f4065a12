"""Analysis entry points: scores, findings and ranked recommendations."""

from __future__ import annotations

from typing import List, Optional

from ..config import HarnessConfig
from ..logging import get_logger
from ..models import Finding, HarnessReport, RepoModel
from .findings import generate_findings
from .recommendations import candidate_recommendations, rank_recommendations
from .scoring import score_repository, verification_score

logger = get_logger("analyze")


def analyze(model: RepoModel, config: Optional[HarnessConfig] = None) -> HarnessReport:
    """Evaluate ``model`` into a report; never raises on odd numeric input."""
    weights = config.weights() if config is not None else HarnessConfig.default_weights()
    scores = score_repository(model, config, weights)
    findings = generate_findings(model, config, scores.verification)
    recommendations = rank_recommendations(candidate_recommendations(model))
    logger.debug(
        "Analysis complete: overall=%.3f findings=%d recommendations=%d",
        scores.overall,
        len(findings),
        len(recommendations),
    )
    return HarnessReport(
        overall_score=scores.overall,
        category_scores=scores,
        findings=findings,
        recommendations=recommendations,
    )


def lint_findings(model: RepoModel, config: Optional[HarnessConfig] = None) -> List[Finding]:
    return analyze(model, config).findings


__all__ = ["analyze", "lint_findings", "verification_score"]
