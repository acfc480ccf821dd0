"""Aggregate extractor sub-scores into a detection verdict."""

import math
from collections.abc import Mapping

from app.core import spam_rules
from app.core.config import get_settings
from app.models.detection import (
    DetectionResult,
    DetectionScores,
    DetectionSummary,
    ScoreBreakdown,
)
from app.models.enums import RiskLevel


def overall_score(scores: Mapping[str, float | None]) -> float:
    """Weighted sum of the sub-scores; a missing or None sub-score counts as 0."""
    total = 0.0
    for name, weight in spam_rules.SCORE_WEIGHTS.items():
        total += weight * (scores.get(name) or 0.0)
    return max(0.0, min(1.0, total))


def to_percent(value: float) -> int:
    """Scale a [0, 1] score to a whole percentage, rounding halves up."""
    return math.floor(value * 100 + 0.5)


def risk_level_for(score: float) -> RiskLevel:
    if score >= 0.8:
        return RiskLevel.HIGH
    if score >= 0.6:
        return RiskLevel.MEDIUM
    if score >= 0.3:
        return RiskLevel.LOW
    return RiskLevel.MINIMAL


def reasons_for(scores: Mapping[str, float | None]) -> tuple[str, ...]:
    return tuple(
        reason
        for name, reason in spam_rules.SCORE_REASONS.items()
        if (scores.get(name) or 0.0) > spam_rules.REASON_THRESHOLD
    )


def aggregate(
    scores: Mapping[str, float | None], spam_threshold: float | None = None
) -> DetectionResult:
    """
    Combine the four sub-scores into a DetectionResult.

    Parameters:
        scores (Mapping[str, float | None]): Sub-scores keyed by `keyword_score`, `pattern_score`,
            `user_score` and `frequency_score`.
        spam_threshold (float | None): Overall score at or above which content is spam;
            defaults to the `SPAM_THRESHOLD` setting.

    Returns:
        DetectionResult: Verdict with confidence, risk tier and ordered reasons.
    """
    if spam_threshold is None:
        spam_threshold = get_settings().SPAM_THRESHOLD

    score = overall_score(scores)
    return DetectionResult(
        is_spam=score >= spam_threshold,
        confidence=to_percent(score),
        overall_score=score,
        risk_level=risk_level_for(score),
        scores=DetectionScores(
            **{name: scores.get(name) or 0.0 for name in spam_rules.SCORE_WEIGHTS}
        ),
        reasons=reasons_for(scores),
    )


def generate_report_summary(result: DetectionResult) -> DetectionSummary:
    """Human-facing digest of a verdict for moderators."""
    label = "SPAM DETECTED" if result.is_spam else "CLEAN"
    return DetectionSummary(
        summary=f"{label} - {result.confidence}% confidence",
        risk_level=result.risk_level,
        top_reasons=list(result.reasons[:3]),
        score_breakdown=ScoreBreakdown(
            keywords=to_percent(result.scores.keyword_score),
            patterns=to_percent(result.scores.pattern_score),
            user=to_percent(result.scores.user_score),
            frequency=to_percent(result.scores.frequency_score),
        ),
    )
