"""Detection verdict value objects produced by the spam detection pipeline."""

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import RiskLevel


class DetectionScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword_score: float = Field(default=0.0, ge=0.0, le=1.0)
    pattern_score: float = Field(default=0.0, ge=0.0, le=1.0)
    user_score: float = Field(default=0.0, ge=0.0, le=1.0)
    frequency_score: float = Field(default=0.0, ge=0.0, le=1.0)


class DetectionResult(BaseModel):
    """
    Immutable outcome of one detection run.

    A new run always produces a new instance; reports embed a JSON copy of it.
    """

    model_config = ConfigDict(frozen=True)

    is_spam: bool
    confidence: int = Field(ge=0, le=100)
    overall_score: float = Field(ge=0.0, le=1.0)
    risk_level: RiskLevel
    scores: DetectionScores
    reasons: tuple[str, ...] = ()

    @classmethod
    def clean(cls) -> "DetectionResult":
        """Zero-confidence, non-spam verdict used when detection cannot run."""
        return cls(
            is_spam=False,
            confidence=0,
            overall_score=0.0,
            risk_level=RiskLevel.MINIMAL,
            scores=DetectionScores(),
            reasons=(),
        )


class ScoreBreakdown(BaseModel):
    keywords: int
    patterns: int
    user: int
    frequency: int


class DetectionSummary(BaseModel):
    summary: str
    risk_level: RiskLevel
    top_reasons: list[str]
    score_breakdown: ScoreBreakdown
