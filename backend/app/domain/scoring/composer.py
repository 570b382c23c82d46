"""
Overall Score Composer

Convex combination of the academic, activity and award sub-scores.
Weights are validated when ScoringWeights is constructed, so a bad weight
table fails at startup, never per request.
"""

from app.domain.scoring.config import ScoringWeights
from app.domain.scoring.interfaces import ScoreBreakdown, SubScore


def compose(
    academic: float,
    activity: float,
    award: float,
    weights: ScoringWeights,
) -> float:
    """Weighted sum of the three sub-scores, clamped to [0, 100]."""
    overall = (
        academic * weights.academic
        + activity * weights.activity
        + award * weights.award
    )
    return max(0.0, min(100.0, overall))


class OverallScoreComposer:
    """Builds the ScoreBreakdown for one pipeline run."""

    def __init__(self, weights: ScoringWeights | None = None):
        self._weights = weights or ScoringWeights()

    @property
    def weights(self) -> ScoringWeights:
        return self._weights

    def compose(
        self,
        academic: SubScore,
        activity: SubScore,
        award: SubScore,
    ) -> ScoreBreakdown:
        overall = compose(academic.score, activity.score, award.score, self._weights)
        low_confidence = tuple(
            sub.name for sub in (academic, activity, award) if sub.low_confidence
        )
        return ScoreBreakdown(
            academic=academic.score,
            activity=activity.score,
            award=award.score,
            overall=overall,
            low_confidence=low_confidence,
        )
