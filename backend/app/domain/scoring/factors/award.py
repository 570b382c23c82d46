"""
Award Factor

Competition tier x level point table with square-root dampening.
"""

import math

from app.domain.scoring import constants
from app.domain.scoring.interfaces import (
    Award,
    BaseScoringFactor,
    NormalizedInputs,
    SchoolContext,
    SubScore,
)


def award_points(award: Award) -> float:
    """Points for one award: competition tier first, then level, then default."""
    if award.tier is not None and award.tier in constants.TIER_POINTS:
        return constants.TIER_POINTS[award.tier]
    level = (award.level or "").upper()
    return constants.LEVEL_POINTS.get(level, constants.DEFAULT_AWARD_POINTS)


class AwardFactor(BaseScoringFactor):
    """
    Award sub-score.

    score = AWARD_SCORE_SCALE * sqrt(total points), capped at 100, so one
    top-tier award lands around the middle of the range instead of
    saturating it.
    """

    @property
    def name(self) -> str:
        return "award"

    def calculate(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext
    ) -> SubScore:
        awards = inputs.awards
        if not awards:
            return SubScore(
                name=self.name,
                score=constants.AWARD_MISSING_SCORE,
                low_confidence=True,
                signals={"count": 0, "total_points": 0.0},
            )

        points = [award_points(award) for award in awards]
        total = sum(points)
        score = constants.AWARD_SCORE_SCALE * math.sqrt(total)

        return SubScore(
            name=self.name,
            score=self.clamp(score),
            signals={
                "count": len(awards),
                "total_points": total,
                "top_points": max(points),
            },
        )
