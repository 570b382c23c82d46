"""
Activity Factor

Extracurricular breadth, depth and leadership.
"""

from typing import Iterable

from app.domain.scoring import constants
from app.domain.scoring.interfaces import (
    Activity,
    ActivityStrength,
    BaseScoringFactor,
    NormalizedInputs,
    SchoolContext,
    SubScore,
)


def is_leadership(activity: Activity) -> bool:
    """Explicit flag, or a leadership keyword in the role."""
    if activity.is_leadership:
        return True
    role = (activity.role or "").lower()
    return any(keyword in role for keyword in constants.LEADERSHIP_KEYWORDS)


def breadth_bonus(category_count: int) -> float:
    for min_categories, bonus in constants.BREADTH_BONUSES:
        if category_count >= min_categories:
            return bonus
    return 0.0


def distinct_categories(activities: Iterable[Activity]) -> int:
    return len({
        activity.category.strip().lower()
        for activity in activities
        if activity.category and activity.category.strip()
    })


def activity_strength(score: float) -> ActivityStrength:
    """Categorical label for an activity sub-score."""
    if score >= constants.ACTIVITY_STRONG_THRESHOLD:
        return ActivityStrength.STRONG
    if score >= constants.ACTIVITY_AVERAGE_THRESHOLD:
        return ActivityStrength.AVERAGE
    return ActivityStrength.WEAK


class ActivityFactor(BaseScoringFactor):
    """
    Activity sub-score.

    Base 20, plus capped points for count, leadership roles and deep
    (> DEEP_ACTIVITY_HOURS total) involvement, plus a breadth bonus for
    distinct categories. No activities yields a low default, flagged
    low-confidence, so an unfilled profile is not scored as zero.
    """

    @property
    def name(self) -> str:
        return "activity"

    def calculate(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext
    ) -> SubScore:
        activities = inputs.activities
        if not activities:
            return SubScore(
                name=self.name,
                score=constants.ACTIVITY_MISSING_SCORE,
                low_confidence=True,
                signals={"count": 0, "leadership_count": 0, "deep_count": 0, "category_count": 0},
            )

        leadership_count = sum(1 for a in activities if is_leadership(a))
        deep_count = sum(1 for a in activities if a.total_hours > constants.DEEP_ACTIVITY_HOURS)
        category_count = distinct_categories(activities)

        score = constants.ACTIVITY_BASE_SCORE
        score += min(constants.ACTIVITY_COUNT_CAP, len(activities) * constants.ACTIVITY_POINTS_PER_ITEM)
        score += min(constants.LEADERSHIP_CAP, leadership_count * constants.LEADERSHIP_POINTS_PER_ITEM)
        score += min(constants.DEPTH_CAP, deep_count * constants.DEPTH_POINTS_PER_ITEM)
        score += breadth_bonus(category_count)

        return SubScore(
            name=self.name,
            score=self.clamp(score),
            signals={
                "count": len(activities),
                "leadership_count": leadership_count,
                "deep_count": deep_count,
                "category_count": category_count,
            },
        )
