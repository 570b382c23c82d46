"""
Label Classifier

Maps an admission probability to Reach / Match / Safety and derives a
confidence label from data volume on both sides.
"""

from dataclasses import dataclass
from typing import Tuple

from app.domain.scoring import constants
from app.domain.scoring.config import TierThresholds
from app.domain.scoring.interfaces import (
    Confidence,
    NormalizedInputs,
    NormalizedValue,
    SchoolDataQuality,
    Tier,
)


@dataclass(frozen=True)
class DataQuality:
    """
    What the prediction was built on.

    profile_completeness counts GPA, primary test, activities and awards:
    1 each when present, 0.5 for a low-confidence value.
    """
    school: SchoolDataQuality
    profile_completeness: float
    academics_reliable: bool


def _completeness_weight(value: NormalizedValue) -> float:
    if not value.is_known:
        return 0.0
    return 0.5 if value.low_confidence else 1.0


def assess_data_quality(inputs: NormalizedInputs) -> DataQuality:
    """Summarize applicant completeness alongside the school's data quality."""
    primary = inputs.primary_test_type
    test_value = inputs.test(primary) if primary else NormalizedValue()

    completeness = _completeness_weight(inputs.gpa) + _completeness_weight(test_value)
    if inputs.activities:
        completeness += 1.0
    if inputs.awards:
        completeness += 1.0

    return DataQuality(
        school=inputs.school.data_quality,
        profile_completeness=completeness,
        academics_reliable=inputs.gpa.is_reliable and test_value.is_reliable,
    )


class LabelClassifier:
    """
    Tier and confidence classifier.

    Tier:
    - Reach: p < reach_below (0.25)
    - Match: reach_below <= p < match_below (0.60)
    - Safety: p >= match_below

    Confidence:
    - Low: school data is thin OR profile completeness <= 2
    - High: rich school data AND reliable GPA + test AND completeness >= 3.5
    - Medium otherwise
    """

    def __init__(self, thresholds: TierThresholds | None = None):
        self._thresholds = thresholds or TierThresholds()

    def classify(self, probability: float, quality: DataQuality) -> Tuple[Tier, Confidence]:
        return self.classify_tier(probability), self.classify_confidence(quality)

    def classify_tier(self, probability: float) -> Tier:
        if probability < self._thresholds.reach_below:
            return Tier.REACH
        if probability < self._thresholds.match_below:
            return Tier.MATCH
        return Tier.SAFETY

    def classify_confidence(self, quality: DataQuality) -> Confidence:
        if quality.school == SchoolDataQuality.THIN:
            return Confidence.LOW
        if quality.profile_completeness <= constants.LOW_CONFIDENCE_MAX_COMPLETENESS:
            return Confidence.LOW

        if (
            quality.school == SchoolDataQuality.RICH
            and quality.academics_reliable
            and quality.profile_completeness >= constants.HIGH_CONFIDENCE_MIN_COMPLETENESS
        ):
            return Confidence.HIGH

        return Confidence.MEDIUM
