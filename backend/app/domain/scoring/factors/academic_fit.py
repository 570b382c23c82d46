"""
Academic Fit Factor

Scores GPA and the primary standardized test against the school's admitted
students, then maps the combined percentile onto 0-100.

- Being at the admitted median = 50
- Each dimension uses the best data the school has (see
  statistics.percentile_against_school)
- TOEFL nudges the score by at most a few points; it never dominates
"""

from typing import Dict, Optional, Tuple

from app.domain.scoring import constants
from app.domain.scoring.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from app.domain.scoring.interfaces import (
    BaseScoringFactor,
    NormalizedInputs,
    SchoolContext,
    SubScore,
)
from app.domain.scoring.statistics import percentile_against_school


def act_to_sat(act_score: float) -> float:
    """Concordance lookup; scores below the table extrapolate linearly."""
    rounded = int(round(act_score))
    return float(constants.ACT_TO_SAT.get(rounded, 400 + rounded * 28))


def toefl_adjustment(toefl: Optional[float]) -> float:
    """+/- TOEFL_MAX_ADJUSTMENT points around the TOEFL baseline."""
    if toefl is None:
        return 0.0
    raw = (toefl - constants.TOEFL_BASELINE) / constants.TOEFL_POINTS_PER_ADJUSTMENT
    return max(-constants.TOEFL_MAX_ADJUSTMENT, min(constants.TOEFL_MAX_ADJUSTMENT, raw))


class AcademicFitFactor(BaseScoringFactor):
    """
    Academic sub-score.

    Percentile of GPA and of the primary test (SAT preferred, ACT otherwise)
    within the school's admitted distribution, combined with the configured
    GPA/test weights. When only one of them is known it carries the whole
    academic score.
    """

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self._config = config

    @property
    def name(self) -> str:
        return "academic"

    def calculate(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext
    ) -> SubScore:
        signals: Dict[str, object] = {}
        low_confidence = False
        min_sample = self._config.min_historical_sample

        gpa_percentile = None
        if inputs.gpa.is_known:
            gpa_percentile, method = percentile_against_school(
                inputs.gpa.value, "gpa", school, min_sample
            )
            signals["gpa_method"] = method
            low_confidence = low_confidence or inputs.gpa.low_confidence

        test_percentile = None
        test_type = inputs.primary_test_type
        if test_type is not None:
            test_value = inputs.test(test_type)
            value, dimension = self._comparable_test(test_type, test_value.value, school)
            test_percentile, method = percentile_against_school(
                value, dimension, school, min_sample
            )
            signals["test_type"] = test_type
            signals["test_method"] = method
            low_confidence = low_confidence or test_value.low_confidence

        signals["gpa_percentile"] = gpa_percentile
        signals["test_percentile"] = test_percentile

        adjustment = toefl_adjustment(inputs.test("TOEFL").value)
        signals["toefl_adjustment"] = adjustment

        if gpa_percentile is None and test_percentile is None:
            return SubScore(
                name=self.name,
                score=self.clamp(constants.ACADEMIC_MISSING_SCORE + adjustment),
                low_confidence=True,
                signals=signals,
            )

        if gpa_percentile is not None and test_percentile is not None:
            combined = (
                gpa_percentile * self._config.academic_gpa_weight
                + test_percentile * self._config.academic_test_weight
            )
        elif gpa_percentile is not None:
            combined = gpa_percentile
        else:
            combined = test_percentile

        return SubScore(
            name=self.name,
            score=self.clamp(combined * 100.0 + adjustment),
            low_confidence=low_confidence,
            signals=signals,
        )

    def _comparable_test(
        self,
        test_type: str,
        value: float,
        school: SchoolContext
    ) -> Tuple[float, str]:
        """
        Pick the dimension to compare a test score against.

        An ACT score is converted to its SAT equivalent when the school only
        has SAT data.
        """
        if test_type == "ACT" and not self._has_data(school, "act") and self._has_data(school, "sat"):
            return act_to_sat(value), "sat"
        return value, test_type.lower()

    def _has_data(self, school: SchoolContext, dimension: str) -> bool:
        observed = school.historical.for_dimension(dimension)
        if observed is not None and observed.sample_size >= self._config.min_partial_sample:
            return True
        if school.published_range(dimension) is not None:
            return True
        return getattr(school, f"{dimension}_avg", None) is not None
