"""
Factor Explainer

Reconstructs which inputs drove a prediction.

Each factor carries its nominal share of the overall score as its weight,
an impact judged against the school's median for that dimension, and, for
negative factors only, a concrete improvement suggestion. Factors are
ordered by weight descending with the name as tie-break.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from app.domain.scoring import constants
from app.domain.scoring.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from app.domain.scoring.factors.academic_fit import AcademicFitFactor, act_to_sat
from app.domain.scoring.factors.activity import (
    activity_strength,
    distinct_categories,
    is_leadership,
)
from app.domain.scoring.interfaces import (
    ActivityStrength,
    Impact,
    NormalizedInputs,
    PredictionComparison,
    PredictionFactor,
    SchoolContext,
    ScoreBreakdown,
    SubScore,
    Tier,
)
from app.domain.scoring.statistics import school_reference_median

# TOEFL moves the academic score by at most TOEFL_MAX_ADJUSTMENT points
TOEFL_FACTOR_WEIGHT = constants.TOEFL_MAX_ADJUSTMENT / 100.0

TIER_SUGGESTIONS = {
    Tier.REACH: (
        "As a reach school, use your essays to show what sets you apart.",
        "Consider a specific program or an early application round to improve your odds.",
    ),
    Tier.MATCH: (
        "As a match school, keep your current strengths and polish every part of the application.",
    ),
    Tier.SAFETY: (
        "As a safety school, keep the application quality high and show genuine interest in the school.",
    ),
}


def tier_suggestions(tier: Tier) -> Tuple[str, ...]:
    """Strategy notes for a reach / match / safety school."""
    return TIER_SUGGESTIONS.get(tier, ())


def to_percentile_int(percentile: Optional[float]) -> Optional[int]:
    if percentile is None:
        return None
    return max(0, min(100, int(round(percentile * 100))))


@dataclass(frozen=True)
class ExplanationResult:
    factors: Tuple[PredictionFactor, ...]
    comparison: PredictionComparison


class FactorExplainer:
    """Builds the ordered factor list and the comparison block."""

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self._config = config
        self._academic = AcademicFitFactor(config)

    def explain(
        self,
        inputs: NormalizedInputs,
        breakdown: ScoreBreakdown,
        school: SchoolContext,
        academic: Optional[SubScore] = None,
    ) -> ExplanationResult:
        """
        Explain one prediction.

        academic is the already computed academic sub-score; its percentile
        signals are reused for the comparison block. It is recomputed when
        omitted.
        """
        if academic is None:
            academic = self._academic.calculate(inputs, school)

        factors: List[PredictionFactor] = []
        factors.extend(self._academic_factors(inputs, school))
        factors.append(self._activity_factor(inputs, breakdown))
        factors.append(self._award_factor(inputs, breakdown))
        factors.sort(key=lambda f: (-f.weight, f.name))

        comparison = PredictionComparison(
            gpa_percentile=to_percentile_int(academic.signals.get("gpa_percentile")),
            test_score_percentile=to_percentile_int(academic.signals.get("test_percentile")),
            activity_strength=activity_strength(breakdown.activity),
        )
        return ExplanationResult(factors=tuple(factors), comparison=comparison)

    # =========================================================================
    # Academic
    # =========================================================================

    def _academic_factors(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext,
    ) -> List[PredictionFactor]:
        weights = self._config.weights
        primary = inputs.primary_test_type
        gpa_known = inputs.gpa.is_known

        # Nominal shares; a lone known dimension carries the whole academic weight
        gpa_share = weights.academic * self._config.academic_gpa_weight
        test_share = weights.academic * self._config.academic_test_weight
        if gpa_known and primary is None:
            gpa_share = weights.academic
        elif primary is not None and not gpa_known:
            test_share = weights.academic

        factors = [self._gpa_factor(inputs, school, gpa_share)]

        if primary is None:
            factors.append(PredictionFactor(
                name="Standardized tests",
                impact=Impact.NEUTRAL,
                weight=test_share,
                detail="No SAT or ACT score on file; the academic score relies on GPA alone.",
            ))

        for test_type in sorted(inputs.tests):
            value = inputs.tests[test_type]
            if not value.is_known:
                continue
            if test_type == "TOEFL":
                factors.append(self._toefl_factor(value.value, school))
            elif test_type == primary:
                factors.append(self._primary_test_factor(test_type, value.value, school, test_share))
            else:
                factors.append(PredictionFactor(
                    name=test_type,
                    impact=Impact.NEUTRAL,
                    weight=0.0,
                    detail=f"{test_type} {value.value:.0f} on file; {primary} is used for the academic score.",
                ))
        return factors

    def _gpa_factor(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext,
        weight: float,
    ) -> PredictionFactor:
        if not inputs.gpa.is_known:
            return PredictionFactor(
                name="GPA",
                impact=Impact.NEUTRAL,
                weight=weight,
                detail="No GPA on file; it could not be compared with admitted students.",
            )

        gpa = inputs.gpa.value
        median = school_reference_median("gpa", school, self._config.min_historical_sample)
        if median is None:
            return PredictionFactor(
                name="GPA",
                impact=Impact.NEUTRAL,
                weight=weight,
                detail=f"GPA {gpa:.2f}; not enough admissions data to compare.",
            )

        impact = self._compare(gpa, median)
        improvement = None
        if impact == Impact.NEGATIVE:
            improvement = (
                f"Raise your GPA toward the admitted median of {median:.2f}: "
                "strong grades in the remaining terms and a rigorous course load count most."
            )
        return PredictionFactor(
            name="GPA",
            impact=impact,
            weight=weight,
            detail=f"GPA {gpa:.2f} vs admitted median {median:.2f}.",
            improvement=improvement,
        )

    def _primary_test_factor(
        self,
        test_type: str,
        score: float,
        school: SchoolContext,
        weight: float,
    ) -> PredictionFactor:
        min_sample = self._config.min_historical_sample
        median = school_reference_median(test_type, school, min_sample)
        compared_score = score
        compared_type = test_type

        # Schools that only publish SAT data: judge ACT through the concordance table
        if median is None and test_type == "ACT":
            sat_median = school_reference_median("sat", school, min_sample)
            if sat_median is not None:
                median = sat_median
                compared_score = act_to_sat(score)
                compared_type = "SAT-equivalent"

        if median is None:
            return PredictionFactor(
                name=test_type,
                impact=Impact.NEUTRAL,
                weight=weight,
                detail=f"{test_type} {score:.0f}; not enough admissions data to compare.",
            )

        impact = self._compare(compared_score, median)
        improvement = None
        if impact == Impact.NEGATIVE:
            target = f"{median:.0f}" if compared_type == test_type else f"{median:.0f} SAT-equivalent"
            improvement = (
                f"Retake the {test_type} and aim for at least {target}, the admitted median."
            )

        if compared_type == test_type:
            detail = f"{test_type} {score:.0f} vs admitted median {median:.0f}."
        else:
            detail = (
                f"{test_type} {score:.0f} (~{compared_score:.0f} SAT) vs admitted SAT median {median:.0f}."
            )
        return PredictionFactor(
            name=test_type,
            impact=impact,
            weight=weight,
            detail=detail,
            improvement=improvement,
        )

    def _toefl_factor(self, score: float, school: SchoolContext) -> PredictionFactor:
        reference = school_reference_median("toefl", school, self._config.min_historical_sample)
        if reference is None:
            reference = constants.TOEFL_BASELINE

        impact = self._compare(score, reference)
        improvement = None
        if impact == Impact.NEGATIVE:
            improvement = f"Retake the TOEFL aiming for {reference:.0f} or higher."
        return PredictionFactor(
            name="TOEFL",
            impact=impact,
            weight=TOEFL_FACTOR_WEIGHT,
            detail=f"TOEFL {score:.0f} vs reference {reference:.0f}.",
            improvement=improvement,
        )

    # =========================================================================
    # Activities & awards
    # =========================================================================

    def _activity_factor(
        self,
        inputs: NormalizedInputs,
        breakdown: ScoreBreakdown,
    ) -> PredictionFactor:
        weight = self._config.weights.activity
        activities = inputs.activities
        if not activities:
            return PredictionFactor(
                name="Activities",
                impact=Impact.NEUTRAL,
                weight=weight,
                detail="No extracurricular activities on file.",
            )

        strength = activity_strength(breakdown.activity)
        detail = f"{len(activities)} activities, {strength.value} overall (score {breakdown.activity:.0f})."

        if strength == ActivityStrength.STRONG:
            return PredictionFactor(name="Activities", impact=Impact.POSITIVE, weight=weight, detail=detail)
        if strength == ActivityStrength.AVERAGE:
            return PredictionFactor(name="Activities", impact=Impact.NEUTRAL, weight=weight, detail=detail)

        return PredictionFactor(
            name="Activities",
            impact=Impact.NEGATIVE,
            weight=weight,
            detail=detail,
            improvement=self._activity_improvement(inputs),
        )

    def _activity_improvement(self, inputs: NormalizedInputs) -> str:
        activities = inputs.activities
        if not any(is_leadership(a) for a in activities):
            return (
                "Take on a leadership role (club president, team captain, project lead) "
                "in an activity you already do."
            )
        if not any(a.total_hours > constants.DEEP_ACTIVITY_HOURS for a in activities):
            return (
                f"Commit more time to one or two core activities; "
                f"more than {constants.DEEP_ACTIVITY_HOURS:.0f} hours shows sustained depth."
            )
        if distinct_categories(activities) < constants.BREADTH_BONUSES[-1][0]:
            return "Add an activity in a new category to show breadth."
        return "Add more activities that build on your existing interests."

    def _award_factor(
        self,
        inputs: NormalizedInputs,
        breakdown: ScoreBreakdown,
    ) -> PredictionFactor:
        weight = self._config.weights.award
        if not inputs.awards:
            return PredictionFactor(
                name="Awards",
                impact=Impact.NEUTRAL,
                weight=weight,
                detail="No awards on file.",
            )

        detail = f"{len(inputs.awards)} awards (score {breakdown.award:.0f})."
        if breakdown.award >= constants.AWARD_STRONG_THRESHOLD:
            return PredictionFactor(name="Awards", impact=Impact.POSITIVE, weight=weight, detail=detail)
        if breakdown.award >= constants.AWARD_WEAK_THRESHOLD:
            return PredictionFactor(name="Awards", impact=Impact.NEUTRAL, weight=weight, detail=detail)

        return PredictionFactor(
            name="Awards",
            impact=Impact.NEGATIVE,
            weight=weight,
            detail=detail,
            improvement=(
                "Compete at state level or above; a single national or international "
                "result raises this score more than several school-level awards."
            ),
        )

    @staticmethod
    def _compare(value: float, reference: float) -> Impact:
        if value > reference:
            return Impact.POSITIVE
        if value < reference:
            return Impact.NEGATIVE
        return Impact.NEUTRAL
