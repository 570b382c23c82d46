"""
Admission Scorer

Runs the per-school pipeline:
Normalizer -> sub-scores -> composer -> probability mapper -> classifier
-> explainer.

Pure and synchronous. Holds only immutable collaborators, so a single
instance can serve concurrent pipeline runs from worker threads.
"""

from typing import List, Sequence

from app.domain.scoring.composer import OverallScoreComposer
from app.domain.scoring.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from app.domain.scoring.explainer import FactorExplainer, tier_suggestions
from app.domain.scoring.factors import AcademicFitFactor, ActivityFactor, AwardFactor
from app.domain.scoring.interfaces import (
    NormalizedInputs,
    PredictionResult,
    ProfileMetrics,
    SchoolMetrics,
    ScoringFactor,
)
from app.domain.scoring.label_classifier import LabelClassifier, assess_data_quality
from app.domain.scoring.normalizer import Normalizer
from app.domain.scoring.probability_mapper import ProbabilityMapper


class AdmissionScorer:
    """
    Admission probability engine for one applicant against one school.

    Follows the same Strategy layout as the sub-scores: each stage is a
    small object injected here, configured from a single ScoringConfig.
    """

    def __init__(
        self,
        config: ScoringConfig = DEFAULT_SCORING_CONFIG,
        academic: ScoringFactor | None = None,
        activity: ScoringFactor | None = None,
        award: ScoringFactor | None = None,
    ):
        """
        Initialize scorer.

        Args:
            config: Frozen scoring configuration
            academic/activity/award: Sub-score calculators. Defaults are
                built from config.
        """
        self._config = config
        self._normalizer = Normalizer(config)
        self._academic = academic or AcademicFitFactor(config)
        self._activity = activity or ActivityFactor()
        self._award = award or AwardFactor()
        self._composer = OverallScoreComposer(config.weights)
        self._mapper = ProbabilityMapper(config)
        self._classifier = LabelClassifier(config.tiers)
        self._explainer = FactorExplainer(config)

    @property
    def config(self) -> ScoringConfig:
        return self._config

    @property
    def engine_version(self) -> str:
        return self._config.engine_version

    def normalize(self, profile: ProfileMetrics, school: SchoolMetrics) -> NormalizedInputs:
        return self._normalizer.normalize(profile, school)

    def score_school(
        self,
        profile: ProfileMetrics,
        school: SchoolMetrics
    ) -> PredictionResult:
        """
        Score a single school for the applicant.

        Never raises for missing profile or school fields; gaps lower the
        confidence label instead.
        """
        inputs = self._normalizer.normalize(profile, school)
        context = inputs.school

        academic = self._academic.calculate(inputs, context)
        activity = self._activity.calculate(inputs, context)
        award = self._award.calculate(inputs, context)

        breakdown = self._composer.compose(academic, activity, award)
        estimate = self._mapper.estimate(breakdown.overall, context)
        tier, confidence = self._classifier.classify(
            estimate.probability, assess_data_quality(inputs)
        )
        explanation = self._explainer.explain(inputs, breakdown, context, academic)

        return PredictionResult(
            school_id=context.school_id,
            school_name=context.name,
            probability=estimate.probability,
            confidence=confidence,
            tier=tier,
            factors=explanation.factors,
            comparison=explanation.comparison,
            breakdown=breakdown,
            suggestions=tier_suggestions(tier),
            engine_version=self._config.engine_version,
        )

    def score_schools(
        self,
        profile: ProfileMetrics,
        schools: Sequence[SchoolMetrics]
    ) -> List[PredictionResult]:
        """Score several schools, keeping the input order."""
        return [self.score_school(profile, school) for school in schools]
