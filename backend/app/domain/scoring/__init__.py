# Admission probability engine
from app.domain.scoring.interfaces import (
    Activity,
    ActivityStrength,
    Award,
    BaseScoringFactor,
    Confidence,
    DimensionDistribution,
    HistoricalDistribution,
    Impact,
    NormalizedInputs,
    PredictionComparison,
    PredictionFactor,
    PredictionResult,
    ProfileMetrics,
    SchoolDataQuality,
    SchoolMetrics,
    ScoreBreakdown,
    ScoringFactor,
    TestScore,
    Tier,
)
from app.domain.scoring.config import (
    DEFAULT_SCORING_CONFIG,
    ScoringConfig,
    ScoringWeights,
    TierThresholds,
)
from app.domain.scoring.admission_scorer import AdmissionScorer
from app.domain.scoring.label_classifier import LabelClassifier

__all__ = [
    "Activity",
    "ActivityStrength",
    "Award",
    "BaseScoringFactor",
    "Confidence",
    "DimensionDistribution",
    "HistoricalDistribution",
    "Impact",
    "NormalizedInputs",
    "PredictionComparison",
    "PredictionFactor",
    "PredictionResult",
    "ProfileMetrics",
    "SchoolDataQuality",
    "SchoolMetrics",
    "ScoreBreakdown",
    "ScoringFactor",
    "TestScore",
    "Tier",
    "DEFAULT_SCORING_CONFIG",
    "ScoringConfig",
    "ScoringWeights",
    "TierThresholds",
    "AdmissionScorer",
    "LabelClassifier",
]
