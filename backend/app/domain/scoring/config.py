"""
Scoring Configuration

Immutable configuration for the admission engine. Built once at process
start (see app.config.settings.build_scoring_config) and injected into the
scorer; nothing in the pipeline mutates it.
"""

import math
from dataclasses import dataclass, field

from app.domain.scoring import constants
from app.infrastructure.exceptions import ConfigurationError


@dataclass(frozen=True)
class ScoringWeights:
    """
    Overall-score weights.

    Must be non-negative and sum to 1.0 so the overall score is a convex
    combination of the sub-scores. Validated on construction.
    """
    academic: float = constants.DEFAULT_SCORING_WEIGHTS["academic"]
    activity: float = constants.DEFAULT_SCORING_WEIGHTS["activity"]
    award: float = constants.DEFAULT_SCORING_WEIGHTS["award"]
    version: str = "v1"

    def __post_init__(self) -> None:
        values = {
            "academic": self.academic,
            "activity": self.activity,
            "award": self.award,
        }
        negative = [name for name, value in values.items() if value < 0 or math.isnan(value)]
        if negative:
            raise ConfigurationError(
                f"Scoring weights must be non-negative: {', '.join(negative)}",
                missing_keys=negative,
            )

        total = sum(values.values())
        if abs(total - 1.0) > constants.WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError(
                f"Scoring weights ({self.version}) must sum to 1.0, got {total:.12f}"
            )

    def as_dict(self) -> dict:
        return {
            "academic": self.academic,
            "activity": self.activity,
            "award": self.award,
        }


@dataclass(frozen=True)
class TierThresholds:
    """Probability cut-offs: p < reach_below -> reach, p < match_below -> match."""
    reach_below: float = constants.REACH_UPPER_BOUND
    match_below: float = constants.MATCH_UPPER_BOUND

    def __post_init__(self) -> None:
        if not 0.0 < self.reach_below < self.match_below < 1.0:
            raise ConfigurationError(
                "Tier thresholds must satisfy 0 < reach_below < match_below < 1"
            )


@dataclass(frozen=True)
class ScoringConfig:
    """Everything tunable about the engine, frozen for the process lifetime."""
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    tiers: TierThresholds = field(default_factory=TierThresholds)
    academic_gpa_weight: float = constants.ACADEMIC_GPA_WEIGHT
    academic_test_weight: float = constants.ACADEMIC_TEST_WEIGHT
    min_historical_sample: int = constants.MIN_HISTORICAL_SAMPLE
    min_partial_sample: int = constants.MIN_PARTIAL_SAMPLE
    engine_version: str = constants.ENGINE_VERSION

    def __post_init__(self) -> None:
        intra_total = self.academic_gpa_weight + self.academic_test_weight
        if abs(intra_total - 1.0) > constants.WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError(
                f"Academic GPA/test weights must sum to 1.0, got {intra_total:.12f}"
            )
        if self.min_historical_sample < 1:
            raise ConfigurationError("min_historical_sample must be at least 1")
        if not 0 <= self.min_partial_sample <= self.min_historical_sample:
            raise ConfigurationError(
                "min_partial_sample must be between 0 and min_historical_sample"
            )


DEFAULT_SCORING_CONFIG = ScoringConfig()
