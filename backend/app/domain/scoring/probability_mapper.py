"""
Probability Mapper

Converts the overall competitiveness score into an admission probability.

With a usable historical distribution of admitted applicants' overall
scores the probability is the normal CDF of the applicant's z-score. With
sparse data a monotone fallback on the acceptance rate is used, blended
with the CDF on prior-smoothed moments when a thin sample exists.

The school's raw acceptance rate bounds the result (floor rate * 0.5,
ceiling rate * 3 + 0.15) and everything is clamped to [0.01, 0.99].
"""

from typing import Optional, Tuple

from app.domain.scoring import constants
from app.domain.scoring.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from app.domain.scoring.interfaces import ProbabilityEstimate, SchoolContext
from app.domain.scoring.statistics import blend_with_prior, normal_cdf, z_score


def acceptance_bounds(acceptance_rate: Optional[float]) -> Tuple[float, float]:
    """(floor, ceiling) implied by a school's acceptance rate."""
    if acceptance_rate is None:
        return constants.MIN_PROBABILITY, constants.MAX_PROBABILITY
    floor = acceptance_rate * constants.SELECTIVITY_FLOOR_MULTIPLIER
    ceiling = (
        acceptance_rate * constants.SELECTIVITY_CEILING_MULTIPLIER
        + constants.SELECTIVITY_CEILING_OFFSET
    )
    return floor, ceiling


def fallback_probability(overall: float, base_rate: float) -> float:
    """base * 1.2 ^ ((score - 50) / 10): strictly increasing in score."""
    exponent = (overall - constants.FALLBACK_SCORE_PIVOT) / 10.0
    return base_rate * constants.FALLBACK_MULTIPLIER_PER_10 ** exponent


def clamp_probability(probability: float) -> float:
    return max(constants.MIN_PROBABILITY, min(constants.MAX_PROBABILITY, probability))


class ProbabilityMapper:
    """Score-to-probability mapping for one school context."""

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self._config = config

    def map_to_probability(self, overall: float, school: SchoolContext) -> float:
        return self.estimate(overall, school).probability

    def estimate(self, overall: float, school: SchoolContext) -> ProbabilityEstimate:
        """
        Probability plus the method and moments behind it.

        method is one of:
          "distribution" - CDF on the school's own overall-score distribution
          "blended"      - thin sample: CDF on prior-blended moments mixed with
                           the fallback by n / min_historical_sample
          "fallback"     - no observed distribution at all
        """
        min_sample = self._config.min_historical_sample
        observed = school.historical.overall
        floor, ceiling = acceptance_bounds(school.acceptance_rate)

        if (
            observed is not None
            and observed.sample_size >= min_sample
            and observed.has_summary
        ):
            z = z_score(overall, observed.mean, observed.stdev)
            raw = normal_cdf(z)
            return self._finish(raw, "distribution", z, observed.mean, observed.stdev, floor, ceiling)

        fallback = fallback_probability(overall, self._base_rate(school))
        prior = school.priors.get("overall", constants.SELECTIVITY_PRIORS[constants.DEFAULT_SELECTIVITY_TIER]["overall"])
        mean, stdev, weight = blend_with_prior(observed, prior, min_sample)

        if weight > 0 and stdev > 0:
            z = z_score(overall, mean, stdev)
            raw = weight * normal_cdf(z) + (1.0 - weight) * fallback
            return self._finish(raw, "blended", z, mean, stdev, floor, ceiling)

        return self._finish(fallback, "fallback", None, None, None, floor, ceiling)

    def _base_rate(self, school: SchoolContext) -> float:
        if school.acceptance_rate is not None:
            return school.acceptance_rate
        prior_rate = school.priors.get("acceptance_rate")
        if prior_rate is not None:
            return prior_rate[0]
        return constants.DEFAULT_ACCEPTANCE_RATE

    @staticmethod
    def _finish(
        raw: float,
        method: str,
        z: Optional[float],
        mean: Optional[float],
        stdev: Optional[float],
        floor: float,
        ceiling: float,
    ) -> ProbabilityEstimate:
        bounded = max(floor, min(ceiling, raw))
        return ProbabilityEstimate(
            probability=clamp_probability(bounded),
            method=method,
            z_score=z,
            mean=mean,
            stdev=stdev,
            floor=floor,
            ceiling=ceiling,
        )
