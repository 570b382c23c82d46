"""
Statistical helpers for the admission engine.

Normal CDF, empirical percentiles and prior blending. Every function is
pure and monotone non-decreasing in the applicant value.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.stats import norm

from app.domain.scoring.constants import IQR_TO_SIGMA
from app.domain.scoring.interfaces import DimensionDistribution, SchoolContext

# Published single-point stats that can stand in for a prior mean
_PUBLISHED_CENTER = {
    "gpa": "median_gpa",
    "sat": "sat_avg",
    "act": "act_avg",
}


def normal_cdf(z: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(norm.cdf(z))


def z_score(value: float, mean: float, stdev: float) -> float:
    """Standardized distance of value from mean. stdev must be positive."""
    if stdev <= 0:
        raise ValueError("stdev must be positive")
    return (value - mean) / stdev


def empirical_percentile(value: float, sorted_values: Sequence[float]) -> float:
    """
    Mid-rank percentile of value within observed values (0-1).

    Ties count half, so a value equal to every observation lands at 0.5.
    """
    if len(sorted_values) == 0:
        return 0.5
    array = np.asarray(sorted_values, dtype=float)
    below = int(np.searchsorted(array, value, side="left"))
    at_or_below = int(np.searchsorted(array, value, side="right"))
    return (below + at_or_below) / (2.0 * len(array))


def percentile_from_summary(value: float, mean: float, stdev: float) -> float:
    """Percentile assuming a normal distribution with the given moments."""
    return normal_cdf(z_score(value, mean, stdev))


def percentile_from_iqr(value: float, p25: float, p75: float) -> float:
    """
    Percentile from published 25th/75th percentiles.

    Under normality IQR = 2 * 0.6745 * sigma, so sigma = IQR / 1.349.
    """
    if p75 <= p25:
        return 0.5
    mean = (p25 + p75) / 2.0
    sigma = (p75 - p25) / IQR_TO_SIGMA
    return percentile_from_summary(value, mean, sigma)


def blend_with_prior(
    observed: Optional[DimensionDistribution],
    prior: Tuple[float, float],
    min_sample: int,
) -> Tuple[float, float, float]:
    """
    Blend observed moments with a prior by sample-size weight.

    Returns (mean, stdev, observed_weight) with
    observed_weight = min(1, n / min_sample), or 0 when nothing usable
    was observed.
    """
    prior_mean, prior_stdev = prior
    if observed is None or not observed.has_summary or observed.sample_size <= 0:
        return prior_mean, prior_stdev, 0.0

    weight = min(1.0, observed.sample_size / float(min_sample))
    mean = weight * observed.mean + (1.0 - weight) * prior_mean
    stdev = weight * observed.stdev + (1.0 - weight) * prior_stdev
    return mean, stdev, weight


def percentile_against_school(
    value: float,
    dimension: str,
    school: SchoolContext,
    min_sample: int,
) -> Tuple[float, str]:
    """
    Position of an applicant value among the school's admitted students.

    Fallback ladder:
      1. >= min_sample raw historical values -> empirical percentile
      2. >= min_sample summarised cases -> normal CDF on observed moments
      3. published 25th/75th (SAT/ACT) -> normal CDF via IQR
      4. otherwise -> normal CDF on the selectivity prior, re-centred on a
         published average when available and blended with any thin
         historical sample

    Returns (percentile 0-1, method).
    """
    dimension = dimension.lower()
    observed = school.historical.for_dimension(dimension)

    if observed is not None and observed.sample_size >= min_sample:
        if len(observed.values) >= min_sample:
            return empirical_percentile(value, observed.values), "empirical"
        if observed.has_summary:
            return percentile_from_summary(value, observed.mean, observed.stdev), "historical_summary"

    published = school.published_range(dimension) if dimension in ("sat", "act") else None
    if published is not None:
        return percentile_from_iqr(value, *published), "published_range"

    prior_mean, prior_stdev = school.priors[dimension]
    center_attr = _PUBLISHED_CENTER.get(dimension)
    center = getattr(school, center_attr, None) if center_attr else None
    if center is not None:
        prior_mean = float(center)

    mean, stdev, weight = blend_with_prior(observed, (prior_mean, prior_stdev), min_sample)
    method = "blended" if weight > 0 else "prior"
    return percentile_from_summary(value, mean, stdev), method


def school_reference_median(
    dimension: str,
    school: SchoolContext,
    min_sample: int,
) -> Optional[float]:
    """
    Median admitted value for a dimension, if the school has enough data.

    Historical cases are trusted at min_sample or more; otherwise published
    stats are used. Returns None when neither is available, so callers can
    stay neutral instead of judging against a generic prior.
    """
    dimension = dimension.lower()
    observed = school.historical.for_dimension(dimension)
    if observed is not None and observed.sample_size >= min_sample:
        median = observed.median
        if median is not None and not math.isnan(median):
            return median

    if dimension in ("sat", "act"):
        published = school.published_range(dimension)
        if published is not None:
            return (published[0] + published[1]) / 2.0

    center_attr = _PUBLISHED_CENTER.get(dimension)
    if center_attr:
        center = getattr(school, center_attr, None)
        if center is not None:
            return float(center)

    return None
