"""
Normalizer

Turns raw profile and school snapshots into canonical numeric signals.

Never raises: missing or malformed fields become an explicit unknown
(NormalizedValue(value=None)) and questionable values are kept but flagged
low-confidence.
"""

import math
import re
from typing import Dict, Optional, Tuple

from app.domain.scoring import constants
from app.domain.scoring.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from app.domain.scoring.interfaces import (
    HistoricalDistribution,
    NormalizedInputs,
    NormalizedValue,
    ProfileMetrics,
    RawScore,
    SchoolContext,
    SchoolDataQuality,
    SchoolMetrics,
    UNKNOWN,
)

_RANGE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[-–~]\s*(\d+(?:\.\d+)?)\s*$")
_NUMBER_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


def parse_range(text: str) -> Optional[Tuple[float, float]]:
    """
    Parse "1500-1550" style strings.

    Returns (midpoint, width), or None when the string is malformed.
    A bare number parses with width 0; reversed bounds are accepted.
    """
    if not isinstance(text, str):
        return None

    match = _RANGE_PATTERN.match(text)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        if low > high:
            low, high = high, low
        return (low + high) / 2.0, high - low

    match = _NUMBER_PATTERN.match(text)
    if match:
        return float(match.group(1)), 0.0

    return None


def coerce_score(raw: RawScore) -> Optional[Tuple[float, float]]:
    """Read a raw numeric/range value as (point, width); None if unusable."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        return parse_range(raw)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value, 0.0


def normalize_gpa(raw: RawScore, scale: Optional[float]) -> NormalizedValue:
    """
    Rescale a GPA to the 4.0 scale.

    Supported scales (4.0, 5.0, 100) rescale linearly. Any other positive
    scale is rescaled the same way but flagged low-confidence. The result
    is clamped to [0, MAX_NORMALIZED_GPA]; values outside the sanity window
    are flagged rather than dropped.
    """
    parsed = coerce_score(raw)
    if parsed is None:
        return UNKNOWN

    point, width = parsed
    low_confidence = False

    try:
        scale_value = float(scale) if scale is not None else constants.TARGET_GPA_SCALE
    except (TypeError, ValueError):
        scale_value = constants.TARGET_GPA_SCALE
        low_confidence = True

    if scale_value <= 0 or math.isnan(scale_value):
        scale_value = constants.TARGET_GPA_SCALE
        low_confidence = True
    elif scale_value not in constants.SUPPORTED_GPA_SCALES:
        low_confidence = True

    factor = constants.TARGET_GPA_SCALE / scale_value
    rescaled = point * factor
    rescaled_width = width * factor

    window_low, window_high = constants.GPA_SANITY_WINDOW
    if rescaled < window_low or rescaled > window_high:
        low_confidence = True

    if rescaled_width > constants.MAX_CONFIDENT_RANGE_WIDTH["GPA"]:
        low_confidence = True

    clamped = max(0.0, min(constants.MAX_NORMALIZED_GPA, rescaled))
    return NormalizedValue(value=clamped, low_confidence=low_confidence, width=rescaled_width)


def normalize_test_score(test_type: str, raw: RawScore) -> NormalizedValue:
    """Validate a test score against its scale; out-of-scale values are unknown."""
    test_type = (test_type or "").upper()
    bounds = constants.TEST_SCORE_BOUNDS.get(test_type)
    parsed = coerce_score(raw)
    if bounds is None or parsed is None:
        return UNKNOWN

    point, width = parsed
    low, high = bounds
    if point < low or point > high:
        return UNKNOWN

    low_confidence = width > constants.MAX_CONFIDENT_RANGE_WIDTH[test_type]
    return NormalizedValue(value=point, low_confidence=low_confidence, width=width)


def normalize_acceptance_rate(raw: Optional[float]) -> Optional[float]:
    """Fraction in [0, 1]; values above 1 are read as percentages."""
    if raw is None:
        return None
    try:
        rate = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(rate) or rate < 0:
        return None
    if rate > 1.0:
        rate = rate / 100.0
    if rate > 1.0:
        return None
    return rate


def resolve_selectivity_tier(
    acceptance_rate: Optional[float],
    us_news_rank: Optional[int],
) -> str:
    """Selectivity tier from acceptance rate, else rank, else the default."""
    if acceptance_rate is not None:
        for max_rate, tier in constants.SELECTIVITY_BY_ACCEPTANCE:
            if acceptance_rate < max_rate:
                return tier

    if us_news_rank is not None and us_news_rank > 0:
        for max_rank, tier in constants.SELECTIVITY_BY_RANK:
            if us_news_rank <= max_rank:
                return tier
        return "open"

    return constants.DEFAULT_SELECTIVITY_TIER


def assess_school_data_quality(
    school: SchoolMetrics,
    historical: HistoricalDistribution,
    min_historical_sample: int,
    min_partial_sample: int,
) -> SchoolDataQuality:
    """
    RICH when the overall-score distribution the probability mapper reads
    is full, PARTIAL with some data, else THIN.

    Cases without an overall score still count towards PARTIAL but never
    make a school RICH.
    """
    overall = historical.overall
    if (
        overall is not None
        and overall.sample_size >= min_historical_sample
        and overall.has_summary
    ):
        return SchoolDataQuality.RICH

    has_published = (
        school.median_gpa is not None
        or (school.sat_25 is not None and school.sat_75 is not None)
        or (school.act_25 is not None and school.act_75 is not None)
    )
    if historical.sample_size >= min_partial_sample or has_published:
        return SchoolDataQuality.PARTIAL

    return SchoolDataQuality.THIN


class Normalizer:
    """
    Canonicalizes applicant and school inputs.

    Stateless apart from the immutable config; safe to share across threads.
    """

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self._config = config

    def normalize(self, profile: ProfileMetrics, school: SchoolMetrics) -> NormalizedInputs:
        """Build the canonical inputs for one (profile, school) pair."""
        return NormalizedInputs(
            profile_id=profile.profile_id,
            gpa=normalize_gpa(profile.gpa, profile.gpa_scale),
            tests=self._normalize_tests(profile),
            activities=tuple(profile.activities or ()),
            awards=tuple(profile.awards or ()),
            school=self.normalize_school(school),
        )

    def normalize_school(self, school: SchoolMetrics) -> SchoolContext:
        acceptance_rate = normalize_acceptance_rate(school.acceptance_rate)
        tier = resolve_selectivity_tier(acceptance_rate, school.us_news_rank)
        historical = school.historical or HistoricalDistribution()

        return SchoolContext(
            school_id=school.school_id,
            name=school.name,
            acceptance_rate=acceptance_rate,
            us_news_rank=school.us_news_rank,
            selectivity_tier=tier,
            priors=constants.SELECTIVITY_PRIORS[tier],
            data_quality=assess_school_data_quality(
                school,
                historical,
                self._config.min_historical_sample,
                self._config.min_partial_sample,
            ),
            historical=historical,
            median_gpa=school.median_gpa,
            sat_avg=school.sat_avg,
            sat_25=school.sat_25,
            sat_75=school.sat_75,
            act_avg=school.act_avg,
            act_25=school.act_25,
            act_75=school.act_75,
        )

    def _normalize_tests(self, profile: ProfileMetrics) -> Dict[str, NormalizedValue]:
        """
        Normalize test scores by type.

        When a type appears more than once the highest known score wins;
        unrecognised test types are ignored.
        """
        tests: Dict[str, NormalizedValue] = {}
        for test in profile.test_scores or ():
            test_type = (test.type or "").upper()
            if test_type not in constants.TEST_SCORE_BOUNDS:
                continue

            normalized = normalize_test_score(test_type, test.score)
            current = tests.get(test_type)
            if current is None or not current.is_known:
                tests[test_type] = normalized
            elif normalized.is_known and normalized.value > current.value:
                tests[test_type] = normalized
        return tests
