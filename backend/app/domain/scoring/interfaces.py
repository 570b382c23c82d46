"""
Scoring Interfaces for the Admission Probability Engine

Defines protocols and data models for the scoring engine.
Inputs are read-only snapshots owned by external profile/school services;
everything derived here is immutable once produced.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple, Union, Mapping, Protocol, runtime_checkable

import numpy as np

from app.domain.scoring.constants import PRIMARY_TEST_PREFERENCE

# A raw score may arrive as a number, a "1500-1550" range string, or be absent
RawScore = Union[float, int, str, None]


class Tier(str, Enum):
    """Classification of a school relative to the applicant's probability."""
    REACH = "reach"
    MATCH = "match"
    SAFETY = "safety"


class Confidence(str, Enum):
    """How much data backed a prediction."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Impact(str, Enum):
    """Direction in which a factor moves the prediction."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ActivityStrength(str, Enum):
    WEAK = "weak"
    AVERAGE = "average"
    STRONG = "strong"


class SchoolDataQuality(str, Enum):
    """Volume of admissions data available for a school."""
    RICH = "rich"  # overall-score sample >= MIN_HISTORICAL_SAMPLE
    PARTIAL = "partial"  # some historical cases or published ranges
    THIN = "thin"  # acceptance rate / rank only


# =============================================================================
# INPUT SNAPSHOTS
# =============================================================================

@dataclass(frozen=True)
class TestScore:
    """A type-tagged standardized test result (SAT, ACT, TOEFL)."""
    __test__ = False

    type: str
    score: RawScore = None


@dataclass(frozen=True)
class Activity:
    """One extracurricular activity."""
    category: str
    role: str = ""
    is_leadership: bool = False
    hours_per_week: Optional[float] = None
    weeks_per_year: Optional[float] = None

    @property
    def total_hours(self) -> float:
        return (self.hours_per_week or 0.0) * (self.weeks_per_year or 0.0)


@dataclass(frozen=True)
class Award:
    """One award; tier is the linked competition's tier (1-5) when known."""
    name: str = ""
    level: Optional[str] = None
    tier: Optional[int] = None


@dataclass(frozen=True)
class ProfileMetrics:
    """
    Applicant profile snapshot.

    Missing fields stay None / empty: absence is a valid state and is never
    treated as a zero score.
    """
    profile_id: str
    gpa: RawScore = None
    gpa_scale: float = 4.0
    test_scores: Tuple[TestScore, ...] = ()
    activities: Tuple[Activity, ...] = ()
    awards: Tuple[Award, ...] = ()


@dataclass(frozen=True)
class DimensionDistribution:
    """
    Admitted-student distribution for one dimension (GPA, SAT, overall...).

    Either raw sorted values from historical cases, or summary statistics
    when only aggregates are available.
    """
    values: Tuple[float, ...] = ()
    mean: Optional[float] = None
    stdev: Optional[float] = None
    sample_size: int = 0

    @classmethod
    def from_values(cls, values) -> "DimensionDistribution":
        """Build from raw case values (sorted, with summary stats filled in)."""
        cleaned = sorted(float(v) for v in values if v is not None)
        if not cleaned:
            return cls()

        array = np.asarray(cleaned, dtype=float)
        stdev = float(array.std(ddof=1)) if len(cleaned) > 1 else None
        return cls(
            values=tuple(cleaned),
            mean=float(array.mean()),
            stdev=stdev,
            sample_size=len(cleaned),
        )

    @property
    def has_summary(self) -> bool:
        return self.mean is not None and self.stdev is not None and self.stdev > 0

    @property
    def median(self) -> Optional[float]:
        if self.values:
            return float(np.median(self.values))
        return self.mean


@dataclass(frozen=True)
class HistoricalDistribution:
    """Historical admitted-applicant data for one school."""
    sample_size: int = 0
    gpa: Optional[DimensionDistribution] = None
    sat: Optional[DimensionDistribution] = None
    act: Optional[DimensionDistribution] = None
    toefl: Optional[DimensionDistribution] = None
    overall: Optional[DimensionDistribution] = None

    def for_dimension(self, dimension: str) -> Optional[DimensionDistribution]:
        return getattr(self, dimension.lower(), None)


@dataclass(frozen=True)
class SchoolMetrics:
    """
    School snapshot.

    acceptance_rate is a fraction (0.04 = 4%); larger values are read as
    percentages by the normalizer.
    """
    school_id: str
    name: str = ""
    acceptance_rate: Optional[float] = None
    us_news_rank: Optional[int] = None
    median_gpa: Optional[float] = None
    sat_avg: Optional[float] = None
    sat_25: Optional[float] = None
    sat_75: Optional[float] = None
    act_avg: Optional[float] = None
    act_25: Optional[float] = None
    act_75: Optional[float] = None
    historical: Optional[HistoricalDistribution] = None


# =============================================================================
# NORMALIZED VIEW
# =============================================================================

@dataclass(frozen=True)
class NormalizedValue:
    """
    A canonical numeric signal.

    value is None when the input was missing or unusable ("unknown").
    width > 0 when the value came from a range string.
    """
    value: Optional[float] = None
    low_confidence: bool = False
    width: float = 0.0

    @property
    def is_known(self) -> bool:
        return self.value is not None

    @property
    def is_reliable(self) -> bool:
        return self.value is not None and not self.low_confidence


UNKNOWN = NormalizedValue()


@dataclass(frozen=True)
class SchoolContext:
    """
    Normalized view of a school for scoring.

    priors holds the generic (mean, stdev) per dimension for the school's
    selectivity tier.
    """
    school_id: str
    name: str
    acceptance_rate: Optional[float]
    us_news_rank: Optional[int]
    selectivity_tier: str
    priors: Mapping[str, Tuple[float, float]]
    data_quality: SchoolDataQuality
    historical: HistoricalDistribution
    median_gpa: Optional[float] = None
    sat_avg: Optional[float] = None
    sat_25: Optional[float] = None
    sat_75: Optional[float] = None
    act_avg: Optional[float] = None
    act_25: Optional[float] = None
    act_75: Optional[float] = None

    @property
    def sample_size(self) -> int:
        return self.historical.sample_size

    def published_range(self, dimension: str) -> Optional[Tuple[float, float]]:
        """Published 25th/75th percentiles for SAT or ACT, if both are known."""
        dimension = dimension.lower()
        low = getattr(self, f"{dimension}_25", None)
        high = getattr(self, f"{dimension}_75", None)
        if low is None or high is None or high <= low:
            return None
        return float(low), float(high)


@dataclass(frozen=True)
class NormalizedInputs:
    """Canonical applicant signals paired with the school context."""
    profile_id: str
    gpa: NormalizedValue
    tests: Mapping[str, NormalizedValue]
    activities: Tuple[Activity, ...]
    awards: Tuple[Award, ...]
    school: SchoolContext

    def test(self, test_type: str) -> NormalizedValue:
        return self.tests.get(test_type.upper(), UNKNOWN)

    @property
    def primary_test_type(self) -> Optional[str]:
        """SAT if known, else ACT, else None."""
        for test_type in PRIMARY_TEST_PREFERENCE:
            if self.test(test_type).is_known:
                return test_type
        return None

    @property
    def missing_dimensions(self) -> List[str]:
        missing = []
        if not self.gpa.is_known:
            missing.append("gpa")
        if self.primary_test_type is None:
            missing.append("test")
        if not self.activities:
            missing.append("activities")
        if not self.awards:
            missing.append("awards")
        return missing


# =============================================================================
# DERIVED RESULTS
# =============================================================================

@dataclass(frozen=True)
class SubScore:
    """
    Output of one sub-score calculator.

    signals carries intermediate values (percentiles, counts) the explainer
    reuses instead of recomputing.
    """
    name: str
    score: float
    low_confidence: bool = False
    signals: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Transparent breakdown of the competitiveness score.

    Each sub-score is in [0, 100]; overall is their convex combination.
    """
    academic: float = 0.0
    activity: float = 0.0
    award: float = 0.0
    overall: float = 0.0
    low_confidence: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for API response."""
        return {
            "academic": round(self.academic, 1),
            "activity": round(self.activity, 1),
            "award": round(self.award, 1),
            "overall": round(self.overall, 1),
        }


@dataclass(frozen=True)
class ProbabilityEstimate:
    """Probability plus how it was derived."""
    probability: float
    method: str
    z_score: Optional[float] = None
    mean: Optional[float] = None
    stdev: Optional[float] = None
    floor: Optional[float] = None
    ceiling: Optional[float] = None


@dataclass(frozen=True)
class PredictionFactor:
    """One explained driver of the prediction."""
    name: str
    impact: Impact
    weight: float
    detail: str
    improvement: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "impact": self.impact.value,
            "weight": round(self.weight, 3),
            "detail": self.detail,
        }
        if self.improvement is not None:
            data["improvement"] = self.improvement
        return data


@dataclass(frozen=True)
class PredictionComparison:
    """Applicant vs. the school's admitted-student distribution."""
    gpa_percentile: Optional[int]
    test_score_percentile: Optional[int]
    activity_strength: ActivityStrength

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gpa_percentile": self.gpa_percentile,
            "test_score_percentile": self.test_score_percentile,
            "activity_strength": self.activity_strength.value,
        }


@dataclass(frozen=True)
class PredictionResult:
    """
    Final per-school prediction.

    Immutable: cache hits are returned as copies with from_cache set.
    """
    school_id: str
    school_name: str
    probability: float
    confidence: Confidence
    tier: Tier
    factors: Tuple[PredictionFactor, ...]
    comparison: PredictionComparison
    breakdown: ScoreBreakdown
    suggestions: Tuple[str, ...] = ()
    engine_version: str = ""
    from_cache: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response format."""
        return {
            "school_id": self.school_id,
            "school_name": self.school_name,
            "probability": round(self.probability, 4),
            "confidence": self.confidence.value,
            "tier": self.tier.value,
            "factors": [f.to_dict() for f in self.factors],
            "comparison": self.comparison.to_dict(),
            "score_breakdown": self.breakdown.to_dict(),
            "suggestions": list(self.suggestions),
            "engine_version": self.engine_version,
            "from_cache": self.from_cache,
        }


# =============================================================================
# FACTOR PROTOCOL
# =============================================================================

@runtime_checkable
class ScoringFactor(Protocol):
    """
    Protocol for sub-score calculators.

    Each factor turns normalized inputs into a 0-100 score. Implementations
    must be pure so they can run concurrently without shared state.
    """

    @property
    def name(self) -> str:
        """Factor name for transparency."""
        ...

    def calculate(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext
    ) -> SubScore:
        """
        Calculate score for this factor.

        Returns: SubScore with score from 0-100
        """
        ...


class BaseScoringFactor(ABC):
    """Base class for sub-score calculators with common functionality."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def calculate(
        self,
        inputs: NormalizedInputs,
        school: SchoolContext
    ) -> SubScore:
        pass

    @staticmethod
    def clamp(score: float, low: float = 0.0, high: float = 100.0) -> float:
        return max(low, min(high, score))
