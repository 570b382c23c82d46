"""
Scoring Engine Constants

Named point tables, thresholds and defaults used by the admission engine.
Treat the numbers as tunable defaults; per-environment overrides go through
ScoringConfig (see app.domain.scoring.config).
"""

from typing import Dict, Tuple

ENGINE_VERSION = "stats-v2"

# =============================================================================
# GPA NORMALIZATION
# =============================================================================

SUPPORTED_GPA_SCALES: Tuple[float, ...] = (4.0, 5.0, 100.0)
TARGET_GPA_SCALE = 4.0

# Weighted GPAs may overshoot 4.0
MAX_NORMALIZED_GPA = 4.3

# Rescaled GPA outside this window is kept but flagged low-confidence
GPA_SANITY_WINDOW: Tuple[float, float] = (0.5, 4.3)

# =============================================================================
# STANDARDIZED TESTS
# =============================================================================

TEST_SCORE_BOUNDS: Dict[str, Tuple[float, float]] = {
    "SAT": (400.0, 1600.0),
    "ACT": (1.0, 36.0),
    "TOEFL": (0.0, 120.0),
}

# A range wider than this is too uncertain to trust at full confidence
MAX_CONFIDENT_RANGE_WIDTH: Dict[str, float] = {
    "GPA": 0.3,
    "SAT": 100.0,
    "ACT": 3.0,
    "TOEFL": 10.0,
}

# Primary tests in order of preference for the academic sub-score
PRIMARY_TEST_PREFERENCE: Tuple[str, ...] = ("SAT", "ACT")

# Concordance used when a school only publishes SAT data
ACT_TO_SAT: Dict[int, int] = {
    36: 1600, 35: 1560, 34: 1520, 33: 1490,
    32: 1450, 31: 1420, 30: 1390, 29: 1350,
    28: 1310, 27: 1280, 26: 1240, 25: 1210,
    24: 1180, 23: 1140, 22: 1110, 21: 1080,
    20: 1040, 19: 1010, 18: 970, 17: 930,
    16: 890, 15: 850, 14: 800, 13: 760,
}

# =============================================================================
# ACADEMIC SUB-SCORE
# =============================================================================

ACADEMIC_GPA_WEIGHT = 0.55
ACADEMIC_TEST_WEIGHT = 0.45

# TOEFL acts as a threshold-style adjustment: 100 = 0, 120 = +5, 80 = -5
TOEFL_BASELINE = 100.0
TOEFL_POINTS_PER_ADJUSTMENT = 4.0
TOEFL_MAX_ADJUSTMENT = 5.0

ACADEMIC_MISSING_SCORE = 35.0

# =============================================================================
# ACTIVITY SUB-SCORE
# =============================================================================

ACTIVITY_BASE_SCORE = 20.0
ACTIVITY_POINTS_PER_ITEM = 3.0
ACTIVITY_COUNT_CAP = 30.0
LEADERSHIP_POINTS_PER_ITEM = 5.0
LEADERSHIP_CAP = 15.0
DEEP_ACTIVITY_HOURS = 200.0
DEPTH_POINTS_PER_ITEM = 5.0
DEPTH_CAP = 15.0

# (minimum distinct categories, bonus), checked from the top
BREADTH_BONUSES: Tuple[Tuple[int, float], ...] = ((5, 10.0), (3, 5.0))

ACTIVITY_MISSING_SCORE = 30.0

# Case-insensitive substring match against the activity role
LEADERSHIP_KEYWORDS: Tuple[str, ...] = (
    "president",
    "founder",
    "co-founder",
    "captain",
    "director",
    "head",
    "chair",
    "editor-in-chief",
    "lead",
    "社长",
    "主席",
    "队长",
    "创始人",
    "负责人",
)

# Activity sub-score -> comparison label
ACTIVITY_STRONG_THRESHOLD = 65.0
ACTIVITY_AVERAGE_THRESHOLD = 45.0

# =============================================================================
# AWARD SUB-SCORE
# =============================================================================

# Competition tier (5 = IMO/ISEF level, 1 = school-wide contests)
TIER_POINTS: Dict[int, float] = {
    5: 25.0,
    4: 15.0,
    3: 8.0,
    2: 4.0,
    1: 2.0,
}

# Used when the award is not linked to a ranked competition
LEVEL_POINTS: Dict[str, float] = {
    "INTERNATIONAL": 20.0,
    "NATIONAL": 15.0,
    "STATE": 8.0,
    "REGIONAL": 5.0,
    "SCHOOL": 2.0,
}

DEFAULT_AWARD_POINTS = 3.0

# score = scale * sqrt(total points); one tier-5 award lands at 50
AWARD_SCORE_SCALE = 10.0

AWARD_MISSING_SCORE = 20.0
AWARD_STRONG_THRESHOLD = 50.0
AWARD_WEAK_THRESHOLD = 25.0

# =============================================================================
# OVERALL SCORE
# =============================================================================

DEFAULT_SCORING_WEIGHTS: Dict[str, float] = {
    "academic": 0.5,
    "activity": 0.3,
    "award": 0.2,
}

WEIGHT_SUM_TOLERANCE = 1e-9

# =============================================================================
# PROBABILITY MAPPING
# =============================================================================

MIN_HISTORICAL_SAMPLE = 30
MIN_PARTIAL_SAMPLE = 10

MIN_PROBABILITY = 0.01
MAX_PROBABILITY = 0.99

# Sparse-data fallback: each +10 points multiplies the base rate by 1.2
FALLBACK_SCORE_PIVOT = 50.0
FALLBACK_MULTIPLIER_PER_10 = 1.2
DEFAULT_ACCEPTANCE_RATE = 0.30

# Acceptance-rate bounds: floor = rate * 0.5, ceiling = rate * 3 + 0.15
SELECTIVITY_FLOOR_MULTIPLIER = 0.5
SELECTIVITY_CEILING_MULTIPLIER = 3.0
SELECTIVITY_CEILING_OFFSET = 0.15

# =============================================================================
# TIER CLASSIFICATION
# =============================================================================

REACH_UPPER_BOUND = 0.25
MATCH_UPPER_BOUND = 0.60

# =============================================================================
# CONFIDENCE
# =============================================================================

HIGH_CONFIDENCE_MIN_COMPLETENESS = 3.5
LOW_CONFIDENCE_MAX_COMPLETENESS = 2.0

# =============================================================================
# SELECTIVITY PRIORS
# =============================================================================

# (max acceptance rate, tier name), checked in order
SELECTIVITY_BY_ACCEPTANCE: Tuple[Tuple[float, str], ...] = (
    (0.10, "most_selective"),
    (0.25, "highly_selective"),
    (0.50, "selective"),
    (0.75, "moderately_selective"),
    (1.01, "open"),
)

# (max US News rank, tier name), used when acceptance rate is unknown
SELECTIVITY_BY_RANK: Tuple[Tuple[int, str], ...] = (
    (20, "most_selective"),
    (50, "highly_selective"),
    (100, "selective"),
    (200, "moderately_selective"),
)

# Generic admitted-student distributions per selectivity tier:
# (mean, stdev) for GPA, SAT, ACT, TOEFL and the overall admit score,
# plus a representative acceptance rate.
SELECTIVITY_PRIORS: Dict[str, Dict[str, Tuple[float, float]]] = {
    "most_selective": {
        "gpa": (3.92, 0.10),
        "sat": (1530.0, 50.0),
        "act": (34.5, 1.2),
        "toefl": (110.0, 5.0),
        "overall": (72.0, 8.0),
        "acceptance_rate": (0.06, 0.0),
    },
    "highly_selective": {
        "gpa": (3.82, 0.15),
        "sat": (1450.0, 70.0),
        "act": (32.5, 2.0),
        "toefl": (105.0, 6.0),
        "overall": (65.0, 9.0),
        "acceptance_rate": (0.17, 0.0),
    },
    "selective": {
        "gpa": (3.65, 0.25),
        "sat": (1340.0, 100.0),
        "act": (29.5, 2.5),
        "toefl": (100.0, 7.0),
        "overall": (58.0, 10.0),
        "acceptance_rate": (0.38, 0.0),
    },
    "moderately_selective": {
        "gpa": (3.45, 0.30),
        "sat": (1210.0, 120.0),
        "act": (26.0, 3.0),
        "toefl": (90.0, 8.0),
        "overall": (50.0, 11.0),
        "acceptance_rate": (0.62, 0.0),
    },
    "open": {
        "gpa": (3.20, 0.40),
        "sat": (1090.0, 140.0),
        "act": (22.5, 3.5),
        "toefl": (80.0, 9.0),
        "overall": (43.0, 12.0),
        "acceptance_rate": (0.85, 0.0),
    },
}

# Tier assumed when neither acceptance rate nor rank is known
DEFAULT_SELECTIVITY_TIER = "selective"

# Normal distribution: IQR = 2 * 0.6745 * sigma
IQR_TO_SIGMA = 1.349
