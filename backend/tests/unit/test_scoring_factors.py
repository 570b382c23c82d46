"""
Unit tests for scoring factors.

Tests the percentile-based Academic Fit, the Activity and Award sub-scores
and the overall score composer.
"""

import math

import pytest

from app.domain.scoring.composer import OverallScoreComposer, compose
from app.domain.scoring.config import ScoringConfig, ScoringWeights, TierThresholds
from app.domain.scoring.factors.academic_fit import (
    AcademicFitFactor,
    act_to_sat,
    toefl_adjustment,
)
from app.domain.scoring.factors.activity import (
    ActivityFactor,
    activity_strength,
    breadth_bonus,
    is_leadership,
)
from app.domain.scoring.factors.award import AwardFactor, award_points
from app.domain.scoring.interfaces import (
    Activity,
    ActivityStrength,
    Award,
    ProfileMetrics,
    SchoolMetrics,
    SubScore,
    TestScore,
)
from app.domain.scoring.normalizer import Normalizer
from app.domain.scoring.statistics import percentile_from_iqr
from app.infrastructure.exceptions import ConfigurationError


# ============== Test Fixtures ==============

@pytest.fixture
def academic_factor():
    """Academic fit factor instance."""
    return AcademicFitFactor()


@pytest.fixture
def activity_factor():
    return ActivityFactor()


@pytest.fixture
def award_factor():
    return AwardFactor()


@pytest.fixture
def sat_only_school():
    """School that publishes SAT data but nothing for ACT."""
    return SchoolMetrics(
        school_id="school-sat",
        name="SAT Only College",
        acceptance_rate=0.30,
        sat_25=1450,
        sat_75=1550,
    )


def _inputs(school, **profile_kwargs):
    profile_kwargs.setdefault("profile_id", "p1")
    return Normalizer().normalize(ProfileMetrics(**profile_kwargs), school)


def _score(factor, school, **profile_kwargs):
    inputs = _inputs(school, **profile_kwargs)
    return factor.calculate(inputs, inputs.school)


# ============== Academic Fit Tests ==============

class TestAcademicFit:
    """Tests for the percentile-based academic sub-score."""

    def test_median_applicant_scores_fifty(self, academic_factor, published_school):
        """GPA at the published median and SAT mid-range land at 50."""
        result = _score(
            academic_factor, published_school,
            gpa=3.7, test_scores=(TestScore("SAT", 1400),),
        )
        assert result.score == pytest.approx(50.0)
        assert result.signals["gpa_method"] == "prior"
        assert result.signals["test_method"] == "published_range"
        assert not result.low_confidence

    def test_gpa_alone_carries_the_score(self, academic_factor, published_school):
        result = _score(academic_factor, published_school, gpa=3.7)
        assert result.score == pytest.approx(50.0)
        assert result.signals["test_percentile"] is None

    def test_missing_academics_get_low_default(self, academic_factor, published_school):
        result = _score(academic_factor, published_school)
        assert result.score == pytest.approx(35.0)
        assert result.low_confidence is True

    def test_toefl_only_adjusts_the_default(self, academic_factor, published_school):
        result = _score(academic_factor, published_school, test_scores=(TestScore("TOEFL", 120),))
        assert result.score == pytest.approx(40.0)
        assert result.low_confidence is True

    def test_low_confidence_gpa_propagates(self, academic_factor, published_school):
        result = _score(academic_factor, published_school, gpa="3.0-3.8")
        assert result.low_confidence is True

    def test_act_converted_when_school_only_has_sat(self, academic_factor, sat_only_school):
        result = _score(academic_factor, sat_only_school, test_scores=(TestScore("ACT", 34),))
        expected = percentile_from_iqr(1520, 1450, 1550)
        assert result.signals["test_type"] == "ACT"
        assert result.signals["test_percentile"] == pytest.approx(expected)

    def test_act_compared_directly_when_school_has_act(self, academic_factor, published_school):
        result = _score(academic_factor, published_school, test_scores=(TestScore("ACT", 34),))
        assert result.signals["test_percentile"] == pytest.approx(percentile_from_iqr(34, 28, 33))

    def test_gpa_monotonicity(self, academic_factor, published_school, rich_school):
        """Higher GPA never lowers the academic score."""
        for school in (published_school, rich_school):
            previous = -1.0
            for step in range(0, 24):
                gpa = 2.0 + step * 0.1
                result = _score(academic_factor, school, gpa=gpa, test_scores=(TestScore("SAT", 1450),))
                assert result.score >= previous, (
                    f"{school.school_id}: score dropped at GPA {gpa:.1f}"
                )
                previous = result.score

    def test_score_bounds(self, academic_factor, rich_school):
        top = _score(
            academic_factor, rich_school,
            gpa=4.3, test_scores=(TestScore("SAT", 1600), TestScore("TOEFL", 120)),
        )
        bottom = _score(
            academic_factor, rich_school,
            gpa=1.0, test_scores=(TestScore("SAT", 600), TestScore("TOEFL", 60)),
        )
        assert top.score == pytest.approx(100.0)
        assert bottom.score == pytest.approx(0.0)


class TestAcademicHelpers:
    """Tests for the concordance and TOEFL adjustment."""

    @pytest.mark.parametrize("act,sat", [(36, 1600), (34, 1520), (30, 1390), (34.4, 1520)])
    def test_act_to_sat(self, act, sat):
        assert act_to_sat(act) == sat

    def test_act_below_table_extrapolates(self):
        assert act_to_sat(10) == 680

    @pytest.mark.parametrize(
        "toefl,expected",
        [(None, 0.0), (100, 0.0), (104, 1.0), (120, 5.0), (80, -5.0), (60, -5.0)],
    )
    def test_toefl_adjustment(self, toefl, expected):
        assert toefl_adjustment(toefl) == pytest.approx(expected)


# ============== Activity Tests ==============

class TestActivityFactor:
    """Tests for the activity sub-score."""

    def test_no_activities_is_low_default(self, activity_factor, thin_school):
        result = _score(activity_factor, thin_school)
        assert result.score == pytest.approx(30.0)
        assert result.low_confidence is True

    def test_point_table(self, activity_factor, strong_profile, thin_school):
        """3 items + 1 leader + 1 deep + 3 categories = 20 + 9 + 5 + 5 + 5."""
        inputs = Normalizer().normalize(strong_profile, thin_school)
        result = activity_factor.calculate(inputs, inputs.school)
        assert result.score == pytest.approx(44.0)
        assert result.signals == {
            "count": 3,
            "leadership_count": 1,
            "deep_count": 1,
            "category_count": 3,
        }

    def test_caps_apply(self, activity_factor, thin_school):
        categories = ["Sports", "Music", "Science", "Art", "Service", "Debate"]
        activities = tuple(
            Activity(
                category=categories[i % len(categories)],
                role="President" if i < 5 else "Member",
                hours_per_week=10 if i < 5 else 1,
                weeks_per_year=30,
            )
            for i in range(12)
        )
        result = _score(activity_factor, thin_school, activities=activities)
        assert result.score == pytest.approx(90.0)

    def test_more_activities_never_lower_the_score(self, activity_factor, thin_school):
        previous = -1.0
        for count in range(1, 15):
            activities = tuple(Activity(category="Club") for _ in range(count))
            result = _score(activity_factor, thin_school, activities=activities)
            assert result.score >= previous
            previous = result.score

    @pytest.mark.parametrize(
        "activity,expected",
        [
            (Activity(category="Club", role="Club President"), True),
            (Activity(category="Club", role="TEAM CAPTAIN"), True),
            (Activity(category="Club", role="Member", is_leadership=True), True),
            (Activity(category="Club", role="社长"), True),
            (Activity(category="Club", role="Member"), False),
            (Activity(category="Club"), False),
        ],
    )
    def test_is_leadership(self, activity, expected):
        assert is_leadership(activity) is expected

    @pytest.mark.parametrize("count,bonus", [(0, 0.0), (2, 0.0), (3, 5.0), (4, 5.0), (5, 10.0), (8, 10.0)])
    def test_breadth_bonus(self, count, bonus):
        assert breadth_bonus(count) == bonus

    @pytest.mark.parametrize(
        "score,expected",
        [
            (65.0, ActivityStrength.STRONG),
            (64.9, ActivityStrength.AVERAGE),
            (45.0, ActivityStrength.AVERAGE),
            (44.9, ActivityStrength.WEAK),
        ],
    )
    def test_activity_strength(self, score, expected):
        assert activity_strength(score) == expected


# ============== Award Tests ==============

class TestAwardFactor:
    """Tests for the award sub-score."""

    def test_no_awards_is_low_default(self, award_factor, thin_school):
        result = _score(award_factor, thin_school)
        assert result.score == pytest.approx(20.0)
        assert result.low_confidence is True

    def test_single_top_tier_award_lands_mid_range(self, award_factor, thin_school):
        result = _score(award_factor, thin_school, awards=(Award(name="IMO Gold", tier=5),))
        assert result.score == pytest.approx(50.0)

    def test_square_root_dampening(self, award_factor, strong_profile, thin_school):
        inputs = Normalizer().normalize(strong_profile, thin_school)
        result = award_factor.calculate(inputs, inputs.school)
        assert result.signals["total_points"] == pytest.approx(23.0)
        assert result.score == pytest.approx(10 * math.sqrt(23))

    def test_score_is_capped(self, award_factor, thin_school):
        awards = tuple(Award(name=f"Olympiad {i}", tier=5) for i in range(5))
        result = _score(award_factor, thin_school, awards=awards)
        assert result.score == pytest.approx(100.0)

    @pytest.mark.parametrize(
        "award,points",
        [
            (Award(level="SCHOOL", tier=5), 25.0),
            (Award(level="NATIONAL"), 15.0),
            (Award(level="international"), 20.0),
            (Award(level="CLUB"), 3.0),
            (Award(), 3.0),
            (Award(tier=9, level="STATE"), 8.0),
        ],
    )
    def test_award_points(self, award, points):
        assert award_points(award) == points


# ============== Composer Tests ==============

class TestComposer:
    """Tests for the weighted overall score."""

    def test_default_weights(self):
        assert compose(80, 60, 40, ScoringWeights()) == pytest.approx(66.0)

    def test_overall_stays_in_range(self):
        weights = ScoringWeights()
        assert compose(100, 100, 100, weights) == pytest.approx(100.0)
        assert compose(0, 0, 0, weights) == pytest.approx(0.0)

    def test_breakdown_lists_low_confidence_subscores(self):
        composer = OverallScoreComposer()
        breakdown = composer.compose(
            SubScore(name="academic", score=70.0),
            SubScore(name="activity", score=30.0, low_confidence=True),
            SubScore(name="award", score=20.0, low_confidence=True),
        )
        assert breakdown.overall == pytest.approx(35.0 + 9.0 + 4.0)
        assert breakdown.low_confidence == ("activity", "award")

    def test_custom_weights(self):
        composer = OverallScoreComposer(ScoringWeights(academic=1.0, activity=0.0, award=0.0))
        breakdown = composer.compose(
            SubScore(name="academic", score=70.0),
            SubScore(name="activity", score=30.0),
            SubScore(name="award", score=20.0),
        )
        assert breakdown.overall == pytest.approx(70.0)


class TestScoringConfigValidation:
    """Bad configuration fails at construction, never per request."""

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ConfigurationError):
            ScoringWeights(academic=0.6, activity=0.3, award=0.2)

    def test_weights_must_be_non_negative(self):
        with pytest.raises(ConfigurationError):
            ScoringWeights(academic=1.2, activity=-0.2, award=0.0)

    def test_tier_thresholds_must_be_ordered(self):
        with pytest.raises(ConfigurationError):
            TierThresholds(reach_below=0.6, match_below=0.25)

    def test_academic_split_must_sum_to_one(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig(academic_gpa_weight=0.7, academic_test_weight=0.45)

    def test_partial_sample_cannot_exceed_full_sample(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig(min_historical_sample=5, min_partial_sample=10)
