"""
Unit tests for the repositories and their row mappers.

The mappers are pure, so SQLModel rows are built in memory; repository
lookups run against a mocked AsyncSession.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.infrastructure.db.database import to_async_url
from app.infrastructure.db.models import (
    ActivityRecord,
    AdmissionCase,
    AwardRecord,
    Profile,
    School,
    TestScoreRecord,
)
from app.infrastructure.db.repositories import (
    ProfileRepository,
    SchoolRepository,
    cases_to_distribution,
    profile_to_metrics,
    school_to_metrics,
)
from app.infrastructure.exceptions import NotFoundError


class TestProfileToMetrics:

    def test_maps_children_sorted_by_id(self):
        profile = Profile(id="p1", gpa=3.8, gpa_scale=4.0)
        tests = [
            TestScoreRecord(id="t2", profile_id="p1", type="toefl", score=108),
            TestScoreRecord(id="t1", profile_id="p1", type="SAT", score=1500),
        ]
        activities = [
            ActivityRecord(id="a2", profile_id="p1", category="Music", role="Violinist"),
            ActivityRecord(id="a1", profile_id="p1", category="Sports", role="Captain", is_leadership=True),
        ]
        awards = [
            AwardRecord(id="w1", profile_id="p1", name="IMO", level="INTERNATIONAL", competition_id="c1"),
            AwardRecord(id="w2", profile_id="p1", name="Debate", level="STATE"),
        ]

        metrics = profile_to_metrics(profile, tests, activities, awards, {"c1": 5})

        assert metrics.profile_id == "p1"
        assert metrics.gpa == 3.8
        assert [t.type for t in metrics.test_scores] == ["SAT", "TOEFL"]
        assert [a.category for a in metrics.activities] == ["Sports", "Music"]
        assert metrics.activities[0].is_leadership is True
        assert metrics.awards[0].tier == 5
        assert metrics.awards[1].tier is None

    def test_row_order_does_not_change_snapshot(self):
        profile = Profile(id="p1", gpa=3.8)
        tests = [
            TestScoreRecord(id="t1", profile_id="p1", type="SAT", score=1500),
            TestScoreRecord(id="t2", profile_id="p1", type="ACT", score=33),
        ]
        forward = profile_to_metrics(profile, tests, [], [])
        backward = profile_to_metrics(profile, list(reversed(tests)), [], [])
        assert forward == backward

    def test_missing_scale_defaults_to_four(self):
        metrics = profile_to_metrics(Profile(id="p1", gpa=None, gpa_scale=None), [], [], [])
        assert metrics.gpa is None
        assert metrics.gpa_scale == 4.0


class TestSchoolToMetrics:

    def test_maps_published_stats(self):
        school = School(
            id="s1",
            name="Example University",
            acceptance_rate=12.0,
            us_news_rank=25,
            median_gpa=3.9,
            sat_25=1450,
            sat_75=1560,
        )
        metrics = school_to_metrics(school)
        assert metrics.school_id == "s1"
        assert metrics.acceptance_rate == pytest.approx(0.12)
        assert (metrics.sat_25, metrics.sat_75) == (1450, 1560)
        assert metrics.act_25 is None
        assert metrics.historical is None

    def test_sub_one_percent_rate_stays_below_one_percent(self):
        metrics = school_to_metrics(School(id="s1", name="Example", acceptance_rate=0.8))
        assert metrics.acceptance_rate == pytest.approx(0.008)

    def test_missing_rate(self):
        assert school_to_metrics(School(id="s1", name="Example")).acceptance_rate is None


class TestCasesToDistribution:

    def _case(self, case_id, result="ADMITTED", **kwargs):
        return AdmissionCase(id=case_id, school_id="s1", result=result, **kwargs)

    def test_uses_admitted_midpoints(self):
        cases = [
            self._case("c1", gpa_range="3.8-4.0", sat_range="1500-1550", overall_score=72.0),
            self._case("c2", gpa_range="3.9", sat_range="1450-1500", overall_score=68.0),
            self._case("c3", result="REJECTED", gpa_range="3.0-3.2", overall_score=40.0),
        ]
        distribution = cases_to_distribution(cases)

        assert distribution.sample_size == 2
        assert distribution.gpa.values == pytest.approx((3.9, 3.9))
        assert distribution.sat.values == (1475.0, 1525.0)
        assert distribution.overall.mean == pytest.approx(70.0)
        assert distribution.act is None

    def test_malformed_ranges_are_skipped(self):
        cases = [
            self._case("c1", sat_range="about 1500"),
            self._case("c2", sat_range="1500-1550"),
        ]
        distribution = cases_to_distribution(cases)
        assert distribution.sample_size == 2
        assert distribution.sat.sample_size == 1

    def test_no_admitted_cases(self):
        assert cases_to_distribution([self._case("c1", result="REJECTED")]) is None
        assert cases_to_distribution([]) is None


class TestRepositories:
    """Repository lookups against a mocked async session."""

    @pytest.mark.asyncio
    async def test_unknown_profile_raises_not_found(self):
        session = MagicMock()
        session.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await ProfileRepository(session).get_profile_metrics("missing")
        session.get.assert_awaited_once_with(Profile, "missing")

    @pytest.mark.asyncio
    async def test_unknown_school_raises_not_found(self):
        session = MagicMock()
        session.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await SchoolRepository(session).get_school_metrics("missing")

    @pytest.mark.asyncio
    async def test_school_metrics(self):
        session = MagicMock()
        session.get = AsyncMock(return_value=School(id="s1", name="Example", acceptance_rate=20.0))

        metrics = await SchoolRepository(session).get_school_metrics("s1")
        assert metrics.name == "Example"
        assert metrics.acceptance_rate == pytest.approx(0.2)


class TestDatabaseUrl:

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgres://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ],
    )
    def test_to_async_url(self, url, expected):
        assert to_async_url(url) == expected
