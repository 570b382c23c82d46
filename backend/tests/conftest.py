"""
Test configuration and fixtures for the Admission Probability Engine.

Provides shared fixtures for unit tests: the FastAPI app, sample profile
and school snapshots, and in-memory reader stubs for the prediction
service.
"""

import asyncio
import threading
from collections import Counter
from typing import AsyncGenerator, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from app.domain.scoring.admission_scorer import AdmissionScorer
from app.domain.scoring.interfaces import (
    Activity,
    Award,
    DimensionDistribution,
    HistoricalDistribution,
    ProfileMetrics,
    SchoolMetrics,
    TestScore,
)
from app.infrastructure.cache.prediction_cache import InMemoryPredictionCache
from app.infrastructure.exceptions import NotFoundError
from app.infrastructure.services.prediction_service import PredictionService


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application."""
    from app.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Get async test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def strong_profile():
    """Complete applicant: GPA, SAT, TOEFL, three activities, two awards."""
    return ProfileMetrics(
        profile_id="profile-strong",
        gpa=3.9,
        gpa_scale=4.0,
        test_scores=(
            TestScore(type="SAT", score=1520),
            TestScore(type="TOEFL", score=110),
        ),
        activities=(
            Activity(category="Sports", role="Team Captain", hours_per_week=10, weeks_per_year=30),
            Activity(category="Music", role="Violinist", hours_per_week=4, weeks_per_year=40),
            Activity(category="Science", role="Member", hours_per_week=3, weeks_per_year=30),
        ),
        awards=(
            Award(name="USAMO Qualifier", level="NATIONAL", tier=4),
            Award(name="State Science Fair", level="STATE"),
        ),
    )


@pytest.fixture
def sparse_profile():
    """GPA only: no tests, activities or awards."""
    return ProfileMetrics(profile_id="profile-sparse", gpa=3.95)


@pytest.fixture
def empty_profile():
    """Nothing filled in yet."""
    return ProfileMetrics(profile_id="profile-empty")


@pytest.fixture
def rich_history():
    """100 admitted cases with raw GPA/SAT values and an overall-score summary."""
    return HistoricalDistribution(
        sample_size=100,
        gpa=DimensionDistribution.from_values([3.5 + 0.005 * i for i in range(100)]),
        sat=DimensionDistribution.from_values([1400 + 2 * i for i in range(100)]),
        overall=DimensionDistribution(mean=70.0, stdev=10.0, sample_size=100),
    )


@pytest.fixture
def rich_school(rich_history):
    """School with a full historical sample; rank only, so no rate bounds apply."""
    return SchoolMetrics(
        school_id="school-rich",
        name="Rich University",
        us_news_rank=30,
        median_gpa=3.8,
        sat_25=1450,
        sat_75=1550,
        historical=rich_history,
    )


@pytest.fixture
def published_school():
    """School with published stats but no historical cases."""
    return SchoolMetrics(
        school_id="school-published",
        name="Published College",
        acceptance_rate=0.30,
        median_gpa=3.7,
        sat_25=1300,
        sat_75=1500,
        act_25=28,
        act_75=33,
    )


@pytest.fixture
def selective_thin_school():
    """3% acceptance rate and only two historical cases."""
    return SchoolMetrics(
        school_id="school-selective",
        name="Very Selective Institute",
        acceptance_rate=0.03,
        historical=HistoricalDistribution(
            sample_size=2,
            gpa=DimensionDistribution.from_values([3.95, 4.0]),
            overall=DimensionDistribution.from_values([80.0, 85.0]),
        ),
    )


@pytest.fixture
def thin_school():
    """Acceptance rate only."""
    return SchoolMetrics(
        school_id="school-thin",
        name="Thin College",
        acceptance_rate=0.5,
    )


# =============================================================================
# Service Stubs
# =============================================================================

class StubProfileReader:
    """In-memory ProfileReader that counts calls."""

    def __init__(self, profiles: Dict[str, ProfileMetrics]):
        self.profiles = dict(profiles)
        self.calls = 0

    async def get_profile(self, profile_id: str) -> ProfileMetrics:
        self.calls += 1
        if profile_id not in self.profiles:
            raise NotFoundError(f"Profile not found: {profile_id}", table="profiles")
        return self.profiles[profile_id]


class StubSchoolReader:
    """
    In-memory SchoolReader.

    gate blocks every get_school until set; delays holds per-school
    sleeps in seconds.
    """

    def __init__(
        self,
        schools: Dict[str, SchoolMetrics],
        histories: Optional[Dict[str, HistoricalDistribution]] = None,
        gate: Optional[asyncio.Event] = None,
        delays: Optional[Dict[str, float]] = None,
    ):
        self.schools = dict(schools)
        self.histories = dict(histories or {})
        self.gate = gate
        self.delays = dict(delays or {})
        self.school_calls: Counter = Counter()

    @property
    def total_calls(self) -> int:
        return sum(self.school_calls.values())

    async def get_school(self, school_id: str) -> SchoolMetrics:
        self.school_calls[school_id] += 1
        if self.gate is not None:
            await self.gate.wait()
        if school_id in self.delays:
            await asyncio.sleep(self.delays[school_id])
        if school_id not in self.schools:
            raise NotFoundError(f"School not found: {school_id}", table="schools")
        return self.schools[school_id]

    async def get_historical_distribution(self, school_id: str) -> Optional[HistoricalDistribution]:
        return self.histories.get(school_id)


class CountingScorer(AdmissionScorer):
    """AdmissionScorer that counts pipeline runs (called from worker threads)."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0
        self._lock = threading.Lock()

    def score_school(self, profile, school):
        with self._lock:
            self.calls += 1
        return super().score_school(profile, school)


@pytest.fixture
def make_service(strong_profile, sparse_profile, rich_school, published_school, thin_school):
    """
    Factory for PredictionService wired to stubs.

    Defaults: two profiles, three schools, an in-memory cache and a 1s
    fetch timeout.
    """
    def factory(
        profiles=None,
        schools=None,
        histories=None,
        cache=None,
        gate=None,
        delays=None,
        fetch_timeout_seconds=1.0,
        max_schools=10,
    ) -> PredictionService:
        if profiles is None:
            profiles = {p.profile_id: p for p in (strong_profile, sparse_profile)}
        if schools is None:
            schools = {s.school_id: s for s in (rich_school, published_school, thin_school)}
        return PredictionService(
            profile_reader=StubProfileReader(profiles),
            school_reader=StubSchoolReader(schools, histories, gate=gate, delays=delays),
            cache=cache if cache is not None else InMemoryPredictionCache(),
            scorer=CountingScorer(),
            fetch_timeout_seconds=fetch_timeout_seconds,
            max_schools=max_schools,
        )

    return factory
