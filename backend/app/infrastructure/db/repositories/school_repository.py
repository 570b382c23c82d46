"""
School Repository

Reads school statistics and builds the historical admitted-applicant
distribution from reported admission cases.
"""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.scoring.interfaces import (
    DimensionDistribution,
    HistoricalDistribution,
    SchoolMetrics,
)
from app.domain.scoring.normalizer import parse_range
from app.infrastructure.db.models.school import AdmissionCase, School
from app.infrastructure.db.repositories.base_repository import BaseRepository
from app.infrastructure.exceptions import NotFoundError

ADMITTED_RESULT = "ADMITTED"

# Most recent admitted cases considered per school
MAX_HISTORICAL_CASES = 5000


def acceptance_fraction(percent: Optional[float]) -> Optional[float]:
    """schools.acceptance_rate holds a percentage; the domain works in fractions."""
    if percent is None:
        return None
    return percent / 100.0


def school_to_metrics(school: School) -> SchoolMetrics:
    """Map a School row to a SchoolMetrics snapshot (history attached later)."""
    return SchoolMetrics(
        school_id=school.id,
        name=school.name,
        acceptance_rate=acceptance_fraction(school.acceptance_rate),
        us_news_rank=school.us_news_rank,
        median_gpa=school.median_gpa,
        sat_avg=school.sat_avg,
        sat_25=school.sat_25,
        sat_75=school.sat_75,
        act_avg=school.act_avg,
        act_25=school.act_25,
        act_75=school.act_75,
    )


def _midpoints(ranges: Sequence[Optional[str]]) -> list:
    values = []
    for text in ranges:
        if not text:
            continue
        parsed = parse_range(text)
        if parsed is not None:
            values.append(parsed[0])
    return values


def cases_to_distribution(cases: Sequence[AdmissionCase]) -> Optional[HistoricalDistribution]:
    """
    Build a HistoricalDistribution from admitted cases.

    Each dimension keeps the midpoints of the parseable ranges; malformed
    ranges are skipped. Returns None when there are no admitted cases.
    """
    admitted = [c for c in cases if (c.result or "").upper() == ADMITTED_RESULT]
    if not admitted:
        return None

    def dimension(values) -> Optional[DimensionDistribution]:
        distribution = DimensionDistribution.from_values(values)
        return distribution if distribution.sample_size else None

    return HistoricalDistribution(
        sample_size=len(admitted),
        gpa=dimension(_midpoints([c.gpa_range for c in admitted])),
        sat=dimension(_midpoints([c.sat_range for c in admitted])),
        act=dimension(_midpoints([c.act_range for c in admitted])),
        toefl=dimension(_midpoints([c.toefl_range for c in admitted])),
        overall=dimension([c.overall_score for c in admitted if c.overall_score is not None]),
    )


class SchoolRepository(BaseRepository[School]):
    """Read access to schools and their admission history."""

    def __init__(self, session: AsyncSession):
        super().__init__(School, session)

    async def get_school_metrics(self, school_id: str) -> SchoolMetrics:
        """
        Raises:
            NotFoundError: school does not exist
        """
        school = await self.get_by_id(school_id)
        if school is None:
            raise NotFoundError(
                f"School not found: {school_id}",
                operation="read",
                table="schools",
            )
        return school_to_metrics(school)

    async def get_historical_distribution(
        self,
        school_id: str
    ) -> Optional[HistoricalDistribution]:
        stmt = (
            select(AdmissionCase)
            .where(AdmissionCase.school_id == school_id)
            .where(AdmissionCase.result == ADMITTED_RESULT)
            .order_by(AdmissionCase.created_at.desc())
            .limit(MAX_HISTORICAL_CASES)
        )
        result = await self.session.execute(stmt)
        return cases_to_distribution(list(result.scalars().all()))
