"""
Profile Repository

Loads a profile with its test scores, activities and awards and maps the
rows to the immutable ProfileMetrics snapshot used by the engine.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.scoring.interfaces import Activity, Award, ProfileMetrics, TestScore
from app.infrastructure.db.models.profile import (
    ActivityRecord,
    AwardRecord,
    Competition,
    Profile,
    TestScoreRecord,
)
from app.infrastructure.db.repositories.base_repository import BaseRepository
from app.infrastructure.exceptions import NotFoundError


def profile_to_metrics(
    profile: Profile,
    test_scores: Sequence[TestScoreRecord],
    activities: Sequence[ActivityRecord],
    awards: Sequence[AwardRecord],
    competition_tiers: Optional[Dict[str, int]] = None,
) -> ProfileMetrics:
    """
    Map ORM rows to a ProfileMetrics snapshot.

    Child rows are sorted by id so the snapshot (and its cache fingerprint)
    does not depend on database row order.
    """
    competition_tiers = competition_tiers or {}

    return ProfileMetrics(
        profile_id=profile.id,
        gpa=profile.gpa,
        gpa_scale=profile.gpa_scale if profile.gpa_scale is not None else 4.0,
        test_scores=tuple(
            TestScore(type=(t.type or "").upper(), score=t.score)
            for t in sorted(test_scores, key=lambda t: t.id)
        ),
        activities=tuple(
            Activity(
                category=a.category or "",
                role=a.role or "",
                is_leadership=bool(a.is_leadership),
                hours_per_week=a.hours_per_week,
                weeks_per_year=a.weeks_per_year,
            )
            for a in sorted(activities, key=lambda a: a.id)
        ),
        awards=tuple(
            Award(
                name=a.name or "",
                level=a.level,
                tier=competition_tiers.get(a.competition_id) if a.competition_id else None,
            )
            for a in sorted(awards, key=lambda a: a.id)
        ),
    )


class ProfileRepository(BaseRepository[Profile]):
    """Read access to applicant profiles."""

    def __init__(self, session: AsyncSession):
        super().__init__(Profile, session)

    async def get_profile_metrics(self, profile_id: str) -> ProfileMetrics:
        """
        Load the full profile snapshot.

        Raises:
            NotFoundError: profile does not exist
        """
        profile = await self.get_by_id(profile_id)
        if profile is None:
            raise NotFoundError(
                f"Profile not found: {profile_id}",
                operation="read",
                table="profiles",
            )

        test_scores = await self._children(TestScoreRecord, profile_id)
        activities = await self._children(ActivityRecord, profile_id)
        awards = await self._children(AwardRecord, profile_id)
        tiers = await self._competition_tiers(
            [a.competition_id for a in awards if a.competition_id]
        )
        return profile_to_metrics(profile, test_scores, activities, awards, tiers)

    async def _children(self, model, profile_id: str) -> List:
        stmt = select(model).where(model.profile_id == profile_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _competition_tiers(self, competition_ids: List[str]) -> Dict[str, int]:
        if not competition_ids:
            return {}
        stmt = select(Competition).where(Competition.id.in_(competition_ids))
        result = await self.session.execute(stmt)
        return {
            c.id: c.tier
            for c in result.scalars().all()
            if c.tier is not None
        }
