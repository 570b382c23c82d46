"""
Data-store readers for the prediction service.

Each call opens its own short-lived session so concurrent per-school
fetches never share a session.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.domain.scoring.interfaces import (
    HistoricalDistribution,
    ProfileMetrics,
    SchoolMetrics,
)
from app.infrastructure.db.database import get_session_context
from app.infrastructure.db.repositories.profile_repository import ProfileRepository
from app.infrastructure.db.repositories.school_repository import SchoolRepository
from app.infrastructure.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class SqlProfileReader:
    """ProfileReader backed by the profiles tables."""

    async def get_profile(self, profile_id: str) -> ProfileMetrics:
        try:
            async with get_session_context() as session:
                return await ProfileRepository(session).get_profile_metrics(profile_id)
        except SQLAlchemyError as e:
            logger.error(f"[DB] Failed to load profile {profile_id}: {e}")
            raise DatabaseError(
                "Failed to load profile",
                operation="read",
                table="profiles",
                original_error=e,
            )


class SqlSchoolReader:
    """SchoolReader backed by the schools and admission_cases tables."""

    async def get_school(self, school_id: str) -> SchoolMetrics:
        try:
            async with get_session_context() as session:
                return await SchoolRepository(session).get_school_metrics(school_id)
        except SQLAlchemyError as e:
            logger.error(f"[DB] Failed to load school {school_id}: {e}")
            raise DatabaseError(
                "Failed to load school",
                operation="read",
                table="schools",
                original_error=e,
            )

    async def get_historical_distribution(
        self,
        school_id: str
    ) -> Optional[HistoricalDistribution]:
        try:
            async with get_session_context() as session:
                return await SchoolRepository(session).get_historical_distribution(school_id)
        except SQLAlchemyError as e:
            logger.error(f"[DB] Failed to load admission cases for {school_id}: {e}")
            raise DatabaseError(
                "Failed to load admission cases",
                operation="read",
                table="admission_cases",
                original_error=e,
            )
