"""
Repository Layer for the Admission Probability Engine
"""

from app.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    IReadRepository,
)
from app.infrastructure.db.repositories.profile_repository import (
    ProfileRepository,
    profile_to_metrics,
)
from app.infrastructure.db.repositories.school_repository import (
    SchoolRepository,
    cases_to_distribution,
    school_to_metrics,
)


__all__ = [
    # Base
    "BaseRepository",
    "IReadRepository",
    # Repositories
    "ProfileRepository",
    "SchoolRepository",
    # Mappers
    "profile_to_metrics",
    "school_to_metrics",
    "cases_to_distribution",
]
