"""
SQLModel read models for the Admission Probability Engine

Import models here to register them with SQLModel.metadata.
"""

from app.infrastructure.db.models.base import (
    BaseModel,
    StringIdMixin,
    TimestampMixin,
)
from app.infrastructure.db.models.profile import (
    Profile,
    TestScoreRecord,
    ActivityRecord,
    AwardRecord,
    Competition,
)
from app.infrastructure.db.models.school import (
    School,
    AdmissionCase,
)


__all__ = [
    # Base
    "BaseModel",
    "StringIdMixin",
    "TimestampMixin",
    # Profile
    "Profile",
    "TestScoreRecord",
    "ActivityRecord",
    "AwardRecord",
    "Competition",
    # School
    "School",
    "AdmissionCase",
]
