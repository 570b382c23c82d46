"""
Profile SQLModels

Read models for the applicant profile and its child rows (test scores,
activities, awards) plus the competition catalogue awards link to.
"""

from typing import Optional

from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class Profile(BaseModel, table=True):
    """Applicant profile table."""

    __tablename__ = "profiles"

    user_id: Optional[str] = Field(default=None, max_length=64, index=True)
    gpa: Optional[float] = Field(
        default=None,
        description="GPA on the scale given by gpa_scale"
    )
    gpa_scale: Optional[float] = Field(
        default=4.0,
        description="4.0, 5.0 or 100"
    )


class TestScoreRecord(BaseModel, table=True):
    """Standardized test result (SAT, ACT, TOEFL...)."""
    __test__ = False

    __tablename__ = "test_scores"

    profile_id: str = Field(foreign_key="profiles.id", max_length=64, index=True)
    type: str = Field(max_length=20, description="SAT, ACT, TOEFL, IELTS...")
    score: Optional[float] = Field(default=None)


class ActivityRecord(BaseModel, table=True):
    """Extracurricular activity."""

    __tablename__ = "activities"

    profile_id: str = Field(foreign_key="profiles.id", max_length=64, index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    category: Optional[str] = Field(default=None, max_length=50)
    role: Optional[str] = Field(default=None, max_length=255)
    is_leadership: bool = Field(default=False)
    hours_per_week: Optional[float] = Field(default=None, ge=0)
    weeks_per_year: Optional[float] = Field(default=None, ge=0)


class Competition(BaseModel, table=True):
    """Ranked competition catalogue (tier 5 = international olympiads)."""

    __tablename__ = "competitions"

    name: str = Field(max_length=255)
    tier: Optional[int] = Field(default=None, ge=1, le=5)


class AwardRecord(BaseModel, table=True):
    """Award, optionally linked to a ranked competition."""

    __tablename__ = "awards"

    profile_id: str = Field(foreign_key="profiles.id", max_length=64, index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    level: Optional[str] = Field(
        default=None,
        max_length=20,
        description="INTERNATIONAL, NATIONAL, STATE, REGIONAL, SCHOOL"
    )
    competition_id: Optional[str] = Field(
        default=None,
        foreign_key="competitions.id",
        max_length=64,
    )
