"""
School SQLModels

Read models for schools and the historical admission cases reported
against them.
"""

from typing import Optional

from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class School(BaseModel, table=True):
    """School with published admissions statistics."""

    __tablename__ = "schools"

    name: str = Field(max_length=255, index=True)
    acceptance_rate: Optional[float] = Field(
        default=None,
        description="Percentage (4.0 = 4%); converted to a fraction on read"
    )
    us_news_rank: Optional[int] = Field(default=None, ge=1)
    median_gpa: Optional[float] = Field(default=None)
    sat_avg: Optional[int] = Field(default=None)
    sat_25: Optional[int] = Field(default=None)
    sat_75: Optional[int] = Field(default=None)
    act_avg: Optional[int] = Field(default=None)
    act_25: Optional[int] = Field(default=None)
    act_75: Optional[int] = Field(default=None)


class AdmissionCase(BaseModel, table=True):
    """
    One reported application outcome.

    Scores are stored as range strings ("1500-1550") so reporters can stay
    vague; overall_score is the admit score computed upstream, when present.
    """

    __tablename__ = "admission_cases"

    school_id: str = Field(foreign_key="schools.id", max_length=64, index=True)
    result: str = Field(max_length=20, description="ADMITTED, REJECTED, WAITLISTED, DEFERRED")
    gpa_range: Optional[str] = Field(default=None, max_length=20)
    sat_range: Optional[str] = Field(default=None, max_length=20)
    act_range: Optional[str] = Field(default=None, max_length=20)
    toefl_range: Optional[str] = Field(default=None, max_length=20)
    overall_score: Optional[float] = Field(default=None, ge=0, le=100)
