"""
Base Model for SQLModel ORM

Common fields for the read models. The tables are owned by the profile and
school services; this engine only reads them.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class StringIdMixin(SQLModel):
    """
    Mixin providing the string primary key used by the upstream services.
    """

    id: str = Field(
        primary_key=True,
        max_length=64,
        description="Unique identifier"
    )


class TimestampMixin(SQLModel):
    """
    Mixin providing the upstream timestamp columns.

    Nullable here: they are written by the owning service, never by us.
    """

    created_at: Optional[datetime] = Field(
        default=None,
        description="Record creation timestamp (UTC)"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last update timestamp (UTC)"
    )


class BaseModel(StringIdMixin, TimestampMixin):
    """
    Base model combining id and timestamp mixins.

    Provides: id, created_at, updated_at
    """

    class Config:
        """Pydantic/SQLModel configuration."""
        from_attributes = True
