"""
Base Repository for the Admission Probability Engine

Generic async read repository. Profiles, schools and cases are owned by
other services, so only the read side of the repository pattern lives here.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)


class IReadRepository(ABC, Generic[ModelType]):
    """Interface for read operations."""

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get a single record by ID."""
        pass


class BaseRepository(IReadRepository[ModelType], Generic[ModelType]):
    """
    Generic async read repository.

    Args:
        model: The SQLModel class to operate on
        session: Async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a single record by its primary key.

        Returns:
            Model instance or None if not found
        """
        return await self._session.get(self._model, id)
