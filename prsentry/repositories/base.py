"""Abstract base repository with common CRUD operations."""

from typing import Any

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from prsentry.models.base import BaseModel


class BaseRepository[ModelType: BaseModel]:
    """Abstract base repository with common CRUD operations."""

    def __init__(self, session: AsyncSession, model_class: type[ModelType]):
        """Initialize repository with database session and model class."""
        self.session = session
        self.model_class = model_class

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new entity."""
        entity = self.model_class(**kwargs)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: ModelType, **kwargs: Any) -> ModelType:
        """Update an existing entity.

        Only the given keyword arguments are written; every other column keeps
        its stored value.
        """
        for key, value in kwargs.items():
            if hasattr(entity, key):
                setattr(entity, key, value)

        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()

    async def _execute_query(self, query: Select[tuple[ModelType]]) -> list[ModelType]:
        """Execute query and return results."""
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _execute_single_query(
        self, query: Select[tuple[ModelType]]
    ) -> ModelType | None:
        """Execute query and return single result."""
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def flush(self) -> None:
        """Flush pending changes to database."""
        await self.session.flush()
