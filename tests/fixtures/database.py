"""Query helpers for assertions against the test database."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prsentry.models.base import BaseModel


async def count_rows(session: AsyncSession, model: type[BaseModel]) -> int:
    """Count the stored rows of ``model``."""
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()
