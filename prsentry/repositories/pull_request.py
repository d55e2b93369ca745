"""PullRequest repository with domain-specific operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prsentry.models import PullRequest

from .base import BaseRepository


class PullRequestRepository(BaseRepository[PullRequest]):
    """Repository for PullRequest operations."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, PullRequest)

    async def get_by_github_id(self, github_id: int) -> PullRequest | None:
        """Get PR by its platform identity."""
        query = (
            select(PullRequest)
            .where(PullRequest.github_id == github_id)
            .options(selectinload(PullRequest.repository))
        )
        return await self._execute_single_query(query)

