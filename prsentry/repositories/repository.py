"""Repository repository for GitHub repository records and their summaries."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prsentry.models import Repository, ReviewerFrequencySummary

from .base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for Repository operations."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, Repository)

    async def get_by_github_id(self, github_id: int) -> Repository | None:
        """Get repository by its platform identity."""
        query = (
            select(Repository)
            .where(Repository.github_id == github_id)
            .options(selectinload(Repository.review_summary))
        )
        return await self._execute_single_query(query)

    async def get_or_create(
        self, github_id: int, full_name: str, url: str, owner_login: str
    ) -> Repository:
        """Return the repository with ``github_id``, creating it if absent."""
        existing = await self.get_by_github_id(github_id)
        if existing is not None:
            return existing

        return await self.create(
            github_id=github_id,
            full_name=full_name,
            url=url,
            owner_login=owner_login,
        )

    async def get_review_summary(
        self, repository: Repository
    ) -> ReviewerFrequencySummary | None:
        """Get the reviewer frequency summary of a repository, if any."""
        query = select(ReviewerFrequencySummary).where(
            ReviewerFrequencySummary.repository_id == repository.id
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def save_review_summary(
        self, repository: Repository, summary: dict[str, Any]
    ) -> ReviewerFrequencySummary:
        """Create or replace the reviewer frequency summary of a repository.

        A repository has at most one summary; saving again overwrites it.
        """
        existing = await self.get_review_summary(repository)
        if existing is None:
            existing = ReviewerFrequencySummary(
                repository_id=repository.id, review_summary=summary
            )
            self.session.add(existing)
        else:
            existing.review_summary = summary

        await self.session.flush()
        await self.session.refresh(existing)
        return existing
