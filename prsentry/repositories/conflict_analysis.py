"""Repositories for conflict analysis tracking and reviewer feedback."""

from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from prsentry.models import ConflictAnalysis, ConflictFeedback

from .base import BaseRepository


class ConflictAnalysisRepository(BaseRepository[ConflictAnalysis]):
    """Repository for ConflictAnalysis tracking records."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, ConflictAnalysis)

    async def create_analysis(
        self,
        pr_number: int,
        owner: str,
        repo: str,
        conflicts_detected: bool,
        validation_form_posted: bool,
    ) -> ConflictAnalysis:
        """Append a new analysis record."""
        return await self.create(
            pr_number=pr_number,
            owner=owner,
            repo=repo,
            conflicts_detected=conflicts_detected,
            validation_form_posted=validation_form_posted,
        )

    async def get_latest_for_pr(
        self, pr_number: int, owner: str, repo: str
    ) -> ConflictAnalysis | None:
        """Get the most recent analysis record for a PR."""
        query = (
            select(ConflictAnalysis)
            .where(
                ConflictAnalysis.pr_number == pr_number,
                ConflictAnalysis.owner == owner,
                ConflictAnalysis.repo == repo,
            )
            .order_by(desc(ConflictAnalysis.analyzed_at))
            .limit(1)
        )
        return await self._execute_single_query(query)


class ConflictFeedbackRepository(BaseRepository[ConflictFeedback]):
    """Repository for append-only reviewer feedback."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, ConflictFeedback)

    async def get_latest_for_pr(
        self,
        pr_number: int,
        owner: str,
        repo: str,
        since: datetime | None = None,
    ) -> ConflictFeedback | None:
        """Get the most recent feedback for a PR, optionally after ``since``."""
        conditions = [
            ConflictFeedback.pr_number == pr_number,
            ConflictFeedback.owner == owner,
            ConflictFeedback.repo == repo,
        ]
        if since is not None:
            conditions.append(ConflictFeedback.recorded_at >= since)

        query = (
            select(ConflictFeedback)
            .where(*conditions)
            .order_by(desc(ConflictFeedback.recorded_at))
            .limit(1)
        )
        return await self._execute_single_query(query)

    async def list_for_pr(self, pr_number: int) -> list[ConflictFeedback]:
        """List all feedback recorded for a PR number, oldest first."""
        query = (
            select(ConflictFeedback)
            .where(ConflictFeedback.pr_number == pr_number)
            .order_by(ConflictFeedback.recorded_at)
        )
        return await self._execute_query(query)
