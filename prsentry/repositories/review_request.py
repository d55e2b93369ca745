"""ReviewRequest repository."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from prsentry.models import ReviewRequest

from .base import BaseRepository


class ReviewRequestRepository(BaseRepository[ReviewRequest]):
    """Repository for pending review request records."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, ReviewRequest)

    async def find_by_pr(self, pr_github_id: int) -> list[ReviewRequest]:
        """Get all pending review requests for a PR identity."""
        query = select(ReviewRequest).where(ReviewRequest.pr_github_id == pr_github_id)
        return await self._execute_query(query)

    async def find_one(self, pr_github_id: int, reviewer: str) -> ReviewRequest | None:
        """Get the pending request for a single reviewer."""
        query = select(ReviewRequest).where(
            ReviewRequest.pr_github_id == pr_github_id,
            ReviewRequest.reviewer == reviewer,
        )
        return await self._execute_single_query(query)

    async def delete_for_pr(self, pr_github_id: int) -> int:
        """Delete every pending request for a PR. Returns the number deleted."""
        stmt = delete(ReviewRequest).where(ReviewRequest.pr_github_id == pr_github_id)
        result = await self.session.execute(stmt)
        await self.flush()
        return result.rowcount or 0
