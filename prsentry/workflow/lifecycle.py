"""Pull request lifecycle management.

Owns PullRequest, Repository and ReviewRequest records. Records are looked
up by platform identity before they are created, so redelivered or
out-of-order webhooks converge on a single row per pull request.
"""

import logging
from typing import Any

from prsentry.models import PRState, PullRequest
from prsentry.repositories import (
    PersistenceError,
    PullRequestRepository,
    RepositoryRepository,
    ReviewRequestRepository,
    persistence_operation,
)

from .events import PullRequestEvent
from .tracker import SessionScope

logger = logging.getLogger(__name__)


class PullRequestLifecycleManager:
    """Creates, updates and retires pull request records."""

    def __init__(self, session_scope: SessionScope) -> None:
        self.session_scope = session_scope

    async def get_by_id(self, github_id: int) -> PullRequest | None:
        """Get the record for a platform PR identity."""
        async with persistence_operation("read", "pull request"):
            async with self.session_scope() as session:
                return await PullRequestRepository(session).get_by_github_id(
                    github_id
                )

    async def create(
        self, event: PullRequestEvent, difficulty: float | None = None
    ) -> PullRequest:
        """Create the record for the event's pull request.

        The owning Repository row is created first when it does not exist.
        """
        pr = event.pull_request
        repository = event.repository

        async with persistence_operation("create", "pull request"):
            async with self.session_scope() as session:
                repo_record = await RepositoryRepository(session).get_or_create(
                    github_id=repository.id,
                    full_name=repository.full_name,
                    url=repository.html_url,
                    owner_login=repository.owner.login,
                )
                record = await PullRequestRepository(session).create(
                    github_id=pr.id,
                    repository_id=repo_record.id,
                    pr_number=pr.number,
                    title=pr.title,
                    author=pr.user.login,
                    url=pr.html_url,
                    state=PRState.CLOSED if pr.state == "closed" else PRState.OPEN,
                    base_branch=pr.base.ref,
                    head_branch=pr.head.ref,
                    labels=pr.label_names,
                    review_difficulty=difficulty,
                )

        logger.info(
            "Created pull request record",
            extra={
                "github_id": pr.id,
                "repository": repository.full_name,
                "pr_number": pr.number,
            },
        )
        return record

    async def update(self, record: PullRequest, **changes: Any) -> PullRequest:
        """Apply ``changes`` to a record; other fields keep their stored values."""
        async with persistence_operation("update", "pull request"):
            async with self.session_scope() as session:
                repo = PullRequestRepository(session)
                current = await repo.get_by_github_id(record.github_id)
                if current is None:
                    raise ValueError(
                        f"PullRequest with github_id {record.github_id} not found"
                    )
                return await repo.update(current, **changes)

    async def create_or_update(
        self, event: PullRequestEvent, difficulty: float | None
    ) -> PullRequest:
        """Store the difficulty for the event's pull request.

        Updates the existing record when there is one, otherwise creates it.
        When a concurrent delivery inserts the same identity first, the
        unique constraint rejects the insert and the winner's row is updated.
        """
        changes: dict[str, Any] = {"review_difficulty": difficulty}
        if event.action == "reopened":
            changes["state"] = PRState.OPEN

        existing = await self.get_by_id(event.github_id)
        if existing is not None:
            return await self.update(existing, **changes)

        try:
            return await self.create(event, difficulty)
        except PersistenceError as e:
            if not e.is_integrity_violation:
                raise

        logger.warning(
            "Pull request was created concurrently, updating instead",
            extra={"github_id": event.github_id},
        )
        existing = await self.get_by_id(event.github_id)
        if existing is None:
            # The race was on the repository row; the PR itself is still absent
            return await self.create(event, difficulty)
        return await self.update(existing, **changes)

    async def apply_labels(self, record: PullRequest, labels: list[str]) -> PullRequest:
        """Overwrite the stored label set."""
        return await self.update(record, labels=list(labels))

    async def create_with_labels(
        self, event: PullRequestEvent, difficulty: float | None
    ) -> PullRequest:
        """Create the record of a PR first seen through a label change.

        If a concurrent delivery created the record in the meantime, the
        event's labels are applied to that record instead.
        """
        try:
            return await self.create(event, difficulty)
        except PersistenceError as e:
            if not e.is_integrity_violation:
                raise

        existing = await self.get_by_id(event.github_id)
        if existing is None:
            return await self.create(event, difficulty)

        logger.warning(
            "Pull request was created concurrently, applying labels instead",
            extra={"github_id": event.github_id},
        )
        return await self.apply_labels(existing, event.pull_request.label_names)

    async def track_review_request(self, github_id: int, reviewer: str) -> bool:
        """Record a pending review request. Returns False if already tracked."""
        async with persistence_operation("create", "review request"):
            async with self.session_scope() as session:
                repo = ReviewRequestRepository(session)
                if await repo.find_one(github_id, reviewer) is not None:
                    return False
                await repo.create(pr_github_id=github_id, reviewer=reviewer)
        return True

    async def remove_review_request(self, github_id: int, reviewer: str) -> bool:
        """Delete a pending review request. Returns False if none was tracked."""
        async with persistence_operation("delete", "review request"):
            async with self.session_scope() as session:
                repo = ReviewRequestRepository(session)
                request = await repo.find_one(github_id, reviewer)
                if request is None:
                    return False
                await repo.delete(request)
        return True

    async def retire(self, github_id: int) -> int:
        """Delete pending review requests and mark the PR closed.

        A pull request with no stored record or no pending requests is a
        no-op. Returns the number of review requests deleted.
        """
        async with persistence_operation("delete", "review request"):
            async with self.session_scope() as session:
                deleted = await ReviewRequestRepository(session).delete_for_pr(
                    github_id
                )
                pr_repo = PullRequestRepository(session)
                record = await pr_repo.get_by_github_id(github_id)
                if record is not None and record.is_open:
                    await pr_repo.update(record, state=PRState.CLOSED)

        logger.info(
            "Retired pull request",
            extra={"github_id": github_id, "review_requests_deleted": deleted},
        )
        return deleted
