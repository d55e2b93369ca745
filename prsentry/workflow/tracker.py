"""Conflict validation tracking.

Owns the ConflictAnalysis and ConflictFeedback records. Every method runs in
its own unit of work, so a failed write never takes another record with it.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession

from prsentry.models import ConflictAnalysis, ConflictFeedback, ValidationState
from prsentry.repositories import (
    ConflictAnalysisRepository,
    ConflictFeedbackRepository,
    persistence_operation,
)

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class ConflictValidationTracker:
    """Records analysis outcomes and reviewer feedback per pull request."""

    def __init__(self, session_scope: SessionScope) -> None:
        """Initialize tracker.

        Args:
            session_scope: Factory for a committing session context, usually
                ``DatabaseConnectionManager.get_session``
        """
        self.session_scope = session_scope

    async def record_analysis(
        self,
        pr_number: int,
        owner: str,
        repo: str,
        conflicts_detected: bool,
        validation_form_posted: bool,
    ) -> ConflictAnalysis:
        """Append an analysis record; earlier attempts are left untouched."""
        async with persistence_operation("create", "conflict analysis"):
            async with self.session_scope() as session:
                analysis = await ConflictAnalysisRepository(session).create_analysis(
                    pr_number=pr_number,
                    owner=owner,
                    repo=repo,
                    conflicts_detected=conflicts_detected,
                    validation_form_posted=validation_form_posted,
                )

        logger.info(
            "Recorded conflict analysis",
            extra={
                "repository": f"{owner}/{repo}",
                "pr_number": pr_number,
                "conflicts_detected": conflicts_detected,
                "validation_form_posted": validation_form_posted,
            },
        )
        return analysis

    async def latest_analysis(
        self, pr_number: int, owner: str, repo: str
    ) -> ConflictAnalysis | None:
        """Get the most recent analysis record for a pull request."""
        async with persistence_operation("read", "conflict analysis"):
            async with self.session_scope() as session:
                return await ConflictAnalysisRepository(session).get_latest_for_pr(
                    pr_number, owner, repo
                )

    async def was_prompted(self, pr_number: int, owner: str, repo: str) -> bool:
        """Whether the latest analysis posted a validation prompt."""
        analysis = await self.latest_analysis(pr_number, owner, repo)
        return analysis is not None and analysis.validation_form_posted

    async def validation_state(
        self, pr_number: int, owner: str, repo: str
    ) -> ValidationState:
        """Derive where a pull request stands in the validation lifecycle.

        Feedback only counts when it was recorded after the latest analysis;
        the newest such feedback decides between confirmed and denied.
        """
        async with persistence_operation("read", "conflict analysis"):
            async with self.session_scope() as session:
                analysis = await ConflictAnalysisRepository(
                    session
                ).get_latest_for_pr(pr_number, owner, repo)
                if analysis is None:
                    return ValidationState.NOT_ANALYZED
                if not analysis.validation_form_posted:
                    return ValidationState.ANALYZED_NO_PROMPT

                feedback = await ConflictFeedbackRepository(
                    session
                ).get_latest_for_pr(pr_number, owner, repo, since=analysis.analyzed_at)

        if feedback is None:
            return ValidationState.ANALYZED_PROMPTED
        if feedback.conflict_confirmed:
            return ValidationState.RESOLVED_CONFIRMED
        return ValidationState.RESOLVED_DENIED

    async def record_feedback(
        self,
        pr_number: int,
        owner: str,
        repo: str,
        confirmed: bool,
        explanation: str | None = None,
        reviewer: str | None = None,
    ) -> ConflictFeedback:
        """Append a feedback record. Repeated directives each get their own row."""
        async with persistence_operation("create", "conflict feedback"):
            async with self.session_scope() as session:
                feedback = await ConflictFeedbackRepository(session).create(
                    pr_number=pr_number,
                    owner=owner,
                    repo=repo,
                    conflict_confirmed=confirmed,
                    explanation=explanation,
                    reviewer=reviewer,
                )

        logger.info(
            "Feedback saved successfully",
            extra={
                "repository": f"{owner}/{repo}",
                "pr_number": pr_number,
                "confirmed": confirmed,
            },
        )
        return feedback
