"""Routing of validated webhook events to their handlers."""

import asyncio
import logging
from collections.abc import Awaitable, Iterable

from prsentry.analysis import AnalysisGateway, ChangeSetPurpose
from prsentry.repositories import PersistenceError

from .comments import CommentInterpreter, parse_directive
from .deliveries import DeliveryLedger
from .errors import describe_error
from .events import (
    Account,
    IssueCommentCreated,
    PullRequestClosed,
    PullRequestEvent,
    PullRequestLabeled,
    PullRequestOpened,
    PullRequestReopened,
    PullRequestUnlabeled,
    ReviewRequested,
    ReviewRequestRemoved,
    WebhookEvent,
)
from .lifecycle import PullRequestLifecycleManager
from .orchestrator import ConflictAnalysisOrchestrator

logger = logging.getLogger(__name__)


class AutomationIdentityFilter:
    """Recognizes bot accounts so their actions don't trigger the workflow."""

    def __init__(
        self,
        markers: Iterable[str] = ("bot",),
        account_types: Iterable[str] = ("Bot",),
    ) -> None:
        self.markers = tuple(markers)
        self.account_types = frozenset(account_types)

    def is_automation(self, account: Account) -> bool:
        """Check if an account is an automation identity."""
        if account.type in self.account_types:
            return True
        return any(marker in account.login for marker in self.markers)


class EventDispatcher:
    """Entry point for validated events.

    Every handler path is a failure boundary: errors are logged and never
    leave ``dispatch``, so one delivery cannot affect another. The dispatcher
    keeps no per-delivery state and is safe to call concurrently.

    With a delivery ledger, a redelivered GUID is skipped. A delivery whose
    handler failed is released so that redelivering it retries the handling.
    """

    def __init__(
        self,
        orchestrator: ConflictAnalysisOrchestrator,
        lifecycle: PullRequestLifecycleManager,
        comments: CommentInterpreter,
        analysis: AnalysisGateway,
        identity_filter: AutomationIdentityFilter | None = None,
        deliveries: DeliveryLedger | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.lifecycle = lifecycle
        self.comments = comments
        self.analysis = analysis
        self.identity_filter = identity_filter or AutomationIdentityFilter()
        self.deliveries = deliveries

    async def dispatch(
        self, event: WebhookEvent, delivery_id: str | None = None
    ) -> None:
        """Route an event to its handler(s).

        Args:
            event: Validated event
            delivery_id: ``X-GitHub-Delivery`` GUID, used to skip redeliveries
        """
        logger.debug(
            "Dispatching event", extra={"kind": event.kind, "delivery_id": delivery_id}
        )

        ledger = self.deliveries
        if ledger is not None and delivery_id is not None:
            if not await self._claim(ledger, delivery_id, event):
                return

        handled = True
        if isinstance(event, PullRequestEvent):
            # Prioritization runs for every pull request action, independently
            handled, _ = await asyncio.gather(
                self._guard(self._handle_pull_request(event), event),
                self._guard(
                    self.analysis.prioritize(event.owner, event.repo, event.pr_number),
                    event,
                ),
            )
        elif isinstance(event, IssueCommentCreated):
            handled = await self._guard(self._handle_comment(event), event)

        if not handled and ledger is not None and delivery_id is not None:
            await self._guard(ledger.release(delivery_id), event)

    async def _claim(
        self, ledger: DeliveryLedger, delivery_id: str, event: WebhookEvent
    ) -> bool:
        try:
            claimed = await ledger.claim(delivery_id, event.kind)
        except PersistenceError as e:
            # An unavailable ledger must not drop the event
            logger.error(
                describe_error(e),
                extra={"kind": event.kind, "delivery_id": delivery_id},
            )
            return True

        if not claimed:
            logger.info(
                f"Skipping redelivered {event.kind} (ID: {delivery_id})",
                extra={"repository": event.repository.full_name},
            )
        return claimed

    async def _guard(self, operation: Awaitable[object], event: WebhookEvent) -> bool:
        try:
            await operation
        except Exception as e:
            logger.error(
                describe_error(e),
                extra={
                    "kind": event.kind,
                    "repository": event.repository.full_name,
                    "error_type": type(e).__name__,
                },
            )
            return False
        return True

    async def _handle_pull_request(self, event: PullRequestEvent) -> None:
        if isinstance(event, PullRequestOpened | PullRequestReopened):
            await self._analyze(event)
        elif isinstance(event, PullRequestLabeled | PullRequestUnlabeled):
            await self._sync_labels(event)
        elif isinstance(event, PullRequestClosed):
            await self.lifecycle.retire(event.github_id)
        elif isinstance(event, ReviewRequested):
            if event.requested_reviewer is not None:
                await self.lifecycle.track_review_request(
                    event.github_id, event.requested_reviewer.login
                )
        elif isinstance(event, ReviewRequestRemoved):
            if event.requested_reviewer is not None:
                await self.lifecycle.remove_review_request(
                    event.github_id, event.requested_reviewer.login
                )

    async def _analyze(self, event: PullRequestEvent) -> None:
        pr = event.pull_request
        outcome = await self.orchestrator.run(
            event.owner, event.repo, pr.number, pr.base.ref, pr.head.ref
        )
        await self.lifecycle.create_or_update(event, outcome.difficulty)

    async def _sync_labels(self, event: PullRequestEvent) -> None:
        if self.identity_filter.is_automation(event.sender):
            logger.debug(
                "Ignoring label change by automation",
                extra={"sender": event.sender.login, "pr_number": event.pr_number},
            )
            return

        record = await self.lifecycle.get_by_id(event.github_id)
        if record is None:
            pr = event.pull_request
            change_set = await self.analysis.fetch_changed_files(
                event.owner,
                event.repo,
                pr.number,
                pr.base.ref,
                pr.head.ref,
                ChangeSetPurpose.DIFFICULTY,
            )
            difficulty = await self.analysis.score_difficulty(change_set)
            # A new record already carries the payload labels
            await self.lifecycle.create_with_labels(event, difficulty)
            return

        await self.lifecycle.apply_labels(record, event.pull_request.label_names)

    async def _handle_comment(self, event: IssueCommentCreated) -> None:
        if not event.issue.is_pull_request:
            return
        if self.identity_filter.is_automation(event.comment.user):
            return
        if parse_directive(event.comment.body) is None:
            return
        await self.comments.handle(event)
