"""Interpretation of reviewer directives on analyzed pull requests.

A reviewer answers the validation prompt with ``#Confirm`` or
``#NotAConflict <reason>``. Directives are only acted upon when the latest
analysis of the pull request posted that prompt.
"""

import logging
from enum import Enum

from prsentry.platform import PlatformGateway

from .errors import describe_error
from .events import IssueCommentCreated
from .messages import (
    CONFIRM_DIRECTIVE,
    DENY_DIRECTIVE,
    confirmation_message,
    denial_message,
)
from .tracker import ConflictValidationTracker

logger = logging.getLogger(__name__)


class Directive(Enum):
    """Reviewer directives."""

    CONFIRM = CONFIRM_DIRECTIVE
    DENY = DENY_DIRECTIVE


class CommentOutcome(Enum):
    """What handling a comment did."""

    IGNORED = "ignored"
    CONFIRMED = "confirmed"
    DENIED = "denied"


def parse_directive(body: str) -> Directive | None:
    """Find the directive a comment starts with.

    Matching is a case-sensitive prefix match on the trimmed body; the
    confirm directive wins when both could match.
    """
    text = body.strip()
    if text.startswith(CONFIRM_DIRECTIVE):
        return Directive.CONFIRM
    if text.startswith(DENY_DIRECTIVE):
        return Directive.DENY
    return None


def deny_explanation(body: str) -> str:
    """Free text following the deny directive, trimmed."""
    text = body.strip()
    if text.startswith(DENY_DIRECTIVE):
        text = text[len(DENY_DIRECTIVE) :]
    return text.strip()


class CommentInterpreter:
    """Turns reviewer directives into labels, replies and feedback records."""

    def __init__(
        self,
        platform: PlatformGateway,
        tracker: ConflictValidationTracker,
        conflict_label: str = "semantic-conflict",
    ) -> None:
        self.platform = platform
        self.tracker = tracker
        self.conflict_label = conflict_label

    async def handle(self, event: IssueCommentCreated) -> CommentOutcome:
        """Act on a directive comment.

        Label and comment failures propagate to the caller. A failed feedback
        write is only logged, since the replies have already been posted.
        """
        directive = parse_directive(event.comment.body)
        if directive is None:
            return CommentOutcome.IGNORED

        owner, repo, pr_number = event.owner, event.repo, event.pr_number

        if not await self.tracker.was_prompted(pr_number, owner, repo):
            logger.info(
                "Ignoring directive on pull request without validation prompt",
                extra={"repository": f"{owner}/{repo}", "pr_number": pr_number},
            )
            return CommentOutcome.IGNORED

        if directive is Directive.CONFIRM:
            await self.platform.add_labels(
                owner, repo, pr_number, [self.conflict_label]
            )
            await self.platform.create_comment(
                owner, repo, pr_number, confirmation_message(self.conflict_label)
            )
            logger.info(
                f"Confirmed conflict for PR #{pr_number}",
                extra={"repository": f"{owner}/{repo}"},
            )
            explanation: str | None = None
            outcome = CommentOutcome.CONFIRMED
        else:
            explanation = deny_explanation(event.comment.body)
            await self.platform.create_comment(
                owner, repo, pr_number, denial_message(explanation)
            )
            logger.info(
                f"Denied conflict for PR #{pr_number}",
                extra={"repository": f"{owner}/{repo}"},
            )
            outcome = CommentOutcome.DENIED

        try:
            await self.tracker.record_feedback(
                pr_number=pr_number,
                owner=owner,
                repo=repo,
                confirmed=outcome is CommentOutcome.CONFIRMED,
                explanation=explanation,
                reviewer=event.comment.user.login,
            )
        except Exception as e:
            logger.error(
                f"Failed to save feedback: {describe_error(e)}",
                extra={"repository": f"{owner}/{repo}", "pr_number": pr_number},
            )

        return outcome
