"""
Unit tests for reviewer directive interpretation.

Why: Directive comments apply labels and record feedback; they must only act
     on PRs whose latest analysis posted the validation prompt.
What: Tests parse_directive, the entry guard, confirm and deny transitions,
      and tolerance of feedback persistence failures.
How: Uses AsyncMock platform gateway and tracker.
"""

from unittest.mock import AsyncMock

import pytest

from prsentry.repositories import PersistenceError
from prsentry.workflow.comments import (
    CommentInterpreter,
    CommentOutcome,
    Directive,
    deny_explanation,
    parse_directive,
)
from prsentry.workflow.events import IssueCommentCreated, parse_event
from prsentry.workflow.messages import NO_REASON_PLACEHOLDER
from prsentry.workflow.tracker import ConflictValidationTracker
from tests.fixtures.webhooks import issue_comment_payload


def comment_event(body: str) -> IssueCommentCreated:
    event = parse_event("issue_comment", issue_comment_payload(body))
    assert isinstance(event, IssueCommentCreated)
    return event


class TestParseDirective:
    """Tests for directive parsing."""

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ("#Confirm", Directive.CONFIRM),
            ("   #Confirm  \n", Directive.CONFIRM),
            ("#Confirmed, definitely", Directive.CONFIRM),
            ("#NotAConflict", Directive.DENY),
            ("#NotAConflict the APIs are independent", Directive.DENY),
            ("#confirm", None),
            ("I think #Confirm", None),
            ("LGTM", None),
            ("", None),
        ],
    )
    def test_prefix_match_on_trimmed_body(
        self, body: str, expected: Directive | None
    ) -> None:
        """
        Why: The directive protocol is a case-sensitive prefix on the trimmed body
        What: Tests matching and non-matching bodies
        How: Parses each body and compares the directive
        """
        assert parse_directive(body) is expected

    def test_deny_explanation(self) -> None:
        """
        Why: The explanation is whatever follows the deny tag
        What: Tests extraction and trimming, and an empty string for no text
        How: Extracts from bodies with and without text
        """
        assert deny_explanation("#NotAConflict   reason X  ") == "reason X"
        assert deny_explanation("  #NotAConflict  ") == ""


class TestCommentInterpreter:
    """Tests for CommentInterpreter.handle."""

    @pytest.fixture
    def tracker(self) -> AsyncMock:
        """Tracker whose latest analysis posted the validation prompt."""
        tracker = AsyncMock(spec=ConflictValidationTracker)
        tracker.was_prompted.return_value = True
        return tracker

    @pytest.fixture
    def interpreter(
        self, platform_gateway: AsyncMock, tracker: AsyncMock
    ) -> CommentInterpreter:
        return CommentInterpreter(platform_gateway, tracker)

    async def test_confirm_labels_replies_and_records(
        self,
        interpreter: CommentInterpreter,
        platform_gateway: AsyncMock,
        tracker: AsyncMock,
    ) -> None:
        """
        Why: A confirmation must produce exactly one label, one reply and one record
        What: Tests the confirmed transition side effects
        How: Handles "#Confirm" and inspects the mock calls
        """
        outcome = await interpreter.handle(comment_event("#Confirm"))

        assert outcome is CommentOutcome.CONFIRMED
        platform_gateway.add_labels.assert_awaited_once_with(
            "octo-org", "widgets", 42, ["semantic-conflict"]
        )
        platform_gateway.create_comment.assert_awaited_once()
        body = platform_gateway.create_comment.await_args.args[3]
        assert "this is a conflict" in body
        assert "`semantic-conflict`" in body
        tracker.record_feedback.assert_awaited_once_with(
            pr_number=42,
            owner="octo-org",
            repo="widgets",
            confirmed=True,
            explanation=None,
            reviewer="bob",
        )

    async def test_deny_replies_with_reason_and_records(
        self,
        interpreter: CommentInterpreter,
        platform_gateway: AsyncMock,
        tracker: AsyncMock,
    ) -> None:
        """
        Why: A denial records the reviewer's explanation without labelling
        What: Tests the denied transition side effects
        How: Handles "#NotAConflict reason X" and inspects the mock calls
        """
        outcome = await interpreter.handle(comment_event("#NotAConflict reason X"))

        assert outcome is CommentOutcome.DENIED
        platform_gateway.add_labels.assert_not_awaited()
        body = platform_gateway.create_comment.await_args.args[3]
        assert "**Reason:** reason X" in body
        feedback = tracker.record_feedback.await_args.kwargs
        assert feedback["confirmed"] is False
        assert feedback["explanation"] == "reason X"

    async def test_deny_without_reason_uses_placeholder(
        self,
        interpreter: CommentInterpreter,
        platform_gateway: AsyncMock,
        tracker: AsyncMock,
    ) -> None:
        """
        Why: Reviewers may deny without explaining
        What: Tests the placeholder reply and an empty stored explanation
        How: Handles a bare "#NotAConflict"
        """
        await interpreter.handle(comment_event("#NotAConflict"))

        body = platform_gateway.create_comment.await_args.args[3]
        assert NO_REASON_PLACEHOLDER in body
        assert tracker.record_feedback.await_args.kwargs["explanation"] == ""

    async def test_unprompted_pr_is_ignored(
        self,
        interpreter: CommentInterpreter,
        platform_gateway: AsyncMock,
        tracker: AsyncMock,
    ) -> None:
        """
        Why: Directives on PRs without a validation prompt must have no effect
        What: Tests the entry guard
        How: Makes was_prompted return False and checks that nothing happens
        """
        tracker.was_prompted.return_value = False

        outcome = await interpreter.handle(comment_event("#Confirm"))

        assert outcome is CommentOutcome.IGNORED
        platform_gateway.add_labels.assert_not_awaited()
        platform_gateway.create_comment.assert_not_awaited()
        tracker.record_feedback.assert_not_awaited()

    async def test_non_directive_is_ignored(
        self, interpreter: CommentInterpreter, tracker: AsyncMock
    ) -> None:
        """
        Why: Ordinary discussion must not reach the tracker
        What: Tests that plain comments are ignored before the guard
        How: Handles "LGTM" and checks the tracker was not consulted
        """
        outcome = await interpreter.handle(comment_event("LGTM"))

        assert outcome is CommentOutcome.IGNORED
        tracker.was_prompted.assert_not_awaited()

    async def test_feedback_failure_is_swallowed(
        self,
        interpreter: CommentInterpreter,
        platform_gateway: AsyncMock,
        tracker: AsyncMock,
    ) -> None:
        """
        Why: Replies already posted cannot be rolled back, so a failed write
             must not turn the handled comment into an error
        What: Tests that PersistenceError from record_feedback is not raised
        How: Makes record_feedback fail and checks the outcome
        """
        tracker.record_feedback.side_effect = PersistenceError(
            "create", "conflict feedback", RuntimeError("db down")
        )

        outcome = await interpreter.handle(comment_event("#Confirm"))

        assert outcome is CommentOutcome.CONFIRMED
        platform_gateway.add_labels.assert_awaited_once()

    async def test_label_failure_propagates(
        self,
        interpreter: CommentInterpreter,
        platform_gateway: AsyncMock,
        tracker: AsyncMock,
    ) -> None:
        """
        Why: Platform failures are handled at the dispatcher boundary
        What: Tests that a failing label call stops the flow and raises
        How: Makes add_labels fail and checks that nothing else happened
        """
        platform_gateway.add_labels.side_effect = RuntimeError("label failed")

        with pytest.raises(RuntimeError):
            await interpreter.handle(comment_event("#Confirm"))

        platform_gateway.create_comment.assert_not_awaited()
        tracker.record_feedback.assert_not_awaited()

    async def test_custom_label(
        self, platform_gateway: AsyncMock, tracker: AsyncMock
    ) -> None:
        """
        Why: The conflict label is configurable
        What: Tests that the configured label is applied
        How: Builds an interpreter with a custom label
        """
        interpreter = CommentInterpreter(
            platform_gateway, tracker, conflict_label="needs-merge-review"
        )

        await interpreter.handle(comment_event("#Confirm"))

        platform_gateway.add_labels.assert_awaited_once_with(
            "octo-org", "widgets", 42, ["needs-merge-review"]
        )
