"""Typed webhook events.

GitHub deliveries are validated into one frozen model per event kind before
they reach the dispatcher. Only the payload fields the workflow reads are
declared; everything else GitHub sends is ignored.
"""

import logging
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import EventValidationError

logger = logging.getLogger(__name__)


class EventModel(BaseModel):
    """Base for payload models."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# Payload fragments


class Account(EventModel):
    """A GitHub user, bot or organization."""

    login: str
    type: str = "User"


class RepositoryRef(EventModel):
    """Repository a delivery belongs to."""

    id: int
    name: str
    full_name: str
    html_url: str = ""
    owner: Account


class BranchRef(EventModel):
    """Base or head of a pull request."""

    ref: str
    sha: str | None = None


class Label(EventModel):
    """Issue label."""

    name: str


class PullRequestData(EventModel):
    """The ``pull_request`` object of a delivery."""

    id: int
    number: int
    title: str = ""
    html_url: str = ""
    state: str = "open"
    user: Account
    base: BranchRef
    head: BranchRef
    labels: list[Label] = Field(default_factory=list)

    @property
    def label_names(self) -> list[str]:
        """Label names in payload order."""
        return [label.name for label in self.labels]


class IssueData(EventModel):
    """The ``issue`` object of a comment delivery."""

    number: int
    pull_request: dict[str, Any] | None = None

    @property
    def is_pull_request(self) -> bool:
        """Pull requests are issues with a ``pull_request`` link."""
        return self.pull_request is not None


class CommentData(EventModel):
    """The ``comment`` object of a comment delivery."""

    id: int
    body: str = ""
    user: Account


# Event variants


class WebhookEvent(EventModel):
    """Base for all dispatched events."""

    event_name: ClassVar[str]

    action: str
    repository: RepositoryRef
    sender: Account

    @property
    def kind(self) -> str:
        """Event kind, e.g. ``pull_request.opened``."""
        return f"{self.event_name}.{self.action}"

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name


class PullRequestEvent(WebhookEvent):
    """Any ``pull_request`` delivery."""

    event_name: ClassVar[str] = "pull_request"

    pull_request: PullRequestData

    @property
    def pr_number(self) -> int:
        return self.pull_request.number

    @property
    def github_id(self) -> int:
        return self.pull_request.id


class PullRequestOpened(PullRequestEvent):
    action: Literal["opened"]


class PullRequestReopened(PullRequestEvent):
    action: Literal["reopened"]


class PullRequestLabeled(PullRequestEvent):
    action: Literal["labeled"]
    label: Label | None = None


class PullRequestUnlabeled(PullRequestEvent):
    action: Literal["unlabeled"]
    label: Label | None = None


class PullRequestClosed(PullRequestEvent):
    action: Literal["closed"]


class ReviewRequested(PullRequestEvent):
    """Review requested from a user (team requests carry no reviewer)."""

    action: Literal["review_requested"]
    requested_reviewer: Account | None = None


class ReviewRequestRemoved(PullRequestEvent):
    action: Literal["review_request_removed"]
    requested_reviewer: Account | None = None


class PullRequestOther(PullRequestEvent):
    """Pull request action without a dedicated handler (``synchronize``...)."""


class IssueCommentCreated(WebhookEvent):
    """A new comment on an issue or pull request."""

    event_name: ClassVar[str] = "issue_comment"

    action: Literal["created"]
    issue: IssueData
    comment: CommentData

    @property
    def pr_number(self) -> int:
        return self.issue.number


PULL_REQUEST_ACTIONS: dict[str, type[PullRequestEvent]] = {
    "opened": PullRequestOpened,
    "reopened": PullRequestReopened,
    "labeled": PullRequestLabeled,
    "unlabeled": PullRequestUnlabeled,
    "closed": PullRequestClosed,
    "review_requested": ReviewRequested,
    "review_request_removed": ReviewRequestRemoved,
}


def parse_event(event_name: str, payload: dict[str, Any]) -> WebhookEvent | None:
    """Validate a delivery into its event model.

    Args:
        event_name: Value of the ``X-GitHub-Event`` header
        payload: Decoded JSON body

    Returns:
        The typed event, or None when the event kind is not handled

    Raises:
        EventValidationError: If the payload does not match the event schema
    """
    action = payload.get("action") if isinstance(payload, dict) else None

    model: type[WebhookEvent]
    if event_name == "pull_request":
        model = PULL_REQUEST_ACTIONS.get(str(action), PullRequestOther)
    elif event_name == "issue_comment" and action == "created":
        model = IssueCommentCreated
    else:
        logger.debug(
            "Ignoring unsupported event",
            extra={"event": event_name, "action": action},
        )
        return None

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise EventValidationError(
            f"Invalid {event_name} payload: {e.error_count()} validation error(s)",
            event_name=event_name,
            errors=e.errors(),
        ) from e
