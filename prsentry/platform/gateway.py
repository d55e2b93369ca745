"""Platform gateway: the comment and label side effects of the workflow."""

import logging
from abc import ABC, abstractmethod

from prsentry.github import GitHubClient

logger = logging.getLogger(__name__)


class PlatformGateway(ABC):
    """Abstract gateway to the code-hosting platform."""

    @abstractmethod
    async def create_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> None:
        """Post a comment on an issue or pull request."""
        pass

    @abstractmethod
    async def add_labels(
        self, owner: str, repo: str, issue_number: int, labels: list[str]
    ) -> None:
        """Add labels to an issue or pull request."""
        pass


class GitHubPlatformGateway(PlatformGateway):
    """Platform gateway using the GitHub REST API."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def create_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> None:
        comment = await self.client.create_issue_comment(
            owner, repo, issue_number, body
        )
        logger.info(
            "Posted comment",
            extra={
                "repository": f"{owner}/{repo}",
                "issue_number": issue_number,
                "comment_id": (comment or {}).get("id"),
            },
        )

    async def add_labels(
        self, owner: str, repo: str, issue_number: int, labels: list[str]
    ) -> None:
        await self.client.add_issue_labels(owner, repo, issue_number, labels)
        logger.info(
            "Added labels",
            extra={
                "repository": f"{owner}/{repo}",
                "issue_number": issue_number,
                "labels": labels,
            },
        )
