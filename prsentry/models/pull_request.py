"""PullRequest SQLAlchemy model."""

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from . import Repository

from sqlalchemy import JSON, BigInteger, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .enums import PRState


class PullRequest(BaseModel):
    """Model for pull request tracking.

    ``github_id`` is the platform identity of the pull request. It is unique
    and never reassigned, which is what makes lookup-before-create safe
    against redelivered webhooks.
    """

    __tablename__ = "pull_requests"

    github_id: Mapped[int] = mapped_column(
        BigInteger, unique=True, nullable=False, index=True
    )

    # Foreign key to repository
    repository_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False
    )

    # Basic PR information
    pr_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    author: Mapped[str | None] = mapped_column(String(100), nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    state: Mapped[PRState] = mapped_column(default=PRState.OPEN, nullable=False)

    # Branch information
    base_branch: Mapped[str] = mapped_column(String(200), nullable=False)
    head_branch: Mapped[str] = mapped_column(String(200), nullable=False)

    # Review tracking
    labels: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    review_difficulty: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Relationships
    repository: Mapped["Repository"] = relationship(
        "Repository", back_populates="pull_requests"
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<PullRequest(id={self.id}, github_id={self.github_id}, "
            f"pr_number={self.pr_number}, state={self.state})>"
        )

    @property
    def is_open(self) -> bool:
        """Check if PR is open."""
        return self.state == PRState.OPEN
