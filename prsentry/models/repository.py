"""Repository and reviewer frequency summary SQLAlchemy models."""

import uuid
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from . import PullRequest

from sqlalchemy import JSON, BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel


class Repository(BaseModel):
    """Model for a GitHub repository that pull requests belong to."""

    __tablename__ = "repositories"

    github_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(300), nullable=False)  # owner/repo
    url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    owner_login: Mapped[str] = mapped_column(String(200), nullable=False)

    # Relationships
    pull_requests: Mapped[list["PullRequest"]] = relationship(
        "PullRequest", back_populates="repository", cascade="all, delete-orphan"
    )
    review_summary: Mapped["ReviewerFrequencySummary | None"] = relationship(
        "ReviewerFrequencySummary",
        back_populates="repository",
        cascade="all, delete-orphan",
        uselist=False,
        single_parent=True,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Repository(id={self.id}, full_name={self.full_name})>"


class ReviewerFrequencySummary(BaseModel):
    """Per-repository reviewer frequency aggregate.

    ``review_summary`` maps contributor -> label category -> count. The summary
    has no identity of its own and is deleted together with its repository.
    """

    __tablename__ = "reviewer_frequency_summaries"

    repository_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    review_summary: Mapped[dict[str, Any]] = mapped_column(
        JSON, default=dict, nullable=False
    )

    repository: Mapped["Repository"] = relationship(
        "Repository", back_populates="review_summary"
    )

    def count_for(self, contributor: str, category: str) -> int:
        """Return how often ``contributor`` reviewed PRs labelled ``category``."""
        return int(self.review_summary.get(contributor, {}).get(category, 0))
