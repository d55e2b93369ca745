"""ConflictAnalysis and ConflictFeedback SQLAlchemy models."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConflictAnalysis(BaseModel):
    """One semantic-conflict analysis attempt for a pull request.

    Rows are append-only: a re-analysis (for example on ``reopened``) adds a
    new row rather than overwriting the previous outcome. ``analyzed_at`` is
    set application-side so that ordering is stable at sub-second resolution.
    """

    __tablename__ = "conflict_analyses"

    pr_number: Mapped[int] = mapped_column(Integer, nullable=False)
    owner: Mapped[str] = mapped_column(String(200), nullable=False)
    repo: Mapped[str] = mapped_column(String(200), nullable=False)

    conflicts_detected: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    validation_form_posted: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    analyzed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_conflict_analyses_pr", "owner", "repo", "pr_number", "analyzed_at"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ConflictAnalysis(pr={self.owner}/{self.repo}#{self.pr_number}, "
            f"conflicts={self.conflicts_detected}, "
            f"prompted={self.validation_form_posted})>"
        )


class ConflictFeedback(BaseModel):
    """A reviewer's confirmation or denial of a detected conflict."""

    __tablename__ = "conflict_feedback"

    pr_number: Mapped[int] = mapped_column(Integer, nullable=False)
    conflict_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)

    owner: Mapped[str | None] = mapped_column(String(200), nullable=True)
    repo: Mapped[str | None] = mapped_column(String(200), nullable=True)
    reviewer: Mapped[str | None] = mapped_column(String(200), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_conflict_feedback_pr", "owner", "repo", "pr_number", "recorded_at"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ConflictFeedback(pr_number={self.pr_number}, "
            f"confirmed={self.conflict_confirmed})>"
        )
