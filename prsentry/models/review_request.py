"""ReviewRequest SQLAlchemy model."""

from sqlalchemy import BigInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class ReviewRequest(BaseModel):
    """Pending review request for a pull request, keyed by PR identity."""

    __tablename__ = "review_requests"

    pr_github_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    reviewer: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint("pr_github_id", "reviewer", name="uq_review_request_reviewer"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ReviewRequest(pr_github_id={self.pr_github_id}, "
            f"reviewer={self.reviewer})>"
        )
