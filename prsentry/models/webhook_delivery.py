"""WebhookDelivery SQLAlchemy model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class WebhookDelivery(BaseModel):
    """A processed GitHub delivery, keyed by its ``X-GitHub-Delivery`` GUID.

    Rows are short-lived: they only need to outlive the window in which
    GitHub or an operator may redeliver the same payload.
    """

    __tablename__ = "webhook_deliveries"

    delivery_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    event_kind: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<WebhookDelivery(delivery_id={self.delivery_id}, "
            f"event_kind={self.event_kind})>"
        )
