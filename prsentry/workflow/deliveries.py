"""Deduplication of redelivered webhooks.

GitHub identifies every delivery with an ``X-GitHub-Delivery`` GUID, and a
redelivery carries the GUID of the original. A delivery is claimed before it
is handled; a second claim for the same GUID is refused.
"""

import logging
from datetime import UTC, datetime, timedelta

from prsentry.repositories import (
    PersistenceError,
    WebhookDeliveryRepository,
    persistence_operation,
)

from .tracker import SessionScope

logger = logging.getLogger(__name__)


class DeliveryLedger:
    """Remembers delivery GUIDs for a limited retention window."""

    def __init__(
        self, session_scope: SessionScope, retention: timedelta = timedelta(hours=72)
    ) -> None:
        self.session_scope = session_scope
        self.retention = retention

    async def claim(self, delivery_id: str, event_kind: str) -> bool:
        """Record a delivery. Returns False if it was already claimed.

        Records older than the retention window are purged first.

        Raises:
            PersistenceError: If the ledger cannot be read or written
        """
        cutoff = datetime.now(UTC) - self.retention
        try:
            async with persistence_operation("create", "webhook delivery"):
                async with self.session_scope() as session:
                    repo = WebhookDeliveryRepository(session)
                    await repo.delete_older_than(cutoff)
                    if await repo.get_by_delivery_id(delivery_id) is not None:
                        return False
                    await repo.create(delivery_id=delivery_id, event_kind=event_kind)
        except PersistenceError as e:
            if not e.is_integrity_violation:
                raise
            # A concurrent handler claimed the same GUID first
            return False

        return True

    async def release(self, delivery_id: str) -> bool:
        """Forget a delivery so that a redelivery is handled again.

        Returns False if the delivery was not recorded.
        """
        async with persistence_operation("delete", "webhook delivery"):
            async with self.session_scope() as session:
                deleted = await WebhookDeliveryRepository(
                    session
                ).delete_by_delivery_id(delivery_id)

        logger.info(
            "Released webhook delivery",
            extra={"delivery_id": delivery_id, "released": bool(deleted)},
        )
        return bool(deleted)
