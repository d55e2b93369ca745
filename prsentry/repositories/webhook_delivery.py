"""WebhookDelivery repository."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from prsentry.models import WebhookDelivery

from .base import BaseRepository


class WebhookDeliveryRepository(BaseRepository[WebhookDelivery]):
    """Repository for processed delivery records."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, WebhookDelivery)

    async def get_by_delivery_id(self, delivery_id: str) -> WebhookDelivery | None:
        """Get the record of a delivery GUID."""
        query = select(WebhookDelivery).where(
            WebhookDelivery.delivery_id == delivery_id
        )
        return await self._execute_single_query(query)

    async def delete_by_delivery_id(self, delivery_id: str) -> int:
        """Delete the record of a delivery GUID. Returns the number deleted."""
        stmt = delete(WebhookDelivery).where(WebhookDelivery.delivery_id == delivery_id)
        result = await self.session.execute(stmt)
        await self.flush()
        return result.rowcount or 0

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete records created before ``cutoff``. Returns the number deleted."""
        stmt = delete(WebhookDelivery).where(WebhookDelivery.created_at < cutoff)
        result = await self.session.execute(stmt)
        await self.flush()
        return result.rowcount or 0
