"""Repository for Billing model."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from bawasa.core.models import Billing, PaymentStatus
from bawasa.core.repositories.base import BaseRepository


class BillingRepository(BaseRepository[Billing]):
    """Billing-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(Billing)

    async def get_for_reading(self, reading_id: UUID | str) -> Billing | None:
        return await self.model.get_or_none(meter_reading_id=reading_id)

    async def get_latest_for_consumer(
        self, consumer_id: UUID | str, before: date
    ) -> Billing | None:
        """The consumer's most recent bill for a month earlier than ``before``."""
        return (
            await self.model.filter(consumer_id=consumer_id, billing_month__lt=before)
            .order_by("-billing_month", "-created_at")
            .first()
        )

    async def get_past_due(self, today: date) -> list[Billing]:
        """Unsettled bills whose due date has passed."""
        return await self.model.filter(
            due_date__lt=today,
            payment_status__in=[PaymentStatus.UNPAID, PaymentStatus.PARTIAL],
        )
