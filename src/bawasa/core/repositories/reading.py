"""Repository for MeterReading model."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from bawasa.core.models import MeterReading
from bawasa.core.repositories.base import BaseRepository


class ReadingRepository(BaseRepository[MeterReading]):
    """Reading-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(MeterReading)

    async def get_latest(
        self, consumer_id: UUID | str, exclude_id: UUID | str | None = None
    ) -> MeterReading | None:
        """Most recent reading for a consumer by ``created_at``."""
        query = self.model.filter(consumer_id=consumer_id)
        if exclude_id is not None:
            query = query.exclude(id=exclude_id)
        return await query.order_by("-created_at").first()

    async def get_for_period(
        self, consumer_id: UUID | str, period: date
    ) -> MeterReading | None:
        """The reading recorded for a consumer in a billing month."""
        return await self.model.filter(
            consumer_id=consumer_id, reading_date=period, meter_changed=False
        ).first()

    async def consumer_ids_with_reading_on(self, period: date) -> set[str]:
        rows = await self.model.filter(
            reading_date=period, meter_changed=False
        ).values_list("consumer_id", flat=True)
        return {str(consumer_id) for consumer_id in rows}

    async def get_meter_changes(self, consumer_id: UUID | str) -> list[MeterReading]:
        """Closing readings of retired meters for a consumer, newest first."""
        return await self.model.filter(
            consumer_id=consumer_id, meter_changed=True
        ).order_by("-created_at")
