"""Repository for Consumer model."""

from __future__ import annotations

from tortoise.expressions import Q

from bawasa.core.models import Consumer
from bawasa.core.repositories.base import BaseRepository


class ConsumerRepository(BaseRepository[Consumer]):
    """Consumer-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(Consumer)

    async def all(self) -> list[Consumer]:
        return await self.model.all().order_by("full_name")

    async def get_by_meter_no(self, water_meter_no: str) -> Consumer | None:
        """Get a consumer by the number printed on their water meter."""
        return await self.model.get_or_none(water_meter_no=water_meter_no)

    async def search(self, query: str) -> list[Consumer]:
        """Case-insensitive match on meter number, name or address."""
        return await self.model.filter(
            Q(water_meter_no__icontains=query)
            | Q(full_name__icontains=query)
            | Q(full_address__icontains=query)
        ).order_by("full_name")
