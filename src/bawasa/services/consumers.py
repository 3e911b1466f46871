"""Service for managing the consumers served by the water system."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from tortoise.exceptions import IntegrityError

from bawasa.core.models import Consumer
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository
from bawasa.services.readings import ConsumerNotFound

logger = logging.getLogger(__name__)


class ConsumerError(Exception):
    """Raised when a consumer cannot be added or removed."""


class ConsumerService:
    """Adds, looks up and removes consumer accounts."""

    def __init__(self, consumer_repo: ConsumerRepository, reading_repo: ReadingRepository):
        self._consumer_repo = consumer_repo
        self._reading_repo = reading_repo

    async def add_consumer(
        self,
        water_meter_no: str,
        full_name: str,
        full_address: str | None = None,
        registered_voter: bool = False,
        created_at: datetime | None = None,
    ) -> Consumer:
        """
        Registers a new consumer.

        ``created_at`` backdates the account for consumers who were served
        before they were entered here; it drives the year-of-service discount.
        """
        water_meter_no = water_meter_no.strip()
        if not water_meter_no or not full_name.strip():
            raise ConsumerError("Water meter number and full name are required.")
        if await self._consumer_repo.get_by_meter_no(water_meter_no) is not None:
            raise ConsumerError(f"Water meter {water_meter_no} is already registered.")

        fields = {
            "water_meter_no": water_meter_no,
            "full_name": full_name.strip(),
            "full_address": full_address.strip() if full_address else None,
            "registered_voter": registered_voter,
        }
        if created_at is not None:
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            fields["created_at"] = created_at
        try:
            consumer = await self._consumer_repo.create(**fields)
        except IntegrityError as e:
            # Lost a race with another insert of the same meter number.
            raise ConsumerError(
                f"Water meter {water_meter_no} is already registered."
            ) from e

        logger.info(f"Added consumer {consumer.id} with meter {water_meter_no}.")
        return consumer

    async def list_consumers(self, search: str | None = None) -> list[Consumer]:
        """All consumers, or those whose meter number, name or address matches."""
        if search and search.strip():
            return await self._consumer_repo.search(search.strip())
        return await self._consumer_repo.all()

    async def get_consumer(self, consumer_id: UUID | str) -> Consumer:
        consumer = await self._consumer_repo.get(consumer_id)
        if consumer is None:
            raise ConsumerNotFound(f"Consumer {consumer_id} not found.")
        return consumer

    async def delete_consumer(self, consumer_id: UUID | str) -> None:
        """
        Removes a consumer that has no meter readings yet.

        Readings are the billing audit trail, so a consumer that has any is
        kept.
        """
        consumer = await self.get_consumer(consumer_id)
        if await self._reading_repo.get_latest(consumer.id) is not None:
            raise ConsumerError(
                "Consumer has meter readings on record and cannot be deleted."
            )
        await self._consumer_repo.delete(consumer)
        logger.info(f"Deleted consumer {consumer.id} ({consumer.water_meter_no}).")
