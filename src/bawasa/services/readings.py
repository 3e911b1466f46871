"""Service for collecting meter readings."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from uuid import UUID

from bawasa.core import calculations
from bawasa.core.dates import first_of_month
from bawasa.core.meter_change import has_meter_change_marker
from bawasa.core.models import MeterReading
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository

logger = logging.getLogger(__name__)


class ReadingError(Exception):
    """Raised when a reading cannot be recorded."""


class ConsumerNotFound(ReadingError):
    """The consumer the reading is for does not exist."""


def is_meter_change_reading(reading: MeterReading) -> bool:
    """True if the reading closed out a retired meter."""
    return reading.meter_changed or has_meter_change_marker(reading.remarks)


class ReadingService:
    """Records readings and opens monthly reading periods."""

    def __init__(self, consumer_repo: ConsumerRepository, reading_repo: ReadingRepository):
        self._consumer_repo = consumer_repo
        self._reading_repo = reading_repo

    async def resolve_baseline(
        self, consumer_id: UUID | str, exclude_id: UUID | str | None = None
    ) -> Decimal:
        """
        Returns the value the next reading's consumption is measured from.

        That is the present reading of the consumer's latest reading, or 0 if
        there is none or the latest one closed out a replaced meter.
        """
        latest = await self._reading_repo.get_latest(consumer_id, exclude_id=exclude_id)
        if latest is None:
            return Decimal("0")
        if is_meter_change_reading(latest):
            logger.info(
                f"Consumer {consumer_id} had a meter change; new meter starts at 0."
            )
            return Decimal("0")
        return latest.present_reading

    async def record_reading(
        self,
        consumer_id: UUID | str,
        present_reading: Decimal | int | float | str,
        reading_date: date,
    ) -> MeterReading:
        """
        Records the present reading collected for a consumer.

        Fills the open placeholder for the reading month if there is one,
        otherwise inserts a new reading.
        """
        try:
            present = Decimal(str(present_reading))
        except InvalidOperation as e:
            raise ReadingError("Present reading must be a number") from e
        if not present.is_finite() or present < 0:
            raise ReadingError("Present reading must be a non-negative number")

        consumer = await self._consumer_repo.get(consumer_id)
        if consumer is None:
            raise ConsumerNotFound(f"Consumer {consumer_id} not found.")

        period = first_of_month(reading_date)
        now = datetime.now(timezone.utc)
        placeholder = await self._reading_repo.get_for_period(consumer.id, period)
        if placeholder is not None and placeholder.reading_assigned:
            raise ReadingError(
                f"A reading for {period:%B %Y} was already recorded for this consumer."
            )

        baseline = await self.resolve_baseline(
            consumer.id, exclude_id=placeholder.id if placeholder else None
        )
        if present < baseline:
            logger.warning(
                f"Present reading {present} is below previous reading {baseline} "
                f"for consumer {consumer.id}; consumption set to 0."
            )
        consumption = calculations.calculate_consumption(
            present_reading=present, previous_reading=baseline
        )

        if placeholder is not None:
            placeholder.previous_reading = baseline
            placeholder.present_reading = present
            placeholder.consumption_cubic_meters = consumption
            placeholder.reading_assigned = True
            placeholder.updated_at = now
            reading = await self._reading_repo.save(placeholder)
        else:
            reading = await self._reading_repo.create(
                consumer_id=consumer.id,
                reading_date=period,
                previous_reading=baseline,
                present_reading=present,
                consumption_cubic_meters=consumption,
                reading_assigned=True,
            )

        logger.info(
            f"Recorded reading for consumer {consumer.id} in {period:%Y-%m}: "
            f"{baseline} -> {present} ({consumption} m³)"
        )
        return reading

    async def open_reading_period(self, period: date) -> list[MeterReading]:
        """
        Creates a placeholder reading for every consumer without one this month.

        Placeholders start with present = previous = baseline and stay
        unassigned until the present reading is recorded. Running it twice for
        the same month creates nothing the second time.
        """
        period = first_of_month(period)
        logger.info(f"Opening reading period {period:%Y-%m}.")

        consumers = await self._consumer_repo.all()
        already_open = await self._reading_repo.consumer_ids_with_reading_on(period)

        created: list[MeterReading] = []
        for consumer in consumers:
            if str(consumer.id) in already_open:
                continue
            baseline = await self.resolve_baseline(consumer.id)
            reading = await self._reading_repo.create(
                consumer_id=consumer.id,
                reading_date=period,
                previous_reading=baseline,
                present_reading=baseline,
                consumption_cubic_meters=Decimal("0"),
                reading_assigned=False,
            )
            created.append(reading)

        logger.info(f"Created {len(created)} placeholder readings for {period:%Y-%m}.")
        return created
