"""Service that closes out a consumer's meter when it is physically replaced."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from tortoise.exceptions import BaseORMException

from bawasa.core import calculations
from bawasa.core.dates import parse_timestamp
from bawasa.core.meter_change import build_meter_change_remarks, extract_reason
from bawasa.core.models import MeterReading
from bawasa.core.repositories.reading import ReadingRepository

logger = logging.getLogger(__name__)

NEW_METER_STARTS_AT = 0
SUCCESS_MESSAGE = (
    "Meter changed successfully. "
    "New meter reading will appear on next reading schedule."
)
SUMMARY_NOTE = "Next reading will start from 0 on the new meter"


class MeterChangeError(Exception):
    """Base class for meter change failures."""


class InvalidInput(MeterChangeError):
    """The request is malformed. Nothing was written."""


class StoreReadFailure(MeterChangeError):
    """The last reading could not be fetched from the store."""


class StoreWriteFailure(MeterChangeError):
    """The closing reading could not be inserted."""


def _as_reading(value: Any) -> Decimal | None:
    """
    A JSON number as a reading rounded to the stored precision.

    Returns None for anything that is not a finite, non-negative number the
    reading columns can hold.
    """
    # bool is an int subclass but never a reading
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    reading = Decimal(value) if isinstance(value, int) else Decimal(str(value))
    if not reading.is_finite() or reading < 0 or reading > calculations.MAX_READING:
        return None
    return calculations.round_volume(reading)


@dataclass(frozen=True)
class MeterChangeRequest:
    """A validated meter change request."""

    consumer_id: str
    new_starting_reading: Decimal
    effective_date: datetime
    reason: str
    reading_before_change: Decimal | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> MeterChangeRequest:
        """
        Validates a raw JSON payload.

        Raises:
            InvalidInput: on the first malformed field.
        """
        if not isinstance(payload, dict):
            raise InvalidInput("Invalid request body")

        consumer_id = payload.get("consumerId")
        if not isinstance(consumer_id, str) or not consumer_id.strip():
            raise InvalidInput("Invalid consumer ID")
        try:
            consumer_id = str(UUID(consumer_id.strip()))
        except ValueError as e:
            raise InvalidInput("Invalid consumer ID") from e

        new_starting_reading = _as_reading(payload.get("newStartingReading"))
        if new_starting_reading is None:
            raise InvalidInput("Invalid starting reading")

        effective_date = payload.get("effectiveDate")
        if not isinstance(effective_date, str) or not effective_date.strip():
            raise InvalidInput("Invalid effective date")
        try:
            parsed_date = parse_timestamp(effective_date)
        except ValueError as e:
            raise InvalidInput("Invalid effective date") from e

        reason = payload.get("reason")
        if not isinstance(reason, str) or not reason.strip():
            raise InvalidInput("Reason is required")

        reading_before_change = payload.get("readingBeforeChange")
        if reading_before_change is not None:
            reading_before_change = _as_reading(reading_before_change)
            if reading_before_change is None:
                raise InvalidInput("Invalid reading before change")

        return cls(
            consumer_id=consumer_id,
            new_starting_reading=new_starting_reading,
            effective_date=parsed_date,
            reason=reason.strip(),
            reading_before_change=reading_before_change,
        )


@dataclass(frozen=True)
class MeterChangeSummary:
    """Figures reported back to the operator after a meter change."""

    final_reading_before_change: Decimal
    previous_reading: Decimal
    consumption_to_bill: Decimal
    new_meter_starts_at: int = NEW_METER_STARTS_AT
    note: str = SUMMARY_NOTE


@dataclass(frozen=True)
class MeterChangeResult:
    reading: MeterReading
    summary: MeterChangeSummary
    message: str = SUCCESS_MESSAGE


@dataclass(frozen=True)
class MeterChangeEntry:
    """One past meter change, as shown in a consumer's history."""

    reading: MeterReading
    reason: str


class MeterChangeService:
    """Records the final billing state of a meter at the moment it is replaced."""

    def __init__(self, reading_repo: ReadingRepository):
        self._reading_repo = reading_repo

    async def change_meter(self, request: MeterChangeRequest) -> MeterChangeResult:
        """
        Closes out the old meter for ``request.consumer_id``.

        Inserts exactly one reading: the final reading of the retired meter,
        flagged so the next reading collected for the consumer starts from 0.
        The new meter's first reading is not created here.

        The read of the last reading and the insert are not atomic: a
        concurrent reading for the same consumer between the two may leave a
        stale ``previous_reading`` baseline.

        Raises:
            StoreReadFailure: if the last reading cannot be fetched.
            StoreWriteFailure: if the closing reading cannot be inserted.
        """
        logger.info(
            f"Changing meter for consumer {request.consumer_id}: "
            f"final reading {request.reading_before_change}, "
            f"new starting reading {request.new_starting_reading}, "
            f"effective {request.effective_date.isoformat()}"
        )

        try:
            last_reading = await self._reading_repo.get_latest(request.consumer_id)
        except BaseORMException as e:
            logger.error(
                f"Failed to fetch last reading for consumer {request.consumer_id}: {e}",
                exc_info=True,
            )
            raise StoreReadFailure(str(e) or "Failed to fetch meter readings") from e

        previous_reading = (
            last_reading.present_reading if last_reading is not None else Decimal("0")
        )
        if request.reading_before_change is not None:
            final_reading = request.reading_before_change
        else:
            final_reading = previous_reading
        consumption_to_bill = calculations.calculate_consumption(
            present_reading=final_reading, previous_reading=previous_reading
        )

        remarks = build_meter_change_remarks(
            reason=request.reason,
            final_reading=final_reading,
            previous_reading=previous_reading,
            consumption_to_bill=consumption_to_bill,
        )

        try:
            reading = await self._reading_repo.create(
                consumer_id=request.consumer_id,
                reading_date=request.effective_date.date(),
                previous_reading=previous_reading,
                present_reading=final_reading,
                consumption_cubic_meters=consumption_to_bill,
                reading_assigned=True,
                meter_changed=True,
                remarks=remarks,
                meter_image=None,
                created_at=request.effective_date,
                updated_at=request.effective_date,
            )
        except BaseORMException as e:
            logger.error(
                f"Failed to record meter change for consumer {request.consumer_id}: {e}",
                exc_info=True,
            )
            raise StoreWriteFailure(str(e) or "Failed to create meter reading") from e

        logger.info(
            f"Meter change recorded for consumer {request.consumer_id}: "
            f"previous {previous_reading}, final {final_reading}, "
            f"consumption to bill {consumption_to_bill}"
        )
        return MeterChangeResult(
            reading=reading,
            summary=MeterChangeSummary(
                final_reading_before_change=final_reading,
                previous_reading=previous_reading,
                consumption_to_bill=consumption_to_bill,
            ),
        )

    async def list_meter_changes(self, consumer_id: str) -> list[MeterChangeEntry]:
        """Past meter changes for a consumer, newest first."""
        readings = await self._reading_repo.get_meter_changes(consumer_id)
        return [
            MeterChangeEntry(reading=reading, reason=extract_reason(reading.remarks))
            for reading in readings
        ]
