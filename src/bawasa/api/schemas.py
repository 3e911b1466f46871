"""Request bodies and JSON shapes for the HTTP API."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from bawasa.core.calculations import MAX_AMOUNT, MAX_READING
from bawasa.core.models import Billing, Consumer, MeterReading
from bawasa.services.meter_change import MeterChangeEntry, MeterChangeSummary


class ConsumerIn(BaseModel):
    waterMeterNo: str = Field(min_length=1, max_length=64)
    fullName: str = Field(min_length=1, max_length=255)
    fullAddress: str | None = Field(default=None, max_length=255)
    registeredVoter: bool = False
    createdAt: datetime | None = None


class ReadingIn(BaseModel):
    consumerId: UUID
    presentReading: Decimal = Field(
        ge=0, le=MAX_READING, decimal_places=2, allow_inf_nan=False
    )
    readingDate: date


class ReadingPeriodIn(BaseModel):
    period: date


class BillingIn(BaseModel):
    meterReadingId: UUID


class PaymentIn(BaseModel):
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2, allow_inf_nan=False)


def as_number(value: Decimal | int | float | None) -> int | float | None:
    """JSON-friendly number: 42.00 -> 42, 8.50 -> 8.5."""
    if value is None:
        return None
    value = Decimal(str(value))
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def consumer_to_dict(consumer: Consumer) -> dict[str, Any]:
    return {
        "id": str(consumer.id),
        "water_meter_no": consumer.water_meter_no,
        "full_name": consumer.full_name,
        "full_address": consumer.full_address,
        "registered_voter": consumer.registered_voter,
        "created_at": _iso(consumer.created_at),
    }


def reading_to_dict(reading: MeterReading) -> dict[str, Any]:
    return {
        "id": str(reading.id),
        "consumer_id": str(reading.consumer_id),
        "reading_date": _iso(reading.reading_date),
        "previous_reading": as_number(reading.previous_reading),
        "present_reading": as_number(reading.present_reading),
        "consumption_cubic_meters": as_number(reading.consumption_cubic_meters),
        "reading_assigned": reading.reading_assigned,
        "meter_changed": reading.meter_changed,
        "remarks": reading.remarks,
        "meter_image": reading.meter_image,
        "created_at": _iso(reading.created_at),
        "updated_at": _iso(reading.updated_at),
    }


def summary_to_dict(summary: MeterChangeSummary) -> dict[str, Any]:
    return {
        "finalReadingBeforeChange": as_number(summary.final_reading_before_change),
        "previousReading": as_number(summary.previous_reading),
        "consumptionToBill": as_number(summary.consumption_to_bill),
        "newMeterStartsAt": summary.new_meter_starts_at,
        "note": summary.note,
    }


def meter_change_to_dict(entry: MeterChangeEntry) -> dict[str, Any]:
    return {**reading_to_dict(entry.reading), "reason": entry.reason}


def billing_to_dict(billing: Billing) -> dict[str, Any]:
    return {
        "id": str(billing.id),
        "consumer_id": str(billing.consumer_id),
        "meter_reading_id": str(billing.meter_reading_id),
        "billing_month": _iso(billing.billing_month),
        "consumption_10_or_below": as_number(billing.consumption_10_or_below),
        "amount_10_or_below": as_number(billing.amount_10_or_below),
        "amount_10_or_below_with_discount": as_number(
            billing.amount_10_or_below_with_discount
        ),
        "consumption_over_10": as_number(billing.consumption_over_10),
        "amount_over_10": as_number(billing.amount_over_10),
        "amount_current_billing": as_number(billing.amount_current_billing),
        "discount_percentage": as_number(billing.discount_percentage),
        "arrears_to_be_paid": as_number(billing.arrears_to_be_paid),
        "total_amount_due": as_number(billing.total_amount_due),
        "due_date": _iso(billing.due_date),
        "arrears_after_due_date": as_number(billing.arrears_after_due_date),
        "payment_status": billing.payment_status.value,
        "amount_paid": as_number(billing.amount_paid),
        "payment_date": _iso(billing.payment_date),
    }
