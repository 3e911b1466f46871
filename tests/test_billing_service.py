"""Integration tests for the BillingService."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from bawasa.core.models import Billing, Consumer, MeterReading, PaymentStatus
from bawasa.core.repositories.billing import BillingRepository
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository
from bawasa.services.billing import BillingError, BillingNotFound, BillingService


@pytest.fixture
def billing_service() -> BillingService:
    """Provides a BillingService instance with real repositories."""
    return BillingService(
        consumer_repo=ConsumerRepository(),
        reading_repo=ReadingRepository(),
        billing_repo=BillingRepository(),
    )


async def _reading(
    consumer: Consumer, period: date, consumption: str, assigned: bool = True
) -> MeterReading:
    return await MeterReading.create(
        consumer=consumer,
        reading_date=period,
        previous_reading=Decimal("0"),
        present_reading=Decimal(consumption),
        consumption_cubic_meters=Decimal(consumption),
        reading_assigned=assigned,
    )


@pytest.mark.asyncio
async def test_generate_billing_for_registered_voter(billing_service: BillingService):
    # --- Arrange ---
    consumer = await Consumer.create(
        water_meter_no="WM-0100",
        full_name="Registered Voter",
        registered_voter=True,
        created_at=datetime(2023, 6, 1, tzinfo=timezone.utc),
    )
    reading = await _reading(consumer, date(2024, 6, 1), "15")

    # --- Act ---
    billing = await billing_service.generate_billing(reading.id, today=date(2024, 6, 15))

    # --- Assert ---
    # Year 2: (10 * 30 * 0.75) + (5 * 30) = 225 + 150
    assert billing.amount_current_billing == Decimal("375.00")
    assert billing.total_amount_due == Decimal("375.00")
    assert billing.arrears_to_be_paid == Decimal("0")
    assert billing.billing_month == date(2024, 6, 1)
    assert billing.due_date == date(2024, 7, 1)

    db_billing = await Billing.get(id=billing.id)
    assert db_billing.payment_status == PaymentStatus.UNPAID
    assert db_billing.total_amount_due == Decimal("375.00")


@pytest.mark.asyncio
async def test_generate_billing_carries_unpaid_balance_as_arrears(
    billing_service: BillingService, consumer: Consumer
):
    may = await _reading(consumer, date(2024, 5, 1), "10")
    june = await _reading(consumer, date(2024, 6, 1), "5")

    may_bill = await billing_service.generate_billing(may.id)
    await billing_service.record_payment(may_bill.id, Decimal("100"))
    june_bill = await billing_service.generate_billing(june.id)

    assert june_bill.amount_current_billing == Decimal("150.00")
    assert june_bill.arrears_to_be_paid == Decimal("200.00")
    assert june_bill.total_amount_due == Decimal("350.00")


@pytest.mark.asyncio
async def test_generate_billing_rejects_unbillable_readings(
    billing_service: BillingService, consumer: Consumer
):
    placeholder = await _reading(consumer, date(2024, 6, 1), "0", assigned=False)
    with pytest.raises(BillingError):
        await billing_service.generate_billing(placeholder.id)

    reading = await _reading(consumer, date(2024, 7, 1), "3")
    await billing_service.generate_billing(reading.id)
    with pytest.raises(BillingError, match="already billed"):
        await billing_service.generate_billing(reading.id)

    with pytest.raises(BillingNotFound):
        await billing_service.generate_billing("00000000-0000-0000-0000-000000000000")


@pytest.mark.asyncio
async def test_record_payment_partial_then_paid(
    billing_service: BillingService, consumer: Consumer
):
    reading = await _reading(consumer, date(2024, 6, 1), "10")
    billing = await billing_service.generate_billing(reading.id)

    billing = await billing_service.record_payment(billing.id, Decimal("120"))
    assert billing.payment_status == PaymentStatus.PARTIAL
    assert billing.outstanding == Decimal("180.00")
    assert billing.payment_date is not None

    billing = await billing_service.record_payment(billing.id, "180")
    assert billing.payment_status == PaymentStatus.PAID

    with pytest.raises(BillingError, match="already paid"):
        await billing_service.record_payment(billing.id, Decimal("1"))


@pytest.mark.asyncio
async def test_record_payment_rejects_invalid_amounts(
    billing_service: BillingService, consumer: Consumer
):
    reading = await _reading(consumer, date(2024, 6, 1), "10")
    billing = await billing_service.generate_billing(reading.id)

    with pytest.raises(BillingError, match="cannot exceed"):
        await billing_service.record_payment(billing.id, Decimal("300.01"))
    with pytest.raises(BillingError, match="valid payment amount"):
        await billing_service.record_payment(billing.id, Decimal("0"))
    with pytest.raises(BillingError, match="valid payment amount"):
        await billing_service.record_payment(billing.id, "ten")


@pytest.mark.asyncio
async def test_mark_overdue_applies_penalty(
    billing_service: BillingService, consumer: Consumer
):
    reading = await _reading(consumer, date(2024, 6, 1), "10")
    billing = await billing_service.generate_billing(reading.id)

    assert await billing_service.mark_overdue(date(2024, 7, 1)) == []
    overdue = await billing_service.mark_overdue(date(2024, 7, 2))

    assert [b.id for b in overdue] == [billing.id]
    stored = await Billing.get(id=billing.id)
    assert stored.payment_status == PaymentStatus.OVERDUE
    assert stored.arrears_after_due_date == Decimal("15.00")


@pytest.mark.asyncio
async def test_meter_change_reading_is_billed_for_consumption_to_bill(
    billing_service: BillingService, consumer: Consumer
):
    closing = await MeterReading.create(
        consumer=consumer,
        reading_date=date(2024, 6, 12),
        previous_reading=Decimal("42"),
        present_reading=Decimal("50"),
        consumption_cubic_meters=Decimal("8"),
        reading_assigned=True,
        meter_changed=True,
        remarks="METER CHANGE: Meter damaged. [METER_CHANGED]",
    )

    billing = await billing_service.generate_billing(closing.id)

    assert billing.amount_current_billing == Decimal("240.00")
    assert billing.billing_month == date(2024, 6, 1)
