from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from bawasa.core.models import Consumer, MeterReading
from bawasa.core.repositories.billing import BillingRepository
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository
from bawasa.services.billing import BillingService
from bawasa.services.readings import ReadingService
from bawasa.services.scheduler import SchedulerService


@pytest.mark.asyncio
async def test_consumer_reading_crud():
    consumer_repo = ConsumerRepository()
    reading_repo = ReadingRepository()

    consumer = await consumer_repo.create(water_meter_no="WM-9", full_name="ACME")
    reading = await reading_repo.create(
        consumer=consumer, previous_reading=Decimal("1"), present_reading=Decimal("4")
    )

    fetched = await reading_repo.get(reading.id)
    assert fetched is not None and fetched.id == reading.id
    assert (await consumer_repo.get_by_meter_no("WM-9")).id == consumer.id


@pytest.mark.asyncio
async def test_get_latest_orders_by_created_at(consumer: Consumer):
    reading_repo = ReadingRepository()
    newer = await MeterReading.create(
        consumer=consumer,
        present_reading=Decimal("20"),
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    older = await MeterReading.create(
        consumer=consumer,
        present_reading=Decimal("10"),
        created_at=datetime(2024, 4, 1, tzinfo=timezone.utc),
    )

    assert (await reading_repo.get_latest(consumer.id)).id == newer.id
    assert (await reading_repo.get_latest(consumer.id, exclude_id=newer.id)).id == older.id
    assert await reading_repo.get_latest("00000000-0000-0000-0000-000000000000") is None


@pytest.mark.asyncio
async def test_scheduler_runs_jobs(caplog, consumer: Consumer):
    """Smoke test: scheduled jobs call the services without errors."""
    consumer_repo = ConsumerRepository()
    reading_repo = ReadingRepository()
    reading_service = ReadingService(consumer_repo=consumer_repo, reading_repo=reading_repo)
    billing_service = BillingService(
        consumer_repo=consumer_repo,
        reading_repo=reading_repo,
        billing_repo=BillingRepository(),
    )
    service = SchedulerService(reading_service, billing_service, AsyncIOScheduler())

    caplog.set_level("INFO")

    await service._open_monthly_readings()
    await service._mark_overdue_billings()

    period = date.today().replace(day=1)
    assert await MeterReading.filter(consumer=consumer, reading_date=period).count() == 1
    assert "Opening reading period" in caplog.text
    assert "Marked 0 billings as overdue." in caplog.text
