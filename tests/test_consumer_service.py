"""Tests for the consumer service."""

from datetime import datetime, timezone

import pytest

from bawasa.core.models import Consumer
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository
from bawasa.services.consumers import ConsumerError, ConsumerService
from bawasa.services.readings import ConsumerNotFound


@pytest.fixture
def service() -> ConsumerService:
    return ConsumerService(
        consumer_repo=ConsumerRepository(), reading_repo=ReadingRepository()
    )


@pytest.mark.asyncio
async def test_add_consumer_strips_input_and_keeps_backdated_account(
    service: ConsumerService,
):
    consumer = await service.add_consumer(
        water_meter_no="  WM-0300 ",
        full_name=" Ana Lim ",
        full_address="",
        registered_voter=True,
        created_at=datetime(2020, 1, 5),
    )

    stored = await Consumer.get(id=consumer.id)
    assert stored.water_meter_no == "WM-0300"
    assert stored.full_name == "Ana Lim"
    assert stored.full_address is None
    assert stored.registered_voter is True
    assert stored.created_at == datetime(2020, 1, 5, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_add_consumer_rejects_duplicate_meter_number(
    service: ConsumerService, consumer: Consumer
):
    with pytest.raises(ConsumerError, match="already registered"):
        await service.add_consumer(water_meter_no="WM-0001", full_name="Copy")


@pytest.mark.asyncio
async def test_add_consumer_requires_name(service: ConsumerService):
    with pytest.raises(ConsumerError, match="required"):
        await service.add_consumer(water_meter_no="WM-0400", full_name="   ")
    assert await Consumer.all().count() == 0


@pytest.mark.asyncio
async def test_get_unknown_consumer(service: ConsumerService):
    with pytest.raises(ConsumerNotFound):
        await service.get_consumer("00000000-0000-0000-0000-000000000000")


@pytest.mark.asyncio
async def test_delete_consumer_keeps_accounts_with_readings(
    service: ConsumerService, consumer_with_reading: Consumer
):
    with pytest.raises(ConsumerError, match="cannot be deleted"):
        await service.delete_consumer(consumer_with_reading.id)
    assert await Consumer.exists(id=consumer_with_reading.id)
