"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from bawasa.api.app import create_app
from bawasa.core.models import Consumer, MeterReading


@pytest_asyncio.fixture(scope="function", autouse=True)
async def db_session():
    """
    Provides a clean in-memory SQLite database for each test function.
    """
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["bawasa.core.models"]},
        use_tz=True,
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def consumer() -> Consumer:
    return await Consumer.create(water_meter_no="WM-0001", full_name="Juan Dela Cruz")


@pytest_asyncio.fixture
async def consumer_with_reading(consumer: Consumer) -> Consumer:
    """A consumer whose last reading went from 10 to 42 m³."""
    await MeterReading.create(
        consumer=consumer,
        previous_reading=Decimal("10"),
        present_reading=Decimal("42"),
        consumption_cubic_meters=Decimal("32"),
        reading_assigned=True,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    return consumer


@pytest_asyncio.fixture
async def app():
    return create_app(init_db=False, start_scheduler=False)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
