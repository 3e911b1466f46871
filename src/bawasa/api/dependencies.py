"""FastAPI dependency providers.

Services are built once by ``create_app`` and kept on ``app.state``; routes
receive them per request through these providers.
"""

from __future__ import annotations

from fastapi import Request

from bawasa.services.billing import BillingService
from bawasa.services.consumers import ConsumerService
from bawasa.services.meter_change import MeterChangeService
from bawasa.services.readings import ReadingService


def get_meter_change_service(request: Request) -> MeterChangeService:
    return request.app.state.meter_change_service


def get_reading_service(request: Request) -> ReadingService:
    return request.app.state.reading_service


def get_billing_service(request: Request) -> BillingService:
    return request.app.state.billing_service


def get_consumer_service(request: Request) -> ConsumerService:
    return request.app.state.consumer_service
