"""Admin portal endpoints: consumers, meter changes, readings and billing."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response

from bawasa.api.dependencies import (
    get_billing_service,
    get_consumer_service,
    get_meter_change_service,
    get_reading_service,
)
from bawasa.api.schemas import (
    BillingIn,
    ConsumerIn,
    ReadingIn,
    ReadingPeriodIn,
    billing_to_dict,
    consumer_to_dict,
    meter_change_to_dict,
    reading_to_dict,
    summary_to_dict,
)
from bawasa.core.dates import format_period_for_display
from bawasa.services.billing import BillingService
from bawasa.services.consumers import ConsumerService
from bawasa.services.meter_change import (
    InvalidInput,
    MeterChangeRequest,
    MeterChangeService,
)
from bawasa.services.readings import ReadingService

router = APIRouter()


@router.post("/consumers")
async def add_consumer(
    body: ConsumerIn,
    service: ConsumerService = Depends(get_consumer_service),
):
    consumer = await service.add_consumer(
        water_meter_no=body.waterMeterNo,
        full_name=body.fullName,
        full_address=body.fullAddress,
        registered_voter=body.registeredVoter,
        created_at=body.createdAt,
    )
    return {
        "success": True,
        "data": consumer_to_dict(consumer),
        "message": "Consumer created successfully.",
    }


@router.get("/consumers")
async def list_consumers(
    search: str | None = None,
    service: ConsumerService = Depends(get_consumer_service),
):
    consumers = await service.list_consumers(search)
    return {"success": True, "data": [consumer_to_dict(c) for c in consumers]}


@router.get("/consumers/{consumer_id}")
async def get_consumer(
    consumer_id: UUID,
    service: ConsumerService = Depends(get_consumer_service),
):
    consumer = await service.get_consumer(consumer_id)
    return {"success": True, "data": consumer_to_dict(consumer)}


@router.delete("/consumers/{consumer_id}", status_code=204)
async def delete_consumer(
    consumer_id: UUID,
    service: ConsumerService = Depends(get_consumer_service),
):
    await service.delete_consumer(consumer_id)
    return Response(status_code=204)


@router.post("/change-meter")
async def change_meter(
    request: Request,
    service: MeterChangeService = Depends(get_meter_change_service),
):
    """
    Records a physical meter replacement for a consumer.

    Closes out the old meter with one final reading. The new meter's first
    reading is collected later and starts from 0.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        raise InvalidInput("Invalid request body") from e

    change_request = MeterChangeRequest.from_payload(payload)
    result = await service.change_meter(change_request)
    return {
        "success": True,
        "data": reading_to_dict(result.reading),
        "message": result.message,
        "summary": summary_to_dict(result.summary),
    }


@router.get("/consumers/{consumer_id}/meter-changes")
async def list_meter_changes(
    consumer_id: UUID,
    service: MeterChangeService = Depends(get_meter_change_service),
):
    entries = await service.list_meter_changes(consumer_id)
    return {"success": True, "data": [meter_change_to_dict(e) for e in entries]}


@router.post("/readings")
async def record_reading(
    body: ReadingIn,
    service: ReadingService = Depends(get_reading_service),
):
    reading = await service.record_reading(
        consumer_id=body.consumerId,
        present_reading=body.presentReading,
        reading_date=body.readingDate,
    )
    return {"success": True, "data": reading_to_dict(reading)}


@router.post("/reading-periods")
async def open_reading_period(
    body: ReadingPeriodIn,
    service: ReadingService = Depends(get_reading_service),
):
    """Opens a billing month: one placeholder reading per consumer."""
    created = await service.open_reading_period(body.period)
    return {
        "success": True,
        "data": [reading_to_dict(r) for r in created],
        "message": (
            f"Created {len(created)} meter readings for "
            f"{format_period_for_display(body.period)}."
        ),
    }


@router.post("/billings")
async def generate_billing(
    body: BillingIn,
    service: BillingService = Depends(get_billing_service),
):
    billing = await service.generate_billing(body.meterReadingId)
    return {"success": True, "data": billing_to_dict(billing)}
