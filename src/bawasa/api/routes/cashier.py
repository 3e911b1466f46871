"""Cashier portal endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from bawasa.api.dependencies import get_billing_service
from bawasa.api.schemas import PaymentIn, billing_to_dict
from bawasa.services.billing import BillingService

router = APIRouter()


@router.post("/billings/{billing_id}/payments")
async def record_payment(
    billing_id: UUID,
    body: PaymentIn,
    service: BillingService = Depends(get_billing_service),
):
    billing = await service.record_payment(billing_id, body.amount)
    return {
        "success": True,
        "data": billing_to_dict(billing),
        "message": f"Payment recorded. Bill is {billing.payment_status.value}.",
    }
