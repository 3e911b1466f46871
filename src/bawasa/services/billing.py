"""Service responsible for generating bills and settling payments."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from uuid import UUID

from bawasa.config import settings
from bawasa.core import calculations
from bawasa.core.dates import first_of_month, next_period
from bawasa.core.models import Billing, PaymentStatus
from bawasa.core.repositories.billing import BillingRepository
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository

logger = logging.getLogger(__name__)


class BillingError(Exception):
    """Custom exception for billing errors."""


class BillingNotFound(BillingError):
    """The reading or bill referred to does not exist."""


class BillingService:
    """Orchestrates bill generation, payments and overdue handling."""

    def __init__(
        self,
        consumer_repo: ConsumerRepository,
        reading_repo: ReadingRepository,
        billing_repo: BillingRepository,
    ):
        self._consumer_repo = consumer_repo
        self._reading_repo = reading_repo
        self._billing_repo = billing_repo

    async def generate_billing(
        self, reading_id: UUID | str, today: date | None = None
    ) -> Billing:
        """
        Generates the bill for a recorded meter reading.

        The first block of consumption carries the registered-voter discount.
        Any balance left on the consumer's previous bill is carried over as
        arrears. The bill is due on the first day of the following month.
        """
        reading = await self._reading_repo.get(reading_id)
        if reading is None:
            raise BillingNotFound(f"Meter reading {reading_id} not found.")
        if not reading.reading_assigned:
            raise BillingError("The present reading has not been recorded yet.")
        if await self._billing_repo.get_for_reading(reading.id) is not None:
            raise BillingError(f"Meter reading {reading_id} is already billed.")

        await reading.fetch_related("consumer")
        consumer = reading.consumer

        billing_month = first_of_month(
            reading.reading_date or reading.created_at.date()
        )
        calc = calculations.calculate_billing(
            reading.consumption_cubic_meters,
            calculations.ConsumerDiscountInfo(
                is_registered_voter=consumer.registered_voter,
                account_created_at=consumer.created_at,
            ),
            today=today,
            rate=settings.RATE_PER_CUBIC_METER,
            block=settings.DISCOUNTED_BLOCK_CUBIC_METERS,
        )

        arrears = Decimal("0")
        previous_bill = await self._billing_repo.get_latest_for_consumer(
            consumer.id, before=billing_month
        )
        if previous_bill is not None and previous_bill.payment_status != PaymentStatus.PAID:
            arrears = previous_bill.outstanding + (
                previous_bill.arrears_after_due_date or Decimal("0")
            )

        billing = await self._billing_repo.create(
            consumer_id=consumer.id,
            meter_reading_id=reading.id,
            billing_month=billing_month,
            consumption_10_or_below=calc.consumption_10_or_below,
            amount_10_or_below=calc.amount_10_or_below,
            amount_10_or_below_with_discount=calc.amount_10_or_below_with_discount,
            consumption_over_10=calc.consumption_over_10,
            amount_over_10=calc.amount_over_10,
            amount_current_billing=calc.amount_current_billing,
            discount_percentage=calc.discount_percentage,
            arrears_to_be_paid=calculations.round_money(arrears),
            total_amount_due=calculations.round_money(
                calc.amount_current_billing + arrears
            ),
            due_date=next_period(billing_month),
        )
        logger.info(
            f"Generated billing for consumer {consumer.id} in {billing_month:%Y-%m}: "
            f"{billing.total_amount_due} due {billing.due_date}"
        )
        return billing

    async def record_payment(
        self,
        billing_id: UUID | str,
        amount: Decimal | int | float | str,
        paid_at: datetime | None = None,
    ) -> Billing:
        """
        Applies a cashier payment to a bill.

        Payments accumulate; the bill is ``paid`` once nothing is outstanding
        and ``partial`` otherwise.
        """
        try:
            payment = Decimal(str(amount))
        except InvalidOperation as e:
            raise BillingError("Please enter a valid payment amount") from e
        if not payment.is_finite() or payment <= 0:
            raise BillingError("Please enter a valid payment amount")

        billing = await self._billing_repo.get(billing_id)
        if billing is None:
            raise BillingNotFound(f"Billing {billing_id} not found.")
        if billing.payment_status == PaymentStatus.PAID:
            raise BillingError("This bill is already paid.")

        payment = calculations.round_money(payment)
        if payment > billing.outstanding:
            raise BillingError("Payment amount cannot exceed the total amount due")

        billing.amount_paid += payment
        billing.payment_status = (
            PaymentStatus.PAID if billing.outstanding <= 0 else PaymentStatus.PARTIAL
        )
        billing.payment_date = paid_at or datetime.now(timezone.utc)
        await self._billing_repo.save(billing)

        logger.info(
            f"Recorded payment of {payment} on billing {billing.id}: "
            f"{billing.payment_status.value}, {billing.outstanding} outstanding"
        )
        return billing

    async def mark_overdue(self, today: date | None = None) -> list[Billing]:
        """Flags unsettled bills past their due date and applies the penalty."""
        today = today or date.today()
        overdue = await self._billing_repo.get_past_due(today)
        for billing in overdue:
            billing.payment_status = PaymentStatus.OVERDUE
            billing.arrears_after_due_date = calculations.calculate_overdue_penalty(
                billing.total_amount_due, settings.OVERDUE_PENALTY_RATE
            )
            await self._billing_repo.save(billing)
        logger.info(f"Marked {len(overdue)} billings as overdue.")
        return overdue
