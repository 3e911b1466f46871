"""Domain models for the BAWASA billing application."""

from __future__ import annotations

import enum
import uuid

from tortoise import fields, models


class PaymentStatus(str, enum.Enum):
    """Settlement state of a bill."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class BaseModel(models.Model):
    """Abstract base model with common fields."""

    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True


class Consumer(BaseModel):
    """A billed water service account."""

    water_meter_no = fields.CharField(max_length=64, unique=True)
    full_name = fields.CharField(max_length=255)
    full_address = fields.CharField(max_length=255, null=True)
    registered_voter = fields.BooleanField(
        default=False,
        description="Registered voters get the year-of-service discount",
    )

    readings: fields.ReverseRelation[MeterReading]
    billings: fields.ReverseRelation[Billing]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.water_meter_no})"


class MeterReading(models.Model):
    """
    A (previous, present) pair recorded for a consumer's meter.

    Readings are an append-only audit trail. ``created_at`` and ``updated_at``
    are set by the caller when the reading belongs to a past date (a meter
    change takes effect on an operator-supplied date), so neither field is
    refreshed automatically on save.
    """

    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    consumer: fields.ForeignKeyRelation[Consumer] = fields.ForeignKeyField(
        "models.Consumer", related_name="readings"
    )
    reading_date = fields.DateField(null=True)
    previous_reading = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    present_reading = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    consumption_cubic_meters = fields.DecimalField(
        max_digits=10, decimal_places=2, default=0
    )
    reading_assigned = fields.BooleanField(default=False)
    meter_changed = fields.BooleanField(
        default=False,
        description="Closing reading of a retired meter; next reading starts at 0",
    )
    remarks = fields.TextField(null=True)
    meter_image = fields.CharField(max_length=512, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now_add=True)

    billing: fields.BackwardOneToOneRelation[Billing]

    class Meta:
        table = "meter_readings"

    def __str__(self) -> str:
        return (
            f"Reading for {self.consumer_id}: "
            f"{self.previous_reading} -> {self.present_reading}"
        )


class Billing(BaseModel):
    """A monthly water bill produced from one meter reading."""

    consumer: fields.ForeignKeyRelation[Consumer] = fields.ForeignKeyField(
        "models.Consumer", related_name="billings"
    )
    meter_reading: fields.OneToOneRelation[MeterReading] = fields.OneToOneField(
        "models.MeterReading", related_name="billing"
    )
    billing_month = fields.DateField()  # e.g., 2024-06-01 for June 2024

    consumption_10_or_below = fields.DecimalField(max_digits=10, decimal_places=2)
    amount_10_or_below = fields.DecimalField(max_digits=10, decimal_places=2)
    amount_10_or_below_with_discount = fields.DecimalField(
        max_digits=10, decimal_places=2
    )
    consumption_over_10 = fields.DecimalField(max_digits=10, decimal_places=2)
    amount_over_10 = fields.DecimalField(max_digits=10, decimal_places=2)
    amount_current_billing = fields.DecimalField(max_digits=10, decimal_places=2)
    discount_percentage = fields.DecimalField(
        max_digits=5, decimal_places=2, default=0
    )

    arrears_to_be_paid = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount_due = fields.DecimalField(max_digits=10, decimal_places=2)
    due_date = fields.DateField()
    arrears_after_due_date = fields.DecimalField(
        max_digits=10, decimal_places=2, null=True
    )

    payment_status = fields.CharEnumField(PaymentStatus, default=PaymentStatus.UNPAID)
    amount_paid = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    payment_date = fields.DatetimeField(null=True)

    class Meta:
        table = "billings"

    @property
    def outstanding(self):
        return self.total_amount_due - self.amount_paid

    def __str__(self) -> str:
        return (
            f"Billing for {self.consumer_id} on {self.billing_month}: "
            f"{self.total_amount_due} ({self.payment_status.value})"
        )
