"""Core business logic for calculations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from dateutil.relativedelta import relativedelta

CENT = Decimal("0.01")

RATE_PER_CUBIC_METER = Decimal("30")
DISCOUNTED_BLOCK = Decimal("10")

# Largest value the reading columns (10 digits, 2 places) can hold.
MAX_READING = Decimal("99999999.99")
MAX_AMOUNT = Decimal("99999999.99")

# Discount on the first block by year of service, registered voters only.
DISCOUNT_BY_YEAR_OF_SERVICE = {
    1: Decimal("0.00"),
    2: Decimal("0.25"),
    3: Decimal("0.50"),
    4: Decimal("0.75"),
}
FULL_DISCOUNT_FROM_YEAR = 5


def calculate_consumption(
    present_reading: Decimal, previous_reading: Decimal
) -> Decimal:
    """
    Calculates the consumption between two meter readings.

    Args:
        present_reading: The most recent meter reading.
        previous_reading: The reading the consumption is measured from.

    Returns:
        The consumed volume. Returns 0 if the present reading is below the
        previous one (inconsistent input or a replaced meter).
    """
    if present_reading < previous_reading:
        return Decimal("0")
    return present_reading - previous_reading


def round_money(value: Decimal) -> Decimal:
    """Rounds a monetary amount to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_volume(value: Decimal) -> Decimal:
    """Rounds a metered volume to the precision readings are stored with."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ConsumerDiscountInfo:
    """What the discount scheme needs to know about a consumer."""

    is_registered_voter: bool
    account_created_at: date | datetime


@dataclass(frozen=True)
class BillingCalculation:
    """Breakdown of a bill for one reading, mirroring the paper bill form."""

    consumption_10_or_below: Decimal
    amount_10_or_below: Decimal
    amount_10_or_below_with_discount: Decimal
    consumption_over_10: Decimal
    amount_over_10: Decimal
    amount_current_billing: Decimal
    discount_percentage: Decimal
    years_of_service: int
    is_registered_voter: bool


def calculate_years_of_service(
    account_created_at: date | datetime, today: date | None = None
) -> int:
    """
    Returns the consumer's year of service, starting at 1.

    The year increments on every anniversary of the account creation date.
    """
    if isinstance(account_created_at, datetime):
        account_created_at = account_created_at.date()
    today = today or date.today()
    years = relativedelta(today, account_created_at).years
    return max(1, years + 1)


def discount_for_year_of_service(years_of_service: int) -> Decimal:
    """Discount rate on the first block for a registered voter."""
    if years_of_service >= FULL_DISCOUNT_FROM_YEAR:
        return Decimal("1.00")
    return DISCOUNT_BY_YEAR_OF_SERVICE.get(years_of_service, Decimal("0.00"))


def calculate_billing(
    consumption: Decimal,
    consumer_info: ConsumerDiscountInfo | None = None,
    today: date | None = None,
    rate: Decimal = RATE_PER_CUBIC_METER,
    block: Decimal = DISCOUNTED_BLOCK,
) -> BillingCalculation:
    """
    Calculates the bill for a consumption volume.

    The first ``block`` cubic meters are charged at ``rate`` with the
    registered-voter discount applied; everything above the block is charged
    at the full rate. Consumers who are not registered voters get no discount.
    """
    is_voter = consumer_info.is_registered_voter if consumer_info else False
    years = (
        calculate_years_of_service(consumer_info.account_created_at, today)
        if consumer_info
        else 1
    )
    discount = discount_for_year_of_service(years) if is_voter else Decimal("0.00")

    within_block = min(consumption, block)
    over_block = max(consumption - block, Decimal("0"))

    amount_within = within_block * rate
    amount_within_discounted = amount_within * (Decimal("1") - discount)
    amount_over = over_block * rate

    return BillingCalculation(
        consumption_10_or_below=within_block,
        amount_10_or_below=round_money(amount_within),
        amount_10_or_below_with_discount=round_money(amount_within_discounted),
        consumption_over_10=over_block,
        amount_over_10=round_money(amount_over),
        amount_current_billing=round_money(amount_within_discounted + amount_over),
        discount_percentage=discount,
        years_of_service=years,
        is_registered_voter=is_voter,
    )


def calculate_overdue_penalty(total_amount_due: Decimal, rate: Decimal) -> Decimal:
    """Penalty added to a bill once its due date has passed."""
    return round_money(total_amount_due * rate)
