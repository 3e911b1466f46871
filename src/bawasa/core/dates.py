"""Date and time helper functions."""

from __future__ import annotations

from datetime import date, datetime, timezone

from dateutil import parser
from dateutil.relativedelta import relativedelta


# Two defaults that differ in every date part. A string that leaves any of
# year, month or day out parses differently against each.
_DISTINCT_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_timestamp(value: str) -> datetime:
    """
    Parses a free-form date/time string into an aware UTC datetime.

    The string must name a full calendar date; partial values such as
    ``"June"`` are rejected rather than completed from today's date.
    Naive values are taken as UTC. Raises ``ValueError`` if the string
    cannot be parsed.
    """
    try:
        parsed, other = (parser.parse(value, default=d) for d in _DISTINCT_DEFAULTS)
    except (parser.ParserError, OverflowError) as e:
        raise ValueError(f"Unparseable date: {value!r}") from e
    if parsed.date() != other.date():
        raise ValueError(f"Incomplete date: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def first_of_month(value: date) -> date:
    """Normalizes a date to the billing period it belongs to."""
    return date(value.year, value.month, 1)


def next_period(period: date) -> date:
    """First day of the month after ``period``."""
    return first_of_month(period) + relativedelta(months=1)


def format_period_for_display(period_date: date) -> str:
    """Formats a date period into 'Month YYYY'."""
    return period_date.strftime("%B %Y")
