"""Audit remarks written for a meter change and how to read them back."""

from __future__ import annotations

import re
from decimal import Decimal

# Marker the reading workflow looks for: the next reading starts from 0.
METER_CHANGED_MARKER = "[METER_CHANGED]"

REMARKS_PREFIX = "METER CHANGE:"
NO_REASON = "No reason provided"

_REASON_RE = re.compile(r"METER CHANGE:\s*([^.]+)")


def format_volume(value: Decimal) -> str:
    """Renders a volume without trailing zeros: 42.00 -> '42', 8.50 -> '8.5'."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal("1")))
    return f"{normalized:f}"


def build_meter_change_remarks(
    reason: str,
    final_reading: Decimal,
    previous_reading: Decimal,
    consumption_to_bill: Decimal,
) -> str:
    """Builds the remarks stored on the closing reading of a retired meter."""
    return " ".join(
        [
            f"{REMARKS_PREFIX} {reason}.",
            f"Final reading on old meter: {format_volume(final_reading)} m³.",
            f"Previous reading was: {format_volume(previous_reading)} m³.",
            f"Consumption to bill: {format_volume(consumption_to_bill)} m³.",
            METER_CHANGED_MARKER,
        ]
    )


def has_meter_change_marker(remarks: str | None) -> bool:
    return bool(remarks) and METER_CHANGED_MARKER in remarks


def extract_reason(remarks: str | None) -> str:
    """Pulls the operator's reason back out of meter change remarks."""
    if not remarks:
        return NO_REASON
    match = _REASON_RE.search(remarks)
    return match.group(1).strip() if match else remarks
