"""Tests for meter change remarks."""

from decimal import Decimal

import pytest

from bawasa.core.meter_change import (
    METER_CHANGED_MARKER,
    build_meter_change_remarks,
    extract_reason,
    format_volume,
    has_meter_change_marker,
)


def test_build_remarks_records_every_figure_and_the_marker():
    remarks = build_meter_change_remarks(
        reason="Meter damaged",
        final_reading=Decimal("50"),
        previous_reading=Decimal("42.00"),
        consumption_to_bill=Decimal("8"),
    )
    assert remarks == (
        "METER CHANGE: Meter damaged. "
        "Final reading on old meter: 50 m³. "
        "Previous reading was: 42 m³. "
        "Consumption to bill: 8 m³. "
        "[METER_CHANGED]"
    )
    assert has_meter_change_marker(remarks)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("42.00"), "42"),
        (Decimal("8.50"), "8.5"),
        (Decimal("0"), "0"),
        (Decimal("420"), "420"),
        (Decimal("12.25"), "12.25"),
    ],
)
def test_format_volume(value, expected):
    assert format_volume(value) == expected


@pytest.mark.parametrize(
    "remarks, expected",
    [
        ("METER CHANGE: Meter damaged. Final reading on old meter: 50 m³.", "Meter damaged"),
        ("Replaced by contractor", "Replaced by contractor"),
        (None, "No reason provided"),
        ("", "No reason provided"),
    ],
)
def test_extract_reason(remarks, expected):
    assert extract_reason(remarks) == expected


def test_marker_absent_from_ordinary_remarks():
    assert not has_meter_change_marker("Regular monthly reading")
    assert not has_meter_change_marker(None)
    assert METER_CHANGED_MARKER == "[METER_CHANGED]"
