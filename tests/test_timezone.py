"""
Pytest module for the timezone offset resolver and wall-time helpers.
"""

from datetime import date, datetime, timezone

import pytest

from dayfit.errors import InvalidInput, InvalidTimezone
from dayfit.timezone import (
    local_to_utc,
    resolve_offset_minutes,
    utc_iso,
    utc_to_local,
    wall_time_on_date_to_utc,
)


@pytest.mark.parametrize(
    "zone, day, expected",
    [
        ("Australia/Sydney", "2025-12-27", -660),
        ("Australia/Sydney", "2025-06-15", -600),
        ("America/New_York", "2025-01-15", 300),
        ("America/New_York", "2025-07-01", 240),
        ("Europe/London", "2025-01-15", 0),
        ("UTC", "2025-12-27", 0),
        ("Asia/Seoul", "2025-12-27", -540),
    ],
)
def test_offset_sign_convention(zone, day, expected):
    assert resolve_offset_minutes(zone, day) == expected


def test_sydney_dst_start_day_uses_noon_offset():
    # Clocks go 02:00 -> 03:00 on 2025-10-05; noon is already daylight time.
    assert resolve_offset_minutes("Australia/Sydney", "2025-10-04") == -600
    assert resolve_offset_minutes("Australia/Sydney", "2025-10-05") == -660
    assert resolve_offset_minutes("Australia/Sydney", "2025-10-06") == -660


def test_sydney_dst_end_day_uses_noon_offset():
    # Clocks go 03:00 -> 02:00 on 2025-04-06; noon is standard time.
    assert resolve_offset_minutes("Australia/Sydney", "2025-04-05") == -660
    assert resolve_offset_minutes("Australia/Sydney", "2025-04-06") == -600


def test_new_york_spring_forward_day():
    assert resolve_offset_minutes("America/New_York", "2025-03-08") == 300
    assert resolve_offset_minutes("America/New_York", "2025-03-09") == 240


def test_half_hour_zone_keeps_minutes():
    assert resolve_offset_minutes("Asia/Kolkata", "2025-12-27") == -330


def test_accepts_date_object():
    assert resolve_offset_minutes("Australia/Sydney", date(2025, 12, 27)) == -660


@pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "", "   ", None, "../etc/passwd"])
def test_unknown_timezone_raises(zone):
    with pytest.raises(InvalidTimezone):
        resolve_offset_minutes(zone, "2025-12-27")


def test_invalid_timezone_is_not_silently_zero():
    with pytest.raises(InvalidTimezone) as excinfo:
        resolve_offset_minutes("Not/AZone", "2025-12-27")
    assert excinfo.value.timezone_name == "Not/AZone"


@pytest.mark.parametrize("day", ["2025-13-01", "27/12/2025", "2025-02-30", "", None])
def test_malformed_date_raises(day):
    with pytest.raises(InvalidInput):
        resolve_offset_minutes("Australia/Sydney", day)


def test_local_to_utc_and_back():
    instant = local_to_utc(date(2025, 12, 27), 9 * 60, -660)
    assert instant == datetime(2025, 12, 26, 22, 0, tzinfo=timezone.utc)
    assert utc_to_local(instant, -660) == datetime(2025, 12, 27, 9, 0)


def test_wall_time_on_date_to_utc_regular_time():
    instant = wall_time_on_date_to_utc("2025-12-27", "09:00", "Australia/Sydney")
    assert utc_iso(instant) == "2025-12-26T22:00:00Z"


def test_wall_time_in_spring_forward_gap_moves_forward():
    # 02:30 does not exist in New York on 2025-03-09; 03:00 EDT is 07:00Z.
    instant = wall_time_on_date_to_utc("2025-03-09", "02:30", "America/New_York")
    assert utc_iso(instant) == "2025-03-09T07:00:00Z"


def test_wall_time_rejects_bad_time():
    with pytest.raises(InvalidInput):
        wall_time_on_date_to_utc("2025-12-27", "25:00", "Australia/Sydney")


def test_utc_iso_normalizes_offset():
    sydney_nine = datetime.fromisoformat("2025-12-27T09:00:00+11:00")
    assert utc_iso(sydney_nine) == "2025-12-26T22:00:00Z"
