"""
UTC offset resolution for a named timezone on a calendar date.

Offsets follow the "UTC minus local" sign convention used across the
service: ``Australia/Sydney`` in summer (UTC+11) resolves to ``-660`` and
``America/New_York`` in winter (UTC-5) to ``300``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, date
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import MAX_DST_COERCE_MINUTES
from .errors import InvalidInput, InvalidTimezone
from .utils import _log_debug, parse_iso_date, time_to_minutes

# Offsets are resolved at this local hour so early-morning DST switches
# on the same day are already in effect.
REFERENCE_HOUR = 12


def load_zone(timezone_name: object) -> ZoneInfo:
    if not isinstance(timezone_name, str) or not timezone_name.strip():
        raise InvalidTimezone(timezone_name)
    try:
        return ZoneInfo(timezone_name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezone(timezone_name) from exc


def _as_date(calendar_date: Union[str, date]) -> date:
    if isinstance(calendar_date, datetime):
        raise InvalidInput(f"Expected a calendar date, got a datetime: {calendar_date!r}")
    if isinstance(calendar_date, date):
        return calendar_date
    return parse_iso_date(calendar_date)


def resolve_offset_minutes(timezone_name: str, calendar_date: Union[str, date]) -> int:
    """Return the offset in effect at local noon on ``calendar_date``.

    Raises InvalidTimezone for an unknown identifier and InvalidInput for a
    malformed date.
    """
    day = _as_date(calendar_date)
    zone = load_zone(timezone_name)
    reference = datetime(day.year, day.month, day.day, REFERENCE_HOUR, tzinfo=zone)
    offset = reference.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds() // 60)
    _log_debug(f"[TZ] {timezone_name} {day.isoformat()} utcoffset={minutes}m")
    return -minutes


def local_to_utc(day: date, minutes_since_midnight: int, offset_minutes: int) -> datetime:
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return midnight + timedelta(minutes=minutes_since_midnight + offset_minutes)


def utc_to_local(instant: datetime, offset_minutes: int) -> datetime:
    """Shift an instant to naive local wall time for the given offset."""
    return (instant.astimezone(timezone.utc) - timedelta(minutes=offset_minutes)).replace(tzinfo=None)


def wall_time_on_date_to_utc(calendar_date: Union[str, date], wall_time: str,
                             timezone_name: str) -> datetime:
    """Convert a local "HH:MM" on a date to a UTC instant using the zone rules.

    A wall time that does not exist (spring-forward gap) is moved forward to
    the first valid minute.
    """
    day = _as_date(calendar_date)
    zone = load_zone(timezone_name)
    naive = datetime(day.year, day.month, day.day) + timedelta(minutes=time_to_minutes(wall_time))
    for shift in range(MAX_DST_COERCE_MINUTES + 1):
        candidate = naive + timedelta(minutes=shift)
        instant = candidate.replace(tzinfo=zone).astimezone(timezone.utc)
        if instant.astimezone(zone).replace(tzinfo=None) == candidate:
            return instant
    raise InvalidInput(
        f"Invalid local time {day.isoformat()}T{wall_time} in zone {timezone_name!r}")


def utc_iso(instant: datetime) -> str:
    utc = instant.astimezone(timezone.utc).replace(tzinfo=None, microsecond=0)
    return utc.isoformat() + "Z"
