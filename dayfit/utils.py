from __future__ import annotations

from datetime import datetime, timedelta, timezone, date
from typing import Any, Optional

from .config import DAYFIT_DEBUG, ISO_DATE_RE, HHMM_RE
from .errors import InvalidInput


def _log_debug(message: str) -> None:
    if DAYFIT_DEBUG:
        print(message, flush=True)


def parse_iso_date(value: Any) -> date:
    if not isinstance(value, str) or not ISO_DATE_RE.match(value.strip()):
        raise InvalidInput(f"Invalid date (expected YYYY-MM-DD): {value!r}")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidInput(f"Invalid date (expected YYYY-MM-DD): {value!r}") from exc


def time_to_minutes(value: Any) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid time (expected HH:MM): {value!r}")
    match = HHMM_RE.match(value.strip())
    if not match:
        raise InvalidInput(f"Invalid time (expected HH:MM): {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def is_date_only(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(ISO_DATE_RE.match(value.strip()))


def parse_instant(value: Any, offset_minutes: int = 0) -> datetime:
    """Parse an RFC3339 instant into an aware UTC datetime.

    A value without an offset is read as local wall time, where
    ``offset_minutes`` follows the "UTC minus local" convention.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Invalid instant: {value!r}")
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise InvalidInput(f"Invalid instant: {value!r}") from exc
    try:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc) + timedelta(minutes=offset_minutes)
        return parsed.astimezone(timezone.utc)
    except OverflowError as exc:
        raise InvalidInput(f"Instant out of range: {value!r}") from exc


def is_all_day_span(start_iso: Optional[str],
                    end_iso: Optional[str]) -> bool:
    if is_date_only(start_iso):
        return True
    if start_iso and end_iso is not None and is_date_only(end_iso):
        return True
    return False
