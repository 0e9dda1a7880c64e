from __future__ import annotations


class InvalidInput(ValueError):
    """Malformed scheduler input (date, lists, durations, wall times)."""


class InvalidTimezone(ValueError):
    """Unrecognized or malformed IANA timezone identifier."""

    def __init__(self, timezone_name: object):
        self.timezone_name = timezone_name
        super().__init__(f"Unknown timezone: {timezone_name!r}")
