"""
dayfit: 하루 단위 태스크 자동 배치 엔진
"""

from .autofit import auto_fit_tasks, compute_free_slots
from .errors import InvalidInput, InvalidTimezone
from .models import DEFAULT_PREFERENCES
from .timezone import resolve_offset_minutes, wall_time_on_date_to_utc

__all__ = [
    "auto_fit_tasks",
    "compute_free_slots",
    "resolve_offset_minutes",
    "wall_time_on_date_to_utc",
    "InvalidInput",
    "InvalidTimezone",
    "DEFAULT_PREFERENCES",
]
