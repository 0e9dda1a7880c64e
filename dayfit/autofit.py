"""
Auto-Fit: 하루 단위 태스크 자동 배치
- 근무 시간 창(working hours)을 절대 시각 구간으로 변환
- 기존 일정/배치를 바쁜 구간으로 합치고 빼서 빈 슬롯 계산
- 입력 순서대로 가장 이른 슬롯에 greedy 배치
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, date
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .config import MAX_OFFSET_MINUTES, TIME_SLOT_INTERVAL
from .errors import InvalidInput
from .filters import matches_filter
from .models import (
    AutoFitResult,
    CalendarEvent,
    GoogleTask,
    TaskFilter,
    TaskPlacement,
    UserSettings,
    WorkingHours,
)
from .timezone import local_to_utc, utc_iso, utc_to_local
from .utils import _log_debug, parse_iso_date, parse_instant, time_to_minutes, is_all_day_span

ModelT = TypeVar("ModelT", bound=BaseModel)

_MIN_UTC = datetime.min.replace(tzinfo=timezone.utc)
_MAX_UTC = datetime.max.replace(tzinfo=timezone.utc)
_LAST_MINUTE = 23 * 60 + 59


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


@dataclass(frozen=True)
class FreeSlot:
    start: datetime
    end: datetime
    window_index: int
    window: WorkingHours

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


def auto_fit_tasks(
    tasks: Sequence[GoogleTask],
    events: Sequence[CalendarEvent],
    existing_placements: Sequence[TaskPlacement],
    settings: UserSettings,
    date: str,
    offset_minutes: int,
    working_hour_filters: Optional[Dict[str, TaskFilter]] = None,
    now: Optional[datetime] = None,
) -> AutoFitResult:
    """
    태스크들을 ``date``의 빈 근무 시간에 배치

    Args:
        tasks: 배치할 태스크 (입력 순서 = 우선순위)
        events: 기존 캘린더 일정 (종일 일정은 무시)
        existing_placements: 이미 확정된 배치
        settings: 배치 규칙 (기본 길이, 간격, 근무 시간 창)
        date: "YYYY-MM-DD"
        offset_minutes: UTC - local (분), resolve_offset_minutes 결과
        working_hour_filters: 근무 시간 창 id별 태스크 필터
        now: 주어지면 오늘 날짜의 지난 시간을 제외

    Returns:
        AutoFitResult(placements, unplaced_tasks, message)
    """
    parse_iso_date(date)
    task_list = _coerce_items(tasks, GoogleTask, "tasks")
    settings = _coerce_settings(settings)
    offset_minutes = _validate_offset(offset_minutes)
    filters = _coerce_filters(working_hour_filters)

    slots = compute_free_slots(events, existing_placements, settings, date,
                               offset_minutes, now=now)

    candidates = [
        task for task in task_list
        if not (settings.ignore_container_tasks and task.has_subtasks)
    ]

    placements: List[TaskPlacement] = []
    unplaced_tasks: List[GoogleTask] = []
    placed_task_ids = set()

    for task in candidates:
        if task.id in placed_task_ids:
            continue

        slot = _find_first_slot(slots, task, settings.default_task_duration, filters)
        if slot is None:
            unplaced_tasks.append(task)
            continue

        start = slot.start
        placements.append(TaskPlacement(
            id=f"{task.id}-{start.year:04d}{start:%m%dT%H%M}Z",
            task_id=task.id,
            task_title=task.title,
            list_title=task.list_title,
            start_time=utc_iso(start),
            duration=settings.default_task_duration,
            color=_placement_color(slot.window, settings),
        ))
        placed_task_ids.add(task.id)
        _log_debug(f"[AUTOFIT] placed {task.id} at {utc_iso(start)} "
                   f"(window #{slot.window_index})")

        claimed = TimeInterval(_shift(start, -settings.min_time_between_tasks),
                               _shift(start, settings.default_task_duration
                                      + settings.min_time_between_tasks))
        slots = _claim(slots, claimed, settings.default_task_duration)

    message = _generate_result_message(placements, unplaced_tasks)
    return AutoFitResult(placements=placements, unplaced_tasks=unplaced_tasks, message=message)


def compute_free_slots(
    events: Sequence[CalendarEvent],
    existing_placements: Sequence[TaskPlacement],
    settings: UserSettings,
    date: str,
    offset_minutes: int,
    now: Optional[datetime] = None,
) -> List[FreeSlot]:
    """Free capacity per working-hours window, ascending by (start, window order)."""
    day = parse_iso_date(date)
    event_list = _coerce_items(events, CalendarEvent, "events")
    placement_list = _coerce_items(existing_placements, TaskPlacement, "existing_placements")
    settings = _coerce_settings(settings)
    offset_minutes = _validate_offset(offset_minutes)

    horizon = _day_horizon(day, offset_minutes)
    busy = _busy_timeline(event_list, placement_list, settings.min_time_between_tasks,
                          offset_minutes, horizon)
    if now is not None:
        elapsed = _elapsed_today(day, now, offset_minutes)
        if elapsed is not None:
            busy = _union_intervals(busy + [elapsed])

    slots: List[FreeSlot] = []
    for index, window in enumerate(settings.working_hours):
        capacity = _window_interval(window, day, offset_minutes)
        if capacity is None:
            _log_debug(f"[AUTOFIT] window #{index} {window.start}-{window.end} is empty")
            continue
        for free in _subtract(capacity, busy):
            if free.minutes >= settings.default_task_duration:
                slots.append(FreeSlot(free.start, free.end, index, window))

    slots.sort(key=lambda s: (s.start, s.window_index))
    _log_debug(f"[AUTOFIT] {date} offset={offset_minutes} busy={len(busy)} slots={len(slots)}")
    return slots


def _coerce_items(items: Any, model: Type[ModelT], label: str) -> List[ModelT]:
    if not isinstance(items, (list, tuple)):
        raise InvalidInput(f"{label} must be a list")
    out: List[ModelT] = []
    for item in items:
        if isinstance(item, model):
            out.append(item)
            continue
        if not isinstance(item, dict):
            raise InvalidInput(f"{label} contains a non-object item: {item!r}")
        try:
            out.append(model.model_validate(item))
        except ValidationError as exc:
            raise InvalidInput(f"Invalid item in {label}: {exc}") from exc
    return out


def _coerce_settings(settings: Any) -> UserSettings:
    if isinstance(settings, UserSettings):
        # 필드 할당은 검증되지 않음
        settings = settings.model_dump()
    if not isinstance(settings, dict):
        raise InvalidInput("settings must be provided")
    try:
        settings = UserSettings.model_validate(settings)
    except ValidationError as exc:
        raise InvalidInput(f"Invalid settings: {exc}") from exc
    for window in settings.working_hours:
        time_to_minutes(window.start)
        time_to_minutes(window.end)
    return settings


def _coerce_filters(filters: Any) -> Dict[str, TaskFilter]:
    if filters is None:
        return {}
    if not isinstance(filters, dict):
        raise InvalidInput("working_hour_filters must be a mapping")
    out: Dict[str, TaskFilter] = {}
    for window_id, task_filter in filters.items():
        if isinstance(task_filter, dict):
            try:
                task_filter = TaskFilter.model_validate(task_filter)
            except ValidationError as exc:
                raise InvalidInput(f"Invalid filter for {window_id!r}: {exc}") from exc
        if not isinstance(task_filter, TaskFilter):
            raise InvalidInput(f"Invalid filter for {window_id!r}")
        out[window_id] = task_filter
    return out


def _validate_offset(offset_minutes: Any) -> int:
    if isinstance(offset_minutes, bool) or not isinstance(offset_minutes, int):
        raise InvalidInput(f"offset_minutes must be an integer: {offset_minutes!r}")
    if abs(offset_minutes) > MAX_OFFSET_MINUTES:
        raise InvalidInput(
            f"offset_minutes must be within ±{MAX_OFFSET_MINUTES}: {offset_minutes!r}")
    return offset_minutes


def _shift(instant: datetime, minutes: int) -> datetime:
    """``instant + minutes``, clamped to the representable range."""
    try:
        return instant + timedelta(minutes=minutes)
    except OverflowError:
        return _MAX_UTC if minutes > 0 else _MIN_UTC


def _day_horizon(day: date, offset_minutes: int) -> TimeInterval:
    """Local 00:00 to 23:59 of ``day`` as UTC instants; every window lies inside."""
    try:
        return TimeInterval(local_to_utc(day, 0, offset_minutes),
                            local_to_utc(day, _LAST_MINUTE, offset_minutes))
    except OverflowError as exc:
        raise InvalidInput(
            f"Date {day.isoformat()} is out of range for offset {offset_minutes}") from exc


def _window_interval(window: WorkingHours, day: date,
                     offset_minutes: int) -> Optional[TimeInterval]:
    start_min = time_to_minutes(window.start)
    end_min = time_to_minutes(window.end)
    if end_min <= start_min:
        return None
    return TimeInterval(local_to_utc(day, start_min, offset_minutes),
                        local_to_utc(day, end_min, offset_minutes))


def _busy_timeline(events: List[CalendarEvent], placements: List[TaskPlacement],
                   gap_minutes: int, offset_minutes: int,
                   horizon: TimeInterval) -> List[TimeInterval]:
    # horizon 밖의 일정은 gap을 더해도 근무 시간과 겹치지 않음
    lo = _shift(horizon.start, -gap_minutes)
    hi = _shift(horizon.end, gap_minutes)
    blocked: List[TimeInterval] = []

    def block(start: datetime, end: datetime) -> None:
        if end <= lo or start >= hi:
            return
        blocked.append(TimeInterval(_shift(start, -gap_minutes), _shift(end, gap_minutes)))

    for event in events:
        if event.all_day or not event.start or not event.end:
            continue
        if is_all_day_span(event.start, event.end):
            continue
        start = parse_instant(event.start, offset_minutes)
        end = parse_instant(event.end, offset_minutes)
        if end <= start:
            _log_debug(f"[AUTOFIT] skip zero-length event {event.id}")
            continue
        block(start, end)

    for placement in placements:
        if placement.duration <= 0:
            raise InvalidInput(f"Placement {placement.id} has non-positive duration")
        start = parse_instant(placement.start_time, offset_minutes)
        block(start, _shift(start, placement.duration))

    return _union_intervals(blocked)


def _elapsed_today(day: date, now: datetime, offset_minutes: int) -> Optional[TimeInterval]:
    """Local midnight up to ``now`` rounded up to the slot grid, if ``now`` is on ``day``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = utc_to_local(now, offset_minutes)
    if local_now.date() != day:
        return None
    midnight = datetime(day.year, day.month, day.day)
    step = TIME_SLOT_INTERVAL * 60
    elapsed = math.ceil((local_now - midnight).total_seconds() / step) * step
    start = local_to_utc(day, 0, offset_minutes)
    if elapsed <= 0:
        return None
    return TimeInterval(start, _shift(start, elapsed // 60))


def _union_intervals(intervals: List[TimeInterval]) -> List[TimeInterval]:
    if not intervals:
        return []
    ordered = sorted(intervals, key=lambda iv: (iv.start, iv.end))
    out: List[TimeInterval] = []
    cur_s, cur_e = ordered[0].start, ordered[0].end
    for iv in ordered[1:]:
        if iv.start <= cur_e:
            cur_e = max(cur_e, iv.end)
        else:
            out.append(TimeInterval(cur_s, cur_e))
            cur_s, cur_e = iv.start, iv.end
    out.append(TimeInterval(cur_s, cur_e))
    return out


def _subtract(base: TimeInterval, blocks: List[TimeInterval]) -> List[TimeInterval]:
    """Subtract an ascending, unioned block list from ``base``."""
    out: List[TimeInterval] = []
    cur = base.start
    for block in blocks:
        if block.end <= cur:
            continue
        if block.start >= base.end:
            break
        if block.start > cur:
            out.append(TimeInterval(cur, min(block.start, base.end)))
        cur = max(cur, block.end)
        if cur >= base.end:
            break
    if cur < base.end:
        out.append(TimeInterval(cur, base.end))
    return out


def _find_first_slot(slots: List[FreeSlot], task: GoogleTask, duration_minutes: int,
                     filters: Dict[str, TaskFilter]) -> Optional[FreeSlot]:
    for slot in slots:
        if slot.minutes < duration_minutes:
            continue
        if not matches_filter(task, filters.get(slot.window.id)):
            continue
        return slot
    return None


def _claim(slots: List[FreeSlot], claimed: TimeInterval,
           duration_minutes: int) -> List[FreeSlot]:
    remaining: List[FreeSlot] = []
    for slot in slots:
        for free in _subtract(TimeInterval(slot.start, slot.end), [claimed]):
            if free.minutes >= duration_minutes:
                remaining.append(FreeSlot(free.start, free.end, slot.window_index, slot.window))
    remaining.sort(key=lambda s: (s.start, s.window_index))
    return remaining


def _placement_color(window: WorkingHours, settings: UserSettings) -> str:
    if window.use_color_for_tasks and window.color:
        return window.color
    return settings.task_color


def _generate_result_message(placements: List[TaskPlacement],
                             unplaced: List[GoogleTask]) -> str:
    if not unplaced:
        return f"Successfully placed {len(placements)} task(s)."
    if not placements:
        return "Could not place any tasks. No available time slots."
    return f"Placed {len(placements)} task(s). {len(unplaced)} task(s) could not fit."
