from __future__ import annotations

from pydantic import BaseModel, Field
from typing import List, Optional, Dict

from .config import (
    DEFAULT_TASK_DURATION,
    DEFAULT_TASK_COLOR,
    DEFAULT_MIN_TIME_BETWEEN_TASKS,
    DEFAULT_WORKING_HOURS,
    HEX_COLOR_PATTERN,
    MAX_MIN_TIME_BETWEEN_TASKS,
    MAX_SEARCH_TEXT_LENGTH,
    MAX_TASK_DURATION,
    MAX_WORKING_HOUR_NAME_LENGTH,
    MAX_WORKING_HOURS,
    MIN_TASK_DURATION,
    WORKING_HOUR_ID_PATTERN,
)


class WorkingHours(BaseModel):
    id: str = Field(default="", pattern=WORKING_HOUR_ID_PATTERN)
    start: str  # "HH:MM" local
    end: str  # "HH:MM" local, same day
    name: Optional[str] = Field(default=None, max_length=MAX_WORKING_HOUR_NAME_LENGTH)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    use_color_for_tasks: bool = False


class TaskFilter(BaseModel):
    list_ids: Optional[List[str]] = None
    has_due_date: Optional[bool] = None
    hide_container_tasks: Optional[bool] = None
    starred_only: Optional[bool] = None
    search_text: Optional[str] = Field(default=None, max_length=MAX_SEARCH_TEXT_LENGTH)


class UserSettings(BaseModel):
    default_task_duration: int = Field(  # 분
        default=DEFAULT_TASK_DURATION, ge=MIN_TASK_DURATION, le=MAX_TASK_DURATION)
    task_color: str = Field(default=DEFAULT_TASK_COLOR, pattern=HEX_COLOR_PATTERN)
    working_hours: List[WorkingHours] = Field(
        default_factory=lambda: [WorkingHours(**wh) for wh in DEFAULT_WORKING_HOURS],
        max_length=MAX_WORKING_HOURS)
    min_time_between_tasks: int = Field(  # 분
        default=DEFAULT_MIN_TIME_BETWEEN_TASKS, ge=0, le=MAX_MIN_TIME_BETWEEN_TASKS)
    ignore_container_tasks: bool = True
    selected_calendar_id: str = "primary"
    timezone: Optional[str] = None


class GoogleTask(BaseModel):
    id: str
    title: str
    notes: Optional[str] = None
    status: str = "needsAction"  # "needsAction" or "completed"
    due: Optional[str] = None  # ISO datetime
    parent: Optional[str] = None
    position: Optional[str] = None
    starred: bool = False
    list_id: Optional[str] = None
    list_title: Optional[str] = None
    has_subtasks: bool = False


class CalendarEvent(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    start: Optional[str] = None  # RFC3339 instant, or "YYYY-MM-DD" for all-day
    end: Optional[str] = None
    all_day: bool = False


class TaskPlacement(BaseModel):
    id: str
    task_id: str
    task_title: str
    list_title: Optional[str] = None
    start_time: str  # RFC3339 instant
    duration: int  # 분
    color: Optional[str] = None


class AutoFitResult(BaseModel):
    placements: List[TaskPlacement]
    unplaced_tasks: List[GoogleTask]
    message: str


class AutoFitRequest(BaseModel):
    date: str  # "YYYY-MM-DD"
    tasks: List[GoogleTask]
    events: List[CalendarEvent] = []
    existing_placements: List[TaskPlacement] = []
    settings: Optional[UserSettings] = None
    timezone: Optional[str] = None
    working_hour_filters: Optional[Dict[str, TaskFilter]] = None
    task_filter: Optional[TaskFilter] = None


class AutoFitResponse(AutoFitResult):
    all_placements: List[TaskPlacement]
    offset_minutes: int


class TimezoneOffset(BaseModel):
    timezone: str
    date: str
    offset_minutes: int


DEFAULT_PREFERENCES = UserSettings()
