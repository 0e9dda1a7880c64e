from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from .config import API_BASE
from .autofit import auto_fit_tasks
from .errors import InvalidInput, InvalidTimezone
from .filters import apply_task_filter
from .models import (
    AutoFitRequest,
    AutoFitResponse,
    TimezoneOffset,
    UserSettings,
    DEFAULT_PREFERENCES,
)
from .timezone import resolve_offset_minutes
from .utils import _log_debug

router = APIRouter()
logger = logging.getLogger(__name__)


def _clean_optional_str(value: Optional[str]) -> Optional[str]:
  if not isinstance(value, str):
    return None
  cleaned = value.strip()
  return cleaned or None


def _resolve_request_offset(timezone_name: Optional[str], date: str) -> int:
  # 시간대 미지정 -> UTC(0). 잘못된 이름은 400.
  if timezone_name is None:
    return 0
  try:
    return resolve_offset_minutes(timezone_name, date)
  except (InvalidTimezone, InvalidInput) as exc:
    raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/health")
def health():
  return {"ok": True}


@router.get(f"{API_BASE}/settings/defaults", response_model=UserSettings)
def default_settings():
  return DEFAULT_PREFERENCES


@router.get(f"{API_BASE}/timezone/offset", response_model=TimezoneOffset)
def timezone_offset(timezone_name: str = Query(..., alias="timezone"),
                    date: str = Query(...)):
  offset = _resolve_request_offset(timezone_name, date)
  return TimezoneOffset(timezone=timezone_name, date=date, offset_minutes=offset)


@router.post(f"{API_BASE}/autofit", response_model=AutoFitResponse)
def run_autofit(payload: AutoFitRequest):
  settings = payload.settings or DEFAULT_PREFERENCES
  timezone_name = _clean_optional_str(payload.timezone) or _clean_optional_str(settings.timezone)
  offset = _resolve_request_offset(timezone_name, payload.date)

  tasks = apply_task_filter(payload.tasks, payload.task_filter)
  _log_debug(f"[AUTOFIT] request date={payload.date} tz={timezone_name} "
             f"tasks={len(tasks)}/{len(payload.tasks)} events={len(payload.events)}")

  try:
    result = auto_fit_tasks(tasks,
                            payload.events,
                            payload.existing_placements,
                            settings,
                            payload.date,
                            offset,
                            working_hour_filters=payload.working_hour_filters,
                            now=datetime.now(timezone.utc))
  except InvalidInput as exc:
    raise HTTPException(status_code=400, detail=str(exc)) from exc
  except Exception as exc:
    logger.exception("auto-fit failed")
    raise HTTPException(status_code=500, detail="Failed to run auto-fit") from exc

  all_placements = [*payload.existing_placements, *result.placements]
  return AutoFitResponse(placements=result.placements,
                         unplaced_tasks=result.unplaced_tasks,
                         message=result.message,
                         all_placements=all_placements,
                         offset_minutes=offset)
