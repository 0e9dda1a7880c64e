from __future__ import annotations

import os
import re

DAYFIT_DEBUG = os.getenv("DAYFIT_DEBUG", "0") == "1"

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
WORKING_HOUR_ID_PATTERN = r"^[a-zA-Z0-9_-]{0,64}$"

# -------------------------
# HTTP
# -------------------------
API_BASE = os.getenv("API_BASE", "/api").rstrip("/")
FRONTEND_BASE_URL = os.getenv("FRONTEND_BASE_URL", "").rstrip("/")
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "")
cors_origins: list[str] = []
if FRONTEND_BASE_URL:
    cors_origins.append(FRONTEND_BASE_URL)
if CORS_ALLOW_ORIGINS:
    cors_origins.extend(
        [origin.strip() for origin in CORS_ALLOW_ORIGINS.split(",") if origin.strip()])

# -------------------------
# Scheduling defaults
# -------------------------
DEFAULT_TASK_DURATION = 30
DEFAULT_TASK_COLOR = "#4285F4"
DEFAULT_MIN_TIME_BETWEEN_TASKS = 15
TIME_SLOT_INTERVAL = 15

MIN_TASK_DURATION = 5
MAX_TASK_DURATION = 480
MAX_MIN_TIME_BETWEEN_TASKS = 120
MAX_WORKING_HOURS = 10
MAX_WORKING_HOUR_NAME_LENGTH = 100

# Offsets (UTC - local) accepted by the scheduler.
MAX_OFFSET_MINUTES = 24 * 60

MAX_SEARCH_TEXT_LENGTH = 200

DEFAULT_WORKING_HOURS = [
    {"id": "default-1", "start": "11:00", "end": "12:15"},
    {"id": "default-2", "start": "13:00", "end": "18:00"},
]

# Upper bound when stepping over a spring-forward gap.
MAX_DST_COERCE_MINUTES = 180
