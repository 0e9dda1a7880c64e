from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Tuple

import requests
from mcp.server.fastmcp import FastMCP

BACKEND_BASE_URL = os.getenv("BACKEND_BASE_URL", "http://localhost:8000").rstrip("/")
BACKEND_API_BASE = os.getenv("BACKEND_API_BASE", "/api").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("MCP_BACKEND_TIMEOUT", "15"))
DEBUG_MODE = os.getenv("MCP_DEBUG", "0").strip() in ("1", "true", "True", "yes")
LOG_REQUESTS = os.getenv("MCP_LOG_REQUESTS", "0").strip() in ("1", "true", "True", "yes")

mcp = FastMCP("dayfit-scheduler")


def _log_tool_call(tool_name: str, input_data: Dict[str, Any], output_data: Dict[str, Any]) -> None:
  """도구 호출 입출력을 터미널에 출력"""
  if not DEBUG_MODE:
    return
  print(f"\n{'='*80}")
  print(f"Tool: {tool_name}")
  print(f"{'='*80}")
  print("input:")
  print(json.dumps(input_data, indent=2, ensure_ascii=False))
  print("\noutput:")
  print(json.dumps(output_data, indent=2, ensure_ascii=False))
  print(f"{'='*80}\n")


class RequestLoggerMiddleware:
  def __init__(self, app: Any):
    self.app = app

  async def __call__(self, scope: Dict[str, Any], receive: Any, send: Any) -> None:
    if scope.get("type") != "http":
      await self.app(scope, receive, send)
      return

    method = scope.get("method", "")
    path = scope.get("path", "")
    headers = self._decode_headers(scope.get("headers") or [])
    self._log_request(method, path, headers)
    await self.app(scope, receive, send)

  def _decode_headers(self, raw_headers: List[Tuple[bytes, bytes]]) -> Dict[str, str]:
    return {key.decode("latin-1").lower(): value.decode("latin-1") for key, value in raw_headers}

  def _log_request(self, method: str, path: str, headers: Dict[str, str]) -> None:
    safe_headers = dict(headers)
    if "authorization" in safe_headers:
      safe_headers["authorization"] = "(redacted)"
    print(f"[MCP HTTP] {method} {path} {json.dumps(safe_headers, ensure_ascii=False)}")


def _api_path(path: str) -> str:
  return f"{BACKEND_API_BASE}/{path.lstrip('/')}"


def _request(method: str,
             path: str,
             params: Optional[Dict[str, Any]] = None,
             payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
  url = f"{BACKEND_BASE_URL}{path}"
  try:
    resp = requests.request(method,
                            url,
                            params=params,
                            json=payload,
                            timeout=REQUEST_TIMEOUT)
  except requests.RequestException as exc:
    return {
        "ok": False,
        "code": "request_failed",
        "message": f"Backend request failed: {exc}",
    }

  try:
    data = resp.json()
  except ValueError:
    data = {"raw": resp.text}

  if resp.status_code >= 400:
    return {
        "ok": False,
        "code": "backend_error",
        "status": resp.status_code,
        "error": data,
    }

  return {"ok": True, "data": data}


def _invalid_request(message: str) -> Dict[str, Any]:
  return {"ok": False, "code": "invalid_request", "message": message}


@mcp.tool(name="schedule.auto_fit_day")
def schedule_auto_fit_day(
    output_parsed: Dict[str, Any],
) -> Dict[str, Any]:
  """Place unscheduled tasks into the free working hours of one day."""
  date = output_parsed.get("date")
  tasks = output_parsed.get("tasks")

  if not isinstance(date, str) or not date.strip():
    result = _invalid_request("date is required (YYYY-MM-DD).")
    _log_tool_call("schedule.auto_fit_day", output_parsed, result)
    return result
  if not isinstance(tasks, list):
    result = _invalid_request("tasks is required and must be an array.")
    _log_tool_call("schedule.auto_fit_day", output_parsed, result)
    return result

  payload: Dict[str, Any] = {"date": date.strip(), "tasks": tasks}
  for key in ("events", "existing_placements", "settings", "timezone",
              "working_hour_filters", "task_filter"):
    if output_parsed.get(key) is not None:
      payload[key] = output_parsed[key]

  result = _request("POST", _api_path("/autofit"), payload=payload)
  _log_tool_call("schedule.auto_fit_day", output_parsed, result)
  return result


@mcp.tool(name="schedule.timezone_offset")
def schedule_timezone_offset(timezone: str, date: str) -> Dict[str, Any]:
  """UTC offset in minutes (UTC minus local) at local noon of ``date``."""
  input_data = {"timezone": timezone, "date": date}
  if not timezone or not date:
    result = _invalid_request("timezone and date are required.")
    _log_tool_call("schedule.timezone_offset", input_data, result)
    return result

  result = _request("GET", _api_path("/timezone/offset"), params=input_data)
  _log_tool_call("schedule.timezone_offset", input_data, result)
  return result


if __name__ == "__main__":
  import uvicorn

  host = os.getenv("MCP_HOST", "0.0.0.0")
  port = int(os.getenv("MCP_PORT", "8001"))
  app = mcp.streamable_http_app()
  if LOG_REQUESTS:
    app = RequestLoggerMiddleware(app)
  uvicorn.run(app, host=host, port=port)
