"""
Pytest module for the MCP tool server.
"""

import pytest
import requests

from mcp_server import server


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    responses = []

    def fake_request(method, url, params=None, json=None, timeout=None):
        recorded.append({"method": method, "url": url, "params": params, "json": json})
        return responses.pop(0)

    monkeypatch.setattr(server.requests, "request", fake_request)
    return recorded, responses


def test_auto_fit_day_forwards_payload(calls):
    recorded, responses = calls
    responses.append(FakeResponse(200, {"placements": [], "message": "ok"}))

    result = server.schedule_auto_fit_day({
        "date": "2025-12-27",
        "tasks": [{"id": "t1", "title": "Task"}],
        "timezone": "Australia/Sydney",
        "unrelated": "dropped",
    })

    assert result == {"ok": True, "data": {"placements": [], "message": "ok"}}
    assert recorded[0]["method"] == "POST"
    assert recorded[0]["url"].endswith("/api/autofit")
    assert recorded[0]["json"] == {
        "date": "2025-12-27",
        "tasks": [{"id": "t1", "title": "Task"}],
        "timezone": "Australia/Sydney",
    }


def test_auto_fit_day_validates_before_calling_backend(calls):
    recorded, _ = calls
    assert server.schedule_auto_fit_day({"tasks": []})["code"] == "invalid_request"
    assert server.schedule_auto_fit_day({"date": "2025-12-27"})["code"] == "invalid_request"
    assert recorded == []


def test_backend_error_is_reported(calls):
    _, responses = calls
    responses.append(FakeResponse(400, {"detail": "Unknown timezone: 'Bad/Zone'"}))
    result = server.schedule_timezone_offset("Bad/Zone", "2025-12-27")
    assert result["ok"] is False
    assert result["code"] == "backend_error"
    assert result["status"] == 400


def test_timezone_offset_passes_query_params(calls):
    recorded, responses = calls
    responses.append(FakeResponse(200, {"offset_minutes": -660}))
    result = server.schedule_timezone_offset("Australia/Sydney", "2025-12-27")
    assert result["data"] == {"offset_minutes": -660}
    assert recorded[0]["params"] == {"timezone": "Australia/Sydney", "date": "2025-12-27"}


def test_connection_failure_is_reported(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(server.requests, "request", boom)
    result = server.schedule_timezone_offset("UTC", "2025-12-27")
    assert result["code"] == "request_failed"
