from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import settings  # noqa: E402
from services.flowday_client import (  # noqa: E402
    NETWORK_ERROR_MESSAGE,
    FlowdayAPIError,
    FlowdayClient,
    FlowdayNetworkError,
    is_local_hostname,
    resolve_api_base_url,
)


def _client(handler, token: str | None = "tok-123") -> FlowdayClient:
    return FlowdayClient(token=token, base_url="http://api.test", transport=httpx.MockTransport(handler))


def test_requests_carry_bearer_token_and_json_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "message": "ok", "data": {"id": "m1"}})

    with _client(handler) as client:
        out = client.create_meal({"mealName": "Tacos"})

    assert out["data"]["id"] == "m1"
    assert seen == {
        "method": "POST",
        "path": "/api/meal",
        "auth": "Bearer tok-123",
        "body": {"mealName": "Tacos"},
    }


def test_missing_token_sends_no_authorization_header():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "authorization" not in request.headers
        return httpx.Response(200, json={"success": True, "data": []})

    with _client(handler, token=None) as client:
        assert client.list_meals() == {"success": True, "data": []}


def test_delete_by_name_sends_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert json.loads(request.content) == {"foodItemName": "Basil"}
        return httpx.Response(200, json={"success": True})

    with _client(handler) as client:
        client.delete_food_item("Basil")


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"message": "Meal not found"}, "Meal not found"),
        ({"error": "Bad weekday"}, "Bad weekday"),
        ({}, "HTTP error! status: 404"),
    ],
)
def test_remote_error_message_precedence(body, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json=body)

    with _client(handler) as client:
        with pytest.raises(FlowdayAPIError) as excinfo:
            client.get_meal("missing")
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == expected


def test_non_json_error_body_uses_status_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="<html>oops</html>")

    with _client(handler) as client:
        with pytest.raises(FlowdayAPIError) as excinfo:
            client.today_todos()
    assert excinfo.value.message == "HTTP error! status: 500"


def test_transport_failure_raises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(FlowdayNetworkError) as excinfo:
            client.create_habit_batch({"domain": "meal"})
    assert excinfo.value.status_code == 502
    assert excinfo.value.message == NETWORK_ERROR_MESSAGE


def test_local_hostname_detection():
    for host in ("localhost", "127.0.0.1", "::1", "10.1.2.3", "192.168.0.7", "172.16.0.1", "172.31.255.255"):
        assert is_local_hostname(host), host
    for host in ("172.32.0.1", "8.8.8.8", "app.flowday.io", ""):
        assert not is_local_hostname(host), host


def test_base_url_resolution(monkeypatch):
    monkeypatch.setattr(settings, "FLOWDAY_API_URL", None)
    assert resolve_api_base_url("192.168.1.20") == "http://192.168.1.20:3030"
    assert resolve_api_base_url("app.flowday.io") == "https://api.flowday.io"
    assert resolve_api_base_url(None) == "http://localhost:3030"

    monkeypatch.setattr(settings, "FLOWDAY_API_URL", "https://staging.flowday.io/")
    assert resolve_api_base_url("localhost") == "https://staging.flowday.io"
