"""Tests for the HTTP client wrappers using httpx's mock transport."""
from __future__ import annotations

import json

import httpx
import pytest

from advisory.client import (
    AdminService,
    ApiClient,
    ApiError,
    AuthService,
    ClientService,
    ClientSettings,
    build_query_string,
    error_message_for_status,
    extract_error_message,
    retry_request,
)
from advisory.client.config import DEFAULT_TIMEOUT_SECONDS
from advisory.client.helpers import UNKNOWN_ERROR_MESSAGE
from advisory.client.http import NETWORK_ERROR_MESSAGE

BASE_URL = "http://advisory.test/api"
TOKENS = {
    "access_token": "access-1",
    "refresh_token": "refresh-1",
    "token_type": "Bearer",
    "expires_in": 900,
    "user": {"id": 1, "email": "jane@example.com", "role": "CLIENT"},
}


class Recorder:
    """Mock transport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(recorder: Recorder) -> ApiClient:
    return ApiClient(ClientSettings(base_url=BASE_URL, timeout=5), transport=httpx.MockTransport(recorder))


def test_login_stores_tokens_and_sends_bearer() -> None:
    recorder = Recorder(httpx.Response(200, json=TOKENS), httpx.Response(200, json={"id": 7}))
    api = _client(recorder)
    auth = AuthService(api)

    auth.login("jane@example.com", "Secure#Pass42")
    profile = ClientService(api).get_profile()

    login_request, profile_request = recorder.requests
    assert login_request.url.path == "/api/auth/login"
    assert json.loads(login_request.content) == {"email": "jane@example.com", "password": "Secure#Pass42"}
    assert login_request.headers["Content-Type"] == "application/json"
    assert "Authorization" not in login_request.headers
    assert profile_request.headers["Authorization"] == "Bearer access-1"
    assert profile == {"id": 7}
    assert auth.is_authenticated
    assert auth.current_user["email"] == "jane@example.com"


def test_unauthorized_response_clears_tokens() -> None:
    body = {"status": 401, "error": "Unauthorized", "message": "Token expired", "path": "/api/clients/me"}
    api = _client(Recorder(httpx.Response(401, json=body)))
    api.tokens.set("stale", "refresh")

    with pytest.raises(ApiError) as excinfo:
        api.get("/clients/me")

    assert excinfo.value.status == 401
    assert excinfo.value.message == "Token expired"
    assert excinfo.value.data["path"] == "/api/clients/me"
    assert excinfo.value.is_client_error
    assert not api.tokens.is_authenticated
    assert api.tokens.refresh_token is None


def test_error_without_json_falls_back_to_status_message() -> None:
    api = _client(Recorder(httpx.Response(503, text="upstream down")))

    with pytest.raises(ApiError) as excinfo:
        api.get("/health")

    assert excinfo.value.status == 503
    assert excinfo.value.message == error_message_for_status(503)
    assert excinfo.value.data["path"] == "/health"
    assert not excinfo.value.is_client_error


def test_transport_failure_has_status_zero() -> None:
    api = _client(Recorder(httpx.ConnectError("connection refused")))

    with pytest.raises(ApiError) as excinfo:
        api.get("/health")

    assert excinfo.value.status == 0
    assert excinfo.value.message == NETWORK_ERROR_MESSAGE
    assert error_message_for_status(0) == NETWORK_ERROR_MESSAGE
    assert error_message_for_status(418) == "An error occurred (418)"


def test_empty_response_returns_none() -> None:
    api = _client(Recorder(httpx.Response(204)))

    assert api.delete("/admin/notification-templates/3") is None


def test_logout_clears_tokens_and_refresh_needs_token() -> None:
    recorder = Recorder(httpx.Response(200, json={"message": "Logged out successfully"}))
    api = _client(recorder)
    api.tokens.set("access-1", "refresh-1")
    auth = AuthService(api)

    auth.logout()

    assert recorder.requests[0].url.path == "/api/auth/logout"
    assert not auth.is_authenticated
    with pytest.raises(ValueError, match="No refresh token available"):
        auth.refresh()


def test_query_parameters_skip_none() -> None:
    recorder = Recorder(httpx.Response(200, json=[]), httpx.Response(200, json=[]))
    admin = AdminService(_client(recorder))

    admin.list_templates()
    admin.list_templates(template_type="EMAIL", active_only=True)

    first, second = recorder.requests
    assert dict(first.url.params) == {"active_only": "false"}
    assert dict(second.url.params) == {"type": "EMAIL", "active_only": "true"}


def test_delete_with_body() -> None:
    recorder = Recorder(httpx.Response(200, json={"removed_count": 2}))

    AdminService(_client(recorder)).remove_permissions(4, [1, 2])

    request = recorder.requests[0]
    assert request.method == "DELETE"
    assert request.url.path == "/api/admin/users/4/permissions"
    assert json.loads(request.content) == {"permission_ids": [1, 2]}


def test_retry_backs_off_on_server_errors() -> None:
    delays: list[float] = []
    outcomes = [ApiError(503, "busy"), httpx.ReadTimeout("slow"), "ok"]

    def flaky() -> str:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert retry_request(flaky, max_retries=3, initial_delay=0.5, sleep=delays.append) == "ok"
    assert delays == [0.5, 1.0]


def test_retry_gives_up_immediately_on_client_errors() -> None:
    delays: list[float] = []

    def rejected() -> None:
        raise ApiError(404, "missing")

    with pytest.raises(ApiError, match="missing"):
        retry_request(rejected, sleep=delays.append)
    assert delays == []


def test_retry_raises_last_error_when_exhausted() -> None:
    delays: list[float] = []
    errors = iter([ApiError(500, "first"), ApiError(502, "second")])

    def failing() -> None:
        raise next(errors)

    with pytest.raises(ApiError, match="second"):
        retry_request(failing, max_retries=2, initial_delay=1, sleep=delays.append)
    assert delays == [1]


def test_retry_covers_any_failure_that_is_not_a_client_error() -> None:
    delays: list[float] = []
    outcomes = [KeyError("access_token"), {"id": 3}]

    def decoding() -> dict:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert retry_request(decoding, initial_delay=2, sleep=delays.append) == {"id": 3}
    assert delays == [2]


def test_retry_stops_on_http_status_client_error() -> None:
    request = httpx.Request("GET", f"{BASE_URL}/clients/me")
    calls: list[int] = []

    def forbidden() -> None:
        calls.append(1)
        raise httpx.HTTPStatusError(
            "forbidden", request=request, response=httpx.Response(403, request=request)
        )

    with pytest.raises(httpx.HTTPStatusError):
        retry_request(forbidden, sleep=lambda _delay: None)
    assert calls == [1]


def test_build_query_string() -> None:
    query = build_query_string({"page": 2, "search": None, "tags": ["a b", "c"], "active": True})

    assert query == "page=2&tags=a+b&tags=c&active=true"
    assert build_query_string({}) == ""


def test_extract_error_message() -> None:
    request = httpx.Request("GET", f"{BASE_URL}/health")
    status_error = httpx.HTTPStatusError(
        "server error",
        request=request,
        response=httpx.Response(500, json={"message": "Database unavailable"}, request=request),
    )

    assert extract_error_message(ApiError(409, "Duplicate")) == "Duplicate"
    assert extract_error_message(status_error) == "Database unavailable"
    assert extract_error_message(RuntimeError("boom")) == "boom"
    assert extract_error_message(RuntimeError()) == UNKNOWN_ERROR_MESSAGE
    assert extract_error_message("plain text") == "plain text"
    assert extract_error_message(42) == UNKNOWN_ERROR_MESSAGE


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("ADVISORY_API_URL", "https://api.example.com/api/")
    monkeypatch.setenv("ADVISORY_API_TIMEOUT", "not-a-number")

    settings = ClientSettings.from_env()

    assert settings.base_url == "https://api.example.com/api"
    assert settings.timeout == DEFAULT_TIMEOUT_SECONDS
