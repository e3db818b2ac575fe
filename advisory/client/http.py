"""Synchronous HTTP client with bearer-token handling and uniform errors."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from threading import RLock
from typing import Any, Mapping

import httpx

from advisory.core.logger import get_logger

from .config import ClientSettings

LOGGER = get_logger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."

_STATUS_MESSAGES = {
    400: "Invalid request. Please check your input.",
    401: "Your session has expired. Please log in again.",
    403: "You do not have permission to perform this action.",
    404: "The requested resource was not found.",
    409: "This operation conflicts with existing data.",
    422: "The provided data is invalid.",
    500: "An unexpected error occurred. Please try again later.",
    502: "The service is temporarily unavailable. Please try again later.",
    503: "The service is temporarily unavailable. Please try again later.",
    504: "The service is temporarily unavailable. Please try again later.",
}


def error_message_for_status(status: int) -> str:
    """Return the user-facing fallback message for an HTTP status."""

    if status == 0:
        return NETWORK_ERROR_MESSAGE
    return _STATUS_MESSAGES.get(status, f"An error occurred ({status})")


class ApiError(Exception):
    """Raised for every failed API call; ``status`` is 0 when no response arrived."""

    def __init__(self, status: int, message: str, data: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.data: dict[str, Any] = dict(data or {})

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


@dataclass
class TokenStore:
    """In-memory holder for the current token pair."""

    access_token: str | None = None
    refresh_token: str | None = None
    _lock: RLock = field(default_factory=RLock, repr=False)

    def set(self, access_token: str, refresh_token: str | None = None) -> None:
        with self._lock:
            self.access_token = access_token
            if refresh_token is not None:
                self.refresh_token = refresh_token

    def clear(self) -> None:
        with self._lock:
            self.access_token = None
            self.refresh_token = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None


class ApiClient:
    """Thin wrapper over :class:`httpx.Client` speaking the advisory JSON API."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        tokens: TokenStore | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or ClientSettings.from_env()
        self.tokens = tokens or TokenStore()
        self._http = httpx.Client(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers: dict[str, str] = {}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.tokens.access_token:
            headers["Authorization"] = f"Bearer {self.tokens.access_token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises :class:`ApiError` for transport failures and non-2xx responses;
        a 401 additionally clears the stored tokens.
        """

        content = None if json_body is None else json.dumps(json_body, default=str)
        query = None
        if params:
            query = {key: value for key, value in params.items() if value is not None}
        try:
            response = self._http.request(
                method,
                path,
                content=content,
                params=query,
                headers=self._headers(content is not None),
            )
        except httpx.RequestError as exc:
            LOGGER.warning("Request to %s failed: %s", path, exc)
            raise ApiError(0, NETWORK_ERROR_MESSAGE, {"path": path, "status": 0}) from exc

        if response.is_error:
            raise self._error_from(response, path)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _error_from(self, response: httpx.Response, path: str) -> ApiError:
        status = response.status_code
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"detail": data}
        if status == 401:
            self.tokens.clear()
        message = data.get("message") or data.get("error") or error_message_for_status(status)
        LOGGER.debug("API error", extra={"path": path, "status": status})
        return ApiError(status, str(message), {**data, "status": status, "path": data.get("path", path)})

    def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json_body: Any = None) -> Any:
        return self.request("POST", path, json_body=json_body)

    def put(self, path: str, json_body: Any = None) -> Any:
        return self.request("PUT", path, json_body=json_body)

    def delete(self, path: str, json_body: Any = None) -> Any:
        return self.request("DELETE", path, json_body=json_body)


@lru_cache(maxsize=1)
def get_api_client() -> ApiClient:
    """Return the process-wide client configured from the environment."""

    return ApiClient()


__all__ = [
    "ApiClient",
    "ApiError",
    "NETWORK_ERROR_MESSAGE",
    "TokenStore",
    "error_message_for_status",
    "get_api_client",
]
