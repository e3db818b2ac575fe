"""Small helpers shared by the API service wrappers."""
from __future__ import annotations

import time
from typing import Any, Callable, Mapping, TypeVar
from urllib.parse import urlencode

import httpx

from advisory.core.logger import get_logger

from .http import ApiError

LOGGER = get_logger(__name__)

T = TypeVar("T")

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


def _is_client_error(exc: Exception) -> bool:
    if isinstance(exc, ApiError):
        return exc.is_client_error
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.is_client_error
    return False


def retry_request(
    fn: Callable[[], T],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds, backing off ``initial_delay * 2**attempt`` seconds.

    Client errors (4xx) are raised immediately; anything else is retried and
    the last failure is raised once the attempts run out.
    """

    attempts = max(1, max_retries)
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as exc:
            if _is_client_error(exc) or attempt >= attempts - 1:
                raise
            delay = initial_delay * (2**attempt)
            LOGGER.debug(
                "Retrying request in %.2fs (attempt %d/%d): %s", delay, attempt + 2, attempts, exc
            )
            sleep(delay)
            attempt += 1


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(params: Mapping[str, Any]) -> str:
    """Encode ``params`` skipping ``None``; list values repeat their key."""

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(item)) for item in value)
        else:
            pairs.append((key, _query_value(value)))
    return urlencode(pairs)


def extract_error_message(error: object) -> str:
    if isinstance(error, ApiError):
        return error.message
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    if isinstance(error, BaseException):
        return str(error) or UNKNOWN_ERROR_MESSAGE
    if isinstance(error, str):
        return error
    return UNKNOWN_ERROR_MESSAGE


__all__ = ["build_query_string", "extract_error_message", "retry_request"]
