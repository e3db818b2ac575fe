"""Exception handlers rendering every error as the same JSON envelope."""
from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from advisory.core.exceptions import AdvisoryError
from advisory.core.logger import get_logger

LOGGER = get_logger(__name__)


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def error_body(status_code: int, message: str, path: str, error: str | None = None) -> dict[str, object]:
    return {
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
        "status": status_code,
        "error": error or _reason(status_code),
        "message": message,
        "path": path,
    }


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    *,
    error: str | None = None,
    headers: dict[str, str] | None = None,
    **extra: object,
) -> JSONResponse:
    body = error_body(status_code, message, request.url.path, error)
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register the domain, HTTP, validation and fallback handlers on ``app``."""

    @app.exception_handler(AdvisoryError)
    async def handle_domain_error(request: Request, exc: AdvisoryError) -> JSONResponse:
        LOGGER.warning(
            "%s: %s",
            type(exc).__name__,
            exc.message,
            extra={"path": request.url.path, "status": exc.status_code},
        )
        return _error_response(request, exc.status_code, exc.message, error=exc.error)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
        return _error_response(
            request,
            exc.status_code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details: dict[str, str] = {}
        for item in exc.errors():
            location = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
            details[".".join(location) or "request"] = item.get("msg", "Invalid value")
        LOGGER.warning("Request validation failed", extra={"path": request.url.path, "fields": list(details)})
        return _error_response(request, 400, "Validation failed", details=details)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        LOGGER.warning("Integrity violation on %s: %s", request.url.path, exc.orig)
        return _error_response(request, 409, "The operation conflicts with existing data")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(request, 500, "An unexpected error occurred")


__all__ = ["error_body", "register_error_handlers"]
