"""Application middleware resolving the bearer token into ``request.state.user``."""
from __future__ import annotations

from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from advisory.core.exceptions import AuthenticationError
from advisory.core.logger import get_logger
from advisory.core.security import AuthenticatedUser, SecurityProvider

LOGGER = get_logger(__name__)

_BEARER_PREFIX = "bearer "


def extract_bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header or not header.lower().startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX):].strip()
    return token or None


class AuthMiddleware(BaseHTTPMiddleware):
    """Decode the ``Authorization: Bearer`` token, if any.

    Enforcement happens in the route dependencies; an invalid token simply
    leaves the request anonymous.
    """

    def __init__(self, app, security_provider: SecurityProvider) -> None:
        super().__init__(app)
        self._security_provider = security_provider

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        token = extract_bearer_token(request)
        user: AuthenticatedUser | None = None

        if token:
            try:
                user = self._security_provider.decode_token(token)
            except AuthenticationError as exc:
                LOGGER.info("Failed to decode access token", extra={"reason": exc.message})

        request.state.user = user
        request.state.token = token
        return await call_next(request)


__all__ = ["AuthMiddleware", "extract_bearer_token"]
