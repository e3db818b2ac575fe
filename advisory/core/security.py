"""Password hashing, JWT issuing/verification and the FastAPI auth dependencies."""
from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from jwt import ExpiredSignatureError, InvalidTokenError

from advisory.core.config import AuthSettings, get_settings
from advisory.core.exceptions import AuthenticationError
from advisory.core.logger import get_logger
from advisory.domain.permissions import PermissionType, permissions_for_role
from advisory.domain.roles import Role

LOGGER = get_logger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
BLACKLIST_TTL_SECONDS = 24 * 60 * 60


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database.
        return False


class TokenBlacklist:
    """Revoked tokens and users, kept in memory for 24 hours."""

    def __init__(self, ttl_seconds: int = BLACKLIST_TTL_SECONDS, clock: Callable[[], float] = time.time) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._tokens: dict[str, float] = {}
        self._users: dict[str, float] = {}

    def blacklist(self, token: str) -> None:
        if not token:
            return
        with self._lock:
            self._tokens[token] = self._clock() + self._ttl

    def is_blacklisted(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            expiry = self._tokens.get(token)
            if expiry is None:
                return False
            if expiry <= self._clock():
                del self._tokens[token]
                return False
            return True

    def blacklist_user(self, email: str) -> None:
        """Reject every token issued to ``email`` before now."""

        with self._lock:
            self._users[email] = self._clock()

    def is_user_token_revoked(self, email: str, issued_at: int | float | None) -> bool:
        with self._lock:
            revoked_at = self._users.get(email)
        if revoked_at is None or issued_at is None:
            return False
        if revoked_at + self._ttl <= self._clock():
            return False
        # ``iat`` has second resolution; tokens minted within the revoking second survive.
        return issued_at < int(revoked_at)

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired_tokens = [token for token, expiry in self._tokens.items() if expiry <= now]
            for token in expired_tokens:
                del self._tokens[token]
            expired_users = [email for email, at in self._users.items() if at + self._ttl <= now]
            for email in expired_users:
                del self._users[email]
        removed = len(expired_tokens) + len(expired_users)
        if removed:
            LOGGER.debug("Token blacklist cleaned", extra={"removed": removed})
        return removed

    def size(self) -> int:
        with self._lock:
            return len(self._tokens)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
            self._users.clear()


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    """Representation of the authenticated principal."""

    email: str
    role: Role
    user_id: int | None = None
    token: str | None = None
    expires_at: datetime | None = None

    def has_any_role(self, *roles: Role) -> bool:
        return self.role in roles


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int


class SecurityProvider:
    """Issue and verify JWT access/refresh tokens."""

    def __init__(self, settings: AuthSettings, blacklist: TokenBlacklist | None = None) -> None:
        self._settings = settings
        self.blacklist = blacklist or TokenBlacklist()

    @property
    def token_ttl_seconds(self) -> int:
        """Return the access token lifetime in seconds."""

        return int(self._settings.access_token_expire_minutes * 60)

    @property
    def is_enabled(self) -> bool:
        return self._settings.enabled

    def default_admin_user(self) -> AuthenticatedUser:
        return AuthenticatedUser(
            email=self._settings.bootstrap_admin_email or "admin@localhost",
            role=Role.ADMIN,
        )

    def _encode(self, account, token_type: str, lifetime: timedelta) -> str:
        now = datetime.now(tz=timezone.utc)
        payload: dict[str, object] = {
            "sub": account.email,
            "role": account.role.value,
            "uid": account.id,
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def create_access_token(self, account) -> str:
        """Create a signed access JWT for a :class:`~advisory.models.UserAccount`."""

        return self._encode(
            account, ACCESS_TOKEN, timedelta(minutes=self._settings.access_token_expire_minutes)
        )

    def create_refresh_token(self, account) -> str:
        return self._encode(
            account, REFRESH_TOKEN, timedelta(minutes=self._settings.refresh_token_expire_minutes)
        )

    def create_token_pair(self, account) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(account),
            refresh_token=self.create_refresh_token(account),
            token_type="Bearer",
            expires_in=self.token_ttl_seconds,
        )

    def decode_token(self, token: str, expected_type: str = ACCESS_TOKEN) -> AuthenticatedUser:
        """Decode a JWT and return the corresponding ``AuthenticatedUser``."""

        if self.blacklist.is_blacklisted(token):
            raise AuthenticationError("Token has been revoked")
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        email = payload.get("sub")
        role_value = payload.get("role")
        if not isinstance(email, str) or not isinstance(role_value, str):
            raise AuthenticationError("Token payload missing required claims")
        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid token type")
        try:
            role = Role.from_string(role_value)
        except ValueError as exc:
            raise AuthenticationError("Token role claim invalid") from exc
        if self.blacklist.is_user_token_revoked(email, payload.get("iat")):
            raise AuthenticationError("Token has been revoked")

        user_id = payload.get("uid")
        return AuthenticatedUser(
            email=email,
            role=role,
            user_id=int(user_id) if user_id is not None else None,
            token=token,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None),
        )


@lru_cache(maxsize=1)
def get_security_provider() -> SecurityProvider:
    """Return a cached security provider instance."""

    settings = get_settings()
    return SecurityProvider(settings.auth)


def get_authenticated_user(request: Request) -> AuthenticatedUser:
    """Retrieve the authenticated user from the request context."""

    security = get_security_provider()
    if not security.is_enabled:
        return security.default_admin_user()

    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_roles(*roles: Role) -> Callable[..., AuthenticatedUser]:
    """Build a dependency that admits only users holding one of ``roles``."""

    allowed = frozenset(roles)

    def dependency(user: AuthenticatedUser = Depends(get_authenticated_user)) -> AuthenticatedUser:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return user

    return dependency


def require_permission(permission: PermissionType) -> Callable[..., AuthenticatedUser]:
    """Build a dependency that checks ``permission`` against the caller's role defaults."""

    def dependency(user: AuthenticatedUser = Depends(get_authenticated_user)) -> AuthenticatedUser:
        if permission not in permissions_for_role(user.role):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.EMPLOYEE, Role.ADMIN)
require_client = require_roles(Role.CLIENT)
require_guest = require_roles(Role.GUEST)


__all__ = [
    "ACCESS_TOKEN",
    "REFRESH_TOKEN",
    "AuthenticatedUser",
    "SecurityProvider",
    "TokenBlacklist",
    "TokenPair",
    "get_authenticated_user",
    "get_security_provider",
    "hash_password",
    "require_admin",
    "require_client",
    "require_guest",
    "require_permission",
    "require_roles",
    "require_staff",
    "verify_password",
]
