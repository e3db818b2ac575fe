"""Registration, login and token lifecycle."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from advisory.core.exceptions import AuthenticationError, ValidationError
from advisory.core.logger import get_logger
from advisory.core.security import (
    REFRESH_TOKEN,
    SecurityProvider,
    TokenPair,
    get_security_provider,
    hash_password,
    verify_password,
)
from advisory.domain.roles import Role
from advisory.domain.validation import (
    STRONG_PASSWORD_MESSAGE,
    PasswordValidator,
    is_strong_password,
    is_valid_email,
)
from advisory.models import Guest, UserAccount
from advisory.repositories import SystemConfigRepository, UserRepository

from .support import apply_role_permissions, get_account

LOGGER = get_logger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class AuthResult:
    tokens: TokenPair
    account: UserAccount


@dataclass(frozen=True)
class TokenValidation:
    valid: bool
    email: str | None = None
    role: Role | None = None
    expires_at: datetime | None = None
    reason: str | None = None


class AuthService:
    """Account registration and JWT issuing on top of :class:`SecurityProvider`."""

    def __init__(
        self,
        session: Session,
        *,
        security: SecurityProvider | None = None,
        users: UserRepository | None = None,
        config: SystemConfigRepository | None = None,
    ) -> None:
        self._session = session
        self._security = security or get_security_provider()
        self._users = users or UserRepository(session)
        self._config = config or SystemConfigRepository(session)

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        *,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Create a guest account and sign it in."""

        email = (email or "").strip().lower()
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        if not is_strong_password(password):
            raise ValidationError(STRONG_PASSWORD_MESSAGE)
        if not (first_name or "").strip() or not (last_name or "").strip():
            raise ValidationError("First name and last name are required")
        if self._users.exists_by_email(email):
            raise ValidationError("Email address is already registered")

        account = UserAccount(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=Role.GUEST,
        )
        apply_role_permissions(account, self._users)
        guest = Guest(user_account=account)
        guest.touch()
        self._session.add_all([account, guest])
        self._session.flush()
        guest.guest_id = f"GST-{guest.id:03d}"
        self._users.log_activity(account, "REGISTER", "Guest account created", ip_address)
        self._session.commit()

        LOGGER.info("Registered guest account", extra={"user_id": account.id})
        return AuthResult(self._security.create_token_pair(account), account)

    def login(self, email: str, password: str, *, ip_address: str | None = None) -> AuthResult:
        account = self._users.get_by_email((email or "").strip())
        if account is None or account.is_deleted:
            raise AuthenticationError(_INVALID_CREDENTIALS)
        if not account.is_active:
            raise AuthenticationError("Account is disabled")
        if account.is_currently_locked():
            raise AuthenticationError("Account is locked due to too many failed login attempts")
        if account.release_expired_lock():
            LOGGER.info("Account lockout expired", extra={"user_id": account.id})

        config = self._config.get_or_create()
        if not verify_password(password, account.password_hash):
            locked = account.record_failed_login(config.max_login_attempts, config.login_lockout_minutes)
            self._users.log_activity(account, "LOGIN_FAILED", None, ip_address)
            self._session.commit()
            if locked:
                LOGGER.warning("Account locked after failed logins", extra={"user_id": account.id})
                raise AuthenticationError("Account is locked due to too many failed login attempts")
            raise AuthenticationError(_INVALID_CREDENTIALS)

        account.record_successful_login()
        self._users.log_activity(account, "LOGIN", None, ip_address)
        self._session.commit()
        LOGGER.info("User logged in", extra={"user_id": account.id, "role": account.role.value})
        return AuthResult(self._security.create_token_pair(account), account)

    def refresh(self, refresh_token: str) -> AuthResult:
        """Exchange a refresh token for a new pair; the old token is revoked."""

        principal = self._security.decode_token(refresh_token, REFRESH_TOKEN)
        account = self._users.get_by_email(principal.email)
        if account is None or account.is_deleted or not account.is_active:
            raise AuthenticationError("Account is no longer active")
        self._security.blacklist.blacklist(refresh_token)
        return AuthResult(self._security.create_token_pair(account), account)

    def validate(self, token: str | None) -> TokenValidation:
        if not token:
            return TokenValidation(valid=False, reason="Token is missing")
        try:
            principal = self._security.decode_token(token)
        except AuthenticationError as exc:
            return TokenValidation(valid=False, reason=exc.message)
        return TokenValidation(
            valid=True,
            email=principal.email,
            role=principal.role,
            expires_at=principal.expires_at,
        )

    def logout(self, token: str | None, email: str | None = None) -> None:
        if token:
            self._security.blacklist.blacklist(token)
        if email:
            account = self._users.get_by_email(email)
            if account is not None:
                self._users.log_activity(account, "LOGOUT")
                self._session.commit()

    def change_password(self, email: str, current_password: str, new_password: str) -> None:
        account = get_account(self._users, email)
        if not verify_password(current_password, account.password_hash):
            raise ValidationError("Current password is incorrect")
        if current_password == new_password:
            raise ValidationError("New password must be different from current password")

        validator = PasswordValidator.from_config(self._config.get_or_create())
        result = validator.validate(new_password)
        if not result.valid:
            raise ValidationError("; ".join(result.errors))

        account.password_hash = hash_password(new_password)
        account.password_reset_required = False
        self._users.log_activity(account, "PASSWORD_CHANGED")
        self._session.commit()
        # Sessions opened with the old password stop working.
        self._security.blacklist.blacklist_user(account.email)
        LOGGER.info("Password changed", extra={"user_id": account.id})


__all__ = ["AuthResult", "AuthService", "TokenValidation"]
