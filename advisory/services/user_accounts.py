"""User account lookups and profile maintenance."""
from __future__ import annotations

from typing import Mapping

from sqlalchemy.orm import Session

from advisory.core.exceptions import BusinessRuleError, ValidationError
from advisory.core.logger import get_logger
from advisory.core.security import SecurityProvider, get_security_provider
from advisory.domain.roles import Role
from advisory.models import UserAccount
from advisory.repositories import UserRepository
from advisory.utils.pagination import Page, clamp_page

from .auth import AuthService
from .support import apply_role_permissions, ensure_role_profile, get_account, get_account_by_id

LOGGER = get_logger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "phone_number", "address")


class UserAccountService:
    def __init__(
        self,
        session: Session,
        *,
        users: UserRepository | None = None,
        security: SecurityProvider | None = None,
    ) -> None:
        self._session = session
        self._users = users or UserRepository(session)
        self._security = security or get_security_provider()

    def get_current_user(self, email: str) -> UserAccount:
        return get_account(self._users, email)

    def get_user(self, user_id: int) -> UserAccount:
        return get_account_by_id(self._users, user_id)

    def list_users(self, *, page: int = 1, page_size: int = 20, search: str | None = None) -> Page[UserAccount]:
        """Return a page of non-deleted accounts ordered by id."""

        total = self._users.count_users(search=search)
        page, offset = clamp_page(page, page_size, total)
        items = self._users.fetch_users(search=search, limit=page_size, offset=offset)
        return Page(items=items, total=total, page=page, page_size=page_size)

    def search_users(self, query: str) -> list[UserAccount]:
        if not query or not query.strip():
            raise ValidationError("Search query must not be empty")
        return self._users.search(query)

    def update_details(self, email: str, changes: Mapping[str, object]) -> UserAccount:
        account = get_account(self._users, email)
        for field in EDITABLE_FIELDS:
            if field not in changes or changes[field] is None:
                continue
            value = str(changes[field]).strip()
            if field in ("first_name", "last_name") and not value:
                raise ValidationError(f"{field.replace('_', ' ').capitalize()} must not be blank")
            setattr(account, field, value or None)
        self._users.log_activity(account, "PROFILE_UPDATED")
        self._session.commit()
        return account

    def update_password(self, email: str, current_password: str, new_password: str, confirm_password: str) -> None:
        if new_password != confirm_password:
            raise ValidationError("New password and confirmation do not match")
        AuthService(self._session, security=self._security, users=self._users).change_password(
            email, current_password, new_password
        )

    def delete_user(self, user_id: int) -> None:
        account = get_account_by_id(self._users, user_id)
        if account.is_admin:
            raise BusinessRuleError("Admin accounts cannot be deleted")
        account.soft_delete()
        self._users.log_activity(account, "ACCOUNT_DELETED")
        self._session.commit()
        self._security.blacklist.blacklist_user(account.email)
        LOGGER.info("User soft-deleted", extra={"user_id": user_id})

    def update_role(self, user_id: int, role: str | Role) -> UserAccount:
        """Upgrade ``user_id`` to ``role``; downgrades and no-ops are rejected."""

        account = get_account_by_id(self._users, user_id)
        try:
            target = role if isinstance(role, Role) else Role.from_string(role)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        previous = account.role
        if not account.upgrade_role(target):
            raise BusinessRuleError(
                f"Cannot change role from {previous.value} to {target.value}; roles can only be upgraded"
            )
        if previous is Role.GUEST and account.guest is not None:
            self._session.delete(account.guest)
            account.guest = None
        apply_role_permissions(account, self._users)
        ensure_role_profile(self._session, account)
        self._users.log_activity(account, "ROLE_CHANGED", f"{previous.value} -> {target.value}")
        self._session.commit()
        # Tokens carry the role claim.
        self._security.blacklist.blacklist_user(account.email)
        LOGGER.info("Role upgraded", extra={"user_id": user_id, "from": previous.value, "to": target.value})
        return account

    def _set_active(self, user_id: int, active: bool) -> UserAccount:
        account = get_account_by_id(self._users, user_id)
        account.is_active = active
        if active:
            account.account_locked = False
            account.failed_login_attempts = 0
            account.lock_expiry_time = None
        self._users.log_activity(account, "ACCOUNT_ENABLED" if active else "ACCOUNT_DISABLED")
        self._session.commit()
        if not active:
            self._security.blacklist.blacklist_user(account.email)
        return account

    def activate_user(self, user_id: int) -> UserAccount:
        return self._set_active(user_id, True)

    def deactivate_user(self, user_id: int) -> UserAccount:
        return self._set_active(user_id, False)


__all__ = ["EDITABLE_FIELDS", "UserAccountService"]
