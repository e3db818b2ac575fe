"""Schemas for account self-service and user administration."""
from __future__ import annotations

from pydantic import BaseModel, Field

from advisory.models import UserAccount

from .common import UserSummary


class UserDetail(UserSummary):
    """Full account view including the granted permissions."""

    password_reset_required: bool = False
    account_locked: bool = False
    permissions: list[str] = Field(default_factory=list)

    @classmethod
    def from_account(cls, account: UserAccount) -> "UserDetail":
        summary = UserSummary.from_account(account)
        return cls(
            **summary.model_dump(),
            password_reset_required=account.password_reset_required,
            account_locked=account.account_locked,
            permissions=sorted(permission.value for permission in account.permission_types),
        )


class UserUpdateRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    address: str | None = None


class PasswordUpdateRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class RoleUpdateRequest(BaseModel):
    role: str


__all__ = ["PasswordUpdateRequest", "RoleUpdateRequest", "UserDetail", "UserUpdateRequest"]
