"""Request and response bodies for the authentication endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .common import UserSummary


class RegisterRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class TokenResponse(BaseModel):
    """Token pair plus the account it was issued for."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserSummary


class TokenValidationResponse(BaseModel):
    valid: bool
    email: str | None = None
    role: str | None = None
    expires_at: datetime | None = None
    reason: str | None = None


__all__ = [
    "ChangePasswordRequest",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    "TokenValidationResponse",
]
