"""Authentication routes: registration, login and the token lifecycle."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from advisory.core.logger import get_logger
from advisory.core.security import AuthenticatedUser, get_authenticated_user
from advisory.dependencies import client_ip, get_auth_service
from advisory.middleware.auth import extract_bearer_token
from advisory.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    TokenValidationResponse,
    UserSummary,
)
from advisory.services import AuthService
from advisory.services.auth import AuthResult

LOGGER = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(result: AuthResult) -> TokenResponse:
    tokens = result.tokens
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
        expires_in=tokens.expires_in,
        user=UserSummary.from_account(result.account),
    )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a guest account",
)
async def register(
    payload: RegisterRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    result = service.register(
        payload.email,
        payload.password,
        payload.first_name,
        payload.last_name,
        ip_address=client_ip(request),
    )
    return _token_response(result)


@router.post("/login", response_model=TokenResponse, summary="Exchange credentials for tokens")
async def login(
    payload: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    result = service.login(payload.email, payload.password, ip_address=client_ip(request))
    return _token_response(result)


@router.post("/logout", response_model=MessageResponse, summary="Revoke the current access token")
async def logout(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    user = getattr(request.state, "user", None)
    service.logout(extract_bearer_token(request), user.email if user else None)
    return MessageResponse(message="Logged out successfully")


@router.post("/refresh", response_model=TokenResponse, summary="Rotate a refresh token")
async def refresh(
    payload: RefreshRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    return _token_response(service.refresh(payload.refresh_token))


@router.get("/validate", response_model=TokenValidationResponse, summary="Check a bearer token")
async def validate(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> TokenValidationResponse:
    result = service.validate(extract_bearer_token(request))
    return TokenValidationResponse(
        valid=result.valid,
        email=result.email,
        role=result.role.value if result.role else None,
        expires_at=result.expires_at,
        reason=result.reason,
    )


@router.post("/change-password", response_model=MessageResponse, summary="Change the caller's password")
async def change_password(
    payload: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    service.change_password(user.email, payload.current_password, payload.new_password)
    LOGGER.info("Password changed through the API", extra={"email": user.email})
    return MessageResponse(message="Password changed successfully")


__all__ = ["router"]
