"""Account self-service and user lookup routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from advisory.core.security import (
    AuthenticatedUser,
    get_authenticated_user,
    require_admin,
    require_permission,
)
from advisory.dependencies import get_user_account_service
from advisory.domain.permissions import PermissionType
from advisory.schemas import (
    MessageResponse,
    PasswordUpdateRequest,
    RoleUpdateRequest,
    UserDetail,
    UserPage,
    UserSummary,
    UserUpdateRequest,
)
from advisory.services import UserAccountService
from advisory.utils.pagination import normalize_page_size

router = APIRouter(prefix="/users", tags=["users"])

can_view_accounts = require_permission(PermissionType.VIEW_ACCOUNTS)


@router.get("/me", response_model=UserDetail, summary="Current user")
async def read_current_user(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    service: UserAccountService = Depends(get_user_account_service),
) -> UserDetail:
    return UserDetail.from_account(service.get_current_user(user.email))


@router.put("/me", response_model=UserDetail, summary="Update the current user's details")
async def update_current_user(
    payload: UserUpdateRequest,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    service: UserAccountService = Depends(get_user_account_service),
) -> UserDetail:
    account = service.update_details(user.email, payload.model_dump(exclude_none=True))
    return UserDetail.from_account(account)


@router.put("/me/password", response_model=MessageResponse, summary="Update the current user's password")
async def update_current_password(
    payload: PasswordUpdateRequest,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    service: UserAccountService = Depends(get_user_account_service),
) -> MessageResponse:
    service.update_password(
        user.email, payload.current_password, payload.new_password, payload.confirm_password
    )
    return MessageResponse(message="Password updated successfully")


@router.get("/search", response_model=list[UserSummary], summary="Search users")
async def search_users(
    q: str = Query("", description="Matched against email, first and last name"),
    _: AuthenticatedUser = Depends(can_view_accounts),
    service: UserAccountService = Depends(get_user_account_service),
) -> list[UserSummary]:
    return [UserSummary.from_account(account) for account in service.search_users(q)]


@router.get("", response_model=UserPage, summary="List users")
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1),
    search: str | None = Query(None),
    _: AuthenticatedUser = Depends(can_view_accounts),
    service: UserAccountService = Depends(get_user_account_service),
) -> UserPage:
    result = service.list_users(page=page, page_size=normalize_page_size(page_size), search=search)
    return UserPage(
        items=[UserSummary.from_account(account) for account in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_next=result.has_next,
        has_previous=result.has_previous,
    )


@router.get("/{user_id}", response_model=UserDetail, summary="User by id")
async def read_user(
    user_id: int,
    _: AuthenticatedUser = Depends(can_view_accounts),
    service: UserAccountService = Depends(get_user_account_service),
) -> UserDetail:
    return UserDetail.from_account(service.get_user(user_id))


@router.delete("/{user_id}", response_model=MessageResponse, summary="Soft-delete a user")
async def delete_user(
    user_id: int,
    _: AuthenticatedUser = Depends(require_admin),
    service: UserAccountService = Depends(get_user_account_service),
) -> MessageResponse:
    service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


@router.put("/{user_id}/role", response_model=UserDetail, summary="Upgrade a user's role")
async def update_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    _: AuthenticatedUser = Depends(require_admin),
    service: UserAccountService = Depends(get_user_account_service),
) -> UserDetail:
    return UserDetail.from_account(service.update_role(user_id, payload.role))


__all__ = ["router"]
