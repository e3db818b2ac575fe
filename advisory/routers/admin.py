"""Administration routes: statistics, users, configuration and templates."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from advisory.core.logger import get_logger
from advisory.core.security import AuthenticatedUser, require_admin
from advisory.dependencies import get_admin_service
from advisory.schemas import (
    ActivityRead,
    AssignClientRequest,
    BulkOperationRequest,
    BulkOperationResponse,
    ClientDetail,
    EmployeeCreate,
    EmployeeDetail,
    MaintenanceRequest,
    MaintenanceResponse,
    MessageResponse,
    PermissionChangeResponse,
    PermissionIdsRequest,
    RejectRequest,
    RoleUpdateRequest,
    SystemConfigRead,
    SystemConfigUpdate,
    SystemStatsRead,
    TemplateCreate,
    TemplatePreviewRead,
    TemplatePreviewRequest,
    TemplateRead,
    TemplateUpdate,
    UpgradeRequestRead,
    UserDetail,
)
from advisory.services import AdminService

LOGGER = get_logger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


# overview --------------------------------------------------------------


@router.get("/stats", response_model=SystemStatsRead, summary="System statistics")
async def read_stats(
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> SystemStatsRead:
    return SystemStatsRead.from_stats(service.get_system_stats())


@router.get("/activity", response_model=list[ActivityRead], summary="Recent user activity")
async def list_activity(
    limit: int | None = Query(None, ge=1, le=500),
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> list[ActivityRead]:
    return [ActivityRead.from_log(entry) for entry in service.get_recent_activity(limit)]


@router.get("/roles/distribution", response_model=dict[str, int], summary="Users per role")
async def read_role_distribution(
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> dict[str, int]:
    return service.get_role_distribution()


# users and permissions -------------------------------------------------


@router.put("/users/{user_id}/role", response_model=UserDetail, summary="Upgrade a user's role")
async def update_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UserDetail:
    return UserDetail.from_account(service.update_user_role(user_id, payload.role))


@router.post("/users/{user_id}/permissions", response_model=PermissionChangeResponse, summary="Grant permissions")
async def assign_permissions(
    user_id: int,
    payload: PermissionIdsRequest,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> PermissionChangeResponse:
    return PermissionChangeResponse(**service.assign_permissions(user_id, payload.permission_ids))


@router.delete(
    "/users/{user_id}/permissions",
    response_model=PermissionChangeResponse,
    summary="Revoke permissions",
)
async def remove_permissions(
    user_id: int,
    payload: PermissionIdsRequest,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> PermissionChangeResponse:
    return PermissionChangeResponse(**service.remove_permissions(user_id, payload.permission_ids))


@router.post("/users/bulk", response_model=BulkOperationResponse, summary="Apply an operation to many users")
async def bulk_operation(
    payload: BulkOperationRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> BulkOperationResponse:
    result = service.bulk_operation(payload.user_ids, payload.operation)
    LOGGER.info("Bulk operation requested", extra={"by": admin.email, "operation": result["operation"]})
    return BulkOperationResponse(**result)


@router.post("/users/{user_id}/reset-password", response_model=MessageResponse, summary="Reset a password")
async def reset_password(
    user_id: int,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> MessageResponse:
    service.reset_user_password(user_id)
    return MessageResponse(message="Password reset successfully")


@router.put("/users/{user_id}/enable", response_model=UserDetail, summary="Enable an account")
async def enable_user(
    user_id: int,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UserDetail:
    return UserDetail.from_account(service.enable_user(user_id))


@router.put("/users/{user_id}/disable", response_model=UserDetail, summary="Disable an account")
async def disable_user(
    user_id: int,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UserDetail:
    return UserDetail.from_account(service.disable_user(user_id))


# configuration ---------------------------------------------------------


@router.get("/config", response_model=SystemConfigRead, summary="System configuration")
async def read_config(
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> SystemConfigRead:
    return SystemConfigRead.from_config(service.get_system_config())


@router.put("/config", response_model=SystemConfigRead, summary="Update system configuration")
async def update_config(
    payload: SystemConfigUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> SystemConfigRead:
    config = service.update_system_config(payload.model_dump(exclude_none=True), admin.email)
    return SystemConfigRead.from_config(config)


@router.put("/maintenance", response_model=MaintenanceResponse, summary="Toggle maintenance mode")
async def toggle_maintenance(
    payload: MaintenanceRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> MaintenanceResponse:
    return MaintenanceResponse(**service.toggle_maintenance(payload.enabled, payload.message, admin.email))


# staffing --------------------------------------------------------------


@router.post(
    "/employees",
    response_model=EmployeeDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create an employee account",
)
async def create_employee(
    payload: EmployeeCreate,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> EmployeeDetail:
    return EmployeeDetail.from_employee(service.create_employee(payload.model_dump()))


@router.put("/clients/{client_id}/assign", response_model=ClientDetail, summary="Assign a client to an advisor")
async def assign_client(
    client_id: int,
    payload: AssignClientRequest,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> ClientDetail:
    client = service.assign_client(client_id, payload.employee_id)
    return ClientDetail.from_client(client, include_notes=True)


# upgrade requests ------------------------------------------------------


@router.get("/upgrade-requests/pending", response_model=list[UpgradeRequestRead], summary="Pending upgrades")
async def list_pending_upgrade_requests(
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> list[UpgradeRequestRead]:
    return [UpgradeRequestRead.from_request(request) for request in service.get_pending_upgrade_requests()]


@router.put(
    "/upgrade-requests/{request_id}/approve",
    response_model=UpgradeRequestRead,
    summary="Approve an upgrade request",
)
async def approve_upgrade_request(
    request_id: int,
    admin: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UpgradeRequestRead:
    return UpgradeRequestRead.from_request(service.approve_upgrade_request(request_id, admin.email))


@router.put(
    "/upgrade-requests/{request_id}/reject",
    response_model=UpgradeRequestRead,
    summary="Reject an upgrade request",
)
async def reject_upgrade_request(
    request_id: int,
    payload: RejectRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UpgradeRequestRead:
    request = service.reject_upgrade_request(request_id, payload.reason, admin.email)
    return UpgradeRequestRead.from_request(request)


# notification templates ------------------------------------------------


@router.get("/notification-templates", response_model=list[TemplateRead], summary="Notification templates")
async def list_templates(
    template_type: str | None = Query(None, alias="type"),
    active_only: bool = Query(False),
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> list[TemplateRead]:
    templates = service.list_templates(template_type=template_type, active_only=active_only)
    return [TemplateRead.from_template(template) for template in templates]


@router.post(
    "/notification-templates",
    response_model=TemplateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification template",
)
async def create_template(
    payload: TemplateCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> TemplateRead:
    return TemplateRead.from_template(service.create_template(payload.model_dump(), admin.email))


@router.get("/notification-templates/{template_id}", response_model=TemplateRead, summary="Template by id")
async def read_template(
    template_id: int,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> TemplateRead:
    return TemplateRead.from_template(service.get_template(template_id))


@router.put("/notification-templates/{template_id}", response_model=TemplateRead, summary="Update a template")
async def update_template(
    template_id: int,
    payload: TemplateUpdate,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> TemplateRead:
    return TemplateRead.from_template(service.update_template(template_id, payload.model_dump()))


@router.delete(
    "/notification-templates/{template_id}",
    response_model=MessageResponse,
    summary="Delete a template",
)
async def delete_template(
    template_id: int,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> MessageResponse:
    service.delete_template(template_id)
    return MessageResponse(message="Template deleted successfully")


@router.post(
    "/notification-templates/{template_id}/preview",
    response_model=TemplatePreviewRead,
    summary="Render a template with sample values",
)
async def preview_template(
    template_id: int,
    payload: TemplatePreviewRequest,
    _: AuthenticatedUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> TemplatePreviewRead:
    return TemplatePreviewRead.from_preview(service.preview_template(template_id, payload.values))


__all__ = ["router"]
