"""Schemas for the administration console."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from advisory.models import NotificationTemplate, SystemConfig, UserActivityLog
from advisory.services.admin import CONFIG_FIELDS, SystemStats, TemplatePreview


class SystemStatsRead(BaseModel):
    """Headline counters shown on the admin dashboard."""

    total_users: int = 0
    total_admins: int = 0
    total_employees: int = 0
    total_clients: int = 0
    total_guests: int = 0
    active_users: int = 0
    total_investments: int = 0
    active_investments: int = 0
    total_investment_value: Decimal = Decimal("0")
    pending_upgrade_requests: int = 0
    total_transactions: int = 0

    @field_serializer("total_investment_value")
    def _serialize_total_investment_value(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_stats(cls, stats: SystemStats) -> "SystemStatsRead":
        return cls(**vars(stats))


class ActivityRead(BaseModel):
    id: int
    user_id: int | None = None
    email: str | None = None
    action: str
    details: str | None = None
    ip_address: str | None = None
    activity_time: datetime

    @classmethod
    def from_log(cls, entry: UserActivityLog) -> "ActivityRead":
        return cls(
            id=entry.id,
            user_id=entry.user_account_id,
            email=entry.user_account.email if entry.user_account else None,
            action=entry.action,
            details=entry.details,
            ip_address=entry.ip_address,
            activity_time=entry.activity_time,
        )


class PermissionIdsRequest(BaseModel):
    permission_ids: list[int] = Field(default_factory=list)


class PermissionChangeResponse(BaseModel):
    message: str
    user_id: int
    assigned_count: int | None = None
    removed_count: int | None = None
    total_permissions: int | None = None
    remaining_permissions: int | None = None


class BulkOperationRequest(BaseModel):
    user_ids: list[int] = Field(default_factory=list)
    operation: str


class BulkOperationResponse(BaseModel):
    message: str
    operation: str
    affected_count: int


class SystemConfigRead(BaseModel):
    maintenance_mode: bool = False
    maintenance_message: str | None = None
    max_upload_size: int
    session_timeout: int
    password_min_length: int
    password_require_special_char: bool
    password_require_number: bool
    password_require_uppercase: bool
    password_expiry_days: int
    max_login_attempts: int
    login_lockout_minutes: int
    two_factor_enabled: bool
    email_notifications_enabled: bool
    sms_notifications_enabled: bool
    backup_enabled: bool
    backup_frequency: str
    backup_retention_days: int
    last_modified: datetime | None = None
    modified_by: str | None = None

    @classmethod
    def from_config(cls, config: SystemConfig) -> "SystemConfigRead":
        values = {field: getattr(config, field) for field in CONFIG_FIELDS}
        return cls(**values, last_modified=config.last_modified, modified_by=config.modified_by)


class SystemConfigUpdate(BaseModel):
    """Partial configuration update; omitted fields keep their value."""

    maintenance_mode: bool | None = None
    maintenance_message: str | None = None
    max_upload_size: int | None = None
    session_timeout: int | None = None
    password_min_length: int | None = None
    password_require_special_char: bool | None = None
    password_require_number: bool | None = None
    password_require_uppercase: bool | None = None
    password_expiry_days: int | None = None
    max_login_attempts: int | None = None
    login_lockout_minutes: int | None = None
    two_factor_enabled: bool | None = None
    email_notifications_enabled: bool | None = None
    sms_notifications_enabled: bool | None = None
    backup_enabled: bool | None = None
    backup_frequency: str | None = None
    backup_retention_days: int | None = None


class MaintenanceRequest(BaseModel):
    enabled: bool
    message: str | None = None


class MaintenanceResponse(BaseModel):
    maintenance_mode: bool
    message: str


class EmployeeCreate(BaseModel):
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    department: str | None = None
    location: str | None = None
    title: str | None = None


class AssignClientRequest(BaseModel):
    employee_id: int


class RejectRequest(BaseModel):
    reason: str | None = None


class TemplateCreate(BaseModel):
    name: str | None = None
    template_type: str | None = None
    category: str | None = None
    subject: str | None = None
    content: str | None = None
    description: str | None = None
    variables: str | None = None
    is_active: bool | None = None


class TemplateUpdate(TemplateCreate):
    pass


class TemplateRead(BaseModel):
    id: int
    name: str
    template_type: str
    category: str | None = None
    subject: str | None = None
    content: str
    description: str | None = None
    variables: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_template(cls, template: NotificationTemplate) -> "TemplateRead":
        return cls(
            id=template.id,
            name=template.name,
            template_type=template.template_type,
            category=template.category,
            subject=template.subject,
            content=template.content,
            description=template.description,
            variables=template.required_variables,
            is_active=template.is_active if template.is_active is not None else True,
            created_by=template.created_by,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class TemplatePreviewRequest(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)


class TemplatePreviewRead(BaseModel):
    subject: str | None = None
    content: str | None = None
    missing_variables: list[str] = Field(default_factory=list)

    @classmethod
    def from_preview(cls, preview: TemplatePreview) -> "TemplatePreviewRead":
        return cls(
            subject=preview.subject,
            content=preview.content,
            missing_variables=list(preview.missing_variables),
        )


__all__ = [
    "ActivityRead",
    "AssignClientRequest",
    "BulkOperationRequest",
    "BulkOperationResponse",
    "EmployeeCreate",
    "MaintenanceRequest",
    "MaintenanceResponse",
    "PermissionChangeResponse",
    "PermissionIdsRequest",
    "RejectRequest",
    "SystemConfigRead",
    "SystemConfigUpdate",
    "SystemStatsRead",
    "TemplateCreate",
    "TemplatePreviewRead",
    "TemplatePreviewRequest",
    "TemplateRead",
    "TemplateUpdate",
]
