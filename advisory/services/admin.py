"""Administrative operations: statistics, permissions, configuration and staffing."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from advisory.core.exceptions import (
    BusinessRuleError,
    DuplicateResourceError,
    EntityNotFoundError,
    ValidationError,
)
from advisory.core.logger import get_logger
from advisory.core.security import SecurityProvider, get_security_provider, hash_password
from advisory.domain.finance import quantize_money
from advisory.domain.roles import Role
from advisory.domain.statuses import InvestmentStatus
from advisory.domain.validation import STRONG_PASSWORD_MESSAGE, is_strong_password, is_valid_email
from advisory.models import (
    Client,
    Employee,
    GuestUpgradeRequest,
    NotificationTemplate,
    SystemConfig,
    UserAccount,
    UserActivityLog,
)
from advisory.models.messaging import TEMPLATE_CATEGORIES, TEMPLATE_TYPES
from advisory.repositories import (
    ClientRepository,
    EmployeeRepository,
    GuestRepository,
    InvestmentRepository,
    SystemConfigRepository,
    TemplateRepository,
    UserRepository,
)

from .notifications import NotificationService
from .support import (
    apply_role_permissions,
    ensure_role_profile,
    generate_temporary_password,
    get_account_by_id,
)
from .user_accounts import UserAccountService

LOGGER = get_logger(__name__)

BULK_OPERATIONS = ("ACTIVATE", "DEACTIVATE", "RESET_PASSWORD", "DELETE")
DEFAULT_ACTIVITY_LIMIT = 50

# SystemConfig attributes administrators may change.
CONFIG_FIELDS = (
    "maintenance_mode",
    "maintenance_message",
    "max_upload_size",
    "session_timeout",
    "password_min_length",
    "password_require_special_char",
    "password_require_number",
    "password_require_uppercase",
    "password_expiry_days",
    "max_login_attempts",
    "login_lockout_minutes",
    "two_factor_enabled",
    "email_notifications_enabled",
    "sms_notifications_enabled",
    "backup_enabled",
    "backup_frequency",
    "backup_retention_days",
)
BACKUP_FREQUENCIES = ("HOURLY", "DAILY", "WEEKLY", "MONTHLY")

# NotificationTemplate attributes settable from a payload.
TEMPLATE_FIELDS = (
    "name",
    "template_type",
    "category",
    "subject",
    "content",
    "description",
    "variables",
    "is_active",
)


@dataclass(frozen=True)
class SystemStats:
    total_users: int
    total_admins: int
    total_employees: int
    total_clients: int
    total_guests: int
    active_users: int
    total_investments: int
    active_investments: int
    total_investment_value: Decimal
    pending_upgrade_requests: int
    total_transactions: int


@dataclass(frozen=True)
class TemplatePreview:
    subject: str | None
    content: str | None
    missing_variables: list[str]


class AdminService:
    def __init__(
        self,
        session: Session,
        *,
        security: SecurityProvider | None = None,
        users: UserRepository | None = None,
        clients: ClientRepository | None = None,
        employees: EmployeeRepository | None = None,
        guests: GuestRepository | None = None,
        investments: InvestmentRepository | None = None,
        config: SystemConfigRepository | None = None,
        templates: TemplateRepository | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._session = session
        self._security = security or get_security_provider()
        self._users = users or UserRepository(session)
        self._clients = clients or ClientRepository(session)
        self._employees = employees or EmployeeRepository(session)
        self._guests = guests or GuestRepository(session)
        self._investments = investments or InvestmentRepository(session)
        self._config = config or SystemConfigRepository(session)
        self._templates = templates or TemplateRepository(session)
        self._notifications = notifications or NotificationService(
            session, templates=self._templates, users=self._users, config=self._config
        )

    def _accounts(self) -> UserAccountService:
        return UserAccountService(self._session, users=self._users, security=self._security)

    # overview ----------------------------------------------------------

    def get_system_stats(self) -> SystemStats:
        by_role = self._users.count_by_role()
        by_status = self._investments.count_by_status()
        return SystemStats(
            total_users=sum(by_role.values()),
            total_admins=by_role[Role.ADMIN],
            total_employees=by_role[Role.EMPLOYEE],
            total_clients=by_role[Role.CLIENT],
            total_guests=by_role[Role.GUEST],
            active_users=self._users.count_active(),
            total_investments=self._investments.count(),
            active_investments=by_status.get(InvestmentStatus.ACTIVE, 0),
            total_investment_value=quantize_money(self._investments.total_amount()),
            pending_upgrade_requests=self._guests.count_pending_requests(),
            total_transactions=self._investments.count_transactions(),
        )

    def get_recent_activity(self, limit: int | None = None) -> list[UserActivityLog]:
        return list(self._users.recent_activity(limit or DEFAULT_ACTIVITY_LIMIT))

    def get_role_distribution(self) -> dict[str, int]:
        return {role.value: total for role, total in self._users.count_by_role().items()}

    # users and permissions ---------------------------------------------

    def update_user_role(self, user_id: int, role: str) -> UserAccount:
        return self._accounts().update_role(user_id, role)

    def assign_permissions(self, user_id: int, permission_ids: Iterable[int]) -> dict[str, Any]:
        account = get_account_by_id(self._users, user_id)
        wanted = set(permission_ids)
        permissions = self._users.permissions_by_ids(wanted)
        if len(permissions) != len(wanted):
            raise ValidationError("Some permission IDs are invalid")
        account.permissions = set(account.permissions) | set(permissions)
        self._users.log_activity(account, "PERMISSIONS_ASSIGNED", f"{len(permissions)} permission(s)")
        self._session.commit()
        return {
            "message": "Permissions assigned successfully",
            "user_id": account.id,
            "assigned_count": len(permissions),
            "total_permissions": len(account.permissions),
        }

    def remove_permissions(self, user_id: int, permission_ids: Iterable[int]) -> dict[str, Any]:
        account = get_account_by_id(self._users, user_id)
        wanted = set(permission_ids)
        permissions = self._users.permissions_by_ids(wanted)
        if len(permissions) != len(wanted):
            raise ValidationError("Some permission IDs are invalid")
        removed = set(account.permissions) & set(permissions)
        account.permissions = set(account.permissions) - removed
        self._users.log_activity(account, "PERMISSIONS_REMOVED", f"{len(removed)} permission(s)")
        self._session.commit()
        return {
            "message": "Permissions removed successfully",
            "user_id": account.id,
            "removed_count": len(removed),
            "remaining_permissions": len(account.permissions),
        }

    def bulk_operation(self, user_ids: Iterable[int], operation: str) -> dict[str, Any]:
        """Apply ``operation`` to every listed account in one transaction."""

        op = (operation or "").strip().upper()
        if op not in BULK_OPERATIONS:
            raise ValidationError(f"Invalid operation: {operation}")
        ids = list(dict.fromkeys(user_ids))
        accounts = [account for account in self._users.get_many(ids) if not account.is_deleted]
        if not ids or len(accounts) != len(ids):
            raise ValidationError("Some user IDs are invalid")
        if op == "DELETE" and any(account.is_admin for account in accounts):
            raise BusinessRuleError("Admin accounts cannot be deleted")

        for account in accounts:
            if op == "ACTIVATE":
                account.is_active = True
                account.account_locked = False
                account.failed_login_attempts = 0
            elif op == "DEACTIVATE":
                account.is_active = False
            elif op == "RESET_PASSWORD":
                self._reset_password(account)
            else:
                account.soft_delete()
        self._users.log_activity(None, "BULK_OPERATION", f"Performed {op} on {len(accounts)} users")
        self._session.commit()

        if op in ("DEACTIVATE", "RESET_PASSWORD", "DELETE"):
            for account in accounts:
                self._security.blacklist.blacklist_user(account.email)
        LOGGER.info("Bulk operation applied", extra={"operation": op, "count": len(accounts)})
        return {
            "message": "Bulk operation completed successfully",
            "operation": op,
            "affected_count": len(accounts),
        }

    def _reset_password(self, account: UserAccount) -> None:
        temporary = generate_temporary_password()
        account.password_hash = hash_password(temporary)
        account.password_reset_required = True
        self._notifications.send_password_reset(account, temporary)

    def reset_user_password(self, user_id: int) -> None:
        account = get_account_by_id(self._users, user_id)
        self._reset_password(account)
        self._users.log_activity(account, "PASSWORD_RESET")
        self._session.commit()
        self._security.blacklist.blacklist_user(account.email)

    def enable_user(self, user_id: int) -> UserAccount:
        return self._accounts().activate_user(user_id)

    def disable_user(self, user_id: int) -> UserAccount:
        return self._accounts().deactivate_user(user_id)

    # configuration -----------------------------------------------------

    def get_system_config(self) -> SystemConfig:
        config = self._config.get_or_create()
        self._session.commit()
        return config

    def update_system_config(self, changes: Mapping[str, Any], admin_email: str | None = None) -> SystemConfig:
        unknown = sorted(set(changes) - set(CONFIG_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown configuration fields: {', '.join(unknown)}")
        frequency = changes.get("backup_frequency")
        if frequency is not None and str(frequency).upper() not in BACKUP_FREQUENCIES:
            raise ValidationError(f"Invalid backup frequency: {frequency}")

        config = self._config.get_or_create()
        for field, value in changes.items():
            if value is None:
                continue
            setattr(config, field, str(value).upper() if field == "backup_frequency" else value)
        if not config.is_valid():
            invalid = config.invalid_fields()
            self._session.rollback()
            raise ValidationError(f"Invalid system configuration: {', '.join(invalid)}")
        config.modified_by = admin_email
        self._session.commit()
        LOGGER.info("System configuration updated", extra={"fields": sorted(changes), "by": admin_email})
        return config

    def toggle_maintenance(
        self, enabled: bool, message: str | None = None, admin_email: str | None = None
    ) -> dict[str, Any]:
        config = self._config.get_or_create()
        config.maintenance_mode = enabled
        if message is not None:
            config.maintenance_message = message
        config.modified_by = admin_email
        if enabled:
            self._notifications.broadcast_maintenance(
                config.maintenance_message or "The system is entering scheduled maintenance."
            )
        self._session.commit()
        LOGGER.warning("Maintenance mode %s", "enabled" if enabled else "disabled")
        return {
            "maintenance_mode": enabled,
            "message": "Maintenance mode enabled" if enabled else "Maintenance mode disabled",
        }

    # staffing ----------------------------------------------------------

    def create_employee(self, payload: Mapping[str, Any]) -> Employee:
        email = (payload.get("email") or "").strip().lower()
        password = payload.get("password") or ""
        first_name = (payload.get("first_name") or "").strip()
        last_name = (payload.get("last_name") or "").strip()
        if not email:
            raise ValidationError("Email is required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        if not password:
            raise ValidationError("Password is required")
        if not is_strong_password(password):
            raise ValidationError(STRONG_PASSWORD_MESSAGE)
        if not first_name:
            raise ValidationError("First name is required")
        if not last_name:
            raise ValidationError("Last name is required")
        if self._users.exists_by_email(email):
            raise DuplicateResourceError(f"Email already exists: {email}")

        account = UserAccount(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            phone_number=payload.get("phone_number"),
            role=Role.EMPLOYEE,
        )
        apply_role_permissions(account, self._users)
        employee = Employee(user_account=account, title=payload.get("title"))
        if payload.get("department"):
            employee.department = payload["department"]
        if payload.get("location"):
            employee.location_id = payload["location"]
        self._session.add_all([account, employee])
        self._session.flush()
        employee.generate_employee_id()

        self._notifications.send_employee_welcome(account, employee.employee_id)
        self._users.log_activity(account, "EMPLOYEE_CREATED")
        self._session.commit()
        LOGGER.info("Employee created", extra={"user_id": account.id, "employee_id": employee.employee_id})
        return employee

    def assign_client(self, client_id: int, employee_id: int) -> Client:
        client = self._clients.get(client_id)
        if client is None:
            raise EntityNotFoundError.for_entity("Client", client_id)
        employee = self._employees.get(employee_id)
        if employee is None:
            raise EntityNotFoundError.for_entity("Employee", employee_id)
        if not employee.is_active or not employee.user_account.is_active:
            raise BusinessRuleError("Clients can only be assigned to active employees")
        client.assign_to_employee(employee)
        self._users.log_activity(
            client.user_account, "CLIENT_ASSIGNED", f"Assigned to {employee.employee_id}"
        )
        self._session.commit()
        return client

    # upgrade requests --------------------------------------------------

    def get_pending_upgrade_requests(self) -> list[GuestUpgradeRequest]:
        return self._guests.pending_requests()

    def _pending_request(self, request_id: int) -> GuestUpgradeRequest:
        request = self._guests.get_upgrade_request(request_id)
        if request is None:
            raise EntityNotFoundError.for_entity("Upgrade request", request_id)
        if not request.can_be_processed():
            raise ValidationError("Request is not in pending status")
        return request

    def approve_upgrade_request(self, request_id: int, admin_email: str) -> GuestUpgradeRequest:
        """Turn the requesting guest into a client with an empty portfolio."""

        request = self._pending_request(request_id)
        account = request.user_account
        if account.guest is not None:
            self._session.delete(account.guest)
            account.guest = None
        if not account.upgrade_role(Role.CLIENT):
            raise BusinessRuleError(f"Cannot upgrade a {account.role.value} account to CLIENT")
        apply_role_permissions(account, self._users)
        ensure_role_profile(self._session, account)
        request.approve(admin_email)

        self._notifications.notify_user_of_upgrade_decision(account, approved=True)
        self._users.log_activity(account, "UPGRADE_APPROVED", f"Approved by {admin_email}")
        self._session.commit()
        self._security.blacklist.blacklist_user(account.email)
        LOGGER.info("Upgrade request approved", extra={"request_id": request.id, "user_id": account.id})
        return request

    def reject_upgrade_request(self, request_id: int, reason: str | None, admin_email: str) -> GuestUpgradeRequest:
        request = self._pending_request(request_id)
        request.reject(admin_email, reason)
        request.details = f"{request.details or ''}\nRejection reason: {reason}"
        if request.user_account.guest is not None:
            request.user_account.guest.cancel_upgrade_request()

        self._notifications.notify_user_of_upgrade_decision(request.user_account, approved=False, reason=reason)
        self._users.log_activity(request.user_account, "UPGRADE_REJECTED", reason)
        self._session.commit()
        LOGGER.info("Upgrade request rejected", extra={"request_id": request.id})
        return request

    # notification templates --------------------------------------------

    def list_templates(
        self, *, template_type: str | None = None, active_only: bool = False
    ) -> list[NotificationTemplate]:
        return self._templates.list_all(template_type=template_type, active_only=active_only)

    def get_template(self, template_id: int) -> NotificationTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise EntityNotFoundError.for_entity("Notification template", template_id)
        return template

    @staticmethod
    def _apply_template_fields(template: NotificationTemplate, payload: Mapping[str, Any]) -> None:
        for attribute in TEMPLATE_FIELDS:
            if payload.get(attribute) is not None:
                value = payload[attribute]
                if attribute in ("template_type", "category"):
                    value = str(value).upper()
                setattr(template, attribute, value)

    @staticmethod
    def _check_template(template: NotificationTemplate) -> None:
        if template.template_type not in TEMPLATE_TYPES:
            raise ValidationError(f"Invalid template type: {template.template_type}")
        if template.category is not None and template.category not in TEMPLATE_CATEGORIES:
            raise ValidationError(f"Invalid template category: {template.category}")
        if not template.is_valid():
            raise ValidationError("Template requires a name, content and, for emails, a subject")

    def create_template(self, payload: Mapping[str, Any], admin_email: str | None = None) -> NotificationTemplate:
        name = (payload.get("name") or "").strip()
        if name and self._templates.get_by_name(name) is not None:
            raise DuplicateResourceError(f"Template name already exists: {name}")
        template = NotificationTemplate(created_by=admin_email)
        self._apply_template_fields(template, payload)
        template.name = name
        if not template.variables:
            template.variables = ",".join(template.extract_variables()) or None
        self._check_template(template)
        self._session.add(template)
        self._session.commit()
        LOGGER.info("Notification template created", extra={"template": template.name})
        return template

    def update_template(self, template_id: int, payload: Mapping[str, Any]) -> NotificationTemplate:
        template = self.get_template(template_id)
        new_name = (payload.get("name") or "").strip()
        if new_name and new_name != template.name:
            existing = self._templates.get_by_name(new_name)
            if existing is not None and existing.id != template.id:
                raise DuplicateResourceError(f"Template name already exists: {new_name}")
        self._apply_template_fields(template, {**payload, "name": new_name or template.name})
        try:
            self._check_template(template)
        except ValidationError:
            self._session.rollback()
            raise
        self._session.commit()
        return template

    def delete_template(self, template_id: int) -> None:
        template = self.get_template(template_id)
        self._templates.delete(template)
        self._session.commit()

    def preview_template(self, template_id: int, values: Mapping[str, Any] | None = None) -> TemplatePreview:
        template = self.get_template(template_id)
        str_values = {key: "" if value is None else str(value) for key, value in (values or {}).items()}
        return TemplatePreview(
            subject=template.process_subject(str_values),
            content=template.process_template(str_values),
            missing_variables=template.missing_variables(str_values),
        )


__all__ = ["AdminService", "SystemStats", "TemplatePreview"]
