"""Tests for the administrative workflows."""
from decimal import Decimal

import pytest

from advisory.core.exceptions import (
    BusinessRuleError,
    DuplicateResourceError,
    EntityNotFoundError,
    ValidationError,
)
from advisory.domain.permissions import PermissionType
from advisory.domain.roles import Role
from advisory.domain.statuses import UpgradeRequestStatus
from advisory.repositories import MessageRepository, UserRepository
from advisory.services import AdminService, GuestService

from conftest import ADMIN_EMAIL


@pytest.fixture()
def service(session, security) -> AdminService:
    return AdminService(session, security=security)


def _notifications(session, account, kind: str):
    return [item for item in MessageRepository(session).notifications_for(account) if item.type == kind]


def _admin(session):
    return UserRepository(session).get_by_email(ADMIN_EMAIL)


def test_system_stats_and_role_distribution(client_profile, accounts, session, service) -> None:
    accounts.guest("waiting@example.com")
    GuestService(session).request_upgrade("waiting@example.com", {})

    stats = service.get_system_stats()

    assert stats.total_users == 4
    assert (stats.total_admins, stats.total_employees, stats.total_clients, stats.total_guests) == (1, 1, 1, 1)
    assert stats.active_users == 4
    assert stats.pending_upgrade_requests == 1
    assert stats.total_investments == 0
    assert stats.total_investment_value == Decimal("0.00")
    assert service.get_role_distribution() == {"GUEST": 1, "CLIENT": 1, "EMPLOYEE": 1, "ADMIN": 1}


def test_recent_activity_is_newest_first(accounts, service) -> None:
    accounts.guest("first@example.com")
    accounts.guest("second@example.com")

    activity = service.get_recent_activity(limit=2)

    assert [entry.user_account.email for entry in activity] == ["second@example.com", "first@example.com"]


def test_create_employee(accounts, session, service) -> None:
    employee = accounts.employee("planner@example.com", department="Wealth", location="AMSTERDAM", title="Planner")

    assert employee.employee_id == f"WEA-AMS-{employee.id:03d}"
    assert employee.user_account.role is Role.EMPLOYEE
    assert PermissionType.CREATE_INVESTMENT in employee.user_account.permission_types
    [welcome] = _notifications(session, employee.user_account, "WELCOME")
    assert employee.employee_id in welcome.message

    with pytest.raises(DuplicateResourceError, match="Email already exists: planner@example.com"):
        accounts.employee("Planner@example.com")


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"email": ""}, "Email is required"),
        ({"email": "nope"}, "Invalid email format"),
        ({"password": "weak"}, "Password must be at least 8 characters"),
        ({"first_name": " "}, "First name is required"),
        ({"last_name": None}, "Last name is required"),
    ],
)
def test_create_employee_validation(service, overrides, message) -> None:
    payload = {
        "email": "new@example.com",
        "password": "Secure#Pass42",
        "first_name": "New",
        "last_name": "Hire",
        **overrides,
    }

    with pytest.raises(ValidationError, match=message):
        service.create_employee(payload)


def test_assign_client_requires_active_employee(accounts, advisor, service) -> None:
    client = accounts.client("assign@example.com")

    assigned = service.assign_client(client.id, advisor.id)
    assert assigned.assigned_employee is advisor

    service.disable_user(advisor.user_account.id)
    with pytest.raises(BusinessRuleError, match="active employees"):
        service.assign_client(client.id, advisor.id)
    with pytest.raises(EntityNotFoundError, match="Employee not found with id: 999"):
        service.assign_client(client.id, 999)


def test_approve_upgrade_request_creates_client(accounts, session, service, security) -> None:
    account = accounts.guest()
    submitted = GuestService(session).request_upgrade("guest@example.com", {})

    request = service.approve_upgrade_request(submitted["request_id"], ADMIN_EMAIL)

    assert request.status is UpgradeRequestStatus.APPROVED
    assert request.processed_by == ADMIN_EMAIL
    assert account.role is Role.CLIENT
    assert account.guest is None
    assert account.client.client_id is not None
    assert security.blacklist.is_user_token_revoked(account.email, 0)
    [decision] = _notifications(session, account, "UPGRADE_DECISION")
    assert "approved" in decision.message
    assert service.get_pending_upgrade_requests() == []
    with pytest.raises(ValidationError, match="Request is not in pending status"):
        service.approve_upgrade_request(request.id, ADMIN_EMAIL)


def test_reject_upgrade_request_keeps_guest(accounts, session, service) -> None:
    account = accounts.guest()
    submitted = GuestService(session).request_upgrade("guest@example.com", {})

    request = service.reject_upgrade_request(submitted["request_id"], "Missing documents", ADMIN_EMAIL)

    assert request.status is UpgradeRequestStatus.REJECTED
    assert request.details.endswith("Rejection reason: Missing documents")
    assert account.role is Role.GUEST
    assert not account.guest.upgrade_requested
    [decision] = _notifications(session, account, "UPGRADE_DECISION")
    assert "Missing documents" in decision.message
    with pytest.raises(EntityNotFoundError, match="Upgrade request not found with id: 404"):
        service.reject_upgrade_request(404, None, ADMIN_EMAIL)


def test_assign_and_remove_permissions(accounts, session, service) -> None:
    account = accounts.guest()
    create_investment = next(
        permission
        for permission in UserRepository(session).all_permissions()
        if permission.permission_type is PermissionType.CREATE_INVESTMENT
    )
    baseline = len(account.permissions)

    assigned = service.assign_permissions(account.id, [create_investment.id])
    assert assigned["assigned_count"] == 1
    assert assigned["total_permissions"] == baseline + 1

    removed = service.remove_permissions(account.id, [create_investment.id])
    assert removed["removed_count"] == 1
    assert removed["remaining_permissions"] == baseline

    with pytest.raises(ValidationError, match="Some permission IDs are invalid"):
        service.assign_permissions(account.id, [create_investment.id, 9999])


def test_bulk_operations(accounts, session, service, security) -> None:
    first = accounts.guest("one@example.com")
    second = accounts.guest("two@example.com")

    result = service.bulk_operation([first.id, second.id, first.id], "deactivate")

    assert result == {
        "message": "Bulk operation completed successfully",
        "operation": "DEACTIVATE",
        "affected_count": 2,
    }
    assert not first.is_active and not second.is_active
    assert security.blacklist.is_user_token_revoked("two@example.com", 0)

    service.bulk_operation([first.id], "RESET_PASSWORD")
    assert first.password_reset_required
    assert len(_notifications(session, first, "PASSWORD_RESET")) == 1

    with pytest.raises(ValidationError, match="Invalid operation: PROMOTE"):
        service.bulk_operation([first.id], "PROMOTE")
    with pytest.raises(ValidationError, match="Some user IDs are invalid"):
        service.bulk_operation([first.id, 9999], "ACTIVATE")
    with pytest.raises(BusinessRuleError, match="Admin accounts cannot be deleted"):
        service.bulk_operation([first.id, _admin(session).id], "DELETE")


def test_update_system_config(service) -> None:
    config = service.update_system_config(
        {"session_timeout": 45, "backup_frequency": "weekly"}, admin_email=ADMIN_EMAIL
    )

    assert config.session_timeout == 45
    assert config.backup_frequency == "WEEKLY"
    assert config.modified_by == ADMIN_EMAIL

    with pytest.raises(ValidationError, match="Unknown configuration fields: theme"):
        service.update_system_config({"theme": "dark"})
    with pytest.raises(ValidationError, match="Invalid backup frequency"):
        service.update_system_config({"backup_frequency": "YEARLY"})
    with pytest.raises(ValidationError, match="Invalid system configuration: max_login_attempts"):
        service.update_system_config({"max_login_attempts": 50})

    assert service.get_system_config().max_login_attempts != 50
    assert service.get_system_config().session_timeout == 45


def test_toggle_maintenance_broadcasts(accounts, session, service) -> None:
    guest = accounts.guest()

    result = service.toggle_maintenance(True, "Back at noon", ADMIN_EMAIL)

    assert result == {"maintenance_mode": True, "message": "Maintenance mode enabled"}
    assert service.get_system_config().maintenance_message == "Back at noon"
    [notice] = _notifications(session, guest, "MAINTENANCE")
    assert notice.message == "Back at noon"
    assert len(_notifications(session, _admin(session), "MAINTENANCE")) == 1

    assert service.toggle_maintenance(False)["message"] == "Maintenance mode disabled"
    assert not service.get_system_config().maintenance_mode


# notification templates ------------------------------------------------


def test_default_templates_are_seeded(service) -> None:
    names = [template.name for template in service.list_templates()]

    assert "EMPLOYEE_WELCOME" in names
    assert names == sorted(names)
    assert [template.name for template in service.list_templates(template_type="push")] == ["MAINTENANCE_NOTICE"]


def test_template_lifecycle(service) -> None:
    template = service.create_template(
        {
            "name": "BIRTHDAY",
            "template_type": "email",
            "category": "marketing",
            "subject": "Happy birthday {{firstName}}",
            "content": "Dear {{firstName}}, enjoy {{gift}}",
        },
        admin_email=ADMIN_EMAIL,
    )

    assert template.category == "MARKETING"
    assert template.variables == "firstName,gift"
    assert template.created_by == ADMIN_EMAIL

    preview = service.preview_template(template.id, {"firstName": "Ada"})
    assert preview.subject == "Happy birthday Ada"
    assert preview.content == "Dear Ada, enjoy {{gift}}"
    assert preview.missing_variables == ["gift"]

    with pytest.raises(DuplicateResourceError, match="Template name already exists"):
        service.create_template({"name": "BIRTHDAY", "template_type": "SMS", "content": "Hi"})
    with pytest.raises(ValidationError, match="Invalid template type: FAX"):
        service.update_template(template.id, {"template_type": "fax"})
    assert service.get_template(template.id).template_type == "EMAIL"

    updated = service.update_template(template.id, {"subject": "Many happy returns"})
    assert updated.subject == "Many happy returns"

    service.delete_template(template.id)
    with pytest.raises(EntityNotFoundError, match=f"Notification template not found with id: {template.id}"):
        service.get_template(template.id)


def test_email_template_requires_subject(service) -> None:
    with pytest.raises(ValidationError, match="for emails, a subject"):
        service.create_template({"name": "NO_SUBJECT", "template_type": "EMAIL", "content": "Body"})
