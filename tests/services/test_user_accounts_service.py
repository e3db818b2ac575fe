import pytest

from advisory.core.exceptions import BusinessRuleError, EntityNotFoundError, ValidationError
from advisory.core.security import verify_password
from advisory.domain.permissions import PermissionType
from advisory.domain.roles import Role
from advisory.repositories import UserRepository
from advisory.services import UserAccountService

from conftest import ADMIN_EMAIL, PASSWORD


@pytest.fixture()
def service(session, security) -> UserAccountService:
    return UserAccountService(session, security=security)


def test_list_users_pages_and_filters(accounts, service) -> None:
    for index in range(3):
        accounts.guest(f"guest{index}@example.com", first_name=f"Guest{index}")

    first = service.list_users(page=1, page_size=2)
    filtered = service.list_users(search="guest1")

    assert first.total == 4
    assert len(first.items) == 2
    assert first.has_next and not first.has_previous
    assert [account.email for account in filtered.items] == ["guest1@example.com"]


def test_list_users_clamps_out_of_range_page(accounts, service) -> None:
    accounts.guest()

    page = service.list_users(page=9, page_size=10)

    assert page.page == 1
    assert page.total_pages == 1


def test_search_requires_a_query(accounts, service) -> None:
    accounts.guest("findme@example.com", first_name="Findable")

    assert [account.first_name for account in service.search_users("FINDABLE")] == ["Findable"]
    with pytest.raises(ValidationError, match="Search query must not be empty"):
        service.search_users("  ")


def test_update_details_only_touches_editable_fields(accounts, service) -> None:
    accounts.guest("edit@example.com")

    account = service.update_details(
        "edit@example.com",
        {"first_name": " Edith ", "phone_number": "+31 20 555 0101", "email": "hijack@example.com"},
    )

    assert account.first_name == "Edith"
    assert account.phone_number == "+31 20 555 0101"
    assert account.email == "edit@example.com"
    with pytest.raises(ValidationError, match="Last name must not be blank"):
        service.update_details("edit@example.com", {"last_name": " "})


def test_update_password_checks_confirmation(accounts, service) -> None:
    account = accounts.guest("pw@example.com")

    with pytest.raises(ValidationError, match="New password and confirmation do not match"):
        service.update_password("pw@example.com", PASSWORD, "Another#Pass42", "Another#Pass43")

    service.update_password("pw@example.com", PASSWORD, "Another#Pass42", "Another#Pass42")

    assert verify_password("Another#Pass42", account.password_hash)


def test_delete_user_soft_deletes_and_protects_admins(accounts, service, session, security) -> None:
    account = accounts.guest("leaving@example.com")
    admin = UserRepository(session).get_by_email(ADMIN_EMAIL)

    service.delete_user(account.id)

    assert account.is_deleted
    assert security.blacklist.is_user_token_revoked(account.email, 0)
    with pytest.raises(EntityNotFoundError, match=f"User not found with id: {account.id}"):
        service.get_user(account.id)
    with pytest.raises(BusinessRuleError, match="Admin accounts cannot be deleted"):
        service.delete_user(admin.id)


def test_update_role_upgrades_and_creates_profile(accounts, service) -> None:
    account = accounts.guest("promote@example.com")

    updated = service.update_role(account.id, "client")

    assert updated.role is Role.CLIENT
    assert updated.guest is None
    assert updated.client is not None
    assert updated.client.portfolio is not None
    assert PermissionType.VIEW_INVESTMENT in updated.permission_types
    assert PermissionType.REQUEST_CLIENT_ACCOUNT not in updated.permission_types


def test_update_role_rejects_downgrades_and_unknown_roles(accounts, service) -> None:
    employee = accounts.employee()

    with pytest.raises(BusinessRuleError, match="roles can only be upgraded"):
        service.update_role(employee.user_account.id, Role.CLIENT)
    with pytest.raises(ValidationError, match="Unknown role"):
        service.update_role(employee.user_account.id, "OVERLORD")


def test_deactivate_and_activate_user(accounts, service) -> None:
    account = accounts.guest("toggle@example.com")
    account.account_locked = True
    account.failed_login_attempts = 4

    service.deactivate_user(account.id)
    assert not account.is_active

    service.activate_user(account.id)
    assert account.is_active
    assert not account.account_locked
    assert account.failed_login_attempts == 0
