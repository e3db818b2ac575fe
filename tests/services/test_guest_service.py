from decimal import Decimal

import pytest

from advisory.core.exceptions import EntityNotFoundError, ValidationError
from advisory.domain.statuses import ContactStatus, UpgradeRequestStatus
from advisory.repositories import MessageRepository, UserRepository
from advisory.services import GuestService
from advisory.services.guests import project_returns

from conftest import ADMIN_EMAIL


@pytest.fixture()
def service(session) -> GuestService:
    return GuestService(session)


def _admin_notifications(session, kind: str):
    admin = UserRepository(session).get_by_email(ADMIN_EMAIL)
    return [item for item in MessageRepository(session).notifications_for(admin) if item.type == kind]


def test_projection_rows_compound_yearly() -> None:
    rows = project_returns(Decimal("10000"), 10)

    assert [row["scenario"] for row in rows] == [
        "Conservative (4%)",
        "Moderate (6%)",
        "Balanced (8%)",
        "Growth (10%)",
        "Aggressive (12%)",
    ]
    assert rows[0]["rate"] == 4.0
    assert rows[0]["future_value"] == Decimal("14802.44")
    assert rows[0]["total_return"] == Decimal("4802.44")
    assert rows[0]["return_percentage"] == Decimal("48.02")


def test_calculate_projected_returns() -> None:
    result = GuestService.calculate_projected_returns("5000", "1")

    assert result["initial_investment"] == Decimal("5000")
    assert result["investment_period"] == 1
    assert result["projections"][-1]["future_value"] == Decimal("5600.00")
    assert result["disclaimer"].startswith("These are projections")


@pytest.mark.parametrize(
    ("amount", "years", "message"),
    [
        (0, 5, "Investment amount must be positive"),
        ("-100", 5, "Investment amount must be positive"),
        (None, 5, "Investment amount must be positive"),
        (1000, 0, "between 1 and 30 years"),
        (1000, 31, "between 1 and 30 years"),
        (1000, "ten", "between 1 and 30 years"),
    ],
)
def test_calculate_projected_returns_validation(amount, years, message) -> None:
    with pytest.raises(ValidationError, match=message):
        GuestService.calculate_projected_returns(amount, years)


def test_public_information_is_a_copy() -> None:
    info = GuestService.get_public_information()
    info["company_name"] = "Changed"

    assert GuestService.get_public_information()["company_name"] == "Due Diligence Finance"
    assert [option["risk_level"] for option in GuestService.get_investment_options()] == [
        "LOW",
        "MODERATE",
        "HIGH",
        "CUSTOM",
    ]


def test_request_upgrade_records_kyc_and_notifies_admins(accounts, service, session) -> None:
    account = accounts.guest()

    result = service.request_upgrade(
        "guest@example.com",
        {"investment_goals": "Retirement", "annual_income": "85000", "occupation": "Engineer"},
    )

    assert result["status"] == "PENDING"
    assert result["estimated_processing_time"] == "2-3 business days"
    request = service.get_upgrade_request("guest@example.com")
    assert request.id == result["request_id"]
    assert request.status is UpgradeRequestStatus.PENDING
    assert request.additional_info["occupation"] == "Engineer"
    assert request.additional_info["risk_tolerance"] is None
    assert "Annual Income: $85,000.00" in request.details
    assert account.guest.upgrade_requested
    assert len(_admin_notifications(session, "UPGRADE_REQUEST")) == 1


def test_second_upgrade_request_is_rejected(accounts, service) -> None:
    accounts.guest()
    service.request_upgrade("guest@example.com", {})

    eligibility = service.check_upgrade_eligibility("guest@example.com")

    assert not eligibility.eligible
    assert eligibility.reason == "You already have a pending upgrade request"
    with pytest.raises(ValidationError, match="You already have a pending upgrade request"):
        service.request_upgrade("guest@example.com", {})


def test_only_guests_may_request_upgrades(client_profile, service) -> None:
    eligibility = service.check_upgrade_eligibility("client@example.com")

    assert eligibility.reason == "Only guest accounts can request upgrades"


def test_cancel_upgrade_request(accounts, service) -> None:
    account = accounts.guest()

    with pytest.raises(EntityNotFoundError, match="No upgrade request found"):
        service.get_upgrade_request("guest@example.com")

    service.request_upgrade("guest@example.com", {})
    service.cancel_upgrade_request("guest@example.com")

    assert not account.guest.upgrade_requested
    assert service.check_upgrade_eligibility("guest@example.com").eligible
    with pytest.raises(EntityNotFoundError, match="No pending upgrade request found"):
        service.cancel_upgrade_request("guest@example.com")


def test_update_profile(accounts, service) -> None:
    accounts.guest()

    guest = service.update_profile("guest@example.com", {"phone_number": "+1 555 0100", "interest_area": "ETFs"})

    assert guest.user_account.phone_number == "+1 555 0100"
    assert guest.interest_area == "ETFs"
    assert guest.last_activity_date is not None
    details, latest = service.get_details("guest@example.com")
    assert details is guest
    assert latest is None


def test_submit_contact_request(accounts, service, session) -> None:
    account = accounts.guest()

    contact = service.submit_contact_request(
        {"name": " Grace ", "email": "grace@example.com", "message": "Please call me", "subject": "Advice"},
        email="guest@example.com",
    )

    assert contact.name == "Grace"
    assert contact.source == "GUEST_PORTAL"
    assert contact.status is ContactStatus.NEW
    assert contact.user_account is account
    [notification] = _admin_notifications(session, "CONTACT_REQUEST")
    assert "Please call me" in notification.message


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"email": "a@example.com", "message": "Hi"}, "Name is required"),
        ({"name": "A", "message": "Hi"}, "Email is required"),
        ({"name": "A", "email": "nope", "message": "Hi"}, "Invalid email format"),
        ({"name": "A", "email": "a@example.com", "message": "  "}, "Message is required"),
    ],
)
def test_contact_request_validation(service, payload, message) -> None:
    with pytest.raises(ValidationError, match=message):
        service.submit_contact_request(payload)
