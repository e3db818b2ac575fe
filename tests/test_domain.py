from decimal import Decimal

import pytest

from advisory.domain.finance import ZERO, quantize_money, ratio, ratio_percent, to_decimal
from advisory.domain.investment_types import InvestmentType
from advisory.domain.permissions import PermissionType, permissions_for_role, role_has_permission
from advisory.domain.roles import Role
from advisory.domain.statuses import (
    ContactStatus,
    InvestmentStatus,
    RiskLevel,
    UpgradeRequestStatus,
    risk_level_for_sector,
)
from advisory.domain.validation import (
    PasswordStrength,
    PasswordValidator,
    is_strong_password,
    is_valid_email,
)


def test_role_levels_only_allow_upward_upgrades() -> None:
    assert [role.level for role in Role] == [0, 1, 2, 3]
    assert Role.GUEST.can_upgrade_to(Role.CLIENT)
    assert Role.CLIENT.can_upgrade_to(Role.ADMIN)
    assert not Role.EMPLOYEE.can_upgrade_to(Role.CLIENT)
    assert not Role.CLIENT.can_upgrade_to(Role.CLIENT)
    assert Role.ADMIN.is_higher_than_or_equal_to(Role.EMPLOYEE)
    assert Role.default() is Role.GUEST


def test_role_from_string_normalises_and_rejects_unknown() -> None:
    assert Role.from_string(" employee ") is Role.EMPLOYEE

    with pytest.raises(ValueError, match="Unknown role"):
        Role.from_string("SUPERUSER")


def test_role_permission_sets() -> None:
    base = {
        PermissionType.VIEW_ACCOUNT,
        PermissionType.EDIT_MY_DETAILS,
        PermissionType.UPDATE_MY_PASSWORD,
        PermissionType.CREATE_USER,
    }

    assert permissions_for_role(Role.ADMIN) == frozenset(PermissionType)
    assert permissions_for_role(Role.GUEST) == base | {PermissionType.REQUEST_CLIENT_ACCOUNT}
    assert permissions_for_role(Role.CLIENT) == base | {
        PermissionType.VIEW_INVESTMENT,
        PermissionType.MESSAGE_PARTNER,
    }
    assert len(permissions_for_role(Role.EMPLOYEE)) == len(base) + 9
    assert role_has_permission(Role.EMPLOYEE, PermissionType.CREATE_INVESTMENT)
    assert not role_has_permission(Role.EMPLOYEE, PermissionType.VIEW_ACCOUNTS)
    assert all(permission.description for permission in PermissionType)


def test_investment_status_lifecycle() -> None:
    assert InvestmentStatus.PENDING.can_transition_to(InvestmentStatus.UNDER_REVIEW)
    assert InvestmentStatus.UNDER_REVIEW.can_transition_to(InvestmentStatus.REJECTED)
    assert InvestmentStatus.APPROVED.can_transition_to(InvestmentStatus.ACTIVE)
    assert InvestmentStatus.ACTIVE.can_transition_to(InvestmentStatus.MATURED)
    assert InvestmentStatus.SUSPENDED.can_transition_to(InvestmentStatus.ACTIVE)

    assert not InvestmentStatus.PENDING.can_transition_to(InvestmentStatus.ACTIVE)
    assert not InvestmentStatus.ACTIVE.can_transition_to(InvestmentStatus.PENDING)
    assert not InvestmentStatus.PENDING.can_transition_to(InvestmentStatus.PENDING)


@pytest.mark.parametrize(
    "status",
    [
        InvestmentStatus.CANCELLED,
        InvestmentStatus.REJECTED,
        InvestmentStatus.LIQUIDATED,
        InvestmentStatus.MATURED,
    ],
)
def test_terminal_investment_statuses_go_nowhere(status: InvestmentStatus) -> None:
    assert status.is_terminal
    assert not any(status.can_transition_to(target) for target in InvestmentStatus)


def test_investment_status_from_string() -> None:
    assert InvestmentStatus.from_string("under_review") is InvestmentStatus.UNDER_REVIEW
    assert InvestmentStatus.from_string("bogus") is None
    assert InvestmentStatus.from_string(None) is None


def test_upgrade_request_status() -> None:
    assert UpgradeRequestStatus.PENDING.is_pending
    assert UpgradeRequestStatus.APPROVED.is_processed
    assert not UpgradeRequestStatus.PENDING.is_processed
    assert UpgradeRequestStatus.from_string("rejected") is UpgradeRequestStatus.REJECTED

    with pytest.raises(ValueError):
        UpgradeRequestStatus.from_string("LOST")


def test_contact_status_workflow() -> None:
    assert ContactStatus.NEW.can_transition_to(ContactStatus.ASSIGNED)
    assert ContactStatus.ASSIGNED.can_transition_to(ContactStatus.COMPLETED)
    assert not ContactStatus.NEW.can_transition_to(ContactStatus.COMPLETED)
    assert not ContactStatus.SPAM.can_transition_to(ContactStatus.NEW)
    assert ContactStatus.IN_PROGRESS.next_status() is ContactStatus.COMPLETED
    assert ContactStatus.COMPLETED.next_status() is None
    assert ContactStatus.from_value("in progress") is ContactStatus.IN_PROGRESS

    with pytest.raises(ValueError):
        ContactStatus.from_value(" ")


@pytest.mark.parametrize(
    ("sector", "expected"),
    [
        ("Technology", RiskLevel.HIGH),
        ("biotechnology", RiskLevel.HIGH),
        ("Consumer Staples", RiskLevel.LOW),
        ("Healthcare", RiskLevel.LOW),
        ("Automotive", RiskLevel.MEDIUM),
        (None, RiskLevel.MEDIUM),
    ],
)
def test_risk_level_for_sector(sector, expected) -> None:
    assert risk_level_for_sector(sector) is expected


def test_investment_type_metadata() -> None:
    assert InvestmentType.from_code("stk") is InvestmentType.STOCK
    assert InvestmentType.from_code("MUTUAL_FUND") is InvestmentType.MUTUAL_FUND
    assert not InvestmentType.BOND.pays_dividends
    assert InvestmentType.OTHER not in InvestmentType.tradable_types()
    assert InvestmentType.REIT in InvestmentType.dividend_paying_types()

    with pytest.raises(ValueError):
        InvestmentType.from_code("XYZ")


def test_decimal_helpers() -> None:
    assert to_decimal(None) == ZERO
    assert to_decimal(None, default=None) is None
    assert to_decimal(1.1) == Decimal("1.1")
    assert quantize_money(Decimal("2.345")) == Decimal("2.35")
    assert ratio(Decimal("1"), Decimal("3")) == Decimal("0.3333")
    assert ratio_percent(Decimal("1"), Decimal("3")) == 33.33
    assert ratio_percent(Decimal("5"), ZERO) == 0.0

    with pytest.raises(ValueError):
        to_decimal("twelve")


def test_email_and_strong_password_rules() -> None:
    assert is_valid_email("jane.doe+news@example.co.uk")
    assert not is_valid_email("jane@localhost")
    assert not is_valid_email(None)

    assert is_strong_password("Secure#Pass42")
    assert not is_strong_password("secure#pass42")
    assert not is_strong_password("Secure Pass#42")
    assert not is_strong_password("Sh0rt!")


def test_password_validator_reports_every_failure() -> None:
    validator = PasswordValidator()

    result = validator.validate("short")

    assert not result.valid
    assert "Password must be at least 8 characters long" in result.errors
    assert "Password must contain at least one uppercase letter" in result.errors
    assert "Password must contain at least one digit" in result.errors
    assert "Password must contain at least one special character" in result.errors
    assert validator.validate("  ").errors == ["Password cannot be null or empty"]
    assert "Password is too common and easily guessable" in validator.validate("Password123!").errors


def test_password_validator_honours_relaxed_policy() -> None:
    validator = PasswordValidator(6, require_special_char=False, require_number=False, require_uppercase=False)

    assert validator.is_valid("simple")

    with pytest.raises(ValueError):
        PasswordValidator(min_length=0)


def test_password_strength_scoring() -> None:
    validator = PasswordValidator()

    assert validator.strength("Tr0ub4dor&Zebra!9") is PasswordStrength.STRONG
    assert validator.strength("Secure#Pass42") is PasswordStrength.MEDIUM
    assert validator.strength("Abc12!xy") is PasswordStrength.WEAK
    assert validator.strength("weak") is None
