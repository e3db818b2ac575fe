from datetime import timedelta
from decimal import Decimal

import pytest

from advisory.core.exceptions import BusinessRuleError
from advisory.domain.roles import Role
from advisory.domain.statuses import (
    ContactStatus,
    InvestmentStatus,
    RiskLevel,
    TransactionType,
    UpgradeRequestStatus,
)
from advisory.models import (
    Client,
    ContactRequest,
    Employee,
    Guest,
    GuestUpgradeRequest,
    Investment,
    NotificationTemplate,
    Portfolio,
    StockHolding,
    SystemConfig,
    Transaction,
    UserAccount,
    utcnow,
)


def _account(**overrides) -> UserAccount:
    values = {
        "email": "jane@example.com",
        "password_hash": "hash",
        "first_name": "Jane",
        "last_name": "Doe",
    }
    values.update(overrides)
    return UserAccount(**values)


def test_defaults_are_applied_on_construction() -> None:
    account = _account()

    assert account.role is Role.GUEST
    assert account.is_active is True
    assert account.failed_login_attempts == 0
    assert account.full_name == "Jane Doe"


def test_failed_logins_lock_the_account() -> None:
    account = _account()

    assert account.record_failed_login(3, 15) is False
    assert account.record_failed_login(3, 15) is False
    assert account.record_failed_login(3, 15) is True
    assert account.is_currently_locked()
    assert not account.is_currently_locked(utcnow() + timedelta(minutes=16))

    account.record_successful_login()

    assert not account.is_currently_locked()
    assert account.failed_login_attempts == 0
    assert account.last_login_at is not None


def test_expired_lock_is_released() -> None:
    account = _account()
    for _ in range(3):
        account.record_failed_login(3, 15)

    assert account.release_expired_lock() is False
    assert account.account_locked

    assert account.release_expired_lock(utcnow() + timedelta(minutes=16)) is True
    assert not account.account_locked
    assert account.failed_login_attempts == 0
    assert account.lock_expiry_time is None
    assert account.record_failed_login(3, 15) is False


def test_role_upgrades_never_downgrade() -> None:
    account = _account(role=Role.CLIENT)

    assert account.upgrade_role(Role.GUEST) is False
    assert account.upgrade_role(Role.CLIENT) is False
    assert account.role is Role.CLIENT
    assert account.upgrade_role(Role.EMPLOYEE) is True
    assert account.is_employee
    assert account.upgrade_role(Role.CLIENT) is False
    assert account.role is Role.EMPLOYEE


def test_soft_delete_disables_the_account() -> None:
    account = _account()

    account.soft_delete()

    assert account.is_deleted and not account.is_active
    assert account.deleted_at is not None


def test_employee_identifier_and_workload() -> None:
    employee = Employee(id=7)
    assert employee.generate_employee_id() == "GEN-HOM-007"

    located = Employee(id=12, department="Wealth", location_id="AMSTERDAM")
    assert located.generate_employee_id() == "WEA-AMS-012"
    assert Employee().generate_employee_id() is None

    employee.clients = [Client() for _ in range(4)]
    assert employee.workload == "LIGHT"
    employee.clients = [Client() for _ in range(5)]
    assert employee.workload == "MODERATE"
    employee.clients = [Client() for _ in range(11)]
    assert employee.workload == "HEAVY"


def test_client_identifier_uses_advisor_location() -> None:
    unassigned = Client(id=3)
    assert unassigned.generate_client_id() == "CLI-003"
    assert unassigned.client_status == "INVALID"

    assigned = Client(id=4, assigned_employee=Employee(location_id="ROTTERDAM"))
    assert assigned.generate_client_id() == "ROT-004"
    assert assigned.is_assigned


def test_stock_investment_derives_amount_and_risk() -> None:
    investment = Investment.stock(
        name="Apple Inc.",
        ticker="AAPL",
        shares=Decimal("10"),
        purchase_price=Decimal("150"),
        sector="Technology",
    )

    assert investment.amount == Decimal("1500")
    assert investment.risk_level is RiskLevel.HIGH
    assert investment.status is InvestmentStatus.PENDING
    assert investment.investment_id is None
    assert investment.is_price_data_stale()

    investment.id = 12
    assert investment.investment_id == "INV-GEN-12"
    investment.client = Client(client_id="CLI-003")
    assert investment.investment_id == "INV-CLI-003-12"
    assert investment.has_valid_investment_id()


def test_investment_returns_include_dividends() -> None:
    investment = Investment.stock(
        name="Microsoft", ticker="MSFT", shares=Decimal("10"), purchase_price=Decimal("150")
    )

    investment.update_market_price(Decimal("165"))
    investment.add_dividend(Decimal("15"))

    assert investment.current_value == Decimal("1650")
    assert investment.gain_loss == Decimal("150")
    assert investment.return_percentage == 10.0
    assert investment.total_return == Decimal("165")
    assert investment.total_return_percentage == 11.0
    one_year_later = investment.purchase_date + timedelta(days=365)
    assert investment.days_invested(one_year_later) == 365
    assert investment.annualized_return(one_year_later) == pytest.approx(11.0)


@pytest.mark.parametrize(
    ("shares", "purchase_price", "current_price", "expected"),
    [
        ("10", "100", "112.5", "125.0"),
        ("3", "250.40", "200.15", "-150.75"),
        ("0.5", "80", "80", "0"),
    ],
)
def test_profit_loss_is_price_move_times_shares(shares, purchase_price, current_price, expected) -> None:
    investment = Investment.stock(
        name="Position", ticker="AAPL", shares=Decimal(shares), purchase_price=Decimal(purchase_price)
    )
    assert investment.profit_loss == Decimal("0")

    investment.update_market_price(Decimal(current_price))

    assert investment.profit_loss == Decimal(expected)
    assert investment.profit_loss == (investment.current_price - investment.purchase_price) * investment.shares


def test_investment_transitions_follow_the_lifecycle() -> None:
    investment = Investment.stock(name="Tesla", ticker="TSLA", shares=Decimal("1"), purchase_price=Decimal("200"))

    with pytest.raises(BusinessRuleError, match="Cannot transition from PENDING to ACTIVE"):
        investment.transition_to(InvestmentStatus.ACTIVE)

    for status in (InvestmentStatus.UNDER_REVIEW, InvestmentStatus.APPROVED, InvestmentStatus.ACTIVE):
        investment.transition_to(status)

    assert investment.is_active
    assert investment.last_updated is not None


@pytest.mark.parametrize(
    ("transaction_type", "expected"),
    [
        (TransactionType.BUY, Decimal("205")),
        (TransactionType.SELL, Decimal("195")),
        (TransactionType.DIVIDEND, Decimal("200")),
    ],
)
def test_transaction_total_applies_fee_by_direction(transaction_type, expected) -> None:
    transaction = Transaction(
        transaction_type=transaction_type,
        shares=Decimal("10"),
        price_per_share=Decimal("20"),
        fee=Decimal("5"),
    )

    assert transaction.calculate_total_amount() == expected


def test_transaction_without_shares_totals_zero() -> None:
    transaction = Transaction(transaction_type=TransactionType.BUY, shares=Decimal("0"), price_per_share=Decimal("20"))

    assert transaction.calculate_total_amount() == Decimal("0")


def test_holding_average_cost_and_sales() -> None:
    holding = StockHolding.open("AAPL", Decimal("10"), Decimal("100"))

    holding.add_shares(Decimal("5"), Decimal("130"))

    assert holding.shares == Decimal("15")
    assert holding.total_cost == Decimal("1650")
    assert holding.average_cost == Decimal("110.00")

    with pytest.raises(ValueError):
        holding.remove_shares(Decimal("20"))

    assert holding.remove_shares(Decimal("5")) == Decimal("550.00")
    assert holding.shares == Decimal("10")

    holding.update_current_price(Decimal("120"))
    assert holding.current_value == Decimal("1200.00")
    assert holding.gain_loss == Decimal("100.00")
    assert not holding.is_price_data_stale()


@pytest.mark.parametrize(
    ("shares", "price", "extra"),
    [("10", "100", "5"), ("7", "33.33", "7"), ("12.5", "48.20", "0.25")],
)
def test_buying_then_selling_at_average_cost_restores_holding(shares, price, extra) -> None:
    holding = StockHolding.open("MSFT", Decimal(shares), Decimal(price))
    before = (holding.shares, holding.total_cost)

    holding.add_shares(Decimal(extra), holding.average_cost)
    holding.remove_shares(Decimal(extra))

    assert (holding.shares, holding.total_cost) == before


def test_selling_after_buying_at_a_different_price_restores_share_count() -> None:
    holding = StockHolding.open("MSFT", Decimal("10"), Decimal("100"))

    holding.add_shares(Decimal("5"), Decimal("130"))
    holding.remove_shares(Decimal("5"))

    assert holding.shares == Decimal("10")
    assert holding.total_cost == Decimal("1100.00")
    assert holding.average_cost == Decimal("110.00")


def test_portfolio_recalculates_from_holdings() -> None:
    portfolio = Portfolio(name="Main Portfolio")
    priced = StockHolding.open("AAPL", Decimal("10"), Decimal("110"))
    priced.update_current_price(Decimal("120"))
    unpriced = StockHolding.open("MSFT", Decimal("2"), Decimal("300"))
    portfolio.add_holding(priced)
    portfolio.add_holding(unpriced)

    portfolio.recalculate_totals()

    assert portfolio.total_cost == Decimal("1700")
    assert portfolio.total_value == Decimal("1800")
    assert portfolio.unrealized_gain_loss == Decimal("100")
    assert portfolio.is_profitable()
    assert portfolio.find_holding_by_ticker("msft") is unpriced
    assert portfolio.holdings_count == 2
    assert portfolio.remove_holding(unpriced)
    assert portfolio.is_valid()


def test_template_variables_and_rendering() -> None:
    template = NotificationTemplate(
        name="WELCOME",
        template_type="EMAIL",
        subject="Hi {{firstName}}",
        content="Welcome {{firstName}}, your id is {{employeeId}}. Bye {{firstName}}",
        variables="firstName,employeeId",
    )

    assert template.extract_variables() == ["firstName", "employeeId"]
    assert template.process_subject({"firstName": "Ada"}) == "Hi Ada"
    assert template.process_template({"firstName": "Ada"}) == "Welcome Ada, your id is {{employeeId}}. Bye Ada"
    assert template.missing_variables({"firstName": "Ada"}) == ["employeeId"]
    assert template.is_valid()
    assert template.clone("WELCOME_COPY").content == template.content


def test_template_validity_rules() -> None:
    assert not NotificationTemplate(name="NO_SUBJECT", template_type="EMAIL", content="Body").is_valid()
    assert NotificationTemplate(name="TEXT", template_type="SMS", content="Body").is_valid()
    assert not NotificationTemplate(name="FAX", template_type="FAX", content="Body").is_valid()


def test_system_config_ranges() -> None:
    config = SystemConfig()
    assert config.is_valid()

    config.session_timeout = 2
    config.max_login_attempts = 11

    assert config.invalid_fields() == ["session_timeout", "max_login_attempts"]


def test_upgrade_request_processing() -> None:
    request = GuestUpgradeRequest()
    assert request.can_be_processed()

    with pytest.raises(ValueError):
        request.process(UpgradeRequestStatus.PENDING, "admin@example.com")

    request.reject("admin@example.com", "Incomplete documents")

    assert request.status is UpgradeRequestStatus.REJECTED
    assert request.rejection_reason == "Incomplete documents"
    assert not request.can_be_processed()


def test_guest_interest_levels() -> None:
    now = utcnow()
    guest = Guest(registration_date=now - timedelta(days=10))

    assert guest.is_eligible_for_upgrade(now)
    assert guest.interest_level(now) == "Low - Inactive"

    guest.last_activity_date = now - timedelta(days=1)
    assert guest.interest_level(now) == "Medium - Recently Active"

    guest.request_upgrade()
    assert guest.interest_level(now) == "High - Upgrade Requested"
    assert not guest.is_eligible_for_upgrade(now)


def test_contact_request_status_moves() -> None:
    contact = ContactRequest(name="Sam", email="sam@example.com", message="Call me")

    with pytest.raises(BusinessRuleError):
        contact.move_to(ContactStatus.COMPLETED)

    contact.move_to(ContactStatus.ASSIGNED)
    assert contact.status is ContactStatus.ASSIGNED
