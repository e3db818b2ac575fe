from decimal import Decimal

import pytest

from advisory.core.exceptions import AccessDeniedError, EntityNotFoundError, ValidationError
from advisory.domain.statuses import InvestmentStatus, RiskProfile
from advisory.services import ClientService
from advisory.services.clients import gain_percentage


@pytest.fixture()
def service(session, quotes) -> ClientService:
    return ClientService(session, quotes=quotes)


def test_request_investment_records_pending_position(client_profile, service) -> None:
    investment = service.request_investment(
        "client@example.com",
        {"stock_symbol": " aapl ", "shares": "10", "request_type": "buy", "notes": "Long term"},
    )

    assert investment.name == "BUY AAPL"
    assert investment.status is InvestmentStatus.PENDING
    assert investment.purchase_price == Decimal("175.50")
    assert investment.amount == Decimal("1755.00")
    assert investment.client is client_profile
    assert [item.id for item in service.get_investments("client@example.com")] == [investment.id]


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({}, "Investment request cannot be empty"),
        ({"shares": 1, "request_type": "BUY"}, "Stock symbol is required"),
        ({"stock_symbol": "123!", "shares": 1, "request_type": "BUY"}, "Invalid stock symbol"),
        ({"stock_symbol": "AAPL", "request_type": "BUY"}, "Number of shares is required"),
        ({"stock_symbol": "AAPL", "shares": 1}, "Request type is required"),
        ({"stock_symbol": "AAPL", "shares": 1, "request_type": "HOLD"}, "Must be BUY or SELL"),
        ({"stock_symbol": "AAPL", "shares": "-2", "request_type": "BUY"}, "must be positive"),
    ],
)
def test_request_investment_validation(client_profile, service, payload, message) -> None:
    with pytest.raises(ValidationError, match=message):
        service.request_investment("client@example.com", payload)


def test_portfolio_summary_values_at_current_quote(client_profile, service) -> None:
    investment = service.request_investment(
        "client@example.com", {"stock_symbol": "AAPL", "shares": 10, "request_type": "BUY"}
    )
    investment.purchase_price = Decimal("150")

    summary = service.get_portfolio_summary("client@example.com")

    assert summary.client_id == client_profile.client_id
    assert summary.total_investments == 1
    assert summary.total_value == Decimal("1755.00")
    assert summary.total_cost == Decimal("1500")
    assert summary.total_gain == Decimal("255.00")
    assert summary.total_gain_percentage == Decimal("17.00")


def test_gain_percentage_handles_zero_cost() -> None:
    assert gain_percentage(Decimal("10"), Decimal("0")) == Decimal("0")
    assert gain_percentage(Decimal("-25"), Decimal("200")) == Decimal("-13.00")


def test_other_clients_investments_are_not_found(accounts, client_profile, service) -> None:
    accounts.client("second@example.com")
    foreign = service.request_investment(
        "second@example.com", {"stock_symbol": "MSFT", "shares": 1, "request_type": "BUY"}
    )

    with pytest.raises(EntityNotFoundError, match=f"Investment not found with id: {foreign.id}"):
        service.get_investment("client@example.com", foreign.id)
    assert service.get_investment("second@example.com", foreign.id) is foreign


def test_unknown_email_has_no_client_profile(accounts, service) -> None:
    accounts.guest("visitor@example.com")

    with pytest.raises(EntityNotFoundError, match="Client not found for user"):
        service.get_details("visitor@example.com")


def test_messages_to_advisor(client_profile, advisor, service) -> None:
    message = service.send_message_to_advisor("client@example.com", " Question ", "When do we meet?")

    assert message.subject == "Question"
    assert message.recipient is advisor.user_account
    assert service.get_messages("client@example.com") == [message]
    with pytest.raises(AccessDeniedError):
        service.mark_message_read("client@example.com", message.id)
    with pytest.raises(ValidationError, match="Message subject is required"):
        service.send_message_to_advisor("client@example.com", " ", "Body")


def test_message_requires_assigned_advisor(accounts, service) -> None:
    accounts.client("lonely@example.com")

    with pytest.raises(EntityNotFoundError, match="No employee assigned"):
        service.send_message_to_advisor("lonely@example.com", "Hello", "Anyone there?")


def test_update_preferences_merges_and_maps_risk(client_profile, service) -> None:
    service.update_preferences("client@example.com", {"investment_horizon": "long_term"})

    merged = service.update_preferences("client@example.com", {"risk_tolerance": "low"})

    assert merged == {"investment_horizon": "long_term", "risk_tolerance": "low"}
    assert client_profile.risk_profile is RiskProfile.CONSERVATIVE
    with pytest.raises(ValidationError, match="Invalid risk tolerance value"):
        service.update_preferences("client@example.com", {"risk_tolerance": "YOLO"})
    with pytest.raises(ValidationError, match="cannot be empty"):
        service.update_preferences("client@example.com", {})


def test_performance_report_averages_returns(client_profile, service) -> None:
    first = service.request_investment(
        "client@example.com", {"stock_symbol": "AAPL", "shares": 2, "request_type": "BUY"}
    )
    service.request_investment("client@example.com", {"stock_symbol": "MSFT", "shares": 1, "request_type": "BUY"})
    first.purchase_price = Decimal("117")

    report = service.get_performance_report("client@example.com", "weekly")

    assert report.period == "WEEKLY"
    assert len(report.investments) == 2
    assert report.total_return == Decimal("117.00")
    assert report.average_percentage_return == Decimal("25.00")
