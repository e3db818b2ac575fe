from decimal import Decimal

import pytest

from advisory.core.exceptions import AccessDeniedError, BusinessRuleError, EntityNotFoundError, ValidationError
from advisory.domain.statuses import InvestmentStatus, RiskLevel, TransactionStatus, TransactionType
from advisory.repositories import InvestmentRepository, MessageRepository
from advisory.services import EmployeeService

ADVISOR = "advisor@example.com"


@pytest.fixture()
def service(session, quotes) -> EmployeeService:
    return EmployeeService(session, quotes=quotes)


def _buy(service: EmployeeService, client_pk: int, **overrides):
    payload = {"client_id": client_pk, "stock_symbol": "AAPL", "quantity": "10", **overrides}
    return service.create_investment(ADVISOR, payload)


def test_assigned_clients_and_search(client_profile, accounts, service) -> None:
    accounts.client("unassigned@example.com")

    assert service.get_assigned_clients(ADVISOR) == [client_profile]
    assert service.search_clients(ADVISOR, "carl") == [client_profile]
    assert service.search_clients(ADVISOR, "unassigned") == []
    with pytest.raises(ValidationError, match="Search query must not be empty"):
        service.search_clients(ADVISOR, "")


def test_unassigned_client_is_forbidden(accounts, advisor, service) -> None:
    stranger = accounts.client("stranger@example.com")

    with pytest.raises(AccessDeniedError, match="You are not assigned to this client"):
        service.get_client(ADVISOR, stranger.id)
    with pytest.raises(EntityNotFoundError, match="Client not found with id: 999"):
        service.get_client(ADVISOR, 999)


def test_market_order_completes_buy_and_notifies_client(client_profile, session, service) -> None:
    investment = _buy(service, client_profile.id, notes="Core holding")

    assert investment.name == "Apple Inc."
    assert investment.status is InvestmentStatus.PENDING
    assert investment.risk_level is RiskLevel.HIGH
    assert investment.current_value == Decimal("1755.00")
    assert investment.created_by.user_account.email == ADVISOR

    [transaction] = InvestmentRepository(session).transactions_for_client(client_profile)
    assert transaction.transaction_type is TransactionType.BUY
    assert transaction.status is TransactionStatus.COMPLETED
    assert transaction.total_amount == Decimal("1755.00")

    notifications = MessageRepository(session).notifications_for(client_profile.user_account)
    [created] = [item for item in notifications if item.type == "INVESTMENT_CREATED"]
    assert "Apple Inc." in created.message


def test_limit_order_leaves_transaction_pending(client_profile, session, service) -> None:
    investment = _buy(service, client_profile.id, order_type="limit", target_price="160")

    [transaction] = InvestmentRepository(session).transactions_for_client(client_profile)
    assert transaction.status is TransactionStatus.PENDING
    assert investment.target_price == Decimal("160")
    assert service.get_pending_investments(ADVISOR) == [investment]


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"client_id": None}, "Client id is required"),
        ({"stock_symbol": "not a ticker"}, "Invalid stock symbol"),
        ({"quantity": None}, "Quantity must be positive"),
        ({"quantity": "0"}, "Quantity must be positive"),
        ({"quantity": "many"}, "Quantity must be a number"),
        ({"order_type": "STOP"}, "Order type must be MARKET or LIMIT"),
    ],
)
def test_create_investment_validation(client_profile, service, overrides, message) -> None:
    with pytest.raises(ValidationError, match=message):
        _buy(service, client_profile.id, **overrides)


def test_status_updates_follow_the_lifecycle(client_profile, service) -> None:
    investment = _buy(service, client_profile.id)

    with pytest.raises(BusinessRuleError, match="Cannot transition from PENDING to ACTIVE"):
        service.update_investment_status(ADVISOR, investment.id, "ACTIVE")
    with pytest.raises(ValidationError, match="Invalid investment status"):
        service.update_investment_status(ADVISOR, investment.id, "FROZEN")

    for status in ("under_review", "approved", "active"):
        service.update_investment_status(ADVISOR, investment.id, status)

    assert investment.status is InvestmentStatus.ACTIVE


def test_performance_metrics(client_profile, service) -> None:
    investment = _buy(service, client_profile.id)
    for status in ("UNDER_REVIEW", "APPROVED", "ACTIVE"):
        service.update_investment_status(ADVISOR, investment.id, status)
    investment.update_market_price(Decimal("193.05"))
    service.send_message_to_client(ADVISOR, client_profile.id, "Welcome", "Your account is ready")

    metrics = service.get_performance_metrics(ADVISOR)

    assert metrics.total_clients == 1
    assert metrics.active_clients == 1
    assert metrics.active_investments == 1
    assert metrics.total_assets_under_management == Decimal("1930.50")
    assert metrics.total_returns == Decimal("175.50")
    assert metrics.average_return_percentage == 10.0
    assert metrics.messages_this_month == 1
    assert metrics.workload == "LIGHT"


def test_client_notes_record_author(client_profile, service) -> None:
    client = service.update_client_notes(ADVISOR, client_profile.id, "Prefers calls in the morning")

    assert client.notes == "Prefers calls in the morning"
    assert client.preferences["notes_updated_by"] == ADVISOR
    assert "notes_last_updated" in client.preferences


def test_messages_between_advisor_and_client(client_profile, service) -> None:
    message = service.send_message_to_client(ADVISOR, client_profile.id, "Review", "Quarterly review on Monday")

    assert message.recipient is client_profile.user_account
    assert service.get_messages(ADVISOR) == [message]
    with pytest.raises(ValidationError, match="Message content is required"):
        service.send_message_to_client(ADVISOR, client_profile.id, "Empty", "   ")
