from datetime import timedelta
from decimal import Decimal
from unittest.mock import create_autospec

import pytest
from sqlalchemy.orm import Session

from advisory.core.exceptions import BusinessRuleError, EntityNotFoundError, ValidationError
from advisory.domain.investment_types import InvestmentType
from advisory.domain.statuses import InvestmentStatus, RiskLevel, TransactionType
from advisory.models import Investment, utcnow
from advisory.repositories import InvestmentRepository
from advisory.services import EmployeeService, InvestmentService
from advisory.services.market_data import StaticQuoteProvider


def _position(pk: int, ticker: str, *, amount: str, value: str | None, status=InvestmentStatus.ACTIVE) -> Investment:
    shares = Decimal("10")
    investment = Investment.stock(
        name=ticker, ticker=ticker, shares=shares, purchase_price=Decimal(amount) / shares, status=status
    )
    investment.id = pk
    if value is not None:
        investment.current_value = Decimal(value)
    return investment


def _service_with_repository(repository: InvestmentRepository, quotes=None) -> InvestmentService:
    session = create_autospec(Session, instance=True)
    return InvestmentService(session, quotes=quotes or StaticQuoteProvider(), investments=repository)


def _active_investment(session, quotes, client_pk: int) -> Investment:
    employees = EmployeeService(session, quotes=quotes)
    investment = employees.create_investment(
        "advisor@example.com", {"client_id": client_pk, "stock_symbol": "AAPL", "quantity": 10}
    )
    for status in ("UNDER_REVIEW", "APPROVED", "ACTIVE"):
        employees.update_investment_status("advisor@example.com", investment.id, status)
    return investment


def test_requiring_attention_merges_stale_and_losing() -> None:
    """Positions both stale and losing are reported once."""

    stale = _position(1, "AAPL", amount="1000", value=None, status=InvestmentStatus.PENDING)
    losing = _position(2, "TSLA", amount="1000", value="850")
    flat = _position(3, "MSFT", amount="1000", value="950")
    repository = create_autospec(InvestmentRepository, instance=True)
    repository.pending_before.return_value = [stale]
    repository.list_by_status.return_value = [losing, flat]

    flagged = _service_with_repository(repository).get_requiring_attention()

    assert flagged == [stale, losing]
    cutoff = repository.pending_before.call_args.args[0]
    assert utcnow() - cutoff >= timedelta(days=2)
    repository.list_by_status.assert_called_once_with(InvestmentStatus.ACTIVE)


def test_analytics_aggregate_values() -> None:
    repository = create_autospec(InvestmentRepository, instance=True)
    repository.list_all.return_value = [
        _position(1, "AAPL", amount="1000", value="1200"),
        _position(2, "MSFT", amount="500", value=None, status=InvestmentStatus.PENDING),
    ]
    repository.total_amount.return_value = Decimal("1500")
    repository.count.return_value = 2
    repository.count_by_status.return_value = {InvestmentStatus.ACTIVE: 1, InvestmentStatus.PENDING: 1}
    repository.count_by_type.return_value = {InvestmentType.STOCK: 2}

    analytics = _service_with_repository(repository).get_analytics()

    assert analytics.total_investments == 2
    assert analytics.active_investments == 1
    assert analytics.by_status == {"ACTIVE": 1, "PENDING": 1}
    assert analytics.by_type == {"STOCK": 2}
    assert analytics.total_value == Decimal("1700.00")
    assert analytics.total_gain == Decimal("200.00")
    assert analytics.total_gain_percentage == 13.33


def test_refresh_prices_reports_failures() -> None:
    known = _position(1, "AAPL", amount="1000", value="1000")
    unknown = _position(2, "ZZZZ", amount="1000", value="1000")
    repository = create_autospec(InvestmentRepository, instance=True)
    repository.list_by_status.return_value = [known, unknown]
    quotes = create_autospec(StaticQuoteProvider, instance=True)
    quotes.get_batch_prices.return_value = {"AAPL": Decimal("120")}

    result = _service_with_repository(repository, quotes).refresh_prices()

    assert result.updated == 1
    assert result.failed == ["ZZZZ"]
    assert known.current_price == Decimal("120")
    assert known.current_value == Decimal("1200")
    assert unknown.current_price is None


def test_process_dividend_requires_active_investment(client_profile, session, quotes) -> None:
    employees = EmployeeService(session, quotes=quotes)
    pending = employees.create_investment(
        "advisor@example.com", {"client_id": client_profile.id, "stock_symbol": "MSFT", "quantity": 1}
    )
    service = InvestmentService(session, quotes=quotes)

    with pytest.raises(BusinessRuleError, match="only be processed for active investments"):
        service.process_dividend(pending.id, "5")

    active = _active_investment(session, quotes, client_profile.id)
    transaction = service.process_dividend(active.id, "12.50")

    assert transaction.transaction_type is TransactionType.DIVIDEND
    assert transaction.total_amount == Decimal("12.50")
    assert transaction.client is client_profile
    assert active.dividends == Decimal("12.50")
    with pytest.raises(ValidationError, match="Dividend amount must be positive"):
        service.process_dividend(active.id, "0")


def test_performance_of_priced_investment(client_profile, session, quotes) -> None:
    active = _active_investment(session, quotes, client_profile.id)
    active.update_market_price(Decimal("193.05"))
    active.add_dividend(Decimal("17.55"))

    performance = InvestmentService(session, quotes=quotes).get_performance(active.id)

    assert performance.ticker == "AAPL"
    assert performance.profit_loss == Decimal("175.50")
    assert performance.total_return == Decimal("193.05")
    assert performance.total_return_percentage == 11.0
    assert performance.dividends_earned == Decimal("17.55")
    assert performance.days_invested == 0
    assert performance.annualized_return == 0.0
    assert performance.day_change is not None


def test_update_investment_fields(client_profile, session, quotes) -> None:
    active = _active_investment(session, quotes, client_profile.id)
    service = InvestmentService(session, quotes=quotes)

    updated = service.update_investment(
        active.id, {"notes": "Rebalance next quarter", "target_price": "210", "risk_level": "medium", "status": "suspended"}
    )

    assert updated.description == "Rebalance next quarter"
    assert updated.target_price == Decimal("210")
    assert updated.risk_level is RiskLevel.MEDIUM
    assert updated.status is InvestmentStatus.SUSPENDED
    assert service.list_by_status("suspended") == [updated]
    with pytest.raises(ValidationError, match="Target price must be positive"):
        service.update_investment(active.id, {"target_price": "-1"})
    with pytest.raises(ValidationError, match="Invalid risk level"):
        service.update_investment(active.id, {"risk_level": "EXTREME"})


def test_unknown_investment_and_status(session, quotes) -> None:
    service = InvestmentService(session, quotes=quotes)

    with pytest.raises(EntityNotFoundError, match="Investment not found with id: 42"):
        service.get_investment(42)
    with pytest.raises(ValidationError, match="Invalid investment status: SLEEPING"):
        service.list_by_status("SLEEPING")
