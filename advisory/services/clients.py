"""Self-service operations for clients: portfolio, investments and messages."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from sqlalchemy.orm import Session

from advisory.core.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    ValidationError,
)
from advisory.core.logger import get_logger
from advisory.domain.finance import HUNDRED, ZERO, to_decimal
from advisory.domain.statuses import RiskProfile
from advisory.models import Client, Investment, Message, Transaction, utcnow
from advisory.repositories import ClientRepository, InvestmentRepository, MessageRepository

from .market_data import QuoteProvider, get_quote_provider, normalize_symbol
from .support import validate_message

LOGGER = get_logger(__name__)

DEFAULT_TRANSACTION_LIMIT = 50

# Accepted ``risk_tolerance`` values and the profile each maps onto.
RISK_TOLERANCE = {
    "LOW": RiskProfile.CONSERVATIVE,
    "CONSERVATIVE": RiskProfile.CONSERVATIVE,
    "MODERATE": RiskProfile.MODERATE,
    "HIGH": RiskProfile.AGGRESSIVE,
    "AGGRESSIVE": RiskProfile.AGGRESSIVE,
}
INVESTMENT_HORIZONS = ("SHORT_TERM", "MEDIUM_TERM", "LONG_TERM")
REQUEST_TYPES = ("BUY", "SELL")
REPORT_PERIODS = {
    "DAILY": timedelta(days=1),
    "WEEKLY": timedelta(weeks=1),
    "MONTHLY": timedelta(days=30),
    "YEARLY": timedelta(days=365),
}


@dataclass(frozen=True)
class InvestmentValuation:
    investment: Investment
    current_price: Decimal
    current_value: Decimal
    cost: Decimal

    @property
    def gain(self) -> Decimal:
        return self.current_value - self.cost


@dataclass(frozen=True)
class PortfolioSummary:
    client_id: str | None
    total_investments: int
    total_value: Decimal
    total_cost: Decimal
    total_gain: Decimal
    total_gain_percentage: Decimal
    investments: list[InvestmentValuation] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class PerformanceReport:
    period: str
    start_date: datetime
    end_date: datetime
    client_id: str | None
    total_return: Decimal
    average_percentage_return: Decimal
    investments: list[dict[str, Any]]


def gain_percentage(gain: Decimal, cost: Decimal) -> Decimal:
    """``gain / cost`` rounded HALF_UP to 2 places, times 100."""

    if cost <= 0:
        return ZERO
    return (gain / cost).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) * HUNDRED


class ClientService:
    def __init__(
        self,
        session: Session,
        *,
        quotes: QuoteProvider | None = None,
        clients: ClientRepository | None = None,
        investments: InvestmentRepository | None = None,
        messages: MessageRepository | None = None,
    ) -> None:
        self._session = session
        self._quotes = quotes or get_quote_provider()
        self._clients = clients or ClientRepository(session)
        self._investments = investments or InvestmentRepository(session)
        self._messages = messages or MessageRepository(session)

    def _client(self, email: str) -> Client:
        client = self._clients.get_by_email(email)
        if client is None:
            raise EntityNotFoundError(f"Client not found for user: {email}")
        return client

    def get_details(self, email: str) -> Client:
        return self._client(email)

    def _value(self, investment: Investment) -> InvestmentValuation:
        shares = investment.shares or ZERO
        price = None
        if investment.ticker:
            price = self._quotes.get_current_price(investment.ticker)
        if price is None:
            price = investment.current_price or investment.purchase_price or ZERO
        cost = (investment.purchase_price or ZERO) * shares if investment.purchase_price else investment.amount
        return InvestmentValuation(investment, price, price * shares, cost or ZERO)

    def get_portfolio_summary(self, email: str) -> PortfolioSummary:
        """Value every investment at the current quote."""

        client = self._client(email)
        valuations = [self._value(investment) for investment in client.investments]
        total_value = sum((v.current_value for v in valuations), ZERO)
        total_cost = sum((v.cost for v in valuations), ZERO)
        total_gain = total_value - total_cost
        return PortfolioSummary(
            client_id=client.client_id,
            total_investments=len(valuations),
            total_value=total_value,
            total_cost=total_cost,
            total_gain=total_gain,
            total_gain_percentage=gain_percentage(total_gain, total_cost),
            investments=valuations,
        )

    def get_investments(self, email: str) -> list[Investment]:
        return self._investments.list_for_client(self._client(email))

    def get_investment(self, email: str, investment_id: int) -> Investment:
        client = self._client(email)
        investment = self._investments.get(investment_id)
        # Other clients' investments are reported as missing.
        if investment is None or investment.client_id != client.id:
            raise EntityNotFoundError.for_entity("Investment", investment_id)
        return investment

    def send_message_to_advisor(self, email: str, subject: str, content: str) -> Message:
        client = self._client(email)
        if client.assigned_employee is None:
            raise EntityNotFoundError("No employee assigned to this client")
        subject, content = validate_message(subject, content)
        message = Message(
            sender=client.user_account,
            recipient=client.assigned_employee.user_account,
            subject=subject,
            content=content,
            sent_at=utcnow(),
        )
        self._session.add(message)
        self._session.commit()
        LOGGER.info("Client message sent", extra={"client_id": client.client_id, "message_id": message.id})
        return message

    def get_messages(self, email: str) -> list[Message]:
        return self._messages.conversation_for(self._client(email).user_account)

    def mark_message_read(self, email: str, message_id: int) -> Message:
        client = self._client(email)
        message = self._messages.get(message_id)
        if message is None:
            raise EntityNotFoundError.for_entity("Message", message_id)
        if message.recipient_id != client.user_account_id:
            raise AccessDeniedError("You cannot mark this message as read")
        message.mark_read()
        self._session.commit()
        return message

    def get_transactions(self, email: str, limit: int | None = None) -> list[Transaction]:
        client = self._client(email)
        return list(self._investments.transactions_for_client(client, limit=limit or DEFAULT_TRANSACTION_LIMIT))

    def get_performance_report(self, email: str, period: str = "MONTHLY") -> PerformanceReport:
        client = self._client(email)
        period = (period or "MONTHLY").upper()
        end = utcnow()
        start = end - REPORT_PERIODS.get(period, REPORT_PERIODS["MONTHLY"])

        rows: list[dict[str, Any]] = []
        total_return = ZERO
        total_percentage = ZERO
        for valuation in (self._value(investment) for investment in client.investments):
            percentage = ZERO
            if valuation.cost > 0:
                percentage = (valuation.gain / valuation.cost).quantize(
                    Decimal("0.0001"), rounding=ROUND_HALF_UP
                ) * HUNDRED
            rows.append(
                {
                    "investment_id": valuation.investment.id,
                    "ticker": valuation.investment.ticker,
                    "shares": valuation.investment.shares,
                    "current_value": valuation.current_value,
                    "absolute_return": valuation.gain,
                    "percentage_return": percentage,
                }
            )
            total_return += valuation.gain
            total_percentage += percentage

        average = ZERO
        if rows:
            average = (total_percentage / len(rows)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return PerformanceReport(
            period=period,
            start_date=start,
            end_date=end,
            client_id=client.client_id,
            total_return=total_return,
            average_percentage_return=average,
            investments=rows,
        )

    def update_preferences(self, email: str, preferences: Mapping[str, Any]) -> dict[str, Any]:
        if not preferences:
            raise ValidationError("Investment preferences cannot be empty")
        client = self._client(email)

        tolerance = preferences.get("risk_tolerance")
        if tolerance is not None and str(tolerance).upper() not in RISK_TOLERANCE:
            raise ValidationError("Invalid risk tolerance value")
        horizon = preferences.get("investment_horizon")
        if horizon is not None and str(horizon).upper() not in INVESTMENT_HORIZONS:
            raise ValidationError("Invalid investment horizon value")

        client.preferences = {**(client.preferences or {}), **dict(preferences)}
        if tolerance is not None:
            client.risk_profile = RISK_TOLERANCE[str(tolerance).upper()]
        self._session.commit()
        return client.preferences

    def request_investment(self, email: str, payload: Mapping[str, Any]) -> Investment:
        """Record a PENDING buy/sell request for the advisor to review."""

        if not payload:
            raise ValidationError("Investment request cannot be empty")
        client = self._client(email)

        raw_symbol = payload.get("stock_symbol")
        if not raw_symbol:
            raise ValidationError("Stock symbol is required")
        symbol = normalize_symbol(str(raw_symbol))
        if symbol is None:
            raise ValidationError(f"Invalid stock symbol: {raw_symbol}")
        if payload.get("shares") is None:
            raise ValidationError("Number of shares is required")
        request_type = payload.get("request_type")
        if not request_type:
            raise ValidationError("Request type is required")
        request_type = str(request_type).upper()
        if request_type not in REQUEST_TYPES:
            raise ValidationError("Invalid request type. Must be BUY or SELL")
        try:
            shares = to_decimal(payload["shares"])
        except ValueError as exc:
            raise ValidationError("Number of shares must be a number") from exc
        if shares <= 0:
            raise ValidationError("Number of shares must be positive")

        price = self._quotes.get_current_price(symbol)
        if price is None:
            raise ValidationError(f"No price available for {symbol}")
        investment = Investment.stock(
            name=f"{request_type} {symbol}",
            ticker=symbol,
            shares=shares,
            purchase_price=price,
            client=client,
            order_type=request_type,
            description=payload.get("notes"),
        )
        self._session.add(investment)
        self._session.commit()
        LOGGER.info(
            "Investment request submitted",
            extra={"client_id": client.client_id, "investment_id": investment.id, "symbol": symbol},
        )
        return investment


__all__ = [
    "ClientService",
    "InvestmentValuation",
    "PerformanceReport",
    "PortfolioSummary",
    "gain_percentage",
]
