"""Back-office investment management: lookups, pricing, dividends and analytics."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy.orm import Session

from advisory.core.exceptions import BusinessRuleError, EntityNotFoundError, ValidationError
from advisory.core.log import timeit
from advisory.core.logger import get_logger
from advisory.domain.finance import ZERO, quantize_money, ratio_percent, to_decimal
from advisory.domain.statuses import InvestmentStatus, RiskLevel, TransactionStatus, TransactionType
from advisory.models import Investment, Transaction, utcnow
from advisory.repositories import InvestmentRepository

from .market_data import QuoteProvider, get_quote_provider

LOGGER = get_logger(__name__)

PENDING_ATTENTION_AFTER = timedelta(days=2)
LOSS_ATTENTION_PERCENT = -10.0


@dataclass(frozen=True)
class InvestmentPerformance:
    investment_id: int
    ticker: str | None
    current_price: Decimal | None
    current_value: Decimal | None
    profit_loss: Decimal
    total_return: Decimal
    total_return_percentage: float
    dividends_earned: Decimal
    annualized_return: float
    days_invested: int
    day_change: Decimal | None = None
    day_change_percentage: float | None = None


@dataclass(frozen=True)
class InvestmentAnalytics:
    total_investments: int
    active_investments: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    total_invested: Decimal
    total_value: Decimal
    total_gain: Decimal
    total_gain_percentage: float


@dataclass(frozen=True)
class PriceRefresh:
    updated: int
    failed: list[str]


class InvestmentService:
    def __init__(
        self,
        session: Session,
        *,
        quotes: QuoteProvider | None = None,
        investments: InvestmentRepository | None = None,
    ) -> None:
        self._session = session
        self._quotes = quotes or get_quote_provider()
        self._investments = investments or InvestmentRepository(session)

    def get_investment(self, investment_id: int) -> Investment:
        investment = self._investments.get(investment_id)
        if investment is None:
            raise EntityNotFoundError.for_entity("Investment", investment_id)
        return investment

    def list_investments(self) -> list[Investment]:
        return self._investments.list_all()

    def list_by_status(self, status: str | InvestmentStatus) -> list[Investment]:
        target = status if isinstance(status, InvestmentStatus) else InvestmentStatus.from_string(status)
        if target is None:
            raise ValidationError(f"Invalid investment status: {status}")
        return self._investments.list_by_status(target)

    def update_investment(self, investment_id: int, changes: Mapping[str, Any]) -> Investment:
        """Apply description, target price, risk level and status changes."""

        investment = self.get_investment(investment_id)
        if "description" in changes or "notes" in changes:
            investment.description = changes.get("description", changes.get("notes"))
        if changes.get("target_price") is not None:
            try:
                target_price = to_decimal(changes["target_price"])
            except ValueError as exc:
                raise ValidationError("Target price must be a number") from exc
            if target_price <= 0:
                raise ValidationError("Target price must be positive")
            investment.target_price = target_price
        if changes.get("risk_level") is not None:
            try:
                investment.risk_level = RiskLevel(str(changes["risk_level"]).upper())
            except ValueError as exc:
                raise ValidationError(f"Invalid risk level: {changes['risk_level']}") from exc
        if changes.get("status") is not None:
            target = InvestmentStatus.from_string(str(changes["status"]))
            if target is None:
                raise ValidationError(f"Invalid investment status: {changes['status']}")
            investment.transition_to(target)
        investment.last_updated = utcnow()
        self._session.commit()
        return investment

    def get_performance(self, investment_id: int) -> InvestmentPerformance:
        investment = self.get_investment(investment_id)
        quote = self._quotes.get_quote(investment.ticker) if investment.ticker else None
        return InvestmentPerformance(
            investment_id=investment.id,
            ticker=investment.ticker,
            current_price=investment.current_price,
            current_value=investment.current_value,
            profit_loss=investment.profit_loss,
            total_return=investment.total_return,
            total_return_percentage=round(investment.total_return_percentage, 2),
            dividends_earned=investment.dividends or ZERO,
            annualized_return=round(investment.annualized_return(), 2),
            days_invested=investment.days_invested(),
            day_change=quote.day_change if quote else None,
            day_change_percentage=quote.day_change_percentage if quote else None,
        )

    def get_analytics(self) -> InvestmentAnalytics:
        investments = self._investments.list_all()
        total_invested = self._investments.total_amount()
        total_value = sum(
            (
                investment.current_value if investment.current_value is not None else investment.amount
                for investment in investments
            ),
            ZERO,
        )
        total_gain = total_value - total_invested
        return InvestmentAnalytics(
            total_investments=self._investments.count(),
            active_investments=sum(1 for investment in investments if investment.is_active),
            by_status={status.value: total for status, total in self._investments.count_by_status().items()},
            by_type={kind.value: total for kind, total in self._investments.count_by_type().items()},
            total_invested=quantize_money(total_invested),
            total_value=quantize_money(total_value),
            total_gain=quantize_money(total_gain),
            total_gain_percentage=round(ratio_percent(total_gain, total_invested), 2),
        )

    def refresh_prices(self) -> PriceRefresh:
        """Reprice every active investment that has a ticker."""

        active = [inv for inv in self._investments.list_by_status(InvestmentStatus.ACTIVE) if inv.ticker]
        prices = self._quotes.get_batch_prices({inv.ticker for inv in active})
        failed: list[str] = []
        updated = 0
        with timeit("price refresh", logger=LOGGER, unit="investments", total=len(active)):
            for investment in active:
                price = prices.get(investment.ticker)
                if price is None:
                    failed.append(investment.ticker)
                    continue
                investment.update_market_price(price)
                updated += 1
        self._session.commit()
        if failed:
            LOGGER.warning("No price for %s", ", ".join(sorted(set(failed))))
        LOGGER.info("Prices refreshed", extra={"updated": updated})
        return PriceRefresh(updated=updated, failed=sorted(set(failed)))

    def process_dividend(self, investment_id: int, amount: object) -> Transaction:
        investment = self.get_investment(investment_id)
        try:
            value = to_decimal(amount, default=None)
        except ValueError as exc:
            raise ValidationError("Dividend amount must be a number") from exc
        if value is None or value <= 0:
            raise ValidationError("Dividend amount must be positive")
        if not investment.is_active:
            raise BusinessRuleError("Dividends can only be processed for active investments")

        investment.add_dividend(value)
        client = investment.client
        transaction = Transaction(
            client=client,
            investment=investment,
            portfolio=client.portfolio if client else None,
            transaction_type=TransactionType.DIVIDEND,
            ticker=investment.ticker,
            total_amount=value,
            status=TransactionStatus.COMPLETED,
            description=f"Dividend payment for {investment.ticker or investment.name}",
        )
        self._session.add(transaction)
        self._session.commit()
        LOGGER.info("Dividend processed", extra={"investment_id": investment.id, "amount": str(value)})
        return transaction

    def get_requiring_attention(self) -> list[Investment]:
        """Investments pending for over two days or down more than 10%."""

        stale = self._investments.pending_before(utcnow() - PENDING_ATTENTION_AFTER)
        losing = [
            investment
            for investment in self._investments.list_by_status(InvestmentStatus.ACTIVE)
            if investment.current_value is not None and investment.return_percentage < LOSS_ATTENTION_PERCENT
        ]
        seen: set[int] = set()
        flagged: list[Investment] = []
        for investment in (*stale, *losing):
            if investment.id not in seen:
                seen.add(investment.id)
                flagged.append(investment)
        return flagged


__all__ = [
    "InvestmentAnalytics",
    "InvestmentPerformance",
    "InvestmentService",
    "PriceRefresh",
]
