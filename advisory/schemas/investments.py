"""Schemas describing investments, their performance and related transactions."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer

from advisory.models import Investment, Transaction
from advisory.services.investments import InvestmentAnalytics, InvestmentPerformance, PriceRefresh


class InvestmentRead(BaseModel):
    """One investment position as shown to clients and staff."""

    id: int
    investment_id: str | None = None
    client_id: str | None = None
    client_name: str | None = None
    name: str
    investment_type: str
    ticker: str | None = None
    sector: str | None = None
    shares: Decimal | None = None
    purchase_price: Decimal | None = None
    current_price: Decimal | None = None
    amount: Decimal
    current_value: Decimal | None = None
    dividends: Decimal = Decimal("0")
    gain_loss: Decimal = Decimal("0")
    return_percentage: float = 0.0
    status: str
    risk_level: str
    order_type: str | None = None
    target_price: Decimal | None = None
    description: str | None = None
    purchase_date: datetime | None = None
    last_updated: datetime | None = None

    @field_serializer(
        "shares",
        "purchase_price",
        "current_price",
        "amount",
        "current_value",
        "dividends",
        "gain_loss",
        "target_price",
    )
    def _serialize_decimal(self, value: Decimal | None) -> str | None:
        return None if value is None else str(value)

    @classmethod
    def from_investment(cls, investment: Investment) -> "InvestmentRead":
        client = investment.client
        return cls(
            id=investment.id,
            investment_id=investment.investment_id,
            client_id=client.client_id if client else None,
            client_name=client.full_name if client else None,
            name=investment.name,
            investment_type=investment.investment_type.value,
            ticker=investment.ticker,
            sector=investment.sector,
            shares=investment.shares,
            purchase_price=investment.purchase_price,
            current_price=investment.current_price,
            amount=investment.amount,
            current_value=investment.current_value,
            dividends=investment.dividends or Decimal("0"),
            gain_loss=investment.gain_loss,
            return_percentage=round(investment.return_percentage, 2),
            status=investment.status.value,
            risk_level=investment.risk_level.value,
            order_type=investment.order_type,
            target_price=investment.target_price,
            description=investment.description,
            purchase_date=investment.purchase_date,
            last_updated=investment.last_updated,
        )


def investment_list(investments) -> list[InvestmentRead]:
    return [InvestmentRead.from_investment(investment) for investment in investments]


class InvestmentUpdateRequest(BaseModel):
    description: str | None = None
    target_price: Decimal | None = None
    risk_level: str | None = None
    status: str | None = None


class InvestmentPerformanceRead(BaseModel):
    investment_id: int
    ticker: str | None = None
    current_price: Decimal | None = None
    current_value: Decimal | None = None
    profit_loss: Decimal = Decimal("0")
    total_return: Decimal = Decimal("0")
    total_return_percentage: float = 0.0
    dividends_earned: Decimal = Decimal("0")
    annualized_return: float = 0.0
    days_invested: int = 0
    day_change: Decimal | None = None
    day_change_percentage: float | None = None

    @field_serializer(
        "current_price", "current_value", "profit_loss", "total_return", "dividends_earned", "day_change"
    )
    def _serialize_decimal(self, value: Decimal | None) -> str | None:
        return None if value is None else str(value)

    @classmethod
    def from_performance(cls, performance: InvestmentPerformance) -> "InvestmentPerformanceRead":
        return cls(**vars(performance))


class InvestmentAnalyticsRead(BaseModel):
    """Book-wide aggregates across all investments."""

    total_investments: int
    active_investments: int
    by_status: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    total_invested: Decimal = Decimal("0")
    total_value: Decimal = Decimal("0")
    total_gain: Decimal = Decimal("0")
    total_gain_percentage: float = 0.0

    @field_serializer("total_invested", "total_value", "total_gain")
    def _serialize_decimal(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_analytics(cls, analytics: InvestmentAnalytics) -> "InvestmentAnalyticsRead":
        return cls(**vars(analytics))


class DividendRequest(BaseModel):
    amount: Decimal


class TransactionRead(BaseModel):
    id: int
    reference_number: str
    transaction_type: str
    status: str
    ticker: str | None = None
    shares: Decimal | None = None
    price_per_share: Decimal | None = None
    fee: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    transaction_date: datetime
    description: str | None = None
    investment_id: int | None = None

    @field_serializer("shares", "price_per_share", "fee", "total_amount")
    def _serialize_decimal(self, value: Decimal | None) -> str | None:
        return None if value is None else str(value)

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRead":
        return cls(
            id=transaction.id,
            reference_number=transaction.reference_number,
            transaction_type=transaction.transaction_type.value,
            status=transaction.status.value,
            ticker=transaction.ticker,
            shares=transaction.shares,
            price_per_share=transaction.price_per_share,
            fee=transaction.fee or Decimal("0"),
            total_amount=transaction.total_amount or Decimal("0"),
            transaction_date=transaction.transaction_date,
            description=transaction.description,
            investment_id=transaction.investment_id,
        )


class PriceRefreshResponse(BaseModel):
    updated: int
    failed: list[str] = Field(default_factory=list)

    @classmethod
    def from_refresh(cls, refresh: PriceRefresh) -> "PriceRefreshResponse":
        return cls(updated=refresh.updated, failed=list(refresh.failed))


__all__ = [
    "DividendRequest",
    "InvestmentAnalyticsRead",
    "InvestmentPerformanceRead",
    "InvestmentRead",
    "InvestmentUpdateRequest",
    "PriceRefreshResponse",
    "TransactionRead",
    "investment_list",
]
