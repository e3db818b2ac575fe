"""Client portfolios and their per-ticker stock holdings."""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from advisory.domain.finance import ZERO, quantize_money, ratio_percent
from advisory.domain.statuses import RiskProfile
from advisory.models.base import ID_TYPE, Base, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from advisory.models.profiles import Client

TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}$")
_STALE_AFTER = timedelta(hours=1)
_SIGNIFICANT_WEIGHT = 10.0


class Portfolio(Base):
    """Aggregated position of a client: invested value, cost and cash."""

    __tablename__ = "portfolio"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("client.id"), unique=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="Main Portfolio")
    total_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    cash_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    realized_gain_loss: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    dividends_received: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    risk_profile: Mapped[RiskProfile] = mapped_column(
        SQLEnum(RiskProfile, native_enum=False, length=16),
        nullable=False,
        default=RiskProfile.MODERATE,
    )
    rebalance_frequency: Mapped[str] = mapped_column(String(16), nullable=False, default="QUARTERLY")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    last_calculated: Mapped[datetime | None] = mapped_column(DateTime)

    client: Mapped["Client | None"] = relationship(back_populates="portfolio")
    holdings: Mapped[list["StockHolding"]] = relationship(
        back_populates="portfolio", cascade="all, delete-orphan"
    )

    @property
    def unrealized_gain_loss(self) -> Decimal:
        if self.total_value is None or self.total_cost is None:
            return ZERO
        return self.total_value - self.total_cost

    @property
    def total_gain_loss(self) -> Decimal:
        return self.unrealized_gain_loss + (self.realized_gain_loss or ZERO)

    @property
    def total_return_percentage(self) -> float:
        return ratio_percent(self.unrealized_gain_loss, self.total_cost)

    @property
    def total_assets(self) -> Decimal:
        return (self.total_value or ZERO) + (self.cash_balance or ZERO)

    @property
    def investment_percentage(self) -> float:
        return ratio_percent(self.total_value or ZERO, self.total_assets)

    @property
    def cash_percentage(self) -> float:
        return ratio_percent(self.cash_balance or ZERO, self.total_assets)

    def add_holding(self, holding: "StockHolding") -> None:
        self.holdings.append(holding)

    def remove_holding(self, holding: "StockHolding") -> bool:
        if holding in self.holdings:
            self.holdings.remove(holding)
            return True
        return False

    @property
    def holdings_count(self) -> int:
        return len(self.holdings)

    def has_holdings(self) -> bool:
        return bool(self.holdings)

    def find_holding_by_ticker(self, ticker: str | None) -> "StockHolding | None":
        if not ticker:
            return None
        wanted = ticker.upper()
        return next((h for h in self.holdings if (h.ticker or "").upper() == wanted), None)

    def recalculate_totals(self) -> None:
        """Refresh ``total_value`` and ``total_cost`` from the holdings."""

        self.total_cost = sum((h.total_cost or ZERO for h in self.holdings), ZERO)
        self.total_value = sum(
            (h.current_value if h.current_value is not None else (h.total_cost or ZERO) for h in self.holdings),
            ZERO,
        )
        self.last_calculated = utcnow()

    def is_profitable(self) -> bool:
        return self.unrealized_gain_loss > 0

    def is_high_risk(self) -> bool:
        return self.risk_profile is RiskProfile.AGGRESSIVE

    def is_low_risk(self) -> bool:
        return self.risk_profile is RiskProfile.CONSERVATIVE

    def is_valid(self) -> bool:
        if not self.name or not self.name.strip():
            return False
        return all(
            value is None or value >= 0
            for value in (self.total_value, self.total_cost, self.cash_balance)
        )


class StockHolding(Base):
    """Position in a single ticker, tracked at weighted-average cost."""

    __tablename__ = "stock_holding"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int | None] = mapped_column(ForeignKey("portfolio.id"))
    ticker: Mapped[str] = mapped_column(String(5), nullable=False)
    company_name: Mapped[str | None] = mapped_column(String(160))
    sector: Mapped[str | None] = mapped_column(String(64))
    shares: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=ZERO)
    average_cost: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    total_cost: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=ZERO)
    current_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    current_value: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    dividends_received: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    first_purchase_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    last_price_update: Mapped[datetime | None] = mapped_column(DateTime)

    portfolio: Mapped[Portfolio | None] = relationship(back_populates="holdings")

    @classmethod
    def open(cls, ticker: str, shares: Decimal, price: Decimal, **kwargs) -> "StockHolding":
        """Start a position of ``shares`` bought at ``price``."""

        return cls(
            ticker=ticker,
            shares=shares,
            average_cost=price,
            total_cost=shares * price,
            first_purchase_date=utcnow(),
            **kwargs,
        )

    @property
    def gain_loss(self) -> Decimal:
        if self.current_value is None or self.total_cost is None:
            return ZERO
        return self.current_value - self.total_cost

    @property
    def gain_loss_percentage(self) -> float:
        return ratio_percent(self.gain_loss, self.total_cost)

    def update_current_price(self, price: Decimal) -> None:
        self.current_price = price
        self.last_price_update = utcnow()
        if self.shares is not None and price is not None:
            self.current_value = quantize_money(self.shares * price)

    def portfolio_weight(self, portfolio_total: Decimal | None) -> float:
        if self.current_value is None:
            return 0.0
        return ratio_percent(self.current_value, portfolio_total)

    def add_dividend(self, amount: Decimal) -> None:
        self.dividends_received = (self.dividends_received or ZERO) + amount

    @property
    def total_return(self) -> Decimal:
        return self.gain_loss + (self.dividends_received or ZERO)

    @property
    def total_return_percentage(self) -> float:
        return ratio_percent(self.total_return, self.total_cost)

    def is_profitable(self) -> bool:
        return self.gain_loss > 0

    def is_price_data_stale(self, now: datetime | None = None) -> bool:
        if self.last_price_update is None:
            return True
        return (now or utcnow()) - self.last_price_update > _STALE_AFTER

    def is_significant_position(self, portfolio_total: Decimal | None) -> bool:
        return self.portfolio_weight(portfolio_total) > _SIGNIFICANT_WEIGHT

    def add_shares(self, shares: Decimal, price: Decimal) -> None:
        """Buy more shares, re-averaging the cost basis (2 dp, HALF_UP)."""

        total_shares = (self.shares or ZERO) + shares
        total_cost = (self.total_cost or ZERO) + shares * price
        self.average_cost = (total_cost / total_shares).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        self.shares = total_shares
        self.total_cost = total_cost

    def remove_shares(self, shares: Decimal) -> Decimal:
        """Sell ``shares`` at average cost; returns the cost basis removed."""

        if self.shares is None or shares > self.shares:
            raise ValueError("Cannot sell more shares than owned")
        cost_basis = (self.average_cost or ZERO) * shares
        self.shares = self.shares - shares
        self.total_cost = (self.total_cost or ZERO) - cost_basis
        return cost_basis

    def is_valid(self) -> bool:
        if self.portfolio is None or not self.ticker or not TICKER_PATTERN.match(self.ticker):
            return False
        if self.shares is None or self.shares < 0:
            return False
        if self.average_cost is not None and self.average_cost < 0:
            return False
        return self.total_cost is None or self.total_cost >= 0
