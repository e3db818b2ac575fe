"""Client investments and their lifecycle."""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from advisory.core.exceptions import BusinessRuleError
from advisory.domain.finance import ZERO, ratio_percent
from advisory.domain.investment_types import InvestmentType
from advisory.domain.statuses import InvestmentStatus, RiskLevel, risk_level_for_sector
from advisory.models.base import ID_TYPE, Base, utcnow
from advisory.models.portfolio import TICKER_PATTERN

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from advisory.models.profiles import Client, Employee

INVESTMENT_ID_PATTERN = re.compile(r"^INV-([A-Z]{3}-\d{3,}-\d+|GEN-\d+)$")
_STALE_AFTER = timedelta(hours=1)


class Investment(Base):
    """A position requested for (or opened on behalf of) a client."""

    __tablename__ = "investment"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("client.id"), index=True)
    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("employee.id"))
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    investment_type: Mapped[InvestmentType] = mapped_column(
        SQLEnum(InvestmentType, native_enum=False, length=16),
        nullable=False,
        default=InvestmentType.STOCK,
    )
    ticker: Mapped[str | None] = mapped_column(String(5), index=True)
    sector: Mapped[str | None] = mapped_column(String(64))
    shares: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    current_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    current_value: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    dividends: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    dividend_yield: Mapped[Decimal | None] = mapped_column(Numeric(9, 4))
    expected_return: Mapped[Decimal | None] = mapped_column(Numeric(9, 4))
    status: Mapped[InvestmentStatus] = mapped_column(
        SQLEnum(InvestmentStatus, native_enum=False, length=16),
        nullable=False,
        default=InvestmentStatus.PENDING,
        index=True,
    )
    risk_level: Mapped[RiskLevel] = mapped_column(
        SQLEnum(RiskLevel, native_enum=False, length=8),
        nullable=False,
        default=RiskLevel.MEDIUM,
    )
    order_type: Mapped[str | None] = mapped_column(String(16))
    target_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    description: Mapped[str | None] = mapped_column(Text)
    purchase_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    maturity_date: Mapped[datetime | None] = mapped_column(DateTime)
    last_updated: Mapped[datetime | None] = mapped_column(DateTime)

    client: Mapped["Client | None"] = relationship(back_populates="investments")
    created_by: Mapped["Employee | None"] = relationship()

    @classmethod
    def stock(
        cls,
        *,
        name: str,
        ticker: str,
        shares: Decimal,
        purchase_price: Decimal,
        sector: str | None = None,
        **kwargs,
    ) -> "Investment":
        """Build a stock position; amount and risk level are derived."""

        return cls(
            name=name,
            investment_type=InvestmentType.STOCK,
            ticker=ticker,
            shares=shares,
            purchase_price=purchase_price,
            amount=shares * purchase_price,
            sector=sector,
            risk_level=risk_level_for_sector(sector),
            purchase_date=utcnow(),
            **kwargs,
        )

    @property
    def investment_id(self) -> str | None:
        if self.id is None:
            return None
        if self.client is not None and self.client.client_id:
            return f"INV-{self.client.client_id}-{self.id}"
        return f"INV-GEN-{self.id}"

    def has_valid_investment_id(self) -> bool:
        value = self.investment_id
        return value is not None and INVESTMENT_ID_PATTERN.match(value) is not None

    @property
    def is_stock(self) -> bool:
        return self.investment_type is InvestmentType.STOCK and self.ticker is not None

    # pricing -----------------------------------------------------------

    def update_market_price(self, price: Decimal) -> None:
        self.current_price = price
        self.last_updated = utcnow()
        if self.shares is not None:
            self.current_value = self.shares * price

    def is_price_data_stale(self, now: datetime | None = None) -> bool:
        if self.last_updated is None:
            return True
        return (now or utcnow()) - self.last_updated > _STALE_AFTER

    @property
    def gain_loss(self) -> Decimal:
        if self.current_value is None or self.amount is None:
            return ZERO
        return self.current_value - self.amount

    @property
    def profit_loss(self) -> Decimal:
        if self.current_price is None or self.purchase_price is None or self.shares is None:
            return ZERO
        return (self.current_price - self.purchase_price) * self.shares

    @property
    def return_percentage(self) -> float:
        if self.current_value is None:
            return 0.0
        return ratio_percent(self.gain_loss, self.amount)

    def add_dividend(self, amount: Decimal) -> None:
        self.dividends = (self.dividends or ZERO) + amount

    @property
    def total_return(self) -> Decimal:
        return self.gain_loss + (self.dividends or ZERO)

    @property
    def total_return_percentage(self) -> float:
        return ratio_percent(self.total_return, self.amount)

    def days_invested(self, as_of: datetime | None = None) -> int:
        if self.purchase_date is None:
            return 0
        return ((as_of or utcnow()).date() - self.purchase_date.date()).days

    def annualized_return(self, as_of: datetime | None = None) -> float:
        """Compound the total return percentage over the days held."""

        days = self.days_invested(as_of)
        if days <= 0:
            return 0.0
        total = self.total_return_percentage
        if total == 0.0:
            return 0.0
        return ((1 + total / 100) ** (365.0 / days) - 1) * 100

    # maturity ----------------------------------------------------------

    def is_mature(self, as_of: datetime | None = None) -> bool:
        return self.maturity_date is not None and (as_of or utcnow()) > self.maturity_date

    def days_until_maturity(self, as_of: datetime | None = None) -> int:
        if self.maturity_date is None:
            return 0
        return (self.maturity_date.date() - (as_of or utcnow()).date()).days

    # lifecycle ---------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status is InvestmentStatus.ACTIVE

    def is_high_risk(self) -> bool:
        return self.risk_level is RiskLevel.HIGH

    def transition_to(self, target: InvestmentStatus) -> None:
        current = self.status or InvestmentStatus.PENDING
        if not current.can_transition_to(target):
            raise BusinessRuleError(
                f"Cannot transition from {current.value} to {getattr(target, 'value', target)}"
            )
        self.status = target
        self.last_updated = utcnow()

    # validation --------------------------------------------------------

    def has_valid_ticker(self) -> bool:
        return bool(self.ticker) and TICKER_PATTERN.match(self.ticker) is not None

    def is_valid(self) -> bool:
        if not self.name or not self.name.strip() or self.investment_type is None:
            return False
        if self.amount is None or self.amount <= 0 or self.client is None:
            return False
        return self.ticker is None or self.has_valid_ticker()

    def __repr__(self) -> str:
        return f"Investment(id={self.id!r}, ticker={self.ticker!r}, status={self.status!r})"
