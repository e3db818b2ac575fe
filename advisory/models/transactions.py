"""Trade and cash-flow history."""
from __future__ import annotations

import time
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from advisory.domain.finance import ZERO
from advisory.domain.statuses import TransactionStatus, TransactionType
from advisory.models.base import ID_TYPE, Base, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from advisory.models.investments import Investment
    from advisory.models.portfolio import Portfolio
    from advisory.models.profiles import Client


def new_reference_number() -> str:
    return f"TXN-{int(time.time() * 1000)}"


class Transaction(Base):
    __tablename__ = "transaction"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("client.id"), index=True)
    investment_id: Mapped[int | None] = mapped_column(ForeignKey("investment.id", ondelete="SET NULL"))
    portfolio_id: Mapped[int | None] = mapped_column(ForeignKey("portfolio.id", ondelete="SET NULL"))
    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType, native_enum=False, length=16), nullable=False
    )
    ticker: Mapped[str | None] = mapped_column(String(5))
    shares: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    price_per_share: Mapped[Decimal | None] = mapped_column(Numeric(18, 6))
    fee: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=ZERO)
    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, native_enum=False, length=16),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    transaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    description: Mapped[str | None] = mapped_column(String(500))
    reference_number: Mapped[str] = mapped_column(
        String(32), nullable=False, default=new_reference_number
    )

    client: Mapped["Client | None"] = relationship(back_populates="transactions")
    investment: Mapped["Investment | None"] = relationship()
    portfolio: Mapped["Portfolio | None"] = relationship()

    def calculate_total_amount(self) -> Decimal:
        """Set ``total_amount`` from shares, price and fee and return it.

        Fees are added to purchases and deducted from sales.
        """

        if self.shares is None or self.price_per_share is None or self.shares == 0:
            self.total_amount = ZERO
            return self.total_amount
        subtotal = self.shares * self.price_per_share
        fee = self.fee or ZERO
        if self.transaction_type is TransactionType.BUY:
            self.total_amount = subtotal + fee
        elif self.transaction_type is TransactionType.SELL:
            self.total_amount = subtotal - fee
        else:
            self.total_amount = subtotal
        return self.total_amount

    @property
    def net_amount(self) -> Decimal:
        return (self.total_amount or ZERO) - (self.fee or ZERO)

    def is_valid(self) -> bool:
        if self.transaction_type is None:
            return False
        if self.fee is not None and self.fee < 0:
            return False
        if self.transaction_type in (TransactionType.BUY, TransactionType.SELL):
            return bool(
                self.shares is not None
                and self.shares > 0
                and self.price_per_share is not None
                and self.price_per_share > 0
            )
        if self.transaction_type is TransactionType.DIVIDEND:
            return self.total_amount is not None and self.total_amount > 0
        return True
