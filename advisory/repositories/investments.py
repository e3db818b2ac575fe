"""Data access for investments and transactions."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select

from advisory.domain.investment_types import InvestmentType
from advisory.domain.statuses import InvestmentStatus
from advisory.models import Client, Employee, Investment, Transaction

from .base import BaseRepository


class InvestmentRepository(BaseRepository):
    def get(self, investment_pk: int) -> Investment | None:
        return self._get(Investment, investment_pk)

    def list_all(self) -> list[Investment]:
        statement = select(Investment).order_by(Investment.id)
        return list(self._session.execute(statement).scalars())

    def list_by_status(self, *statuses: InvestmentStatus) -> list[Investment]:
        statement = (
            select(Investment).where(Investment.status.in_(statuses)).order_by(Investment.id)
        )
        return list(self._session.execute(statement).scalars())

    def list_for_client(self, client: Client) -> list[Investment]:
        statement = (
            select(Investment)
            .where(Investment.client_id == client.id)
            .order_by(Investment.purchase_date.desc(), Investment.id.desc())
        )
        return list(self._session.execute(statement).scalars())

    def pending_for_employee(self, employee: Employee) -> list[Investment]:
        statement = (
            select(Investment)
            .join(Investment.client)
            .where(
                Client.assigned_employee_id == employee.id,
                Investment.status.in_(
                    (InvestmentStatus.PENDING, InvestmentStatus.UNDER_REVIEW, InvestmentStatus.APPROVED)
                ),
            )
            .order_by(Investment.purchase_date, Investment.id)
        )
        return list(self._session.execute(statement).scalars())

    def pending_before(self, cutoff: datetime) -> list[Investment]:
        statement = select(Investment).where(
            Investment.status == InvestmentStatus.PENDING,
            Investment.purchase_date < cutoff,
        )
        return list(self._session.execute(statement).scalars())

    def count(self) -> int:
        return self._count(select(Investment.id))

    def count_by_status(self) -> dict[InvestmentStatus, int]:
        statement = select(Investment.status, func.count(Investment.id)).group_by(Investment.status)
        return {status: int(total) for status, total in self._session.execute(statement)}

    def count_by_type(self) -> dict[InvestmentType, int]:
        statement = select(Investment.investment_type, func.count(Investment.id)).group_by(
            Investment.investment_type
        )
        return {kind: int(total) for kind, total in self._session.execute(statement)}

    def total_amount(self) -> Decimal:
        value = self._session.execute(select(func.coalesce(func.sum(Investment.amount), 0))).scalar()
        return self._to_decimal(value)

    # transactions ------------------------------------------------------

    def transactions_for_client(self, client: Client, *, limit: int | None = None) -> Sequence[Transaction]:
        statement = (
            select(Transaction)
            .where(Transaction.client_id == client.id)
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        )
        if limit:
            statement = statement.limit(limit)
        return list(self._session.execute(statement).scalars())

    def count_transactions(self) -> int:
        return self._count(select(Transaction.id))
