"""Data access for role profiles: clients, employees, admins and guests."""
from __future__ import annotations

from sqlalchemy import func, or_, select

from advisory.domain.statuses import UpgradeRequestStatus
from advisory.models import (
    Client,
    Employee,
    Guest,
    GuestUpgradeRequest,
    UserAccount,
)

from .base import BaseRepository


class ClientRepository(BaseRepository):
    def get(self, client_pk: int) -> Client | None:
        return self._get(Client, client_pk)

    def get_by_email(self, email: str) -> Client | None:
        statement = (
            select(Client)
            .join(Client.user_account)
            .where(func.lower(UserAccount.email) == email.strip().lower())
        )
        return self._session.execute(statement).scalars().first()

    def list_for_employee(self, employee: Employee) -> list[Client]:
        statement = (
            select(Client)
            .where(Client.assigned_employee_id == employee.id)
            .order_by(Client.id)
        )
        return list(self._session.execute(statement).scalars())

    def search_for_employee(self, employee: Employee, query: str) -> list[Client]:
        statement = (
            select(Client)
            .join(Client.user_account)
            .where(Client.assigned_employee_id == employee.id)
        )
        pattern = self._search_pattern(query)
        if pattern:
            statement = statement.where(
                or_(
                    func.lower(UserAccount.email).like(pattern),
                    func.lower(UserAccount.first_name).like(pattern),
                    func.lower(UserAccount.last_name).like(pattern),
                    func.lower(Client.client_id).like(pattern),
                )
            )
        return list(self._session.execute(statement.order_by(Client.id)).scalars())


class EmployeeRepository(BaseRepository):
    def get(self, employee_pk: int) -> Employee | None:
        return self._get(Employee, employee_pk)

    def get_by_email(self, email: str) -> Employee | None:
        statement = (
            select(Employee)
            .join(Employee.user_account)
            .where(func.lower(UserAccount.email) == email.strip().lower())
        )
        return self._session.execute(statement).scalars().first()


class GuestRepository(BaseRepository):
    def get_by_email(self, email: str) -> Guest | None:
        statement = (
            select(Guest)
            .join(Guest.user_account)
            .where(func.lower(UserAccount.email) == email.strip().lower())
        )
        return self._session.execute(statement).scalars().first()

    def get_upgrade_request(self, request_id: int) -> GuestUpgradeRequest | None:
        return self._get(GuestUpgradeRequest, request_id)

    def latest_upgrade_request(self, account: UserAccount) -> GuestUpgradeRequest | None:
        statement = (
            select(GuestUpgradeRequest)
            .where(GuestUpgradeRequest.user_account_id == account.id)
            .order_by(GuestUpgradeRequest.request_date.desc(), GuestUpgradeRequest.id.desc())
        )
        return self._session.execute(statement).scalars().first()

    def pending_request_for(self, account: UserAccount) -> GuestUpgradeRequest | None:
        statement = select(GuestUpgradeRequest).where(
            GuestUpgradeRequest.user_account_id == account.id,
            GuestUpgradeRequest.status == UpgradeRequestStatus.PENDING,
        )
        return self._session.execute(statement).scalars().first()

    def pending_requests(self) -> list[GuestUpgradeRequest]:
        statement = (
            select(GuestUpgradeRequest)
            .where(GuestUpgradeRequest.status == UpgradeRequestStatus.PENDING)
            .order_by(GuestUpgradeRequest.request_date, GuestUpgradeRequest.id)
        )
        return list(self._session.execute(statement).scalars())

    def count_pending_requests(self) -> int:
        return self._count(
            select(GuestUpgradeRequest.id).where(
                GuestUpgradeRequest.status == UpgradeRequestStatus.PENDING
            )
        )
