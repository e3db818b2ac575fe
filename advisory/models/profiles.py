"""Role-specific profile records attached to user accounts."""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from advisory.domain.statuses import RiskProfile, UpgradeRequestStatus
from advisory.models.base import ID_TYPE, Base, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from advisory.models.accounts import UserAccount
    from advisory.models.investments import Investment
    from advisory.models.portfolio import Portfolio
    from advisory.models.transactions import Transaction

CLIENT_ID_PATTERN = re.compile(r"^[A-Z]{3}-\d{3,}$")

# Thresholds (client counts) for the workload classification.
MODERATE_WORKLOAD_FROM = 5
HEAVY_WORKLOAD_ABOVE = 10


class Employee(Base):
    """Advisor profile; owns the clients assigned to it."""

    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    employee_id: Mapped[str | None] = mapped_column(String(32), unique=True)
    user_account_id: Mapped[int] = mapped_column(
        ForeignKey("user_account.id"), unique=True, nullable=False
    )
    location_id: Mapped[str] = mapped_column(String(32), nullable=False, default="HOMEBASE")
    department: Mapped[str] = mapped_column(String(64), nullable=False, default="GENERAL")
    title: Mapped[str | None] = mapped_column(String(120))
    hire_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    user_account: Mapped["UserAccount"] = relationship(back_populates="employee")
    clients: Mapped[list["Client"]] = relationship(back_populates="assigned_employee")

    def generate_employee_id(self) -> str | None:
        """Build ``DEPT-LOC-###`` from department, location and the database id."""

        if self.id is None:
            return None
        department = self.department or ""
        location = self.location_id or ""
        dept_code = department[:3].upper() if len(department) >= 3 else "GEN"
        loc_code = location[:3].upper() if len(location) >= 3 else "HQ"
        self.employee_id = f"{dept_code}-{loc_code}-{self.id:03d}"
        return self.employee_id

    @property
    def full_name(self) -> str:
        return self.user_account.full_name if self.user_account else ""

    @property
    def client_count(self) -> int:
        return len(self.clients)

    @property
    def workload(self) -> str:
        count = self.client_count
        if count > HEAVY_WORKLOAD_ABOVE:
            return "HEAVY"
        if count >= MODERATE_WORKLOAD_FROM:
            return "MODERATE"
        return "LIGHT"

    @property
    def employee_status(self) -> str:
        return "ACTIVE" if self.is_active else "INACTIVE"


class Client(Base):
    """Investing customer, optionally assigned to an advisor."""

    __tablename__ = "client"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    client_id: Mapped[str | None] = mapped_column(String(32), unique=True)
    user_account_id: Mapped[int] = mapped_column(
        ForeignKey("user_account.id"), unique=True, nullable=False
    )
    assigned_employee_id: Mapped[int | None] = mapped_column(ForeignKey("employee.id"))
    registration_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    risk_profile: Mapped[RiskProfile] = mapped_column(
        SQLEnum(RiskProfile, native_enum=False, length=16),
        nullable=False,
        default=RiskProfile.MODERATE,
    )
    investment_goals: Mapped[str | None] = mapped_column(String(500))
    notes: Mapped[str | None] = mapped_column(Text)
    preferences: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    user_account: Mapped["UserAccount"] = relationship(back_populates="client")
    assigned_employee: Mapped[Employee | None] = relationship(back_populates="clients")
    portfolio: Mapped["Portfolio | None"] = relationship(
        back_populates="client", uselist=False, cascade="all, delete-orphan"
    )
    investments: Mapped[list["Investment"]] = relationship(
        back_populates="client", cascade="all, delete-orphan"
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="client", cascade="all, delete-orphan"
    )

    def generate_client_id(self) -> str | None:
        """Build ``LOC-###`` from the advisor's location (``CLI`` when unassigned)."""

        if self.id is None:
            return None
        location = self.assigned_employee.location_id if self.assigned_employee else None
        code = location[:3].upper() if location else "CLI"
        self.client_id = f"{code}-{self.id:03d}"
        return self.client_id

    def has_valid_client_id(self) -> bool:
        return bool(self.client_id) and CLIENT_ID_PATTERN.match(self.client_id) is not None

    def is_valid_client(self) -> bool:
        return bool(self.client_id and self.client_id.strip()) and self.user_account is not None

    def assign_to_employee(self, employee: Employee) -> None:
        self.assigned_employee = employee

    def unassign(self) -> None:
        self.assigned_employee = None

    @property
    def is_assigned(self) -> bool:
        return self.assigned_employee is not None

    @property
    def client_status(self) -> str:
        if not self.is_valid_client():
            return "INVALID"
        if not self.is_assigned:
            return "PENDING"
        return "ACTIVE"

    @property
    def full_name(self) -> str:
        return self.user_account.full_name if self.user_account else ""


class Admin(Base):
    __tablename__ = "admin"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    admin_id: Mapped[str | None] = mapped_column(String(32), unique=True)
    user_account_id: Mapped[int] = mapped_column(
        ForeignKey("user_account.id"), unique=True, nullable=False
    )
    super_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    system_access_level: Mapped[str] = mapped_column(String(32), nullable=False, default="FULL")
    department: Mapped[str | None] = mapped_column(String(120))
    access_level: Mapped[str | None] = mapped_column(String(32))
    last_login_date: Mapped[datetime | None] = mapped_column(DateTime)

    user_account: Mapped["UserAccount"] = relationship(back_populates="admin")

    def _department_contains(self, *needles: str) -> bool:
        return bool(self.department) and any(needle in self.department for needle in needles)

    @property
    def has_full_access(self) -> bool:
        return self.system_access_level == "FULL"

    @property
    def has_high_level_access(self) -> bool:
        return self.super_admin or self.access_level in ("SUPER_ADMIN", "SYSTEM_ADMIN")

    @property
    def is_system_admin(self) -> bool:
        return self.access_level in ("SUPER_ADMIN", "SYSTEM_ADMIN") or self._department_contains(
            "System Administration"
        )

    @property
    def is_financial_admin(self) -> bool:
        return self.access_level in ("SUPER_ADMIN", "FINANCIAL_ADMIN") or self._department_contains(
            "Investment Management", "Financial Operations"
        )

    @property
    def is_compliance_admin(self) -> bool:
        return self.access_level in ("SUPER_ADMIN", "COMPLIANCE_ADMIN") or self._department_contains(
            "Compliance", "Risk Management"
        )


class Guest(Base):
    """Prospect who registered but has not been upgraded to a client."""

    __tablename__ = "guest"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    guest_id: Mapped[str | None] = mapped_column(String(32), unique=True)
    user_account_id: Mapped[int] = mapped_column(
        ForeignKey("user_account.id"), unique=True, nullable=False
    )
    registration_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    last_activity_date: Mapped[datetime | None] = mapped_column(DateTime)
    interest_area: Mapped[str | None] = mapped_column(String(120))
    referral_source: Mapped[str | None] = mapped_column(String(120))
    upgrade_requested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user_account: Mapped["UserAccount"] = relationship(back_populates="guest")

    def touch(self) -> None:
        self.last_activity_date = utcnow()

    def days_registered(self, now: datetime | None = None) -> int:
        if self.registration_date is None:
            return 0
        return ((now or utcnow()) - self.registration_date).days

    def is_recently_active(self, now: datetime | None = None) -> bool:
        if self.last_activity_date is None:
            return False
        return self.last_activity_date > (now or utcnow()) - timedelta(days=30)

    def is_new_guest(self, now: datetime | None = None) -> bool:
        return self.days_registered(now) <= 7

    def is_eligible_for_upgrade(self, now: datetime | None = None) -> bool:
        if self.registration_date is None or self.upgrade_requested:
            return False
        return self.registration_date < (now or utcnow()) - timedelta(days=7)

    def request_upgrade(self) -> None:
        self.upgrade_requested = True

    def cancel_upgrade_request(self) -> None:
        self.upgrade_requested = False

    def interest_level(self, now: datetime | None = None) -> str:
        if self.upgrade_requested:
            return "High - Upgrade Requested"
        if self.is_recently_active(now):
            return "Medium - Recently Active"
        if self.is_new_guest(now):
            return "Low - New Registration"
        return "Low - Inactive"


class GuestUpgradeRequest(Base):
    """A guest's application to become a client, reviewed by an administrator."""

    __tablename__ = "guest_upgrade_request"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_account_id: Mapped[int] = mapped_column(ForeignKey("user_account.id"), nullable=False)
    status: Mapped[UpgradeRequestStatus] = mapped_column(
        SQLEnum(UpgradeRequestStatus, native_enum=False, length=16),
        nullable=False,
        default=UpgradeRequestStatus.PENDING,
    )
    request_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    details: Mapped[str | None] = mapped_column(Text)
    additional_info: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    processed_date: Mapped[datetime | None] = mapped_column(DateTime)
    processed_by: Mapped[str | None] = mapped_column(String(255))
    rejection_reason: Mapped[str | None] = mapped_column(String(500))
    income_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    identity_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    documents_provided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user_account: Mapped["UserAccount"] = relationship()

    def can_be_processed(self) -> bool:
        return self.status is UpgradeRequestStatus.PENDING

    def is_fully_verified(self) -> bool:
        return self.income_verified and self.identity_verified and self.documents_provided

    def approve(self, processed_by: str) -> None:
        self.process(UpgradeRequestStatus.APPROVED, processed_by)

    def reject(self, processed_by: str, reason: str | None) -> None:
        self.process(UpgradeRequestStatus.REJECTED, processed_by, reason)

    def process(
        self, status: UpgradeRequestStatus, processed_by: str, reason: str | None = None
    ) -> None:
        if not status.is_processed:
            raise ValueError("Status must be APPROVED or REJECTED")
        self.status = status
        self.processed_date = utcnow()
        self.processed_by = processed_by
        if status is UpgradeRequestStatus.REJECTED:
            self.rejection_reason = reason
