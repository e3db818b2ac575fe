"""User accounts, permissions and the activity audit trail."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from advisory.domain.permissions import PermissionType
from advisory.domain.roles import Role
from advisory.domain.validation import is_valid_email
from advisory.models.base import ID_TYPE, Base, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from advisory.models.profiles import Admin, Client, Employee, Guest


user_account_permission = Table(
    "user_account_permission",
    Base.metadata,
    Column("user_account_id", ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", ForeignKey("permission.id", ondelete="CASCADE"), primary_key=True),
)


class Permission(Base):
    """Persisted permission tag; one row per :class:`PermissionType`."""

    __tablename__ = "permission"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    permission_type: Mapped[PermissionType] = mapped_column(
        SQLEnum(PermissionType, native_enum=False, length=40), unique=True, nullable=False
    )
    description: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"Permission({self.permission_type.value})"


class UserAccount(Base):
    """Login identity shared by every role."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(String(80), nullable=False)
    role: Mapped[Role] = mapped_column(
        SQLEnum(Role, native_enum=False, length=16), nullable=False, default=Role.GUEST
    )
    phone_number: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(String(255))
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    password_reset_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime)
    account_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    failed_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lock_expiry_time: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    permissions: Mapped[set[Permission]] = relationship(
        secondary=user_account_permission, lazy="selectin"
    )
    client: Mapped["Client | None"] = relationship(back_populates="user_account", uselist=False)
    employee: Mapped["Employee | None"] = relationship(back_populates="user_account", uselist=False)
    admin: Mapped["Admin | None"] = relationship(back_populates="user_account", uselist=False)
    guest: Mapped["Guest | None"] = relationship(back_populates="user_account", uselist=False)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_employee(self) -> bool:
        return self.role is Role.EMPLOYEE

    @property
    def is_client(self) -> bool:
        return self.role is Role.CLIENT

    @property
    def is_guest(self) -> bool:
        return self.role is Role.GUEST

    @property
    def permission_types(self) -> set[PermissionType]:
        return {permission.permission_type for permission in self.permissions}

    def has_permission(self, permission: PermissionType) -> bool:
        return permission in self.permission_types

    def upgrade_role(self, target: Role) -> bool:
        """Move to ``target`` when it is strictly higher; never downgrade."""

        current = self.role or Role.default()
        if not current.can_upgrade_to(target):
            return False
        self.role = target
        return True

    def has_valid_email(self) -> bool:
        return is_valid_email(self.email)

    def is_complete(self) -> bool:
        return all(
            (self.email, self.password_hash, self.first_name, self.last_name, self.role)
        )

    def is_currently_locked(self, now: datetime | None = None) -> bool:
        if not self.account_locked:
            return False
        if self.lock_expiry_time is None:
            return True
        return self.lock_expiry_time > (now or utcnow())

    def release_expired_lock(self, now: datetime | None = None) -> bool:
        """Unlock an account whose lockout has run out; the attempt counter starts over."""

        if not self.account_locked or self.is_currently_locked(now):
            return False
        self.account_locked = False
        self.failed_login_attempts = 0
        self.lock_expiry_time = None
        return True

    def record_failed_login(self, max_attempts: int, lockout_minutes: int) -> bool:
        """Count a failed attempt; returns ``True`` when the account becomes locked."""

        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= max_attempts:
            self.account_locked = True
            self.lock_expiry_time = utcnow() + timedelta(minutes=lockout_minutes)
            return True
        return False

    def record_successful_login(self) -> None:
        self.failed_login_attempts = 0
        self.account_locked = False
        self.lock_expiry_time = None
        self.last_login_at = utcnow()

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.is_active = False
        self.deleted_at = utcnow()

    def __repr__(self) -> str:
        return f"UserAccount(id={self.id!r}, email={self.email!r}, role={self.role!r})"


class UserActivityLog(Base):
    """Audit entry for logins, registrations and administrative actions."""

    __tablename__ = "user_activity_log"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("user_account.id", ondelete="SET NULL")
    )
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[str | None] = mapped_column(Text)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    activity_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user_account: Mapped[UserAccount | None] = relationship()
