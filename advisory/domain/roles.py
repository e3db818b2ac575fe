"""User roles ordered by privilege."""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role; upgrades only ever move up this ordering."""

    GUEST = "GUEST"
    CLIENT = "CLIENT"
    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"

    @property
    def level(self) -> int:
        return _LEVELS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def is_higher_than_or_equal_to(self, other: "Role") -> bool:
        return self.level >= other.level

    def can_upgrade_to(self, target: "Role") -> bool:
        """Return ``True`` when ``target`` is strictly above this role."""

        return target.level > self.level

    @property
    def is_admin(self) -> bool:
        return self is Role.ADMIN

    @property
    def can_manage_users(self) -> bool:
        return self in (Role.EMPLOYEE, Role.ADMIN)

    @property
    def can_approve_client_upgrades(self) -> bool:
        return self in (Role.EMPLOYEE, Role.ADMIN)

    @classmethod
    def default(cls) -> "Role":
        return cls.GUEST

    @classmethod
    def from_string(cls, value: str) -> "Role":
        try:
            return cls(value.strip().upper())
        except (AttributeError, ValueError) as exc:
            raise ValueError(f"Unknown role: {value}") from exc


_LEVELS = {Role.GUEST: 0, Role.CLIENT: 1, Role.EMPLOYEE: 2, Role.ADMIN: 3}

_DESCRIPTIONS = {
    Role.GUEST: "Guest user with limited access",
    Role.CLIENT: "Client with investment portfolio",
    Role.EMPLOYEE: "Employee who manages client accounts",
    Role.ADMIN: "System administrator with full access",
}

__all__ = ["Role"]
