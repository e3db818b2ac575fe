"""Lifecycle enums and their transition tables."""
from __future__ import annotations

from enum import Enum


class InvestmentStatus(str, Enum):
    """Lifecycle of an investment from request to closure."""

    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    LIQUIDATED = "LIQUIDATED"
    MATURED = "MATURED"

    @property
    def description(self) -> str:
        return _INVESTMENT_STATUS_META[self][0]

    @property
    def display_name(self) -> str:
        return _INVESTMENT_STATUS_META[self][1]

    @property
    def color(self) -> str:
        return _INVESTMENT_STATUS_META[self][2]

    @property
    def is_active(self) -> bool:
        return self in (InvestmentStatus.ACTIVE, InvestmentStatus.SUSPENDED)

    @property
    def is_pending(self) -> bool:
        return self in (
            InvestmentStatus.PENDING,
            InvestmentStatus.UNDER_REVIEW,
            InvestmentStatus.APPROVED,
        )

    @property
    def is_completed(self) -> bool:
        return self in (
            InvestmentStatus.COMPLETED,
            InvestmentStatus.CANCELLED,
            InvestmentStatus.LIQUIDATED,
            InvestmentStatus.MATURED,
        )

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_INVESTMENT_STATUSES

    def allowed_transitions(self) -> frozenset["InvestmentStatus"]:
        return _INVESTMENT_TRANSITIONS.get(self, frozenset())

    def can_transition_to(self, target: "InvestmentStatus") -> bool:
        if target is None or target is self or self.is_terminal:
            return False
        return target in self.allowed_transitions()

    @classmethod
    def from_string(cls, value: str | None) -> "InvestmentStatus | None":
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


_INVESTMENT_STATUS_META = {
    InvestmentStatus.PENDING: ("Investment request is awaiting initial processing", "Pending Review", "warning"),
    InvestmentStatus.UNDER_REVIEW: ("Investment is under detailed review by the investment team", "Under Review", "info"),
    InvestmentStatus.APPROVED: ("Investment has been approved and is ready for activation", "Approved", "success"),
    InvestmentStatus.ACTIVE: ("Investment is currently active and generating returns", "Active Investment", "success"),
    InvestmentStatus.SUSPENDED: ("Active investment has been temporarily suspended", "Suspended", "warning"),
    InvestmentStatus.COMPLETED: ("Investment has been successfully completed", "Completed", "success"),
    InvestmentStatus.CANCELLED: ("Investment has been cancelled before activation", "Cancelled", "danger"),
    InvestmentStatus.REJECTED: ("Investment request has been rejected after review", "Rejected", "danger"),
    InvestmentStatus.LIQUIDATED: ("Investment has been liquidated and converted to cash", "Liquidated", "secondary"),
    InvestmentStatus.MATURED: ("Investment has reached its maturity date and concluded naturally", "Matured", "primary"),
}

_TERMINAL_INVESTMENT_STATUSES = frozenset(
    {
        InvestmentStatus.CANCELLED,
        InvestmentStatus.REJECTED,
        InvestmentStatus.LIQUIDATED,
        InvestmentStatus.MATURED,
    }
)

_INVESTMENT_TRANSITIONS = {
    InvestmentStatus.PENDING: frozenset({InvestmentStatus.UNDER_REVIEW, InvestmentStatus.CANCELLED}),
    InvestmentStatus.UNDER_REVIEW: frozenset(
        {InvestmentStatus.APPROVED, InvestmentStatus.REJECTED, InvestmentStatus.CANCELLED}
    ),
    InvestmentStatus.APPROVED: frozenset({InvestmentStatus.ACTIVE, InvestmentStatus.CANCELLED}),
    InvestmentStatus.ACTIVE: frozenset(
        {
            InvestmentStatus.COMPLETED,
            InvestmentStatus.SUSPENDED,
            InvestmentStatus.LIQUIDATED,
            InvestmentStatus.MATURED,
        }
    ),
    InvestmentStatus.SUSPENDED: frozenset(
        {InvestmentStatus.ACTIVE, InvestmentStatus.LIQUIDATED, InvestmentStatus.CANCELLED}
    ),
}


class UpgradeRequestStatus(str, Enum):
    """State of a guest's request to become a client."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_pending(self) -> bool:
        return self is UpgradeRequestStatus.PENDING

    @property
    def is_processed(self) -> bool:
        return self in (UpgradeRequestStatus.APPROVED, UpgradeRequestStatus.REJECTED)

    @property
    def description(self) -> str:
        return {
            UpgradeRequestStatus.PENDING: "Request is pending approval",
            UpgradeRequestStatus.APPROVED: "Request has been approved",
            UpgradeRequestStatus.REJECTED: "Request has been rejected",
        }[self]

    @classmethod
    def from_string(cls, value: str) -> "UpgradeRequestStatus":
        if value is None:
            raise ValueError("Status string cannot be null")
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unknown status: {value}") from exc


class TransactionType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    FEE = "FEE"
    TRANSFER = "TRANSFER"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class ContactStatus(str, Enum):
    """Triage state of a public contact request."""

    NEW = "NEW"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SPAM = "SPAM"

    @property
    def is_final(self) -> bool:
        return self in (ContactStatus.COMPLETED, ContactStatus.SPAM)

    def can_transition_to(self, target: "ContactStatus") -> bool:
        if target is None or target is self:
            return False
        return target in _CONTACT_TRANSITIONS.get(self, ())

    def next_status(self) -> "ContactStatus | None":
        """Return the default successor in the normal workflow."""

        return {
            ContactStatus.NEW: ContactStatus.ASSIGNED,
            ContactStatus.ASSIGNED: ContactStatus.IN_PROGRESS,
            ContactStatus.IN_PROGRESS: ContactStatus.COMPLETED,
        }.get(self)

    @classmethod
    def from_value(cls, value: str) -> "ContactStatus":
        if not value or not value.strip():
            raise ValueError("Status value cannot be null or empty")
        try:
            return cls(value.strip().upper().replace(" ", "_"))
        except ValueError as exc:
            raise ValueError(f"Invalid contact status: {value}") from exc


_CONTACT_TRANSITIONS = {
    ContactStatus.NEW: (ContactStatus.ASSIGNED, ContactStatus.SPAM),
    ContactStatus.ASSIGNED: (ContactStatus.IN_PROGRESS, ContactStatus.SPAM, ContactStatus.COMPLETED),
    ContactStatus.IN_PROGRESS: (ContactStatus.COMPLETED, ContactStatus.SPAM),
}


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RiskProfile(str, Enum):
    CONSERVATIVE = "CONSERVATIVE"
    MODERATE = "MODERATE"
    AGGRESSIVE = "AGGRESSIVE"


_HIGH_RISK_SECTORS = {"TECHNOLOGY", "BIOTECHNOLOGY", "CRYPTOCURRENCY"}
_LOW_RISK_SECTORS = {"UTILITIES", "CONSUMER_STAPLES", "HEALTHCARE"}


def risk_level_for_sector(sector: str | None) -> RiskLevel:
    """Classify a sector name into a coarse risk level."""

    if not sector:
        return RiskLevel.MEDIUM
    normalized = sector.strip().upper().replace(" ", "_")
    if normalized in _HIGH_RISK_SECTORS:
        return RiskLevel.HIGH
    if normalized in _LOW_RISK_SECTORS:
        return RiskLevel.LOW
    return RiskLevel.MEDIUM


__all__ = [
    "ContactStatus",
    "InvestmentStatus",
    "RiskLevel",
    "RiskProfile",
    "TransactionStatus",
    "TransactionType",
    "UpgradeRequestStatus",
    "risk_level_for_sector",
]
