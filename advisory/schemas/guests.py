"""Schemas for the public guest portal and the guest upgrade flow."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from advisory.models import ContactRequest, Guest, GuestUpgradeRequest

from .common import UserSummary


class UpgradeRequestRead(BaseModel):
    id: int
    user_id: int
    email: str | None = None
    name: str | None = None
    status: str
    request_date: datetime
    details: str | None = None
    additional_info: dict[str, Any] = Field(default_factory=dict)
    processed_date: datetime | None = None
    processed_by: str | None = None
    rejection_reason: str | None = None

    @classmethod
    def from_request(cls, request: GuestUpgradeRequest) -> "UpgradeRequestRead":
        account = request.user_account
        return cls(
            id=request.id,
            user_id=request.user_account_id,
            email=account.email if account else None,
            name=account.full_name if account else None,
            status=request.status.value,
            request_date=request.request_date,
            details=request.details,
            additional_info=dict(request.additional_info or {}),
            processed_date=request.processed_date,
            processed_by=request.processed_by,
            rejection_reason=request.rejection_reason,
        )


class GuestDetail(BaseModel):
    """Guest profile with the state of its latest upgrade request."""

    id: int
    guest_id: str | None = None
    user: UserSummary
    registration_date: datetime
    last_activity_date: datetime | None = None
    interest_area: str | None = None
    upgrade_requested: bool = False
    interest_level: str
    latest_request: UpgradeRequestRead | None = None

    @classmethod
    def from_guest(cls, guest: Guest, latest: GuestUpgradeRequest | None = None) -> "GuestDetail":
        return cls(
            id=guest.id,
            guest_id=guest.guest_id,
            user=UserSummary.from_account(guest.user_account),
            registration_date=guest.registration_date,
            last_activity_date=guest.last_activity_date,
            interest_area=guest.interest_area,
            upgrade_requested=guest.upgrade_requested,
            interest_level=guest.interest_level(),
            latest_request=UpgradeRequestRead.from_request(latest) if latest else None,
        )


class GuestProfileUpdate(BaseModel):
    phone_number: str | None = None
    address: str | None = None
    interest_area: str | None = None


class UpgradeRequestCreate(BaseModel):
    """Know-your-customer answers submitted with an upgrade request."""

    phone_number: str | None = None
    address: str | None = None
    occupation: str | None = None
    annual_income: Decimal | None = None
    investment_goals: str | None = None
    risk_tolerance: str | None = None
    expected_investment_amount: Decimal | None = None
    source_of_funds: str | None = None
    agree_to_identity_verification: bool = False
    accept_terms_and_conditions: bool = False


class UpgradeSubmitted(BaseModel):
    message: str
    request_id: int
    status: str
    estimated_processing_time: str


class EligibilityRead(BaseModel):
    eligible: bool
    reason: str | None = None


class ProjectionRequest(BaseModel):
    amount: Decimal
    years: int


class ProjectionRow(BaseModel):
    scenario: str
    rate: float
    future_value: Decimal
    total_return: Decimal
    return_percentage: Decimal

    @field_serializer("future_value", "total_return", "return_percentage")
    def _serialize_decimal(self, value: Decimal) -> str:
        return str(value)


class ProjectionResponse(BaseModel):
    initial_investment: Decimal
    investment_period: int
    projections: list[ProjectionRow] = Field(default_factory=list)
    disclaimer: str

    @field_serializer("initial_investment")
    def _serialize_initial_investment(self, value: Decimal) -> str:
        return str(value)


class ContactRequestCreate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    subject: str | None = None
    message: str | None = None


class ContactRequestRead(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    subject: str | None = None
    message: str
    source: str
    status: str
    created_at: datetime

    @classmethod
    def from_contact(cls, contact: ContactRequest) -> "ContactRequestRead":
        return cls(
            id=contact.id,
            name=contact.name,
            email=contact.email,
            phone=contact.phone,
            subject=contact.subject,
            message=contact.message,
            source=contact.source,
            status=contact.status.value,
            created_at=contact.created_at,
        )


__all__ = [
    "ContactRequestCreate",
    "ContactRequestRead",
    "EligibilityRead",
    "GuestDetail",
    "GuestProfileUpdate",
    "ProjectionRequest",
    "ProjectionResponse",
    "ProjectionRow",
    "UpgradeRequestCreate",
    "UpgradeRequestRead",
    "UpgradeSubmitted",
]
