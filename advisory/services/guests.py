"""Guest-facing operations: public information, projections and upgrade requests."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from sqlalchemy.orm import Session

from advisory.core.exceptions import EntityNotFoundError, ValidationError
from advisory.core.logger import get_logger
from advisory.domain.finance import HUNDRED, to_decimal
from advisory.domain.roles import Role
from advisory.domain.validation import is_valid_email
from advisory.models import ContactRequest, Guest, GuestUpgradeRequest, UserAccount
from advisory.repositories import GuestRepository, UserRepository

from .notifications import NotificationService
from .support import get_account

LOGGER = get_logger(__name__)

COMPANY_NAME = "Due Diligence Finance"
ESTIMATED_PROCESSING_TIME = "2-3 business days"
PROJECTION_DISCLAIMER = (
    "These are projections based on historical market performance. Actual returns may vary."
)
MAX_PROJECTION_YEARS = 30

# (label, annual rate)
PROJECTION_SCENARIOS = (
    ("Conservative (4%)", Decimal("0.04")),
    ("Moderate (6%)", Decimal("0.06")),
    ("Balanced (8%)", Decimal("0.08")),
    ("Growth (10%)", Decimal("0.10")),
    ("Aggressive (12%)", Decimal("0.12")),
)

PUBLIC_INFORMATION: dict[str, Any] = {
    "company_name": COMPANY_NAME,
    "company_description": (
        "Professional investment management services with a focus on personalized "
        "portfolios and US stock market investments."
    ),
    "services": [
        "Personalized Investment Portfolios",
        "Market Analysis and Research",
        "Tax-Efficient Investing",
        "Risk Management Strategies",
        "Retirement Planning",
    ],
    "investment_options": [
        "US Stocks (NYSE, NASDAQ)",
        "ETFs",
        "Mutual Funds",
        "Bonds",
        "Diversified Portfolios",
    ],
    "minimum_investment": "$10,000",
    "contact_info": {
        "email": "info@duediligencefinance.com",
        "phone": "+1 (555) 123-4567",
        "address": "123 Financial District, New York, NY 10006",
    },
    "office_hours": "Monday-Friday 9:00 AM - 5:00 PM EST",
}

INVESTMENT_OPTIONS: tuple[dict[str, Any], ...] = (
    {
        "name": "Conservative Portfolio",
        "description": "Low-risk investments focused on capital preservation",
        "expected_return": "4-6% annually",
        "risk_level": "LOW",
        "minimum_investment": 10000.0,
    },
    {
        "name": "Balanced Portfolio",
        "description": "Mix of stocks and bonds for moderate growth",
        "expected_return": "6-8% annually",
        "risk_level": "MODERATE",
        "minimum_investment": 10000.0,
    },
    {
        "name": "Growth Portfolio",
        "description": "Higher-risk investments targeting capital appreciation",
        "expected_return": "8-12% annually",
        "risk_level": "HIGH",
        "minimum_investment": 25000.0,
    },
    {
        "name": "Custom Portfolio",
        "description": "Personalized investment strategy based on your goals",
        "expected_return": "Varies",
        "risk_level": "CUSTOM",
        "minimum_investment": 50000.0,
    },
)

# Payload keys copied into ``GuestUpgradeRequest.additional_info``.
KYC_FIELDS = (
    "phone_number",
    "address",
    "occupation",
    "annual_income",
    "investment_goals",
    "risk_tolerance",
    "expected_investment_amount",
    "source_of_funds",
    "agree_to_identity_verification",
    "accept_terms_and_conditions",
)

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class UpgradeEligibility:
    eligible: bool
    reason: str | None = None


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def project_returns(amount: Decimal, years: int) -> list[dict[str, Any]]:
    """Compound ``amount`` yearly over ``years`` for each scenario rate."""

    rows = []
    for label, rate in PROJECTION_SCENARIOS:
        future_value = amount * (1 + rate) ** years
        total_return = future_value - amount
        rows.append(
            {
                "scenario": label,
                "rate": float(rate * HUNDRED),
                "future_value": _money(future_value),
                "total_return": _money(total_return),
                "return_percentage": _money(total_return / amount * HUNDRED),
            }
        )
    return rows


class GuestService:
    def __init__(
        self,
        session: Session,
        *,
        users: UserRepository | None = None,
        guests: GuestRepository | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._session = session
        self._users = users or UserRepository(session)
        self._guests = guests or GuestRepository(session)
        self._notifications = notifications or NotificationService(session, users=self._users)

    def _guest(self, email: str) -> Guest:
        guest = self._guests.get_by_email(email)
        if guest is None:
            raise EntityNotFoundError("Guest profile not found")
        return guest

    def get_details(self, email: str) -> tuple[Guest, GuestUpgradeRequest | None]:
        """Return the guest profile together with its latest upgrade request."""

        guest = self._guest(email)
        return guest, self._guests.latest_upgrade_request(guest.user_account)

    @staticmethod
    def get_public_information() -> dict[str, Any]:
        return dict(PUBLIC_INFORMATION)

    @staticmethod
    def get_investment_options() -> list[dict[str, Any]]:
        return [dict(option) for option in INVESTMENT_OPTIONS]

    @staticmethod
    def calculate_projected_returns(amount: object, years: object) -> dict[str, Any]:
        try:
            principal = to_decimal(amount, default=None)
        except ValueError as exc:
            raise ValidationError("Investment amount must be positive") from exc
        if principal is None or principal <= 0:
            raise ValidationError("Investment amount must be positive")
        try:
            period = int(years) if years is not None else 0
        except (TypeError, ValueError) as exc:
            raise ValidationError("Investment period must be between 1 and 30 years") from exc
        if not 1 <= period <= MAX_PROJECTION_YEARS:
            raise ValidationError("Investment period must be between 1 and 30 years")

        return {
            "initial_investment": principal,
            "investment_period": period,
            "projections": project_returns(principal, period),
            "disclaimer": PROJECTION_DISCLAIMER,
        }

    def check_upgrade_eligibility(self, email: str) -> UpgradeEligibility:
        account = get_account(self._users, email)
        return self._eligibility(account)

    def _eligibility(self, account: UserAccount) -> UpgradeEligibility:
        if self._guests.pending_request_for(account) is not None:
            return UpgradeEligibility(False, "You already have a pending upgrade request")
        if account.role is not Role.GUEST:
            return UpgradeEligibility(False, "Only guest accounts can request upgrades")
        return UpgradeEligibility(True)

    def request_upgrade(self, email: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        account = get_account(self._users, email)
        eligibility = self._eligibility(account)
        if not eligibility.eligible:
            raise ValidationError(eligibility.reason)

        additional_info = {
            key: None if payload.get(key) is None else str(payload[key])
            for key in KYC_FIELDS
        }
        request = GuestUpgradeRequest(
            user_account=account,
            details=self._describe(payload),
            additional_info=additional_info,
        )
        self._session.add(request)
        if account.guest is not None:
            account.guest.request_upgrade()
            account.guest.touch()
        self._session.flush()

        self._notifications.notify_admins_of_upgrade_request(account, request.id)
        self._session.commit()
        LOGGER.info("Upgrade request submitted", extra={"user_id": account.id, "request_id": request.id})
        return {
            "message": "Upgrade request submitted successfully",
            "request_id": request.id,
            "status": request.status.value,
            "estimated_processing_time": ESTIMATED_PROCESSING_TIME,
        }

    @staticmethod
    def _describe(payload: Mapping[str, Any]) -> str:
        def amount(key: str) -> str:
            try:
                value = to_decimal(payload.get(key))
            except ValueError:
                return str(payload.get(key))
            return f"${value:,.2f}"

        return (
            f"Investment Goals: {payload.get('investment_goals')}\n"
            f"Risk Tolerance: {payload.get('risk_tolerance')}\n"
            f"Expected Investment: {amount('expected_investment_amount')}\n"
            f"Annual Income: {amount('annual_income')}"
        )

    def get_upgrade_request(self, email: str) -> GuestUpgradeRequest:
        account = get_account(self._users, email)
        request = self._guests.latest_upgrade_request(account)
        if request is None:
            raise EntityNotFoundError("No upgrade request found")
        return request

    def cancel_upgrade_request(self, email: str) -> None:
        account = get_account(self._users, email)
        request = self._guests.pending_request_for(account)
        if request is None:
            raise EntityNotFoundError("No pending upgrade request found")
        self._guests.delete(request)
        if account.guest is not None:
            account.guest.cancel_upgrade_request()
        self._session.commit()

    def update_profile(self, email: str, changes: Mapping[str, Any]) -> Guest:
        guest = self._guest(email)
        account = guest.user_account
        if "phone_number" in changes:
            account.phone_number = changes["phone_number"] or None
        if "address" in changes:
            account.address = changes["address"] or None
        if "interest_area" in changes:
            guest.interest_area = changes["interest_area"] or None
        guest.touch()
        self._session.commit()
        return guest

    def submit_contact_request(self, payload: Mapping[str, Any], email: str | None = None) -> ContactRequest:
        """Record a public contact request and tell the administrators about it."""

        name = (payload.get("name") or "").strip()
        contact_email = (payload.get("email") or "").strip()
        message = (payload.get("message") or "").strip()
        if not name:
            raise ValidationError("Name is required")
        if not contact_email:
            raise ValidationError("Email is required")
        if not is_valid_email(contact_email):
            raise ValidationError("Invalid email format")
        if not message:
            raise ValidationError("Message is required")

        account = self._users.get_by_email(email) if email else None
        contact = ContactRequest(
            user_account=account,
            name=name,
            email=contact_email,
            phone=payload.get("phone"),
            subject=payload.get("subject"),
            message=message,
            source="GUEST_PORTAL",
        )
        self._session.add(contact)
        self._notifications.notify_admins_of_contact_request(name, contact_email, message)
        self._session.commit()
        LOGGER.info("Contact request received", extra={"contact_id": contact.id})
        return contact


__all__ = [
    "GuestService",
    "INVESTMENT_OPTIONS",
    "PUBLIC_INFORMATION",
    "UpgradeEligibility",
    "project_returns",
]
