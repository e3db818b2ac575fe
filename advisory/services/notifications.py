"""Template-driven user notifications.

Every notification is stored as an in-app :class:`~advisory.models.Notification`
row. Email and SMS delivery is represented by a log record on the
``advisory.services.notifications`` logger; there is no outbound transport.
Callers own the transaction: nothing here commits.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from sqlalchemy.orm import Session

from advisory.core.logger import get_logger
from advisory.domain.roles import Role
from advisory.models import Notification, NotificationTemplate, UserAccount
from advisory.repositories import SystemConfigRepository, TemplateRepository, UserRepository

LOGGER = get_logger(__name__)

UPGRADE_REQUEST_TEMPLATE = "UPGRADE_REQUEST_SUBMITTED"
UPGRADE_DECISION_TEMPLATE = "UPGRADE_REQUEST_DECISION"
INVESTMENT_CREATED_TEMPLATE = "INVESTMENT_CREATED"
PASSWORD_RESET_TEMPLATE = "PASSWORD_RESET"
EMPLOYEE_WELCOME_TEMPLATE = "EMPLOYEE_WELCOME"
MAINTENANCE_TEMPLATE = "MAINTENANCE_NOTICE"
CONTACT_REQUEST_TEMPLATE = "CONTACT_REQUEST_RECEIVED"

# name, type, category, subject, content, variables
DEFAULT_TEMPLATES: tuple[tuple[str, str, str, str, str, str], ...] = (
    (
        UPGRADE_REQUEST_TEMPLATE,
        "EMAIL",
        "ACCOUNT",
        "New upgrade request from {{guestName}}",
        "{{guestName}} ({{guestEmail}}) has requested a client account. Request #{{requestId}} is awaiting review.",
        "guestName,guestEmail,requestId",
    ),
    (
        UPGRADE_DECISION_TEMPLATE,
        "EMAIL",
        "ACCOUNT",
        "Your upgrade request was {{decision}}",
        "Hello {{firstName}}, your request to become a client was {{decision}}.{{reason}}",
        "firstName,decision",
    ),
    (
        INVESTMENT_CREATED_TEMPLATE,
        "EMAIL",
        "INVESTMENT",
        "New investment: {{investmentName}}",
        "Hello {{firstName}}, your advisor {{advisorName}} created the investment {{investmentName}} ({{ticker}}) for {{amount}}.",
        "firstName,advisorName,investmentName,amount",
    ),
    (
        PASSWORD_RESET_TEMPLATE,
        "EMAIL",
        "SECURITY",
        "Your password has been reset",
        "Hello {{firstName}}, an administrator reset your password. Your temporary password is {{temporaryPassword}}.",
        "firstName,temporaryPassword",
    ),
    (
        EMPLOYEE_WELCOME_TEMPLATE,
        "EMAIL",
        "ACCOUNT",
        "Welcome to Due Diligence Finance",
        "Welcome {{firstName}}! Your employee id is {{employeeId}}. Sign in with {{email}}.",
        "firstName,employeeId,email",
    ),
    (
        MAINTENANCE_TEMPLATE,
        "PUSH",
        "SYSTEM",
        "Scheduled maintenance",
        "{{message}}",
        "message",
    ),
    (
        CONTACT_REQUEST_TEMPLATE,
        "EMAIL",
        "MARKETING",
        "New contact request from {{name}}",
        "{{name}} ({{email}}) wrote: {{message}}",
        "name,email,message",
    ),
)


@dataclass(frozen=True)
class RenderedMessage:
    subject: str | None
    body: str
    channel: str
    template: str | None


class NotificationService:
    """Render templates by name and deliver them to users."""

    def __init__(
        self,
        session: Session,
        *,
        templates: TemplateRepository | None = None,
        users: UserRepository | None = None,
        config: SystemConfigRepository | None = None,
    ) -> None:
        self._session = session
        self._templates = templates or TemplateRepository(session)
        self._users = users or UserRepository(session)
        self._config = config or SystemConfigRepository(session)

    def render(
        self,
        name: str,
        values: Mapping[str, object],
        *,
        fallback_subject: str | None,
        fallback_body: str,
    ) -> RenderedMessage:
        """Render the active template ``name``; use the fallback text when there is none."""

        template: NotificationTemplate | None = self._templates.get_by_name(name)
        if template is None or not template.is_active:
            LOGGER.debug("Template %s not available, using literal text", name)
            return RenderedMessage(fallback_subject, fallback_body, "EMAIL", None)

        str_values = {key: "" if value is None else str(value) for key, value in values.items()}
        missing = template.missing_variables(str_values)
        if missing:
            LOGGER.warning("Template %s rendered without %s", name, ", ".join(missing))
        return RenderedMessage(
            subject=template.process_subject(str_values),
            body=template.process_template(str_values) or fallback_body,
            channel=template.template_type,
            template=template.name,
        )

    def deliver(self, account: UserAccount, kind: str, message: RenderedMessage) -> Notification:
        """Store an in-app notification and log the outbound copy."""

        notification = Notification(user_account=account, type=kind, message=message.body)
        self._session.add(notification)

        config = self._config.get()
        if message.channel == "EMAIL" and (config is None or config.email_notifications_enabled):
            LOGGER.info(
                "Email dispatched",
                extra={"to": account.email, "subject": message.subject, "template": message.template},
            )
        elif message.channel == "SMS" and config is not None and config.sms_notifications_enabled:
            LOGGER.info("SMS dispatched", extra={"to": account.phone_number, "template": message.template})
        return notification

    def _send(
        self,
        account: UserAccount,
        kind: str,
        template: str,
        values: Mapping[str, object],
        *,
        subject: str | None,
        body: str,
    ) -> Notification:
        rendered = self.render(template, values, fallback_subject=subject, fallback_body=body)
        return self.deliver(account, kind, rendered)

    def _admins(self) -> list[UserAccount]:
        return self._users.list_by_role(Role.ADMIN)

    # helpers -----------------------------------------------------------

    def notify_admins_of_upgrade_request(self, guest: UserAccount, request_id: int) -> list[Notification]:
        values = {"guestName": guest.full_name, "guestEmail": guest.email, "requestId": request_id}
        return [
            self._send(
                admin,
                "UPGRADE_REQUEST",
                UPGRADE_REQUEST_TEMPLATE,
                values,
                subject=f"New upgrade request from {guest.full_name}",
                body=f"{guest.full_name} ({guest.email}) has requested a client account.",
            )
            for admin in self._admins()
        ]

    def notify_admins_of_contact_request(self, name: str, email: str, message: str) -> list[Notification]:
        values = {"name": name, "email": email, "message": message}
        return [
            self._send(
                admin,
                "CONTACT_REQUEST",
                CONTACT_REQUEST_TEMPLATE,
                values,
                subject=f"New contact request from {name}",
                body=f"{name} ({email}) wrote: {message}",
            )
            for admin in self._admins()
        ]

    def notify_user_of_upgrade_decision(
        self, account: UserAccount, approved: bool, reason: str | None = None
    ) -> Notification:
        decision = "approved" if approved else "rejected"
        suffix = f" Reason: {reason}" if reason else ""
        return self._send(
            account,
            "UPGRADE_DECISION",
            UPGRADE_DECISION_TEMPLATE,
            {"firstName": account.first_name, "decision": decision, "reason": suffix},
            subject=f"Your upgrade request was {decision}",
            body=f"Your request to become a client was {decision}.{suffix}",
        )

    def notify_client_of_investment(self, client_account: UserAccount, advisor_name: str, investment) -> Notification:
        values = {
            "firstName": client_account.first_name,
            "advisorName": advisor_name,
            "investmentName": investment.name,
            "ticker": investment.ticker or "",
            "amount": investment.amount,
        }
        return self._send(
            client_account,
            "INVESTMENT_CREATED",
            INVESTMENT_CREATED_TEMPLATE,
            values,
            subject=f"New investment: {investment.name}",
            body=f"Your advisor {advisor_name} created the investment {investment.name}.",
        )

    def send_password_reset(self, account: UserAccount, temporary_password: str) -> Notification:
        return self._send(
            account,
            "PASSWORD_RESET",
            PASSWORD_RESET_TEMPLATE,
            {"firstName": account.first_name, "temporaryPassword": temporary_password},
            subject="Your password has been reset",
            body="An administrator reset your password. Check your email for the temporary password.",
        )

    def send_employee_welcome(self, account: UserAccount, employee_id: str | None) -> Notification:
        return self._send(
            account,
            "WELCOME",
            EMPLOYEE_WELCOME_TEMPLATE,
            {"firstName": account.first_name, "employeeId": employee_id or "", "email": account.email},
            subject="Welcome to Due Diligence Finance",
            body=f"Welcome {account.first_name}! Your employee id is {employee_id}.",
        )

    def broadcast_maintenance(self, message: str) -> int:
        """Notify every active user; returns the number of notifications created."""

        recipients = [
            account
            for role in Role
            for account in self._users.list_by_role(role)
        ]
        for account in recipients:
            self._send(
                account,
                "MAINTENANCE",
                MAINTENANCE_TEMPLATE,
                {"message": message},
                subject="Scheduled maintenance",
                body=message,
            )
        LOGGER.info("Maintenance notice broadcast", extra={"recipients": len(recipients)})
        return len(recipients)


__all__ = [
    "DEFAULT_TEMPLATES",
    "NotificationService",
    "RenderedMessage",
]
