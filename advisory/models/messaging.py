"""Messages, in-app notifications, notification templates and contact requests."""
from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from advisory.core.exceptions import BusinessRuleError
from advisory.domain.statuses import ContactStatus
from advisory.models.base import ID_TYPE, Base, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from advisory.models.accounts import UserAccount

MAX_SUBJECT_LENGTH = 200
MAX_CONTENT_LENGTH = 4000

TEMPLATE_TYPES = frozenset({"EMAIL", "SMS", "PUSH"})
TEMPLATE_CATEGORIES = frozenset(
    {"ACCOUNT", "INVESTMENT", "SECURITY", "SYSTEM", "MARKETING", "COMPLIANCE"}
)
_VARIABLE = re.compile(r"\{\{([^}]+)\}\}")


class Message(Base):
    """Direct message between a client and an advisor."""

    __tablename__ = "message"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(ForeignKey("user_account.id"), nullable=False)
    recipient_id: Mapped[int] = mapped_column(ForeignKey("user_account.id"), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(MAX_SUBJECT_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(String(MAX_CONTENT_LENGTH), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime)

    sender: Mapped["UserAccount"] = relationship(foreign_keys=[sender_id])
    recipient: Mapped["UserAccount"] = relationship(foreign_keys=[recipient_id])

    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = utcnow()


class Notification(Base):
    __tablename__ = "notification"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_account_id: Mapped[int] = mapped_column(
        ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user_account: Mapped["UserAccount"] = relationship()


class NotificationTemplate(Base):
    """Named message body with ``{{variable}}`` placeholders."""

    __tablename__ = "notification_template"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    template_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(String(50))
    subject: Mapped[str | None] = mapped_column(String(500))
    content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))
    variables: Mapped[str | None] = mapped_column(String(1000))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    @staticmethod
    def _placeholders(text: str | None) -> list[str]:
        if not text:
            return []
        found: list[str] = []
        for match in _VARIABLE.finditer(text):
            name = match.group(1).strip()
            if name not in found:
                found.append(name)
        return found

    @staticmethod
    def _substitute(text: str | None, values: dict[str, str] | None) -> str | None:
        if text is None or values is None:
            return text
        for key, value in values.items():
            text = text.replace("{{" + key + "}}", str(value))
        return text

    def extract_variables(self) -> list[str]:
        return self._placeholders(self.content)

    def extract_subject_variables(self) -> list[str]:
        return self._placeholders(self.subject)

    def process_template(self, values: dict[str, str] | None) -> str | None:
        return self._substitute(self.content, values)

    def process_subject(self, values: dict[str, str] | None) -> str | None:
        return self._substitute(self.subject, values)

    @property
    def required_variables(self) -> list[str]:
        if not self.variables:
            return []
        return [name.strip() for name in self.variables.split(",") if name.strip()]

    def missing_variables(self, values: dict[str, str] | None) -> list[str]:
        provided = values or {}
        return [name for name in self.required_variables if name not in provided]

    def has_all_required_variables(self, values: dict[str, str] | None) -> bool:
        return not self.missing_variables(values)

    def is_valid(self) -> bool:
        if not self.name or not self.name.strip():
            return False
        if not self.content or not self.content.strip():
            return False
        if self.template_type not in TEMPLATE_TYPES:
            return False
        if self.category is not None and self.category not in TEMPLATE_CATEGORIES:
            return False
        if self.template_type == "EMAIL":
            return bool(self.subject and self.subject.strip())
        return True

    def clone(self, new_name: str) -> "NotificationTemplate":
        return NotificationTemplate(
            name=new_name,
            template_type=self.template_type,
            category=self.category,
            subject=self.subject,
            content=self.content,
            description=self.description,
            variables=self.variables,
            is_active=self.is_active,
            created_by=self.created_by,
        )


class ContactRequest(Base):
    """Enquiry submitted from the public site or the guest portal."""

    __tablename__ = "contact_request"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("user_account.id", ondelete="SET NULL")
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32))
    subject: Mapped[str | None] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(String(2000), nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="WEBSITE")
    status: Mapped[ContactStatus] = mapped_column(
        SQLEnum(ContactStatus, native_enum=False, length=16),
        nullable=False,
        default=ContactStatus.NEW,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    user_account: Mapped["UserAccount | None"] = relationship()

    def move_to(self, target: ContactStatus) -> None:
        current = self.status or ContactStatus.NEW
        if not current.can_transition_to(target):
            raise BusinessRuleError(f"Cannot move contact request from {current.value} to {target.value}")
        self.status = target
