"""Response shapes shared by several routers."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from advisory.models import Message, UserAccount


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by state-changing endpoints."""

    message: str


class UserSummary(BaseModel):
    """Public view of an account, safe to embed in other payloads."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    phone_number: str | None = None
    address: str | None = None
    is_active: bool = True
    last_login_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_account(cls, account: UserAccount) -> "UserSummary":
        return cls(
            id=account.id,
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            role=account.role.value,
            phone_number=account.phone_number,
            address=account.address,
            is_active=account.is_active,
            last_login_at=account.last_login_at,
            created_at=account.created_at,
        )


class UserPage(BaseModel):
    items: list[UserSummary] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 1
    has_next: bool = False
    has_previous: bool = False


class MessageCreate(BaseModel):
    subject: str
    content: str


class MessageRead(BaseModel):
    """A message exchanged between a client and their advisor."""

    id: int
    sender_id: int
    sender_name: str
    sender_email: str
    recipient_id: int
    recipient_name: str
    recipient_email: str
    subject: str
    content: str
    sent_at: datetime
    is_read: bool = False
    read_at: datetime | None = None

    @classmethod
    def from_message(cls, message: Message) -> "MessageRead":
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            sender_name=message.sender.full_name,
            sender_email=message.sender.email,
            recipient_id=message.recipient_id,
            recipient_name=message.recipient.full_name,
            recipient_email=message.recipient.email,
            subject=message.subject,
            content=message.content,
            sent_at=message.sent_at,
            is_read=message.is_read,
            read_at=message.read_at,
        )


__all__ = ["MessageCreate", "MessageRead", "MessageResponse", "UserPage", "UserSummary"]
