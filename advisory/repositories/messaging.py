"""Data access for messages, notifications, templates and contact requests."""
from __future__ import annotations

from sqlalchemy import or_, select

from advisory.models import (
    ContactRequest,
    Message,
    Notification,
    NotificationTemplate,
    UserAccount,
)

from .base import BaseRepository


class MessageRepository(BaseRepository):
    def get(self, message_pk: int) -> Message | None:
        return self._get(Message, message_pk)

    def conversation_for(self, account: UserAccount) -> list[Message]:
        """Messages sent or received by ``account``, newest first."""

        statement = (
            select(Message)
            .where(or_(Message.sender_id == account.id, Message.recipient_id == account.id))
            .order_by(Message.sent_at.desc(), Message.id.desc())
        )
        return list(self._session.execute(statement).scalars())

    def notifications_for(self, account: UserAccount, *, unread_only: bool = False) -> list[Notification]:
        statement = select(Notification).where(Notification.user_account_id == account.id)
        if unread_only:
            statement = statement.where(Notification.is_read.is_(False))
        statement = statement.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(self._session.execute(statement).scalars())


class TemplateRepository(BaseRepository):
    def get(self, template_pk: int) -> NotificationTemplate | None:
        return self._get(NotificationTemplate, template_pk)

    def get_by_name(self, name: str) -> NotificationTemplate | None:
        statement = select(NotificationTemplate).where(NotificationTemplate.name == name)
        return self._session.execute(statement).scalars().first()

    def list_all(self, *, template_type: str | None = None, active_only: bool = False) -> list[NotificationTemplate]:
        statement = select(NotificationTemplate)
        if template_type:
            statement = statement.where(NotificationTemplate.template_type == template_type.upper())
        if active_only:
            statement = statement.where(NotificationTemplate.is_active.is_(True))
        return list(self._session.execute(statement.order_by(NotificationTemplate.name)).scalars())


class ContactRepository(BaseRepository):
    def get(self, contact_pk: int) -> ContactRequest | None:
        return self._get(ContactRequest, contact_pk)

    def list_recent(self, limit: int = 50) -> list[ContactRequest]:
        statement = (
            select(ContactRequest)
            .order_by(ContactRequest.created_at.desc(), ContactRequest.id.desc())
            .limit(limit)
        )
        return list(self._session.execute(statement).scalars())
