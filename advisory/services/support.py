"""Helpers shared by the account-facing services."""
from __future__ import annotations

import secrets
import string

from sqlalchemy.orm import Session

from advisory.core.exceptions import EntityNotFoundError, ValidationError
from advisory.domain.permissions import permissions_for_role
from advisory.domain.roles import Role
from advisory.models import Admin, Client, Employee, Portfolio, UserAccount
from advisory.models.messaging import MAX_CONTENT_LENGTH, MAX_SUBJECT_LENGTH
from advisory.repositories import UserRepository


def get_account(users: UserRepository, email: str) -> UserAccount:
    account = users.get_by_email(email)
    if account is None or account.is_deleted:
        raise EntityNotFoundError(f"User not found: {email}")
    return account


def get_account_by_id(users: UserRepository, user_id: int) -> UserAccount:
    account = users.get(user_id)
    if account is None or account.is_deleted:
        raise EntityNotFoundError.for_entity("User", user_id)
    return account


def apply_role_permissions(account: UserAccount, users: UserRepository) -> None:
    """Replace the account's permissions with the defaults of its role."""

    account.permissions = set(users.permissions_for_types(permissions_for_role(account.role)))


def ensure_role_profile(session: Session, account: UserAccount) -> None:
    """Create the profile record matching ``account.role`` if it does not exist yet.

    Client profiles come with an empty portfolio. Identifiers that depend on
    the database id are assigned after a flush.
    """

    if account.role is Role.CLIENT and account.client is None:
        client = Client(user_account=account)
        client.portfolio = Portfolio(name="Main Portfolio")
        session.add(client)
        session.flush()
        client.generate_client_id()
    elif account.role is Role.EMPLOYEE and account.employee is None:
        employee = Employee(user_account=account)
        session.add(employee)
        session.flush()
        employee.generate_employee_id()
    elif account.role is Role.ADMIN and account.admin is None:
        admin = Admin(user_account=account)
        session.add(admin)
        session.flush()
        admin.admin_id = f"ADM-{admin.id:03d}"


def generate_temporary_password(length: int = 12) -> str:
    """Random password that satisfies the strong-password rule."""

    alphabet = string.ascii_letters + string.digits
    body = "".join(secrets.choice(alphabet) for _ in range(max(length - 4, 4)))
    return (
        secrets.choice(string.ascii_uppercase)
        + secrets.choice(string.ascii_lowercase)
        + body
        + secrets.choice(string.digits)
        + secrets.choice("@#$%^&+=!")
    )


def validate_message(subject: str | None, content: str | None) -> tuple[str, str]:
    subject = (subject or "").strip()
    content = (content or "").strip()
    if not subject:
        raise ValidationError("Message subject is required")
    if len(subject) > MAX_SUBJECT_LENGTH:
        raise ValidationError(f"Message subject must not exceed {MAX_SUBJECT_LENGTH} characters")
    if not content:
        raise ValidationError("Message content is required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Message content must not exceed {MAX_CONTENT_LENGTH} characters")
    return subject, content
