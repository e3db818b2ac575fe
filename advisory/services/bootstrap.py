"""Reference data created when the application starts."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from advisory.core.config import AuthSettings
from advisory.core.logger import get_logger
from advisory.core.security import hash_password
from advisory.domain.permissions import PermissionType
from advisory.domain.roles import Role
from advisory.models import NotificationTemplate, Permission, UserAccount
from advisory.repositories import SystemConfigRepository, UserRepository

from .notifications import DEFAULT_TEMPLATES
from .support import apply_role_permissions, ensure_role_profile

LOGGER = get_logger(__name__)


def seed_permissions(session: Session) -> int:
    """Insert a row for every :class:`PermissionType` that is missing one."""

    existing = set(session.execute(select(Permission.permission_type)).scalars())
    missing = [kind for kind in PermissionType if kind not in existing]
    session.add_all(Permission(permission_type=kind, description=kind.description) for kind in missing)
    session.flush()
    return len(missing)


def seed_templates(session: Session) -> int:
    existing = set(session.execute(select(NotificationTemplate.name)).scalars())
    created = 0
    for name, template_type, category, subject, content, variables in DEFAULT_TEMPLATES:
        if name in existing:
            continue
        session.add(
            NotificationTemplate(
                name=name,
                template_type=template_type,
                category=category,
                subject=subject,
                content=content,
                variables=variables,
                created_by="system",
            )
        )
        created += 1
    session.flush()
    return created


def ensure_bootstrap_admin(session: Session, auth: AuthSettings) -> UserAccount | None:
    """Create the configured first administrator unless the email is taken."""

    if not auth.bootstrap_admin_email or not auth.bootstrap_admin_password:
        return None
    users = UserRepository(session)
    email = auth.bootstrap_admin_email.strip().lower()
    if users.exists_by_email(email):
        return None
    account = UserAccount(
        email=email,
        password_hash=hash_password(auth.bootstrap_admin_password),
        first_name="System",
        last_name="Administrator",
        role=Role.ADMIN,
    )
    apply_role_permissions(account, users)
    session.add(account)
    session.flush()
    ensure_role_profile(session, account)
    account.admin.super_admin = True
    account.admin.access_level = "SUPER_ADMIN"
    LOGGER.info("Bootstrap administrator created", extra={"email": email})
    return account


def seed_reference_data(session: Session, auth: AuthSettings) -> None:
    """Permissions, the configuration row, default templates and the first admin."""

    permissions = seed_permissions(session)
    SystemConfigRepository(session).get_or_create()
    templates = seed_templates(session)
    ensure_bootstrap_admin(session, auth)
    session.commit()
    if permissions or templates:
        LOGGER.info("Seeded %d permission(s) and %d template(s)", permissions, templates)


__all__ = [
    "ensure_bootstrap_admin",
    "seed_permissions",
    "seed_reference_data",
    "seed_templates",
]
