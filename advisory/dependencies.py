"""Shared FastAPI dependency definitions."""
from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from advisory.core.security import SecurityProvider, get_security_provider
from advisory.db.session import get_sessionmaker
from advisory.services import (
    AdminService,
    AuthService,
    ClientService,
    EmployeeService,
    GuestService,
    InvestmentService,
    UserAccountService,
)

# One factory per process; the engine behind it is shared by get_sessionmaker.
SessionFactory: sessionmaker = get_sessionmaker()


def get_db_session() -> Generator[Session, None, None]:
    """Yield a database session suitable for request-scoped usage."""

    session = SessionFactory()
    try:
        yield session
    finally:
        session.close()


def get_security() -> SecurityProvider:
    return get_security_provider()


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_auth_service(
    session: Session = Depends(get_db_session),
    security: SecurityProvider = Depends(get_security),
) -> AuthService:
    return AuthService(session, security=security)


def get_user_account_service(
    session: Session = Depends(get_db_session),
    security: SecurityProvider = Depends(get_security),
) -> UserAccountService:
    return UserAccountService(session, security=security)


def get_client_service(session: Session = Depends(get_db_session)) -> ClientService:
    return ClientService(session)


def get_employee_service(session: Session = Depends(get_db_session)) -> EmployeeService:
    return EmployeeService(session)


def get_guest_service(session: Session = Depends(get_db_session)) -> GuestService:
    return GuestService(session)


def get_investment_service(session: Session = Depends(get_db_session)) -> InvestmentService:
    return InvestmentService(session)


def get_admin_service(
    session: Session = Depends(get_db_session),
    security: SecurityProvider = Depends(get_security),
) -> AdminService:
    return AdminService(session, security=security)


__all__ = [
    "SessionFactory",
    "client_ip",
    "get_admin_service",
    "get_auth_service",
    "get_client_service",
    "get_db_session",
    "get_employee_service",
    "get_guest_service",
    "get_investment_service",
    "get_security",
    "get_user_account_service",
]
