from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from advisory.core.config import AuthSettings
from advisory.core.security import SecurityProvider, get_security_provider
from advisory.dependencies import (
    get_admin_service,
    get_client_service,
    get_db_session,
    get_employee_service,
    get_investment_service,
)
from advisory.main import create_app
from advisory.models import Base, Client, Employee, UserAccount
from advisory.services import (
    AdminService,
    AuthService,
    ClientService,
    EmployeeService,
    GuestService,
    InvestmentService,
)
from advisory.services.bootstrap import seed_reference_data
from advisory.services.market_data import StaticQuoteProvider

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "Secure#Pass42"

AUTH_SETTINGS = AuthSettings(
    secret_key="test-secret-key-for-the-advisory-suite-000",
    algorithm="HS256",
    access_token_expire_minutes=30,
    refresh_token_expire_minutes=60,
    bootstrap_admin_email=ADMIN_EMAIL,
    bootstrap_admin_password=PASSWORD,
)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = factory()
    seed_reference_data(session, AUTH_SETTINGS)
    yield session
    session.close()


@pytest.fixture()
def security() -> SecurityProvider:
    return SecurityProvider(AUTH_SETTINGS)


@pytest.fixture()
def quotes() -> StaticQuoteProvider:
    return StaticQuoteProvider()


@dataclass
class AccountFactory:
    """Create accounts through the services so every profile row exists."""

    session: Session
    security: SecurityProvider

    @property
    def admin(self) -> UserAccount:
        return AuthService(self.session, security=self.security).login(ADMIN_EMAIL, PASSWORD).account

    def guest(self, email: str = "guest@example.com", first_name: str = "Grace", last_name: str = "Guest") -> UserAccount:
        result = AuthService(self.session, security=self.security).register(email, PASSWORD, first_name, last_name)
        return result.account

    def employee(self, email: str = "advisor@example.com", **extra) -> Employee:
        payload = {
            "email": email,
            "password": PASSWORD,
            "first_name": "Ada",
            "last_name": "Advisor",
            **extra,
        }
        return AdminService(self.session, security=self.security).create_employee(payload)

    def client(self, email: str = "client@example.com", advisor: Employee | None = None) -> Client:
        account = self.guest(email, first_name="Carl", last_name="Client")
        submitted = GuestService(self.session).request_upgrade(email, {"investment_goals": "Growth"})
        admin = AdminService(self.session, security=self.security)
        admin.approve_upgrade_request(submitted["request_id"], ADMIN_EMAIL)
        client = account.client
        if advisor is not None:
            client = admin.assign_client(client.id, advisor.id)
        return client


@pytest.fixture()
def accounts(session: Session, security: SecurityProvider) -> AccountFactory:
    return AccountFactory(session, security)


@pytest.fixture()
def advisor(accounts: AccountFactory) -> Employee:
    return accounts.employee()


@pytest.fixture()
def client_profile(accounts: AccountFactory, advisor: Employee) -> Client:
    return accounts.client(advisor=advisor)


# HTTP -----------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_blacklist() -> Iterator[None]:
    yield
    get_security_provider().blacklist.clear()


@pytest.fixture()
def api(session: Session, quotes: StaticQuoteProvider) -> TestClient:
    """Test client bound to the in-memory database; the lifespan is not run."""

    app = create_app()

    def _session() -> Iterator[Session]:
        yield session

    provider = get_security_provider()
    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_client_service] = lambda: ClientService(session, quotes=quotes)
    app.dependency_overrides[get_employee_service] = lambda: EmployeeService(session, quotes=quotes)
    app.dependency_overrides[get_investment_service] = lambda: InvestmentService(session, quotes=quotes)
    app.dependency_overrides[get_admin_service] = lambda: AdminService(session, security=provider)
    return TestClient(app)


@pytest.fixture()
def auth_headers():
    """Return a function building bearer headers for an account."""

    def build(account: UserAccount) -> dict[str, str]:
        token = get_security_provider().create_access_token(account)
        return {"Authorization": f"Bearer {token}"}

    return build
