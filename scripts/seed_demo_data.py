#!/usr/bin/env python3
"""Populate the advisory database with demo advisors, clients and investments."""
from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from faker import Faker

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from advisory.core import get_settings
from advisory.core.log import (
    get_logger,
    init_logging,
    log_context,
    progress_manager,
    shutdown_logging,
    timeit,
)
from advisory.core.security import get_security_provider
from advisory.db.session import get_engine, get_sessionmaker
from advisory.models import Base
from advisory.services.admin import AdminService
from advisory.services.auth import AuthService
from advisory.services.bootstrap import seed_reference_data
from advisory.services.employees import EmployeeService
from advisory.services.guests import GuestService
from advisory.services.market_data import MOCK_PRICES, StaticQuoteProvider, get_quote_provider

logger = get_logger(__name__)

DEMO_PASSWORD = "Advisory#2024"
DEPARTMENTS = ["Wealth Management", "Retirement Planning", "Private Banking", "Client Services"]
TITLES = ["Financial Advisor", "Senior Financial Advisor", "Portfolio Manager", "Relationship Manager"]
RISK_LEVELS = ["CONSERVATIVE", "MODERATE", "AGGRESSIVE"]
GOALS = ["Retirement", "Education savings", "Wealth preservation", "Long-term growth"]
EXTRA_SYMBOLS = ["NVDA", "META", "JPM", "V", "KO", "PG"]


@dataclass
class SeedCounts:
    employees: int = 0
    clients: int = 0
    guests: int = 0
    investments: int = 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--employees", type=int, default=5, help="Number of advisors to create")
    parser.add_argument("--clients", type=int, default=20, help="Number of guests upgraded to clients")
    parser.add_argument("--guests", type=int, default=10, help="Number of guests left without a client profile")
    parser.add_argument(
        "--investments", type=int, default=3, help="Maximum investments opened per client"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument(
        "--live-quotes", action="store_true", help="Price investments with the configured quote provider"
    )
    return parser.parse_args()


def _unique_email(faker: Faker, first: str, last: str, domain: str) -> str:
    stem = f"{first}.{last}".lower().replace(" ", "").replace("'", "")
    return f"{stem}.{faker.unique.random_int(1000, 9999)}@{domain}"


def create_employees(session, faker: Faker, rng: random.Random, count: int) -> list[tuple[int, str]]:
    service = AdminService(session, security=get_security_provider())
    advisors: list[tuple[int, str]] = []
    with timeit("advisor creation", logger=logger, unit="advisors", total=count) as timer, progress_manager.task(
        "Creating advisors", total=count
    ) as task:
        for _ in range(count):
            first, last = faker.first_name(), faker.last_name()
            employee = service.create_employee(
                {
                    "email": _unique_email(faker, first, last, "advisory.example.com"),
                    "password": DEMO_PASSWORD,
                    "first_name": first,
                    "last_name": last,
                    "phone_number": faker.phone_number(),
                    "department": rng.choice(DEPARTMENTS),
                    "title": rng.choice(TITLES),
                }
            )
            advisors.append((employee.id, employee.user_account.email))
            timer.add()
            task.advance()
    return advisors


def register_guest(session, faker: Faker) -> str:
    first, last = faker.first_name(), faker.last_name()
    email = _unique_email(faker, first, last, "example.org")
    AuthService(session, security=get_security_provider()).register(email, DEMO_PASSWORD, first, last)
    return email


def create_clients(
    session,
    faker: Faker,
    rng: random.Random,
    count: int,
    advisors: list[tuple[int, str]],
    admin_email: str,
) -> list[tuple[int, str]]:
    """Register guests, approve their upgrade and assign them round-robin to advisors."""

    guests = GuestService(session)
    admin = AdminService(session, security=get_security_provider())
    placed: list[tuple[int, str]] = []
    with timeit("client onboarding", logger=logger, unit="clients", total=count) as timer, progress_manager.task(
        "Onboarding clients", total=count
    ) as task:
        for index in range(count):
            email = register_guest(session, faker)
            submitted = guests.request_upgrade(
                email,
                {
                    "phone_number": faker.phone_number(),
                    "address": faker.address().replace("\n", ", "),
                    "occupation": faker.job(),
                    "annual_income": Decimal(rng.randrange(40_000, 250_000, 5_000)),
                    "investment_goals": rng.choice(GOALS),
                    "risk_tolerance": rng.choice(RISK_LEVELS),
                    "expected_investment_amount": Decimal(rng.randrange(5_000, 100_000, 1_000)),
                    "source_of_funds": "Employment income",
                    "agree_to_identity_verification": True,
                    "accept_terms_and_conditions": True,
                },
            )
            request = admin.approve_upgrade_request(submitted["request_id"], admin_email)
            client = request.user_account.client
            employee_id, advisor_email = advisors[index % len(advisors)]
            admin.assign_client(client.id, employee_id)
            placed.append((client.id, advisor_email))
            timer.add()
            task.advance()
    return placed


def create_investments(
    session,
    rng: random.Random,
    placed: list[tuple[int, str]],
    per_client: int,
    live_quotes: bool,
) -> int:
    quotes = get_quote_provider() if live_quotes else StaticQuoteProvider(variation=0.05, rng=rng)
    service = EmployeeService(session, quotes=quotes)
    symbols = [*MOCK_PRICES, *EXTRA_SYMBOLS]
    created = 0
    with timeit("investment creation", logger=logger, unit="investments") as timer, progress_manager.task(
        "Opening investments", total=len(placed)
    ) as task:
        for client_id, advisor_email in placed:
            for symbol in rng.sample(symbols, k=rng.randint(0, min(per_client, len(symbols)))):
                order_type = "LIMIT" if rng.random() < 0.2 else "MARKET"
                service.create_investment(
                    advisor_email,
                    {
                        "client_id": client_id,
                        "stock_symbol": symbol,
                        "quantity": Decimal(rng.randint(1, 50)),
                        "order_type": order_type,
                        "notes": "Demo position",
                    },
                )
                created += 1
                timer.add()
            task.advance()
    return created


def main() -> None:
    args = parse_args()
    rng = random.Random(args.seed)
    faker = Faker(["en_US", "nl_NL"])
    Faker.seed(args.seed)

    settings = get_settings()
    Base.metadata.create_all(get_engine())
    session = get_sessionmaker()()
    counts = SeedCounts()
    try:
        seed_reference_data(session, settings.auth)
        admin_email = settings.auth.bootstrap_admin_email or "seed-script"

        advisors = create_employees(session, faker, rng, max(1, args.employees))
        counts.employees = len(advisors)

        placed = create_clients(session, faker, rng, args.clients, advisors, admin_email)
        counts.clients = len(placed)

        for _ in progress_manager.track(range(args.guests), description="Registering guests", total=args.guests):
            register_guest(session, faker)
            counts.guests += 1

        counts.investments = create_investments(session, rng, placed, args.investments, args.live_quotes)
    finally:
        session.close()

    logger.info(
        "Seeded %s advisors, %s clients, %s guests and %s investments",
        counts.employees,
        counts.clients,
        counts.guests,
        counts.investments,
    )


if __name__ == "__main__":
    init_logging(get_settings().logging, app_name="seed-demo-data")
    log_context.bind(job="seed_demo_data")
    try:
        main()
    finally:
        shutdown_logging()
