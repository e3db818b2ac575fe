"""Advisor workflows: assigned clients, investments and messages."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy.orm import Session

from advisory.core.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    ValidationError,
)
from advisory.core.logger import get_logger
from advisory.domain.finance import ZERO, quantize_money, to_decimal
from advisory.domain.statuses import InvestmentStatus, TransactionStatus, TransactionType
from advisory.models import Client, Employee, Investment, Message, Transaction, utcnow
from advisory.repositories import (
    ClientRepository,
    EmployeeRepository,
    InvestmentRepository,
    MessageRepository,
)

from .market_data import QuoteProvider, get_quote_provider, normalize_symbol
from .notifications import NotificationService
from .support import validate_message

LOGGER = get_logger(__name__)

ORDER_TYPES = ("MARKET", "LIMIT")
_NOT_ASSIGNED = "You are not assigned to this client"


@dataclass(frozen=True)
class EmployeeMetrics:
    total_clients: int
    active_clients: int
    active_investments: int
    total_assets_under_management: Decimal
    total_returns: Decimal
    average_return_percentage: float
    messages_this_month: int
    workload: str


class EmployeeService:
    def __init__(
        self,
        session: Session,
        *,
        quotes: QuoteProvider | None = None,
        employees: EmployeeRepository | None = None,
        clients: ClientRepository | None = None,
        investments: InvestmentRepository | None = None,
        messages: MessageRepository | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._session = session
        self._quotes = quotes or get_quote_provider()
        self._employees = employees or EmployeeRepository(session)
        self._clients = clients or ClientRepository(session)
        self._investments = investments or InvestmentRepository(session)
        self._messages = messages or MessageRepository(session)
        self._notifications = notifications or NotificationService(session)

    def _employee(self, email: str) -> Employee:
        employee = self._employees.get_by_email(email)
        if employee is None:
            raise EntityNotFoundError(f"Employee not found for user: {email}")
        return employee

    def _assigned_client(self, employee: Employee, client_pk: int) -> Client:
        client = self._clients.get(client_pk)
        if client is None:
            raise EntityNotFoundError.for_entity("Client", client_pk)
        if client.assigned_employee_id != employee.id:
            raise AccessDeniedError(_NOT_ASSIGNED)
        return client

    def get_details(self, email: str) -> Employee:
        return self._employee(email)

    def get_assigned_clients(self, email: str) -> list[Client]:
        return self._clients.list_for_employee(self._employee(email))

    def get_client(self, email: str, client_pk: int) -> Client:
        return self._assigned_client(self._employee(email), client_pk)

    def get_client_investments(self, email: str, client_pk: int) -> list[Investment]:
        client = self._assigned_client(self._employee(email), client_pk)
        return self._investments.list_for_client(client)

    def search_clients(self, email: str, query: str) -> list[Client]:
        if not query or not query.strip():
            raise ValidationError("Search query must not be empty")
        return self._clients.search_for_employee(self._employee(email), query)

    def create_investment(self, email: str, payload: Mapping[str, Any]) -> Investment:
        """Open a stock investment for an assigned client at the current quote."""

        employee = self._employee(email)
        client_pk = payload.get("client_id")
        if client_pk is None:
            raise ValidationError("Client id is required")
        client = self._assigned_client(employee, int(client_pk))

        symbol = normalize_symbol(payload.get("stock_symbol"))
        quote = self._quotes.get_quote(symbol) if symbol else None
        if quote is None:
            raise ValidationError(f"Invalid stock symbol: {payload.get('stock_symbol')}")
        try:
            shares = to_decimal(payload.get("quantity"), default=None)
        except ValueError as exc:
            raise ValidationError("Quantity must be a number") from exc
        if shares is None or shares <= 0:
            raise ValidationError("Quantity must be positive")
        order_type = str(payload.get("order_type") or "MARKET").upper()
        if order_type not in ORDER_TYPES:
            raise ValidationError("Order type must be MARKET or LIMIT")

        price = quote.current_price
        investment = Investment.stock(
            name=quote.company_name,
            ticker=symbol,
            shares=shares,
            purchase_price=price,
            sector=quote.sector,
            client=client,
            created_by=employee,
            order_type=order_type,
            description=payload.get("notes"),
        )
        if order_type == "LIMIT" and payload.get("target_price") is not None:
            investment.target_price = to_decimal(payload["target_price"])
        investment.update_market_price(price)
        self._session.add(investment)

        transaction = Transaction(
            client=client,
            investment=investment,
            portfolio=client.portfolio,
            transaction_type=TransactionType.BUY,
            ticker=symbol,
            shares=shares,
            price_per_share=price,
            status=TransactionStatus.COMPLETED if order_type == "MARKET" else TransactionStatus.PENDING,
            description=f"Buy {shares} {symbol} ({order_type})",
        )
        transaction.calculate_total_amount()
        self._session.add(transaction)
        self._session.flush()

        self._notifications.notify_client_of_investment(client.user_account, employee.full_name, investment)
        self._session.commit()
        LOGGER.info(
            "Investment created",
            extra={"investment_id": investment.id, "client_id": client.client_id, "symbol": symbol},
        )
        return investment

    def update_investment_status(self, email: str, investment_id: int, status: str) -> Investment:
        employee = self._employee(email)
        investment = self._investments.get(investment_id)
        if investment is None:
            raise EntityNotFoundError.for_entity("Investment", investment_id)
        if investment.client is None or investment.client.assigned_employee_id != employee.id:
            raise AccessDeniedError(_NOT_ASSIGNED)
        target = InvestmentStatus.from_string(status)
        if target is None:
            raise ValidationError(f"Invalid investment status: {status}")
        investment.transition_to(target)
        self._session.commit()
        return investment

    def send_message_to_client(self, email: str, client_pk: int, subject: str, content: str) -> Message:
        employee = self._employee(email)
        client = self._assigned_client(employee, client_pk)
        subject, content = validate_message(subject, content)
        message = Message(
            sender=employee.user_account,
            recipient=client.user_account,
            subject=subject,
            content=content,
            sent_at=utcnow(),
        )
        self._session.add(message)
        self._session.commit()
        return message

    def get_messages(self, email: str) -> list[Message]:
        return self._messages.conversation_for(self._employee(email).user_account)

    def get_performance_metrics(self, email: str) -> EmployeeMetrics:
        employee = self._employee(email)
        clients = self._clients.list_for_employee(employee)
        investments = [investment for client in clients for investment in client.investments]
        active = [investment for investment in investments if investment.is_active]

        aum = sum(
            (investment.current_value if investment.current_value is not None else investment.amount for investment in active),
            ZERO,
        )
        total_returns = sum((investment.gain_loss for investment in investments), ZERO)
        priced = [investment.return_percentage for investment in investments if investment.current_value is not None]
        average = round(sum(priced) / len(priced), 2) if priced else 0.0

        month_start = utcnow() - timedelta(days=30)
        messages_this_month = sum(
            1 for message in self._messages.conversation_for(employee.user_account) if message.sent_at >= month_start
        )
        return EmployeeMetrics(
            total_clients=len(clients),
            active_clients=sum(1 for client in clients if client.user_account.is_active),
            active_investments=len(active),
            total_assets_under_management=quantize_money(aum),
            total_returns=quantize_money(total_returns),
            average_return_percentage=average,
            messages_this_month=messages_this_month,
            workload=employee.workload,
        )

    def get_pending_investments(self, email: str) -> list[Investment]:
        return self._investments.pending_for_employee(self._employee(email))

    def update_client_notes(self, email: str, client_pk: int, notes: str) -> Client:
        employee = self._employee(email)
        client = self._assigned_client(employee, client_pk)
        client.notes = notes
        client.preferences = {
            **(client.preferences or {}),
            "notes_last_updated": utcnow().isoformat(),
            "notes_updated_by": employee.user_account.email,
        }
        self._session.commit()
        return client


__all__ = ["EmployeeMetrics", "EmployeeService"]
