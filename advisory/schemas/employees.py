"""Schemas for the advisor workspace."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, field_serializer

from advisory.models import Employee
from advisory.services.employees import EmployeeMetrics

from .common import UserSummary


class EmployeeDetail(BaseModel):
    id: int
    employee_id: str | None = None
    user: UserSummary
    department: str
    location_id: str
    title: str | None = None
    hire_date: datetime
    is_active: bool = True
    employee_status: str
    client_count: int = 0
    workload: str

    @classmethod
    def from_employee(cls, employee: Employee) -> "EmployeeDetail":
        return cls(
            id=employee.id,
            employee_id=employee.employee_id,
            user=UserSummary.from_account(employee.user_account),
            department=employee.department,
            location_id=employee.location_id,
            title=employee.title,
            hire_date=employee.hire_date,
            is_active=employee.is_active,
            employee_status=employee.employee_status,
            client_count=employee.client_count,
            workload=employee.workload,
        )


class EmployeeMetricsRead(BaseModel):
    """Book-of-business figures for one advisor."""

    total_clients: int = 0
    active_clients: int = 0
    active_investments: int = 0
    total_assets_under_management: Decimal = Decimal("0")
    total_returns: Decimal = Decimal("0")
    average_return_percentage: float = 0.0
    messages_this_month: int = 0
    workload: str

    @field_serializer("total_assets_under_management", "total_returns")
    def _serialize_decimal(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_metrics(cls, metrics: EmployeeMetrics) -> "EmployeeMetricsRead":
        return cls(**vars(metrics))


class InvestmentCreate(BaseModel):
    client_id: int | None = None
    stock_symbol: str | None = None
    quantity: Decimal | None = None
    order_type: str = "MARKET"
    target_price: Decimal | None = None
    notes: str | None = None


class InvestmentStatusUpdate(BaseModel):
    status: str


class ClientNotesUpdate(BaseModel):
    notes: str


__all__ = [
    "ClientNotesUpdate",
    "EmployeeDetail",
    "EmployeeMetricsRead",
    "InvestmentCreate",
    "InvestmentStatusUpdate",
]
