"""Schemas for the client self-service endpoints."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from advisory.models import Client
from advisory.services.clients import InvestmentValuation, PerformanceReport, PortfolioSummary

from .common import UserSummary


class AdvisorSummary(BaseModel):
    employee_id: str | None = None
    name: str
    email: str
    department: str | None = None
    title: str | None = None


class ClientDetail(BaseModel):
    """Client profile together with the owning account and advisor."""

    id: int
    client_id: str | None = None
    user: UserSummary
    assigned_employee: AdvisorSummary | None = None
    registration_date: datetime
    risk_profile: str
    investment_goals: str | None = None
    client_status: str
    cash_balance: Decimal = Decimal("0")
    notes: str | None = None
    preferences: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("cash_balance")
    def _serialize_cash_balance(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_client(cls, client: Client, *, include_notes: bool = False) -> "ClientDetail":
        advisor = client.assigned_employee
        return cls(
            id=client.id,
            client_id=client.client_id,
            user=UserSummary.from_account(client.user_account),
            assigned_employee=AdvisorSummary(
                employee_id=advisor.employee_id,
                name=advisor.full_name,
                email=advisor.user_account.email,
                department=advisor.department,
                title=advisor.title,
            )
            if advisor
            else None,
            registration_date=client.registration_date,
            risk_profile=client.risk_profile.value,
            investment_goals=client.investment_goals,
            client_status=client.client_status,
            cash_balance=client.portfolio.cash_balance if client.portfolio else Decimal("0"),
            notes=client.notes if include_notes else None,
            preferences=dict(client.preferences or {}),
        )


class ValuationRead(BaseModel):
    investment_id: int
    name: str
    ticker: str | None = None
    status: str
    shares: Decimal | None = None
    current_price: Decimal
    current_value: Decimal
    cost: Decimal
    gain: Decimal

    @field_serializer("shares", "current_price", "current_value", "cost", "gain")
    def _serialize_decimal(self, value: Decimal | None) -> str | None:
        return None if value is None else str(value)

    @classmethod
    def from_valuation(cls, valuation: InvestmentValuation) -> "ValuationRead":
        investment = valuation.investment
        return cls(
            investment_id=investment.id,
            name=investment.name,
            ticker=investment.ticker,
            status=investment.status.value,
            shares=investment.shares,
            current_price=valuation.current_price,
            current_value=valuation.current_value,
            cost=valuation.cost,
            gain=valuation.gain,
        )


class PortfolioSummaryRead(BaseModel):
    """Portfolio valued at current market prices."""

    client_id: str | None = None
    total_investments: int = 0
    total_value: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    total_gain: Decimal = Decimal("0")
    total_gain_percentage: Decimal = Decimal("0")
    investments: list[ValuationRead] = Field(default_factory=list)
    last_updated: datetime

    @field_serializer("total_value", "total_cost", "total_gain", "total_gain_percentage")
    def _serialize_decimal(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_summary(cls, summary: PortfolioSummary) -> "PortfolioSummaryRead":
        return cls(
            client_id=summary.client_id,
            total_investments=summary.total_investments,
            total_value=summary.total_value,
            total_cost=summary.total_cost,
            total_gain=summary.total_gain,
            total_gain_percentage=summary.total_gain_percentage,
            investments=[ValuationRead.from_valuation(item) for item in summary.investments],
            last_updated=summary.last_updated,
        )


class PerformanceRow(BaseModel):
    investment_id: int
    ticker: str | None = None
    shares: Decimal | None = None
    current_value: Decimal
    absolute_return: Decimal
    percentage_return: Decimal

    @field_serializer("shares", "current_value", "absolute_return", "percentage_return")
    def _serialize_decimal(self, value: Decimal | None) -> str | None:
        return None if value is None else str(value)


class PerformanceReportRead(BaseModel):
    period: str
    start_date: datetime
    end_date: datetime
    client_id: str | None = None
    total_return: Decimal = Decimal("0")
    average_percentage_return: Decimal = Decimal("0")
    investments: list[PerformanceRow] = Field(default_factory=list)

    @field_serializer("total_return", "average_percentage_return")
    def _serialize_decimal(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_report(cls, report: PerformanceReport) -> "PerformanceReportRead":
        return cls(
            period=report.period,
            start_date=report.start_date,
            end_date=report.end_date,
            client_id=report.client_id,
            total_return=report.total_return,
            average_percentage_return=report.average_percentage_return,
            investments=[PerformanceRow(**row) for row in report.investments],
        )


class InvestmentRequestCreate(BaseModel):
    stock_symbol: str | None = None
    shares: Decimal | None = None
    request_type: str | None = None
    notes: str | None = None


__all__ = [
    "AdvisorSummary",
    "ClientDetail",
    "InvestmentRequestCreate",
    "PerformanceReportRead",
    "PerformanceRow",
    "PortfolioSummaryRead",
    "ValuationRead",
]
