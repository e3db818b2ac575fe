"""Routes for clients managing their own portfolio."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from advisory.core.security import AuthenticatedUser, require_client
from advisory.dependencies import get_client_service
from advisory.schemas import (
    ClientDetail,
    InvestmentRead,
    InvestmentRequestCreate,
    MessageCreate,
    MessageRead,
    PerformanceReportRead,
    PortfolioSummaryRead,
    TransactionRead,
)
from advisory.schemas.investments import investment_list
from advisory.services import ClientService

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/me", response_model=ClientDetail, summary="Client profile")
async def read_client(
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> ClientDetail:
    return ClientDetail.from_client(service.get_details(user.email))


@router.get("/me/portfolio", response_model=PortfolioSummaryRead, summary="Portfolio at current prices")
async def read_portfolio(
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> PortfolioSummaryRead:
    return PortfolioSummaryRead.from_summary(service.get_portfolio_summary(user.email))


@router.put("/me/preferences", response_model=dict[str, Any], summary="Update investment preferences")
async def update_preferences(
    preferences: dict[str, Any] = Body(...),
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> dict[str, Any]:
    return service.update_preferences(user.email, preferences)


@router.get("/me/investments", response_model=list[InvestmentRead], summary="Client investments")
async def list_investments(
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> list[InvestmentRead]:
    return investment_list(service.get_investments(user.email))


@router.get("/me/investments/{investment_id}", response_model=InvestmentRead, summary="One investment")
async def read_investment(
    investment_id: int,
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> InvestmentRead:
    return InvestmentRead.from_investment(service.get_investment(user.email, investment_id))


@router.post(
    "/me/investment-requests",
    response_model=InvestmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Ask the advisor to buy or sell",
)
async def request_investment(
    payload: InvestmentRequestCreate,
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> InvestmentRead:
    investment = service.request_investment(user.email, payload.model_dump(exclude_none=True))
    return InvestmentRead.from_investment(investment)


@router.post(
    "/me/messages",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Message the assigned advisor",
)
async def send_message(
    payload: MessageCreate,
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> MessageRead:
    message = service.send_message_to_advisor(user.email, payload.subject, payload.content)
    return MessageRead.from_message(message)


@router.get("/me/messages", response_model=list[MessageRead], summary="Conversation with the advisor")
async def list_messages(
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> list[MessageRead]:
    return [MessageRead.from_message(message) for message in service.get_messages(user.email)]


@router.put("/me/messages/{message_id}/read", response_model=MessageRead, summary="Mark a message read")
async def mark_message_read(
    message_id: int,
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> MessageRead:
    return MessageRead.from_message(service.mark_message_read(user.email, message_id))


@router.get("/me/transactions", response_model=list[TransactionRead], summary="Transaction history")
async def list_transactions(
    limit: int | None = Query(None, ge=1, le=500),
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> list[TransactionRead]:
    return [TransactionRead.from_transaction(txn) for txn in service.get_transactions(user.email, limit)]


@router.get("/me/performance", response_model=PerformanceReportRead, summary="Performance report")
async def read_performance(
    period: str = Query("MONTHLY"),
    user: AuthenticatedUser = Depends(require_client),
    service: ClientService = Depends(get_client_service),
) -> PerformanceReportRead:
    return PerformanceReportRead.from_report(service.get_performance_report(user.email, period))


__all__ = ["router"]
