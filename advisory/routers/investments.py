"""Back-office investment routes for employees and administrators."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from advisory.core.security import require_staff
from advisory.dependencies import get_investment_service
from advisory.schemas import (
    DividendRequest,
    InvestmentAnalyticsRead,
    InvestmentPerformanceRead,
    InvestmentRead,
    InvestmentUpdateRequest,
    PriceRefreshResponse,
    TransactionRead,
)
from advisory.schemas.investments import investment_list
from advisory.services import InvestmentService

router = APIRouter(prefix="/investments", tags=["investments"], dependencies=[Depends(require_staff)])


@router.get("", response_model=list[InvestmentRead], summary="All investments")
async def list_investments(service: InvestmentService = Depends(get_investment_service)) -> list[InvestmentRead]:
    return investment_list(service.list_investments())


@router.get("/status/{status_name}", response_model=list[InvestmentRead], summary="Investments by status")
async def list_by_status(
    status_name: str,
    service: InvestmentService = Depends(get_investment_service),
) -> list[InvestmentRead]:
    return investment_list(service.list_by_status(status_name))


@router.get("/analytics", response_model=InvestmentAnalyticsRead, summary="Book-wide analytics")
async def read_analytics(service: InvestmentService = Depends(get_investment_service)) -> InvestmentAnalyticsRead:
    return InvestmentAnalyticsRead.from_analytics(service.get_analytics())


@router.get("/attention", response_model=list[InvestmentRead], summary="Investments needing attention")
async def list_requiring_attention(
    service: InvestmentService = Depends(get_investment_service),
) -> list[InvestmentRead]:
    return investment_list(service.get_requiring_attention())


@router.post("/refresh-prices", response_model=PriceRefreshResponse, summary="Reprice active investments")
async def refresh_prices(service: InvestmentService = Depends(get_investment_service)) -> PriceRefreshResponse:
    return PriceRefreshResponse.from_refresh(service.refresh_prices())


@router.get("/{investment_id}", response_model=InvestmentRead, summary="Investment by id")
async def read_investment(
    investment_id: int,
    service: InvestmentService = Depends(get_investment_service),
) -> InvestmentRead:
    return InvestmentRead.from_investment(service.get_investment(investment_id))


@router.put("/{investment_id}", response_model=InvestmentRead, summary="Update an investment")
async def update_investment(
    investment_id: int,
    payload: InvestmentUpdateRequest,
    service: InvestmentService = Depends(get_investment_service),
) -> InvestmentRead:
    investment = service.update_investment(investment_id, payload.model_dump(exclude_unset=True))
    return InvestmentRead.from_investment(investment)


@router.get(
    "/{investment_id}/performance",
    response_model=InvestmentPerformanceRead,
    summary="Investment performance",
)
async def read_performance(
    investment_id: int,
    service: InvestmentService = Depends(get_investment_service),
) -> InvestmentPerformanceRead:
    return InvestmentPerformanceRead.from_performance(service.get_performance(investment_id))


@router.post(
    "/{investment_id}/dividends",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record a dividend payment",
)
async def process_dividend(
    investment_id: int,
    payload: DividendRequest,
    service: InvestmentService = Depends(get_investment_service),
) -> TransactionRead:
    return TransactionRead.from_transaction(service.process_dividend(investment_id, payload.amount))


__all__ = ["router"]
