"""Advisor workspace routes: assigned clients, investments and messages."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from advisory.core.logger import get_logger
from advisory.core.security import AuthenticatedUser, require_staff
from advisory.dependencies import get_employee_service
from advisory.schemas import (
    ClientDetail,
    ClientNotesUpdate,
    EmployeeDetail,
    EmployeeMetricsRead,
    InvestmentCreate,
    InvestmentRead,
    InvestmentStatusUpdate,
    MessageCreate,
    MessageRead,
)
from advisory.schemas.investments import investment_list
from advisory.services import EmployeeService

LOGGER = get_logger(__name__)
router = APIRouter(prefix="/employees", tags=["employees"])


def _clients(clients) -> list[ClientDetail]:
    return [ClientDetail.from_client(client, include_notes=True) for client in clients]


@router.get("/me", response_model=EmployeeDetail, summary="Advisor profile")
async def read_employee(
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeDetail:
    return EmployeeDetail.from_employee(service.get_details(user.email))


@router.get("/me/performance", response_model=EmployeeMetricsRead, summary="Advisor performance metrics")
async def read_performance(
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeMetricsRead:
    return EmployeeMetricsRead.from_metrics(service.get_performance_metrics(user.email))


@router.get("/me/clients", response_model=list[ClientDetail], summary="Assigned clients")
async def list_clients(
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> list[ClientDetail]:
    return _clients(service.get_assigned_clients(user.email))


@router.get("/clients/search", response_model=list[ClientDetail], summary="Search assigned clients")
async def search_clients(
    q: str = Query(""),
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> list[ClientDetail]:
    return _clients(service.search_clients(user.email, q))


@router.get("/clients/{client_id}", response_model=ClientDetail, summary="Assigned client")
async def read_client(
    client_id: int,
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> ClientDetail:
    return ClientDetail.from_client(service.get_client(user.email, client_id), include_notes=True)


@router.get(
    "/clients/{client_id}/investments",
    response_model=list[InvestmentRead],
    summary="Investments of an assigned client",
)
async def list_client_investments(
    client_id: int,
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> list[InvestmentRead]:
    return investment_list(service.get_client_investments(user.email, client_id))


@router.put("/clients/{client_id}/notes", response_model=ClientDetail, summary="Update client notes")
async def update_client_notes(
    client_id: int,
    payload: ClientNotesUpdate,
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> ClientDetail:
    client = service.update_client_notes(user.email, client_id, payload.notes)
    return ClientDetail.from_client(client, include_notes=True)


@router.post(
    "/clients/{client_id}/messages",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Message an assigned client",
)
async def send_message(
    client_id: int,
    payload: MessageCreate,
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> MessageRead:
    message = service.send_message_to_client(user.email, client_id, payload.subject, payload.content)
    return MessageRead.from_message(message)


@router.get("/messages", response_model=list[MessageRead], summary="Advisor conversations")
async def list_messages(
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> list[MessageRead]:
    return [MessageRead.from_message(message) for message in service.get_messages(user.email)]


@router.post(
    "/investments",
    response_model=InvestmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open a stock investment for a client",
)
async def create_investment(
    payload: InvestmentCreate,
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> InvestmentRead:
    investment = service.create_investment(user.email, payload.model_dump())
    LOGGER.debug("Investment created through the API", extra={"investment_id": investment.id})
    return InvestmentRead.from_investment(investment)


@router.put(
    "/investments/{investment_id}/status",
    response_model=InvestmentRead,
    summary="Move an investment to a new status",
)
async def update_investment_status(
    investment_id: int,
    payload: InvestmentStatusUpdate,
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> InvestmentRead:
    investment = service.update_investment_status(user.email, investment_id, payload.status)
    return InvestmentRead.from_investment(investment)


@router.get("/investments/pending", response_model=list[InvestmentRead], summary="Pending investments")
async def list_pending_investments(
    user: AuthenticatedUser = Depends(require_staff),
    service: EmployeeService = Depends(get_employee_service),
) -> list[InvestmentRead]:
    return investment_list(service.get_pending_investments(user.email))


__all__ = ["router"]
