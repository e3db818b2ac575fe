"""Guest portal routes: public information and the upgrade application."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, status

from advisory.core.security import AuthenticatedUser, require_guest
from advisory.dependencies import get_guest_service
from advisory.schemas import (
    ContactRequestCreate,
    ContactRequestRead,
    EligibilityRead,
    GuestDetail,
    GuestProfileUpdate,
    MessageResponse,
    ProjectionRequest,
    ProjectionResponse,
    UpgradeRequestCreate,
    UpgradeRequestRead,
    UpgradeSubmitted,
)
from advisory.services import GuestService

router = APIRouter(prefix="/guests", tags=["guests"])


@router.get("/info", summary="Public company information")
async def read_public_information() -> dict[str, Any]:
    return GuestService.get_public_information()


@router.get("/investment-options", summary="Portfolio options offered to new clients")
async def list_investment_options() -> list[dict[str, Any]]:
    return GuestService.get_investment_options()


@router.post("/calculate-returns", response_model=ProjectionResponse, summary="Project compound returns")
async def calculate_returns(payload: ProjectionRequest) -> ProjectionResponse:
    return ProjectionResponse(**GuestService.calculate_projected_returns(payload.amount, payload.years))


@router.post(
    "/contact",
    response_model=ContactRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send a contact request",
)
async def submit_contact_request(
    payload: ContactRequestCreate,
    request: Request,
    service: GuestService = Depends(get_guest_service),
) -> ContactRequestRead:
    user = getattr(request.state, "user", None)
    contact = service.submit_contact_request(payload.model_dump(), user.email if user else None)
    return ContactRequestRead.from_contact(contact)


@router.get("/me", response_model=GuestDetail, summary="Guest profile")
async def read_guest(
    user: AuthenticatedUser = Depends(require_guest),
    service: GuestService = Depends(get_guest_service),
) -> GuestDetail:
    guest, latest = service.get_details(user.email)
    return GuestDetail.from_guest(guest, latest)


@router.put("/me/profile", response_model=GuestDetail, summary="Update the guest profile")
async def update_profile(
    payload: GuestProfileUpdate,
    user: AuthenticatedUser = Depends(require_guest),
    service: GuestService = Depends(get_guest_service),
) -> GuestDetail:
    guest = service.update_profile(user.email, payload.model_dump(exclude_unset=True))
    return GuestDetail.from_guest(guest)


@router.post(
    "/me/upgrade",
    response_model=UpgradeSubmitted,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to become a client",
)
async def request_upgrade(
    payload: UpgradeRequestCreate,
    user: AuthenticatedUser = Depends(require_guest),
    service: GuestService = Depends(get_guest_service),
) -> UpgradeSubmitted:
    return UpgradeSubmitted(**service.request_upgrade(user.email, payload.model_dump()))


@router.get("/me/upgrade", response_model=UpgradeRequestRead, summary="Latest upgrade request")
async def read_upgrade_request(
    user: AuthenticatedUser = Depends(require_guest),
    service: GuestService = Depends(get_guest_service),
) -> UpgradeRequestRead:
    return UpgradeRequestRead.from_request(service.get_upgrade_request(user.email))


@router.delete("/me/upgrade", response_model=MessageResponse, summary="Withdraw the pending upgrade request")
async def cancel_upgrade_request(
    user: AuthenticatedUser = Depends(require_guest),
    service: GuestService = Depends(get_guest_service),
) -> MessageResponse:
    service.cancel_upgrade_request(user.email)
    return MessageResponse(message="Upgrade request cancelled successfully")


@router.get("/me/upgrade/eligibility", response_model=EligibilityRead, summary="Upgrade eligibility")
async def check_eligibility(
    user: AuthenticatedUser = Depends(require_guest),
    service: GuestService = Depends(get_guest_service),
) -> EligibilityRead:
    eligibility = service.check_upgrade_eligibility(user.email)
    return EligibilityRead(eligible=eligibility.eligible, reason=eligibility.reason)


__all__ = ["router"]
