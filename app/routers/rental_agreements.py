"""
Rental agreement API endpoints.
"""

from fastapi import APIRouter, Body, Depends, Path, Query, status
from typing import Optional

from app.models.rental_agreement import AgreementStatus, RentalAgreement
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.rental_agreement import AgreementTermination, RentalAgreementCreate
from app.services.auth import CurrentUser
from app.services.rental_agreement import RentalAgreementService
from app.utils.dependencies import (
    PageParams,
    get_current_user,
    get_rental_agreement_service,
    require_landlord,
)


router = APIRouter(prefix="/rental-agreements", tags=["Rental Agreements"])


@router.post(
    "",
    response_model=ApiResponse[RentalAgreement],
    status_code=status.HTTP_201_CREATED,
    summary="Create rental agreement"
)
async def create_agreement(
    agreement_data: RentalAgreementCreate,
    current_user: CurrentUser = Depends(require_landlord),
    agreement_service: RentalAgreementService = Depends(get_rental_agreement_service)
):
    """
    Create an active agreement for a renter holding an approved application.

    Raises:
        OwnershipError: If the caller does not own the property
        BusinessRuleViolationError: If the renter has no approved application
    """
    agreement = await agreement_service.create_agreement(agreement_data, current_user)
    return ApiResponse(data=agreement, message="Rental agreement created successfully")


@router.get(
    "/user/my-agreements",
    response_model=PaginatedResponse[RentalAgreement],
    summary="List the caller's rental agreements"
)
async def get_my_agreements(
    status_filter: Optional[AgreementStatus] = Query(None, alias="status"),
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(get_current_user),
    agreement_service: RentalAgreementService = Depends(get_rental_agreement_service)
):
    agreements, result = await agreement_service.get_user_agreements(
        current_user, status=status_filter, limit=page.limit, cursor=page.cursor
    )
    return page.respond(agreements, result)


@router.get(
    "/{agreement_id}",
    response_model=ApiResponse[RentalAgreement],
    summary="Get rental agreement by ID"
)
async def get_agreement(
    agreement_id: str = Path(..., description="Rental agreement ID"),
    current_user: CurrentUser = Depends(get_current_user),
    agreement_service: RentalAgreementService = Depends(get_rental_agreement_service)
):
    agreement = await agreement_service.get_agreement(agreement_id, current_user)
    return ApiResponse(data=agreement)


@router.patch(
    "/{agreement_id}/terminate",
    response_model=ApiResponse[RentalAgreement],
    summary="Terminate an active agreement"
)
async def terminate_agreement(
    agreement_id: str = Path(..., description="Rental agreement ID"),
    termination: Optional[AgreementTermination] = Body(None),
    current_user: CurrentUser = Depends(require_landlord),
    agreement_service: RentalAgreementService = Depends(get_rental_agreement_service)
):
    reason = termination.reason if termination else None
    agreement = await agreement_service.terminate_agreement(agreement_id, current_user, reason)
    return ApiResponse(data=agreement, message="Rental agreement terminated")


@router.patch(
    "/{agreement_id}/expire",
    response_model=ApiResponse[RentalAgreement],
    summary="Mark an active agreement expired"
)
async def expire_agreement(
    agreement_id: str = Path(..., description="Rental agreement ID"),
    current_user: CurrentUser = Depends(require_landlord),
    agreement_service: RentalAgreementService = Depends(get_rental_agreement_service)
):
    agreement = await agreement_service.expire_agreement(agreement_id, current_user)
    return ApiResponse(data=agreement, message="Rental agreement expired")
