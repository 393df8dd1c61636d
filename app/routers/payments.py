"""
Payment API endpoints.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from typing import List, Optional

from app.models.payment import Payment, PaymentStatus, PaymentType
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.payment import (
    BulkPaymentUpdate,
    BulkUpdateResult,
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentView,
)
from app.services.auth import CurrentUser
from app.services.payment import PaymentService
from app.utils.dependencies import (
    PageParams,
    get_current_user,
    get_payment_service,
    require_landlord,
)


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "",
    response_model=ApiResponse[Payment],
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a payment"
)
async def create_payment(
    payment_data: PaymentCreate,
    current_user: CurrentUser = Depends(require_landlord),
    payment_service: PaymentService = Depends(get_payment_service)
):
    payment = await payment_service.create_payment(payment_data, current_user)
    return ApiResponse(data=payment, message="Payment created successfully")


@router.patch(
    "/bulk-update",
    response_model=ApiResponse[List[BulkUpdateResult]],
    summary="Update the status of many payments"
)
async def bulk_update_payments(
    update: BulkPaymentUpdate,
    current_user: CurrentUser = Depends(require_landlord),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Apply one status change to each listed payment independently.

    Always 200; each result entry reports its own success or error.
    """
    results = await payment_service.bulk_update_status(update, current_user)
    succeeded = sum(1 for r in results if r.success)
    return ApiResponse(data=results, message=f"Updated {succeeded} of {len(results)} payments")


@router.patch(
    "/{payment_id}/status",
    response_model=ApiResponse[Payment],
    summary="Update payment status"
)
async def update_payment_status(
    update: PaymentStatusUpdate,
    payment_id: str = Path(..., description="Payment ID"),
    current_user: CurrentUser = Depends(require_landlord),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Move a pending payment to paid, overdue or cancelled. Marking it paid
    records `paidDate`, defaulting to now.
    """
    payment = await payment_service.update_payment_status(payment_id, update, current_user)
    return ApiResponse(data=payment, message="Payment status updated")


@router.get(
    "/user/my-payments",
    response_model=PaginatedResponse[PaymentView],
    summary="List the caller's payments"
)
async def get_my_payments(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    payment_type: Optional[PaymentType] = Query(None, alias="type"),
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
):
    payments, result = await payment_service.get_user_payments(
        current_user, status=status_filter, payment_type=payment_type, limit=page.limit, cursor=page.cursor
    )
    return page.respond(payments, result)


@router.get(
    "/landlord/overdue",
    response_model=PaginatedResponse[PaymentView],
    summary="List overdue payments"
)
async def get_overdue_payments(
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(require_landlord),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """Pending payments whose due date has passed."""
    payments, result = await payment_service.get_overdue_payments(current_user, limit=page.limit, cursor=page.cursor)
    return page.respond(payments, result)


@router.get(
    "/landlord/upcoming",
    response_model=PaginatedResponse[PaymentView],
    summary="List payments due within a month"
)
async def get_upcoming_payments(
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(require_landlord),
    payment_service: PaymentService = Depends(get_payment_service)
):
    payments, result = await payment_service.get_upcoming_payments(current_user, limit=page.limit, cursor=page.cursor)
    return page.respond(payments, result)


@router.get(
    "/rental-agreement/{rental_agreement_id}",
    response_model=PaginatedResponse[PaymentView],
    summary="List payments of a rental agreement"
)
async def get_agreement_payments(
    rental_agreement_id: str = Path(..., description="Rental agreement ID"),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    payment_type: Optional[PaymentType] = Query(None, alias="type"),
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
):
    payments, result = await payment_service.get_agreement_payments(
        rental_agreement_id,
        current_user,
        status=status_filter,
        payment_type=payment_type,
        limit=page.limit,
        cursor=page.cursor,
    )
    return page.respond(payments, result)


@router.get(
    "/{payment_id}",
    response_model=ApiResponse[PaymentView],
    summary="Get payment by ID"
)
async def get_payment(
    payment_id: str = Path(..., description="Payment ID"),
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
):
    payment = await payment_service.get_payment(payment_id, current_user)
    return ApiResponse(data=payment)
