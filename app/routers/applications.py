"""
Rental application API endpoints: submission with documents, listings,
landlord review and renter withdrawal.
"""

from fastapi import APIRouter, Depends, Path, Query, Request, status
from typing import Optional

from app.models.application import Application, ApplicationStatus
from app.schemas.application import ApplicationCreate, ApplicationStatusUpdate
from app.schemas.common import ApiResponse, PaginatedResponse, form_text
from app.services.application import ApplicationService
from app.services.auth import CurrentUser
from app.utils.dependencies import (
    PageParams,
    get_application_service,
    get_current_user,
    require_landlord,
    require_renter,
)
from app.utils.file_utils import FileValidator


router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post(
    "",
    response_model=ApiResponse[Application],
    status_code=status.HTTP_201_CREATED,
    summary="Submit rental application",
    description="Multipart submission; personalInfo, employment, references and documentTypes are JSON strings"
)
async def submit_application(
    request: Request,
    current_user: CurrentUser = Depends(require_renter),
    application_service: ApplicationService = Depends(get_application_service)
):
    """
    Apply for an available property, attaching up to five `documents`.

    Raises:
        NotFoundError: If the property does not exist
        BusinessRuleViolationError: If the property is not available
        DuplicateApplicationError: If a live application already exists
    """
    settings = request.app.state.container.settings
    form = await request.form()
    application_data = ApplicationCreate.from_form(form_text(form))
    documents = await FileValidator.read_uploads(
        form.getlist("documents"),
        settings.allowed_document_extensions,
        settings.max_file_size,
        settings.max_application_documents,
    )

    application = await application_service.submit_application(application_data, documents, current_user)
    return ApiResponse(data=application, message="Application submitted successfully")


@router.get(
    "/user/my-applications",
    response_model=PaginatedResponse[Application],
    summary="List the caller's applications"
)
async def get_my_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service)
):
    """
    Renters see the applications they filed, landlords the ones filed on
    their properties. Newest first.
    """
    applications, result = await application_service.get_user_applications(
        current_user, status=status_filter, limit=page.limit, cursor=page.cursor
    )
    return page.respond(applications, result)


@router.get(
    "/property/{property_id}",
    response_model=PaginatedResponse[Application],
    summary="List applications for a property"
)
async def get_property_applications(
    property_id: str = Path(..., description="Property ID"),
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(require_landlord),
    application_service: ApplicationService = Depends(get_application_service)
):
    applications, result = await application_service.get_property_applications(
        property_id, current_user, status=status_filter, limit=page.limit, cursor=page.cursor
    )
    return page.respond(applications, result)


@router.get(
    "/{application_id}",
    response_model=ApiResponse[Application],
    summary="Get application by ID"
)
async def get_application(
    application_id: str = Path(..., description="Application ID"),
    current_user: CurrentUser = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service)
):
    application = await application_service.get_application(application_id, current_user)
    return ApiResponse(data=application)


@router.patch(
    "/{application_id}/status",
    response_model=ApiResponse[Application],
    summary="Approve or reject an application"
)
async def review_application(
    decision: ApplicationStatusUpdate,
    application_id: str = Path(..., description="Application ID"),
    current_user: CurrentUser = Depends(require_landlord),
    application_service: ApplicationService = Depends(get_application_service)
):
    """
    Review a pending application. Approval also marks the property rented.

    Raises:
        InvalidTransitionError: If the application is not pending or the
            requested status is not a landlord decision
        ConflictError: If the application changed concurrently
        UpstreamError: If the property could not be marked rented
    """
    application = await application_service.review_application(application_id, decision, current_user)
    return ApiResponse(data=application, message=f"Application {application.status.value}")


@router.patch(
    "/{application_id}/withdraw",
    response_model=ApiResponse[Application],
    summary="Withdraw an application"
)
async def withdraw_application(
    application_id: str = Path(..., description="Application ID"),
    current_user: CurrentUser = Depends(require_renter),
    application_service: ApplicationService = Depends(get_application_service)
):
    application = await application_service.withdraw_application(application_id, current_user)
    return ApiResponse(data=application, message="Application withdrawn")
