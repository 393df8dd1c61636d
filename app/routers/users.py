"""
User API endpoints: profile, dashboards, statistics and account deletion.
"""

from fastapi import APIRouter, Depends, Request
from typing import Union

from app.models.user import UserProfile
from app.schemas.common import ApiResponse, MessageResponse, form_text
from app.schemas.user import (
    LandlordDashboard,
    LandlordStats,
    ProfileUpdate,
    RenterDashboard,
    RenterStats,
)
from app.services.auth import CurrentUser
from app.services.dashboard import DashboardService
from app.services.user import UserService
from app.utils.dependencies import (
    get_current_user,
    get_dashboard_service,
    get_user_service,
    require_landlord,
    require_renter,
)
from app.utils.file_utils import FileValidator


router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=ApiResponse[UserProfile], summary="Get the caller's profile")
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    profile = await user_service.get_profile(current_user)
    return ApiResponse(data=profile)


@router.put("/profile", response_model=ApiResponse[UserProfile], summary="Update the caller's profile")
async def update_profile(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """
    Multipart partial update: firstName, lastName, phone, address and
    emergencyContact (JSON) and an optional `profileImage` file.
    """
    settings = request.app.state.container.settings
    form = await request.form()
    update_data = ProfileUpdate.from_form(form_text(form))

    image = None
    upload = form.get("profileImage")
    if upload is not None and not isinstance(upload, str) and upload.filename:
        image = await FileValidator.read_upload(upload, settings.allowed_image_extensions, settings.max_file_size)

    profile = await user_service.update_profile(current_user, update_data, image)
    return ApiResponse(data=profile, message="Profile updated successfully")


@router.get(
    "/landlord/dashboard",
    response_model=ApiResponse[LandlordDashboard],
    summary="Landlord dashboard"
)
async def get_landlord_dashboard(
    current_user: CurrentUser = Depends(require_landlord),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """
    Properties by status, earnings, the newest applications and the
    overdue/upcoming payments of the caller.
    """
    dashboard = await dashboard_service.landlord_dashboard(current_user.id)
    return ApiResponse(data=dashboard)


@router.get(
    "/renter/dashboard",
    response_model=ApiResponse[RenterDashboard],
    summary="Renter dashboard"
)
async def get_renter_dashboard(
    current_user: CurrentUser = Depends(require_renter),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    dashboard = await dashboard_service.renter_dashboard(current_user.id)
    return ApiResponse(data=dashboard)


@router.get(
    "/stats",
    response_model=ApiResponse[Union[LandlordStats, RenterStats]],
    summary="Account statistics"
)
async def get_stats(
    current_user: CurrentUser = Depends(get_current_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    if current_user.is_landlord:
        stats = await dashboard_service.landlord_stats(current_user.id)
    else:
        stats = await dashboard_service.renter_stats(current_user.id)
    return ApiResponse(data=stats)


@router.delete("/account", response_model=MessageResponse, summary="Delete the caller's account")
async def delete_account(
    current_user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """
    Delete the profile record. Refused while the caller still has an
    active rental.
    """
    await user_service.delete_account(current_user)
    return MessageResponse(message="Account deleted successfully")
