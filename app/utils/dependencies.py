"""
FastAPI dependency injection utilities for services and authentication.
Provides the single authorization boundary: bearer token resolution and role gates.
"""

from typing import Any, List, Optional
from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.models.user import UserRole
from app.repositories.record_store import ScanResult
from app.schemas.common import PaginatedResponse, PaginationMeta
from app.services.application import ApplicationService
from app.services.auth import AuthService, CurrentUser
from app.services.container import ServiceContainer
from app.services.dashboard import DashboardService
from app.services.payment import PaymentService
from app.services.property import PropertyService
from app.services.rental_agreement import RentalAgreementService
from app.services.user import UserService
from app.utils.exceptions import AuthenticationError, RoleRequiredError
import logging

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_container(request: Request) -> ServiceContainer:
    """Collaborators built by the application lifespan."""
    return request.app.state.container


def get_auth_service(container: ServiceContainer = Depends(get_container)) -> AuthService:
    return AuthService(container)


def get_property_service(container: ServiceContainer = Depends(get_container)) -> PropertyService:
    return PropertyService(container)


def get_application_service(container: ServiceContainer = Depends(get_container)) -> ApplicationService:
    return ApplicationService(container)


def get_payment_service(container: ServiceContainer = Depends(get_container)) -> PaymentService:
    return PaymentService(container)


def get_rental_agreement_service(container: ServiceContainer = Depends(get_container)) -> RentalAgreementService:
    return RentalAgreementService(container)


def get_user_service(container: ServiceContainer = Depends(get_container)) -> UserService:
    return UserService(container)


def get_dashboard_service(container: ServiceContainer = Depends(get_container)) -> DashboardService:
    return DashboardService(container)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    """
    Resolve the bearer token into the caller.

    Raises:
        AuthenticationError: If no token is provided
        InvalidTokenError: If the token is invalid, expired or revoked
    """
    if not credentials:
        raise AuthenticationError("Access token required")
    return await auth_service.resolve_user(credentials.credentials)


def require_role(required_role: UserRole):
    """
    Create a dependency that admits only callers holding `required_role`.

    Args:
        required_role: Role the route is reserved for

    Returns:
        Dependency function yielding the caller
    """
    async def role_dependency(
        current_user: CurrentUser = Depends(get_current_user)
    ) -> CurrentUser:
        if current_user.role != required_role:
            raise RoleRequiredError(required_role.value)
        return current_user

    return role_dependency


require_landlord = require_role(UserRole.LANDLORD)
require_renter = require_role(UserRole.RENTER)


# Optional authentication dependency (for public endpoints that can benefit from user context)
async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[CurrentUser]:
    """
    Get the caller if a valid token is provided, otherwise None.
    """
    if not credentials:
        return None

    try:
        return await auth_service.resolve_user(credentials.credentials)
    except AuthenticationError as e:
        logger.debug(f"Optional authentication ignored: {e.detail}")
        return None


class PageParams:
    """Pagination query parameters shared by list endpoints."""

    def __init__(
        self,
        request: Request,
        page: int = Query(1, ge=1, description="Page label echoed in the response"),
        limit: Optional[int] = Query(None, ge=1, description="Items per page"),
        cursor: Optional[str] = Query(None, description="Continuation token from a previous page"),
    ):
        settings = request.app.state.container.settings
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)
        self.cursor = cursor

    def respond(self, items: List[Any], result: ScanResult, message: Optional[str] = None) -> PaginatedResponse:
        """Wrap one page of records in the paginated envelope."""
        return PaginatedResponse(
            data=items,
            message=message,
            pagination=PaginationMeta.build(self.page, self.limit, result.count, result.next_cursor),
        )
