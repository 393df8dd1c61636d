"""
Service layer for business logic implementation.
Services receive their collaborators through a ServiceContainer.
"""

from .container import ServiceContainer
from .auth import AuthService, CurrentUser
from .property import PropertyService
from .application import ApplicationService
from .payment import PaymentService
from .rental_agreement import RentalAgreementService
from .user import UserService
from .dashboard import DashboardService
from .error_handler import ErrorHandlerService

__all__ = [
    "ServiceContainer",
    "AuthService",
    "CurrentUser",
    "PropertyService",
    "ApplicationService",
    "PaymentService",
    "RentalAgreementService",
    "UserService",
    "DashboardService",
    "ErrorHandlerService",
]
