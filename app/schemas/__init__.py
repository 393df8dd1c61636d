"""
Pydantic schemas for request/response validation.
"""

# Envelopes
from .common import ApiResponse, PaginatedResponse, PaginationMeta, MessageResponse, ErrorEnvelope

# Authentication schemas
from .auth import (
    RegisterRequest,
    RegisterResponse,
    ConfirmRequest,
    LoginRequest,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    LogoutRequest,
    TokenResponse,
    CurrentUserResponse,
)

# Resource schemas
from .property import PropertyCreate, PropertyUpdate, PropertySearchParams, SortField, SortOrder
from .application import ApplicationCreate, ApplicationStatusUpdate
from .payment import PaymentCreate, PaymentStatusUpdate, BulkPaymentUpdate, BulkUpdateResult, PaymentView
from .rental_agreement import RentalAgreementCreate, AgreementTermination
from .user import ProfileUpdate, LandlordDashboard, RenterDashboard, LandlordStats, RenterStats

__all__ = [
    "ApiResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "MessageResponse",
    "ErrorEnvelope",
    "RegisterRequest",
    "RegisterResponse",
    "ConfirmRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "LogoutRequest",
    "TokenResponse",
    "CurrentUserResponse",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertySearchParams",
    "SortField",
    "SortOrder",
    "ApplicationCreate",
    "ApplicationStatusUpdate",
    "PaymentCreate",
    "PaymentStatusUpdate",
    "BulkPaymentUpdate",
    "BulkUpdateResult",
    "PaymentView",
    "RentalAgreementCreate",
    "AgreementTermination",
    "ProfileUpdate",
    "LandlordDashboard",
    "RenterDashboard",
    "LandlordStats",
    "RenterStats",
]
