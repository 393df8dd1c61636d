"""
Custom exception classes for the rental marketplace API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(APIException):
    """Missing or malformed fields, or a request the business rules refuse."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []


class AuthenticationError(APIException):
    """Authentication required or failed."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHENTICATED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationError(APIException):
    """Wrong role or not the owner of the record."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class UpstreamError(APIException):
    """A record, blob or identity collaborator failed."""

    def __init__(self, detail: str = "Upstream service failure"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="UPSTREAM_ERROR"
        )


# Authentication specific exceptions
class InvalidCredentialsError(AuthenticationError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class InvalidTokenError(AuthenticationError):
    """Invalid or expired token exception."""

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail)


class RoleRequiredError(AuthorizationError):
    """Caller does not hold the role a route requires."""

    def __init__(self, role: str):
        super().__init__(f"{role.capitalize()} access required")


class OwnershipError(AuthorizationError):
    """Caller is neither the landlord nor the renter on the record."""

    def __init__(self, action: str):
        super().__init__(f"Unauthorized to {action}")


# Business rule exceptions
class InvalidTransitionError(ValidationError):
    """Status change not allowed by the state machine."""

    def __init__(self, resource: str, current: str, target: str):
        super().__init__(f"Cannot change {resource} status from '{current}' to '{target}'")
        self.current = current
        self.target = target


class BusinessRuleViolationError(ValidationError):
    """Business rule violation exception."""

    def __init__(self, detail: str):
        super().__init__(detail)


class DuplicateApplicationError(ConflictError):
    def __init__(self):
        super().__init__("You have already applied to this property")


# File upload exceptions
class UnsupportedFileTypeError(ValidationError):
    """Unsupported file type exception."""

    def __init__(self, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(f"Unsupported file type '{file_type}'. Supported types: {supported}")


class FileSizeExceededError(ValidationError):
    """File size exceeded exception."""

    def __init__(self, size: int, max_size: int):
        super().__init__(f"File size {size} bytes exceeds maximum allowed size {max_size} bytes")
