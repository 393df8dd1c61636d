"""
Utility modules for the rental marketplace API.
"""

from .exceptions import (
    APIException,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    UpstreamError,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidTransitionError,
    RoleRequiredError,
    OwnershipError,
)
from .time import utcnow, utcnow_iso, parse_timestamp

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Exceptions
    "APIException",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "UpstreamError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "InvalidTransitionError",
    "RoleRequiredError",
    "OwnershipError",

    # Time helpers
    "utcnow",
    "utcnow_iso",
    "parse_timestamp",
]
