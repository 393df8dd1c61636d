"""
Authentication request and response schemas.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from app.models.common import CamelModel
from app.models.user import UserRole


class RegisterRequest(CamelModel):
    """Schema for account registration."""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, description="Account password")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    user_type: UserRole = Field(..., description="landlord or renter")
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class RegisterResponse(CamelModel):
    user_id: str
    email: str
    user_type: UserRole


class ConfirmRequest(CamelModel):
    email: EmailStr
    code: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    """Schema for user login request."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    email: EmailStr
    code: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    access_token: Optional[str] = Field(
        None,
        description="Token to revoke; defaults to the bearer token of the request"
    )


class TokenResponse(CamelModel):
    """Tokens issued by login and refresh."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    token_type: str = "bearer"


class CurrentUserResponse(CamelModel):
    """Caller as resolved from the bearer token."""

    id: str
    email: str
    first_name: str
    last_name: str
    user_type: UserRole
    phone: Optional[str] = None
    is_verified: bool = False
