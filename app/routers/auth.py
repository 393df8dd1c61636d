"""
Authentication API endpoints: registration, confirmation, login, token
refresh, password reset and logout.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from typing import Optional

from app.schemas.auth import (
    ConfirmRequest,
    CurrentUserResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.services.auth import AuthService, CurrentUser
from app.services.identity import AuthTokens
from app.utils.dependencies import get_auth_service, get_current_user, security
from app.utils.exceptions import ValidationError


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(tokens: AuthTokens) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


@router.post(
    "/register",
    response_model=ApiResponse[RegisterResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a landlord or renter account"
)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Create the account and its profile record.

    Returns 409 if the email is taken and 400 if the password is too weak.
    """
    profile = await auth_service.register(
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        user_type=data.user_type,
        phone=data.phone,
    )
    return ApiResponse(
        data=RegisterResponse(user_id=profile.id, email=profile.email, user_type=profile.user_type),
        message="User registered successfully. Please check your email for verification.",
    )


@router.post("/confirm", response_model=MessageResponse, summary="Confirm registration")
async def confirm(
    data: ConfirmRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    await auth_service.confirm(data.email, data.code)
    return MessageResponse(message="Email confirmed successfully")


@router.post("/login", response_model=ApiResponse[TokenResponse], summary="User login")
async def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Exchange email and password for access and refresh tokens.
    """
    tokens = await auth_service.login(credentials.email, credentials.password)
    return ApiResponse(data=_token_response(tokens), message="Login successful")


@router.post("/refresh", response_model=ApiResponse[TokenResponse], summary="Refresh access token")
async def refresh_token(
    data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    tokens = await auth_service.refresh(data.refresh_token)
    return ApiResponse(data=_token_response(tokens), message="Token refreshed successfully")


@router.post("/forgot-password", response_model=MessageResponse, summary="Request a password reset code")
async def forgot_password(
    data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    await auth_service.forgot_password(data.email)
    return MessageResponse(message="Password reset code sent to your email")


@router.post("/reset-password", response_model=MessageResponse, summary="Reset password with a code")
async def reset_password(
    data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    await auth_service.reset_password(data.email, data.code, data.new_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/logout", response_model=MessageResponse, summary="User logout")
async def logout(
    data: Optional[LogoutRequest] = None,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Revoke the given access token (or the request's bearer token).
    Reports success even when revocation fails.
    """
    token = (data.access_token if data else None) or (credentials.credentials if credentials else None)
    if not token:
        raise ValidationError("Access token is required")

    await auth_service.logout(token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[CurrentUserResponse], summary="Get current user")
async def get_current_user_info(current_user: CurrentUser = Depends(get_current_user)):
    return ApiResponse(data=CurrentUserResponse.model_validate(current_user.to_dict()))
