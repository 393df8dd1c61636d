"""
Authentication service for registration, login, token management and bearer
token resolution.

Credentials live with the identity provider; the extended profile is written
to the record store under the provider's subject id.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from app.models.user import UserProfile, UserRole
from app.services.access import upstream_errors
from app.services.container import ServiceContainer
from app.services.identity import (
    AuthTokens,
    IdentityProviderError,
    ATTR_EMAIL,
    ATTR_GIVEN_NAME,
    ATTR_FAMILY_NAME,
    ATTR_USER_TYPE,
    ATTR_PHONE,
    ATTR_EMAIL_VERIFIED,
)
from app.repositories.record_store import RecordStoreError
from app.utils.exceptions import APIException, InvalidTokenError
import logging

logger = logging.getLogger(__name__)


@dataclass
class CurrentUser:
    """Caller resolved from a bearer token."""
    id: str
    email: str
    role: UserRole
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    is_verified: bool = False
    token: Optional[str] = field(default=None, repr=False)

    @property
    def is_landlord(self) -> bool:
        return self.role == UserRole.LANDLORD

    @property
    def is_renter(self) -> bool:
        return self.role == UserRole.RENTER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "userType": self.role.value,
            "phone": self.phone,
            "isVerified": self.is_verified,
        }


class AuthService:
    """
    Authentication flows on top of the identity provider.
    """

    def __init__(self, container: ServiceContainer):
        self.identity = container.identity_provider
        self.users = container.users

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        user_type: UserRole,
        phone: Optional[str] = None
    ) -> UserProfile:
        """
        Create the identity and its profile record.

        Returns:
            The stored profile

        Raises:
            ConflictError: If the email is already registered
            ValidationError: If the password is too weak
            UpstreamError: If a collaborator fails
        """
        email = email.strip().lower()
        attributes = {
            ATTR_EMAIL: email,
            ATTR_GIVEN_NAME: first_name,
            ATTR_FAMILY_NAME: last_name,
            ATTR_USER_TYPE: user_type.value,
            ATTR_PHONE: phone,
        }

        with upstream_errors("Registration failed"):
            subject_id = await self.identity.sign_up(email, password, attributes)
            profile = UserProfile(
                id=subject_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                user_type=user_type,
            )
            await self.users.create(profile)

        logger.info(f"Registered {user_type.value} {subject_id}")
        return profile

    async def confirm(self, email: str, code: str) -> None:
        with upstream_errors("Confirmation failed"):
            await self.identity.confirm(email, code)

        # The profile flag mirrors the provider and may lag behind it
        try:
            profile = await self.users.get_by_email(email)
            if profile and not profile.is_verified:
                await self.users.update(profile.id, {"isVerified": True})
        except RecordStoreError as e:
            logger.warning(f"Could not mark profile verified for {email}: {e}")

    async def login(self, email: str, password: str) -> AuthTokens:
        with upstream_errors("Login failed"):
            tokens = await self.identity.login(email, password)
        logger.info(f"User logged in: {email}")
        return tokens

    async def refresh(self, refresh_token: str) -> AuthTokens:
        with upstream_errors("Token refresh failed"):
            return await self.identity.refresh(refresh_token)

    async def forgot_password(self, email: str) -> None:
        with upstream_errors("Password reset request failed"):
            await self.identity.forgot_password(email)

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        with upstream_errors("Password reset failed"):
            await self.identity.reset_password(email, code, new_password)

    async def logout(self, access_token: str) -> None:
        """
        Revoke the caller's tokens. Always succeeds from the caller's side;
        provider failures are logged and dropped.
        """
        try:
            await self.identity.sign_out(access_token)
        except (APIException, IdentityProviderError) as e:
            logger.warning(f"Logout failed, reporting success anyway: {e}")

    async def resolve_user(self, access_token: str) -> CurrentUser:
        """
        Map a bearer token to the caller.

        Raises:
            InvalidTokenError: If the token is unknown, revoked or expired, or
                the account carries no valid role
        """
        with upstream_errors("Authentication error"):
            identity = await self.identity.get_user_by_token(access_token)

        attributes = identity.attributes
        try:
            role = UserRole(attributes.get(ATTR_USER_TYPE, ""))
        except ValueError:
            raise InvalidTokenError("Account has no valid user type")

        return CurrentUser(
            id=identity.subject_id,
            email=attributes.get(ATTR_EMAIL, ""),
            role=role,
            first_name=attributes.get(ATTR_GIVEN_NAME, ""),
            last_name=attributes.get(ATTR_FAMILY_NAME, ""),
            phone=attributes.get(ATTR_PHONE),
            is_verified=attributes.get(ATTR_EMAIL_VERIFIED) == "true",
            token=access_token,
        )

