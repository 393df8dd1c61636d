"""
Identity provider: sign-up, confirmation, login, token refresh, password reset
and bearer token lookup.

Callers only see subject ids, opaque bearer tokens and a fixed attribute set.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from jose import JWTError
from app.database import Database
from app.models.identity import IdentityRow
from app.utils.auth import TokenCodec, hash_password, verify_password
from app.utils.exceptions import (
    ConflictError,
    ValidationError,
    NotFoundError,
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
)
import secrets
import uuid
import logging

logger = logging.getLogger(__name__)

# Attribute names returned by token lookups
ATTR_EMAIL = "email"
ATTR_GIVEN_NAME = "given_name"
ATTR_FAMILY_NAME = "family_name"
ATTR_USER_TYPE = "custom:userType"
ATTR_PHONE = "phone_number"
ATTR_EMAIL_VERIFIED = "email_verified"

USER_ATTRIBUTES = (ATTR_EMAIL, ATTR_GIVEN_NAME, ATTR_FAMILY_NAME, ATTR_USER_TYPE, ATTR_PHONE)


class IdentityProviderError(Exception):
    """The identity backend could not complete an operation."""


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: str
    expires_in: int


@dataclass
class IdentityUser:
    """Result of a bearer token lookup."""
    subject_id: str
    attributes: Dict[str, str] = field(default_factory=dict)


class IdentityProvider(ABC):
    """Contract every identity backend satisfies."""

    @abstractmethod
    async def sign_up(self, email: str, password: str, attributes: Dict[str, str]) -> str:
        """Register an account and return its subject id."""

    @abstractmethod
    async def confirm(self, email: str, code: str) -> None:
        ...

    @abstractmethod
    async def login(self, email: str, password: str) -> AuthTokens:
        ...

    @abstractmethod
    async def refresh(self, refresh_token: str) -> AuthTokens:
        ...

    @abstractmethod
    async def forgot_password(self, email: str) -> None:
        ...

    @abstractmethod
    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        ...

    @abstractmethod
    async def get_user_by_token(self, access_token: str) -> IdentityUser:
        ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        """Revoke every token issued to the account."""


class LocalIdentityProvider(IdentityProvider):
    """
    Identity provider backed by the `identities` table.

    Passwords are bcrypt hashes; tokens are signed JWTs carrying the
    account's token version so that sign-out revokes them.
    """

    def __init__(
        self,
        database: Database,
        codec: TokenCodec,
        auto_confirm: bool = False,
        code_length: int = 6,
        min_password_length: int = 8
    ):
        self.database = database
        self.codec = codec
        self.auto_confirm = auto_confirm
        self.code_length = code_length
        self.min_password_length = min_password_length

    def _new_code(self) -> str:
        return "".join(str(secrets.randbelow(10)) for _ in range(self.code_length))

    def _check_password(self, password: str):
        if not password or len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters long"
            )

    async def get_identity(self, email: str) -> Optional[IdentityRow]:
        """Load the credential row for an email address."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(IdentityRow).where(IdentityRow.email == email.strip().lower())
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Identity lookup failed: {e}")
            raise IdentityProviderError("Identity lookup failed") from e

    async def sign_up(self, email: str, password: str, attributes: Dict[str, str]) -> str:
        self._check_password(password)
        email = email.strip().lower()

        if await self.get_identity(email):
            raise ConflictError("User with this email already exists")

        subject_id = str(uuid.uuid4())
        stored = {k: v for k, v in attributes.items() if k in USER_ATTRIBUTES and v is not None}
        stored[ATTR_EMAIL] = email
        identity = IdentityRow(
            subject_id=subject_id,
            email=email,
            hashed_password=hash_password(password),
            attributes=stored,
            is_confirmed=self.auto_confirm,
            confirmation_code=None if self.auto_confirm else self._new_code(),
            token_version=0,
        )

        try:
            async with self.database.session() as session:
                session.add(identity)
                await session.commit()
        except IntegrityError as e:
            raise ConflictError("User with this email already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"Sign-up failed for {email}: {e}")
            raise IdentityProviderError("Registration failed") from e

        logger.info(f"Registered identity {subject_id} for {email}")
        if identity.confirmation_code:
            logger.debug(f"Confirmation code for {email}: {identity.confirmation_code}")
        return subject_id

    async def confirm(self, email: str, code: str) -> None:
        async with self._mutate(email) as identity:
            if identity.is_confirmed:
                raise ValidationError("User is already confirmed")
            if not code or not secrets.compare_digest(identity.confirmation_code or "", code):
                raise ValidationError("Invalid confirmation code")
            identity.is_confirmed = True
            identity.confirmation_code = None
        logger.info(f"Confirmed identity for {email}")

    async def login(self, email: str, password: str) -> AuthTokens:
        identity = await self.get_identity(email)
        if identity is None:
            raise NotFoundError("User")
        if not verify_password(password, identity.hashed_password):
            logger.warning(f"Failed login attempt for {email}")
            raise InvalidCredentialsError()
        if not identity.is_confirmed:
            raise AuthenticationError("Please confirm your email before logging in")

        return AuthTokens(
            access_token=self.codec.create_access_token(identity.subject_id, identity.email, identity.token_version),
            refresh_token=self.codec.create_refresh_token(identity.subject_id, identity.email, identity.token_version),
            expires_in=self.codec.access_expires_in,
        )

    async def refresh(self, refresh_token: str) -> AuthTokens:
        try:
            payload = self.codec.verify_token(refresh_token, token_type="refresh")
        except JWTError as e:
            raise InvalidTokenError("Invalid refresh token") from e

        identity = await self._by_subject(payload.subject_id)
        if identity is None or identity.token_version != payload.version:
            raise InvalidTokenError("Invalid refresh token")

        return AuthTokens(
            access_token=self.codec.create_access_token(identity.subject_id, identity.email, identity.token_version),
            refresh_token=refresh_token,
            expires_in=self.codec.access_expires_in,
        )

    async def forgot_password(self, email: str) -> None:
        async with self._mutate(email) as identity:
            identity.reset_code = self._new_code()
            code = identity.reset_code
        logger.info(f"Password reset requested for {email}")
        logger.debug(f"Password reset code for {email}: {code}")

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        self._check_password(new_password)
        async with self._mutate(email) as identity:
            if not identity.reset_code or not secrets.compare_digest(identity.reset_code, code or ""):
                raise ValidationError("Invalid reset code")
            identity.hashed_password = hash_password(new_password)
            identity.reset_code = None
            # Existing sessions end with the old password
            identity.token_version += 1
        logger.info(f"Password reset for {email}")

    async def get_user_by_token(self, access_token: str) -> IdentityUser:
        try:
            payload = self.codec.verify_token(access_token, token_type="access")
        except JWTError as e:
            raise InvalidTokenError() from e

        identity = await self._by_subject(payload.subject_id)
        if identity is None or identity.token_version != payload.version:
            raise InvalidTokenError()

        attributes = dict(identity.attributes or {})
        attributes[ATTR_EMAIL_VERIFIED] = "true" if identity.is_confirmed else "false"
        return IdentityUser(subject_id=identity.subject_id, attributes=attributes)

    async def sign_out(self, access_token: str) -> None:
        try:
            payload = self.codec.verify_token(access_token, token_type="access")
        except JWTError as e:
            raise InvalidTokenError() from e
        async with self._mutate(payload.email) as identity:
            identity.token_version += 1
        logger.info(f"Signed out {payload.subject_id}")

    async def _by_subject(self, subject_id: str) -> Optional[IdentityRow]:
        try:
            async with self.database.session() as session:
                return await session.get(IdentityRow, subject_id)
        except SQLAlchemyError as e:
            logger.error(f"Identity lookup failed: {e}")
            raise IdentityProviderError("Identity lookup failed") from e

    def _mutate(self, email: str) -> "_IdentityMutation":
        return _IdentityMutation(self.database, email)


class _IdentityMutation:
    """Load one identity row, let the caller change it, commit on clean exit."""

    def __init__(self, database: Database, email: str):
        self.database = database
        self.email = (email or "").strip().lower()
        self.session = None

    async def __aenter__(self) -> IdentityRow:
        self.session = self.database.session()
        try:
            result = await self.session.execute(
                select(IdentityRow).where(IdentityRow.email == self.email)
            )
            identity = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self.session.close()
            raise IdentityProviderError("Identity lookup failed") from e

        if identity is None:
            await self.session.close()
            raise NotFoundError("User")
        return identity

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                await self.session.commit()
            else:
                await self.session.rollback()
        except SQLAlchemyError as e:
            raise IdentityProviderError("Identity update failed") from e
        finally:
            await self.session.close()
        return False
