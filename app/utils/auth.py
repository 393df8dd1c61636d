"""
Authentication utilities for JWT token management and password hashing.
Used by the local identity provider to issue and validate bearer tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import uuid


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, subject_id: str, email: str, token_type: str, version: int, exp: datetime):
        self.subject_id = subject_id
        self.email = email
        self.token_type = token_type
        self.version = version
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            subject_id=data["sub"],
            email=data["email"],
            token_type=data["type"],
            version=int(data.get("ver", 0)),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


class TokenCodec:
    """
    Issues and verifies signed access and refresh tokens.

    Args:
        secret_key: HMAC signing key
        algorithm: JWT algorithm name
        access_lifetime: Lifetime of access tokens
        refresh_lifetime: Lifetime of refresh tokens
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str,
        access_lifetime: timedelta,
        refresh_lifetime: timedelta
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_lifetime = access_lifetime
        self.refresh_lifetime = refresh_lifetime

    def create_token(
        self,
        subject_id: str,
        email: str,
        token_type: str,
        version: int = 0,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a signed JWT.

        Args:
            subject_id: Identity provider subject id
            email: Account email
            token_type: "access" or "refresh"
            version: Identity token version at issue time
            expires_delta: Optional custom expiration time
        """
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = self.access_lifetime if token_type == "access" else self.refresh_lifetime

        to_encode = {
            "sub": subject_id,
            "email": email,
            "type": token_type,
            "ver": version,
            "exp": now + expires_delta,
            "iat": now,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def create_access_token(self, subject_id: str, email: str, version: int = 0) -> str:
        return self.create_token(subject_id, email, "access", version)

    def create_refresh_token(self, subject_id: str, email: str, version: int = 0) -> str:
        return self.create_token(subject_id, email, "refresh", version)

    def verify_token(self, token: str, token_type: str = "access") -> TokenPayload:
        """
        Verify and decode JWT token.

        Raises:
            JWTError: If token is invalid, expired or of the wrong type
        """
        payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])

        if payload.get("type") != token_type:
            raise JWTError(f"Invalid token type. Expected {token_type}")

        if not payload.get("sub") or not payload.get("email"):
            raise JWTError("Invalid token payload")

        try:
            return TokenPayload.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise JWTError(f"Token validation error: {str(e)}")

    @property
    def access_expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self.access_lifetime.total_seconds())


def hash_password(password: str) -> str:
    """Hash password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)
