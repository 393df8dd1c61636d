"""
Identity model for the local identity provider.
Holds credentials and verification state; profile data lives in the record store.
"""

from sqlalchemy import String, Boolean, Integer, JSON, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from datetime import datetime
from typing import Any, Dict, Optional


class IdentityRow(Base):
    """Credential record for one user account."""

    __tablename__ = "identities"

    subject_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Stable subject identifier issued at sign-up"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Login name - lowercased email address"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    attributes: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="User attributes returned by token lookups"
    )

    is_confirmed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    confirmation_code: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True
    )

    reset_code: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True
    )

    # Bumped on sign-out; tokens carrying an older version are rejected
    token_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<IdentityRow(subject_id={self.subject_id}, email={self.email})>"
