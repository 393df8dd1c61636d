"""
Payment schemas.
"""

from datetime import datetime
from pydantic import Field, field_validator
from typing import List, Optional
from app.models.common import CamelModel
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.utils.time import parse_timestamp
import re

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _check_timestamp(v: Optional[str]) -> Optional[str]:
    if v is not None:
        try:
            parse_timestamp(v)
        except ValueError:
            raise ValueError("Must be an ISO 8601 date or timestamp")
    return v


class PaymentCreate(CamelModel):
    """Schema for scheduling a payment against a rental agreement."""

    rental_agreement_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    type: PaymentType
    due_date: str = Field(..., description="ISO 8601 due date")
    month: Optional[str] = Field(None, description="YYYY-MM, for rent payments")
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("due_date")
    @classmethod
    def validate_due_date(cls, v):
        return _check_timestamp(v)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v):
        if v is not None and not MONTH_PATTERN.match(v):
            raise ValueError("Month must use the YYYY-MM format")
        return v


class PaymentStatusUpdate(CamelModel):
    status: PaymentStatus
    paid_date: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("paid_date")
    @classmethod
    def validate_paid_date(cls, v):
        return _check_timestamp(v)


class BulkPaymentUpdate(PaymentStatusUpdate):
    payment_ids: List[str] = Field(..., min_length=1, max_length=100)


class BulkUpdateResult(CamelModel):
    """Outcome for one id of a bulk update."""

    id: str
    success: bool
    error: Optional[str] = None


class PaymentView(Payment):
    """Payment as listed, with the read-time overdue classification."""

    is_overdue: bool = False

    @classmethod
    def at(cls, payment: Payment, now: datetime) -> "PaymentView":
        return cls(**payment.model_dump(), is_overdue=payment.is_overdue_at(now))
