"""
Payment model with stored status and read-time overdue classification.
"""

from datetime import datetime
from typing import Optional
from app.models.common import RecordModel
from app.utils.time import parse_timestamp
import enum


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentType(str, enum.Enum):
    RENT = "rent"
    DEPOSIT = "deposit"
    UTILITIES = "utilities"
    LATE_FEE = "late_fee"
    OTHER = "other"


class Payment(RecordModel):
    """
    Scheduled payment against a rental agreement.

    `status` is the persisted value; `is_overdue_at` is the derived
    classification (still pending, due date passed) and never writes back.
    """

    rental_agreement_id: str
    property_id: str
    renter_id: str
    landlord_id: str
    amount: float
    type: PaymentType
    status: PaymentStatus = PaymentStatus.PENDING
    due_date: str
    paid_date: Optional[str] = None
    month: Optional[str] = None  # YYYY-MM for rent payments
    notes: Optional[str] = None

    @property
    def due_at(self) -> datetime:
        return parse_timestamp(self.due_date)

    def is_overdue_at(self, now: datetime) -> bool:
        return self.status == PaymentStatus.PENDING and self.due_at < now

    def is_upcoming_at(self, now: datetime) -> bool:
        return self.status == PaymentStatus.PENDING and self.due_at >= now
