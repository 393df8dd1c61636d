"""
Rental agreement model binding a landlord, a renter and a property.
"""

from pydantic import Field
from typing import Optional
from app.models.common import RecordModel
import enum


class AgreementStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class RentalAgreement(RecordModel):
    property_id: str
    landlord_id: str
    renter_id: str
    start_date: str
    end_date: str
    monthly_rent: float = Field(..., gt=0)
    deposit: float = Field(0, ge=0)
    utilities_included: bool = False
    status: AgreementStatus = AgreementStatus.ACTIVE
    terms: str = ""
    terminated_at: Optional[str] = None
    termination_reason: Optional[str] = None
