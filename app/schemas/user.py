"""
User profile and dashboard schemas.
"""

from pydantic import Field
from typing import Any, Dict, List, Optional
from app.models.application import Application
from app.models.common import CamelModel
from app.models.rental_agreement import RentalAgreement
from app.models.user import EmergencyContact, PostalAddress
from app.schemas.common import decode_form_json
from app.schemas.payment import PaymentView

PROFILE_JSON_FIELDS = ("address", "emergencyContact")


class ProfileUpdate(CamelModel):
    """Partial profile update; absent fields are unchanged."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[PostalAddress] = None
    emergency_contact: Optional[EmergencyContact] = None

    @classmethod
    def from_form(cls, form: Dict[str, Any]) -> "ProfileUpdate":
        return cls.model_validate(decode_form_json(form, PROFILE_JSON_FIELDS))

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True, exclude_unset=True)


class PropertiesByStatus(CamelModel):
    available: int = 0
    rented: int = 0
    maintenance: int = 0
    inactive: int = 0


class LandlordDashboard(CamelModel):
    """Landlord summary of properties, earnings, applications and payments."""

    total_properties: int
    properties_by_status: PropertiesByStatus
    total_earnings: float
    monthly_earnings: float
    recent_applications: List[Application]
    overdue_payments: List[PaymentView]
    upcoming_payments: List[PaymentView]


class RenterDashboard(CamelModel):
    """Renter summary of applications, rentals and payments."""

    active_applications: List[Application]
    current_rentals: List[RentalAgreement]
    payment_history: List[PaymentView]
    upcoming_payments: List[PaymentView]


class LandlordStats(CamelModel):
    total_properties: int
    available_properties: int
    rented_properties: int
    total_applications: int
    pending_applications: int
    approved_applications: int
    total_payments: int
    paid_payments: int
    overdue_payments: int
    total_earnings: float


class RenterStats(CamelModel):
    total_applications: int
    pending_applications: int
    approved_applications: int
    rejected_applications: int
    current_rentals: int
    total_payments: int
    paid_payments: int
    overdue_payments: int
    total_spent: float
