"""
Property listing model.
Handles address, pricing, details and the listing status.
"""

from pydantic import Field
from typing import List, Optional
from app.models.common import CamelModel, RecordModel
from app.models.user import PostalAddress
import enum


class PropertyStatus(str, enum.Enum):
    """Listing status; `rented` is set when an application is approved."""
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class Coordinates(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PropertyPrice(CamelModel):
    monthly: float = Field(..., gt=0)
    deposit: Optional[float] = Field(None, ge=0)
    utilities: Optional[float] = Field(None, ge=0)


class PropertyDetails(CamelModel):
    bedrooms: int = Field(..., ge=0, le=50)
    bathrooms: float = Field(..., ge=0, le=50)
    square_feet: Optional[int] = Field(None, gt=0)
    parking: bool = False
    furnished: bool = False
    pets_allowed: bool = False
    smoking_allowed: bool = False


class LeaseTerms(CamelModel):
    min_lease_months: int = Field(..., ge=1)
    max_lease_months: Optional[int] = Field(None, ge=1)


class Property(RecordModel):
    """
    Rental listing owned by a landlord (`landlordId` is the owner id).
    """

    landlord_id: str
    title: str
    description: str
    address: PostalAddress
    coordinates: Optional[Coordinates] = None
    price: PropertyPrice
    details: PropertyDetails
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    status: PropertyStatus = PropertyStatus.AVAILABLE
    available_date: Optional[str] = None
    lease_terms: Optional[LeaseTerms] = None

    @property
    def is_available(self) -> bool:
        return self.status == PropertyStatus.AVAILABLE
