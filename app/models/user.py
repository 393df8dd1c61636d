"""
User profile model and role enumeration.
The identity provider owns credentials; the record store holds the extended profile.
"""

from pydantic import Field
from typing import Optional
from app.models.common import CamelModel, RecordModel
import enum


class UserRole(str, enum.Enum):
    """The two mutually exclusive marketplace roles."""
    LANDLORD = "landlord"
    RENTER = "renter"


class PostalAddress(CamelModel):
    """Street address shared by profiles and properties."""
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class EmergencyContact(CamelModel):
    name: str
    phone: str
    relationship: str


class UserProfile(RecordModel):
    """
    Extended user profile stored under the identity provider's subject id.
    """

    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    user_type: UserRole
    is_verified: bool = False
    profile_image: Optional[str] = None
    address: Optional[PostalAddress] = None
    emergency_contact: Optional[EmergencyContact] = Field(default=None)
