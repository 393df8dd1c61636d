"""
Property schemas for request/response validation and serialization.
"""

from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional
from enum import Enum
from app.models.common import CamelModel
from app.models.property import (
    Coordinates,
    LeaseTerms,
    PropertyDetails,
    PropertyPrice,
    PropertyStatus,
)
from app.models.user import PostalAddress
from app.schemas.common import decode_form_json

# Nested fields sent as JSON strings in multipart requests
PROPERTY_JSON_FIELDS = ("address", "coordinates", "price", "details", "amenities", "leaseTerms")


class PropertyBase(CamelModel):
    """Fields shared by property creation and updates."""

    @field_validator("title", "description", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        if v is not None:
            if not v.strip():
                raise ValueError("Field cannot be empty")
            return v.strip()
        return v

    @classmethod
    def from_form(cls, form: Dict[str, Any]):
        """Build from multipart form fields, decoding the JSON-encoded ones."""
        return cls.model_validate(decode_form_json(form, PROPERTY_JSON_FIELDS))


class PropertyCreate(PropertyBase):
    """Schema for creating a new property listing."""

    title: str = Field(..., min_length=1, max_length=255, description="Listing title")
    description: str = Field(..., min_length=1, max_length=5000, description="Listing description")
    address: PostalAddress
    coordinates: Optional[Coordinates] = None
    price: PropertyPrice
    details: PropertyDetails
    amenities: List[str] = Field(default_factory=list)
    available_date: Optional[str] = None
    lease_terms: Optional[LeaseTerms] = None


class PropertyUpdate(PropertyBase):
    """Schema for updating an existing property; absent fields are unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    address: Optional[PostalAddress] = None
    coordinates: Optional[Coordinates] = None
    price: Optional[PropertyPrice] = None
    details: Optional[PropertyDetails] = None
    amenities: Optional[List[str]] = None
    status: Optional[PropertyStatus] = None
    available_date: Optional[str] = None
    lease_terms: Optional[LeaseTerms] = None

    def to_fields(self) -> Dict[str, Any]:
        """camelCase field set of the values the caller supplied."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True, exclude_unset=True)


class SortField(str, Enum):
    PRICE = "price"
    DATE = "date"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PropertySearchParams(CamelModel):
    """Query parameters of the public listing endpoint."""

    search: Optional[str] = Field(None, description="Text matched against title, description and city")
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    city: Optional[str] = None
    state: Optional[str] = None
    pets_allowed: Optional[bool] = None
    furnished: Optional[bool] = None
    parking: Optional[bool] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("max_price")
    @classmethod
    def validate_price_range(cls, v, info):
        min_price = info.data.get("min_price")
        if v is not None and min_price is not None and v < min_price:
            raise ValueError("max_price must be greater than or equal to min_price")
        return v
