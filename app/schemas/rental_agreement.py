"""
Rental agreement schemas.
"""

from pydantic import Field, field_validator, model_validator
from typing import Optional
from app.models.common import CamelModel
from app.utils.time import parse_timestamp


class RentalAgreementCreate(CamelModel):
    """Schema for creating an agreement from an approved application."""

    property_id: str = Field(..., min_length=1)
    renter_id: str = Field(..., min_length=1)
    start_date: str
    end_date: str
    monthly_rent: Optional[float] = Field(
        None,
        gt=0,
        description="Defaults to the property's monthly price"
    )
    deposit: Optional[float] = Field(None, ge=0, description="Defaults to the property's deposit")
    utilities_included: bool = False
    terms: str = Field("", max_length=10000)

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, v):
        try:
            parse_timestamp(v)
        except ValueError:
            raise ValueError("Must be an ISO 8601 date or timestamp")
        return v

    @model_validator(mode="after")
    def check_period(self):
        if parse_timestamp(self.end_date) <= parse_timestamp(self.start_date):
            raise ValueError("endDate must be after startDate")
        return self


class AgreementTermination(CamelModel):
    reason: Optional[str] = Field(None, max_length=2000)
