"""
Rental application model.
"""

from pydantic import Field
from typing import List, Optional
from app.models.common import CamelModel, RecordModel
import enum


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class DocumentType(str, enum.Enum):
    PAYSTUB = "paystub"
    BANK_STATEMENT = "bankStatement"
    ID = "id"
    OTHER = "other"


class PersonalInfo(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=1)
    date_of_birth: str
    ssn: Optional[str] = None


class Employment(CamelModel):
    employer: str
    position: str
    income: float = Field(..., ge=0)
    start_date: str


class Reference(CamelModel):
    name: str
    phone: str
    relationship: str


class ApplicationDocument(CamelModel):
    id: str
    type: DocumentType = DocumentType.OTHER
    url: str
    name: str


class Application(RecordModel):
    """
    A renter's application for one property.
    At most one live (not withdrawn or rejected) application per property and renter.
    """

    property_id: str
    renter_id: str
    landlord_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    personal_info: PersonalInfo
    employment: Employment
    references: List[Reference] = Field(default_factory=list)
    documents: List[ApplicationDocument] = Field(default_factory=list)
    message: Optional[str] = None
    notes: Optional[str] = None
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None

    @property
    def is_live(self) -> bool:
        """Counts against the one-application-per-property rule."""
        return self.status not in (ApplicationStatus.WITHDRAWN, ApplicationStatus.REJECTED)
