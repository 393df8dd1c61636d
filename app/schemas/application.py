"""
Rental application schemas.
"""

from pydantic import Field
from typing import Any, Dict, List, Optional
from app.models.application import (
    ApplicationStatus,
    DocumentType,
    Employment,
    PersonalInfo,
    Reference,
)
from app.models.common import CamelModel
from app.schemas.common import decode_form_json

APPLICATION_JSON_FIELDS = ("personalInfo", "employment", "references", "documentTypes")


class ApplicationCreate(CamelModel):
    """
    Schema for submitting an application.

    `document_types` labels the uploaded documents by position.
    """

    property_id: str = Field(..., min_length=1)
    personal_info: PersonalInfo
    employment: Employment
    references: List[Reference] = Field(default_factory=list)
    message: Optional[str] = Field(None, max_length=2000)
    document_types: List[DocumentType] = Field(default_factory=list)

    @classmethod
    def from_form(cls, form: Dict[str, Any]) -> "ApplicationCreate":
        return cls.model_validate(decode_form_json(form, APPLICATION_JSON_FIELDS))

    def document_type(self, index: int) -> DocumentType:
        if index < len(self.document_types):
            return self.document_types[index]
        return DocumentType.OTHER


class ApplicationStatusUpdate(CamelModel):
    """Landlord review decision."""

    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=2000)
