"""
Models for the rental marketplace.
Record documents (pydantic) plus the SQL rows backing the record store and identities.
"""

from app.models.user import UserRole, UserProfile, PostalAddress, EmergencyContact
from app.models.property import Property, PropertyStatus, PropertyPrice, PropertyDetails
from app.models.application import Application, ApplicationStatus, ApplicationDocument, DocumentType
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.models.rental_agreement import RentalAgreement, AgreementStatus
from app.models.record import RecordRow
from app.models.identity import IdentityRow

# Export all models for easy importing
__all__ = [
    "UserRole",
    "UserProfile",
    "PostalAddress",
    "EmergencyContact",
    "Property",
    "PropertyStatus",
    "PropertyPrice",
    "PropertyDetails",
    "Application",
    "ApplicationStatus",
    "ApplicationDocument",
    "DocumentType",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "RentalAgreement",
    "AgreementStatus",
    "RecordRow",
    "IdentityRow",
]
