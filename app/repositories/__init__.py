"""
Repository layer for data access operations.
Typed repositories over the key-value record store.
"""

from app.repositories.record_store import (
    RecordStore,
    SQLRecordStore,
    ScanResult,
    RecordStoreError,
    RecordNotFoundError,
    ConditionFailedError,
)
from app.repositories.base import BaseRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.application import ApplicationRepository
from app.repositories.payment import PaymentRepository
from app.repositories.rental_agreement import RentalAgreementRepository
from app.repositories.user import UserRepository

__all__ = [
    "RecordStore",
    "SQLRecordStore",
    "ScanResult",
    "RecordStoreError",
    "RecordNotFoundError",
    "ConditionFailedError",
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "ApplicationRepository",
    "PaymentRepository",
    "RentalAgreementRepository",
    "UserRepository",
]
