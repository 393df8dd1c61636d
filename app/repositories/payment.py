"""
Payment repository.
"""

from app.repositories.base import BaseRepository
from app.repositories.record_store import RecordStore, Predicate, ScanResult
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.models.user import UserRole
from typing import Any, Dict, List, Optional, Tuple


class PaymentRepository(BaseRepository[Payment]):

    def __init__(self, store: RecordStore, table: str):
        super().__init__(Payment, store, table)

    async def get_for_user(
        self,
        user_id: str,
        role: UserRole,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        predicate: Optional[Predicate] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Payment], ScanResult]:
        owner_field = "renterId" if role == UserRole.RENTER else "landlordId"
        filters: Dict[str, Any] = {owner_field: user_id}
        if status is not None:
            filters["status"] = status
        if payment_type is not None:
            filters["type"] = payment_type
        return await self.scan(filters=filters, predicate=predicate, limit=limit, cursor=cursor)

    async def get_for_agreement(
        self,
        rental_agreement_id: str,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Payment], ScanResult]:
        filters: Dict[str, Any] = {"rentalAgreementId": rental_agreement_id}
        if status is not None:
            filters["status"] = status
        if payment_type is not None:
            filters["type"] = payment_type
        return await self.scan(filters=filters, limit=limit, cursor=cursor)
