"""
Rental agreement repository.
"""

from app.repositories.base import BaseRepository
from app.repositories.record_store import RecordStore, ScanResult
from app.models.rental_agreement import RentalAgreement, AgreementStatus
from app.models.user import UserRole
from typing import Any, Dict, List, Optional, Tuple


class RentalAgreementRepository(BaseRepository[RentalAgreement]):

    def __init__(self, store: RecordStore, table: str):
        super().__init__(RentalAgreement, store, table)

    async def get_for_user(
        self,
        user_id: str,
        role: UserRole,
        status: Optional[AgreementStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[RentalAgreement], ScanResult]:
        owner_field = "renterId" if role == UserRole.RENTER else "landlordId"
        filters: Dict[str, Any] = {owner_field: user_id}
        if status is not None:
            filters["status"] = status
        return await self.scan(filters=filters, limit=limit, cursor=cursor)

    async def has_active_for_renter(self, renter_id: str) -> bool:
        return await self.exists(renterId=renter_id, status=AgreementStatus.ACTIVE.value)
