"""
Application repository.
"""

from app.repositories.base import BaseRepository
from app.repositories.record_store import RecordStore, ScanResult
from app.models.application import Application, ApplicationStatus
from app.models.user import UserRole
from typing import Any, Dict, List, Optional, Tuple


class ApplicationRepository(BaseRepository[Application]):

    def __init__(self, store: RecordStore, table: str):
        super().__init__(Application, store, table)

    async def find_for_pair(self, property_id: str, renter_id: str) -> List[Application]:
        """Every application one renter has filed for one property."""
        return await self.find_all(propertyId=property_id, renterId=renter_id)

    async def get_for_user(
        self,
        user_id: str,
        role: UserRole,
        status: Optional[ApplicationStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Application], ScanResult]:
        owner_field = "renterId" if role == UserRole.RENTER else "landlordId"
        filters: Dict[str, Any] = {owner_field: user_id}
        if status is not None:
            filters["status"] = status
        return await self.scan(filters=filters, limit=limit, cursor=cursor)

    async def get_for_property(
        self,
        property_id: str,
        status: Optional[ApplicationStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Application], ScanResult]:
        filters: Dict[str, Any] = {"propertyId": property_id}
        if status is not None:
            filters["status"] = status
        return await self.scan(filters=filters, limit=limit, cursor=cursor)
