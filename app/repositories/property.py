"""
Property repository for listings with search and filtering.
Equality filters go to the store; range and text filters run as a scan predicate.
"""

from app.repositories.base import BaseRepository
from app.repositories.record_store import RecordStore, ScanResult
from app.models.property import Property, PropertyStatus
from typing import Optional, List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        search_text: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[float] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        pets_allowed: Optional[bool] = None,
        furnished: Optional[bool] = None,
        parking: Optional[bool] = None,
        status: Optional[PropertyStatus] = PropertyStatus.AVAILABLE
    ):
        self.search_text = search_text
        self.min_price = min_price
        self.max_price = max_price
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.city = city
        self.state = state
        self.pets_allowed = pets_allowed
        self.furnished = furnished
        self.parking = parking
        self.status = status

    def store_filters(self) -> Dict[str, Any]:
        """Top-level equality filters the store can evaluate."""
        filters: Dict[str, Any] = {}
        if self.status is not None:
            filters["status"] = self.status
        return filters

    def matches(self, item: Dict[str, Any]) -> bool:
        """Evaluate the nested and range filters against a stored document."""
        price = (item.get("price") or {}).get("monthly", 0)
        details = item.get("details") or {}
        address = item.get("address") or {}

        if self.search_text:
            needle = self.search_text.lower()
            haystack = [item.get("title", ""), item.get("description", ""), address.get("city", "")]
            if not any(needle in (text or "").lower() for text in haystack):
                return False
        if self.min_price is not None and price < self.min_price:
            return False
        if self.max_price is not None and price > self.max_price:
            return False
        if self.bedrooms is not None and details.get("bedrooms", 0) < self.bedrooms:
            return False
        if self.bathrooms is not None and details.get("bathrooms", 0) < self.bathrooms:
            return False
        if self.city and address.get("city") != self.city:
            return False
        if self.state and address.get("state") != self.state:
            return False
        for flag, attribute in (
            (self.pets_allowed, "petsAllowed"),
            (self.furnished, "furnished"),
            (self.parking, "parking"),
        ):
            if flag is not None and bool(details.get(attribute, False)) != flag:
                return False
        return True


class PropertyRepository(BaseRepository[Property]):
    """Property repository with landlord-scoped and search scans."""

    def __init__(self, store: RecordStore, table: str):
        super().__init__(Property, store, table)

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Property], ScanResult]:
        return await self.scan(
            filters=filters.store_filters(),
            predicate=filters.matches,
            limit=limit,
            cursor=cursor
        )

    async def get_by_landlord(
        self,
        landlord_id: str,
        status: Optional[PropertyStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Property], ScanResult]:
        filters: Dict[str, Any] = {"landlordId": landlord_id}
        if status is not None:
            filters["status"] = status
        return await self.scan(filters=filters, limit=limit, cursor=cursor)

    async def set_status(self, property_id: str, status: PropertyStatus) -> Property:
        updated = await self.update(property_id, {"status": status})
        logger.info(f"Property {property_id} status set to {status.value}")
        return updated
