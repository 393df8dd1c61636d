"""
Property service for managing listings.
Handles CRUD operations, ownership validation, image uploads and search.
"""

from typing import List, Optional, Tuple
from app.models.property import Property, PropertyStatus
from app.repositories.property import PropertySearchFilters
from app.repositories.record_store import ScanResult
from app.schemas.property import PropertyCreate, PropertyUpdate, PropertySearchParams, SortField, SortOrder
from app.services.access import ensure_owner, upstream_errors
from app.services.auth import CurrentUser
from app.services.container import ServiceContainer
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.file_utils import ValidatedUpload
import logging

logger = logging.getLogger(__name__)


def sort_properties(properties: List[Property], sort_by: SortField, order: SortOrder) -> List[Property]:
    """Order a page of listings by monthly price or creation time."""
    if sort_by == SortField.PRICE:
        key = lambda p: p.price.monthly
    else:
        key = lambda p: p.created_at
    return sorted(properties, key=key, reverse=order == SortOrder.DESC)


class PropertyService:
    """
    Property service for managing listings.
    Landlord-only operations are gated at the route; this class checks ownership.
    """

    def __init__(self, container: ServiceContainer):
        self.properties = container.properties
        self.blob_store = container.blob_store
        self.bucket = container.settings.blob_bucket
        self.max_images = container.settings.max_property_images

    async def search_properties(
        self,
        params: PropertySearchParams,
        limit: int,
        cursor: Optional[str] = None
    ) -> Tuple[List[Property], ScanResult]:
        """
        Available listings matching the search filters, one page at a time.
        Sorting applies within the returned page.
        """
        filters = PropertySearchFilters(
            search_text=params.search,
            min_price=params.min_price,
            max_price=params.max_price,
            bedrooms=params.bedrooms,
            bathrooms=params.bathrooms,
            city=params.city,
            state=params.state,
            pets_allowed=params.pets_allowed,
            furnished=params.furnished,
            parking=params.parking,
        )
        with upstream_errors("Failed to fetch properties"):
            properties, result = await self.properties.search_properties(filters, limit=limit, cursor=cursor)
        return sort_properties(properties, params.sort_by, params.sort_order), result

    async def get_property(self, property_id: str) -> Property:
        """
        Raises:
            NotFoundError: If the property does not exist
        """
        with upstream_errors("Failed to fetch property"):
            property_obj = await self.properties.get_by_id(property_id)
        if property_obj is None:
            raise NotFoundError("Property", property_id)
        return property_obj

    async def create_property(
        self,
        data: PropertyCreate,
        images: List[ValidatedUpload],
        current_user: CurrentUser
    ) -> Property:
        """
        Create a listing owned by the caller, storing its images first.
        """
        if len(images) > self.max_images:
            raise ValidationError(f"A property can have at most {self.max_images} images")

        property_obj = Property(
            landlord_id=current_user.id,
            status=PropertyStatus.AVAILABLE,
            **data.model_dump(exclude={"images"}),
        )
        urls = await self._upload_images(property_obj.id, images)
        property_obj.images = urls

        try:
            with upstream_errors("Failed to create property"):
                await self.properties.create(property_obj)
        except Exception:
            await self._delete_images(urls)
            raise

        logger.info(f"Property created by {current_user.id}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def update_property(
        self,
        property_id: str,
        data: PropertyUpdate,
        images: List[ValidatedUpload],
        current_user: CurrentUser
    ) -> Property:
        """
        Apply a partial update; uploaded images are appended to the existing ones.
        """
        existing = await self.get_property(property_id)
        ensure_owner(existing.landlord_id, current_user.id, "update this property")

        if len(existing.images) + len(images) > self.max_images:
            raise ValidationError(f"A property can have at most {self.max_images} images")

        fields = data.to_fields()
        if images:
            fields["images"] = existing.images + await self._upload_images(property_id, images)

        with upstream_errors("Failed to update property"):
            updated = await self.properties.update(property_id, fields)

        logger.info(f"Property {property_id} updated by {current_user.id}: {sorted(fields)}")
        return updated

    async def delete_property(self, property_id: str, current_user: CurrentUser) -> None:
        """
        Delete a listing. Image removal afterwards is best-effort.
        """
        existing = await self.get_property(property_id)
        ensure_owner(existing.landlord_id, current_user.id, "delete this property")

        with upstream_errors("Failed to delete property"):
            await self.properties.delete(property_id)

        await self._delete_images(existing.images)
        logger.info(f"Property {property_id} deleted by {current_user.id}")

    async def get_landlord_properties(
        self,
        current_user: CurrentUser,
        status: Optional[PropertyStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Property], ScanResult]:
        with upstream_errors("Failed to fetch properties"):
            properties, result = await self.properties.get_by_landlord(
                current_user.id, status=status, limit=limit, cursor=cursor
            )
        return sorted(properties, key=lambda p: p.created_at, reverse=True), result

    async def _upload_images(self, property_id: str, images: List[ValidatedUpload]) -> List[str]:
        urls = []
        with upstream_errors("Failed to upload image"):
            for image in images:
                path = f"{property_id}/{image.storage_name()}"
                urls.append(await self.blob_store.upload(self.bucket, path, image.content, image.content_type))
        return urls

    async def _delete_images(self, urls: List[str]) -> None:
        paths = [p for p in (self.blob_store.key_from_url(self.bucket, url) for url in urls) if p]
        if not paths:
            return
        try:
            removed = await self.blob_store.delete_many(self.bucket, paths)
            logger.debug(f"Removed {removed} of {len(paths)} images")
        except Exception as e:
            logger.error(f"Error deleting images: {e}")
