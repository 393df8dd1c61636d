"""
User profile service: profile reads and updates, and account deletion.
"""

from typing import Optional
from app.models.property import PropertyStatus
from app.models.user import UserProfile
from app.schemas.user import ProfileUpdate
from app.services.access import upstream_errors
from app.services.auth import CurrentUser
from app.services.container import ServiceContainer
from app.utils.exceptions import BusinessRuleViolationError, NotFoundError
from app.utils.file_utils import ValidatedUpload
import logging

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, container: ServiceContainer):
        self.users = container.users
        self.properties = container.properties
        self.agreements = container.rental_agreements
        self.blob_store = container.blob_store
        self.bucket = container.settings.blob_bucket

    async def get_profile(self, current_user: CurrentUser) -> UserProfile:
        with upstream_errors("Failed to fetch user profile"):
            profile = await self.users.get_by_id(current_user.id)
        if profile is None:
            raise NotFoundError("User profile")
        return profile

    async def update_profile(
        self,
        current_user: CurrentUser,
        data: ProfileUpdate,
        image: Optional[ValidatedUpload] = None
    ) -> UserProfile:
        """Apply a partial profile update, storing a new profile image if given."""
        await self.get_profile(current_user)
        fields = data.to_fields()

        if image is not None:
            path = f"profiles/{current_user.id}/{image.storage_name()}"
            with upstream_errors("Failed to upload profile image"):
                fields["profileImage"] = await self.blob_store.upload(
                    self.bucket, path, image.content, image.content_type
                )

        with upstream_errors("Failed to update profile"):
            profile = await self.users.update(current_user.id, fields)

        logger.info(f"Profile {current_user.id} updated: {sorted(fields)}")
        return profile

    async def delete_account(self, current_user: CurrentUser) -> None:
        """
        Delete the caller's profile record.

        Raises:
            BusinessRuleViolationError: If a landlord still has a rented property
                or a renter still has an active rental agreement
        """
        with upstream_errors("Failed to delete account"):
            if current_user.is_landlord:
                blocked = await self.properties.exists(
                    landlordId=current_user.id, status=PropertyStatus.RENTED.value
                )
            else:
                blocked = await self.agreements.has_active_for_renter(current_user.id)

        if blocked:
            raise BusinessRuleViolationError("Cannot delete account with active rentals")

        with upstream_errors("Failed to delete account"):
            await self.users.delete(current_user.id)
        logger.info(f"Account {current_user.id} deleted")
