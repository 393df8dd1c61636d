"""
User profile repository.
"""

from app.repositories.base import BaseRepository
from app.repositories.record_store import RecordStore
from app.models.user import UserProfile
from typing import Optional


class UserRepository(BaseRepository[UserProfile]):
    """Profiles keyed by the identity provider's subject id."""

    def __init__(self, store: RecordStore, table: str):
        super().__init__(UserProfile, store, table)

    async def get_by_email(self, email: str) -> Optional[UserProfile]:
        profiles = await self.find_all(email=email.lower())
        return profiles[0] if profiles else None
