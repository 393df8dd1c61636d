"""
Collaborators shared by request handlers.

Built once when the application starts and handed to services explicitly.
"""

from dataclasses import dataclass
from datetime import timedelta
from app.config import Settings
from app.database import Database
from app.repositories.record_store import RecordStore, SQLRecordStore
from app.repositories.property import PropertyRepository
from app.repositories.application import ApplicationRepository
from app.repositories.payment import PaymentRepository
from app.repositories.rental_agreement import RentalAgreementRepository
from app.repositories.user import UserRepository
from app.services.identity import IdentityProvider, LocalIdentityProvider
from app.services.storage import BlobStore, LocalBlobStore
from app.utils.auth import TokenCodec


@dataclass
class ServiceContainer:
    settings: Settings
    database: Database
    record_store: RecordStore
    blob_store: BlobStore
    identity_provider: IdentityProvider

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        database = Database(settings)
        codec = TokenCodec(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            access_lifetime=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_lifetime=timedelta(days=settings.jwt_refresh_token_expire_days),
        )
        return cls(
            settings=settings,
            database=database,
            record_store=SQLRecordStore(database),
            blob_store=LocalBlobStore(settings.upload_dir, settings.public_base_url),
            identity_provider=LocalIdentityProvider(
                database,
                codec,
                auto_confirm=settings.auto_confirm_users,
                code_length=settings.confirmation_code_length,
                min_password_length=settings.min_password_length,
            ),
        )

    async def startup(self):
        await self.database.create_tables()

    async def shutdown(self):
        await self.database.dispose()

    # Repository factories
    @property
    def users(self) -> UserRepository:
        return UserRepository(self.record_store, self.settings.users_table)

    @property
    def properties(self) -> PropertyRepository:
        return PropertyRepository(self.record_store, self.settings.properties_table)

    @property
    def applications(self) -> ApplicationRepository:
        return ApplicationRepository(self.record_store, self.settings.applications_table)

    @property
    def payments(self) -> PaymentRepository:
        return PaymentRepository(self.record_store, self.settings.payments_table)

    @property
    def rental_agreements(self) -> RentalAgreementRepository:
        return RentalAgreementRepository(self.record_store, self.settings.rental_agreements_table)
