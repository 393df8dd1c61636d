"""
Test configuration and fixtures for the rental marketplace API.
Provides an in-memory record store, service fixtures, test data factories
and an API client.
"""

import pytest
import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator, Generator, Optional
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.models.application import Application, ApplicationStatus, Employment, PersonalInfo
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.models.property import Property, PropertyDetails, PropertyPrice, PropertyStatus
from app.models.rental_agreement import AgreementStatus, RentalAgreement
from app.models.user import PostalAddress, UserRole
from app.services.auth import AuthService, CurrentUser
from app.services.container import ServiceContainer

TEST_PASSWORD = "testpassword123"


def fixed_clock(now: datetime):
    return lambda: now


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for an isolated in-memory database and upload directory."""
    return Settings(
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-that-is-at-least-32-characters",
        auto_confirm_users=True,
        upload_dir=str(tmp_path / "uploads"),
        public_base_url="http://testserver/static",
    )


@pytest.fixture
async def container(test_settings: Settings) -> AsyncGenerator[ServiceContainer, None]:
    """Collaborators over a fresh database, torn down after each test."""
    container = ServiceContainer.from_settings(test_settings)
    await container.startup()
    yield container
    await container.shutdown()


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """API client; entering the context runs the application lifespan."""
    with TestClient(create_app(test_settings), raise_server_exceptions=False) as client:
        yield client


# Test data factories
class UserFactory:
    """Factory for registered users."""

    @staticmethod
    async def create_user(
        container: ServiceContainer,
        role: UserRole = UserRole.LANDLORD,
        email: Optional[str] = None,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> CurrentUser:
        """Register an account and resolve it the way a request would."""
        auth_service = AuthService(container)
        email = email or f"{role.value}{uuid.uuid4().hex[:8]}@example.com"
        await auth_service.register(email, TEST_PASSWORD, first_name, last_name, role)
        tokens = await auth_service.login(email, TEST_PASSWORD)
        return await auth_service.resolve_user(tokens.access_token)


def address(city: str = "Springfield", state: str = "IL") -> PostalAddress:
    return PostalAddress(street="1 Main St", city=city, state=state, zip_code="62701", country="US")


class PropertyFactory:
    """Factory for stored properties."""

    @staticmethod
    def build(
        landlord_id: str,
        title: str = "Sunny Apartment",
        monthly: float = 1200.0,
        bedrooms: int = 2,
        bathrooms: float = 1,
        city: str = "Springfield",
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        pets_allowed: bool = False,
        created_at: Optional[str] = None,
    ) -> Property:
        kwargs = {"created_at": created_at} if created_at else {}
        return Property(
            landlord_id=landlord_id,
            title=title,
            description="A bright place close to the park",
            address=address(city=city),
            price=PropertyPrice(monthly=monthly, deposit=monthly),
            details=PropertyDetails(bedrooms=bedrooms, bathrooms=bathrooms, pets_allowed=pets_allowed),
            status=status,
            **kwargs,
        )

    @staticmethod
    async def create(container: ServiceContainer, landlord_id: str, **kwargs) -> Property:
        return await container.properties.create(PropertyFactory.build(landlord_id, **kwargs))


def personal_info() -> PersonalInfo:
    return PersonalInfo(
        first_name="Rita",
        last_name="Renter",
        email="rita@example.com",
        phone="555-0100",
        date_of_birth="1990-01-01",
    )


def employment() -> Employment:
    return Employment(employer="Acme", position="Engineer", income=85000, start_date="2020-01-01")


class ApplicationFactory:

    @staticmethod
    async def create(
        container: ServiceContainer,
        property_obj: Property,
        renter_id: str,
        status: ApplicationStatus = ApplicationStatus.PENDING,
        created_at: Optional[str] = None,
    ) -> Application:
        kwargs = {"created_at": created_at} if created_at else {}
        application = Application(
            property_id=property_obj.id,
            renter_id=renter_id,
            landlord_id=property_obj.landlord_id,
            status=status,
            personal_info=personal_info(),
            employment=employment(),
            **kwargs,
        )
        return await container.applications.create(application)


class AgreementFactory:

    @staticmethod
    async def create(
        container: ServiceContainer,
        property_obj: Property,
        renter_id: str,
        status: AgreementStatus = AgreementStatus.ACTIVE,
    ) -> RentalAgreement:
        agreement = RentalAgreement(
            property_id=property_obj.id,
            landlord_id=property_obj.landlord_id,
            renter_id=renter_id,
            start_date="2024-01-01",
            end_date="2024-12-31",
            monthly_rent=property_obj.price.monthly,
            deposit=property_obj.price.deposit or 0,
            status=status,
        )
        return await container.rental_agreements.create(agreement)


class PaymentFactory:

    @staticmethod
    async def create(
        container: ServiceContainer,
        agreement: RentalAgreement,
        due_date: str,
        amount: float = 1200.0,
        status: PaymentStatus = PaymentStatus.PENDING,
        month: Optional[str] = None,
        paid_date: Optional[str] = None,
        payment_type: PaymentType = PaymentType.RENT,
        created_at: Optional[str] = None,
    ) -> Payment:
        kwargs = {"created_at": created_at} if created_at else {}
        payment = Payment(
            rental_agreement_id=agreement.id,
            property_id=agreement.property_id,
            renter_id=agreement.renter_id,
            landlord_id=agreement.landlord_id,
            amount=amount,
            type=payment_type,
            status=status,
            due_date=due_date,
            month=month,
            paid_date=paid_date,
            **kwargs,
        )
        return await container.payments.create(payment)


@pytest.fixture
async def landlord(container: ServiceContainer) -> CurrentUser:
    return await UserFactory.create_user(container, UserRole.LANDLORD)


@pytest.fixture
async def renter(container: ServiceContainer) -> CurrentUser:
    return await UserFactory.create_user(container, UserRole.RENTER)


@pytest.fixture
async def available_property(container: ServiceContainer, landlord: CurrentUser) -> Property:
    return await PropertyFactory.create(container, landlord.id)


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
