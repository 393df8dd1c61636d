"""
Tests for dashboard aggregation and account statistics.
"""

import asyncio
import pytest
from datetime import timedelta

from app.models.application import ApplicationStatus
from app.models.payment import PaymentStatus
from app.models.property import PropertyStatus
from app.models.rental_agreement import AgreementStatus
from app.models.user import UserRole
from app.services.container import ServiceContainer
from app.services.dashboard import DashboardService
from app.utils.exceptions import UpstreamError
from app.repositories.record_store import RecordStoreError, ScanResult
from tests.conftest import (
    NOW,
    AgreementFactory,
    ApplicationFactory,
    PaymentFactory,
    PropertyFactory,
    UserFactory,
    fixed_clock,
)


@pytest.fixture
async def agreement(container: ServiceContainer, available_property, renter):
    return await AgreementFactory.create(container, available_property, renter.id)


class TestLandlordDashboard:
    """Test the landlord summary."""

    @pytest.mark.asyncio
    async def test_empty_dashboard(self, container: ServiceContainer, landlord):
        """Test dashboard for a landlord with no records."""
        dashboard = await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

        assert dashboard.total_properties == 0
        assert dashboard.total_earnings == 0
        assert dashboard.monthly_earnings == 0
        assert dashboard.recent_applications == []
        assert dashboard.overdue_payments == []
        assert dashboard.upcoming_payments == []

    @pytest.mark.asyncio
    async def test_properties_by_status(self, container: ServiceContainer, landlord):
        """Test property counts per status ignore other landlords."""
        for status in (
            PropertyStatus.AVAILABLE,
            PropertyStatus.AVAILABLE,
            PropertyStatus.RENTED,
            PropertyStatus.MAINTENANCE,
            PropertyStatus.INACTIVE,
        ):
            await PropertyFactory.create(container, landlord.id, status=status)
        other = await UserFactory.create_user(container, UserRole.LANDLORD)
        await PropertyFactory.create(container, other.id)

        dashboard = await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

        assert dashboard.total_properties == 5
        counts = dashboard.properties_by_status
        assert (counts.available, counts.rented, counts.maintenance, counts.inactive) == (2, 1, 1, 1)

    @pytest.mark.asyncio
    async def test_earnings_sum_paid_payments_only(self, container: ServiceContainer, landlord, agreement):
        """Test earnings include paid payments only."""
        await PaymentFactory.create(container, agreement, "2024-05-01", amount=1000,
                                    status=PaymentStatus.PAID, month="2024-05")
        june = await PaymentFactory.create(container, agreement, "2024-06-01", amount=1200,
                                           status=PaymentStatus.PAID, month="2024-06")
        await PaymentFactory.create(container, agreement, "2024-07-01", amount=500)
        await PaymentFactory.create(container, agreement, "2024-04-01", amount=300,
                                    status=PaymentStatus.CANCELLED)

        service = DashboardService(container)
        dashboard = await service.landlord_dashboard(landlord.id, now=NOW)

        assert dashboard.total_earnings == 2200
        assert dashboard.monthly_earnings == 1200

        # Un-paying a payment strictly lowers the total
        await container.payments.update(june.id, {"status": PaymentStatus.CANCELLED})
        dashboard = await service.landlord_dashboard(landlord.id, now=NOW)
        assert dashboard.total_earnings == 1000
        assert dashboard.monthly_earnings == 0

    @pytest.mark.asyncio
    async def test_overdue_and_upcoming_split(self, container: ServiceContainer, landlord, agreement):
        """Test pending payments split into overdue and upcoming."""
        late = await PaymentFactory.create(container, agreement, "2024-06-10")
        later = await PaymentFactory.create(container, agreement, "2024-05-10")
        soon = await PaymentFactory.create(container, agreement, "2024-06-20")
        next_month = await PaymentFactory.create(container, agreement, "2024-07-01")
        await PaymentFactory.create(container, agreement, "2024-05-01", status=PaymentStatus.PAID)

        dashboard = await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

        assert [p.id for p in dashboard.overdue_payments] == [later.id, late.id]
        assert all(p.is_overdue for p in dashboard.overdue_payments)
        assert [p.id for p in dashboard.upcoming_payments] == [soon.id, next_month.id]
        assert not any(p.is_overdue for p in dashboard.upcoming_payments)

    @pytest.mark.asyncio
    async def test_moving_clock_moves_payment_to_overdue(self, container: ServiceContainer, landlord, agreement):
        """Test overdue is derived from the clock without writes."""
        payment = await PaymentFactory.create(container, agreement, "2024-06-20")
        service = DashboardService(container)

        before = await service.landlord_dashboard(landlord.id, now=NOW)
        after = await service.landlord_dashboard(landlord.id, now=NOW + timedelta(days=10))

        assert [p.id for p in before.upcoming_payments] == [payment.id]
        assert before.overdue_payments == []
        assert [p.id for p in after.overdue_payments] == [payment.id]
        assert after.upcoming_payments == []

        stored = await container.payments.get_by_id(payment.id)
        assert stored.status == PaymentStatus.PENDING
        assert stored.updated_at == payment.updated_at

    @pytest.mark.asyncio
    async def test_due_exactly_now_is_upcoming(self, container: ServiceContainer, landlord, agreement):
        """Test a payment due exactly now is upcoming."""
        payment = await PaymentFactory.create(container, agreement, NOW.isoformat())

        dashboard = await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

        assert [p.id for p in dashboard.upcoming_payments] == [payment.id]
        assert dashboard.overdue_payments == []

    @pytest.mark.asyncio
    async def test_upcoming_limited_to_ten(self, container: ServiceContainer, landlord, agreement):
        """Test landlord upcoming payments are capped at ten."""
        for day in range(1, 13):
            await PaymentFactory.create(container, agreement, f"2024-07-{day:02d}")

        dashboard = await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

        assert len(dashboard.upcoming_payments) == 10
        assert dashboard.upcoming_payments[0].due_date == "2024-07-01"

    @pytest.mark.asyncio
    async def test_recent_applications_newest_five(self, container: ServiceContainer, landlord,
                                                   available_property):
        """Test recent applications are the five newest."""
        renters = [await UserFactory.create_user(container, UserRole.RENTER) for _ in range(6)]
        for day, renter in enumerate(renters, start=1):
            await ApplicationFactory.create(container, available_property, renter.id,
                                            created_at=f"2024-06-0{day}T00:00:00.000Z")

        dashboard = await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

        assert [a.renter_id for a in dashboard.recent_applications] == [r.id for r in reversed(renters)][:5]

    @pytest.mark.asyncio
    async def test_fetch_failure_fails_whole_dashboard(self, container: ServiceContainer, landlord, monkeypatch):
        """Test a failed fetch fails the whole dashboard."""
        async def broken_scan(*args, **kwargs):
            raise RecordStoreError("store unavailable")

        monkeypatch.setattr(container.record_store, "scan", broken_scan)

        with pytest.raises(UpstreamError, match="Failed to fetch dashboard"):
            await DashboardService(container).landlord_dashboard(landlord.id, now=NOW)

    @pytest.mark.asyncio
    async def test_failure_waits_for_sibling_fetches(self, container: ServiceContainer, landlord, monkeypatch):
        """Test a failed fetch is reported only after the other fetches have finished."""
        service = DashboardService(container)
        finished = []

        async def broken_properties(*args, **kwargs):
            raise RecordStoreError("properties unavailable")

        async def slow_applications(*args, **kwargs):
            await asyncio.sleep(0.05)
            finished.append("applications")
            return [], ScanResult()

        monkeypatch.setattr(service.properties, "get_by_landlord", broken_properties)
        monkeypatch.setattr(service.applications, "get_for_user", slow_applications)

        with pytest.raises(UpstreamError, match="Failed to fetch dashboard"):
            await service.landlord_dashboard(landlord.id, now=NOW)

        assert finished == ["applications"]

    @pytest.mark.asyncio
    async def test_clock_used_when_now_omitted(self, container: ServiceContainer, landlord, agreement):
        """Test the injected clock is used when now is omitted."""
        await PaymentFactory.create(container, agreement, "2024-06-20")

        service = DashboardService(container, clock=fixed_clock(NOW + timedelta(days=30)))
        dashboard = await service.landlord_dashboard(landlord.id)

        assert len(dashboard.overdue_payments) == 1


class TestRenterDashboard:
    """Test the renter summary."""

    @pytest.mark.asyncio
    async def test_renter_dashboard(self, container: ServiceContainer, landlord, renter, available_property):
        """Test the renter dashboard sections."""
        other_property = await PropertyFactory.create(container, landlord.id, title="Loft")
        pending = await ApplicationFactory.create(container, available_property, renter.id)
        await ApplicationFactory.create(container, other_property, renter.id, status=ApplicationStatus.REJECTED)

        active = await AgreementFactory.create(container, available_property, renter.id)
        await AgreementFactory.create(container, other_property, renter.id, status=AgreementStatus.TERMINATED)

        older_paid = await PaymentFactory.create(container, active, "2024-04-01", status=PaymentStatus.PAID,
                                                 paid_date="2024-04-01T10:00:00.000Z")
        newer_paid = await PaymentFactory.create(container, active, "2024-05-01", status=PaymentStatus.PAID,
                                                 paid_date="2024-05-02T10:00:00.000Z")
        upcoming = await PaymentFactory.create(container, active, "2024-07-01")
        await PaymentFactory.create(container, active, "2024-06-01")  # overdue, not upcoming

        dashboard = await DashboardService(container).renter_dashboard(renter.id, now=NOW)

        assert [a.id for a in dashboard.active_applications] == [pending.id]
        assert [a.id for a in dashboard.current_rentals] == [active.id]
        assert [p.id for p in dashboard.payment_history] == [newer_paid.id, older_paid.id]
        assert [p.id for p in dashboard.upcoming_payments] == [upcoming.id]

    @pytest.mark.asyncio
    async def test_payment_history_falls_back_to_created_at(self, container: ServiceContainer, renter,
                                                            available_property):
        """Test payment history orders by createdAt without paidDate."""
        agreement = await AgreementFactory.create(container, available_property, renter.id)
        first = await PaymentFactory.create(container, agreement, "2024-01-01", status=PaymentStatus.PAID,
                                            created_at="2024-01-01T00:00:00.000Z")
        second = await PaymentFactory.create(container, agreement, "2024-02-01", status=PaymentStatus.PAID,
                                             created_at="2024-02-01T00:00:00.000Z")

        dashboard = await DashboardService(container).renter_dashboard(renter.id, now=NOW)

        assert [p.id for p in dashboard.payment_history] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_upcoming_limited_to_five(self, container: ServiceContainer, renter, available_property):
        """Test renter upcoming payments are capped at five."""
        agreement = await AgreementFactory.create(container, available_property, renter.id)
        for day in range(1, 8):
            await PaymentFactory.create(container, agreement, f"2024-07-{day:02d}")

        dashboard = await DashboardService(container).renter_dashboard(renter.id, now=NOW)

        assert len(dashboard.upcoming_payments) == 5


class TestStats:

    @pytest.mark.asyncio
    async def test_landlord_stats(self, container: ServiceContainer, landlord, renter, available_property):
        """Test landlord statistics."""
        await PropertyFactory.create(container, landlord.id, status=PropertyStatus.RENTED)
        await ApplicationFactory.create(container, available_property, renter.id)
        agreement = await AgreementFactory.create(container, available_property, renter.id)
        await PaymentFactory.create(container, agreement, "2024-05-01", amount=900, status=PaymentStatus.PAID)
        await PaymentFactory.create(container, agreement, "2024-06-01")

        stats = await DashboardService(container).landlord_stats(landlord.id, now=NOW)

        assert stats.total_properties == 2
        assert stats.available_properties == 1
        assert stats.rented_properties == 1
        assert stats.total_applications == 1
        assert stats.pending_applications == 1
        assert stats.total_payments == 2
        assert stats.paid_payments == 1
        assert stats.overdue_payments == 1
        assert stats.total_earnings == 900

    @pytest.mark.asyncio
    async def test_renter_stats(self, container: ServiceContainer, renter, available_property):
        """Test renter statistics."""
        await ApplicationFactory.create(container, available_property, renter.id, status=ApplicationStatus.APPROVED)
        agreement = await AgreementFactory.create(container, available_property, renter.id)
        await PaymentFactory.create(container, agreement, "2024-05-01", amount=700, status=PaymentStatus.PAID)

        stats = await DashboardService(container).renter_stats(renter.id, now=NOW)

        assert stats.total_applications == 1
        assert stats.approved_applications == 1
        assert stats.current_rentals == 1
        assert stats.total_spent == 700
