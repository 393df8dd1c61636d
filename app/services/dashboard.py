"""
Dashboard aggregation: read-only summaries per caller role.

Each dashboard fetches its three collections concurrently and reduces them
in memory. A failed fetch fails the whole dashboard; partial summaries are
never returned.
"""

from collections import Counter
from datetime import datetime
from typing import Callable, List, Optional
from app.models.application import Application, ApplicationStatus
from app.models.payment import Payment, PaymentStatus
from app.models.property import PropertyStatus
from app.models.rental_agreement import AgreementStatus
from app.models.user import UserRole
from app.schemas.payment import PaymentView
from app.schemas.user import (
    LandlordDashboard,
    LandlordStats,
    PropertiesByStatus,
    RenterDashboard,
    RenterStats,
)
from app.services.access import upstream_errors
from app.services.container import ServiceContainer
from app.utils.time import parse_timestamp, utcnow, year_month
import asyncio
import logging

logger = logging.getLogger(__name__)

RECENT_APPLICATIONS = 5
LANDLORD_UPCOMING = 10
RENTER_HISTORY = 10
RENTER_UPCOMING = 5


def paid_total(payments: List[Payment]) -> float:
    return sum(p.amount for p in payments if p.status == PaymentStatus.PAID)


def overdue_payments(payments: List[Payment], now: datetime) -> List[Payment]:
    """Pending payments due strictly before `now`, earliest first."""
    return sorted((p for p in payments if p.is_overdue_at(now)), key=lambda p: p.due_at)


def upcoming_payments(payments: List[Payment], now: datetime) -> List[Payment]:
    """Pending payments due at or after `now`, earliest first."""
    return sorted((p for p in payments if p.is_upcoming_at(now)), key=lambda p: p.due_at)


def most_recent(applications: List[Application], count: int) -> List[Application]:
    # Stable sort: ties keep insertion order
    return sorted(applications, key=lambda a: parse_timestamp(a.created_at), reverse=True)[:count]


def _paid_at(payment: Payment) -> datetime:
    return parse_timestamp(payment.paid_date or payment.created_at)


async def fetch_all(*fetches):
    """
    Await every fetch, then raise the first failure.

    No sibling is left running behind an error.
    """
    results = await asyncio.gather(*fetches, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class DashboardService:
    """
    Builds the landlord and renter dashboards and the account statistics.

    `clock` supplies the current time; dashboards also accept an explicit `now`.
    """

    def __init__(self, container: ServiceContainer, clock: Callable[[], datetime] = utcnow):
        self.properties = container.properties
        self.applications = container.applications
        self.payments = container.payments
        self.agreements = container.rental_agreements
        self.clock = clock

    async def _landlord_records(self, landlord_id: str):
        with upstream_errors("Failed to fetch dashboard"):
            (properties, _), (applications, _), (payments, _) = await fetch_all(
                self.properties.get_by_landlord(landlord_id),
                self.applications.get_for_user(landlord_id, UserRole.LANDLORD),
                self.payments.get_for_user(landlord_id, UserRole.LANDLORD),
            )
        return properties, applications, payments

    async def _renter_records(self, renter_id: str, agreement_status: Optional[AgreementStatus] = None):
        with upstream_errors("Failed to fetch dashboard"):
            (applications, _), (agreements, _), (payments, _) = await fetch_all(
                self.applications.get_for_user(renter_id, UserRole.RENTER),
                self.agreements.get_for_user(renter_id, UserRole.RENTER, status=agreement_status),
                self.payments.get_for_user(renter_id, UserRole.RENTER),
            )
        return applications, agreements, payments

    async def landlord_dashboard(self, landlord_id: str, now: Optional[datetime] = None) -> LandlordDashboard:
        """
        Properties by status, earnings, the newest applications and the
        overdue/upcoming split of pending payments.
        """
        now = now or self.clock()
        properties, applications, payments = await self._landlord_records(landlord_id)

        counts = Counter(p.status.value for p in properties)
        current_month = year_month(now)

        return LandlordDashboard(
            total_properties=len(properties),
            properties_by_status=PropertiesByStatus(**counts),
            total_earnings=paid_total(payments),
            monthly_earnings=paid_total([p for p in payments if p.month == current_month]),
            recent_applications=most_recent(applications, RECENT_APPLICATIONS),
            overdue_payments=[PaymentView.at(p, now) for p in overdue_payments(payments, now)],
            upcoming_payments=[
                PaymentView.at(p, now) for p in upcoming_payments(payments, now)[:LANDLORD_UPCOMING]
            ],
        )

    async def renter_dashboard(self, renter_id: str, now: Optional[datetime] = None) -> RenterDashboard:
        """
        Pending applications, active rentals, recent paid payments and the
        next pending payments.
        """
        now = now or self.clock()
        applications, agreements, payments = await self._renter_records(
            renter_id, agreement_status=AgreementStatus.ACTIVE
        )

        pending = [a for a in applications if a.status == ApplicationStatus.PENDING]
        paid = sorted(
            (p for p in payments if p.status == PaymentStatus.PAID),
            key=_paid_at,
            reverse=True,
        )

        return RenterDashboard(
            active_applications=most_recent(pending, len(pending)),
            current_rentals=agreements,
            payment_history=[PaymentView.at(p, now) for p in paid[:RENTER_HISTORY]],
            upcoming_payments=[
                PaymentView.at(p, now) for p in upcoming_payments(payments, now)[:RENTER_UPCOMING]
            ],
        )

    async def landlord_stats(self, landlord_id: str, now: Optional[datetime] = None) -> LandlordStats:
        now = now or self.clock()
        properties, applications, payments = await self._landlord_records(landlord_id)
        application_counts = Counter(a.status for a in applications)

        return LandlordStats(
            total_properties=len(properties),
            available_properties=sum(1 for p in properties if p.is_available),
            rented_properties=sum(1 for p in properties if p.status == PropertyStatus.RENTED),
            total_applications=len(applications),
            pending_applications=application_counts[ApplicationStatus.PENDING],
            approved_applications=application_counts[ApplicationStatus.APPROVED],
            total_payments=len(payments),
            paid_payments=sum(1 for p in payments if p.status == PaymentStatus.PAID),
            overdue_payments=len(overdue_payments(payments, now)),
            total_earnings=paid_total(payments),
        )

    async def renter_stats(self, renter_id: str, now: Optional[datetime] = None) -> RenterStats:
        now = now or self.clock()
        applications, agreements, payments = await self._renter_records(renter_id)
        application_counts = Counter(a.status for a in applications)

        return RenterStats(
            total_applications=len(applications),
            pending_applications=application_counts[ApplicationStatus.PENDING],
            approved_applications=application_counts[ApplicationStatus.APPROVED],
            rejected_applications=application_counts[ApplicationStatus.REJECTED],
            current_rentals=sum(1 for a in agreements if a.status == AgreementStatus.ACTIVE),
            total_payments=len(payments),
            paid_payments=sum(1 for p in payments if p.status == PaymentStatus.PAID),
            overdue_payments=len(overdue_payments(payments, now)),
            total_spent=paid_total(payments),
        )
