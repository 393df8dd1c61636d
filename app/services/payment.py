"""
Payment service: scheduling, status changes and listings.

Listings classify each payment against the current time (`isOverdue`);
the stored status only changes when a landlord sets it.
"""

from datetime import datetime
from typing import Callable, List, Optional, Tuple
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.models.rental_agreement import RentalAgreement
from app.models.user import UserRole
from app.repositories.record_store import ScanResult
from app.schemas.payment import BulkPaymentUpdate, BulkUpdateResult, PaymentCreate, PaymentStatusUpdate, PaymentView
from app.services.access import conditional_write, ensure_owner, ensure_participant, upstream_errors
from app.services.auth import CurrentUser
from app.services.container import ServiceContainer
from app.services.status_machine import check_payment_transition, payment_status_fields
from app.utils.exceptions import APIException, NotFoundError
from app.utils.time import add_month, utcnow
import logging

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def by_due_date(payments: List[Payment]) -> List[Payment]:
    return sorted(payments, key=lambda p: p.due_at)


class PaymentService:

    def __init__(self, container: ServiceContainer, clock: Clock = utcnow):
        self.payments = container.payments
        self.agreements = container.rental_agreements
        self.clock = clock

    def view(self, payments: List[Payment], now: Optional[datetime] = None) -> List[PaymentView]:
        """Attach the read-time overdue flag."""
        now = now or self.clock()
        return [PaymentView.at(p, now) for p in payments]

    async def create_payment(self, data: PaymentCreate, current_user: CurrentUser) -> Payment:
        """
        Schedule a payment on one of the caller's rental agreements.

        Raises:
            NotFoundError: If the rental agreement does not exist
            OwnershipError: If the caller is not the agreement's landlord
        """
        agreement = await self._load_agreement(data.rental_agreement_id)
        ensure_owner(agreement.landlord_id, current_user.id, "create payment for this rental agreement")

        payment = Payment(
            rental_agreement_id=agreement.id,
            property_id=agreement.property_id,
            renter_id=agreement.renter_id,
            landlord_id=current_user.id,
            amount=data.amount,
            type=data.type,
            status=PaymentStatus.PENDING,
            due_date=data.due_date,
            month=data.month,
            notes=data.notes,
        )
        with upstream_errors("Failed to create payment record"):
            await self.payments.create(payment)

        logger.info(f"Payment {payment.id} of {payment.amount} scheduled on agreement {agreement.id}")
        return payment

    async def update_payment_status(
        self,
        payment_id: str,
        update: PaymentStatusUpdate,
        current_user: CurrentUser
    ) -> Payment:
        """
        Move a pending payment to paid, overdue or cancelled.

        Raises:
            NotFoundError: If the payment does not exist
            OwnershipError: If the caller is not the payment's landlord
            InvalidTransitionError: If the payment is not pending
            ConflictError: If the payment changed while being updated
        """
        payment = await self._load(payment_id)
        ensure_owner(payment.landlord_id, current_user.id, "update this payment")
        check_payment_transition(payment.status, update.status)

        fields = payment_status_fields(update.status, self.clock(), update.paid_date, update.notes)
        with conditional_write("Payment", payment_id, "Failed to update payment status"):
            updated = await self.payments.update(payment_id, fields, condition={"status": payment.status})

        logger.info(f"Payment {payment_id} {payment.status.value} -> {update.status.value}")
        return updated

    async def bulk_update_status(
        self,
        update: BulkPaymentUpdate,
        current_user: CurrentUser
    ) -> List[BulkUpdateResult]:
        """
        Apply one status change to many payments, each independently.

        A failure for one id is reported in its result entry and never
        stops the others.
        """
        results = []
        for payment_id in update.payment_ids:
            try:
                await self.update_payment_status(payment_id, update, current_user)
                results.append(BulkUpdateResult(id=payment_id, success=True))
            except APIException as e:
                results.append(BulkUpdateResult(id=payment_id, success=False, error=e.message))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Bulk payment update by {current_user.id}: {succeeded}/{len(results)} succeeded")
        return results

    async def get_payment(self, payment_id: str, current_user: CurrentUser) -> PaymentView:
        payment = await self._load(payment_id)
        ensure_participant(payment, current_user, "view this payment")
        return PaymentView.at(payment, self.clock())

    async def get_agreement_payments(
        self,
        rental_agreement_id: str,
        current_user: CurrentUser,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[PaymentView], ScanResult]:
        agreement = await self._load_agreement(rental_agreement_id)
        ensure_participant(agreement, current_user, "view payments for this rental agreement")

        with upstream_errors("Failed to fetch payments"):
            payments, result = await self.payments.get_for_agreement(
                rental_agreement_id, status=status, payment_type=payment_type, limit=limit, cursor=cursor
            )
        return self.view(by_due_date(payments)), result

    async def get_user_payments(
        self,
        current_user: CurrentUser,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[PaymentView], ScanResult]:
        with upstream_errors("Failed to fetch payments"):
            payments, result = await self.payments.get_for_user(
                current_user.id,
                current_user.role,
                status=status,
                payment_type=payment_type,
                limit=limit,
                cursor=cursor,
            )
        return self.view(by_due_date(payments)), result

    async def get_overdue_payments(
        self,
        current_user: CurrentUser,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[PaymentView], ScanResult]:
        """Pending landlord payments whose due date has passed."""
        now = self.clock()
        with upstream_errors("Failed to fetch overdue payments"):
            payments, result = await self.payments.get_for_user(
                current_user.id,
                UserRole.LANDLORD,
                status=PaymentStatus.PENDING,
                predicate=lambda item: Payment.model_validate(item).is_overdue_at(now),
                limit=limit,
                cursor=cursor,
            )
        return self.view(by_due_date(payments), now), result

    async def get_upcoming_payments(
        self,
        current_user: CurrentUser,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[PaymentView], ScanResult]:
        """Pending landlord payments due between now and a month from now."""
        now = self.clock()
        horizon = add_month(now)

        def due_soon(item) -> bool:
            payment = Payment.model_validate(item)
            return payment.is_upcoming_at(now) and payment.due_at <= horizon

        with upstream_errors("Failed to fetch upcoming payments"):
            payments, result = await self.payments.get_for_user(
                current_user.id,
                UserRole.LANDLORD,
                status=PaymentStatus.PENDING,
                predicate=due_soon,
                limit=limit,
                cursor=cursor,
            )
        return self.view(by_due_date(payments), now), result

    async def _load(self, payment_id: str) -> Payment:
        with upstream_errors("Failed to fetch payment"):
            payment = await self.payments.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def _load_agreement(self, agreement_id: str) -> RentalAgreement:
        with upstream_errors("Failed to fetch rental agreement"):
            agreement = await self.agreements.get_by_id(agreement_id)
        if agreement is None:
            raise NotFoundError("Rental agreement", agreement_id)
        return agreement

