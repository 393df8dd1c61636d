"""
Status transition rules for payments, applications and rental agreements.

Persisted status only. The read-time "overdue" classification of a pending
payment lives on `Payment.is_overdue_at` and never passes through here.
"""

from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Optional
from app.models.application import ApplicationStatus
from app.models.payment import PaymentStatus
from app.models.rental_agreement import AgreementStatus
from app.models.user import UserRole
from app.utils.exceptions import InvalidTransitionError, RoleRequiredError
from app.utils.time import to_iso


PAYMENT_TRANSITIONS: Mapping[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.OVERDUE, PaymentStatus.CANCELLED}),
    PaymentStatus.PAID: frozenset(),
    PaymentStatus.OVERDUE: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
}

# target status -> role allowed to set it, per source status
APPLICATION_TRANSITIONS: Mapping[ApplicationStatus, Mapping[ApplicationStatus, UserRole]] = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.APPROVED: UserRole.LANDLORD,
        ApplicationStatus.REJECTED: UserRole.LANDLORD,
        ApplicationStatus.WITHDRAWN: UserRole.RENTER,
    },
    ApplicationStatus.APPROVED: {},
    ApplicationStatus.REJECTED: {},
    ApplicationStatus.WITHDRAWN: {},
}

AGREEMENT_TRANSITIONS: Mapping[AgreementStatus, FrozenSet[AgreementStatus]] = {
    AgreementStatus.ACTIVE: frozenset({AgreementStatus.EXPIRED, AgreementStatus.TERMINATED}),
    AgreementStatus.EXPIRED: frozenset(),
    AgreementStatus.TERMINATED: frozenset(),
}


def check_payment_transition(current: PaymentStatus, target: PaymentStatus) -> None:
    """
    Raises:
        InvalidTransitionError: If `target` is not reachable from `current`
    """
    if target not in PAYMENT_TRANSITIONS[current]:
        raise InvalidTransitionError("payment", current.value, target.value)


def check_application_transition(
    current: ApplicationStatus,
    target: ApplicationStatus,
    actor: UserRole
) -> None:
    """
    Validate an application status change made by a caller holding `actor`.

    Raises:
        InvalidTransitionError: If `target` is not reachable from `current`
        RoleRequiredError: If the transition belongs to the other role
    """
    allowed = APPLICATION_TRANSITIONS[current]
    if target not in allowed:
        raise InvalidTransitionError("application", current.value, target.value)
    if allowed[target] != actor:
        raise RoleRequiredError(allowed[target].value)


def check_agreement_transition(current: AgreementStatus, target: AgreementStatus) -> None:
    if target not in AGREEMENT_TRANSITIONS[current]:
        raise InvalidTransitionError("rental agreement", current.value, target.value)


def payment_status_fields(
    target: PaymentStatus,
    now: datetime,
    paid_date: Optional[str] = None,
    notes: Optional[str] = None
) -> Dict[str, Any]:
    """
    Field set written with a payment status change.

    A payment only becomes `paid` together with its `paidDate`; the caller's
    date is used when given, otherwise the time of the update.
    """
    fields: Dict[str, Any] = {"status": target.value}
    if target == PaymentStatus.PAID:
        fields["paidDate"] = paid_date or to_iso(now)
    if notes:
        fields["notes"] = notes
    return fields
