"""
Tests for payment, application and rental agreement transition rules.
"""

import pytest

from app.models.application import ApplicationStatus
from app.models.payment import PaymentStatus
from app.models.rental_agreement import AgreementStatus
from app.models.user import UserRole
from app.services.status_machine import (
    check_agreement_transition,
    check_application_transition,
    check_payment_transition,
    payment_status_fields,
)
from app.utils.exceptions import InvalidTransitionError, RoleRequiredError, ValidationError
from tests.conftest import NOW


class TestPaymentTransitions:

    @pytest.mark.parametrize("target", [PaymentStatus.PAID, PaymentStatus.OVERDUE, PaymentStatus.CANCELLED])
    def test_pending_moves_anywhere(self, target):
        """Test pending payments can move to any other status."""
        check_payment_transition(PaymentStatus.PENDING, target)

    @pytest.mark.parametrize("current", [PaymentStatus.PAID, PaymentStatus.OVERDUE, PaymentStatus.CANCELLED])
    def test_settled_payments_are_terminal(self, current):
        """Test settled payments cannot move."""
        with pytest.raises(InvalidTransitionError):
            check_payment_transition(current, PaymentStatus.PENDING)

    def test_invalid_transition_is_a_400(self):
        """Test invalid transitions are validation errors."""
        with pytest.raises(ValidationError) as exc_info:
            check_payment_transition(PaymentStatus.PAID, PaymentStatus.CANCELLED)
        assert exc_info.value.status_code == 400
        assert "'paid' to 'cancelled'" in exc_info.value.detail

    def test_paid_sets_paid_date(self):
        """Test paid sets paidDate."""
        fields = payment_status_fields(PaymentStatus.PAID, NOW)
        assert fields == {"status": "paid", "paidDate": "2024-06-15T12:00:00.000Z"}

    def test_paid_keeps_given_paid_date(self):
        """Test an explicit paidDate is kept."""
        fields = payment_status_fields(PaymentStatus.PAID, NOW, paid_date="2024-06-01", notes="cash")
        assert fields == {"status": "paid", "paidDate": "2024-06-01", "notes": "cash"}

    def test_other_targets_have_no_paid_date(self):
        """Test non-paid targets carry no paidDate."""
        assert payment_status_fields(PaymentStatus.CANCELLED, NOW) == {"status": "cancelled"}


class TestApplicationTransitions:

    @pytest.mark.parametrize("target", [ApplicationStatus.APPROVED, ApplicationStatus.REJECTED])
    def test_landlord_decisions(self, target):
        """Test landlords approve or reject pending applications."""
        check_application_transition(ApplicationStatus.PENDING, target, UserRole.LANDLORD)

    def test_renter_withdraws(self):
        """Test renters withdraw pending applications."""
        check_application_transition(ApplicationStatus.PENDING, ApplicationStatus.WITHDRAWN, UserRole.RENTER)

    def test_renter_cannot_approve(self):
        """Test renters cannot approve."""
        with pytest.raises(RoleRequiredError):
            check_application_transition(ApplicationStatus.PENDING, ApplicationStatus.APPROVED, UserRole.RENTER)

    def test_landlord_cannot_withdraw(self):
        """Test landlords cannot withdraw."""
        with pytest.raises(RoleRequiredError):
            check_application_transition(ApplicationStatus.PENDING, ApplicationStatus.WITHDRAWN, UserRole.LANDLORD)

    @pytest.mark.parametrize(
        "current",
        [ApplicationStatus.APPROVED, ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN],
    )
    def test_decided_applications_are_terminal(self, current):
        """Test decided applications are terminal."""
        with pytest.raises(InvalidTransitionError):
            check_application_transition(current, ApplicationStatus.APPROVED, UserRole.LANDLORD)

    def test_pending_to_pending_is_invalid(self):
        """Test pending to pending is invalid."""
        with pytest.raises(InvalidTransitionError):
            check_application_transition(ApplicationStatus.PENDING, ApplicationStatus.PENDING, UserRole.LANDLORD)


class TestAgreementTransitions:

    @pytest.mark.parametrize("target", [AgreementStatus.EXPIRED, AgreementStatus.TERMINATED])
    def test_active_ends(self, target):
        """Test active agreements can expire or terminate."""
        check_agreement_transition(AgreementStatus.ACTIVE, target)

    def test_ended_agreements_are_terminal(self):
        """Test ended agreements are terminal."""
        with pytest.raises(InvalidTransitionError):
            check_agreement_transition(AgreementStatus.EXPIRED, AgreementStatus.TERMINATED)
