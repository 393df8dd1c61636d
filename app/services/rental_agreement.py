"""
Rental agreement service.
"""

from typing import List, Optional, Tuple
from app.models.application import ApplicationStatus
from app.models.rental_agreement import AgreementStatus, RentalAgreement
from app.repositories.record_store import ScanResult
from app.schemas.rental_agreement import RentalAgreementCreate
from app.services.access import conditional_write, ensure_owner, ensure_participant, upstream_errors
from app.services.auth import CurrentUser
from app.services.container import ServiceContainer
from app.services.status_machine import check_agreement_transition
from app.utils.exceptions import BusinessRuleViolationError, NotFoundError
from app.utils.time import utcnow_iso
import logging

logger = logging.getLogger(__name__)


class RentalAgreementService:

    def __init__(self, container: ServiceContainer):
        self.agreements = container.rental_agreements
        self.applications = container.applications
        self.properties = container.properties

    async def create_agreement(self, data: RentalAgreementCreate, current_user: CurrentUser) -> RentalAgreement:
        """
        Bind the caller's property to a renter whose application was approved.

        Rent and deposit default to the property's listed price.

        Raises:
            NotFoundError: If the property does not exist
            OwnershipError: If the caller does not own the property
            BusinessRuleViolationError: If the renter holds no approved application
        """
        with upstream_errors("Failed to create rental agreement"):
            property_obj = await self.properties.get_by_id(data.property_id)
        if property_obj is None:
            raise NotFoundError("Property", data.property_id)
        ensure_owner(property_obj.landlord_id, current_user.id, "create a rental agreement for this property")

        with upstream_errors("Failed to create rental agreement"):
            applications = await self.applications.find_for_pair(data.property_id, data.renter_id)
        if not any(a.status == ApplicationStatus.APPROVED for a in applications):
            raise BusinessRuleViolationError("Renter has no approved application for this property")

        agreement = RentalAgreement(
            property_id=property_obj.id,
            landlord_id=current_user.id,
            renter_id=data.renter_id,
            start_date=data.start_date,
            end_date=data.end_date,
            monthly_rent=data.monthly_rent or property_obj.price.monthly,
            deposit=data.deposit if data.deposit is not None else (property_obj.price.deposit or 0),
            utilities_included=data.utilities_included,
            terms=data.terms,
        )
        with upstream_errors("Failed to create rental agreement"):
            await self.agreements.create(agreement)

        logger.info(f"Rental agreement {agreement.id} created for property {property_obj.id}")
        return agreement

    async def get_agreement(self, agreement_id: str, current_user: CurrentUser) -> RentalAgreement:
        agreement = await self._load(agreement_id)
        ensure_participant(agreement, current_user, "view this rental agreement")
        return agreement

    async def get_user_agreements(
        self,
        current_user: CurrentUser,
        status: Optional[AgreementStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[RentalAgreement], ScanResult]:
        with upstream_errors("Failed to fetch rental agreements"):
            agreements, result = await self.agreements.get_for_user(
                current_user.id, current_user.role, status=status, limit=limit, cursor=cursor
            )
        return sorted(agreements, key=lambda a: a.start_date, reverse=True), result

    async def terminate_agreement(
        self,
        agreement_id: str,
        current_user: CurrentUser,
        reason: Optional[str] = None
    ) -> RentalAgreement:
        fields = {"terminatedAt": utcnow_iso()}
        if reason:
            fields["terminationReason"] = reason
        return await self._transition(agreement_id, AgreementStatus.TERMINATED, current_user, fields)

    async def expire_agreement(self, agreement_id: str, current_user: CurrentUser) -> RentalAgreement:
        return await self._transition(agreement_id, AgreementStatus.EXPIRED, current_user, {})

    async def _transition(self, agreement_id, target: AgreementStatus, current_user: CurrentUser, fields) -> RentalAgreement:
        agreement = await self._load(agreement_id)
        ensure_owner(agreement.landlord_id, current_user.id, "update this rental agreement")
        check_agreement_transition(agreement.status, target)

        with conditional_write("Rental agreement", agreement_id, "Failed to update rental agreement"):
            updated = await self.agreements.update(
                agreement_id, {**fields, "status": target}, condition={"status": agreement.status}
            )
        logger.info(f"Rental agreement {agreement_id} {target.value} by {current_user.id}")
        return updated

    async def _load(self, agreement_id: str) -> RentalAgreement:
        with upstream_errors("Failed to fetch rental agreement"):
            agreement = await self.agreements.get_by_id(agreement_id)
        if agreement is None:
            raise NotFoundError("Rental agreement", agreement_id)
        return agreement
