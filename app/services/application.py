"""
Application service: submission, review, withdrawal and listings.

Approval changes two records. The application is written first, conditional
on it still being pending; the property is then marked rented. If the second
write fails the first is rolled back to pending.
"""

from typing import List, Optional, Tuple
from app.models.application import Application, ApplicationDocument, ApplicationStatus
from app.models.property import PropertyStatus
from app.models.user import UserRole
from app.repositories.record_store import RecordStoreError, ScanResult
from app.schemas.application import ApplicationCreate, ApplicationStatusUpdate
from app.services.access import conditional_write, ensure_owner, ensure_participant, upstream_errors
from app.services.auth import CurrentUser
from app.services.container import ServiceContainer
from app.services.status_machine import check_application_transition
from app.utils.exceptions import (
    BusinessRuleViolationError,
    DuplicateApplicationError,
    NotFoundError,
    UpstreamError,
)
from app.utils.file_utils import ValidatedUpload
from app.utils.time import utcnow_iso
import uuid
import logging

logger = logging.getLogger(__name__)


def newest_first(applications: List[Application]) -> List[Application]:
    # sorted() is stable, so equal timestamps keep insertion order
    return sorted(applications, key=lambda a: a.created_at, reverse=True)


class ApplicationService:

    def __init__(self, container: ServiceContainer):
        self.applications = container.applications
        self.properties = container.properties
        self.blob_store = container.blob_store
        self.bucket = container.settings.blob_bucket
        self.max_documents = container.settings.max_application_documents

    async def submit_application(
        self,
        data: ApplicationCreate,
        documents: List[ValidatedUpload],
        current_user: CurrentUser
    ) -> Application:
        """
        File an application for an available property.

        Raises:
            NotFoundError: If the property does not exist
            BusinessRuleViolationError: If the property is not available
            DuplicateApplicationError: If the caller has a live application for it
        """
        if len(documents) > self.max_documents:
            raise BusinessRuleViolationError(
                f"An application can have at most {self.max_documents} documents"
            )

        with upstream_errors("Failed to submit application"):
            property_obj = await self.properties.get_by_id(data.property_id)
        if property_obj is None:
            raise NotFoundError("Property", data.property_id)
        if not property_obj.is_available:
            raise BusinessRuleViolationError("Property is not available for applications")

        # Check-then-write; two concurrent submissions can both pass
        with upstream_errors("Failed to submit application"):
            previous = await self.applications.find_for_pair(data.property_id, current_user.id)
        if any(a.is_live for a in previous):
            raise DuplicateApplicationError()

        application = Application(
            property_id=data.property_id,
            renter_id=current_user.id,
            landlord_id=property_obj.landlord_id,
            personal_info=data.personal_info,
            employment=data.employment,
            references=data.references,
            message=data.message,
        )

        paths = []
        try:
            with upstream_errors("Failed to upload document"):
                for index, document in enumerate(documents):
                    document_id = str(uuid.uuid4())
                    path = f"applications/{application.id}/{document_id}.{document.extension}"
                    url = await self.blob_store.upload(self.bucket, path, document.content, document.content_type)
                    paths.append(path)
                    application.documents.append(
                        ApplicationDocument(id=document_id, type=data.document_type(index), url=url, name=document.filename)
                    )

            with upstream_errors("Failed to submit application"):
                await self.applications.create(application)
        except Exception:
            await self._delete_documents(paths)
            raise

        logger.info(f"Application {application.id} submitted by {current_user.id} for {data.property_id}")
        return application

    async def get_application(self, application_id: str, current_user: CurrentUser) -> Application:
        application = await self._load(application_id)
        ensure_participant(application, current_user, "view this application")
        return application

    async def get_user_applications(
        self,
        current_user: CurrentUser,
        status: Optional[ApplicationStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Application], ScanResult]:
        with upstream_errors("Failed to fetch applications"):
            applications, result = await self.applications.get_for_user(
                current_user.id, current_user.role, status=status, limit=limit, cursor=cursor
            )
        return newest_first(applications), result

    async def get_property_applications(
        self,
        property_id: str,
        current_user: CurrentUser,
        status: Optional[ApplicationStatus] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[Application], ScanResult]:
        with upstream_errors("Failed to fetch applications"):
            property_obj = await self.properties.get_by_id(property_id)
        if property_obj is None:
            raise NotFoundError("Property", property_id)
        ensure_owner(property_obj.landlord_id, current_user.id, "view applications for this property")

        with upstream_errors("Failed to fetch applications"):
            applications, result = await self.applications.get_for_property(
                property_id, status=status, limit=limit, cursor=cursor
            )
        return newest_first(applications), result

    async def review_application(
        self,
        application_id: str,
        decision: ApplicationStatusUpdate,
        current_user: CurrentUser
    ) -> Application:
        """
        Landlord decision on a pending application.

        Approval marks the property rented; rejection leaves it untouched.

        Raises:
            OwnershipError: If the caller does not own the application
            InvalidTransitionError: If the application is no longer pending
            ConflictError: If the application changed while being reviewed
            UpstreamError: If the property could not be marked rented
        """
        application = await self._load(application_id)
        ensure_owner(application.landlord_id, current_user.id, "update this application")
        check_application_transition(application.status, decision.status, current_user.role)

        fields = {
            "status": decision.status,
            "reviewedAt": utcnow_iso(),
            "reviewedBy": current_user.id,
        }
        if decision.notes:
            fields["notes"] = decision.notes

        updated = await self._conditional_update(application, fields)
        logger.info(f"Application {application_id} {decision.status.value} by {current_user.id}")

        if decision.status == ApplicationStatus.APPROVED:
            await self._mark_property_rented(updated)
        return updated

    async def withdraw_application(self, application_id: str, current_user: CurrentUser) -> Application:
        application = await self._load(application_id)
        ensure_owner(application.renter_id, current_user.id, "withdraw this application")
        check_application_transition(application.status, ApplicationStatus.WITHDRAWN, UserRole.RENTER)

        updated = await self._conditional_update(application, {"status": ApplicationStatus.WITHDRAWN})
        logger.info(f"Application {application_id} withdrawn by {current_user.id}")
        return updated

    async def _delete_documents(self, paths: List[str]) -> None:
        if not paths:
            return
        try:
            removed = await self.blob_store.delete_many(self.bucket, paths)
            logger.debug(f"Removed {removed} of {len(paths)} orphaned documents")
        except Exception as e:
            logger.error(f"Error deleting documents: {e}")

    async def _load(self, application_id: str) -> Application:
        with upstream_errors("Failed to fetch application"):
            application = await self.applications.get_by_id(application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        return application

    async def _conditional_update(self, application: Application, fields) -> Application:
        """Write `fields` only if the stored status is still the one read."""
        with conditional_write("Application", application.id, "Failed to update application status"):
            return await self.applications.update(
                application.id, fields, condition={"status": application.status}
            )

    async def _mark_property_rented(self, application: Application) -> None:
        try:
            await self.properties.set_status(application.property_id, PropertyStatus.RENTED)
        except RecordStoreError as e:
            logger.error(
                f"Failed to mark property {application.property_id} rented; "
                f"reverting application {application.id}: {e}"
            )
            await self._revert_approval(application)
            raise UpstreamError("Failed to update property status; approval was rolled back") from e

    async def _revert_approval(self, application: Application) -> None:
        try:
            await self.applications.update(
                application.id,
                {"status": ApplicationStatus.PENDING, "reviewedAt": None, "reviewedBy": None},
                condition={"status": ApplicationStatus.APPROVED},
            )
        except RecordStoreError as e:
            # Left approved against a property that is not rented
            logger.critical(f"Could not revert approval of application {application.id}: {e}")
