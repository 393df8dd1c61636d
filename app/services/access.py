"""
Shared service plumbing: collaborator error mapping and ownership checks.
"""

from contextlib import contextmanager
from typing import Iterator
from app.models.user import UserRole
from app.repositories.record_store import ConditionFailedError, RecordNotFoundError, RecordStoreError
from app.services.identity import IdentityProviderError
from app.services.storage import BlobStoreError
from app.utils.exceptions import ConflictError, NotFoundError, OwnershipError, UpstreamError
import logging

logger = logging.getLogger(__name__)

COLLABORATOR_ERRORS = (RecordStoreError, BlobStoreError, IdentityProviderError)


@contextmanager
def upstream_errors(message: str) -> Iterator[None]:
    """
    Turn record, blob and identity failures raised inside the block into a
    single `UpstreamError` carrying `message`.
    """
    try:
        yield
    except COLLABORATOR_ERRORS as e:
        logger.error(f"{message}: {e}")
        raise UpstreamError(message) from e


@contextmanager
def conditional_write(resource: str, key: str, message: str) -> Iterator[None]:
    """
    Like `upstream_errors`, for conditional writes: a failed condition means
    the record changed since it was read, a missing key means it was deleted.
    """
    try:
        yield
    except ConditionFailedError as e:
        logger.warning(f"{resource} {key} changed concurrently: {e}")
        raise ConflictError(f"{resource} was modified concurrently; reload and retry") from e
    except RecordNotFoundError as e:
        raise NotFoundError(resource, key) from e
    except COLLABORATOR_ERRORS as e:
        logger.error(f"{message}: {e}")
        raise UpstreamError(message) from e


def ensure_owner(owner_id: str, user_id: str, action: str) -> None:
    """
    Raises:
        OwnershipError: If the record is not owned by the caller
    """
    if owner_id != user_id:
        raise OwnershipError(action)


def ensure_participant(record, user, action: str) -> None:
    """
    Check the caller is the landlord or renter on a record, comparing the
    id field that matches the caller's role.
    """
    owner_id = record.renter_id if user.role == UserRole.RENTER else record.landlord_id
    ensure_owner(owner_id, user.id, action)
