"""
Base class for documents persisted in the record store.
Documents use camelCase keys on the wire and in storage.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict
from app.utils.time import utcnow_iso
import uuid


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Pydantic model serialised with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class RecordModel(CamelModel):
    """
    Common fields for every stored record: id, createdAt, updatedAt.
    """

    id: str = Field(default_factory=new_id)
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)

    def to_item(self) -> Dict[str, Any]:
        """Serialise into the document stored in the record store."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for API responses."""
        return self.to_item()
