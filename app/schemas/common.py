"""
Response envelopes shared by every endpoint.
"""

from pydantic import Field
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar
from app.models.common import CamelModel
from app.utils.exceptions import ValidationError
from app.utils.pagination import total_pages
import json

T = TypeVar("T")


class PaginationMeta(CamelModel):
    """Pagination block of list responses."""

    page: int = Field(..., ge=1, description="Page label echoed from the request")
    limit: int = Field(..., ge=1, description="Items per page")
    total: int = Field(..., ge=0, description="Number of matching records")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    next_cursor: Optional[str] = Field(
        None,
        description="Opaque token for the next page; absent on the last page"
    )

    @classmethod
    def build(cls, page: int, limit: int, total: int, next_cursor: Optional[str]) -> "PaginationMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages(total, limit),
            next_cursor=next_cursor,
        )


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope: `{success, data, message}`."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class PaginatedResponse(CamelModel, Generic[T]):
    """Success envelope for list endpoints."""

    success: bool = True
    data: List[T] = Field(default_factory=list)
    message: Optional[str] = None
    pagination: PaginationMeta


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ErrorEnvelope(CamelModel):
    """Error envelope: `{success: false, error, code, requestId}`."""

    success: bool = False
    error: str
    code: str
    request_id: Optional[str] = None
    details: Optional[List[Dict[str, Any]]] = None


def decode_form_json(form: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """
    Decode JSON-encoded multipart form fields in place.

    Multipart requests carry nested objects (address, price, ...) as JSON
    strings; empty values are dropped.

    Raises:
        ValidationError: If a field is not valid JSON
    """
    decoded = {k: v for k, v in form.items() if v is not None and v != ""}
    for name in fields:
        value = decoded.get(name)
        if isinstance(value, str):
            try:
                decoded[name] = json.loads(value)
            except ValueError as e:
                raise ValidationError(
                    f"Field '{name}' must be valid JSON",
                    field_errors=[{"field": name, "message": str(e)}]
                ) from e
    return decoded


def form_text(form: Any) -> Dict[str, str]:
    """Text fields of a multipart form; file parts are read separately."""
    return {key: value for key, value in form.multi_items() if isinstance(value, str)}
