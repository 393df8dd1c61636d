"""
Error handling service for consistent error response formatting and logging.
Every failure leaves the API as `{"success": false, "error", "code", "requestId"}`.
"""

from typing import Dict, Any, Optional, List, Sequence
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)


class ErrorHandlerService:
    """
    Formats exceptions into the error envelope and logs them with the
    request id assigned by the request context middleware.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        request_id: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        response: Dict[str, Any] = {
            "success": False,
            "error": message,
            "code": error_code,
            "requestId": request_id,
        }
        if details:
            response["details"] = details
        return response

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """
        Handle taxonomy exceptions. Server-side failures log at error level.
        """
        request_id = ErrorHandlerService.request_id(request)
        log = logger.error if exception.status_code >= 500 else logger.warning
        log(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None,
            },
        )

        details = getattr(exception, "field_errors", None)
        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(
                error_code=exception.error_code or "API_ERROR",
                message=exception.detail,
                request_id=request_id,
                details=details,
            ),
            headers=exception.headers,
        )

    @staticmethod
    def handle_validation_error(errors: Sequence[Any], request: Optional[Request] = None) -> JSONResponse:
        """
        Handle request and model validation errors as 400 with per-field details.

        Args:
            errors: `exception.errors()` of a request or pydantic validation error
        """
        request_id = ErrorHandlerService.request_id(request)

        details = []
        for error in errors:
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
            details.append({
                "field": ".".join(loc) or None,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            })

        logger.warning(
            f"Validation Error [{request_id}]: {len(details)} field errors",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "validation_errors": details,
            },
        )

        first = details[0] if details else None
        message = "Request validation failed"
        if first and first["field"]:
            message = f"{message}: {first['field']} - {first['message']}"

        return JSONResponse(
            status_code=400,
            content=ErrorHandlerService.format_error_response(
                error_code="VALIDATION_ERROR",
                message=message,
                request_id=request_id,
                details=details,
            ),
        )

    @staticmethod
    def handle_http_exception(exception: StarletteHTTPException, request: Optional[Request] = None) -> JSONResponse:
        """Handle framework HTTP errors such as unknown routes and methods."""
        request_id = ErrorHandlerService.request_id(request)
        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={"status_code": exception.status_code, "request_id": request_id},
        )
        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(
                error_code=f"HTTP_{exception.status_code}",
                message=str(exception.detail),
                request_id=request_id,
            ),
            headers=getattr(exception, "headers", None),
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """
        Handle unexpected errors without exposing internals.
        """
        request_id = ErrorHandlerService.request_id(request)
        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__,
            },
            exc_info=exception,
        )
        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_error_response(
                error_code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred. Please try again later.",
                request_id=request_id,
            ),
        )

    @staticmethod
    def request_id(request: Optional[Request]) -> str:
        """Request id set by the middleware, or a fresh one outside a request."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]
