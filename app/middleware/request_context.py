"""
Request context middleware: request ids, size limits, timing and access logs.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import ValidationError
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id, rejects oversized bodies and reports
    processing time in `X-Request-ID` / `X-Processing-Time` headers.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_request_size: int = 60 * 1024 * 1024,
        slow_request_threshold: float = 2.0,
        enable_request_logging: bool = False
    ):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.slow_request_threshold = slow_request_threshold
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            self._validate_request_size(request)
        except ValidationError as exc:
            response = ErrorHandlerService.handle_api_exception(exc, request)
            response.headers["X-Request-ID"] = request_id
            return response

        if self.enable_request_logging:
            logger.info(
                f"Request [{request_id}]: {request.method} {request.url.path}",
                extra={"request_id": request_id, "method": request.method, "path": request.url.path},
            )

        response = await call_next(request)
        processing_time = time.perf_counter() - start_time

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request [{request_id}]: {request.method} {request.url.path} "
                f"took {processing_time:.3f}s",
                extra={"request_id": request_id, "processing_time": processing_time},
            )
        elif self.enable_request_logging:
            logger.info(
                f"Response [{request_id}]: {response.status_code} - {processing_time:.3f}s",
                extra={"request_id": request_id, "status_code": response.status_code},
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response

    def _validate_request_size(self, request: Request) -> None:
        """
        Raises:
            ValidationError: If the declared body size exceeds the limit
        """
        content_length = request.headers.get("content-length")
        if not content_length:
            return
        try:
            size = int(content_length)
        except ValueError:
            raise ValidationError("Invalid content-length header")
        if size > self.max_request_size:
            raise ValidationError(
                f"Request size {size} bytes exceeds maximum allowed size {self.max_request_size} bytes"
            )
