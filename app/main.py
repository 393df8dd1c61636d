"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging

from app.config import Settings, get_settings
from app.middleware import RequestContextMiddleware
from app.routers import (
    applications_router,
    auth_router,
    payments_router,
    properties_router,
    rental_agreements_router,
    users_router,
)
from app.services.container import ServiceContainer
from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import APIException

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application for the given settings.

    The service container (database, record store, blob store, identity
    provider) is created by the lifespan and stored on `app.state`.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Environment: {settings.environment}")

        container = ServiceContainer.from_settings(settings)
        await container.startup()
        app.state.container = container

        yield

        logger.info("Shutting down application")
        await container.shutdown()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    Backend for a property rental marketplace.

    ## Features

    * **Properties**: Landlords list properties with images; anyone can search them
    * **Applications**: Renters apply with documents; landlords approve or reject
    * **Rental agreements and payments**: Scheduling and status tracking
    * **Dashboards**: Per-role summaries of properties, applications and payments

    ## Authentication

    Use `/api/v1/auth/login` to obtain a token, then send it in the
    Authorization header as `Bearer <token>`.
    """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "Authentication", "description": "Account registration and token management"},
            {"name": "Properties", "description": "Property listings and search"},
            {"name": "Applications", "description": "Rental applications and their review"},
            {"name": "Payments", "description": "Payment scheduling and status"},
            {"name": "Rental Agreements", "description": "Agreements between landlords and renters"},
            {"name": "Users", "description": "Profiles, dashboards and statistics"},
            {"name": "Health", "description": "System health endpoints"},
        ],
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Processing-Time"],
    )

    app.add_middleware(
        RequestContextMiddleware,
        max_request_size=settings.max_request_size,
        slow_request_threshold=settings.slow_request_threshold,
        enable_request_logging=settings.debug,
    )

    # Include API routers
    for router in (
        auth_router,
        properties_router,
        applications_router,
        payments_router,
        rental_agreements_router,
        users_router,
    ):
        app.include_router(router, prefix=settings.api_v1_prefix)

    # Uploaded blobs are served from the public base URL
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    app.mount("/static", StaticFiles(directory=settings.upload_dir), name="static")

    register_exception_handlers(app)

    @app.get("/", tags=["Health"])
    async def root():
        """Basic API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment,
            "documentation": {
                "swagger_ui": "/docs",
                "redoc": "/redoc",
                "openapi_json": "/openapi.json"
            },
            "api_prefix": settings.api_v1_prefix
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check endpoint with database connectivity test.
        Used by Docker health checks and load balancers.
        """
        db_healthy = await request.app.state.container.database.check_connection()
        if not db_healthy:
            raise StarletteHTTPException(status_code=503, detail="Database connection failed")

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "database": "connected"
        }

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Route every failure through ErrorHandlerService."""

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        return ErrorHandlerService.handle_api_exception(exc, request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    # Raised when multipart form fields are validated inside a route
    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return ErrorHandlerService.handle_http_exception(exc, request)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        return ErrorHandlerService.handle_unexpected_error(exc, request)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
