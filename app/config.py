"""
Configuration management using Pydantic settings.
Handles database URL, table names, identity tokens, uploads and environment variables.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with Docker environment variable support."""

    # Application configuration
    app_name: str = "Sheep Rentals API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Record store database - documents are kept as JSON rows
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/sheep_rentals"
    database_pool_size: int = 10
    database_max_overflow: int = 20

    # Logical table names for the five record kinds
    users_table: str = "sheep-rentals-users"
    properties_table: str = "sheep-rentals-properties"
    applications_table: str = "sheep-rentals-applications"
    payments_table: str = "sheep-rentals-payments"
    rental_agreements_table: str = "sheep-rentals-rental-agreements"

    # Identity provider (JWT bearer tokens)
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 30
    auto_confirm_users: bool = False
    confirmation_code_length: int = 6
    min_password_length: int = 8

    # Blob storage
    upload_dir: str = "./uploads"
    blob_bucket: str = "sheep-rentals-images"
    public_base_url: str = "http://localhost:8000/static"
    max_file_size: int = 5 * 1024 * 1024  # 5MB
    allowed_image_extensions: List[str] = ["jpg", "jpeg", "png", "gif", "webp"]
    allowed_document_extensions: List[str] = ["pdf", "jpg", "jpeg", "png"]
    max_property_images: int = 10
    max_application_documents: int = 5

    # API configuration
    api_v1_prefix: str = "/api/v1"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Pagination defaults
    default_page_size: int = 10
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    slow_request_threshold: float = 2.0
    max_request_size: int = 60 * 1024 * 1024  # 10 images of 5MB plus form fields

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()
