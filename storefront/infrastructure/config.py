"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    api_prefix: str = "/api"
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Document store
    store_backend: Literal["memory", "sql"] = "sql"
    database_url: str = "postgresql+asyncpg://storefront:storefront_dev_password@db:5432/storefront"

    # Authentication
    jwt_secret: str = "dev-jwt-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7
    catalog_editor_roles: list[str] = ["user", "admin"]

    # Rate limiting
    rate_limit_enabled: bool = False
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100

    # Object store
    object_store_backend: Literal["memory", "cloudinary"] = "memory"
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "product-images"
    object_store_timeout_seconds: float = 30.0

    # Uploads
    max_images_per_product: int = 5
    max_image_bytes: int = 5 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
