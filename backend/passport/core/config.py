"""Application configuration using Pydantic Settings."""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageProvider(str, Enum):
    GCS = "gcs"
    S3 = "s3"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_name: str = "Property Passport UK"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    allowed_origins: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Database
    database_url: str

    # Firebase Auth
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # Storage
    storage_provider: StorageProvider = StorageProvider.GCS
    documents_bucket: str = "property-documents"
    photos_bucket: str = "property-photos"

    # GCS Config
    gcs_project_id: Optional[str] = None

    # S3 Config
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: Optional[str] = "eu-west-2"

    # Signed URLs
    signed_url_ttl_seconds: int = 3600
    signed_url_concurrency: int = 10

    # Government data APIs
    epc_api_key: Optional[str] = None
    hmlr_api_key: Optional[str] = None
    integration_timeout_seconds: float = 10.0

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
