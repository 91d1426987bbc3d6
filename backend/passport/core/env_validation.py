"""
Runtime Environment Validation Module

Validates the environment at application startup. If validation fails the
application refuses to start (exit code 1).
"""

import os
import sys
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProductionSettings(BaseSettings):
    """
    Strict validation schema for production environment variables.

    All required fields MUST be present and valid, or the application will not start.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # CRITICAL: Database Configuration
    # ========================================================================
    database_url: str  # REQUIRED: PostgreSQL connection string

    # ========================================================================
    # CRITICAL: Firebase Authentication
    # ========================================================================
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # ========================================================================
    # CRITICAL: Storage Provider
    # ========================================================================
    storage_provider: str  # REQUIRED: "gcs" or "s3"
    documents_bucket: str = "property-documents"
    photos_bucket: str = "property-photos"

    gcs_project_id: Optional[str] = None

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: Optional[str] = None

    # ========================================================================
    # Application Configuration
    # ========================================================================
    app_name: str = "Property Passport UK"
    debug: bool = False

    # ========================================================================
    # CRITICAL: CORS Configuration
    # ========================================================================
    allowed_origins: str  # REQUIRED: Comma-separated list of allowed origins

    # ========================================================================
    # Optional: Government data APIs (mock data is served when unset)
    # ========================================================================
    epc_api_key: Optional[str] = None
    hmlr_api_key: Optional[str] = None


def _fatal(*lines: str) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(1)


def validate_environment() -> ProductionSettings:
    """
    Validate all required environment variables at startup.

    Raises:
        SystemExit: If validation fails (exit code 1)
    """
    try:
        settings = ProductionSettings()
    except ValidationError as e:
        lines = ["❌ FATAL: Environment validation failed", "\nMissing or invalid environment variables:"]
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            lines.append(f"   • {field}: {error['msg']}")
        lines.append("\nThe application cannot start with invalid configuration.")
        _fatal(*lines)

    # 1. CORS: no wildcard outside debug
    if not settings.debug:
        origins = [o.strip() for o in settings.allowed_origins.split(",")]
        if "*" in origins:
            _fatal(
                "❌ FATAL: Wildcard CORS origin (*) detected in production mode.",
                "   Set ALLOWED_ORIGINS to specific domains (comma-separated).",
            )

    # 2. Storage Provider
    if settings.storage_provider == "gcs":
        if not settings.gcs_project_id:
            _fatal("❌ FATAL: GCS_PROJECT_ID required when STORAGE_PROVIDER=gcs")
    elif settings.storage_provider == "s3":
        if not settings.aws_access_key_id or not settings.aws_secret_access_key:
            _fatal(
                "❌ FATAL: AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY required when STORAGE_PROVIDER=s3"
            )
    else:
        _fatal(f"❌ FATAL: Invalid STORAGE_PROVIDER '{settings.storage_provider}'. Must be 'gcs' or 's3'.")

    # 3. Firebase credentials path
    if settings.google_application_credentials and not os.path.exists(settings.google_application_credentials):
        _fatal(f"❌ FATAL: Firebase credentials file not found: {settings.google_application_credentials}")

    # 4. Database URL
    if not settings.database_url.startswith("postgresql"):
        _fatal(
            "❌ FATAL: DATABASE_URL must be a PostgreSQL connection string (postgresql:// or postgresql+asyncpg://)"
        )

    print("✅ Environment validation passed")
    print(f"   App: {settings.app_name}")
    print(f"   Storage: {settings.storage_provider} ({settings.documents_bucket}, {settings.photos_bucket})")
    print(f"   CORS Origins: {settings.allowed_origins}")
    print(f"   EPC API: {'configured' if settings.epc_api_key else 'mock data'}")
    print(f"   HMLR API: {'configured' if settings.hmlr_api_key else 'mock data'}")

    return settings


if __name__ == "__main__":
    validate_environment()
    print("\n✅ All environment variables are valid!")
