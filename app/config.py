# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify user tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Stripe
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(
        default="",
        description="Stripe secret key (sk_...)"
    )

    CARD_PAYMENT_DISCOUNT_RATE: float = Field(
        default=0.02,
        ge=0.0,
        le=1.0,
        description="Discount applied to card payments (0.02 = 2%)"
    )

    # -------------------------------------------------------------------------
    # Cloudflare R2 (S3-compatible object storage for user media)
    # -------------------------------------------------------------------------

    R2_ACCOUNT_ID: str = Field(default="", description="Cloudflare account ID")
    R2_ACCESS_KEY_ID: str = Field(default="", description="R2 access key ID")
    R2_SECRET_ACCESS_KEY: str = Field(default="", description="R2 secret access key")
    R2_USER_BUCKET: str = Field(default="", description="Bucket holding user uploads")
    R2_USER_PUBLIC_URL: str = Field(
        default="",
        description="Public base URL of the user bucket (no trailing slash)"
    )

    # -------------------------------------------------------------------------
    # AWS SES (transactional email)
    # -------------------------------------------------------------------------

    AWS_SES_ACCESS_KEY_ID: str = Field(default="", description="SES access key ID")
    AWS_SES_SECRET_ACCESS_KEY: str = Field(default="", description="SES secret access key")
    AWS_SES_REGION: str = Field(default="eu-west-2", description="SES region")

    EMAIL_FROM: str = Field(
        default="World Music Method <info@worldmusicmethod.com>",
        description="Default sender for outgoing email"
    )

    # -------------------------------------------------------------------------
    # External Services
    # -------------------------------------------------------------------------

    EXCHANGE_RATE_API_URL: str = Field(
        default="https://api.exchangerate-api.com/v4/latest",
        description="Base URL of the exchange rate API (base currency is appended)"
    )

    PODCAST_USER_AGENT: str = Field(
        default="WorldMusicMethod/1.0 Podcast Fetcher",
        description="User-Agent sent when fetching podcast RSS feeds"
    )

    HTTP_TIMEOUT_SECONDS: float = Field(
        default=20.0,
        gt=0,
        description="Timeout for outbound HTTP requests"
    )

    # -------------------------------------------------------------------------
    # Import Settings
    # -------------------------------------------------------------------------

    IMPORT_BATCH_SIZE: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Rows sent per batch when repairing tags from CSV"
    )

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum CSV upload size in MB"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0", description="Host to bind the API server to")

    API_PORT: int = Field(default=8000, ge=1, le=65535, description="Port for the API server")

    SITE_URL: str = Field(
        default="https://worldmusicmethod.lovable.app",
        description="Public site URL used in the sitemap"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://myapp.com" -> ["http://localhost:5173", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def r2_configured(self) -> bool:
        """True when every credential needed to delete user media is present."""
        return all([
            self.R2_ACCOUNT_ID,
            self.R2_ACCESS_KEY_ID,
            self.R2_SECRET_ACCESS_KEY,
            self.R2_USER_BUCKET,
        ])

    @property
    def r2_endpoint_url(self) -> str:
        return f"https://{self.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"

    @property
    def ses_configured(self) -> bool:
        return bool(self.AWS_SES_ACCESS_KEY_ID and self.AWS_SES_SECRET_ACCESS_KEY)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
