# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.PAYSTACK_BASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Storage Configuration
    # -------------------------------------------------------------------------
    # "supabase" talks to the managed database, "memory" keeps everything
    # in-process (local demos and tests)

    STORAGE_BACKEND: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Which persistence backend to construct at startup"
    )

    SUPABASE_URL: str | None = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str | None = Field(
        default=None,
        description="Supabase service_role key (bypasses RLS)"
    )

    SEED_DEMO_DATA: bool = Field(
        default=False,
        description="Load the MED-A demo developer and app into the memory backend"
    )

    # -------------------------------------------------------------------------
    # Paystack Configuration
    # -------------------------------------------------------------------------
    # Required - payments can't be initialized without a secret key

    PAYSTACK_SECRET_KEY: str = Field(
        ...,
        description="Paystack secret key used as the Bearer token"
    )

    PAYSTACK_BASE_URL: str = Field(
        default="https://api.paystack.co",
        description="Paystack REST API base URL"
    )

    PAYSTACK_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        le=120,
        description="Timeout for each call to Paystack"
    )

    # -------------------------------------------------------------------------
    # Listing Fee
    # -------------------------------------------------------------------------

    LISTING_FEE_AMOUNT: int = Field(
        default=1000,
        ge=1,
        description="One-time listing fee in major currency units"
    )

    LISTING_FEE_CURRENCY: str = Field(
        default="KES",
        min_length=3,
        max_length=3,
        description="ISO currency code for the listing fee"
    )

    PAYMENT_RETRY_POLICY: Literal["keep", "reset", "deny"] = Field(
        default="keep",
        description=(
            "What happens when a developer re-initializes payment after a failure: "
            "keep = allow and leave the app's payment status alone, "
            "reset = allow and set it back to pending, "
            "deny = refuse"
        )
    )

    FRONTEND_URL: str = Field(
        default="http://localhost:5000",
        description="Public URL of the web client (used for Paystack callbacks)"
    )

    PAYMENT_CALLBACK_PATH: str = Field(
        default="/payment/callback",
        description="Client route Paystack redirects to after checkout"
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

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing session tokens"
    )

    SESSION_COOKIE_NAME: str = Field(
        default="medapps_session",
        description="Name of the HttpOnly cookie carrying the session token"
    )

    SESSION_TTL_HOURS: int = Field(
        default=24,
        ge=1,
        le=24 * 30,
        description="How long a developer or admin session stays valid"
    )

    ADMIN_API_KEY: str | None = Field(
        default=None,
        min_length=16,
        description="Shared key exchanged for an admin token (admin endpoints are closed when unset)"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5000",
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

    @model_validator(mode="after")
    def _require_supabase_credentials(self) -> "Settings":
        if self.STORAGE_BACKEND == "supabase" and not (
            self.SUPABASE_URL and self.SUPABASE_SERVICE_KEY
        ):
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required when "
                "STORAGE_BACKEND=supabase (set STORAGE_BACKEND=memory for local runs)"
            )
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5000, https://medapps.co.ke" -> ["http://localhost:5000", "https://medapps.co.ke"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def payment_callback_url(self) -> str:
        """Absolute URL Paystack sends the developer back to."""
        return f"{self.FRONTEND_URL.rstrip('/')}{self.PAYMENT_CALLBACK_PATH}"

    @property
    def session_ttl_seconds(self) -> int:
        return self.SESSION_TTL_HOURS * 3600

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
