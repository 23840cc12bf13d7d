# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.public_routes)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The route lists are parsed once into tuples, so the gate's public route
# set is an immutable value fixed at startup.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> tuple[str, ...]:
    """Split a comma-separated setting into a tuple of non-empty entries."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


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
    # Supabase Configuration (User Directory)
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    USERS_TABLE: str = Field(
        default="users",
        description="Table holding one row per user with an is_onboarded flag"
    )

    # -------------------------------------------------------------------------
    # Session Resolution (Auth Provider)
    # -------------------------------------------------------------------------

    AUTH_JWT_SECRET: str = Field(
        ...,
        min_length=16,
        description="Shared secret used to verify HS256 session tokens"
    )

    AUTH_JWKS_URL: str | None = Field(
        default=None,
        description="JWKS endpoint for ES256/RS256 tokens (defaults to the Supabase one)"
    )

    AUTH_JWT_AUDIENCE: str = Field(
        default="authenticated",
        description="Expected 'aud' claim of session tokens"
    )

    SESSION_COOKIE_NAME: str = Field(
        default="session_token",
        description="Cookie carrying the session token when no Bearer header is sent"
    )

    JWKS_CACHE_TTL: int = Field(
        default=3600,
        ge=0,
        description="Seconds to keep the provider's signing keys"
    )

    JWKS_RETRY_INTERVAL: float = Field(
        default=30.0,
        ge=0,
        description="Minimum seconds between JWKS fetch attempts (after failures and unknown key ids)"
    )

    JWKS_FETCH_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for fetching the JWKS document"
    )

    # -------------------------------------------------------------------------
    # Access Gate
    # -------------------------------------------------------------------------

    PUBLIC_ROUTES: str = Field(
        default=(
            "/home,/login,/signup,/logout,/onboarding,"
            "/api/auth,/forgot-password,/reset-password"
        ),
        description="Paths (and their sub-paths) reachable without a session (comma-separated)"
    )

    BYPASS_PREFIXES: str = Field(
        default="/api,/_next/static,/_next/image,/static",
        description="Path prefixes never gated: APIs and static assets (comma-separated)"
    )

    BYPASS_FILES: str = Field(
        default="/favicon.ico,/sitemap.xml,/robots.txt",
        description="Exact file paths never gated (comma-separated)"
    )

    STATIC_EXTENSIONS: str = Field(
        default="ico,png,jpg,jpeg,gif,webp,svg,css,js,woff,woff2,ttf,eot,txt,xml",
        description="File extensions served as static assets (comma-separated)"
    )

    LOGIN_REDIRECT: str = Field(
        default="/home",
        description="Where callers without a valid session are sent"
    )

    ONBOARDING_REDIRECT: str = Field(
        default="/onboarding",
        description="Where signed-in callers who haven't finished onboarding are sent"
    )

    REDIRECT_LIMIT: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Consecutive gate redirects before loop protection kicks in (0 disables)"
    )

    REDIRECT_COUNT_COOKIE: str = Field(
        default="redirect_count",
        description="Cookie counting consecutive gate redirects"
    )

    REDIRECT_COUNT_MAX_AGE: int = Field(
        default=60,
        ge=1,
        description="Lifetime in seconds of the redirect counter cookie"
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

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def public_routes(self) -> tuple[str, ...]:
        """Public route set as an immutable tuple."""
        return _split_csv(self.PUBLIC_ROUTES)

    @property
    def bypass_prefixes(self) -> tuple[str, ...]:
        return _split_csv(self.BYPASS_PREFIXES)

    @property
    def bypass_files(self) -> tuple[str, ...]:
        return _split_csv(self.BYPASS_FILES)

    @property
    def static_extensions(self) -> tuple[str, ...]:
        """
        Parse STATIC_EXTENSIONS into lowercase extensions without dots.

        Example: "png, .SVG" -> ("png", "svg")
        """
        return tuple(ext.lstrip(".").lower() for ext in _split_csv(self.STATIC_EXTENSIONS))

    @property
    def jwks_url(self) -> str:
        """JWKS URL, derived from SUPABASE_URL when not set explicitly."""
        if self.AUTH_JWKS_URL:
            return self.AUTH_JWKS_URL
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

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
