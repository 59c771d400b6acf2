"""
Configuration module for the Gemini Gateway.

This module uses Pydantic Settings to load and validate environment variables
for the two gateway secrets, the upstream Gemini endpoint, outbound timeouts
and server options.

Environment variables are loaded from .env file or system environment.
"""

from functools import lru_cache
from typing import Any, Dict, List

from pydantic import Field, HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    One instance is built per process and never mutated afterwards; it is
    handed to the application factory and read by every request.
    """

    # =========================================================================
    # Secrets
    # =========================================================================

    GEMINI_API_KEY: SecretStr = Field(
        ...,
        description="Upstream Gemini API key (never returned to clients)",
    )

    PROXY_API_KEY: SecretStr = Field(
        ...,
        description="Shared secret clients present as 'Authorization: Bearer <key>'",
    )

    # =========================================================================
    # Upstream Configuration
    # =========================================================================

    GEMINI_API_BASE_URL: HttpUrl = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API",
        validate_default=True,
    )

    GEMINI_DEFAULT_MODEL: str = Field(
        default=DEFAULT_GEMINI_MODEL,
        description="Model used when the request has no 'model' query parameter",
        min_length=1,
    )

    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        description="Upper bound for reading/writing the upstream call",
        gt=0,
    )

    UPSTREAM_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Upper bound for establishing the upstream connection",
        gt=0,
    )

    DISCONNECT_POLL_SECONDS: float = Field(
        default=0.5,
        description="Interval for checking whether the client went away mid-request",
        gt=0,
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    GATEWAY_HOST: str = Field(default="0.0.0.0")

    GATEWAY_PORT: int = Field(default=8787, ge=1, le=65535)

    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def gemini_api_base_url_str(self) -> str:
        """Base URL without trailing slash."""
        return str(self.GEMINI_API_BASE_URL).rstrip("/")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalise and validate the log level name.

        Raises:
            ValueError: If the level is not a standard logging level
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = v.strip().upper()

        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    The result is cached so the environment is read once per process.

    Raises:
        ValidationError: If GEMINI_API_KEY or PROXY_API_KEY is missing.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> Dict[str, Any]:
    """
    Validate critical configuration settings and return a status report.

    Called during application startup; errors are logged loudly but do not
    stop the process.

    Args:
        settings: Settings to inspect

    Returns:
        Dictionary with validation status, errors and warnings.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    errors: List[str] = []
    warnings: List[str] = []

    gemini_key = settings.GEMINI_API_KEY.get_secret_value()
    proxy_key = settings.PROXY_API_KEY.get_secret_value()

    if not gemini_key.strip():
        errors.append("GEMINI_API_KEY is empty")

    if not proxy_key.strip():
        errors.append("PROXY_API_KEY is empty")
    elif len(proxy_key) < 16:
        warnings.append("PROXY_API_KEY is shorter than recommended (16+ chars)")

    if gemini_key and gemini_key == proxy_key:
        errors.append("PROXY_API_KEY must not be the same value as GEMINI_API_KEY")

    if not settings.gemini_api_base_url_str.startswith("https://"):
        warnings.append("GEMINI_API_BASE_URL is not HTTPS (the API key travels in the query string)")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "default_model": settings.GEMINI_DEFAULT_MODEL,
        "upstream_timeout_seconds": settings.UPSTREAM_TIMEOUT_SECONDS,
    }
