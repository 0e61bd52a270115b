"""
Profile Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Mistral OCR rejects larger documents
MAX_OCR_DOCUMENT_BYTES = 50 * 1024 * 1024


class ProfileServiceSettings(BaseSettings):
    """
    Profile service configuration with validation.

    All settings can be overridden via environment variables.
    Validation happens at startup to fail fast on misconfiguration.
    """

    # === Security ===
    service_api_secret: Optional[str] = Field(
        default=None,
        min_length=16,
        description="API authentication secret (min 16 chars for security)"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    # === Uploads ===
    max_upload_bytes: int = Field(
        default=8 * 1024 * 1024,
        ge=1,
        description="Largest accepted resume upload in bytes (default 8 MB)"
    )

    # === Import sessions ===
    session_ttl_minutes: int = Field(
        default=60,
        ge=1,
        le=24 * 60,
        description="Minutes an untouched import session is kept (1-1440)"
    )

    # === CORS ===
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("service_api_secret")
    @classmethod
    def validate_secret_strength(cls, v: Optional[str]) -> Optional[str]:
        """Reject secrets that are long enough but trivially guessable."""
        if v is None:
            return None
        weak_secrets = {"secret", "password", "12345678901234567", "changeme"}
        if v.lower() in weak_secrets or len(set(v)) < 4:
            raise ValueError("API secret is too weak - use a secure random string")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def auth_required(self) -> bool:
        """Auth is required in production or whenever a secret is configured."""
        return self.is_production or self.service_api_secret is not None

    def validate_production_config(self, ocr_configured: bool = True) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.service_api_secret:
                issues.append("CRITICAL: SERVICE_API_SECRET required in production")
            if not self.cors_origins:
                issues.append("WARNING: CORS_ORIGINS not configured")

        if not ocr_configured:
            issues.append("WARNING: MISTRAL_API_KEY not configured; PDF and Word uploads will fail")
        if self.max_upload_bytes > MAX_OCR_DOCUMENT_BYTES:
            issues.append(
                f"WARNING: max_upload_bytes exceeds the OCR document limit of "
                f"{MAX_OCR_DOCUMENT_BYTES // (1024 * 1024)} MB"
            )

        return issues

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # SERVICE_API_SECRET = service_api_secret


@lru_cache()
def get_settings() -> ProfileServiceSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    """
    return ProfileServiceSettings()


def validate_config_on_startup() -> None:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid. Missing pipeline
    settings are fatal in production and a warning elsewhere.
    Logs warnings for non-critical issues.
    """
    import logging
    from src.common.config import Config

    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    # Pipeline settings (MongoDB, OCR) are only mandatory in production
    try:
        Config.validate()
    except ValueError as e:
        if settings.is_production:
            raise
        logger.warning(f"{e} Imports will fail until this is fixed.")

    issues = settings.validate_production_config(ocr_configured=bool(Config.MISTRAL_API_KEY))

    for issue in issues:
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        else:
            logger.warning(issue)

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  max_upload_bytes={settings.max_upload_bytes}")
    logger.info(f"  session_ttl_minutes={settings.session_ttl_minutes}")
    logger.info(f"  auth_required={settings.auth_required}")
    for line in Config.summary().splitlines():
        logger.info(f"  {line.strip()}")


# Convenience exports
settings = get_settings()
