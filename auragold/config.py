"""
Configuration management for AuraGold Clinic.

Uses Pydantic Settings for type-safe environment variable handling.
All configuration is loaded from environment variables or .env file.
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    app_name: str = "AuraGold Clinic"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # Server
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 8000

    # ==========================================================================
    # Rate Limiting
    # ==========================================================================
    rate_limit_per_minute: int = 30
    login_rate_limit_per_minute: int = 20

    # ==========================================================================
    # Staff Session
    # ==========================================================================
    staff_passcode: str = "2026"
    session_timeout_seconds: int = 900
    session_warning_threshold_seconds: int = 120
    session_tick_interval_seconds: float = 1.0

    # ==========================================================================
    # Audit Trail
    # ==========================================================================
    audit_log_max_entries: int = 1000

    @field_validator("staff_passcode")
    @classmethod
    def passcode_is_four_digits(cls, value: str) -> str:
        if len(value) != 4 or not value.isdigit():
            raise ValueError("staff_passcode must be exactly 4 digits")
        return value

    @model_validator(mode="after")
    def warning_inside_timeout(self) -> "Settings":
        if not 0 < self.session_warning_threshold_seconds < self.session_timeout_seconds:
            raise ValueError(
                "session_warning_threshold_seconds must be positive and "
                "smaller than session_timeout_seconds"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience access
settings = get_settings()
