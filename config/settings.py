"""
Configuration settings for the ongoing events context service.
Uses Pydantic Settings for type-safe configuration with validation.

These are runtime knobs (budgets, limits, logging). The user-facing filter
configuration that travels with the host's settings file lives in
schemas.filter_settings.EventFilterSettings.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic validates types and provides clear error messages for misconfigurations.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )

    DEV_MODE: bool = Field(
        default=False,
        description="Dump the ongoing events list to the log when a region finishes loading",
    )

    # ==================== Extraction Limits ====================
    # Explicit counters are the only bounded-execution guards in the pipeline.

    MAX_EVENTS: int = Field(
        default=5,
        description="Maximum number of situations appended to one prompt",
        ge=0,
    )

    MAX_THREAT_SCAN_BACK: int = Field(
        default=30,
        description="How many recent alerts to scan (newest first) when looking for a threat",
        ge=0,
    )

    CATALOG_THREAT_SCAN_BACK: int = Field(
        default=50,
        description="Alert scan depth used when listing currently appendable types for the filter screen",
        ge=0,
    )

    THREAT_TIMEOUT_TICKS: int = Field(
        default=36000,  # 0.6 in-game days at 60000 ticks per day
        description="Threat alerts older than this many ticks are not reported. "
                    "0.6 in-game days by default.",
        ge=0,
    )

    # ==================== Output Budgets ====================

    PROMPT_MAX_CHARS: int = Field(
        default=1200,
        description="Character budget for the block appended to a dialogue prompt",
        ge=0,
    )

    DEBUG_DUMP_MAX_CHARS: int = Field(
        default=800,
        description="Character budget per entry for the developer dump on region load",
        ge=0,
    )

    BODY_MAX_CHARS: int = Field(
        default=600,
        description="Individual entry bodies longer than this are cut and end with '...'",
        ge=1,
    )

    CONTEXT_CHANNEL_KEY: str = Field(
        default="ongoing_events",
        description="Key used when the dialogue generator exposes a persistent context channel",
    )

    @field_validator("CONTEXT_CHANNEL_KEY")
    @classmethod
    def validate_context_key(cls, v: str) -> str:
        """Ensure the context channel key is usable."""
        if not v.strip():
            raise ValueError("CONTEXT_CHANNEL_KEY must not be blank")
        return v.strip()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"


# Create singleton instance with validation
# This will automatically load from .env and validate all fields
settings = Settings()
