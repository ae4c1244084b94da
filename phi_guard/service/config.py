# phi_guard/service/config.py

"""Application configuration using Pydantic Settings.

Manages environment variables, defaults, and validation rules.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from phi_guard import __version__
from phi_guard.core.definitions import RedactionMethod


class Settings(BaseSettings):
    """Global application settings.

    Loads values from environment variables (prefix 'PHI_GUARD_') or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PHI_GUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root logging level.")

    patterns_path: Optional[Path] = Field(
        default=None,
        description="Override for the bundled PHI pattern registry YAML.",
    )

    # Audit log
    max_memory_events: int = Field(
        default=10000, ge=1, description="Audit events kept in memory."
    )
    max_stored_events: int = Field(
        default=1000, ge=1, description="Audit events kept in durable storage."
    )
    audit_store_path: Optional[Path] = Field(
        default=None,
        description="JSON file for durable audit storage; in-memory when unset.",
    )
    default_ip_address: str = Field(
        default="127.0.0.1", description="Address stamped on audit events."
    )
    user_agent: str = Field(
        default=f"phi-guard/{__version__}",
        description="Client agent string stamped on audit events.",
    )

    # Redaction
    preview_max_length: int = Field(
        default=200, ge=1, description="Maximum length of safe previews."
    )
    default_redaction_method: str = Field(
        default="mask", description="Redaction strategy used by the scan service."
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("default_redaction_method")
    @classmethod
    def validate_redaction_method(cls, v: str) -> str:
        if v not in RedactionMethod.ALL:
            raise ValueError(
                f"Unknown redaction method {v!r}; use one of {sorted(RedactionMethod.ALL)}"
            )
        return v

    @model_validator(mode="after")
    def validate_capacities(self) -> "Settings":
        """Durable storage must not hold more events than memory."""
        if self.max_stored_events > self.max_memory_events:
            raise ValueError("max_stored_events cannot exceed max_memory_events")
        return self


# Singleton settings instance
settings = Settings()
