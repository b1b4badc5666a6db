"""
Core configuration module for the Evolver framework.

This module manages process-level settings using Pydantic Settings, so log
level and Logfire options can come from environment variables or a ``.env``
file. Per-run algorithm parameters live in ``src.evolver.core.config``.
"""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process settings with environment variable support.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "Evolver"
    app_version: str = "1.0.0"
    environment: str = Field(default="development")

    # Logging
    log_level: str = Field(default="INFO")

    # Logfire settings
    logfire_token: Optional[str] = Field(default=None)
    logfire_service_name: str = Field(default="evolver")
    logfire_environment: str = Field(default="development")
    logfire_console: bool = Field(default=False)

    # Defaults for algorithm runs
    default_random_seed: Optional[int] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def get_logfire_settings(self) -> Dict[str, Any]:
        """Get Logfire configuration."""
        return {
            "token": self.logfire_token or None,
            "service_name": self.logfire_service_name,
            "environment": self.logfire_environment,
        }

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


# Create global settings instance
settings = Settings()
