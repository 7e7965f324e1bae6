"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_CONDITIONS_SOURCE = str(Path(__file__).parent / "data" / "health_analysis.json")


class StorageConfig(BaseModel):
    """Where the key-value slots live."""

    path: str = Field(default="./patient_store.json", description="JSON file holding all slots")
    patients_key: str = Field(default="patients", min_length=1, description="Slot for records")
    theme_key: str = Field(default="dark", min_length=1, description="Slot for dark-mode flag")


class LookupConfig(BaseModel):
    """Condition reference dataset settings."""

    source: str = Field(
        default=DEFAULT_CONDITIONS_SOURCE, description="URL or file path of the dataset"
    )
    timeout_seconds: float = Field(default=10.0, gt=0.0, description="Fetch timeout")


class DashboardConfig(BaseModel):
    recent_limit: int = Field(default=6, gt=0, description="Rows in the recent-items list")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    lookup: LookupConfig = Field(default_factory=LookupConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    storage_config = StorageConfig(
        path=os.getenv("PATIENT_STORE_PATH", "./patient_store.json"),
    )

    lookup_config = LookupConfig(
        source=os.getenv("CONDITIONS_SOURCE", DEFAULT_CONDITIONS_SOURCE),
        timeout_seconds=float(os.getenv("LOOKUP_TIMEOUT_SECONDS", "10.0")),
    )

    dashboard_config = DashboardConfig(
        recent_limit=int(os.getenv("DASHBOARD_RECENT_LIMIT", "6")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        storage=storage_config,
        lookup=lookup_config,
        dashboard=dashboard_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()
