"""
Configuration management for the customer record store.

Uses Pydantic Settings for type-safe configuration with multiple sources:
- Environment variables (highest priority)
- .env file
- Defaults (lowest priority)
"""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecordStoreConfig(BaseSettings):
    """Remote record store connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECORDSTORE_",
        env_file=".env",
        env_file_encoding="utf-8"
    )

    backend: Literal["http", "memory"] = Field(
        default="memory",
        description="Backend implementation (http for a remote service, memory for local dev)",
    )
    base_url: str = Field(
        default="http://localhost:8080/v1",
        description="Base URL of the remote record service",
    )
    api_key: str = Field(default="", description="Bearer token for the remote record service")
    database: Literal["private", "public", "shared"] = Field(
        default="private", description="Database scope records are stored in"
    )

    timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for transient (unavailable) failures",
    )
    retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Initial backoff for exponential retry",
    )
    results_limit: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="Records requested per query page (None = backend default)",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @property
    def database_url(self) -> str:
        """Base URL scoped to the configured database."""
        return f"{self.base_url}/{self.database}"


class ZoneConfig(BaseSettings):
    """Zone (partition) and record type identifiers."""

    model_config = SettingsConfigDict(env_prefix="ZONE_")

    zone_name: str = Field(default="customerRecordZone", min_length=1)
    record_type: str = Field(default="Customer", min_length=1)
    created_flag_key: str = Field(
        default="customerRecordZoneCreatedKey",
        min_length=1,
        description="Local settings key remembering that the zone was created",
    )


class LocalSettingsConfig(BaseSettings):
    """Local persistent settings storage."""

    model_config = SettingsConfigDict(env_prefix="LOCAL_SETTINGS_")

    path: str = Field(
        default="./data/local_settings.db",
        description="Path to the SQLite file holding local settings",
    )


class LoggingConfig(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_")

    # Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Output format
    json_output: bool = Field(
        default=True, description="Use JSON output (True for production, False for development)"
    )

    # Console colorization (only for non-JSON output)
    colorized: bool = Field(
        default=False, description="Colorize console output (only for development)"
    )

    # Service metadata (injected into all logs)
    service_name: str = Field(
        default="customer-record-store", description="Service name for log aggregation"
    )
    service_version: str = Field(default="0.1.0", description="Service version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )


class Settings(BaseSettings):
    """Root configuration for the customer record store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    record_store: RecordStoreConfig = Field(default_factory=RecordStoreConfig)
    zone: ZoneConfig = Field(default_factory=ZoneConfig)
    local_settings: LocalSettingsConfig = Field(default_factory=LocalSettingsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def validate_configuration(self) -> None:
        """
        Validate cross-field constraints and log warnings.
        Called at startup.
        """
        store = self.record_store
        if store.backend == "http":
            if not store.api_key:
                logging.warning("RECORDSTORE_API_KEY not set - requests will be unauthenticated")
            if store.base_url.startswith("http://") and self.logging.environment == "production":
                logging.warning(
                    f"Record store URL is not TLS-protected in production: {store.base_url}"
                )
        elif self.logging.environment == "production":
            logging.warning("In-memory record store configured in production - data is not durable")


# Global settings instance (lazy-loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get global settings instance (singleton pattern).

    Returns:
        Settings: Application configuration
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.validate_configuration()
    return _settings
