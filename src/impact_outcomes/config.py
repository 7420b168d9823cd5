"""
Impact Outcomes - Configuration.

Centralized configuration management for the outcomes reporting service.
Supports environment-based configuration with validation.

Architecture Layer: Infrastructure
Principles: 12-Factor App, Configuration Externalization, Type Safety
"""
from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__)


class Environment(str, Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ServiceConfiguration(BaseSettings):
    """Core service configuration."""
    name: str = Field(default="outcomes-service")
    version: str = Field(default="1.0.0")
    env: Environment = Field(default=Environment.DEVELOPMENT)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8010, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    debug: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="OUTCOMES_SERVICE_",
        env_file=".env",
        extra="ignore",
    )


class ReportConfig(BaseSettings):
    """Report computation configuration."""
    max_concurrent_fetches: int = Field(default=8, ge=1, le=64)

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        extra="ignore",
    )


class ObservabilityConfig(BaseSettings):
    """Observability configuration."""
    log_format: Literal["json", "console"] = Field(default="json")

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_",
        env_file=".env",
        extra="ignore",
    )


class OutcomesServiceConfig(BaseSettings):
    """Aggregate outcomes service configuration."""
    service: ServiceConfiguration = Field(default_factory=ServiceConfiguration)
    report: ReportConfig = Field(default_factory=ReportConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @staticmethod
    def load() -> OutcomesServiceConfig:
        """Load configuration from environment."""
        config = OutcomesServiceConfig()
        logger.info(
            "outcomes_config_loaded",
            service=config.service.name,
            env=config.service.env.value,
            max_concurrent_fetches=config.report.max_concurrent_fetches,
        )
        return config

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.service.env == Environment.PRODUCTION


_config: OutcomesServiceConfig | None = None


def get_config() -> OutcomesServiceConfig:
    """Get singleton configuration instance."""
    global _config
    if _config is None:
        _config = OutcomesServiceConfig.load()
    return _config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None
