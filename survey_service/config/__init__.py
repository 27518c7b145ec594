"""Configuration module."""

from survey_service.config.configuration import (
    ApiConfig,
    AppConfig,
    ConfigurationError,
    DatabaseConfig,
    IngestionConfig,
    LoggingConfig,
    get_config,
    get_environment,
    load_config,
    reset_config,
)

__all__ = [
    "ApiConfig",
    "AppConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "IngestionConfig",
    "LoggingConfig",
    "get_config",
    "get_environment",
    "load_config",
    "reset_config",
]
