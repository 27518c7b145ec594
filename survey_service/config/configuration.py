"""Configuration module for the survey service.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml (local development database)
- APP_ENV=test → config_test.yaml
- Default      → config.yaml

Paths may be overridden from the environment (or a .env file).
Fails fast with clear error messages if configuration is invalid.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from survey_service/config/ up to project root
    return Path(__file__).parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable.

    Returns:
        Config filename:
        - APP_ENV=dev  → config_dev.yaml
        - APP_ENV=test → config_test.yaml
        - Default      → config.yaml
    """
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file."""
    config_filename = _get_config_filename()
    config_path = _get_project_root() / config_filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Set APP_ENV to 'dev' or 'test', or create {config_filename}."
        )

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the root")
    return data


def _get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get optional environment variable with default."""
    return os.environ.get(key, default)


def _as_bool(value, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "yes", "1"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "no", "0"):
        return False
    raise ConfigurationError(f"'{key}' must be a boolean, got {value!r}")


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    path: str


@dataclass(frozen=True)
class IngestionConfig:
    """Markdown survey ingestion configuration."""
    markdown_dir: str
    seed_on_startup: bool


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class ApiConfig:
    """REST API configuration."""
    allowed_origins: List[str]


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    database: DatabaseConfig
    ingestion: IngestionConfig
    logging: LoggingConfig
    api: ApiConfig


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads from the YAML config file for settings and .env for overrides.
    Fails fast if configuration is invalid.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    # Load environment variables from .env file
    load_dotenv()

    yaml_config = _load_yaml_config()

    db_section = yaml_config.get("database") or {}
    database_config = DatabaseConfig(
        path=_get_optional_env("SURVEY_DB_PATH") or db_section.get("path", "surveys.db"),
    )

    ingestion_section = yaml_config.get("ingestion") or {}
    ingestion_config = IngestionConfig(
        markdown_dir=(
            _get_optional_env("SURVEY_MARKDOWN_DIR")
            or ingestion_section.get("markdown_dir", "markdown")
        ),
        seed_on_startup=_as_bool(
            ingestion_section.get("seed_on_startup", True), "ingestion.seed_on_startup"
        ),
    )

    logging_section = yaml_config.get("logging") or {}
    level = str(logging_section.get("level", "INFO")).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unknown logging level: {level}")
    logging_config = LoggingConfig(level=level)

    api_section = yaml_config.get("api") or {}
    origins = api_section.get("allowed_origins", ["http://localhost:3000"])
    if isinstance(origins, str):
        origins = [origins]
    api_config = ApiConfig(allowed_origins=[str(origin) for origin in origins])

    return AppConfig(
        database=database_config,
        ingestion=ingestion_config,
        logging=logging_config,
        api=api_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.
    Config file is selected based on APP_ENV environment variable.

    Returns:
        AppConfig: Application configuration.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_environment() -> str:
    """Get current environment name.

    Returns:
        'dev', 'test', or 'default' based on APP_ENV.
    """
    app_env = os.environ.get("APP_ENV", "").lower()
    return app_env if app_env in ("dev", "test") else "default"


def reset_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _config
    _config = None
