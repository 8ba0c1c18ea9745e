"""Application configuration helpers."""

from __future__ import annotations

from .env import env_value, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, parse_log_level
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_value",
    "get_database_config",
    "get_database_uri",
    "get_storage_config",
    "parse_log_level",
    "require_env_vars",
]
