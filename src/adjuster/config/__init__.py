"""Application configuration helpers."""

from __future__ import annotations

from .adjuster import AdjusterConfig, get_adjuster_config, load_changeset_model
from .env import env_flag, env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "AdjusterConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_list",
    "get_adjuster_config",
    "get_database_config",
    "get_storage_config",
    "load_changeset_model",
    "optional_env_var",
    "require_env_vars",
]
