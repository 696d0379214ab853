"""Application configuration helpers."""

from __future__ import annotations

from pressync.common.logging import configure_logging

from .clients import (
    DEFAULT_CLIENT_KEY,
    ClientConfig,
    ClientEntry,
    get_client_config,
    load_clients,
)
from .env import first_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_log_path, get_storage_config

__all__ = [
    "DEFAULT_CLIENT_KEY",
    "ClientConfig",
    "ClientEntry",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "first_env_var",
    "get_client_config",
    "get_log_path",
    "get_storage_config",
    "load_clients",
]
