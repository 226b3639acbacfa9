"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .service import ConnectionConfig, get_connection_config

__all__ = [
    "ConfigurationError",
    "ConnectionConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "env_flag",
    "get_connection_config",
    "require_env_var",
    "require_env_vars",
]
