"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, env_int_list, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .gcal import GoogleCalendarConfig, get_gcal_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .linear import LinearConfig, get_linear_config
from .logging import configure_logging
from .sync import get_sync_settings

__all__ = [
    "ConfigurationError",
    "GoogleCalendarConfig",
    "LinearConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "env_int",
    "env_int_list",
    "get_gcal_config",
    "get_linear_config",
    "get_sync_settings",
    "optional_env_var",
    "require_env_vars",
]
