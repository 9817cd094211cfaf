"""Application configuration helpers."""

from __future__ import annotations

from vsdns.common.logging import configure_logging

from .cluster import ClusterConfig, get_cluster_config
from .env import env_bool, env_float, optional_env_var
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .source import RateLimit, SourceConfig, get_source_config

__all__ = [
    "ClusterConfig",
    "ConfigurationError",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "SourceConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "get_cluster_config",
    "get_source_config",
    "optional_env_var",
]
