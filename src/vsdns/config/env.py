"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import InvalidConfigurationError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def optional_env_var(name: str, default: str | None = None) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_float(name: str, default: float) -> float:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidConfigurationError(name, raw, "a number") from None
    if value < 0:
        raise InvalidConfigurationError(name, raw, "a non-negative number")
    return value


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = optional_env_var(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(name, raw, "a boolean")
