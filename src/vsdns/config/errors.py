"""Errors for settings read from ``VSDNS_*`` variables and kubeconfig files."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Settings are unusable; the CLI exits with status 2."""


class MissingConfigurationError(ConfigurationError):
    """No way to reach a cluster: no service account and no kubeconfig."""


class InvalidConfigurationError(ConfigurationError):
    """A ``VSDNS_*`` variable is set but cannot be parsed."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"{name}={value!r} is not {expected}")
        self.name = name
        self.value = value
