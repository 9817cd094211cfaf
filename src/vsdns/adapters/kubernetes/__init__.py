"""Kubernetes API adapter: list/watch client and object translation."""

from __future__ import annotations

from .client import (
    F5_VIRTUAL_SERVER,
    KubernetesAPIError,
    KubernetesClient,
    ResourceKind,
    load_client_configuration,
)
from .schema import ObjectListPayload, VirtualServerPayload, WatchEventPayload
from .translator import convert_virtual_server

__all__ = [
    "F5_VIRTUAL_SERVER",
    "KubernetesAPIError",
    "KubernetesClient",
    "ObjectListPayload",
    "ResourceKind",
    "VirtualServerPayload",
    "WatchEventPayload",
    "convert_virtual_server",
    "load_client_configuration",
]
