"""Adapters connecting the domain core to the Kubernetes API."""

from __future__ import annotations

from .events import EventRelay, ResourceEventHandler, ResourceEventHandlerFuncs, notify_on_change
from .informer import ResourceCache
from .virtualserver import VirtualServerSource

__all__ = [
    "EventRelay",
    "ResourceCache",
    "ResourceEventHandler",
    "ResourceEventHandlerFuncs",
    "VirtualServerSource",
    "notify_on_change",
]
