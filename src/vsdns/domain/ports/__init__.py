"""Ports (protocols) between the domain core and its adapters."""

from __future__ import annotations

from .cluster import (
    EventType,
    ListWatchClient,
    ObjectList,
    ResourceObject,
    WatchEvent,
    WatchExpiredError,
    object_key,
)
from .source import EndpointSource

__all__ = [
    "EndpointSource",
    "EventType",
    "ListWatchClient",
    "ObjectList",
    "ResourceObject",
    "WatchEvent",
    "WatchExpiredError",
    "object_key",
]
