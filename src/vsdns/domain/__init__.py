"""Pure domain core: typed objects, endpoint records and synthesis rules."""

from __future__ import annotations

from .endpoint import Endpoint, RecordType, endpoints_for_hostname
from .errors import (
    CacheReadError,
    ConversionError,
    FilterSyntaxError,
    SourceError,
    SyncTimeoutError,
)
from .filter import Selector, parse_filter
from .model import VirtualServer
from .synthesis import endpoints_from_virtual_servers, filter_by_annotations

__all__ = [
    "CacheReadError",
    "ConversionError",
    "Endpoint",
    "FilterSyntaxError",
    "RecordType",
    "Selector",
    "SourceError",
    "SyncTimeoutError",
    "VirtualServer",
    "endpoints_for_hostname",
    "endpoints_from_virtual_servers",
    "filter_by_annotations",
    "parse_filter",
]
