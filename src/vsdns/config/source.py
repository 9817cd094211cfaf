"""Settings for the VirtualServer endpoint source."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var

DEFAULT_SYNC_TIMEOUT_SECONDS = 60.0
DEFAULT_MIN_EVENT_SYNC_INTERVAL = 5.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(frozen=True)
class SourceConfig:
    namespace: str = ""
    annotation_filter: str = ""
    sync_timeout_seconds: float = DEFAULT_SYNC_TIMEOUT_SECONDS
    min_event_sync_interval: float = DEFAULT_MIN_EVENT_SYNC_INTERVAL


def get_source_config() -> SourceConfig:
    """Read source settings; every value is optional.

    An empty namespace watches all namespaces and an empty filter keeps every object.
    """

    return SourceConfig(
        namespace=optional_env_var("VSDNS_NAMESPACE", "") or "",
        annotation_filter=optional_env_var("VSDNS_ANNOTATION_FILTER", "") or "",
        sync_timeout_seconds=env_float("VSDNS_SYNC_TIMEOUT", DEFAULT_SYNC_TIMEOUT_SECONDS),
        min_event_sync_interval=env_float(
            "VSDNS_MIN_EVENT_SYNC_INTERVAL", DEFAULT_MIN_EVENT_SYNC_INTERVAL
        ),
    )
