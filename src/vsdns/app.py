"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from aiolimiter import AsyncLimiter

from vsdns.adapters.kubernetes import KubernetesClient
from vsdns.adapters.virtualserver import VirtualServerSource
from vsdns.common.notify import ChangeNotifier
from vsdns.config.source import SourceConfig, get_source_config
from vsdns.domain.errors import SourceError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from vsdns.domain.endpoint import Endpoint
    from vsdns.domain.ports.cluster import ListWatchClient
    from vsdns.domain.ports.source import EndpointSource

log = getLogger(__name__)


@asynccontextmanager
async def open_virtual_server_source(
    config: SourceConfig | None = None,
    *,
    client: ListWatchClient | None = None,
) -> AsyncIterator[VirtualServerSource]:
    """Start a VirtualServer source and stop it (and any client it created) on exit."""

    effective_config = config or get_source_config()
    owned_client: KubernetesClient | None = None
    if client is None:
        owned_client = client = KubernetesClient()
    log.info(
        "Starting VirtualServer source: namespace=%s, annotation_filter=%r, sync_timeout=%ss",
        effective_config.namespace or "<all>",
        effective_config.annotation_filter,
        effective_config.sync_timeout_seconds,
    )

    try:
        if owned_client is not None:
            await owned_client.connect()
        source = await VirtualServerSource.create(
            client,
            namespace=effective_config.namespace,
            annotation_filter=effective_config.annotation_filter,
            sync_timeout=effective_config.sync_timeout_seconds,
        )
        async with source:
            yield source
    finally:
        if owned_client is not None:
            await owned_client.aclose()


def produce_endpoints(
    config: SourceConfig | None = None,
    *,
    client: ListWatchClient | None = None,
) -> list[Endpoint]:
    """Sync the cache once and return the current endpoints."""

    async def run() -> list[Endpoint]:
        async with open_virtual_server_source(config, client=client) as source:
            return source.endpoints()

    return asyncio.run(run())


async def watch_endpoints(
    source: EndpointSource,
    on_change: Callable[[list[Endpoint]], None],
    *,
    min_interval: float = 0.0,
    resync_interval: float | None = None,
    max_updates: int | None = None,
    notifier: ChangeNotifier | None = None,
) -> int:
    """Recompute endpoints whenever the source signals a change.

    ``on_change`` receives the full endpoint list each time it differs from the last
    one delivered. Recomputations are spaced at least ``min_interval`` seconds apart;
    ``resync_interval`` forces one periodically even without events. Failures while
    reading the source are logged and retried on the next wake-up. Returns the number
    of updates delivered once ``max_updates`` is reached.
    """

    effective_notifier = notifier or ChangeNotifier()
    source.add_event_handler(effective_notifier)
    limiter = AsyncLimiter(1, min_interval) if min_interval > 0 else None

    previous: list[dict[str, object]] | None = None
    updates = 0
    while max_updates is None or updates < max_updates:
        if limiter is not None:
            await limiter.acquire()

        try:
            endpoints = source.endpoints()
        except SourceError as exc:
            log.error("Failed to produce endpoints: %s", exc)
        else:
            rendered = [endpoint.to_dict() for endpoint in endpoints]
            if rendered != previous:
                previous = rendered
                updates += 1
                on_change(endpoints)
                if max_updates is not None and updates >= max_updates:
                    break

        await effective_notifier.wait(resync_interval)
    return updates


def run_watch(
    on_change: Callable[[list[Endpoint]], None],
    config: SourceConfig | None = None,
    *,
    client: ListWatchClient | None = None,
    resync_interval: float | None = None,
    max_updates: int | None = None,
) -> int:
    effective_config = config or get_source_config()

    async def run() -> int:
        async with open_virtual_server_source(effective_config, client=client) as source:
            return await watch_endpoints(
                source,
                on_change,
                min_interval=effective_config.min_event_sync_interval,
                resync_interval=resync_interval,
                max_updates=max_updates,
            )

    return asyncio.run(run())
