"""Endpoint source for F5 ``VirtualServer`` resources."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from vsdns.domain.errors import ConversionError
from vsdns.domain.filter import parse_filter
from vsdns.domain.synthesis import endpoints_from_virtual_servers, filter_by_annotations

from .events import notify_on_change
from .informer import DEFAULT_RELIST_LIMIT, ResourceCache
from .kubernetes.translator import convert_virtual_server

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from vsdns.config.source import RateLimit
    from vsdns.domain.endpoint import Endpoint
    from vsdns.domain.filter import Selector
    from vsdns.domain.model import VirtualServer
    from vsdns.domain.ports.cluster import ListWatchClient
    from vsdns.domain.ports.source import EndpointSource

log = getLogger(__name__)


class VirtualServerSource:
    """Produces DNS endpoints for the VirtualServers in one namespace (or all of them).

    Build instances with :meth:`create`, which compiles the annotation filter and waits
    for the resource cache to sync before returning.
    """

    def __init__(self, cache: ResourceCache, *, namespace: str, selector: Selector) -> None:
        self.namespace = namespace
        self.annotation_selector = selector
        self._cache = cache

    @classmethod
    async def create(
        cls,
        client: ListWatchClient,
        *,
        namespace: str = "",
        annotation_filter: str = "",
        sync_timeout: float | None = None,
        relist_limit: RateLimit = DEFAULT_RELIST_LIMIT,
    ) -> VirtualServerSource:
        """Construct and start a source.

        Raises :class:`FilterSyntaxError` before touching the cluster if the filter is
        malformed, and :class:`SyncTimeoutError` if the cache does not sync in time.
        """

        selector = parse_filter(annotation_filter)
        cache = ResourceCache(
            client, namespace=namespace, name="VirtualServer", relist_limit=relist_limit
        )
        await cache.start(timeout=sync_timeout)
        return cls(cache, namespace=namespace, selector=selector)

    async def __aenter__(self) -> VirtualServerSource:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._cache.stop()

    def endpoints(self) -> list[Endpoint]:
        """Return endpoints for each host/target combination that should be processed.

        Raises :class:`CacheReadError` if the cache cannot be read and
        :class:`ConversionError` if any cached object has an unexpected shape.
        """

        virtual_servers = self._virtual_servers()
        virtual_servers = filter_by_annotations(virtual_servers, self.annotation_selector)
        endpoints = endpoints_from_virtual_servers(virtual_servers)
        log.debug(
            "Produced %s endpoint(s) from %s VirtualServer(s)", len(endpoints), len(virtual_servers)
        )
        return endpoints

    def add_event_handler(self, handler: Callable[[], None]) -> None:
        log.debug("Adding event handler for VirtualServer")
        self._cache.add_event_handler(notify_on_change(handler))

    def _virtual_servers(self) -> list[VirtualServer]:
        virtual_servers: list[VirtualServer] = []
        for obj in self._cache.list(self.namespace):
            try:
                virtual_servers.append(convert_virtual_server(obj))
            except ConversionError as exc:
                raise ConversionError(
                    f"failed to list VirtualServers in {self.namespace or 'all namespaces'}: {exc}"
                ) from exc
        return virtual_servers


if TYPE_CHECKING:
    _source_check: type[EndpointSource] = VirtualServerSource
