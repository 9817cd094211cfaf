"""Local, continuously updated mirror of one resource kind.

A background task lists the resources once, then follows the watch stream from the
listed resource version. When the watch expires or fails it lists again, throttled
by a rate limiter. Readers get snapshots from a lock-protected store and never wait
on the network.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from aiolimiter import AsyncLimiter

from vsdns.config.source import RateLimit
from vsdns.domain.errors import CacheReadError, SyncTimeoutError
from vsdns.domain.ports.cluster import EventType, WatchExpiredError, object_key

from .events import EventRelay

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    from vsdns.domain.filter import Selector
    from vsdns.domain.ports.cluster import ListWatchClient, ResourceObject, WatchEvent

    from .events import ResourceEventHandler

log = getLogger(__name__)

DEFAULT_RELIST_LIMIT = RateLimit(max_calls=1, per_seconds=1.0)


def _metadata(obj: ResourceObject) -> Mapping[str, object]:
    metadata = obj.get("metadata")
    return metadata if isinstance(metadata, Mapping) else {}


def _labels(obj: ResourceObject) -> Mapping[str, str]:
    labels = _metadata(obj).get("labels")
    return labels if isinstance(labels, Mapping) else {}


class ResourceCache:
    """Mirror of the resources a :class:`ListWatchClient` serves for one namespace scope.

    Lifecycle belongs to the owner: :meth:`start` it, :meth:`list` it, :meth:`stop` it.
    """

    def __init__(
        self,
        client: ListWatchClient,
        *,
        namespace: str = "",
        name: str = "resources",
        relist_limit: RateLimit = DEFAULT_RELIST_LIMIT,
    ) -> None:
        self.namespace = namespace
        self.name = name
        self._client = client
        self._relay = EventRelay(name)
        self._lock = threading.Lock()
        self._items: dict[str, ResourceObject] = {}
        self._resource_version = ""
        self._synced = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._stopped = False
        self._last_error: Exception | None = None
        self._relist_limiter = AsyncLimiter(relist_limit.max_calls, relist_limit.per_seconds)

    async def __aenter__(self) -> ResourceCache:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    @property
    def has_synced(self) -> bool:
        return self._synced.is_set()

    @property
    def resource_version(self) -> str:
        return self._resource_version

    def add_event_handler(self, handler: ResourceEventHandler) -> None:
        """Subscribe to add, update and delete notifications from now on."""

        self._relay.subscribe(handler)

    async def start(self, *, timeout: float | None = None) -> None:
        """Start the background updater and wait until the first listing is stored.

        Raises :class:`SyncTimeoutError` if that takes longer than ``timeout`` seconds,
        chained to the last list/watch failure if there was one. The updater is
        stopped whenever this does not return normally, cancellation included.
        """

        if self._task is not None:
            raise RuntimeError(f"{self.name} cache already started")

        self._task = asyncio.create_task(self._run(), name=f"{self.name}-reflector")
        try:
            async with asyncio.timeout(timeout):
                await self._synced.wait()
        except TimeoutError:
            await self.stop()
            message = f"timed out after {timeout}s waiting for the {self.name} cache to sync"
            if self._last_error is not None:
                message = f"{message} (last error: {self._last_error})"
            raise SyncTimeoutError(message) from self._last_error
        except BaseException:
            # cancelled while waiting: the reflector must not outlive its owner
            await self.stop()
            raise
        log.debug("%s cache synced with %s object(s)", self.name, len(self._items))

    async def stop(self) -> None:
        self._stopped = True
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def list(
        self,
        namespace: str | None = None,
        selector: Selector | None = None,
    ) -> list[ResourceObject]:
        """Return a snapshot of the cached objects.

        ``namespace`` narrows an all-namespaces cache; ``selector`` matches object labels.
        Safe to call from any thread while the cache is being updated.
        """

        if self._stopped:
            raise CacheReadError(f"{self.name} cache has been stopped")
        if not self._synced.is_set():
            raise CacheReadError(f"{self.name} cache has not synced yet")

        with self._lock:
            items = list(self._items.values())

        if namespace:
            items = [obj for obj in items if _metadata(obj).get("namespace") == namespace]
        if selector is not None and not selector.empty:
            items = [obj for obj in items if selector.matches(_labels(obj))]
        return items

    async def _run(self) -> None:
        while True:
            await self._relist_limiter.acquire()
            try:
                await self._list_and_watch()
            except WatchExpiredError:
                log.info("Watch of %s expired, listing again", self.name)
            except Exception as exc:  # noqa: BLE001
                self._last_error = exc
                log.warning("List/watch of %s failed, retrying: %s", self.name, exc)

    async def _list_and_watch(self) -> None:
        listing = await self._client.list_objects(self.namespace)
        self._replace(listing.items)
        self._resource_version = listing.resource_version
        self._synced.set()

        while True:
            async for event in self._client.watch(
                self.namespace, resource_version=self._resource_version
            ):
                self._apply(event)
            log.debug("Watch of %s closed at %s, resuming", self.name, self._resource_version)
            await self._relist_limiter.acquire()

    def _replace(self, items: Iterable[ResourceObject]) -> None:
        fresh = {object_key(obj): obj for obj in items}
        with self._lock:
            previous, self._items = self._items, fresh

        for key, obj in fresh.items():
            old = previous.get(key)
            if old is None:
                self._relay.added(obj)
            elif old != obj:
                self._relay.updated(old, obj)
        for key, old in previous.items():
            if key not in fresh:
                self._relay.deleted(old)

    def _apply(self, event: WatchEvent) -> None:
        obj = event.object
        version = _metadata(obj).get("resourceVersion")
        if isinstance(version, str) and version:
            self._resource_version = version

        match event.type:
            case EventType.ADDED | EventType.MODIFIED:
                key = object_key(obj)
                with self._lock:
                    old = self._items.get(key)
                    self._items[key] = obj
                if old is None:
                    self._relay.added(obj)
                else:
                    self._relay.updated(old, obj)
            case EventType.DELETED:
                with self._lock:
                    old = self._items.pop(object_key(obj), None)
                self._relay.deleted(old if old is not None else obj)
            case EventType.BOOKMARK | EventType.ERROR:
                pass
