"""Fan-out of cache notifications to registered handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from vsdns.domain.ports.cluster import ResourceObject

log = getLogger(__name__)


@runtime_checkable
class ResourceEventHandler(Protocol):
    def on_add(self, obj: ResourceObject) -> None: ...

    def on_update(self, old: ResourceObject, new: ResourceObject) -> None: ...

    def on_delete(self, obj: ResourceObject) -> None: ...


@dataclass(slots=True)
class ResourceEventHandlerFuncs:
    """Adapts plain callables to :class:`ResourceEventHandler`; unset ones are ignored."""

    add_func: Callable[[ResourceObject], None] | None = None
    update_func: Callable[[ResourceObject, ResourceObject], None] | None = None
    delete_func: Callable[[ResourceObject], None] | None = None

    def on_add(self, obj: ResourceObject) -> None:
        if self.add_func is not None:
            self.add_func(obj)

    def on_update(self, old: ResourceObject, new: ResourceObject) -> None:
        if self.update_func is not None:
            self.update_func(old, new)

    def on_delete(self, obj: ResourceObject) -> None:
        if self.delete_func is not None:
            self.delete_func(obj)


def notify_on_change(handler: Callable[[], None]) -> ResourceEventHandlerFuncs:
    """Call ``handler`` with no arguments on every add, update and delete."""

    return ResourceEventHandlerFuncs(
        add_func=lambda _obj: handler(),
        update_func=lambda _old, _new: handler(),
        delete_func=lambda _obj: handler(),
    )


class EventRelay:
    """Delivers each notification to every subscriber in registration order.

    Runs on the caller's (the cache updater's) path, so handlers must return quickly.
    A handler that raises is logged and does not stop delivery to the others.
    """

    def __init__(self, name: str = "resources") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._handlers: tuple[ResourceEventHandler, ...] = ()

    def __len__(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: ResourceEventHandler) -> None:
        with self._lock:
            self._handlers = (*self._handlers, handler)
        log.debug("Added event handler for %s (%s total)", self.name, len(self._handlers))

    def added(self, obj: ResourceObject) -> None:
        for handler in self._handlers:
            self._deliver(handler.on_add, obj)

    def updated(self, old: ResourceObject, new: ResourceObject) -> None:
        for handler in self._handlers:
            self._deliver(handler.on_update, old, new)

    def deleted(self, obj: ResourceObject) -> None:
        for handler in self._handlers:
            self._deliver(handler.on_delete, obj)

    def _deliver(self, callback: Callable[..., None], *args: ResourceObject) -> None:
        try:
            callback(*args)
        except Exception:
            log.exception("Event handler for %s failed", self.name)
