"""Coalescing change notifications for event handlers."""

from __future__ import annotations

import asyncio
from logging import getLogger

log = getLogger(__name__)


class ChangeNotifier:
    """Zero-argument callable that records a "please recompute" request.

    Register an instance as an event handler. Calling it never blocks: it only
    flags that something changed, and any number of calls before the next
    :meth:`wait` collapse into a single wake-up. The owner runs its own loop
    around :meth:`wait` and re-lists the source whenever it returns ``True``.

    When ``loop`` is given, calls coming from other threads are marshalled onto it.
    """

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._event = asyncio.Event()
        self._loop = loop
        self._pending = 0

    def __call__(self) -> None:
        if self._loop is not None and not _running_in(self._loop):
            self._loop.call_soon_threadsafe(self._set)
            return
        self._set()

    @property
    def pending(self) -> int:
        """Number of notifications received since the last wake-up."""

        return self._pending

    def _set(self) -> None:
        self._pending += 1
        self._event.set()

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait for a notification; return ``False`` if ``timeout`` elapsed first."""

        try:
            async with asyncio.timeout(timeout):
                await self._event.wait()
        except TimeoutError:
            return False

        log.debug("Woke up after %s change notification(s)", self._pending)
        self._event.clear()
        self._pending = 0
        return True


def _running_in(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False
