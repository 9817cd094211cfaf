"""Port implemented by endpoint sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from vsdns.domain.endpoint import Endpoint


@runtime_checkable
class EndpointSource(Protocol):
    """Something that can list the DNS endpoints it wants and say when they changed."""

    def endpoints(self) -> list[Endpoint]: ...

    def add_event_handler(self, handler: Callable[[], None]) -> None: ...


__all__ = ["EndpointSource"]
