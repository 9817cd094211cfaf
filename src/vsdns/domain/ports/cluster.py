"""Port for list/watch access to one kind of cluster resource."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

ResourceObject: TypeAlias = Mapping[str, object]


class EventType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass(slots=True, frozen=True)
class WatchEvent:
    type: EventType
    object: ResourceObject


@dataclass(slots=True, frozen=True)
class ObjectList:
    """A consistent listing and the resource version to resume watching from."""

    items: Sequence[ResourceObject] = field(default_factory=tuple)
    resource_version: str = ""


class WatchExpiredError(RuntimeError):
    """The requested resource version is too old; the caller must list again (HTTP 410)."""


@runtime_checkable
class ListWatchClient(Protocol):
    """Namespace scoped list/watch for one resource kind. An empty namespace means all."""

    async def list_objects(self, namespace: str) -> ObjectList: ...

    def watch(self, namespace: str, *, resource_version: str) -> AsyncIterator[WatchEvent]: ...


def object_key(obj: ResourceObject) -> str:
    """Return ``namespace/name`` (or just ``name`` for cluster scoped objects)."""

    metadata = obj.get("metadata")
    if not isinstance(metadata, Mapping):
        return ""
    name = str(metadata.get("name", ""))
    namespace = metadata.get("namespace")
    if namespace:
        return f"{namespace}/{name}"
    return name


__all__ = [
    "EventType",
    "ListWatchClient",
    "ObjectList",
    "ResourceObject",
    "WatchEvent",
    "WatchExpiredError",
    "object_key",
]
