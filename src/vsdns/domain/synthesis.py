"""Derive DNS endpoints from VirtualServer objects.

Every rule here degrades to "no records for this object" on bad data. Nothing in
this module raises for a single object's content, so one misconfigured resource
never hides the records of the others.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from .annotations import targets_from_target_annotation, ttl_from_annotations
from .endpoint import endpoints_for_hostname

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .endpoint import Endpoint
    from .filter import Selector
    from .model import VirtualServer

log = getLogger(__name__)

RESOURCE_KIND: Final[str] = "f5-virtualserver"
_UNASSIGNED_ADDRESS: Final[str] = "none"


def has_valid_address(virtual_server: VirtualServer) -> bool:
    """Return whether the controller reported a usable status address."""

    normalized = virtual_server.vs_address.lower()
    return normalized not in {"", _UNASSIGNED_ADDRESS}


def resource_tag(virtual_server: VirtualServer) -> str:
    return f"{RESOURCE_KIND}/{virtual_server.namespace}/{virtual_server.name}"


def resolve_targets(virtual_server: VirtualServer) -> list[str]:
    """Pick targets from exactly one place, in order of precedence.

    The target annotation wins, then the spec address, then the status address.
    Sources are never merged.
    """

    targets = targets_from_target_annotation(virtual_server.annotations)
    if targets:
        return targets
    if virtual_server.virtual_server_address:
        return [virtual_server.virtual_server_address]
    if virtual_server.vs_address:
        return [virtual_server.vs_address]
    return []


def filter_by_annotations(
    virtual_servers: list[VirtualServer], selector: Selector
) -> list[VirtualServer]:
    # empty filter returns the original list
    if selector.empty:
        return virtual_servers
    return [vs for vs in virtual_servers if selector.matches(vs.annotations)]


def endpoints_from_virtual_server(virtual_server: VirtualServer) -> list[Endpoint]:
    if not has_valid_address(virtual_server):
        log.warning(
            "F5 VirtualServer %s/%s is missing a valid IP address, skipping endpoint creation.",
            virtual_server.namespace,
            virtual_server.name,
        )
        return []

    resource = resource_tag(virtual_server)
    if not virtual_server.host:
        log.warning("%s has no host set, skipping endpoint creation.", resource)
        return []

    ttl = ttl_from_annotations(virtual_server.annotations, resource)
    targets = resolve_targets(virtual_server)
    if not targets:
        log.warning("%s resolved no targets, skipping endpoint creation.", resource)
        return []

    endpoints = endpoints_for_hostname(virtual_server.host, targets, ttl=ttl, resource=resource)
    return [endpoint.with_sorted_targets() for endpoint in endpoints]


def endpoints_from_virtual_servers(virtual_servers: Iterable[VirtualServer]) -> list[Endpoint]:
    """Synthesize the endpoints for a batch, keeping the input order of objects."""

    endpoints: list[Endpoint] = []
    for virtual_server in virtual_servers:
        endpoints.extend(endpoints_from_virtual_server(virtual_server))
    return endpoints
