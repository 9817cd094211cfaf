"""DNS endpoint records produced by sources."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

RESOURCE_LABEL_KEY: Final[str] = "resource"


class RecordType(StrEnum):
    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"


@dataclass(slots=True)
class Endpoint:
    """A hostname with the targets it should resolve to.

    ``ttl`` is ``None`` when the provider default applies, which is not the same as 0.
    """

    dns_name: str
    record_type: RecordType
    targets: tuple[str, ...]
    ttl: int | None = None
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def resource(self) -> str | None:
        return self.labels.get(RESOURCE_LABEL_KEY)

    @property
    def ttl_configured(self) -> bool:
        return self.ttl is not None

    def with_sorted_targets(self) -> Endpoint:
        self.targets = tuple(sorted(self.targets))
        return self

    def to_dict(self) -> dict[str, object]:
        return {
            "dnsName": self.dns_name,
            "recordType": str(self.record_type),
            "targets": list(self.targets),
            "recordTTL": self.ttl,
            "labels": dict(self.labels),
        }

    def __str__(self) -> str:
        ttl = self.ttl if self.ttl is not None else "default"
        return f"{self.dns_name} {ttl} IN {self.record_type} {' '.join(self.targets)} {self.labels}"


def suitable_type(target: str) -> RecordType:
    """Pick the record type a target needs: A for IPv4, AAAA for IPv6, CNAME otherwise."""

    try:
        address = ipaddress.ip_address(target)
    except ValueError:
        return RecordType.CNAME
    if address.version == 4:
        return RecordType.A
    return RecordType.AAAA


def new_endpoint(
    dns_name: str,
    record_type: RecordType,
    targets: Iterable[str],
    *,
    ttl: int | None = None,
) -> Endpoint:
    cleaned = tuple(target.removesuffix(".") for target in targets)
    return Endpoint(
        dns_name=dns_name.removesuffix("."),
        record_type=record_type,
        targets=cleaned,
        ttl=ttl,
    )


def endpoints_for_hostname(
    hostname: str,
    targets: Iterable[str],
    *,
    ttl: int | None = None,
    resource: str = "",
) -> list[Endpoint]:
    """Build the records for one hostname, one per record type present in ``targets``.

    Targets keep their relative order inside each record; types with no targets
    produce no record.
    """

    grouped: dict[RecordType, list[str]] = {
        RecordType.A: [],
        RecordType.AAAA: [],
        RecordType.CNAME: [],
    }
    for target in targets:
        grouped[suitable_type(target)].append(target)

    endpoints: list[Endpoint] = []
    for record_type, typed_targets in grouped.items():
        if not typed_targets:
            continue
        endpoint = new_endpoint(hostname, record_type, typed_targets, ttl=ttl)
        if resource:
            endpoint.labels[RESOURCE_LABEL_KEY] = resource
        endpoints.append(endpoint)
    return endpoints
