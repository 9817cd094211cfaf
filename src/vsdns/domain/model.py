"""Typed domain objects mirrored from the cluster."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


def _empty_annotations() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class VirtualServer:
    """An F5 ``VirtualServer`` reduced to the fields DNS synthesis reads.

    ``virtual_server_address`` is ``spec.virtualServerAddress``, ``vs_address`` the address
    the controller reports in ``status.vsAddress`` after assigning it.
    """

    namespace: str
    name: str
    host: str = ""
    virtual_server_address: str = ""
    vs_address: str = ""
    annotations: Mapping[str, str] = field(default_factory=_empty_annotations)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
