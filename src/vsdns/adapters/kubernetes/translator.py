"""Translate generic cluster objects into typed domain objects."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from pydantic import ValidationError

from vsdns.domain.errors import ConversionError
from vsdns.domain.model import VirtualServer
from vsdns.domain.ports.cluster import object_key

from .schema import VirtualServerPayload

VIRTUAL_SERVER_API_VERSION: Final[str] = "cis.f5.com/v1"
VIRTUAL_SERVER_KIND: Final[str] = "VirtualServer"


def _ensure_payload(obj: object) -> VirtualServerPayload:
    if isinstance(obj, VirtualServerPayload):
        return obj
    if not isinstance(obj, Mapping):
        raise ConversionError(f"could not convert {type(obj).__name__} to {VIRTUAL_SERVER_KIND}")

    resource = object_key(obj) or None
    api_version = obj.get("apiVersion")
    kind = obj.get("kind")
    if (api_version, kind) != (VIRTUAL_SERVER_API_VERSION, VIRTUAL_SERVER_KIND):
        raise ConversionError(
            f"expected {VIRTUAL_SERVER_API_VERSION}/{VIRTUAL_SERVER_KIND}, "
            f"got {api_version}/{kind}",
            resource=resource,
        )

    try:
        return VirtualServerPayload.model_validate(obj)
    except ValidationError as exc:
        raise ConversionError(
            f"invalid {VIRTUAL_SERVER_KIND} ({exc.error_count()} error(s)): {exc}",
            resource=resource,
        ) from exc


def convert_virtual_server(obj: object) -> VirtualServer:
    """Decode one cached object into a :class:`VirtualServer`.

    Either the whole object converts or :class:`ConversionError` is raised; there are
    no partially populated results. The input is not modified.
    """

    payload = _ensure_payload(obj)
    return VirtualServer(
        namespace=payload.metadata.namespace,
        name=payload.metadata.name,
        host=payload.spec.host,
        virtual_server_address=payload.spec.virtual_server_address,
        vs_address=payload.status.vs_address,
        annotations=MappingProxyType(dict(payload.metadata.annotations)),
    )
