"""Pydantic models describing the Kubernetes API payloads we consume."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vsdns.domain.ports.cluster import EventType


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


class KubernetesBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ObjectMeta(KubernetesBaseModel):
    name: str = Field(min_length=1)
    namespace: str = ""
    resource_version: str = Field(default="", alias="resourceVersion")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    _normalize_namespace = field_validator("namespace", mode="before")(_none_to_empty)

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def _none_to_mapping(cls, value: object) -> object:
        return {} if value is None else value


class VirtualServerSpec(KubernetesBaseModel):
    host: str = ""
    virtual_server_address: str = Field(default="", alias="virtualServerAddress")

    _normalize_strings = field_validator("host", "virtual_server_address", mode="before")(
        _none_to_empty
    )


class VirtualServerStatus(KubernetesBaseModel):
    vs_address: str = Field(default="", alias="vsAddress")
    status: str = ""

    _normalize_strings = field_validator("vs_address", "status", mode="before")(_none_to_empty)


class VirtualServerPayload(KubernetesBaseModel):
    api_version: Literal["cis.f5.com/v1"] = Field(alias="apiVersion")
    kind: Literal["VirtualServer"]
    metadata: ObjectMeta
    spec: VirtualServerSpec = Field(default_factory=VirtualServerSpec)
    status: VirtualServerStatus = Field(default_factory=VirtualServerStatus)

    @field_validator("spec", "status", mode="before")
    @classmethod
    def _none_to_section(cls, value: object) -> object:
        return {} if value is None else value


class ListMeta(KubernetesBaseModel):
    resource_version: str = Field(default="", alias="resourceVersion")


class ObjectListPayload(KubernetesBaseModel):
    api_version: str = Field(default="", alias="apiVersion")
    kind: str = ""
    metadata: ListMeta = Field(default_factory=ListMeta)
    items: list[dict[str, object]] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _none_to_list(cls, value: object) -> object:
        return [] if value is None else value


class WatchEventPayload(KubernetesBaseModel):
    type: EventType
    object: dict[str, object]


class StatusPayload(KubernetesBaseModel):
    """A ``metav1.Status`` as returned in error responses and watch ERROR events."""

    kind: Literal["Status"] = "Status"
    status: str = ""
    message: str = ""
    reason: str = ""
    code: int = 0
