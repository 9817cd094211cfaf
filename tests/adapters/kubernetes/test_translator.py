from __future__ import annotations

import copy

import pytest

from tests.support.virtual_servers import make_virtual_server_object
from vsdns.adapters.kubernetes.translator import convert_virtual_server
from vsdns.domain.errors import ConversionError


def test_convert_virtual_server_reads_every_field() -> None:
    obj = make_virtual_server_object(
        "front",
        namespace="web",
        host="www.example.com",
        spec_address="9.9.9.9",
        status_address="10.0.0.5",
        annotations={"environment": "prod"},
    )

    virtual_server = convert_virtual_server(obj)

    assert virtual_server.key == "web/front"
    assert virtual_server.host == "www.example.com"
    assert virtual_server.virtual_server_address == "9.9.9.9"
    assert virtual_server.vs_address == "10.0.0.5"
    assert dict(virtual_server.annotations) == {"environment": "prod"}


def test_convert_virtual_server_does_not_modify_input() -> None:
    obj = make_virtual_server_object(annotations={"environment": "prod"})
    snapshot = copy.deepcopy(obj)

    virtual_server = convert_virtual_server(obj)

    assert obj == snapshot
    with pytest.raises(TypeError):
        virtual_server.annotations["environment"] = "dev"  # type: ignore[index]


def test_missing_optional_sections_become_empty_strings() -> None:
    obj = make_virtual_server_object(spec_address=None, status_address=None)
    del obj["status"]
    obj["metadata"]["annotations"] = None  # type: ignore[index]

    virtual_server = convert_virtual_server(obj)

    assert virtual_server.vs_address == ""
    assert virtual_server.virtual_server_address == ""
    assert dict(virtual_server.annotations) == {}


@pytest.mark.parametrize(
    ("api_version", "kind"),
    [
        ("cis.f5.com/v1", "TransportServer"),
        ("cis.f5.com/v2", "VirtualServer"),
        ("networking.k8s.io/v1", "Ingress"),
    ],
)
def test_wrong_kind_is_rejected(api_version: str, kind: str) -> None:
    obj = make_virtual_server_object(namespace="web", name="front")
    obj["apiVersion"] = api_version
    obj["kind"] = kind

    with pytest.raises(ConversionError) as excinfo:
        convert_virtual_server(obj)

    assert excinfo.value.resource == "web/front"
    assert kind in str(excinfo.value)


def test_wrongly_typed_fields_are_rejected() -> None:
    obj = make_virtual_server_object()
    obj["spec"] = {"host": ["not", "a", "string"]}

    with pytest.raises(ConversionError) as excinfo:
        convert_virtual_server(obj)

    assert excinfo.value.__cause__ is not None


def test_objects_without_a_name_are_rejected() -> None:
    obj = make_virtual_server_object()
    obj["metadata"] = {"namespace": "default"}

    with pytest.raises(ConversionError):
        convert_virtual_server(obj)


def test_non_mapping_is_rejected() -> None:
    with pytest.raises(ConversionError, match="could not convert list"):
        convert_virtual_server(["not", "an", "object"])
