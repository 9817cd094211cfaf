from __future__ import annotations

import asyncio

import pytest

from tests.support.cluster import EventType, FakeListWatchClient
from tests.support.virtual_servers import make_virtual_server_object
from vsdns.adapters.virtualserver import VirtualServerSource
from vsdns.config.source import RateLimit  # noqa: TC001
from vsdns.domain.annotations import TARGET_KEY
from vsdns.domain.endpoint import Endpoint, RecordType
from vsdns.domain.errors import ConversionError, FilterSyntaxError, SyncTimeoutError


def _endpoints(
    client: FakeListWatchClient,
    relist_limit: RateLimit,
    *,
    namespace: str = "",
    annotation_filter: str = "",
) -> list[Endpoint]:
    async def run() -> list[Endpoint]:
        source = await VirtualServerSource.create(
            client,
            namespace=namespace,
            annotation_filter=annotation_filter,
            sync_timeout=1.0,
            relist_limit=relist_limit,
        )
        async with source:
            return source.endpoints()

    return asyncio.run(run())


def test_status_address_produces_one_record(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient([make_virtual_server_object()])

    (endpoint,) = _endpoints(client, fast_relist)

    assert endpoint.dns_name == "a.example.com"
    assert endpoint.record_type is RecordType.A
    assert endpoint.targets == ("10.0.0.5",)
    assert not endpoint.ttl_configured
    assert endpoint.labels == {"resource": "f5-virtualserver/default/vs1"}


def test_unassigned_status_address_produces_nothing(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient([make_virtual_server_object(status_address="None")])

    assert _endpoints(client, fast_relist) == []


def test_target_annotation_replaces_spec_address(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient(
        [
            make_virtual_server_object(
                spec_address="9.9.9.9",
                annotations={TARGET_KEY: "5.6.7.8,1.2.3.4"},
            )
        ]
    )

    (endpoint,) = _endpoints(client, fast_relist)

    assert endpoint.targets == ("1.2.3.4", "5.6.7.8")


def test_annotation_filter_excludes_objects(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient(
        [
            make_virtual_server_object("dev", annotations={"environment": "dev"}),
            make_virtual_server_object(
                "prod", host="prod.example.com", annotations={"environment": "prod"}
            ),
        ]
    )

    assert _endpoints(client, fast_relist, annotation_filter="environment=dev,tier=web") == []
    endpoints = _endpoints(client, fast_relist, annotation_filter="environment=prod")
    assert [endpoint.dns_name for endpoint in endpoints] == ["prod.example.com"]


def test_namespace_scope_is_passed_to_the_cluster(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient([make_virtual_server_object(namespace="web")])

    (endpoint,) = _endpoints(client, fast_relist, namespace="web")

    assert endpoint.resource == "f5-virtualserver/web/vs1"


def test_every_registered_handler_sees_each_change(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient()
    first: list[None] = []
    second: list[None] = []

    async def run() -> None:
        source = await VirtualServerSource.create(
            client, sync_timeout=1.0, relist_limit=fast_relist
        )
        async with source:
            source.add_event_handler(lambda: first.append(None))
            source.add_event_handler(lambda: second.append(None))

            await client.emit(EventType.ADDED, make_virtual_server_object())
            await client.settle()

            assert [endpoint.dns_name for endpoint in source.endpoints()] == ["a.example.com"]

    asyncio.run(run())

    assert len(first) == 1
    assert len(second) == 1


def test_malformed_filter_fails_before_listing(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient([make_virtual_server_object()])

    with pytest.raises(FilterSyntaxError):
        _endpoints(client, fast_relist, annotation_filter="environment in prod")

    assert client.list_calls == 0


def test_sync_timeout_aborts_construction(fast_relist: RateLimit) -> None:
    client = FakeListWatchClient()
    client.block_list = True

    async def run() -> None:
        await VirtualServerSource.create(client, sync_timeout=0.05, relist_limit=fast_relist)

    with pytest.raises(SyncTimeoutError):
        asyncio.run(run())


def test_foreign_object_in_cache_aborts_listing(fast_relist: RateLimit) -> None:
    foreign = make_virtual_server_object("other")
    foreign["kind"] = "TransportServer"
    client = FakeListWatchClient([make_virtual_server_object(), foreign])

    with pytest.raises(ConversionError) as excinfo:
        _endpoints(client, fast_relist, namespace="default")

    assert "failed to list VirtualServers in default" in str(excinfo.value)
    assert "default/other" in str(excinfo.value)
