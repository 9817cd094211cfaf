from __future__ import annotations

import pytest

from vsdns.domain.endpoint import (
    RESOURCE_LABEL_KEY,
    Endpoint,
    RecordType,
    endpoints_for_hostname,
    suitable_type,
)


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("10.0.0.5", RecordType.A),
        ("2001:db8::1", RecordType.AAAA),
        ("::ffff:10.0.0.5", RecordType.AAAA),
        ("lb.example.com", RecordType.CNAME),
        ("10.0.0.256", RecordType.CNAME),
    ],
)
def test_suitable_type(target: str, expected: RecordType) -> None:
    assert suitable_type(target) is expected


def test_endpoints_for_hostname_splits_targets_by_record_type() -> None:
    endpoints = endpoints_for_hostname(
        "a.example.com",
        ["10.0.0.2", "lb.example.com", "2001:db8::1", "10.0.0.1"],
        ttl=300,
        resource="f5-virtualserver/default/vs1",
    )

    by_type = {endpoint.record_type: endpoint for endpoint in endpoints}
    assert set(by_type) == {RecordType.A, RecordType.AAAA, RecordType.CNAME}
    assert by_type[RecordType.A].targets == ("10.0.0.2", "10.0.0.1")
    assert by_type[RecordType.AAAA].targets == ("2001:db8::1",)
    assert by_type[RecordType.CNAME].targets == ("lb.example.com",)
    for endpoint in endpoints:
        assert endpoint.dns_name == "a.example.com"
        assert endpoint.ttl == 300
        assert endpoint.labels == {RESOURCE_LABEL_KEY: "f5-virtualserver/default/vs1"}
        assert endpoint.resource == "f5-virtualserver/default/vs1"


def test_endpoints_for_hostname_strips_trailing_dots() -> None:
    (endpoint,) = endpoints_for_hostname("a.example.com.", ["lb.example.com."])

    assert endpoint.dns_name == "a.example.com"
    assert endpoint.targets == ("lb.example.com",)
    assert endpoint.labels == {}
    assert endpoint.resource is None


def test_endpoints_for_hostname_without_targets_is_empty() -> None:
    assert endpoints_for_hostname("a.example.com", []) == []


def test_unset_ttl_is_distinct_from_zero() -> None:
    unset = Endpoint("a.example.com", RecordType.A, ("10.0.0.5",))
    zero = Endpoint("a.example.com", RecordType.A, ("10.0.0.5",), ttl=0)

    assert not unset.ttl_configured
    assert zero.ttl_configured
    assert unset.to_dict()["recordTTL"] is None
    assert zero.to_dict()["recordTTL"] == 0


def test_with_sorted_targets_orders_lexicographically() -> None:
    endpoint = Endpoint("a.example.com", RecordType.A, ("5.6.7.8", "1.2.3.4", "10.0.0.1"))

    assert endpoint.with_sorted_targets().targets == ("1.2.3.4", "10.0.0.1", "5.6.7.8")
