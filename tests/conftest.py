from __future__ import annotations

import pytest

from vsdns.config.source import RateLimit

# relists in tests should not wait a full second between attempts
FAST_RELIST = RateLimit(max_calls=100, per_seconds=1.0)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "VSDNS_KUBECONFIG",
        "VSDNS_CONTEXT",
        "VSDNS_INSECURE_SKIP_TLS_VERIFY",
        "VSDNS_NAMESPACE",
        "VSDNS_ANNOTATION_FILTER",
        "VSDNS_SYNC_TIMEOUT",
        "VSDNS_MIN_EVENT_SYNC_INTERVAL",
        "KUBECONFIG",
        "KUBERNETES_SERVICE_HOST",
        "KUBERNETES_SERVICE_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fast_relist() -> RateLimit:
    return FAST_RELIST
