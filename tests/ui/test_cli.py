from __future__ import annotations

import json
from collections.abc import Callable  # noqa: TC003

import pytest

from vsdns.config import SourceConfig
from vsdns.domain.endpoint import Endpoint, endpoints_for_hostname
from vsdns.domain.errors import FilterSyntaxError
from vsdns.ui import cli as cli_module


def _sample_endpoints() -> list[Endpoint]:
    return endpoints_for_hostname(
        "a.example.com", ["10.0.0.5"], ttl=300, resource="f5-virtualserver/default/vs1"
    )


def test_endpoints_command_uses_flags_over_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, SourceConfig] = {}

    def fake_produce(config: SourceConfig) -> list[Endpoint]:
        captured["config"] = config
        return _sample_endpoints()

    monkeypatch.setenv("VSDNS_NAMESPACE", "env-namespace")
    monkeypatch.setenv("VSDNS_SYNC_TIMEOUT", "30")
    monkeypatch.setattr(cli_module, "produce_endpoints", fake_produce)

    cli_module.main(["endpoints", "--namespace", "web", "--annotation-filter", "environment=prod"])

    assert captured["config"] == SourceConfig(
        namespace="web",
        annotation_filter="environment=prod",
        sync_timeout_seconds=30.0,
    )
    output = capsys.readouterr().out
    assert output.startswith("a.example.com 300 IN A 10.0.0.5")


def test_endpoints_command_prints_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli_module, "produce_endpoints", lambda _config: _sample_endpoints())

    cli_module.main(["endpoints", "--json"])

    assert json.loads(capsys.readouterr().out) == [
        {
            "dnsName": "a.example.com",
            "recordType": "A",
            "targets": ["10.0.0.5"],
            "recordTTL": 300,
            "labels": {"resource": "f5-virtualserver/default/vs1"},
        }
    ]


def test_endpoints_command_reports_empty_result(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli_module, "produce_endpoints", lambda _config: [])

    cli_module.main(["endpoints"])

    assert capsys.readouterr().out == "# no endpoints\n"


def test_watch_command_forwards_options(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_run_watch(
        on_change: Callable[[list[Endpoint]], None],
        config: SourceConfig,
        **kwargs: object,
    ) -> int:
        captured.update(kwargs, config=config, on_change=on_change)
        return 0

    monkeypatch.setattr(cli_module, "run_watch", fake_run_watch)

    cli_module.main(
        ["watch", "--min-interval", "0.5", "--interval", "30", "--max-updates", "3"]
    )

    config = captured["config"]
    assert isinstance(config, SourceConfig)
    assert config.min_event_sync_interval == 0.5
    assert captured["resync_interval"] == 30.0
    assert captured["max_updates"] == 3


@pytest.mark.parametrize(
    "argv",
    [
        ["endpoints", "--sync-timeout", "-1"],
        ["watch", "--min-interval", "-0.5"],
    ],
)
def test_negative_durations_are_rejected(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


def test_invalid_environment_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VSDNS_SYNC_TIMEOUT", "soon")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["endpoints"])

    assert excinfo.value.code == 2


def test_malformed_filter_exits_with_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_produce(config: SourceConfig) -> list[Endpoint]:
        raise FilterSyntaxError(config.annotation_filter, "found ',', expected: identifier")

    monkeypatch.setattr(cli_module, "produce_endpoints", fake_produce)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["endpoints", "--annotation-filter", "a=b,"])

    assert excinfo.value.code == 2


def test_runtime_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_produce(_config: SourceConfig) -> list[Endpoint]:
        raise RuntimeError("cluster unreachable")

    monkeypatch.setattr(cli_module, "produce_endpoints", fake_produce)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["endpoints"])

    assert excinfo.value.code == 1
