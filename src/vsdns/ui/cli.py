# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from vsdns.app import produce_endpoints, run_watch
from vsdns.config import ConfigurationError, SourceConfig, configure_logging, get_source_config
from vsdns.domain.errors import FilterSyntaxError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from vsdns.domain.endpoint import Endpoint

log = logging.getLogger(__name__)


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--namespace",
        type=str,
        help="Namespace to watch (defaults to VSDNS_NAMESPACE, empty for all namespaces)",
    )
    parser.add_argument(
        "--annotation-filter",
        type=str,
        help="Label-selector style filter on annotations, e.g. 'environment=prod'",
    )
    parser.add_argument(
        "--sync-timeout",
        type=float,
        help="Seconds to wait for the initial cache sync (defaults to config)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print endpoints as JSON instead of zone-file style lines",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="DNS endpoints for F5 VirtualServer resources")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    endpoints = subparsers.add_parser("endpoints", help="Print the current endpoints and exit")
    _add_source_arguments(endpoints)

    watch = subparsers.add_parser("watch", help="Print endpoints again whenever they change")
    _add_source_arguments(watch)
    watch.add_argument(
        "--min-interval",
        type=float,
        help="Minimum seconds between recomputations (defaults to config)",
    )
    watch.add_argument(
        "--interval",
        type=float,
        help="Recompute at least this often even without change events",
    )
    watch.add_argument(
        "--max-updates",
        type=int,
        help="Stop after printing this many endpoint sets",
    )

    return parser.parse_args(list(argv))


def _build_source_config(args: argparse.Namespace) -> SourceConfig:
    config = get_source_config()
    overrides: dict[str, object] = {}
    if args.namespace is not None:
        overrides["namespace"] = args.namespace
    if args.annotation_filter is not None:
        overrides["annotation_filter"] = args.annotation_filter
    if args.sync_timeout is not None:
        if args.sync_timeout < 0:
            raise ValueError("Sync timeout must be non-negative")
        overrides["sync_timeout_seconds"] = args.sync_timeout
    if getattr(args, "min_interval", None) is not None:
        if args.min_interval < 0:
            raise ValueError("Minimum interval must be non-negative")
        overrides["min_event_sync_interval"] = args.min_interval
    return replace(config, **overrides)


def _print_endpoints(endpoints: list[Endpoint], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps([endpoint.to_dict() for endpoint in endpoints]), flush=True)
        return
    for endpoint in endpoints:
        print(endpoint, flush=True)
    if not endpoints:
        print("# no endpoints", flush=True)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        config = _build_source_config(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    as_json = bool(parsed_args.json)
    try:
        if parsed_args.command == "endpoints":
            _print_endpoints(produce_endpoints(config), as_json=as_json)
        elif parsed_args.command == "watch":
            updates = run_watch(
                lambda endpoints: _print_endpoints(endpoints, as_json=as_json),
                config,
                resync_interval=parsed_args.interval,
                max_updates=parsed_args.max_updates,
            )
            log.info("Watch finished after %s update(s)", updates)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except (FilterSyntaxError, ConfigurationError):
        log.exception("Invalid configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error while producing endpoints")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
