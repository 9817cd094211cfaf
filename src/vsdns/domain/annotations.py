"""Parsing of the ``external-dns.alpha.kubernetes.io/*`` annotations."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

ANNOTATION_PREFIX: Final[str] = "external-dns.alpha.kubernetes.io/"
TTL_KEY: Final[str] = f"{ANNOTATION_PREFIX}ttl"
TARGET_KEY: Final[str] = f"{ANNOTATION_PREFIX}target"

TTL_MINIMUM: Final[int] = 1
TTL_MAXIMUM: Final[int] = 2**31 - 1

_DURATION_UNITS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # noqa: RUF001
    "μs": 1e-6,  # noqa: RUF001
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")  # noqa: RUF001
_INTEGER = re.compile(r"[+-]?\d+")


def parse_duration(value: str) -> float:
    """Parse a Go style duration such as ``1h30m`` or ``-2.5s`` into seconds."""

    text = value
    sign = 1.0
    if text[:1] in {"+", "-"}:
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        position = match.end()
    return sign * total


def parse_ttl(value: str) -> int:
    """Return TTL seconds from a duration string, falling back to a bare integer."""

    try:
        return int(parse_duration(value))
    except ValueError:
        if _INTEGER.fullmatch(value) is None:
            raise
        return int(value)


def ttl_from_annotations(annotations: Mapping[str, str], resource: str) -> int | None:
    """Return the TTL annotation in seconds, or ``None`` when unset or unusable."""

    raw = annotations.get(TTL_KEY)
    if raw is None:
        return None

    try:
        ttl = parse_ttl(raw)
    except ValueError as exc:
        log.warning('%s: "%s" is not a valid TTL value: %s', resource, raw, exc)
        return None

    if not TTL_MINIMUM <= ttl <= TTL_MAXIMUM:
        log.warning(
            "%s: TTL value %s must be between [%s, %s]", resource, ttl, TTL_MINIMUM, TTL_MAXIMUM
        )
        return None
    return ttl


def split_hostname_annotation(value: str) -> list[str]:
    return value.replace(" ", "").split(",")


def targets_from_target_annotation(annotations: Mapping[str, str]) -> list[str]:
    """Return the comma separated override targets with trailing dots removed."""

    raw = annotations.get(TARGET_KEY)
    if not raw:
        return []
    return [
        target.removesuffix(".")
        for target in split_hostname_annotation(raw)
        if target.removesuffix(".")
    ]
