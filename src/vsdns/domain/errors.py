"""Errors raised by the endpoint source."""

from __future__ import annotations


class SourceError(RuntimeError):
    """Base class for failures surfaced to callers of an endpoint source."""


class SyncTimeoutError(SourceError):
    """The resource cache did not finish its initial listing in time.

    Raised at construction; the half-started source must not be used afterwards.
    """


class FilterSyntaxError(SourceError, ValueError):
    """An annotation filter expression could not be parsed."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"Invalid annotation filter {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason


class CacheReadError(SourceError):
    """Reading the local resource cache failed. Callers may retry later."""


class ConversionError(SourceError):
    """A cached object does not have the shape of the expected resource kind."""

    def __init__(self, message: str, *, resource: str | None = None) -> None:
        if resource:
            message = f"{resource}: {message}"
        super().__init__(message)
        self.resource = resource
