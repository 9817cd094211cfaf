"""Logging setup for the ``vsdns`` command line."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# chatty below WARNING: per-request REST traces and connection pool notices
_NOISY_LOGGERS = ("kubernetes_asyncio", "aiohttp")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send vsdns logs to stderr so stdout stays reserved for printed endpoints.

    ``--verbose`` calls this again with ``level=DEBUG`` and ``force=True``, which also
    lets the Kubernetes client libraries log at debug level.
    """

    logging.basicConfig(level=level, format=_FORMAT, datefmt="%H:%M:%S", force=force)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
