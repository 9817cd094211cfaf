"""Helpers shared between the domain core, adapters and the CLI."""

from __future__ import annotations

from .logging import configure_logging
from .notify import ChangeNotifier

__all__ = ["ChangeNotifier", "configure_logging"]
