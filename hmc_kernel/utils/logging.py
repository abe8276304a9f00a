"""Logging helpers for consistent instrumentation."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "INFO", rich_tracebacks: bool = True) -> RichHandler:
    """Attach a rich handler to the root logger and set its level.

    Returns the installed handler so callers can remove it again.
    """

    handler = RichHandler(console=Console(), rich_tracebacks=rich_tracebacks)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


__all__ = ["setup_logging"]
