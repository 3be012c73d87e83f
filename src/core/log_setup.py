"""Logging setup for the CLI.

Diagnostics go to stderr through Rich so stdout carries only result lines.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(name)s | %(message)s"


def configure_logging(level: str | int = "WARNING", *, console: Console | None = None) -> None:
    """Install a single Rich handler on the root logger (idempotent)."""

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level!r}")
        level = resolved

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
