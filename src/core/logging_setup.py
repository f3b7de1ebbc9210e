"""Logging configuration for the CLI.

Library modules only create module-level loggers; handlers are installed
here, once, by the entry-point. Output goes to stderr so that `--json`
output on stdout stays machine readable.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "gotify-widget"


def configure_logging(level: str = "WARNING") -> None:
    """Install a single RichHandler on the root logger."""

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)

    # httpx logs every request at INFO; keep it for DEBUG runs only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if root.level <= logging.DEBUG else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
