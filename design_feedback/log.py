"""
Logging Setup

Routes log records through rich so progress messages render alongside the
report on stderr without mixing into stdout.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


PACKAGE_LOGGER = "design_feedback"


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """
    Configure root logging for the CLI.

    Third-party libraries stay at WARNING; the package logs at INFO, or
    DEBUG with verbose output.

    Args:
        verbose: Enable debug output
        console: Console to log to (default: a stderr console)
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        show_time=verbose,
        rich_tracebacks=verbose,
        markup=False
    )
    logging.basicConfig(
        format="%(message)s",
        level=logging.WARNING,
        handlers=[handler],
        force=True
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
