"""Shared rich console, report rendering helpers and loguru setup."""

import os
from collections.abc import Iterable, Sequence
from typing import Any

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_console: Console | None = None


def get_console() -> Console:
    """Console shared by the CLI output and the log handler."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_panel(content: str, title: str | None = None, style: str = "bold blue") -> None:
    """Show a message in a panel whose border takes the same style."""
    get_console().print(Panel(content, title=title, style=style, border_style=style))


def print_table(headers: Sequence[str], rows: Iterable[Sequence[Any]], title: str | None = None) -> None:
    table = Table(*headers, title=title)
    for row in rows:
        table.add_row(*map(str, row))
    get_console().print(table)


def get_log_level() -> str:
    """Read the log level from RULESYNC_LOG_LEVEL, falling back to INFO."""
    log_level = os.getenv("RULESYNC_LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LEVELS:
        get_console().print(f"Invalid log level: {log_level}. Using INFO.", style="bold yellow")
        log_level = "INFO"
    return log_level


def configure_logging(level: str | None = None) -> str:
    """Route loguru output through a RichHandler on the shared console.

    Environment variables:
        RULESYNC_LOG_LEVEL: Set the log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        RULESYNC_DEBUG: Enable debug mode with file logging (true, 1, yes)
        RULESYNC_LOG_FILE: Specify the log file path (default: rulesync.log)

    Returns:
        str: The level that was applied
    """
    log_level = (level or get_log_level()).upper()
    logger.remove()
    handler = RichHandler(console=get_console(), rich_tracebacks=True, show_path=False)
    logger.add(handler, level=log_level, format="{message}")

    debug_mode = os.getenv("RULESYNC_DEBUG", "").lower() in ["true", "1", "yes"]
    if debug_mode:
        log_file = os.getenv("RULESYNC_LOG_FILE", "rulesync.log")
        logger.add(log_file, level="DEBUG", format="{time} - {name} - {level} - {message}")
    return log_level
