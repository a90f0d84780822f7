"""Shared CLI utilities for SQLFixture."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from sqlfixture.config import EnvironmentSettings

# Single console instance reused across CLI modules
console = Console()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool = False, settings: Optional[EnvironmentSettings] = None) -> int:
    """Configure root logging from ``--verbose`` and ``SQLFIXTURE_*`` variables.

    Returns:
        The level that was applied.
    """
    settings = settings or EnvironmentSettings()
    if verbose or settings.debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level


def print_exception(message: str, error: Exception, verbose: bool = False) -> None:
    """Render a formatted exception message.

    Args:
        message: Friendly context message to display before the exception.
        error: Original exception instance.
        verbose: When True, render the full traceback for debugging.
    """
    console.print(f"[red]{message}: {escape(str(error))}[/red]")
    if verbose:
        import traceback

        console.print(f"[dim]{traceback.format_exc()}[/dim]")
