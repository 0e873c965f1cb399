"""
Console logger with colour-coded levels.

Messages are rendered through a rich console and mirrored to the standard
``logging`` module so they also reach any configured handlers.
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger("realm_users_export")


class ExportLogger:
    """
    Logger passed to every component that reports progress.

    Example:
        log = ExportLogger(verbose=True)
        log.info("Starting process")
        log.success("Process completed successfully")
        log.debug("Detailed information", payload)
    """

    def __init__(self, verbose: bool = False, console: Optional[Console] = None,
                 error_console: Optional[Console] = None):
        self.verbose = verbose
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def _join(self, message: str, args: tuple) -> str:
        if args:
            message = " ".join([message] + [str(arg) for arg in args])
        return message

    def info(self, message: str, *args: Any) -> None:
        text = self._join(message, args)
        logger.info(text)
        self.console.print(f"[blue]{escape(text)}[/blue]")

    def success(self, message: str, *args: Any) -> None:
        text = self._join(message, args)
        logger.info(text)
        self.console.print(f"[green]{escape(text)}[/green]")

    def warning(self, message: str, *args: Any) -> None:
        text = self._join(message, args)
        logger.warning(text)
        self.console.print(f"[yellow]{escape(text)}[/yellow]")

    def error(self, message: str, *args: Any) -> None:
        text = self._join(message, args)
        logger.error(text)
        self.error_console.print(f"[bold red]{escape(text)}[/bold red]")

    def debug(self, message: str, *args: Any) -> None:
        # Only shown with --verbose
        if not self.verbose:
            return
        text = self._join(message, args)
        logger.debug(text)
        self.console.print(f"[magenta]\\[DEBUG] {escape(text)}[/magenta]")
