"""
Rich logging for odtfill.

Provides colorful console logging and status lines using the rich library.
"""

import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table


class RichLogger:
    """
    Console reporter with rich formatting and colors.
    """

    def __init__(self, name: str = "odtfill", level: str = "INFO", console: Optional[Console] = None):
        """
        Initialize rich logger.

        Args:
            name: Logger name
            level: Log level
            console: Console to print on (stderr console if None)
        """
        self.name = name
        self.level = level
        self.console = console or Console(stderr=True)
        self.logger = logging.getLogger(name)

    def success(self, message: str):
        """Print success message with rich formatting."""
        self.console.print(f"[green]✓ {message}[/green]")

    def failure(self, message: str):
        """Print failure message with rich formatting."""
        self.console.print(f"[red]✗ {message}[/red]")

    def status(self, message: str):
        self.console.print(f"[yellow]⏳ {message}[/yellow]")

    def table(self, title: str, data: Dict[str, Any]):
        """Display data in a rich table."""
        table = Table(title=title)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="magenta")

        for key, value in data.items():
            table.add_row(str(key), str(value))

        self.console.print(table)


def get_rich_logger(name: str = "odtfill", level: str = "INFO") -> RichLogger:
    """
    Get rich logger instance.

    Args:
        name: Logger name
        level: Log level

    Returns:
        RichLogger instance
    """
    return RichLogger(name, level)


def setup_logging(level: str = "INFO", use_rich: bool = True):
    """
    Setup logging for the application.

    Args:
        level: Log level
        use_rich: Whether to use rich logging
    """
    if use_rich:
        console = Console(stderr=True)

        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True
        )

        formatter = logging.Formatter(
            fmt="%(message)s",
            datefmt="[%X]"
        )

        rich_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        root_logger.handlers.clear()
        root_logger.addHandler(rich_handler)
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized at {level} level (rich={use_rich})")
