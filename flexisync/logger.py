"""Rich console output for sync runs."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from rich.console import Console


class SyncLogger:
    """Rich console output for sync runs."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """Initialize logger.

        Args:
            console: Rich Console instance
            verbose: Enable verbose output
        """
        self.console = console or Console()
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Blue info message."""
        self.console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        """Green success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Yellow warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str) -> None:
        """Red error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def debug(self, message: str) -> None:
        """Dim message, shown only in verbose mode."""
        if self.verbose:
            self.console.print(f"[dim]{message}[/dim]")

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner while a block runs."""
        with self.console.status(message, spinner="dots"):
            yield
