# FlexiSync Console Output
# Rich-based console output for run summaries and record results

from typing import Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from flexisync.sync.results import ObjectSaveResult


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for export and import runs.
    """

    def __init__(self, *, verbose: bool = False, colored: Optional[bool] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Force colored output on or off (default: detect terminal).
        """
        self.verbose = verbose
        self._console = RichConsole(force_terminal=colored, no_color=colored is False)

    @property
    def rich(self) -> RichConsole:
        """Underlying rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def print_summary(self, results: list[ObjectSaveResult], *, title: str = "Summary") -> None:
        """
        Print one row per processed object.

        Args:
            results: Object results in processing order.
            title: Table title.
        """
        if not results:
            self._console.print("[dim]No objects processed[/dim]")
            return

        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Object Type", style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Success", justify="right", style="green")
        table.add_column("Failure", justify="right")
        table.add_column("Path", style="dim")

        for result in results:
            failure = f"[red]{result.failure}[/red]" if result.failure else "0"
            table.add_row(result.object_type, str(result.total), str(result.success), failure, result.path)

        self._console.print()
        self._console.print(table)

    def print_results(self, result: ObjectSaveResult, *, failures_only: Optional[bool] = None) -> None:
        """
        Print per-record results of an object keyed by external id.

        Args:
            result: Object result to display.
            failures_only: Show only failed records (default: unless verbose).
        """
        if failures_only is None:
            failures_only = not self.verbose

        rows = result.failure_results if failures_only else result.results
        if not rows:
            return

        table = Table(title=f"{result.object_type} Results", show_header=True, header_style="bold")
        table.add_column("ID", style="dim")
        table.add_column("External ID", style="cyan")
        table.add_column("Status")
        table.add_column("Message")

        for record_result in rows:
            status = "[green]SUCCESS[/green]" if record_result.success else "[red]FAILED[/red]"
            table.add_row(
                record_result.record_id or "",
                record_result.external_id or "",
                status,
                record_result.message or "",
            )

        self._console.print(table)

    def print_config_summary(self, config_path: str, objects_count: int) -> None:
        """Print configuration summary."""
        self._console.print(
            Panel(
                f"Config: {config_path}\n" f"Objects: {objects_count}",
                title="FlexiSync Configuration",
                border_style="blue",
            )
        )


def create_console(*, verbose: bool = False, colored: Optional[bool] = None) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Force colored output on or off (default: detect terminal).

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
