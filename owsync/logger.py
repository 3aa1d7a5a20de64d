"""Rich console progress output for deployments."""

from typing import Optional

from rich.console import Console
from rich.markup import escape


class DeployLogger:
    """Rich console output for deployment progress."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """Initialize logger.

        Args:
            console: Rich Console instance
            verbose: Enable debug output
        """
        self.console = console or Console()
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Blue info message."""
        self.console.print(f"[blue]ℹ[/blue] {escape(message)}")

    def success(self, message: str) -> None:
        """Green success message."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        """Yellow warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Red error message."""
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def debug(self, message: str) -> None:
        """Dim message, only shown in verbose mode."""
        if self.verbose:
            self.console.print(f"[dim]  {escape(message)}[/dim]")


class NullLogger(DeployLogger):
    """Logger that discards everything. Used when no output is wanted."""

    def __init__(self) -> None:
        super().__init__(Console(quiet=True))
