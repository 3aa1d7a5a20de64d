# OWSYNC Console Output
# Rich-based rendering of deployment results

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from owsync.exceptions import BuildError, SyncAbortedError
from owsync.sync.results import ActionResult, DeployResult, Outcome, ReconcileResult


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for deployment runs.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_actions(self, results: list[ActionResult], *, dry_run: bool = False) -> None:
        """Print a table of per-action outcomes."""
        if not results:
            self._console.print("[dim]No actions found[/dim]")
            return

        title = "Planned Changes (dry-run)" if dry_run else "Actions"
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Action", style="cyan")
        table.add_column("Outcome")
        if self.verbose:
            table.add_column("Fingerprint", style="dim")
            table.add_column("Recorded", style="dim")

        for result in results:
            row = [escape(result.name), self._outcome_label(result.outcome, dry_run=dry_run)]
            if self.verbose:
                row.extend([result.fingerprint or "", result.remote_fingerprint or "n/a"])
            table.add_row(*row)

        self._console.print()
        self._console.print(table)

    def _outcome_label(self, outcome: Outcome, *, dry_run: bool = False) -> str:
        """Colored label for an outcome."""
        labels = {
            Outcome.CREATED: ("green", "would create" if dry_run else "created"),
            Outcome.UPDATED: ("yellow", "would update" if dry_run else "updated"),
            Outcome.UNCHANGED: ("dim", "unchanged"),
        }
        color, text = labels[outcome]
        return f"[{color}]{text}[/{color}]"

    def print_reconcile(self, result: ReconcileResult) -> None:
        """Print orphan deletion details."""
        if not result.orphans:
            return

        verb = "Would delete" if result.dry_run else "Deleted"
        targets = result.orphans if result.dry_run else result.deleted
        for name in targets:
            self._console.print(f"  [red]×[/red] {verb} orphan [bold]{escape(name)}[/bold]")
        for name in result.already_gone:
            self._console.print(f"  [dim]○ {escape(name)} (already gone)[/dim]")
        for failure in result.failures:
            self._console.print(f"  [red]✗[/red] {escape(failure.name)}: {escape(failure.error)}")

    def print_deploy_result(self, result: DeployResult) -> None:
        """
        Print deployment summary.

        Args:
            result: Deployment result to display.
        """
        self.print_actions(result.actions, dry_run=result.dry_run)
        if result.reconcile is not None:
            self.print_reconcile(result.reconcile)

        self._console.print()

        status_text = "Dry run completed" if result.dry_run else "Deployment completed"
        orphans = "skipped"
        if result.reconcile is not None:
            removed = len(result.reconcile.orphans) if result.dry_run else len(result.reconcile.deleted)
            orphans = f"{removed} {'to delete' if result.dry_run else 'deleted'}"
            if result.reconcile.failures:
                orphans += f", {len(result.reconcile.failures)} failed"

        body = (
            f"Package: {escape(result.package)}\n"
            f"Actions: {result.created} created, {result.updated} updated, {result.unchanged} unchanged\n"
            f"Orphans: {orphans}"
        )

        if result.success:
            self._console.print(
                Panel(f"[green]{status_text}[/green]\n{body}", title="Summary", border_style="green")
            )
        else:
            self._console.print(
                Panel(f"[red]{status_text} with errors[/red]\n{body}", title="Summary", border_style="red")
            )

    def print_aborted(self, error: SyncAbortedError) -> None:
        """Print a fatal deployment error with its context."""
        if error.completed:
            self.print_actions(error.completed)
        self._console.print()
        self.print_error(str(error))

        cause = error.cause
        if isinstance(cause, BuildError) and cause.stderr and self.verbose:
            self._console.print(f"[dim]{escape(cause.stderr)}[/dim]")

        if error.completed:
            names = ", ".join(r.name for r in error.completed)
            self._console.print(f"[dim]Already converged: {escape(names)}[/dim]")
        self._console.print("[dim]Re-run the deployment to continue from here.[/dim]")


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
