"""Rich-based terminal output for the docpub CLI.

OutputHandler prints status lines, a spinner while a build runs, build
history tables and the live pointer of a site.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

from docpub.models import Build, BuildStatus
from docpub.publish import Pointer

# Color used for each build status
STATUS_STYLES = {
    BuildStatus.QUEUED: "cyan",
    BuildStatus.RUNNING: "blue",
    BuildStatus.SUCCESS: "green",
    BuildStatus.FAILED: "red",
}


class OutputHandler:
    """Rich console wrapper used by every docpub command.

    Status lines (success, error, warning) always print. ``info`` needs
    verbosity 1 and ``debug`` verbosity 2.
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def _status_line(self, mark: str, color: str, message: str, colored_text: bool) -> None:
        style = color if colored_text else None
        self.console.print(f"[{color}]{mark}[/{color}] {message}", style=style)

    def _verbose(self, needed: int, markup: str) -> None:
        if self.verbosity >= needed:
            self.console.print(markup)

    def success(self, message: str) -> None:
        self._status_line("✓", "green", message, colored_text=False)

    def error(self, message: str) -> None:
        self._status_line("✗", "red", message, colored_text=True)

    def warning(self, message: str) -> None:
        self._status_line("⚠", "yellow", message, colored_text=True)

    def info(self, message: str) -> None:
        self._verbose(1, message)

    def debug(self, message: str) -> None:
        self._verbose(2, f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Animate ``message`` until the block exits (e.g. while a build runs)."""
        with Live(Spinner("dots", text=message), console=self.console, refresh_per_second=10):
            yield

    def print_build(self, build: Build) -> None:
        """Display the outcome of one build.

        Args:
            build: Build record after it finished (or was queued)
        """
        style = STATUS_STYLES.get(build.status, "white")
        self.console.print(
            f"\n[bold]Build {build.build_id}[/bold] "
            f"({build.operation.value}): [{style}]{build.status.value}[/{style}]"
        )
        if build.target_build_id:
            self.console.print(f"  Reverted to: {build.target_build_id}")
        self.console.print(f"  Pages: {build.items_done}/{build.items_total}")
        if build.pages_written:
            self.console.print(
                f"  New blobs: {build.pages_written} ({build.bytes_written} bytes)"
            )
        if build.error:
            self.console.print(f"  [red]Error:[/red] {build.error}")

    def print_builds(self, builds: List[Build]) -> None:
        """Display build history as a table, newest first.

        Args:
            builds: Builds to list
        """
        if not builds:
            self.console.print("[yellow]No builds yet[/yellow]")
            return

        table = Table(title="Builds")
        table.add_column("Build ID", no_wrap=True)
        table.add_column("Operation")
        table.add_column("Status")
        table.add_column("Pages", justify="right")
        table.add_column("New blobs", justify="right")
        table.add_column("Created")
        table.add_column("Actor")

        for build in builds:
            style = STATUS_STYLES.get(build.status, "white")
            table.add_row(
                build.build_id,
                build.operation.value,
                f"[{style}]{build.status.value}[/{style}]",
                f"{build.items_done}/{build.items_total}",
                str(build.pages_written),
                build.created_at,
                build.actor_id,
            )
        self.console.print(table)

    def print_status(
        self,
        site_name: str,
        hosts: List[str],
        pointer: Optional[Pointer],
        last_build: Optional[Build],
    ) -> None:
        """Display the live pointer and latest build of a site.

        Args:
            site_name: Display name of the site
            hosts: Hostnames bound to the site
            pointer: Current live pointer (None before the first publish)
            last_build: Most recent build of any status
        """
        self.console.print(f"\n[bold]Site:[/bold] {site_name}")
        for host in hosts:
            self.console.print(f"  Host: {host}")

        if pointer is None:
            self.console.print("\n[yellow]Not published yet[/yellow]")
        else:
            self.console.print(f"\n[bold]Live build:[/bold] {pointer.build_id}")
            self.console.print(f"  Manifest: {pointer.manifest_url}")
            self.console.print(f"  Tree: {pointer.tree_url}")
            if pointer.theme_url:
                self.console.print(f"  Theme: {pointer.theme_url}")

        if last_build is not None:
            style = STATUS_STYLES.get(last_build.status, "white")
            self.console.print(
                f"\n[bold]Last build:[/bold] {last_build.build_id} "
                f"({last_build.operation.value}, [{style}]{last_build.status.value}[/{style}])"
            )
            if last_build.error:
                self.console.print(f"  [red]Error:[/red] {last_build.error}")
