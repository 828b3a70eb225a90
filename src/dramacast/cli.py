"""Command-line interface using Typer."""

import signal
import threading
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from dramacast import __version__
from dramacast.logging import setup_logging
from dramacast.services.scheduler import ReleaseScheduler

# Setup logging
setup_logging()

app = typer.Typer(
    name="dramacast",
    help="dramacast - scheduled release pipeline for the short-drama catalog",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"dramacast v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """dramacast - promote coming soon series and episodes on schedule."""
    pass


def _build_scheduler(interval: float | None = None) -> ReleaseScheduler:
    from dramacast.adapters.catalog import get_catalog_store
    from dramacast.config import settings
    from dramacast.services.alerting import AlertingService

    return ReleaseScheduler(
        store=get_catalog_store(),
        interval_seconds=interval or settings.release_interval_seconds,
        alerting=AlertingService(),
    )


@app.command()
def release() -> None:
    """Run one release tick now (series first, then episodes)."""
    console.print("[bold blue]Running release tick...[/bold blue]")

    report = _build_scheduler().run_tick()
    if report is None:
        console.print("[yellow]A release tick is already in progress[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title="Release Tick")
    table.add_column("Stage", style="cyan")
    table.add_column("Promoted", style="green")
    table.add_column("Failed", style="red")
    table.add_column("Skipped")
    table.add_row(
        "series",
        str(len(report.series.promoted)),
        str(len(report.series.failed)),
        "-",
    )
    table.add_row(
        "episodes (with series)",
        str(len(report.series.episodes_promoted)),
        str(len(report.series.episodes_failed)),
        "-",
    )
    table.add_row(
        "episodes",
        str(len(report.episodes.promoted)),
        str(len(report.episodes.failed)),
        str(len(report.episodes.skipped)),
    )
    console.print(table)

    for failure in report.series.failed + report.series.episodes_failed + report.episodes.failed:
        console.print(f"[red]✗ {failure.id}: {failure.error}[/red]")

    if report.storage_exhausted:
        console.print("[bold red]Storage exhausted - batch aborted, free up space[/bold red]")
        raise typer.Exit(code=2)
    if report.error:
        console.print(f"[bold red]Tick error: {report.error}[/bold red]")
        raise typer.Exit(code=1)


@app.command()
def schedule(
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        "-i",
        min=1.0,
        max=60.0,
        help="Seconds between ticks (default from settings)",
    ),
    no_startup_run: bool = typer.Option(
        False, "--no-startup-run", help="Skip the catch-up tick at startup"
    ),
) -> None:
    """Run the release scheduler in the foreground until interrupted."""
    scheduler = _build_scheduler(interval)
    stopped = threading.Event()

    def _handle_signal(signum: int, frame: object) -> None:
        stopped.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    scheduler.start(run_immediately=not no_startup_run)
    console.print(
        f"[green]Release scheduler running every {scheduler.interval_seconds:g}s "
        f"(Ctrl+C to stop)[/green]"
    )
    stopped.wait()

    console.print("[dim]Stopping scheduler...[/dim]")
    scheduler.stop()


@app.command()
def transfers(
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum entries to show"),
) -> None:
    """List recent series transfers, newest first."""
    from dramacast.adapters.catalog import DESCENDING, get_catalog_store
    from dramacast.domain.enums import Collection
    from dramacast.domain.models import TransferLogEntry

    store = get_catalog_store()
    docs = store.find(
        Collection.TRANSFER_LOGS, sort=[("transferred_at", DESCENDING)], limit=limit
    )
    if not docs:
        console.print("[yellow]No series transfers yet[/yellow]")
        return

    table = Table(title="Series Transfers")
    table.add_column("Transferred", style="cyan")
    table.add_column("Title")
    table.add_column("Scheduled")
    table.add_column("Series ID", style="dim")

    for doc in docs:
        entry = TransferLogEntry.from_document(doc)
        table.add_row(
            entry.transferred_at.strftime("%Y-%m-%d %H:%M"),
            entry.title,
            entry.scheduled_release_at.strftime("%Y-%m-%d %H:%M"),
            str(entry.series_id),
        )
    console.print(table)


@app.command()
def upcoming(
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum series to show"),
) -> None:
    """Show coming soon series that are not due yet."""
    from dramacast.adapters.catalog import get_catalog_store
    from dramacast.domain.models import utc_now
    from dramacast.services.promotion import find_upcoming_series

    series_list = find_upcoming_series(get_catalog_store(), utc_now(), limit=limit)
    if not series_list:
        console.print("[yellow]Nothing scheduled[/yellow]")
        return

    table = Table(title="Upcoming Releases")
    table.add_column("Release At", style="cyan")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("ID", style="dim")

    for series in series_list:
        table.add_row(
            series.scheduled_release_at.strftime("%Y-%m-%d %H:%M"),
            series.title,
            str(series.series_type),
            str(series.id),
        )
    console.print(table)


if __name__ == "__main__":
    app()
