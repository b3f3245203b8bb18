"""Command history - print the filtered location history."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from trackline.core.config import Config
from trackline.core.exceptions import StoreSubscriptionFailure, WindowParseError
from trackline.models.history import HistorySnapshot
from trackline.models.window import TimeWindow
from trackline.services.store import JsonLocationStore
from trackline.services.window_filter import WindowFilter, local_today, to_local

console = Console()


def _format_optional(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "-"


def history(
    data_dir: Path = typer.Argument(
        ...,
        help="Working directory with the location store",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    date: Optional[str] = typer.Option(
        None,
        "--date",
        "-d",
        help="Day to show, YYYY-MM-DD (default today)",
    ),
    start: Optional[str] = typer.Option(
        None,
        "--start",
        "-s",
        help="Start time of day, HH:MM (default 19:00)",
    ),
    end: Optional[str] = typer.Option(
        None,
        "--end",
        "-e",
        help="End time of day, HH:MM (default 21:00); earlier than start = overnight",
    ),
    timezone: Optional[str] = typer.Option(
        None,
        "--timezone",
        "--tz",
        help="IANA timezone (default: system local time)",
    ),
) -> None:
    """Shows the locations recorded on a day within a time-of-day window."""
    config = Config(data_dir=data_dir, timezone=timezone)

    try:
        tz = config.tzinfo()
        window = TimeWindow.parse(date, start, end, today=local_today(tz))
    except (WindowParseError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not config.store_file.exists():
        console.print("[yellow]No locations recorded yet[/yellow]")
        console.print(f"Run 'trackline serve {data_dir}' and start tracking.")
        return

    store = JsonLocationStore(config.store_file)
    try:
        snapshot = store.snapshot()
    except StoreSubscriptionFailure as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    visible = HistorySnapshot.from_records(WindowFilter(tz).filter(snapshot, window))

    if not visible:
        console.print(f"[yellow]No locations for {window}[/yellow] ({len(snapshot)} in total)")
        return

    table = Table(title=f"Locations {window}" + (" (overnight)" if window.is_overnight else ""))

    table.add_column("Time", style="cyan")
    table.add_column("Latitude", justify="right")
    table.add_column("Longitude", justify="right")
    table.add_column("Accuracy (m)", justify="right")
    table.add_column("Altitude (m)", justify="right")
    table.add_column("Tracker", style="dim")

    for record in visible:
        local = to_local(record.timestamp, tz)
        table.add_row(
            local.strftime("%H:%M:%S"),
            f"{record.latitude:.6f}",
            f"{record.longitude:.6f}",
            _format_optional(record.accuracy),
            _format_optional(record.altitude),
            record.tracker_id,
        )

    console.print(table)
    console.print()
    console.print(f"Points: [green]{len(visible)}[/green] of {len(snapshot)}")
    console.print(f"Path length: [green]{visible.path_length_km():.2f} km[/green]")

    last = visible.latest
    console.print(
        f"Last known location: {last.coordinates} "
        f"at {to_local(last.timestamp, tz).strftime('%H:%M:%S')}"
    )
