"""Command serve - run the tracking server."""

import socket
import webbrowser
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console

from trackline.core.config import Config
from trackline.core.logger import set_verbose, set_web_mode
from trackline.web.app import create_app

console = Console()


def _find_available_port(host: str, start_port: int, max_attempts: int = 10) -> Optional[int]:
    """Finds a free port starting at start_port, trying max_attempts ports."""
    for offset in range(max_attempts):
        candidate = start_port + offset
        if candidate > 65535:
            break
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((host, candidate))
                return candidate
            except OSError:
                continue
    return None


def serve(
    data_dir: Path = typer.Argument(
        Path("trackline-data"),
        help="Working directory with the location store",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    host: str = typer.Option(
        "0.0.0.0",
        "--host",
        help="Address to bind",
    ),
    port: int = typer.Option(
        8000,
        "--port",
        "-p",
        help="Port of the web server",
        min=1024,
        max=65535,
    ),
    operator_id: str = typer.Option(
        "operator",
        "--operator-id",
        help="Tracker id written into every record",
    ),
    operator_token: Optional[str] = typer.Option(
        None,
        "--operator-token",
        envvar="TRACKLINE_OPERATOR_TOKEN",
        help="Shared secret for operator sign-in",
    ),
    interval: float = typer.Option(
        60.0,
        "--interval",
        "-i",
        help="Seconds between periodic position requests",
        min=1.0,
    ),
    timezone: Optional[str] = typer.Option(
        None,
        "--timezone",
        "--tz",
        help="IANA timezone for day filtering (default: system local time)",
    ),
    no_positioning: bool = typer.Option(
        False,
        "--no-positioning",
        help="Viewer-only server, live tracking disabled",
    ),
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Do not open the browser",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Print service calls",
    ),
) -> None:
    """Runs the tracking server.

    Every viewer can browse the history; only the signed-in operator can
    start and stop live tracking.
    """
    config = Config(
        data_dir=data_dir,
        operator_id=operator_id,
        operator_token=operator_token,
        sample_period=interval,
        positioning_enabled=not no_positioning,
        timezone=timezone,
        verbose=verbose,
    )

    try:
        config.tzinfo()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    set_verbose(verbose)
    set_web_mode(True)

    console.print(f"[blue]Trackline[/blue]")
    console.print(f"  Store: {config.store_file}")
    console.print(f"  Operator: {operator_id}")
    console.print(f"  Interval: {interval:g} s")
    if timezone:
        console.print(f"  Timezone: {timezone}")

    if not operator_token:
        console.print()
        console.print("[yellow]⚠ Warning:[/yellow] no operator token set")
        console.print("  Operator sign-in is disabled, live tracking cannot be started.")
        console.print("  Set --operator-token or TRACKLINE_OPERATOR_TOKEN.")

    console.print()

    fastapi_app = create_app(config)

    actual_port = _find_available_port(host, port)
    if actual_port is None:
        console.print(f"[red]Error:[/red] No free port found (tried {port}-{port + 9})")
        raise typer.Exit(1)

    if actual_port != port:
        console.print(f"[yellow]Port {port} is taken, using {actual_port}[/yellow]")

    url = f"http://localhost:{actual_port}"
    if not no_browser:
        console.print(f"[green]Opening browser:[/green] {url}")
        webbrowser.open(url)
    else:
        console.print(f"[green]Running at:[/green] {url}")

    console.print()
    console.print("[dim]Ctrl+C to quit[/dim]")
    console.print()

    try:
        uvicorn.run(fastapi_app, host=host, port=actual_port, log_level="warning")
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
