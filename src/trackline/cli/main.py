"""Main CLI definition for Trackline."""

from typing import Optional

import typer

from trackline import __version__
from trackline.cli.commands.history import history
from trackline.cli.commands.serve import serve


def version_callback(value: bool) -> None:
    if value:
        print(f"trackline {__version__}")
        raise typer.Exit()


app = typer.Typer(help="Live location tracking with a filterable history map.")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show program version",
    ),
) -> None:
    """Trackline command line."""


app.command()(serve)
app.command()(history)


if __name__ == "__main__":
    app()
