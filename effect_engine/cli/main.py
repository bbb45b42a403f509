#!/usr/bin/env python3
"""
effect-engine CLI

Main entrypoint for the effect-engine command-line tool.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config import Settings
from ..logging_config import setup_logging
from ..metrics import start_metrics_server
from .replay import replay_command
from .run import run_command

app = typer.Typer(
    name="effect-engine",
    help="Effect reconciliation engine CLI",
    add_completion=False,
)

console = Console()


@app.callback()
def configure():
    """Configure logging (to stderr) and metrics from the environment."""
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format, stream=sys.stderr)
    start_metrics_server(enabled=settings.metrics_enabled, port=settings.metrics_port)


app.command(name="run")(run_command)
app.command(name="replay")(replay_command)


@app.command()
def version():
    """Show version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]effect-engine[/bold]", f"v{__version__}")
    table.add_row("Scheduler", "asyncio")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
