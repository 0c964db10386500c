#!/usr/bin/env python3
"""
Tokenflow CLI - Petri net trace replay

Main entrypoint for the tokenflow command-line tool.
"""

import os
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import log, model, replay
from tokenflow.logging_config import setup_logging
from tokenflow.metrics import start_metrics_server

app = typer.Typer(
    name="tokenflow",
    help="Replay activity logs against Place/Transition nets",
    add_completion=False,
)

console = Console()

app.add_typer(log.app, name="log", help="Trace log operations")
app.add_typer(model.app, name="model", help="Model document operations")

app.command(name="replay")(replay.replay_command)


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level (default: TOKENFLOW_LOG_LEVEL or WARNING)"
    ),
    log_format: Optional[str] = typer.Option(
        None, "--log-format", help="Log format: json or text (default: TOKENFLOW_LOG_FORMAT or json)"
    ),
    metrics_port: Optional[int] = typer.Option(
        None, "--metrics-port", help="Expose Prometheus metrics on this port"
    ),
):
    """Replay activity logs against Place/Transition nets."""
    setup_logging(level=log_level or os.getenv("TOKENFLOW_LOG_LEVEL", "WARNING"), fmt=log_format)
    start_metrics_server(enabled=metrics_port is not None, port=metrics_port or 0)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from tokenflow import __version__ as engine_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Tokenflow CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
