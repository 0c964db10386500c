"""
Shared output helpers for CLI commands.
"""

import json
from typing import Any, NoReturn

import typer
from rich.console import Console

console = Console()


def emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def fail(message: str, json_output: bool, code: int = 2, **extra: Any) -> NoReturn:
    """Print an error (rich or JSON) and exit with the given code."""
    if json_output:
        print(json.dumps({"error": message, **extra}))
    else:
        console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code)
