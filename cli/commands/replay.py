"""
Replay command: replay a trace log against a net
"""

import asyncio
from typing import Optional

import typer
from rich.progress import Progress
from rich.table import Table

from tokenflow.config import ALL_CASES, DEFAULT_SPEED, EngineConfig, speed_interval
from tokenflow.controller import ControllerView, ReplayController
from tokenflow.core.errors import ReplayError, TokenflowError
from tokenflow.log import read_trace_text
from tokenflow.model import read_model_file, sample_net
from tokenflow.replay import ManualScheduler

from ._output import console, emit_json, fail


def _token_table(ctl: ReplayController, view: ControllerView) -> Table:
    table = Table(title="Tokens")
    table.add_column("Place", style="green")
    table.add_column("Label", style="yellow")
    table.add_column("Tokens", style="cyan", justify="right")
    for place in ctl.net.places:
        table.add_row(place.id, place.label, str(view.tokens.get(place.id, 0)))
    return table


def _trace_table(view: ControllerView) -> Table:
    table = Table(title=f"Trace (case: {view.selected_case})")
    table.add_column("", width=1)
    table.add_column("Step", style="cyan", justify="right")
    table.add_column("Activity", style="green")
    table.add_column("Timestamp", style="dim")
    table.add_column("Case", style="yellow")
    for pos, event in enumerate(view.trace):
        marker = ">" if pos == view.current_step else ""
        style = "dim" if pos < view.current_step else None
        table.add_row(marker, str(event.step), event.activity, event.timestamp,
                      event.case_id or "", style=style)
    return table


def _run_batch(ctl: ReplayController, until: Optional[int]) -> None:
    while not ctl.engine.finished:
        if until is not None and ctl.engine.current_step >= until:
            return
        try:
            ctl.step_forward()
        except ReplayError:
            return


async def _run_animated(ctl: ReplayController, until: Optional[int]) -> None:
    target = ctl.engine.trace_length if until is None else min(until, ctl.engine.trace_length)
    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Replaying", total=target)
        ctl.play()
        while ctl.engine.playing:
            if ctl.engine.current_step >= target:
                ctl.pause()
                break
            progress.update(task, completed=ctl.engine.current_step)
            await asyncio.sleep(ctl.player.interval_ms / 4000.0)
        progress.update(task, completed=ctl.engine.current_step)


def replay_command(
    trace_path: str = typer.Option(..., "--trace", "-t", help="Path to CSV or JSONL trace log"),
    model_path: Optional[str] = typer.Option(
        None, "--model", "-m", help="Path to model JSON document (default: sample net)"
    ),
    case_id: str = typer.Option(ALL_CASES, "--case", "-c", help="Replay a single case id"),
    until: Optional[int] = typer.Option(None, "--until", "-u", help="Stop after N steps"),
    animate: bool = typer.Option(False, "--animate", "-a", help="Play with timed steps"),
    speed: str = typer.Option(DEFAULT_SPEED, "--speed", help="Playback speed (0.25x .. 4x)"),
    show_trace: bool = typer.Option(False, "--show-trace", "-s", help="Show the replayed trace"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Replay a trace log against a Petri net and report the token distribution.

    Examples:
        tokenflow replay --trace log.csv
        tokenflow replay --trace log.jsonl --model net.json --case c-17
        tokenflow replay --trace log.csv --until 5 --show-trace
        tokenflow replay --trace log.csv --animate --speed 4x
    """
    try:
        net = read_model_file(model_path) if model_path else sample_net()
        config = EngineConfig.from_env()
        ctl = ReplayController(net, config=config, scheduler=None if animate else ManualScheduler())
        ctl.set_interval(speed_interval(speed))
        ctl.load_trace(read_trace_text(trace_path))
        if case_id != ALL_CASES:
            if case_id not in ctl.view().case_ids:
                fail(f"Unknown case id: {case_id}", json_output, case_id=case_id)
            ctl.select_case(case_id)
    except FileNotFoundError as e:
        fail(f"File not found: {e.filename}", json_output, path=e.filename)
    except (TokenflowError, ValueError) as e:
        fail(str(e), json_output)

    if animate:
        asyncio.run(_run_animated(ctl, until))
    else:
        _run_batch(ctl, until)

    view = ctl.view()
    if json_output:
        emit_json({
            "success": view.error is None,
            "case": view.selected_case,
            "steps_replayed": view.current_step,
            "trace_length": view.trace_length,
            "active_transition": view.active_transition_id,
            "tokens": view.tokens,
            "error": view.error,
        })
    else:
        if view.error is None:
            console.print(f"[green]✓ Replayed {view.current_step}/{view.trace_length} steps[/green]")
        else:
            console.print(f"[red]✗ Replay stopped at step {view.current_step}/{view.trace_length}[/red]")
            console.print(f"  [red]{view.error}[/red]")
        console.print(f"  Case: [cyan]{view.selected_case}[/cyan]")
        console.print(_token_table(ctl, view))
        if show_trace:
            console.print(_trace_table(view))

    raise typer.Exit(0 if view.error is None else 2)
