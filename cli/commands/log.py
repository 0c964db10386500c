"""
Trace log commands: inspect, cases
"""

from collections import Counter

import typer
from rich.table import Table

from tokenflow.config import ALL_CASES
from tokenflow.core.errors import TokenflowError
from tokenflow.log import case_ids, detect_format, filter_trace, read_trace_file, read_trace_text

from ._output import console, emit_json, fail

app = typer.Typer()


@app.command()
def inspect(
    trace_path: str = typer.Option(..., "--trace", "-t", help="Path to CSV or JSONL trace log"),
    case_id: str = typer.Option(ALL_CASES, "--case", "-c", help="Only show one case id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the parsed trace in timestamp order.

    Examples:
        tokenflow log inspect --trace log.csv
        tokenflow log inspect --trace log.jsonl --case c-17 --json
    """
    try:
        events = read_trace_file(trace_path)
        fmt = detect_format(read_trace_text(trace_path))
    except FileNotFoundError:
        fail(f"Trace file not found: {trace_path}", json_output, path=trace_path)
    except TokenflowError as e:
        fail(str(e), json_output)

    selected = filter_trace(events, case_id)

    if json_output:
        emit_json({
            "format": fmt,
            "case": case_id,
            "count": len(selected),
            "events": [{"step": e.step, "activity": e.activity, "data": dict(e.data)} for e in selected],
        })
        return

    table = Table(title=f"Trace: {trace_path} ({fmt})")
    table.add_column("Step", style="cyan", justify="right")
    table.add_column("Activity", style="green")
    table.add_column("Timestamp", style="dim")
    table.add_column("Case", style="yellow")
    for e in selected:
        table.add_row(str(e.step), e.activity, e.timestamp, e.case_id or "")

    console.print(table)
    console.print(f"\n[bold]Total events:[/bold] {len(selected)}")


@app.command()
def cases(
    trace_path: str = typer.Option(..., "--trace", "-t", help="Path to CSV or JSONL trace log"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List the distinct case ids of a trace, in first-seen order.

    Examples:
        tokenflow log cases --trace log.csv
    """
    try:
        events = read_trace_file(trace_path)
    except FileNotFoundError:
        fail(f"Trace file not found: {trace_path}", json_output, path=trace_path)
    except TokenflowError as e:
        fail(str(e), json_output)

    ids = case_ids(events)
    sizes = Counter(e.case_id for e in events if e.case_id)

    if json_output:
        emit_json({"cases": [{"case_id": cid, "events": sizes[cid]} for cid in ids], "count": len(ids)})
        return

    if not ids:
        console.print("[yellow]Trace has no case_id values[/yellow]")
        return

    table = Table(title="Cases")
    table.add_column("Case", style="yellow")
    table.add_column("Events", style="cyan", justify="right")
    for cid in ids:
        table.add_row(cid, str(sizes[cid]))
    console.print(table)
