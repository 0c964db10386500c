"""
Model commands: sample, show
"""

from typing import Optional

import typer
from rich.table import Table

from tokenflow.core.errors import TokenflowError
from tokenflow.core.index import IOIndex
from tokenflow.model import dumps_model, read_model_file, sample_net, write_model_file

from ._output import console, emit_json, fail

app = typer.Typer()


@app.command()
def sample(
    output: Optional[str] = typer.Option(None, "--out", "-o", help="Write the document to this file"),
):
    """
    Export the sample net as a model document.

    Examples:
        tokenflow model sample
        tokenflow model sample --out net.json
    """
    net = sample_net()
    if output is None:
        print(dumps_model(net))
        return
    write_model_file(output, net)
    console.print(f"[green]✓ Sample net written to[/green] {output}")


@app.command()
def show(
    model_path: Optional[str] = typer.Option(
        None, "--model", "-m", help="Path to model JSON document (default: sample net)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show places and the input/output places of every transition.

    Examples:
        tokenflow model show
        tokenflow model show --model net.json --json
    """
    try:
        net = read_model_file(model_path) if model_path else sample_net()
        index = IOIndex.build(net)
    except FileNotFoundError:
        fail(f"Model file not found: {model_path}", json_output, path=model_path)
    except TokenflowError as e:
        fail(str(e), json_output)

    if json_output:
        emit_json({
            "places": [p.to_dict() for p in net.places],
            "transitions": [
                {
                    "id": io.id,
                    "label": io.label,
                    "inputPlaceIds": list(io.input_place_ids),
                    "outputPlaceIds": list(io.output_place_ids),
                }
                for io in index.transitions.values()
            ],
            "arcs": len(net.arcs),
        })
        return

    places = Table(title="Places")
    places.add_column("Id", style="green")
    places.add_column("Label", style="yellow")
    places.add_column("Initial tokens", style="cyan", justify="right")
    for p in net.places:
        places.add_row(p.id, p.label, str(p.initial_tokens))

    transitions = Table(title="Transitions")
    transitions.add_column("Id", style="green")
    transitions.add_column("Label", style="yellow")
    transitions.add_column("Inputs", style="cyan")
    transitions.add_column("Outputs", style="cyan")
    for io in index.transitions.values():
        transitions.add_row(io.id, io.label, ", ".join(io.input_place_ids), ", ".join(io.output_place_ids))

    console.print(places)
    console.print(transitions)
    console.print(f"\n[bold]Arcs:[/bold] {len(net.arcs)}")
