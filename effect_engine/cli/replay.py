"""
Replay command: fold signals and show the resulting state and desired effects
"""

import json
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from ..core import canonical_json_str, canonicalize
from ..core.errors import EngineError
from ..replay import replay as replay_signals
from .loader import load_definition, parse_signal

console = Console()


def replay_command(
    target: str = typer.Argument(..., help="Definition reference, MODULE:ATTR"),
    signals: Optional[List[str]] = typer.Option(
        None, "--signal", "-s", help="Signal to fold (JSON or plain string); repeatable"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Fold signals through the transition function without running effects.

    Examples:
        effect-engine replay app.machine:definition -s toggle -s toggle
        effect-engine replay app.machine:definition --json
    """
    try:
        definition = load_definition(target)
        result = replay_signals(definition, [parse_signal(s) for s in signals or []])
    except EngineError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        output = {
            "signals_applied": result.applied,
            "state": canonicalize(result.state),
            "effects": canonicalize(dict(result.effects)),
        }
        print(json.dumps(output, indent=2, sort_keys=True))
        raise typer.Exit(0)

    console.print(f"[green]✓ Folded {result.applied} signal(s)[/green]")
    console.print("\n[bold]Final state:[/bold]")
    console.print(Syntax(canonical_json_str(result.state, indent=2), "json", theme="monokai"))

    table = Table(title="Desired Effects")
    table.add_column("Key", style="yellow")
    table.add_column("Effect", style="dim")
    for key in result.effects:
        table.add_row(escape(key), escape(canonical_json_str(result.effects[key])))
    console.print(table)
    raise typer.Exit(0)
