"""
Run command: drive a definition on a live engine and print the timeline
"""

import asyncio
import json
from typing import Any, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Settings
from ..core import Engine, canonical_json_str, canonicalize
from ..core.errors import EngineError
from ..core.types import Definition
from .loader import load_definition, parse_signal

console = Console()


async def wait_idle(engine: Engine, timeout: float, poll: float = 0.01) -> bool:
    """
    Wait until the engine has no queued signals and no running effects.

    Returns:
        True if idle was reached, False on timeout
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    await asyncio.sleep(0)
    while not engine.is_idle():
        if loop.time() >= deadline:
            return False
        await asyncio.sleep(poll)
    return True


async def run_definition(
    definition: Definition, signals: List[Any], timeout: float
) -> Tuple[List[Any], Any, bool, List[str]]:
    """
    Run definition, dispatch signals in one batch and wait for idle.

    Batch errors reported to the loop exception handler are re-raised here.

    Returns:
        (events, final state, idle reached, keys still running)
    """
    loop = asyncio.get_running_loop()
    errors: List[BaseException] = []

    def on_loop_error(_loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exc = context.get("exception")
        if isinstance(exc, EngineError):
            errors.append(exc)
        else:
            _loop.default_exception_handler(context)

    loop.set_exception_handler(on_loop_error)
    events: List[Any] = []
    engine = Engine(definition, name="cli", subscribers=[events.append])
    for signal in signals:
        engine.dispatch(signal)

    idle = await wait_idle(engine, timeout)
    if errors:
        raise errors[0]
    return events, engine.get_state(), idle, sorted(engine.running_keys())


def _event_detail(event: Any) -> str:
    if event.type == "signal-received":
        detail = canonical_json_str(event.signal)
    elif event.type == "state-updated":
        detail = canonical_json_str(event.state)
    elif event.type == "effect-failed":
        detail = repr(event.error)
    else:
        detail = canonical_json_str(event.effect)
    return detail if len(detail) <= 80 else detail[:77] + "..."


def run_command(
    target: str = typer.Argument(..., help="Definition reference, MODULE:ATTR"),
    signals: Optional[List[str]] = typer.Option(
        None, "--signal", "-s", help="Signal to dispatch (JSON or plain string); repeatable"
    ),
    settle_timeout: Optional[float] = typer.Option(
        None, "--settle-timeout", "-t", help="Seconds to wait for effects to settle"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Run a definition and print the event timeline.

    Examples:
        effect-engine run app.machine:definition
        effect-engine run app.machine:definition -s toggle -s '{"type": "set", "value": 3}'
        effect-engine run app.machine:definition --json
    """
    timeout = settle_timeout if settle_timeout is not None else Settings.from_env().settle_timeout
    parsed = [parse_signal(s) for s in signals or []]

    try:
        definition = load_definition(target)
        events, state, idle, running = asyncio.run(run_definition(definition, parsed, timeout))
    except EngineError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        output = {
            "events": [canonicalize(ev) for ev in events],
            "state": canonicalize(state),
            "idle": idle,
            "running": running,
        }
        print(json.dumps(output, indent=2, sort_keys=True))
        raise typer.Exit(0)

    table = Table(title=f"Timeline: {target}")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Type", style="green")
    table.add_column("Key", style="yellow")
    table.add_column("Detail", style="dim")

    for idx, event in enumerate(events):
        table.add_row(str(idx), event.type, getattr(event, "key", ""), escape(_event_detail(event)))

    console.print(table)
    console.print(f"\n[bold]Final state:[/bold] {escape(canonical_json_str(state))}")
    if idle:
        console.print("[green]✓ Engine settled[/green]")
    else:
        console.print(
            f"[yellow]Timed out after {timeout}s with running effects:[/yellow] {', '.join(running)}"
        )
    raise typer.Exit(0)
