"""
homegraph CLI - inspect the trait catalog and fulfill requests offline.
"""

import asyncio
import dataclasses
import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import get_config
from .engine import IntentEngine
from .errors import DecodeError, HomegraphError
from .fulfillment import ExecuteIntent, QueryIntent, decode_request
from .registry import InMemoryDeviceRegistry
from .simulator import SimulatedExecutor
from .traits import get_trait, iter_traits

console = Console()


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else get_config().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler()]
    )


def run_async(coro):
    """Run an async function."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        return loop.run_until_complete(coro)


def _load_json(path: str):
    with open(path) as f:
        return json.load(f)


def _load_registry(path: str) -> InMemoryDeviceRegistry:
    try:
        return InMemoryDeviceRegistry.from_file(path)
    except (HomegraphError, KeyError, ValueError) as e:
        console.print(f"[red]Invalid device file:[/red] {e}")
        sys.exit(1)


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.pass_context
def main(ctx, verbose):
    """homegraph - smart-home fulfillment toolkit"""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    setup_logging(verbose)


@main.command()
def traits():
    """List every trait in the catalog."""
    table = Table(title="Traits")
    table.add_column("Trait", style="cyan")
    table.add_column("Commands", justify="right")
    table.add_column("States", justify="right")
    table.add_column("Errors", justify="right")

    for spec in iter_traits():
        table.add_row(
            spec.short_name,
            str(len(spec.commands)),
            str(len(spec.states)),
            str(len(spec.error_codes)),
        )

    console.print(table)


@main.command()
@click.argument('name')
def trait(name: str):
    """Show one trait's attributes, states, commands and errors."""
    try:
        spec = get_trait(name)
    except HomegraphError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(Panel(spec.description, title=f"[bold]{spec.name}[/bold]"))

    if spec.attributes:
        table = Table(title="Attributes")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Required")
        for attr in spec.attributes:
            table.add_row(attr.name, attr.type, "yes" if attr.required else "no")
        console.print(table)

    if spec.states:
        table = Table(title="States")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        for state in spec.states:
            table.add_row(state.name, state.type)
        console.print(table)

    if spec.commands:
        table = Table(title="Commands")
        table.add_column("Command", style="cyan")
        table.add_column("Parameters")
        table.add_column("Mutates", style="dim")
        for command in spec.commands:
            params = ", ".join(
                p.name if p.required else f"{p.name}?" for p in command.parameters
            )
            table.add_row(command.short_name, params or "-", ", ".join(command.mutates) or "-")
        console.print(table)

    if spec.error_codes:
        console.print(f"\n[bold]Errors:[/bold] {', '.join(spec.error_codes)}")


@main.command()
@click.argument('request_file', type=click.Path(exists=True))
def decode(request_file: str):
    """Decode a fulfillment request and summarize it."""
    try:
        request = decode_request(_load_json(request_file))
    except DecodeError as e:
        console.print(f"[red]✗ Decode failed:[/red] {e.path}: {e.reason}")
        sys.exit(1)

    console.print(f"[bold]Request:[/bold] {request.request_id}")
    for intent in request.inputs:
        console.print(f"  [cyan]{intent.kind.short_name}[/cyan]")
        if isinstance(intent, QueryIntent):
            console.print(f"    devices: {', '.join(intent.device_ids)}")
        elif isinstance(intent, ExecuteIntent):
            for group in intent.commands:
                commands = ", ".join(e.command for e in group.execution)
                console.print(f"    {', '.join(group.device_ids)} <- {commands}")


@main.command()
@click.argument('request_file', type=click.Path(exists=True))
@click.option('--devices', 'devices_file', required=True, type=click.Path(exists=True),
              help='Device fixture file')
@click.option('--agent-user-id', help='Agent user id for SYNC responses')
@click.option('--parallel', is_flag=True, help='Dispatch devices concurrently')
def fulfill(request_file: str, devices_file: str, agent_user_id: Optional[str], parallel: bool):
    """Fulfill a request against simulated devices and print the response."""
    registry = _load_registry(devices_file)
    config = get_config()
    if parallel:
        config = dataclasses.replace(config, parallel_execution=True)

    engine = IntentEngine(
        registry,
        SimulatedExecutor(registry),
        agent_user_id=agent_user_id,
        config=config,
        on_disconnect=registry.unlink,
    )

    try:
        response = run_async(engine.handle_envelope(_load_json(request_file)))
    except DecodeError as e:
        console.print(f"[red]✗ Decode failed:[/red] {e.path}: {e.reason}")
        sys.exit(1)

    console.print_json(data=response)


@main.command()
@click.argument('devices_file', type=click.Path(exists=True))
def devices(devices_file: str):
    """Declare every device in a fixture file and list them."""
    registry = _load_registry(devices_file)

    table = Table(title=f"Devices ({len(registry)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Traits")
    table.add_column("Online")

    for device in registry.list_devices():
        table.add_row(
            device.id,
            device.name.name,
            device.type.short_name,
            ", ".join(t.short_name for t in device.traits),
            "[green]yes[/green]" if device.online else "[red]no[/red]",
        )

    console.print(table)


if __name__ == "__main__":
    main()
