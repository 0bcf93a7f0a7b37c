"""Command implementations for CLI."""

from typing import Any, Awaitable, Callable, List, Optional

from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from lxdkitchen.driver.engine import InstanceEngine
from lxdkitchen.exceptions import LxdKitchenError


console = Console()


async def _run_action(
    description: str,
    action: Callable[[], Awaitable[Any]],
    quiet: bool = False,
) -> Any:
    """Helper to run an engine action with a progress spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=quiet,
    ) as progress:
        task = progress.add_task(description, total=None)
        result = await action()
        progress.update(task, completed=True)
        
    return result


def _select_instances(engine: InstanceEngine, name: Optional[str], all_instances: bool) -> List[str]:
    """Resolve the instance names a command applies to."""
    if all_instances:
        return engine.config_manager.list_instances()
    # Unknown names raise ConfigurationError
    engine.config_manager.get_instance(name)
    return [name]


async def _run_for_instances(
    engine: InstanceEngine,
    names: List[str],
    verb: str,
    action: Callable[[str], Awaitable[Any]],
    quiet: bool,
) -> None:
    """Run an action for each instance in turn, reporting failures at the end."""
    failures = {}
    
    for name in names:
        try:
            state = await _run_action(f"{verb.capitalize()} {name}...", lambda: action(name), quiet)
        except LxdKitchenError as e:
            failures[name] = e
            if not quiet:
                console.print(f"  [red]✗[/red] {name}: {e}")
            continue
            
        if not quiet:
            suffix = f" ({state.hostname})" if state.hostname else ""
            console.print(f"[green]✓[/green] Finished {verb} {name}{suffix}")
            
    if failures:
        if len(names) == 1:
            raise failures[names[0]]
        raise LxdKitchenError(f"{verb.capitalize()} failed for {len(failures)}/{len(names)} instances")


async def create_instances(
    engine: InstanceEngine,
    name: Optional[str],
    all_instances: bool,
    quiet: bool = False,
):
    """Create one or all instances."""
    names = _select_instances(engine, name, all_instances)
    await _run_for_instances(engine, names, "creating", engine.create_instance, quiet)


async def destroy_instances(
    engine: InstanceEngine,
    name: Optional[str],
    all_instances: bool,
    quiet: bool = False,
):
    """Destroy one or all instances."""
    names = _select_instances(engine, name, all_instances)
    await _run_for_instances(engine, names, "destroying", engine.destroy_instance, quiet)


async def list_instances(engine: InstanceEngine):
    """List instances with formatted output."""
    statuses = await engine.get_all_instance_statuses()
    
    table = Table(title="Instances")
    table.add_column("Instance", style="cyan")
    table.add_column("Platform", style="magenta")
    table.add_column("State")
    table.add_column("Hostname")
    table.add_column("Last Action", style="dim")
    
    for name, info in statuses.items():
        state_color = {"running": "green", "stopped": "yellow"}.get(info["state"], "red")
        table.add_row(
            name,
            info["platform"],
            f"[{state_color}]{info['state']}[/{state_color}]",
            info["hostname"] or "-",
            info["last_action"] or "-",
        )
        
    console.print(table)


async def show_status(engine: InstanceEngine, name: str):
    """Show detailed status for one instance."""
    info = await engine.get_instance_status(name)
    
    table = Table(title=f"Instance {name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    
    table.add_row("Suite", info["suite"])
    table.add_row("Platform", info["platform"])
    table.add_row("Image", f"{info['image']} ({'present' if info['image_present'] else 'absent'})")
    table.add_row("State", info["state"])
    table.add_row("Hostname", info["hostname"] or "-")
    table.add_row("Last Action", info["last_action"] or "-")
    
    console.print(table)


async def validate_config(engine: InstanceEngine):
    """Report the instances a valid configuration expands to."""
    names = engine.config_manager.list_instances()
    console.print(f"[green]✓[/green] Configuration is valid ({len(names)} instances)")
    for name in names:
        console.print(f"  {name}")
