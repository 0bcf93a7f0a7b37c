"""Main CLI implementation using Typer."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from rich.console import Console

from lxdkitchen.cli.commands import (
    create_instances,
    destroy_instances,
    list_instances,
    show_status,
    validate_config,
)
from lxdkitchen.driver.config import DEFAULT_CONFIG_FILE
from lxdkitchen.driver.engine import build_engine
from lxdkitchen.exceptions import LxdKitchenError


# Create Typer app
app = typer.Typer(
    name="lxd-kitchen",
    help="Disposable LXD test containers driven through the lxc client",
    add_completion=False,
)

# Console for rich output
console = Console()

ConfigOption = typer.Option(
    Path(DEFAULT_CONFIG_FILE), "--config", "-c", help="Project configuration file"
)
LogLevelOption = typer.Option(
    None, "--log-level", "-l", help="Override the configured log level"
)


def _run_cli_command(
    handler: Callable[..., Any],
    config: Path,
    log_level: Optional[str] = None,
    **kwargs: Any,
):
    """Helper to run a CLI command with an engine and error handling."""
    async def run():
        engine = await build_engine(config, log_level)
        await handler(engine, **kwargs)
        
    try:
        asyncio.run(run())
    except LxdKitchenError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command("create")
def create_command(
    name: Optional[str] = typer.Argument(None, help="Instance name to create"),
    all: bool = typer.Option(False, "--all", help="Create all configured instances"),
    config: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
):
    """Create instance(s), leaving them running and reachable."""
    if not name and not all:
        console.print("[red]Error:[/red] Specify instance name or use --all")
        raise typer.Exit(1)
    _run_cli_command(create_instances, config=config, log_level=log_level, name=name, all_instances=all)


@app.command("destroy")
def destroy_command(
    name: Optional[str] = typer.Argument(None, help="Instance name to destroy"),
    all: bool = typer.Option(False, "--all", help="Destroy all configured instances"),
    config: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
):
    """Destroy instance(s)."""
    if not name and not all:
        console.print("[red]Error:[/red] Specify instance name or use --all")
        raise typer.Exit(1)
    _run_cli_command(destroy_instances, config=config, log_level=log_level, name=name, all_instances=all)


@app.command("list")
def list_command(
    config: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
):
    """List configured instances and their state."""
    _run_cli_command(list_instances, config=config, log_level=log_level)


@app.command("status")
def status_command(
    name: str = typer.Argument(..., help="Instance name"),
    config: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
):
    """Show detailed status for one instance."""
    _run_cli_command(show_status, config=config, log_level=log_level, name=name)


@app.command("validate")
def validate_command(
    config: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
):
    """Validate the configuration file."""
    _run_cli_command(validate_config, config=config, log_level=log_level)


def main():
    """Main entry point for CLI."""
    app()
