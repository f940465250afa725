"""CLI commands for configuration management."""

import json
import shutil
import sys
from pathlib import Path
from typing import Any

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from task_timer.core.config import ConfigManager

console = Console()
error_console = Console(stderr=True)


def _load_config(ctx: click.Context) -> ConfigManager:
    """Load the config file chosen with --config, or the default one."""
    obj = ctx.find_object(dict) or {}
    if "config" in obj:
        config_mgr: ConfigManager = obj["config"]
        return config_mgr
    config_path = obj.get("config_path")
    try:
        return ConfigManager(Path(config_path) if config_path else None)
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _convert_value(value: str) -> Any:
    """Convert a command-line string to bool, None, int, float or str."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    if value.lower() == "null":
        return None
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


@click.group()  # type: ignore[misc]
def config() -> None:
    """Manage Task Timer configuration.

    Configuration is stored in ~/.task-timer/config.yml
    """


@config.command("show")  # type: ignore[misc]
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show all configuration settings.

    Example:
        task-timer config show
        task-timer config show --json
    """
    config_mgr = _load_config(ctx)

    if as_json:
        print(json.dumps(config_mgr.to_dict(), indent=2))
        return

    table = Table(title="Task Timer Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key in config_mgr.get_all_keys():
        table.add_row(key, str(config_mgr.get(key)))

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}")


@config.command("get")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_get(ctx: click.Context, key: str) -> None:
    """Get a specific configuration value.

    Example:
        task-timer config get tracker.tick_interval
    """
    config_mgr = _load_config(ctx)
    value = config_mgr.get(key)

    if value is None:
        error_console.print(f"[red]Error:[/red] Configuration key '{key}' not found")
        sys.exit(1)

    if isinstance(value, dict):
        console.print(json.dumps(value, indent=2))
    else:
        console.print(str(value))


@config.command("set")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.argument("value")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value.

    Use 'true'/'false' for booleans and plain numbers for numeric settings.

    Example:
        task-timer config set tracker.tick_interval 0.5
        task-timer config set notifications.enabled true
    """
    config_mgr = _load_config(ctx)
    converted_value = _convert_value(value)

    try:
        config_mgr.set(key, converted_value)
        console.print(f"[green]✓[/green] Set {key} = {converted_value}")
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@config.command("reset")  # type: ignore[misc]
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_reset(ctx: click.Context, yes: bool) -> None:
    """Reset configuration to defaults.

    Example:
        task-timer config reset --yes
    """
    config_mgr = _load_config(ctx)

    if not yes:
        console.print("[yellow]Warning:[/yellow] This will reset all configuration to defaults.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    backup_path = config_mgr.config_path.with_suffix(".yml.backup")
    if config_mgr.config_path.exists():
        shutil.copy(config_mgr.config_path, backup_path)
        console.print(f"Backed up current config to {backup_path}")

    config_mgr.reset()
    console.print("[green]✓[/green] Configuration reset to defaults")


@config.command("validate")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_validate(ctx: click.Context) -> None:
    """Validate configuration file."""
    config_mgr = _load_config(ctx)

    try:
        config_mgr.validate()
        console.print("[green]✓[/green] Configuration is valid")
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@config.command("path")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_path(ctx: click.Context) -> None:
    """Show path to configuration file."""
    console.print(str(_load_config(ctx).config_path))
