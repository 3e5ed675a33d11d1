"""Configuration management commands for termdeck."""

import json

import click
from rich.console import Console
from rich.prompt import Confirm

from ...services.exceptions import ConfigError
from ..helpers import get_config_manager

CONFIG_KEYS = ['max_sessions', 'max_output_lines', 'max_history_entries', 'session_idle_timeout']


def _coerce(value: str):
    """Turn a command-line value into a number when it looks like one."""
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


@click.group()
def config():
    """Manage session store configuration"""
    pass


@config.command()
@click.pass_context
def show(ctx):
    """Display current configuration"""
    config_manager = get_config_manager()

    try:
        store_config = config_manager.load_config()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    source = "saved" if config_manager.has_config() else "defaults"
    click.echo(f"Session store configuration ({source}):")
    click.echo(json.dumps(store_config.to_display_dict(), indent=2))


@config.command('set')
@click.argument('key', type=click.Choice(CONFIG_KEYS))
@click.argument('value')
@click.pass_context
def set_value(ctx, key, value):
    """Set a configuration value (timeouts in seconds)"""
    config_manager = get_config_manager()

    try:
        config_manager.update_config(**{key: _coerce(value)})
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Set {key} to {value}")


@config.command()
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
def reset(yes):
    """Reset configuration to defaults"""
    console = Console()

    if not yes:
        if not Confirm.ask("Reset session store configuration to defaults?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    get_config_manager().reset_config()
    console.print("[green]Configuration reset to defaults[/green]")
