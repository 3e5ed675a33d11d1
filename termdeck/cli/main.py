"""Main CLI entry point for termdeck."""

import click

from .commands.bench import bench
from .commands.builtins import list_commands
from .commands.config import config
from .commands.parse import parse
from .commands.shell import shell
from .helpers import configure_logging


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """termdeck - terminal sessions with a built-in command interpreter"""
    configure_logging(verbose)


# Register commands
cli.add_command(shell)
cli.add_command(parse)
cli.add_command(list_commands)
cli.add_command(config)
cli.add_command(bench)


if __name__ == '__main__':
    cli()
