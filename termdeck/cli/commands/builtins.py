"""List built-in terminal commands."""

import click

from ...core.dispatcher import CommandDispatcher
from ..helpers import print_table


@click.command('commands')
def list_commands():
    """List commands handled without the shell"""
    dispatcher = CommandDispatcher()
    rows = [[name, description] for name, description in dispatcher.builtin_commands()]
    print_table(["COMMAND", "DESCRIPTION"], rows)
    click.echo("\nAny other command is forwarded to the shell.")
