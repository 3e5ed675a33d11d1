"""Parse command for termdeck."""

import json

import click

from ...core.parser import parse_command
from ...models.command import ParseFailure


@click.command()
@click.argument('line')
@click.pass_context
def parse(ctx, line):
    """Show how a command line is parsed"""
    result = parse_command(line)

    if result is None:
        click.echo("Nothing to parse (empty line)")
        return

    click.echo(json.dumps(result.to_dict(), indent=2))
    if isinstance(result, ParseFailure):
        ctx.exit(1)
