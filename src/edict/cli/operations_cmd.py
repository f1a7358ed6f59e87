"""List registered chain operations."""

import click

from edict.chain import OperationRegistry


@click.command()
def operations():
    """List registered property chain operations."""
    names = OperationRegistry.list_registered()
    if not names:
        click.echo("No operations registered.")
        return

    width = max(len(name) for name in names)
    for name in names:
        definition = OperationRegistry.get(name)
        marker = " (callback)" if definition.takes_callback else ""
        click.echo(f"  {name.ljust(width)}  {definition.description}{marker}")
