"""Edict CLI entry point."""

import importlib
import logging

import click

from edict.config import EdictConfig


@click.group()
@click.option(
    "--import",
    "-m",
    "modules",
    multiple=True,
    help="Module to import before running (registers hooks and operations).",
)
@click.pass_context
def cli(ctx: click.Context, modules: tuple[str, ...]):
    """Edict: declarative request directives CLI."""
    config = EdictConfig.from_env()
    logging.basicConfig(
        level=config.logging_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for module in modules:
        try:
            importlib.import_module(module)
        except ImportError as e:
            raise click.ClickException(f"Cannot import {module}: {e}") from e
    ctx.obj = config


# Register subcommands
from edict.cli.operations_cmd import operations  # noqa: E402
from edict.cli.schema_cmd import schema  # noqa: E402

cli.add_command(operations)
cli.add_command(schema)
