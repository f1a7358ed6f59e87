"""Directive schema CLI commands: validate and show."""

from pathlib import Path

import click
import yaml

from edict.directive import SchemaLoader


def _schema_path(ctx: click.Context, path: Path | None) -> Path:
    if path is not None:
        return path
    return ctx.obj.schema_path


@click.group()
def schema():
    """Directive schema commands."""
    pass


@schema.command()
@click.option(
    "--path",
    "schema_path",
    default=None,
    type=click.Path(path_type=Path),
    help="Directive YAML directory (default: EDICT_SCHEMA_PATH or ./directives).",
)
@click.pass_context
def validate(ctx: click.Context, schema_path: Path | None):
    """Load every directive YAML file and report invalid ones."""
    path = _schema_path(ctx, schema_path)
    if not path.exists():
        click.echo(f"Error: Directive directory not found at {path}", err=True)
        raise SystemExit(1)

    loader = SchemaLoader(path)
    loader.load_all(strict=False)

    for yaml_file, message in loader.failures.items():
        click.echo(click.style(f"  ✗ {yaml_file.name}: {message}", fg="red"))

    directives = loader.list_directives()
    click.echo(f"\nLoaded {len(directives)} directive(s):")
    for name in sorted(directives):
        loaded = loader.get_schema(name)
        click.echo(
            f"  ✓ {name} ({len(loaded.properties)} properties, "
            f"{len(loaded.models)} models, {len(loaded.transactions)} transactions)"
        )

    if loader.failures:
        click.echo(
            click.style(f"\n{len(loader.failures)} invalid file(s) found", fg="red", bold=True)
        )
        raise SystemExit(1)

    click.echo(click.style("\nAll directives are valid.", fg="green", bold=True))


@schema.command()
@click.argument("name")
@click.option(
    "--path",
    "schema_path",
    default=None,
    type=click.Path(path_type=Path),
    help="Directive YAML directory (default: EDICT_SCHEMA_PATH or ./directives).",
)
@click.pass_context
def show(ctx: click.Context, name: str, schema_path: Path | None):
    """Print the properties, models, validations and callbacks of a directive."""
    loader = SchemaLoader(_schema_path(ctx, schema_path))
    loader.load_all(strict=False)

    loaded = loader.get_schema(name)
    if loaded is None:
        click.echo(f"Error: Directive '{name}' not found", err=True)
        raise SystemExit(1)

    click.echo(yaml.safe_dump(loaded.describe(), sort_keys=False).rstrip())
