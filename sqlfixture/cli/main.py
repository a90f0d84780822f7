"""Main CLI entry point for SQLFixture."""

from __future__ import annotations

import click

from sqlfixture import __version__
from sqlfixture.cli.commands import register_commands
from sqlfixture.cli.commands.configuration import config_group
from sqlfixture.cli.commands.database import db_group
from sqlfixture.cli.utils import console, setup_logging


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.option("--config", type=click.Path(exists=True), help="Path to configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, version: bool, config: str, verbose: bool) -> None:
    """SQLFixture - database fixtures for test suites."""
    ctx.ensure_object(dict)
    ctx.obj.update({"config": config, "verbose": verbose})
    setup_logging(verbose)

    if version:
        console.print(f"SQLFixture v{__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


COMMAND_REGISTRY = [
    db_group,
    config_group,
]

register_commands(cli, COMMAND_REGISTRY)


if __name__ == "__main__":
    cli()
