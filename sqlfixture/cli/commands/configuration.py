"""Configuration management CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.markup import escape

from sqlfixture.cli.utils import console
from sqlfixture.config import create_sample_config, get_config
from sqlfixture.exceptions import ConfigurationError


@click.group(name="config")
def config_group() -> None:
    """⚙️  Configuration management."""
    pass


@config_group.command(name="validate")
@click.argument("config_file", type=click.Path(exists=True), required=False)
@click.pass_context
def validate_command(ctx: click.Context, config_file: Optional[str]) -> None:
    """Validate configuration file."""
    config_file = config_file or (ctx.obj or {}).get('config')
    try:
        config = get_config(config_file, reload=True)
        databases = config.descriptors()
        console.print(f"[green]✅ Configuration is valid: {config_file or 'default location'}[/green]")
        console.print(f"Found {len(databases)} database(s): {', '.join(databases.keys())}")
        console.print(f"Project directory: [cyan]{config.resolve_project_dir()}[/cyan]")
    except ConfigurationError as exc:
        console.print(f"[red]❌ Configuration validation failed: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc


@config_group.command(name="init")
@click.argument("output_file", type=click.Path(), default="sqlfixture.yaml")
def init_command(output_file: str) -> None:
    """Create sample configuration file."""
    try:
        output_path = Path(output_file)
        if output_path.exists():
            click.confirm(f"File '{output_file}' exists. Overwrite?", abort=True)

        create_sample_config(output_path)
        console.print(f"[green]✅ Sample configuration created: {output_file}[/green]")
        console.print("\n[yellow]Next steps:[/yellow]")
        console.print("1. Point 'dsn' and 'dump' at your test database and SQL dump")
        console.print("2. Set required environment variables (e.g., REPORTING_DB_PASSWORD)")
        console.print(f"3. Validate: [cyan]sqlfixture config validate {output_file}[/cyan]")
    except click.Abort:
        raise
    except Exception as exc:
        console.print(f"[red]Error creating sample configuration: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
