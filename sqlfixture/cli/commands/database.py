"""Database fixture CLI commands."""

from __future__ import annotations

from typing import Dict, Optional

import click
from rich.markup import escape
from rich.table import Table

from sqlfixture.cli.utils import console, print_exception
from sqlfixture.config import DatabaseDescriptor, get_config
from sqlfixture.exceptions import ConfigurationError, DatabaseConnectionError, SQLFixtureError
from sqlfixture.fixture import DatabaseModule


def _load_module(ctx: click.Context) -> DatabaseModule:
    config = get_config(ctx.obj.get('config'), reload=True)
    return DatabaseModule(config)


def _flag(value: bool) -> str:
    return "✓" if value else ""


def _skip_reason(descriptor: DatabaseDescriptor) -> str:
    if descriptor.populator:
        return f"populator: {descriptor.populator}"
    if not descriptor.dump:
        return "no dump configured"
    return "populate and cleanup disabled"


@click.group(name="db")
@click.pass_context
def db_group(ctx: click.Context) -> None:
    """🗄️  Database fixture management."""
    pass


@db_group.command(name="status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Connect every configured database and show its status."""
    try:
        module = _load_module(ctx)
        errors: Dict[str, str] = {}

        console.print("[bold blue]Database Status[/bold blue]\n")
        for key, descriptor in module.databases().items():
            try:
                module.registry.connect(key, descriptor)
            except DatabaseConnectionError as exc:
                errors[key] = exc.message

        try:
            status_info = module.status()
        finally:
            module.after_suite()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Database", style="cyan")
        table.add_column("Driver", style="green")
        table.add_column("Name")
        table.add_column("Populate", style="blue")
        table.add_column("Cleanup", style="blue")
        table.add_column("Reconnect", style="blue")
        table.add_column("Status", style="yellow")

        for key, info in status_info.items():
            status_text = "🟢 Connected" if info['connected'] else "🔴 Failed"
            table.add_row(
                key,
                info['scheme'],
                str(info['database'] or ""),
                _flag(info['populate']),
                _flag(info['cleanup']),
                _flag(info['reconnect']),
                status_text,
            )

        console.print(table)
        connected = sum(1 for info in status_info.values() if info['connected'])
        console.print(f"\nTotal: {connected} connected / {len(status_info)} configured")
        for key, message in errors.items():
            console.print(f"[red]{key}: {escape(message)}[/red]")
    except ConfigurationError as exc:
        console.print(f"[red]Configuration Error: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:
        print_exception("Error", exc, ctx.obj.get('verbose', False))
        raise SystemExit(1) from exc

    if errors:
        raise SystemExit(1)


@db_group.command(name="populate")
@click.pass_context
def populate_command(ctx: click.Context) -> None:
    """Clean up and load every database as at the start of a test run."""
    try:
        module = _load_module(ctx)
        console.print("[bold blue]Populating Databases[/bold blue]\n")
        try:
            module.before_suite()
            status_info = module.status()
        finally:
            module.after_suite()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Database", style="cyan")
        table.add_column("Dump", style="green")
        table.add_column("Populated", style="yellow")
        for key, info in status_info.items():
            populated = info['populated']
            if populated is None:
                populated_text = "⚪ Skipped"
            else:
                populated_text = "🟢 Yes" if populated else "🔴 No"
            table.add_row(key, str(module.descriptor(key).dump or ""), populated_text)

        console.print(table)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration Error: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
    except SQLFixtureError as exc:
        console.print(f"[red]Population failed: {escape(exc.message)}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:
        print_exception("Error", exc, ctx.obj.get('verbose', False))
        raise SystemExit(1) from exc


@db_group.command(name="dump")
@click.option("--database", "-d", help="Database to inspect (default: all)")
@click.option("--show-statements", is_flag=True, help="Print every line that would be executed")
@click.pass_context
def dump_command(ctx: click.Context, database: Optional[str], show_statements: bool) -> None:
    """Show how each dump is split into statements."""
    try:
        module = _load_module(ctx)
        keys = [database] if database else list(module.databases())

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Database", style="cyan")
        table.add_column("Dump", style="green")
        table.add_column("Lines", style="yellow", justify="right")

        listings = []
        for key in keys:
            descriptor = module.descriptor(key)
            module.loader.read_dump(key, descriptor)
            statements = module.loader.get_statements(key)
            if statements is None:
                table.add_row(key, str(descriptor.dump or ""), f"[dim]{escape(_skip_reason(descriptor))}[/dim]")
                continue
            table.add_row(key, descriptor.dump, str(len(statements)))
            listings.append((key, statements))

        console.print(table)

        if show_statements:
            for key, statements in listings:
                console.print(f"\n[bold blue]{key}[/bold blue]")
                for number, line in enumerate(statements, start=1):
                    console.print(f"[dim]{number:>4}[/dim] {escape(line)}")
    except ConfigurationError as exc:
        console.print(f"[red]Configuration Error: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:
        print_exception("Error", exc, ctx.obj.get('verbose', False))
        raise SystemExit(1) from exc
