"""henka command line interface.

Usage:
    henka status         Show which migrations are applied, pending or missing
    henka config show    Print the effective configuration
    henka config init    Write a default configuration file
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer import Option

from henka.config import get_config, write_default_config
from henka.driver import SqliteDriver
from henka.errors import HenkaError
from henka.logging_config import setup_logging
from henka.migration import Status, ValidationResult
from henka.paths import paths
from henka.reconciler import Henka
from henka.source import FilesSource

app = typer.Typer(
    name="henka",
    help="henka - database migration catalog and state checker",
    add_completion=False,
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

console = Console()

EXIT_MISSING = 1
EXIT_ERROR = 2

_STATUS_STYLES = {
    Status.APPLIED: "green",
    Status.PENDING: "yellow",
    Status.MISSING: "red",
}


def _get_version() -> str:
    try:
        from importlib.metadata import version

        return version("henka")
    except Exception:
        return "0.0.0a0"


def version_callback(value: bool) -> None:
    if value:
        console.print(f"henka version {_get_version()}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        Option("--version", "-V", callback=version_callback, is_eager=True, help="Show version"),
    ] = False,
    verbose: Annotated[
        bool,
        Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """henka - database migration catalog and state checker."""
    config = get_config()
    setup_logging(
        level="DEBUG" if verbose else config.general.log_level,
        format=config.general.log_format,  # type: ignore[arg-type]
    )


# =============================================================================
# Status
# =============================================================================


def _render_result(result: ValidationResult) -> None:
    table = Table(title="Migrations")
    table.add_column("Version", justify="right")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Applied at")
    table.add_column("Undo", justify="center")

    for state in result.migrations:
        style = _STATUS_STYLES[state.status]
        table.add_row(
            str(state.version),
            escape(state.name),
            f"[{style}]{state.status.value}[/{style}]",
            state.applied_at.isoformat(sep=" ", timespec="seconds") if state.applied_at else "-",
            "✓" if state.can_undo else "",
        )

    console.print(table)
    console.print(
        f"applied: [green]{result.applied_count}[/green]  "
        f"pending: [yellow]{result.pending_count}[/yellow]  "
        f"missing: [red]{result.missing_count}[/red]"
    )


@app.command()
def status(
    migrations_dir: Annotated[
        Optional[Path], Option("--dir", "-d", help="Migrations directory")
    ] = None,
    database: Annotated[
        Optional[Path], Option("--db", help="SQLite database holding the migrations log")
    ] = None,
    table_name: Annotated[
        Optional[str], Option("--table", help="Migrations log table name")
    ] = None,
    json_output: Annotated[bool, Option("--json", "-j", help="JSON output")] = False,
) -> None:
    """Show which migrations are applied, pending or missing."""
    config = get_config()

    driver = SqliteDriver(
        database or config.driver.database,
        table_name or config.driver.table_name,
    )
    try:
        source = FilesSource(migrations_dir or config.source.migrations_dir)
        result = Henka(source, driver).validate()
    except HenkaError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    finally:
        driver.close()

    if json_output:
        console.print_json(result.model_dump_json())
    else:
        _render_result(result)

    if not result.is_consistent:
        raise typer.Exit(EXIT_MISSING)


# =============================================================================
# Config Commands
# =============================================================================


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    console.print_json(json.dumps(get_config().to_dict()))


@config_app.command("init")
def config_init(
    path: Annotated[Optional[Path], Option("--path", help="Where to write the file")] = None,
    force: Annotated[bool, Option("--force", "-f", help="Overwrite existing file")] = False,
) -> None:
    """Write a default configuration file."""
    target = path or paths.config_file
    if target.exists() and not force:
        console.print(f"[yellow]Config already exists at {target}[/yellow]")
        console.print("Use --force to overwrite")
        raise typer.Exit(1)

    written = write_default_config(target)
    console.print(f"[green]Created config at {written}[/green]")


def main_cli() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main_cli()
