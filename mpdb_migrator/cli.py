"""
CLI Entry Point

Typer-based command line interface for the MySQLPlayerDataBridge migrator.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich.markup import escape

from mpdb_migrator.config import ConfigLoader, MigrationConfig
from mpdb_migrator.core.codec import CodecError, JsonItemCodec, LegacyCodec, load_codec
from mpdb_migrator.core.converter import RecordConverter
from mpdb_migrator.core.logger import MigrationLogger
from mpdb_migrator.core.migrator import FatalMigrationError, MigrationOrchestrator, MigrationSummary
from mpdb_migrator.core.session import MigrationSession
from mpdb_migrator.core.wizard import ConfigurationError, MigrationWizard, obfuscate
from mpdb_migrator.store import StoreError, create_store


# Initialize Typer app
app = typer.Typer(
    name="mpdb-migrate",
    help="MySQLPlayerDataBridge Migrator - Move inventories, ender chests and XP to a new database",
    add_completion=False,
)

console = Console()

DEFAULT_CONFIG = "config.yaml"


def load_config(config_path: str, require_env: bool = True) -> MigrationConfig:
    """Load and validate configuration file."""
    loader = ConfigLoader()
    try:
        return loader.load(config_path, require_env=require_env)
    except FileNotFoundError:
        console.print(f"[red]Error:[/] Configuration file not found: {config_path}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        raise typer.Exit(1)


def create_legacy_codec(config: MigrationConfig) -> LegacyCodec:
    """Load the legacy codec named in the configuration."""
    if not config.codec:
        console.print(
            "[red]Error:[/] No legacy codec configured. "
            "Set 'codec' to the import path of a MySQLPlayerDataBridge decoder."
        )
        raise typer.Exit(1)

    try:
        codec = load_codec(config.codec, **config.codec_options)
    except CodecError as e:
        console.print(f"[red]Codec error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if not isinstance(codec, LegacyCodec):
        console.print(f"[red]Codec error:[/] '{config.codec}' does not provide decode_items()")
        raise typer.Exit(1)
    return codec


def print_status(config: MigrationConfig) -> None:
    """Show the wizard menu for the given settings."""
    console.print(Panel(
        Text(MigrationWizard(config).describe().rstrip()),
        title=MigrationWizard.name,
    ))


def print_summary(summary: MigrationSummary, max_failures: int = 10) -> None:
    """Show a migration summary table."""
    table = Table(show_header=False, title="Migration Result")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Players processed", f"{summary.records_processed:,}")
    table.add_row("Migrated", f"[green]{summary.succeeded:,}[/]")
    table.add_row("Failed", f"[red]{summary.failed:,}[/]" if summary.failed else "0")
    table.add_row("Duration", f"{summary.elapsed_seconds:.1f}s")
    console.print(table)

    for failure in summary.failures[:max_failures]:
        console.print(
            f"  [red]✗[/] {failure.user.username} ({failure.user.uuid}) "
            f"[dim]{failure.stage}[/]: {escape(failure.message)}",
            highlight=False,
        )
    if summary.failed > max_failures:
        console.print(f"  ... and {summary.failed - max_failures} more failures")


def print_help(ctx: typer.Context, config_path: str) -> None:
    """Show the wizard menu for the config file (or defaults) and the command list."""
    if Path(config_path).exists():
        print_status(load_config(config_path, require_env=False))
    else:
        print_status(MigrationConfig())
    typer.echo(ctx.get_help())


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: str = typer.Option(DEFAULT_CONFIG, "--config", "-c", help="Configuration file"),
):
    """
    Show the migration wizard when no command is given.
    """
    if ctx.invoked_subcommand is not None:
        return

    print_help(ctx, config_path)


@app.command("set")
def set_parameter(
    config_path: str = typer.Argument(..., help="Path to configuration file"),
    parameter: str = typer.Argument(..., help="Source parameter, e.g. host or inventory_table"),
    value: str = typer.Argument(..., help="New value"),
):
    """
    Change a source database parameter and save it to the configuration file.

    Example:
        mpdb-migrate set config.yaml host 1.2.3.4
    """
    config = load_config(config_path, require_env=False)
    wizard = MigrationWizard(config)

    try:
        source = wizard.set(parameter, value)
    except ConfigurationError as e:
        console.print(
            f"[red]Invalid operation,[/] could not set {parameter} to "
            f"{obfuscate(value)} (is it a valid option?)",
            highlight=False,
        )
        console.print(f"  {escape(str(e))}", highlight=False)
        raise typer.Exit(1)

    key = parameter.lower()
    ConfigLoader().update_value(config_path, "source", key, getattr(source, key))

    print_status(config)
    console.print(f"[green]Successfully set[/] {key} to {obfuscate(value)}", highlight=False)


@app.command()
def start(
    config_path: str = typer.Argument(..., help="Path to configuration file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """
    Wipe the destination database and migrate all MySQLPlayerDataBridge data.
    """
    config = load_config(config_path)
    codec = create_legacy_codec(config)

    console.print(Panel(
        f"[bold]Migration: {escape(config.name)}[/]\n"
        f"Source: {obfuscate(config.source.host)}:{config.source.port} / {config.source.database}\n"
        f"Destination: {config.destination.backend} / {config.destination.database}\n"
        f"Schema version: {config.destination.schema_version}",
        title="Migration Configuration",
    ))

    if not yes:
        confirm = typer.confirm(
            "Existing data in the destination database will be wiped. Proceed?",
            default=False,
        )
        if not confirm:
            console.print("[yellow]Aborted by user[/]")
            raise typer.Exit(0)

    logger = MigrationLogger.from_config(config.logging, console=console)

    try:
        store = create_store(config.destination)
    except StoreError as e:
        console.print(f"[red]Destination error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    converter = RecordConverter(
        legacy_codec=codec,
        item_codec=JsonItemCodec(),
        schema_version=config.destination.schema_version,
    )
    orchestrator = MigrationOrchestrator(
        store,
        converter,
        logger,
        max_workers=config.import_settings.max_workers,
    )
    session = MigrationSession(config, orchestrator)

    try:
        summary = session.start().result()
    except FatalMigrationError as e:
        console.print(f"\n[red]Migration failed:[/] {escape(str(e))}")
        raise typer.Exit(1)
    finally:
        session.shutdown()

    print_summary(summary)
    if config.logging.export_json:
        console.print(f"\nLogs exported to: {config.logging.output_dir}/")


@app.command()
def status(
    config_path: str = typer.Argument(DEFAULT_CONFIG, help="Path to configuration file"),
):
    """
    Show the migration wizard with the current (masked) settings.
    """
    print_status(load_config(config_path, require_env=False))


@app.command("help")
def show_help(
    ctx: typer.Context,
    config_path: str = typer.Argument(DEFAULT_CONFIG, help="Path to configuration file"),
):
    """
    Show the migration wizard and the available commands.
    """
    print_help(ctx.parent or ctx, config_path)


@app.command("init-config")
def init_config(
    output: str = typer.Argument(DEFAULT_CONFIG, help="Output configuration file path"),
):
    """
    Create an example configuration file.
    """
    ConfigLoader.create_example_config(output)
    console.print(f"[green]Example configuration created:[/] {output}")
    console.print("\nEdit this file and set the following environment variables:")
    console.print("  - MPDB_HOST, MPDB_USER, MPDB_PASSWORD")
    console.print("  - HUSKSYNC_DB_HOST, HUSKSYNC_DB_USER, HUSKSYNC_DB_PASSWORD")


@app.command()
def version():
    """Show version information."""
    from mpdb_migrator import __version__
    console.print(f"MySQLPlayerDataBridge Migrator v{__version__}")


if __name__ == "__main__":
    app()
