"""
Command-line interface for entity_synth.

Provides generate, inspect, and snapshot commands. Each reads either a
live MySQL catalog or a YAML catalog snapshot.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from entity_synth import __version__
from entity_synth.errors import EntitySynthError
from entity_synth.metadata.catalog import Catalog, SnapshotCatalog

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def source_options(func):
    """Catalog source options shared by every command."""
    options = [
        click.option(
            "--snapshot",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="YAML catalog snapshot to read instead of a live database",
        ),
        click.option(
            "--config",
            "config_file",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="YAML file with a 'connection' mapping",
        ),
        click.option("--database", type=str, default=None, help="Schema/database name"),
        click.option("--host", type=str, default=None, help="MySQL host"),
        click.option("--port", type=int, default=None, help="MySQL port"),
        click.option("--user", type=str, default=None, help="MySQL user"),
        click.option(
            "--password",
            type=str,
            default=None,
            envvar="ENTITY_SYNTH_DB_PASSWORD",
            help="MySQL password (or ENTITY_SYNTH_DB_PASSWORD)",
        ),
        click.option(
            "--timeout",
            type=float,
            default=None,
            help="Timeout in seconds for every catalog call",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@contextmanager
def open_catalog(
    snapshot: Optional[Path],
    config_file: Optional[Path],
    database: Optional[str],
    host: Optional[str],
    port: Optional[int],
    user: Optional[str],
    password: Optional[str],
    timeout: Optional[float],
) -> Iterator[Catalog]:
    """Open the snapshot or live catalog selected on the command line."""
    if snapshot is not None:
        yield SnapshotCatalog.from_yaml(snapshot)
        return

    from entity_synth.config import load_connection_config
    from entity_synth.metadata import MySQLCatalog

    config = load_connection_config(
        config_file,
        database=database,
        host=host,
        port=port,
        user=user,
        password=password,
        timeout=timeout,
    )
    console.print(f"Catalog: {config.describe()}")
    with MySQLCatalog(config) as catalog:
        yield catalog


@click.group()
@click.version_option(version=__version__, prog_name="entity_synth")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """
    Entity Synth - Model generator for relational schemas

    Reads a database catalog, infers the relationships between tables and
    writes sequelize-typescript models plus an init-models registry.
    """
    setup_logging(verbose)


@cli.command()
@source_options
@click.option(
    "--output_dir",
    type=click.Path(path_type=Path),
    required=True,
    help="Directory for the generated model files",
)
def generate(output_dir: Path, **source) -> None:
    """
    Generate model files for every table of a schema.

    Examples:

        # Live database
        entity_synth generate --database shop --user reader \\
            --output_dir src/models

        # Offline, from a snapshot
        entity_synth generate --snapshot shop.yaml --output_dir src/models
    """
    from entity_synth.output import OutputWriter
    from entity_synth.pipeline import GenerationPipeline

    console.print("[bold blue]Entity Synth Generation[/bold blue]")

    try:
        with open_catalog(**source) as catalog:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Inferring relationships...", total=None)
                result = GenerationPipeline(catalog).run()
                progress.update(task, completed=True)

        paths = OutputWriter(output_dir).write(result)
    except EntitySynthError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Generated Entities")
    table.add_column("Entity", style="cyan")
    table.add_column("Table", style="green")
    table.add_column("Fields", style="yellow", justify="right")
    table.add_column("Relationships", style="magenta", justify="right")

    for entity in result.entities:
        table.add_row(
            entity.entity_name,
            entity.table_name,
            str(len(entity.fields)),
            str(len(entity.relationships)),
        )

    console.print(table)
    console.print(f"\n[green]Wrote {len(paths)} files to: {output_dir}[/green]")


@cli.command()
@source_options
def inspect(**source) -> None:
    """
    Show the inferred relationships without writing any files.

    Example:

        entity_synth inspect --snapshot shop.yaml
    """
    from entity_synth.pipeline import GenerationPipeline

    try:
        with open_catalog(**source) as catalog:
            result = GenerationPipeline(catalog).run()
    except EntitySynthError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not result.relationship_count:
        console.print("[yellow]No foreign keys found.[/yellow]")
        return

    rel_table = Table(title="Inferred Relationships")
    rel_table.add_column("Entity", style="cyan")
    rel_table.add_column("Foreign Key", style="green")
    rel_table.add_column("Kind", style="blue")
    rel_table.add_column("Target", style="yellow")
    rel_table.add_column("Property", style="magenta")
    rel_table.add_column("Through", style="white")

    for entity in result.entities:
        for rel in entity.relationships:
            kind = rel.kind.value
            if rel.fallback_reason:
                kind = f"{kind} [dim]({rel.fallback_reason})[/dim]"
            rel_table.add_row(
                entity.entity_name,
                rel.foreign_key,
                kind,
                rel.target_entity,
                rel.property_name,
                rel.through or "-",
            )

    console.print(rel_table)


@cli.command()
@source_options
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Path of the YAML snapshot to write",
)
def snapshot(output: Path, **source) -> None:
    """
    Save the catalog to a YAML snapshot for offline generation.

    Example:

        entity_synth snapshot --database shop --user reader --output shop.yaml
    """
    try:
        with open_catalog(**source) as catalog:
            frozen = catalog.snapshot()
        frozen.to_yaml(output)
    except EntitySynthError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(
        f"[green]Saved {len(frozen.list_tables())} tables to: {output}[/green]"
    )


if __name__ == "__main__":
    cli()
