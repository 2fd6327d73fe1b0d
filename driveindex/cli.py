"""CLI interface for driveindex."""

import logging
import sqlite3
import sys
from pathlib import Path

import click

from driveindex.config import Config
from driveindex.database import Database, FileStore, StoreOpenError
from driveindex.scanner import ScanOrchestrator, VolumeNotFoundError


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--drive", help="Scan only the specified drive (e.g. C, D, /mnt/data)")
@click.option("--delete-all", is_flag=True, help="Delete all data in the database before scanning")
@click.option("--database", type=click.Path(path_type=Path), help="Path to database file")
@click.pass_context
def scan(
    ctx: click.Context,
    drive: str | None,
    delete_all: bool,
    database: Path | None,
) -> None:
    """Index every file on the available volumes."""
    config: Config = ctx.obj["config"]
    db_path = database or config.database_path

    try:
        with Database(db_path) as db:
            orchestrator = ScanOrchestrator(FileStore(db), config.scanner)
            orchestrator.run(drive=drive, delete_all=delete_all)
    except StoreOpenError as e:
        click.echo(f"Failed to open database: {e}", err=True)
        sys.exit(1)
    except VolumeNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except sqlite3.Error as e:
        click.echo(f"Database error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


@cli.command()
@click.option("--database", type=click.Path(path_type=Path), help="Path to database file")
@click.pass_context
def status(ctx: click.Context, database: Path | None) -> None:
    """Show how many entries are indexed per host and volume."""
    config: Config = ctx.obj["config"]
    db_path = database or config.database_path

    if not db_path.exists():
        click.echo("No database found. Run 'driveindex scan' first.")
        return

    try:
        with Database(db_path) as db:
            rows = FileStore(db).summary()
    except StoreOpenError as e:
        click.echo(f"Failed to open database: {e}", err=True)
        sys.exit(1)

    if not rows:
        click.echo("No files indexed.")
        return

    click.echo("\nIndexed Volumes:")
    click.echo("-" * 72)
    click.echo("Host".ljust(25) + "Volume".ljust(25) + "Files".rjust(10) + "Size".rjust(12))
    click.echo("-" * 72)

    for row in rows:
        host = _truncate(row.host, 24)
        label = _truncate(row.volume_label or "(no label)", 24)
        click.echo(f"{host:<25}{label:<25}{row.files:>10,}{_format_bytes(row.total_bytes):>12}")


def _format_bytes(size: int | None) -> str:
    if size is None:
        return "0 B"
    size_f = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_f < 1024:
            return f"{size_f:.1f} {unit}"
        size_f /= 1024
    return f"{size_f:.1f} PB"


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return "..." + text[-(max_len - 3) :]


def main() -> None:
    """Entry point for the CLI."""
    cli(standalone_mode=True)  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
