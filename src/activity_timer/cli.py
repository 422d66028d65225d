"""Command-line interface for the activity timer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .config import TimerSettings
from .db import RecordStore
from .errors import ParseError, StorageError
from .paths import get_log_path
from .reporting import RecordTablePrinter
from .session import TimerSession, add_manual_entry
from .shell import CommandShell

app = typer.Typer(help="Interactive single-activity time tracker.")

logger = logging.getLogger(__name__)


@app.callback(no_args_is_help=True)
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        path_type=Path,
        help="Where to write logs. Defaults to the application data directory.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        filename=log_file or get_log_path(),
    )


@app.command()
def run(
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        path_type=Path,
        help="Location of the timer SQLite database.",
    ),
    show_count: int = typer.Option(
        10,
        "--show-count",
        min=0,
        help="Number of records 'show' prints when no number is given.",
    ),
) -> None:
    """Start the interactive timer prompt."""
    settings = TimerSettings.from_options(db_path=db_path, show_count=show_count)
    try:
        with RecordStore.open(settings.db_path) as store:
            session = TimerSession(store)
            CommandShell(session, store, settings).run()
    except StorageError as exc:
        logger.error("Aborting: %s", exc)
        typer.echo(f"Storage error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command()
def show(
    count: int = typer.Argument(10, min=0, help="How many recent records to print."),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        path_type=Path,
        help="Location of the timer SQLite database.",
    ),
) -> None:
    """Print the most recent records as a table."""
    settings = TimerSettings.from_options(db_path=db_path)
    try:
        with RecordStore.open(settings.db_path) as store:
            records = store.query_recent(count)
    except StorageError as exc:
        typer.echo(f"Storage error: {exc}", err=True)
        raise typer.Exit(code=1)
    RecordTablePrinter(echo=typer.echo).print_records(records)


@app.command()
def manual(
    category: str = typer.Option("", "--category", "-c", help="Activity category."),
    description: str = typer.Option("", "--description", "-d", help="Activity description."),
    start: str = typer.Option(..., "--start", help="Start time, e.g. '2024-06-01 14:30'."),
    end: str = typer.Option(..., "--end", help="End time, e.g. '2024-06-01 16:30'."),
    detail: Optional[List[str]] = typer.Option(
        None, "--detail", help="Detail line; repeat for several lines."
    ),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        path_type=Path,
        help="Location of the timer SQLite database.",
    ),
) -> None:
    """Record a historical activity with explicit start and end times."""
    settings = TimerSettings.from_options(db_path=db_path)
    try:
        with RecordStore.open(settings.db_path) as store:
            record = add_manual_entry(
                store,
                category,
                description,
                start,
                end,
                detail=detail or (),
                formats=settings.time_formats,
            )
    except ParseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    except StorageError as exc:
        typer.echo(f"Storage error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(
        f"Manual entry added for: {record.description}. "
        f"Total time: {record.total_time_seconds} seconds"
    )
