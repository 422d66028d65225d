"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Iterable, Union

from .config import DISPLAY_FMT
from .models import TimerRecord

_RULE_WIDTH = 120


class RecordTablePrinter:
    """Render recorded sessions as a fixed-width console table."""

    def __init__(self, echo: Callable[[str], None] = print) -> None:
        self.echo = echo

    def print_records(self, records: Iterable[TimerRecord]) -> None:
        records = list(records)
        if not records:
            self.echo("No timer records found.")
            return

        self.echo("=" * _RULE_WIDTH)
        self.echo(
            f"{'Category':<15} | {'Description':<20} | {'Duration':<20} | "
            f"{'Start Time':<30} | {'End Time':<30}"
        )
        self.echo("=" * _RULE_WIDTH)
        for record in records:
            self.echo(format_row(record))
        self.echo("=" * _RULE_WIDTH)


def format_row(record: TimerRecord) -> str:
    return (
        f"{record.category:<15} | {record.description:<20} | "
        f"{format_duration(record.total_time_seconds):<20} | "
        f"{format_timestamp(record.start_time):<30} | "
        f"{format_timestamp(record.end_time):<30}"
    )


def format_duration(seconds: int) -> str:
    seconds = int(seconds)
    sign = "-" if seconds < 0 else ""
    minutes, secs = divmod(abs(seconds), 60)
    return f"{sign + str(minutes):>4} min {secs:02d} sec"


def format_seconds(value: timedelta) -> str:
    return f"{int(value.total_seconds())} seconds"


def format_timestamp(value: Union[datetime, str]) -> str:
    """Local time to the second, or the raw text if it is not a timestamp."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.astimezone().strftime(DISPLAY_FMT)
