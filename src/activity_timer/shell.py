"""Line-oriented command loop driving the timer session."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import typer

from .config import TimerSettings
from .db import RecordStore
from .errors import CommandError, ParseError
from .reporting import RecordTablePrinter, format_seconds
from .session import TimerSession, add_manual_entry, parse_local_time

logger = logging.getLogger(__name__)

COMMAND_PROMPT = (
    "Enter 'start' to start the timer, 'stop' to stop it, 'pause' to pause it, "
    "'resume' to resume it, 'manual' to manually input an event, 'exit' to exit, "
    "or 'show <number>' to display last <number> entries:"
)


def prompt_line(text: str) -> str:
    return typer.prompt(text, default="", show_default=False, prompt_suffix="\n")


class CommandShell:
    """Reads commands one at a time and applies them to a :class:`TimerSession`."""

    def __init__(
        self,
        session: TimerSession,
        store: RecordStore,
        settings: TimerSettings,
        *,
        read_line: Optional[Callable[[str], str]] = None,
        echo: Callable[[str], None] = typer.echo,
    ) -> None:
        self.session = session
        self.store = store
        self.settings = settings
        self.read_line = read_line or prompt_line
        self.echo = echo
        self._printer = RecordTablePrinter(echo=echo)
        self._commands: dict[str, Callable[[], None]] = {
            "start": self._start,
            "pause": self._pause,
            "resume": self._resume,
            "stop": self._stop,
            "manual": self._manual,
        }

    def run(self) -> None:
        """Process commands until ``exit`` or end of input."""
        logger.info("Command loop started.")
        while True:
            try:
                line = self.read_line(COMMAND_PROMPT)
                if not self.handle(line):
                    break
            except (EOFError, typer.Abort):
                logger.info("Input closed; leaving command loop.")
                break
        if self.session.is_active:
            logger.warning(
                "Exiting with an unfinished session for %r; it was not saved.",
                self.session.description,
            )
        logger.info("Command loop finished.")

    def handle(self, line: str) -> bool:
        """Apply one input line. Returns False once the loop should end."""
        text = line.strip()
        command = text.lower()
        if command == "exit":
            return False
        if command.split(maxsplit=1)[:1] == ["show"]:
            self._show(command)
            return True

        handler = self._commands.get(command)
        try:
            if handler is not None:
                handler()
            else:
                self.session.add_detail(text)
        except CommandError as exc:
            logger.debug("Invalid command: %s", exc)
            self.echo("Invalid command.")
        return True

    def _start(self) -> None:
        if self.session.is_active:
            raise CommandError("start", self.session.state)
        category = self.read_line("Enter the activity category:")
        description = self.read_line("Enter the activity description:")
        started = self.session.start(category, description)
        self.echo(f"Timer started for: {self.session.description} at {started}")

    def _pause(self) -> None:
        paused = self.session.pause()
        self.echo(
            f"Timer paused for: {self.session.description} at {paused}. "
            f"Total running time: {format_seconds(self.session.accumulated)}"
        )

    def _resume(self) -> None:
        resumed = self.session.resume()
        self.echo(f"Timer resumed for: {self.session.description} at {resumed}")

    def _stop(self) -> None:
        record = self.session.stop()
        self.echo(
            f"Timer stopped for: {record.description} at {record.end_time}. "
            f"Total running time: {record.total_time_seconds} seconds"
        )

    def _manual(self) -> None:
        formats = self.settings.time_formats
        category = self.read_line("Enter the activity category:")
        description = self.read_line("Enter the activity description:")
        try:
            start_text = self.read_line("Enter the start time (e.g., '2024-06-01 14:30'):")
            parse_local_time(start_text, "start_time", formats)
            end_text = self.read_line("Enter the end time (e.g., '2024-06-01 16:30'):")
            parse_local_time(end_text, "end_time", formats)
            detail = self._read_detail_lines()
            record = add_manual_entry(
                self.store,
                category,
                description,
                start_text,
                end_text,
                detail=detail,
                formats=formats,
            )
        except ParseError as exc:
            logger.info("Discarded manual entry: %s", exc)
            label = exc.field.replace("_", " ")
            self.echo(f"Error parsing {label}: {exc.reason}")
            return
        self.echo(
            f"Manual entry added for: {record.description}. "
            f"Total time: {record.total_time_seconds} seconds"
        )

    def _read_detail_lines(self) -> list[str]:
        lines: list[str] = []
        while True:
            line = self.read_line("Enter a detail line (leave blank to finish):").strip()
            if not line:
                return lines
            lines.append(line)

    def _show(self, command: str) -> None:
        parts = command.split()
        if len(parts) == 1:
            count = self.settings.default_show_count
        elif len(parts) == 2 and parts[1].isascii() and parts[1].isdigit():
            count = int(parts[1])
        else:
            self.echo("Please enter a valid number after 'show'.")
            return
        self._printer.print_records(self.store.query_recent(count))
