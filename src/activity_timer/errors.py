"""Exception types raised by the timer."""

from __future__ import annotations

from .models import SessionState


class TimerError(Exception):
    """Base class for activity timer errors."""


class CommandError(TimerError):
    """A command was issued that is not valid in the current session state."""

    def __init__(self, command: str, state: SessionState) -> None:
        super().__init__(f"'{command}' is not allowed while {state.value}")
        self.command = command
        self.state = state


class ParseError(TimerError):
    """A manual entry field could not be interpreted."""

    def __init__(self, field: str, value: str, reason: str = "Failed to parse time") -> None:
        super().__init__(f"{reason} for {field}: {value!r}")
        self.field = field
        self.value = value
        self.reason = reason


class StorageError(TimerError):
    """The backing database could not be read or written."""
