"""The interactive timer state machine and manual entry helper."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from .config import TIME_FORMATS
from .db import RecordStore
from .errors import CommandError, ParseError
from .models import SessionState, TimerRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Current wall-clock time with the local UTC offset attached."""
    return datetime.now().astimezone()


class TimerSession:
    """Tracks a single activity through start, pause, resume and stop.

    Only pause and stop advance the banked duration, each by the time elapsed
    since the last start or resume. A stopped session is reset to idle and
    reused for the next cycle.
    """

    def __init__(self, store: RecordStore, clock: Clock = local_now) -> None:
        self._store = store
        self._clock = clock
        self.state = SessionState.IDLE
        self.category = ""
        self.description = ""
        self.detail: list[str] = []
        self.start_time: Optional[datetime] = None
        self.last_start_time: Optional[datetime] = None
        self.accumulated = timedelta(0)

    @property
    def is_active(self) -> bool:
        return self.state is not SessionState.IDLE

    def elapsed(self) -> timedelta:
        """Banked time plus the interval currently accruing, if any."""
        if self.state is SessionState.RUNNING and self.last_start_time is not None:
            return self.accumulated + (self._clock() - self.last_start_time)
        return self.accumulated

    def start(self, category: str, description: str) -> datetime:
        self._require("start", SessionState.IDLE)
        now = self._clock()
        self.category = category.strip()
        self.description = description.strip()
        self.detail = []
        self.start_time = now
        self.last_start_time = now
        self.accumulated = timedelta(0)
        self.state = SessionState.RUNNING
        logger.info("Started timer for %r at %s", self.description, now.isoformat())
        return now

    def pause(self) -> datetime:
        self._require("pause", SessionState.RUNNING)
        now = self._clock()
        self._bank(now)
        self.state = SessionState.PAUSED
        logger.info("Paused timer at %s (%s banked)", now.isoformat(), self.accumulated)
        return now

    def resume(self) -> datetime:
        self._require("resume", SessionState.PAUSED)
        now = self._clock()
        self.last_start_time = now
        self.state = SessionState.RUNNING
        logger.info("Resumed timer at %s", now.isoformat())
        return now

    def add_detail(self, line: str) -> None:
        """Append a note to the active session. Blank lines are ignored."""
        self._require("detail", SessionState.RUNNING, SessionState.PAUSED)
        text = line.strip()
        if not text:
            return
        self.detail.append(text)
        logger.debug("Added detail line %d", len(self.detail))

    def stop(self) -> TimerRecord:
        """Finalize the session, reset to idle and persist the record.

        The session is reset before the insert, so a storage failure still
        leaves it idle.
        """
        self._require("stop", SessionState.RUNNING, SessionState.PAUSED)
        now = self._clock()
        if self.state is SessionState.RUNNING:
            self._bank(now)
        record = TimerRecord(
            category=self.category,
            description=self.description,
            detail=list(self.detail),
            start_time=self.start_time,
            end_time=now,
            total_time_seconds=int(self.accumulated.total_seconds()),
        )
        self.reset()
        record.id = self._store.insert(record)
        return record

    def reset(self) -> None:
        self.state = SessionState.IDLE
        self.category = ""
        self.description = ""
        self.detail = []
        self.start_time = None
        self.last_start_time = None
        self.accumulated = timedelta(0)

    def _bank(self, now: datetime) -> None:
        self.accumulated += now - self.last_start_time

    def _require(self, command: str, *allowed: SessionState) -> None:
        if self.state not in allowed:
            logger.debug("Rejected %r while %s", command, self.state.value)
            raise CommandError(command, self.state)


def parse_local_time(
    value: str, field: str, formats: Sequence[str] = TIME_FORMATS
) -> datetime:
    """Parse ``value`` with the first matching format, as local civil time."""
    text = value.strip()
    for fmt in formats:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.astimezone()
    raise ParseError(field, value)


def add_manual_entry(
    store: RecordStore,
    category: str,
    description: str,
    start_text: str,
    end_text: str,
    detail: Iterable[str] = (),
    formats: Sequence[str] = TIME_FORMATS,
) -> TimerRecord:
    """Insert a historical record with explicit start and end times.

    Nothing is written unless both timestamps parse and the end is not
    before the start.
    """
    start_time = parse_local_time(start_text, "start_time", formats)
    end_time = parse_local_time(end_text, "end_time", formats)
    if end_time < start_time:
        raise ParseError("end_time", end_text, reason="End time precedes start time")

    record = TimerRecord(
        category=category.strip(),
        description=description.strip(),
        detail=[line.strip() for line in detail if line.strip()],
        start_time=start_time,
        end_time=end_time,
        total_time_seconds=int((end_time - start_time).total_seconds()),
    )
    record.id = store.insert(record)
    logger.info("Manual entry stored for %r", record.description)
    return record
