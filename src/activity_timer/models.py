"""Domain models for timed activity sessions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union


class SessionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(slots=True)
class TimerRecord:
    """A finalized session as written to (or read back from) the store."""

    category: str
    description: str
    # Rows written by other tools may hold timestamps that do not parse;
    # those are kept as the raw stored text.
    start_time: Union[datetime, str]
    end_time: Union[datetime, str]
    total_time_seconds: int
    detail: list[str] = field(default_factory=list)
    id: Optional[int] = None

    @property
    def detail_text(self) -> str:
        return "\n".join(self.detail)
