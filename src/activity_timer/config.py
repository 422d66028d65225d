"""Configuration models and helpers for the activity timer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .paths import get_db_path

# Accepted manual-entry timestamp layouts, tried in order.
TIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
)

DISPLAY_FMT = "%Y-%m-%d %H:%M:%S"


@dataclass(slots=True)
class TimerSettings:
    """Runtime configuration for the timer shell and store."""

    db_path: Path = field(default_factory=get_db_path)
    time_formats: tuple[str, ...] = TIME_FORMATS
    default_show_count: int = 10

    @classmethod
    def from_options(
        cls,
        db_path: Optional[Path] = None,
        show_count: Optional[int] = None,
    ) -> "TimerSettings":
        return cls(
            db_path=Path(db_path) if db_path is not None else get_db_path(),
            default_show_count=show_count if show_count is not None else 10,
        )
