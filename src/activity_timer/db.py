"""SQLite persistence for finished timer sessions."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Union

from .errors import StorageError
from .models import TimerRecord

logger = logging.getLogger(__name__)

# Largest value SQLite accepts for an INTEGER parameter.
MAX_SQLITE_INT = 2**63 - 1


def open_database(path: Path) -> sqlite3.Connection:
    """Open the SQLite database in autocommit mode."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path, isolation_level=None)
    except (OSError, sqlite3.Error) as exc:
        raise StorageError(f"Cannot open database at {path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("Database failure while trying to %s: %s", action, exc)
        raise StorageError(f"Failed to {action}: {exc}") from exc


def _dump_time(value: Union[datetime, str]) -> str:
    return value.isoformat() if isinstance(value, datetime) else value


def _load_time(value: str) -> Union[datetime, str]:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return value


class RecordStore:
    """Append-only store of :class:`TimerRecord` rows in the ``timer`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @classmethod
    @contextmanager
    def open(cls, path: Path) -> Iterator["RecordStore"]:
        """Open, initialize and eventually close a store at ``path``."""
        conn = open_database(path)
        try:
            store = cls(conn)
            store.initialize()
            yield store
        finally:
            conn.close()
            logger.debug("Closed database %s", path)

    def initialize(self) -> None:
        with _storage_errors("initialize the timer table"):
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS timer (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    category TEXT,
                    description TEXT,
                    detail TEXT,
                    start_time TEXT,
                    end_time TEXT,
                    total_time_seconds INTEGER
                );
                """
            )

    def insert(self, record: TimerRecord) -> int:
        """Append ``record`` and return the id assigned to it."""
        with _storage_errors("insert a timer record"):
            cur = self._conn.execute(
                """
                INSERT INTO timer (
                    category,
                    description,
                    detail,
                    start_time,
                    end_time,
                    total_time_seconds
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.category,
                    record.description,
                    record.detail_text,
                    _dump_time(record.start_time),
                    _dump_time(record.end_time),
                    record.total_time_seconds,
                ),
            )
        record_id = int(cur.lastrowid)
        logger.info(
            "Stored record %d (%s / %s, %d seconds)",
            record_id,
            record.category,
            record.description,
            record.total_time_seconds,
        )
        return record_id

    def query_recent(self, limit: int) -> list[TimerRecord]:
        """Return up to ``limit`` records, newest first."""
        if limit < 0:
            raise ValueError("limit must be non-negative")
        if limit == 0:
            return []
        with _storage_errors("read timer records"):
            rows = self._conn.execute(
                """
                SELECT
                    id,
                    category,
                    description,
                    detail,
                    start_time,
                    end_time,
                    total_time_seconds
                FROM timer
                ORDER BY id DESC
                LIMIT ?;
                """,
                (min(limit, MAX_SQLITE_INT),),
            ).fetchall()
        return [_row_to_record(row) for row in rows]


def _row_to_record(row: sqlite3.Row) -> TimerRecord:
    detail = row["detail"]
    return TimerRecord(
        id=row["id"],
        category=row["category"] or "",
        description=row["description"] or "",
        detail=detail.split("\n") if detail else [],
        start_time=_load_time(row["start_time"]),
        end_time=_load_time(row["end_time"]),
        total_time_seconds=int(row["total_time_seconds"] or 0),
    )
