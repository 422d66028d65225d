"""Default locations for the timer database and log file."""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "ActivityTimer"
DB_FILENAME = "timer.db"
LOG_FILENAME = "timer.log"


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=False, ensure_exists=True)


def get_db_path() -> Path:
    """The SQLite file used when no ``--db`` option is given."""
    return _dirs().user_data_path / DB_FILENAME


def get_log_path() -> Path:
    return _dirs().user_log_path / LOG_FILENAME
