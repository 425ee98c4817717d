"""SQLite connection management."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Generator


def connect(database_path: str) -> sqlite3.Connection:
    """Open a SQLite connection with WAL mode and Row results."""
    conn = sqlite3.connect(database_path, check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_connection(database_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Open a short-lived connection.

    Commits on clean exit, rolls back on exception, and always closes.
    """
    conn = connect(database_path)
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()
