from __future__ import annotations

# contactbook/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os

from .settings import load_settings


def get_db_path(db_path: str | None = None) -> str:
    path = db_path or load_settings().db_path

    # make sure the parent directory exists
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open a SQLite connection. An explicit db_path wins, otherwise get_db_path().
    Autocommit mode, rows come back as sqlite3.Row.
    """
    path = get_db_path(db_path)
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()
