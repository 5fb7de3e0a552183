from __future__ import annotations

from sqlite3 import Connection, Row
from typing import Optional

SCHEMA_VERSION = 1


def table_exists(conn: Connection) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name='contacts'"
    ).fetchone()
    return row is not None


def get_schema_version(conn: Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def set_schema_version(conn: Connection, version: int):
    # PRAGMA does not accept bound parameters
    conn.execute(f"PRAGMA user_version = {int(version)}")


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT NOT NULL
        )
        """
    )


def drop_schema(conn: Connection):
    conn.execute("DROP TABLE IF EXISTS contacts")


def insert(conn: Connection, name: str, phone: str) -> int:
    cur = conn.execute(
        "INSERT INTO contacts(name, phone) VALUES(?, ?)",
        (name, phone),
    )
    return int(cur.lastrowid)


def list_all(conn: Connection) -> list[Row]:
    return conn.execute(
        "SELECT id, name, phone FROM contacts ORDER BY name ASC, id ASC"
    ).fetchall()


def get_one(conn: Connection, contact_id: int) -> Optional[Row]:
    return conn.execute(
        "SELECT id, name, phone FROM contacts WHERE id=?", (contact_id,)
    ).fetchone()


def update(conn: Connection, contact_id: int, name: str, phone: str) -> int:
    cur = conn.execute(
        "UPDATE contacts SET name=?, phone=? WHERE id=?",
        (name, phone, contact_id),
    )
    return cur.rowcount


def delete(conn: Connection, contact_id: int) -> int:
    cur = conn.execute("DELETE FROM contacts WHERE id=?", (contact_id,))
    return cur.rowcount


def delete_all(conn: Connection) -> int:
    cur = conn.execute("DELETE FROM contacts")
    return cur.rowcount
