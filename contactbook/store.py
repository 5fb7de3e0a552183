"""
Record store for contacts: owns the single-table schema and raw persistence.

Each operation opens its own connection through `db.get_conn`, so the store
can be called from the repository's worker thread while the initial load
runs on the caller's thread.
"""
from __future__ import annotations

import logging
import os
import sqlite3
from typing import Optional

from .db import get_conn
from .errors import StoreNotInitializedError
from .models import Contact
from .repository import contact_repo

logger = logging.getLogger(__name__)

# returned by insert() when SQLite rejects the row
INSERT_FAILED = -1


def _to_contact(row: sqlite3.Row) -> Contact:
    return Contact(id=int(row["id"]), name=row["name"], phone=row["phone"])


class ContactStore:
    def __init__(self) -> None:
        self._db_path: Optional[str] = None

    @property
    def db_path(self) -> Optional[str]:
        return self._db_path

    @property
    def is_initialized(self) -> bool:
        return self._db_path is not None

    def initialize(self, location: str) -> None:
        """
        Open or create the store at `location`.

        A schema version other than SCHEMA_VERSION drops and recreates the
        table; contacts are local data and are not migrated.
        """
        path = os.fspath(location)
        with get_conn(path) as conn:
            version = contact_repo.get_schema_version(conn)
            exists = contact_repo.table_exists(conn)
            if exists and version != contact_repo.SCHEMA_VERSION:
                logger.warning(
                    "contacts schema version %s != %s, recreating table",
                    version, contact_repo.SCHEMA_VERSION,
                )
                contact_repo.drop_schema(conn)
            contact_repo.ensure_schema(conn)
            contact_repo.set_schema_version(conn, contact_repo.SCHEMA_VERSION)
        self._db_path = path
        logger.info("contact store ready at %s", path)

    def _path(self) -> str:
        if self._db_path is None:
            raise StoreNotInitializedError()
        return self._db_path

    def insert(self, name: str, phone: str) -> int:
        path = self._path()
        try:
            with get_conn(path) as conn:
                return contact_repo.insert(conn, name, phone)
        except sqlite3.Error as e:
            logger.error("insert failed for %r: %s", name, e)
            return INSERT_FAILED

    def list_all(self) -> list[Contact]:
        with get_conn(self._path()) as conn:
            return [_to_contact(r) for r in contact_repo.list_all(conn)]

    def get(self, contact_id: int) -> Optional[Contact]:
        with get_conn(self._path()) as conn:
            row = contact_repo.get_one(conn, contact_id)
        return _to_contact(row) if row else None

    def update(self, contact_id: int, name: str, phone: str) -> int:
        with get_conn(self._path()) as conn:
            return contact_repo.update(conn, contact_id, name, phone)

    def delete(self, contact_id: int) -> int:
        with get_conn(self._path()) as conn:
            return contact_repo.delete(conn, contact_id)

    def delete_all(self) -> int:
        with get_conn(self._path()) as conn:
            return contact_repo.delete_all(conn)
