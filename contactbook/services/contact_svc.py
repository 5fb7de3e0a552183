"""
Contact service: the single coordination point between the controller and the
record store.

Every mutation runs on one worker thread together with a full reload of the
table, so mutations are serialized and the last published snapshot always
matches the last committed write. Snapshots and results are handed back to
the UI context through the dispatcher.

The default ImmediateDispatcher delivers on the `contacts-io` worker thread.
Hosts with a UI thread must pass a dispatcher that runs tasks on that thread
(QueueDispatcher pumped by the UI loop, or an equivalent).
"""
from __future__ import annotations

import logging
import sqlite3
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from ..errors import ContactNotFoundError, ContactWriteError, StoreNotInitializedError
from ..logs import LogContext, ensure_log_schema, search_logs
from ..models import Contact
from ..observable import ImmediateDispatcher, LiveValue
from ..settings import Settings, load_settings
from ..store import INSERT_FAILED, ContactStore

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, settings: Optional[Settings] = None, dispatcher=None) -> None:
        self._settings = settings or load_settings()
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._store: Optional[ContactStore] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="contacts-io")
        self.contacts: LiveValue[list[Contact]] = LiveValue([], self._dispatcher)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def dispatcher(self):
        return self._dispatcher

    def initialize(self, location: Optional[str] = None) -> None:
        """Create the store once and load the first snapshot; later calls do nothing."""
        if self._store is not None:
            return
        store = ContactStore()
        store.initialize(location or self._settings.db_path)
        if self._settings.operation_log:
            ensure_log_schema(store.db_path)
        self._store = store
        self.contacts.set_value(store.list_all())

    def require_store(self) -> ContactStore:
        if self._store is None:
            raise StoreNotInitializedError()
        return self._store

    # ---------- mutations ----------------------------------------------------
    def insert(self, name: str, phone: str) -> Future:
        store = self.require_store()

        def op(log: LogContext) -> int:
            log.set_payload({"name": name, "phone": phone})
            new_id = store.insert(name, phone)
            if new_id == INSERT_FAILED:
                raise ContactWriteError("insert_failed")
            log.set_entity("CONTACT", str(new_id))
            log.set_after({"id": new_id, "name": name, "phone": phone})
            return new_id

        return self._submit("CONTACT_INSERT", op)

    def update(self, contact: Contact) -> Future:
        store = self.require_store()

        def op(log: LogContext) -> int:
            log.set_entity("CONTACT", str(contact.id))
            before = store.get(contact.id)
            log.set_before(before.model_dump() if before else None)
            count = store.update(contact.id, contact.name, contact.phone)
            if count == 0:
                raise ContactNotFoundError(contact.id)
            log.set_after(contact.model_dump())
            return count

        return self._submit("CONTACT_UPDATE", op)

    def delete(self, contact_id: int) -> Future:
        store = self.require_store()

        def op(log: LogContext) -> int:
            log.set_entity("CONTACT", str(contact_id))
            before = store.get(contact_id)
            log.set_before(before.model_dump() if before else None)
            count = store.delete(contact_id)
            if count == 0:
                raise ContactNotFoundError(contact_id)
            return count

        return self._submit("CONTACT_DELETE", op)

    def delete_all(self) -> Future:
        store = self.require_store()

        def op(log: LogContext) -> int:
            count = store.delete_all()
            log.set_payload({"deleted": count})
            return count

        return self._submit("CONTACT_DELETE_ALL", op)

    def refresh(self) -> Future:
        """Reload the snapshot without writing anything."""
        store = self.require_store()
        return self._submit(None, lambda log: len(store.list_all()))

    def operation_history(self, *, q: Optional[str] = None, action: Optional[str] = None,
                          page: int = 1, size: int = 50) -> tuple[int, list[dict]]:
        """Page through the operation log, newest first. Returns (total, rows)."""
        store = self.require_store()
        if not self._settings.operation_log:
            return 0, []
        return search_logs(store.db_path, q, action, None, None, page, size)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # ---------- plumbing -----------------------------------------------------
    def _submit(self, action: Optional[str], op: Callable[[LogContext], Any]) -> Future:
        result: Future = Future()
        self._executor.submit(self._run, action, op, result)
        return result

    def _run(self, action: Optional[str], op: Callable[[LogContext], Any], result: Future) -> None:
        """Worker body: mutate, reload unconditionally, hand both to the UI context."""
        store = self.require_store()
        log = LogContext(
            action or "CONTACT_REFRESH",
            db_path=store.db_path,
            enabled=self._settings.operation_log and action is not None,
        )
        outcome: Any = None
        error: Optional[BaseException] = None
        try:
            outcome = op(log)
        except sqlite3.Error as e:
            logger.error("%s failed: %s", log.action, e)
            error = ContactWriteError(str(e))
        except Exception as e:
            error = e

        try:
            log.write("OK" if error is None else "ERROR", None if error is None else str(error))
            try:
                snapshot = store.list_all()
            except sqlite3.Error as e:
                logger.error("reload after %s failed: %s", log.action, e)
                if error is None:
                    error = ContactWriteError(str(e))
            else:
                self.contacts.post_value(snapshot)
        except Exception:
            logger.exception("publishing snapshot after %s failed", log.action)
        finally:
            # the caller's future settles no matter what happened above
            if error is None:
                self._dispatcher.post(lambda: result.set_result(outcome))
            else:
                self._dispatcher.post(lambda: result.set_exception(error))
