"""
ContactService tests: store coordination, snapshot publishing, error mapping
and the operation log.
"""
import sqlite3

import pytest

from contactbook.errors import ContactNotFoundError, ContactWriteError, StoreNotInitializedError
from contactbook.models import Contact
from contactbook.observable import QueueDispatcher
from contactbook.services.contact_svc import ContactService
from contactbook.settings import Settings

TIMEOUT = 5


def _names(svc):
    return [c.name for c in svc.contacts.value]


def test_mutations_before_initialize_raise_in_caller(settings):
    svc = ContactService(settings)
    try:
        with pytest.raises(StoreNotInitializedError):
            svc.require_store()
        with pytest.raises(StoreNotInitializedError):
            svc.insert("Ana", "1")
        with pytest.raises(StoreNotInitializedError):
            svc.delete_all()
    finally:
        svc.shutdown()


def test_initialize_loads_existing_rows_once(settings, tmp_db_path):
    first = ContactService(settings)
    first.initialize()
    first.insert("Ana", "1").result(TIMEOUT)
    first.shutdown()

    svc = ContactService(settings)
    try:
        svc.initialize()
        assert _names(svc) == ["Ana"]
        store = svc.require_store()
        svc.initialize("/ignored/second/location.db")
        assert svc.require_store() is store
    finally:
        svc.shutdown()


def test_insert_publishes_fresh_snapshot(service):
    seen = []
    service.contacts.subscribe(seen.append)
    new_id = service.insert("Ana", "555-1111").result(TIMEOUT)
    assert seen[-1] == [Contact(id=new_id, name="Ana", phone="555-1111")]


def test_snapshot_is_ordered_by_name(service):
    for name in ("Beto", "Ana", "Carla"):
        service.insert(name, "1")
    service.refresh().result(TIMEOUT)
    assert _names(service) == ["Ana", "Beto", "Carla"]


def test_update_keeps_id(service):
    cid = service.insert("Ana", "1").result(TIMEOUT)
    assert service.update(Contact(id=cid, name="Ana", phone="2")).result(TIMEOUT) == 1
    assert service.contacts.value == [Contact(id=cid, name="Ana", phone="2")]


def test_update_missing_id_fails_but_still_reloads(service, tmp_db_path):
    service.insert("Ana", "1").result(TIMEOUT)
    # change the file behind the service's back; the reload must pick it up
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("INSERT INTO contacts(name, phone) VALUES ('Beto', '2')")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(ContactNotFoundError):
        service.update(Contact(id=999, name="X", phone="Y")).result(TIMEOUT)
    assert _names(service) == ["Ana", "Beto"]


def test_delete_and_delete_missing(service):
    cid = service.insert("Ana", "1").result(TIMEOUT)
    assert service.delete(cid).result(TIMEOUT) == 1
    assert service.contacts.value == []
    with pytest.raises(ContactNotFoundError):
        service.delete(cid).result(TIMEOUT)


def test_delete_all_twice_leaves_empty_snapshot(service):
    service.insert("Ana", "1")
    service.insert("Beto", "2")
    assert service.delete_all().result(TIMEOUT) == 2
    assert service.contacts.value == []
    assert service.delete_all().result(TIMEOUT) == 0
    assert service.contacts.value == []


def test_insert_failure_maps_to_write_error(service, tmp_db_path):
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("DROP TABLE contacts")
        conn.commit()
    finally:
        conn.close()
    with pytest.raises(ContactWriteError):
        service.insert("Ana", "1").result(TIMEOUT)


def test_mutations_are_serialized_last_snapshot_wins(service):
    futures = [service.insert(f"Name {chr(65 + i)}", str(i)) for i in range(20)]
    futures.append(service.delete_all())
    futures.append(service.insert("Zed", "z"))
    for f in futures:
        f.result(TIMEOUT)
    assert _names(service) == ["Zed"]


def test_results_are_delivered_on_the_dispatcher(settings):
    dispatcher = QueueDispatcher()
    svc = ContactService(settings, dispatcher)
    try:
        svc.initialize()
        seen = []
        svc.contacts.subscribe(seen.append)
        pending = svc.insert("Ana", "1")
        new_id = dispatcher.run_until_complete(pending, timeout=TIMEOUT)
        assert seen[-1] == [Contact(id=new_id, name="Ana", phone="1")]
    finally:
        svc.shutdown()


def test_operation_log_records_each_mutation(service, tmp_db_path):
    cid = service.insert("Ana", "1").result(TIMEOUT)
    service.update(Contact(id=cid, name="Ana", phone="2")).result(TIMEOUT)
    with pytest.raises(ContactNotFoundError):
        service.delete(cid + 1).result(TIMEOUT)

    total, rows = service.operation_history(size=10)
    assert total == 3
    by_action = {r["action"]: r for r in rows}
    assert by_action["CONTACT_INSERT"]["result"] == "OK"
    assert by_action["CONTACT_INSERT"]["entity_id"] == str(cid)
    assert '"phone": "1"' in by_action["CONTACT_UPDATE"]["before_json"]
    assert '"phone": "2"' in by_action["CONTACT_UPDATE"]["after_json"]
    assert by_action["CONTACT_DELETE"]["result"] == "ERROR"
    assert "contact_not_found" in by_action["CONTACT_DELETE"]["err_msg"]

    total, rows = service.operation_history(action="CONTACT_INSERT")
    assert total == 1


def test_operation_log_can_be_disabled(tmp_db_path):
    svc = ContactService(Settings(db_path=tmp_db_path, operation_log=False))
    try:
        svc.initialize()
        svc.insert("Ana", "1").result(TIMEOUT)
        assert svc.operation_history() == (0, [])
    finally:
        svc.shutdown()
    conn = sqlite3.connect(tmp_db_path)
    try:
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type='table' AND name='operation_log'"
        ).fetchone()
    finally:
        conn.close()
    assert row is None


def test_failing_observer_does_not_block_the_result(service):
    calls = []

    def broken(snapshot):
        calls.append(snapshot)
        if len(calls) > 1:
            raise RuntimeError("render failed")

    seen = []
    service.contacts.subscribe(broken)
    service.contacts.subscribe(seen.append)

    new_id = service.insert("Ana", "1").result(TIMEOUT)
    assert len(calls) == 2
    assert seen[-1] == [Contact(id=new_id, name="Ana", phone="1")]
    assert service.contacts.value == seen[-1]
