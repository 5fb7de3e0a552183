import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from contactbook.controllers.contact_controller import ContactController
from contactbook.services.contact_svc import ContactService
from contactbook.settings import Settings


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "contacts_test.db"
    # Point everything that falls back to load_settings() at this temp DB
    monkeypatch.setenv("CONTACTS_DB_PATH", str(path))
    return str(path)


@pytest.fixture()
def settings(tmp_db_path):
    return Settings(db_path=tmp_db_path)


@pytest.fixture()
def service(settings):
    svc = ContactService(settings)
    svc.initialize()
    yield svc
    svc.shutdown()


@pytest.fixture()
def controller(service):
    return ContactController(service)
