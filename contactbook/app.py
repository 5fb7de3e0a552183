"""
Application wiring: one settings object, one service (and so one store), one
controller, built once at startup and handed to the view.

Without a `dispatcher`, snapshots, messages and form-mode changes are
delivered on the service's worker thread. A host with a UI thread must pass a
QueueDispatcher (or equivalent) and pump it from its main loop.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .controllers.contact_controller import ContactController
from .services.contact_svc import ContactService
from .settings import Settings, configure_logging, load_settings


@dataclass
class ContactApp:
    settings: Settings
    service: ContactService
    controller: ContactController

    def close(self) -> None:
        self.service.shutdown(wait=True)


def create_app(settings: Optional[Settings] = None, dispatcher=None, *, setup_logging: bool = False) -> ContactApp:
    settings = settings or load_settings()
    if setup_logging:
        configure_logging(settings)
    service = ContactService(settings, dispatcher)
    service.initialize(settings.db_path)
    controller = ContactController(service)
    return ContactApp(settings=settings, service=service, controller=controller)
