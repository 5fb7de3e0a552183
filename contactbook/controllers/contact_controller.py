"""
Contact controller: UI-facing state for the contact screen.

Holds the status message and the add/edit form mode, validates intents and
forwards them to ContactService. Expected failures end up as status messages;
StoreNotInitializedError is left to propagate.

Contract to the view:
    - controller.contacts.subscribe(render_list)
    - controller.message.subscribe(show_message), then controller.clear_message()
    - controller.editing_id.subscribe(set_form_mode)   # None means "adding"
"""
from __future__ import annotations

from concurrent.futures import Future
from typing import Optional

from ..domain.contact_rules import is_blank, is_valid_name
from ..errors import ContactError
from ..models import Contact
from ..observable import LiveValue
from ..services.contact_svc import ContactService

MSG_FIELDS_REQUIRED = "Please fill in all fields"
MSG_UPDATE_FIELDS_REQUIRED = "Please fill in all fields to update"
MSG_INVALID_NAME = "Name may only contain letters, spaces, periods, hyphens and apostrophes."
MSG_INSERTED = "Contact added successfully"
MSG_UPDATED = "Contact updated successfully"
MSG_DELETED = "Contact deleted successfully"
MSG_DELETED_ALL = "All contacts deleted successfully"
MSG_INSERT_FAILED = "Error adding contact"
MSG_UPDATE_FAILED = "Error updating contact"
MSG_DELETE_FAILED = "Error deleting contact"
MSG_DELETE_ALL_FAILED = "Error deleting contacts"


def _done(value: bool) -> Future:
    f: Future = Future()
    f.set_result(value)
    return f


class ContactController:
    def __init__(self, service: ContactService, *, validate_name_on_update: Optional[bool] = None) -> None:
        self._svc = service
        if validate_name_on_update is None:
            validate_name_on_update = service.settings.validate_name_on_update
        self._validate_name_on_update = validate_name_on_update
        self.message: LiveValue[str] = LiveValue("", service.dispatcher)
        self.editing_id: LiveValue[Optional[int]] = LiveValue(None, service.dispatcher)

    @property
    def contacts(self) -> LiveValue[list[Contact]]:
        return self._svc.contacts

    @property
    def is_editing(self) -> bool:
        return self.editing_id.value is not None

    # ---------- form mode ----------------------------------------------------
    def start_editing(self, contact: Contact) -> None:
        self.editing_id.set_value(contact.id)

    def cancel_edit(self) -> None:
        if self.editing_id.value is not None:
            self.editing_id.set_value(None)

    def submit(self, name: str, phone: str) -> Future:
        """Primary form action: insert while adding, update the edited contact otherwise."""
        editing = self.editing_id.value
        if editing is None:
            return self.insert(name, phone)
        return self.update(Contact(id=editing, name=name.strip(), phone=phone.strip()))

    # ---------- intents ------------------------------------------------------
    def insert(self, name: str, phone: str) -> Future:
        clean_name = name.strip()
        clean_phone = phone.strip()
        if is_blank(clean_name) or is_blank(clean_phone):
            return self._reject(MSG_FIELDS_REQUIRED)
        if not is_valid_name(clean_name):
            return self._reject(MSG_INVALID_NAME)

        pending = self._svc.insert(clean_name, clean_phone)
        return self._report(pending, MSG_INSERTED, MSG_INSERT_FAILED)

    def update(self, contact: Contact) -> Future:
        clean_name = contact.name.strip()
        clean_phone = contact.phone.strip()
        if is_blank(clean_name) or is_blank(clean_phone):
            return self._reject(MSG_UPDATE_FIELDS_REQUIRED)
        if self._validate_name_on_update and not is_valid_name(clean_name):
            return self._reject(MSG_INVALID_NAME)

        pending = self._svc.update(Contact(id=contact.id, name=clean_name, phone=clean_phone))

        def on_success() -> None:
            if self.editing_id.value == contact.id:
                self.editing_id.set_value(None)

        return self._report(pending, MSG_UPDATED, MSG_UPDATE_FAILED, on_success)

    def delete(self, contact: Contact) -> Future:
        pending = self._svc.delete(contact.id)
        if self.editing_id.value == contact.id:
            self.cancel_edit()
        return self._report(pending, MSG_DELETED, MSG_DELETE_FAILED)

    def delete_all(self) -> Future:
        pending = self._svc.delete_all()
        self.cancel_edit()
        return self._report(pending, MSG_DELETED_ALL, MSG_DELETE_ALL_FAILED)

    def clear_message(self) -> None:
        self.message.set_value("")

    # ---------- helpers ------------------------------------------------------
    def _reject(self, text: str) -> Future:
        self.message.set_value(text)
        return _done(False)

    def _report(self, pending: Future, ok_text: str, err_prefix: str, on_success=None) -> Future:
        """Turn the service future into a status message; runs where the service resolves it (UI context)."""
        outcome: Future = Future()

        def finish(f: Future) -> None:
            try:
                f.result()
            except ContactError as e:
                self.message.set_value(f"{err_prefix}: {e}")
                outcome.set_result(False)
                return
            except Exception as e:
                outcome.set_exception(e)
                return
            if on_success is not None:
                on_success()
            self.message.set_value(ok_text)
            outcome.set_result(True)

        pending.add_done_callback(finish)
        return outcome
