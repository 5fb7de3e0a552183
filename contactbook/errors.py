"""Error taxonomy for the contact store and its coordinators.

Validation problems are not exceptions: the controller reports them as status
messages before anything reaches the store.
"""
from __future__ import annotations


class ContactError(Exception):
    """Base class for failures the controller turns into status messages."""


class StoreNotInitializedError(RuntimeError):
    """Raised when the store is used before initialize(); never caught by the controller."""

    def __init__(self, message: str = "contact store is not initialized; call initialize() first"):
        super().__init__(message)


class ContactWriteError(ContactError):
    """The store rejected a write."""


class ContactNotFoundError(ContactError):
    """An update or delete matched no row."""

    def __init__(self, contact_id: int):
        super().__init__(f"contact_not_found: {contact_id}")
        self.contact_id = contact_id
