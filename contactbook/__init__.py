"""Local contact book: SQLite store, snapshot-publishing service and view-state controller."""
from __future__ import annotations

__version__ = "0.1.0"
