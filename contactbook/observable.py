"""
Observable values and the UI-owning execution context.

Worker threads never touch observers directly: they post to a dispatcher that
stands for the UI thread. `LiveValue.post_value` conflates, so a slow UI only
ever sees the latest value.
"""
from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Task = Callable[[], None]


class ImmediateDispatcher:
    """Runs every task inline on the posting thread."""

    def post(self, task: Task) -> None:
        task()


class QueueDispatcher:
    """
    Tasks posted from any thread run only when the owning thread pumps
    `run_pending()`, the way a GUI main loop drains its event queue.
    """

    def __init__(self) -> None:
        self._tasks: "queue.Queue[Task]" = queue.Queue()

    def post(self, task: Task) -> None:
        self._tasks.put(task)

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """Run queued tasks; wait up to `timeout` for the first one. Returns the count run."""
        ran = 0
        try:
            task = self._tasks.get(timeout=timeout) if timeout else self._tasks.get_nowait()
        except queue.Empty:
            return 0
        while True:
            task()
            ran += 1
            try:
                task = self._tasks.get_nowait()
            except queue.Empty:
                return ran

    def run_until_complete(self, future: Future, timeout: float = 5.0):
        """Pump tasks until `future` is done, then return its result."""
        deadline = time.monotonic() + timeout
        while not future.done():
            if time.monotonic() > deadline:
                raise TimeoutError("future did not complete in time")
            self.run_pending(timeout=0.01)
        return future.result()


class LiveValue(Generic[T]):
    def __init__(self, initial: T, dispatcher=None) -> None:
        self._value = initial
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._observers: List[Callable[[T], None]] = []
        self._lock = threading.Lock()
        self._pending: Optional[tuple] = None

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, observer: Callable[[T], None]) -> Callable[[], None]:
        """Register `observer`, call it with the current value, return an unsubscribe callable."""
        self._observers.append(observer)
        observer(self._value)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def set_value(self, value: T) -> None:
        """Set and notify; call on the UI context only."""
        self._value = value
        for observer in list(self._observers):
            try:
                observer(value)
            except Exception:
                # one broken observer must not starve the others
                logger.exception("observer %r failed", observer)

    def post_value(self, value: T) -> None:
        """Thread-safe set: delivery happens later on the dispatcher."""
        with self._lock:
            already_scheduled = self._pending is not None
            self._pending = (value,)
        if not already_scheduled:
            self._dispatcher.post(self._deliver_pending)

    def _deliver_pending(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, None
        if pending is not None:
            self.set_value(pending[0])
